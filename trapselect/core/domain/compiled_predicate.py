# -*- coding: utf-8 -*-
"""
Compiled Predicate Value Objects.

Immutable output of the predicate compiler, handed to the file store for
counting and fetching. A new CompiledPredicate is produced on every
recompile; instances are never mutated.

Structure:
- Field clauses are organised in groups. A group is AND-ed internally; the
  groups are joined with the session combinator. Every group holds a single
  clause except the DateTime range, which is one group of two clauses.
- The selection mode is either StandardSelection (field groups plus an
  optional recognition clause) or MissingRecognitionOnly. The two cannot be
  mixed. The recognition clause is AND-ed with the field groups, except a
  specific-category confidence range under OR: the category joins the
  groups with OR and the confidence window still applies.
- An optional OrderingDirective ranks results by confidence.
- An optional EpisodeDirective asks the store to expand matches to whole
  episodes.

This is a PURE PYTHON module with NO Qt dependencies.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from .exceptions import ConfigurationError
from .field_term import ControlKind, SearchOperator
from .recognition_criteria import RecognitionType


class Combinator(Enum):
    """How field clause groups are joined."""
    AND = "AND"
    OR = "OR"

    @classmethod
    def from_string(cls, value: Union[str, 'Combinator']) -> 'Combinator':
        """
        Raises:
            ConfigurationError: If value is neither AND nor OR
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ConfigurationError(f"Unsupported combinator: {value}. Valid combinators: AND, OR")


# ──────────────────────────────────────────────
# Field clauses
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class FieldClause:
    """``<field> <operator> <value>`` with its matching rules resolved.

    Attributes:
        match_empty: '=' against an empty value; matches NULL or empty text
        case_insensitive: Compare ignoring case (flags)
        subtree: RelativePath '=' matches the folder and every subfolder
    """
    field_id: str
    control_kind: ControlKind
    operator: SearchOperator
    value: str
    match_empty: bool = False
    case_insensitive: bool = False
    subtree: bool = False

    def to_display_string(self) -> str:
        if self.match_empty:
            return f"{self.field_id} is empty"
        if self.subtree:
            return f"{self.field_id} in '{self.value}' or its subfolders"
        return f"{self.field_id} {self.operator.value} {self.value}"


@dataclass(frozen=True)
class ClauseGroup:
    """Clauses AND-ed together regardless of the session combinator."""
    clauses: Tuple[FieldClause, ...]

    def to_display_string(self) -> str:
        text = " AND ".join(c.to_display_string() for c in self.clauses)
        return f"({text})" if len(self.clauses) > 1 else text


# ──────────────────────────────────────────────
# Recognition clauses
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class ConfidenceRangeClause:
    """Best confidence for the category lies in [low, high].

    ``category_id`` None means any category.
    """
    recognition_type: RecognitionType
    category_id: Optional[str]
    category_label: str
    low: float
    high: float

    def to_display_string(self) -> str:
        return f"{self.category_label} confidence between {self.low:.2f} and {self.high:.2f}"


@dataclass(frozen=True)
class BelowFloorClause:
    """Best detection confidence, across all categories, is below the floor."""
    floor: float

    def to_display_string(self) -> str:
        return f"no detection with confidence of {self.floor:.2f} or more"


@dataclass(frozen=True)
class CategoryClause:
    """File has a recognition record of the category (any category when None)."""
    recognition_type: RecognitionType
    category_id: Optional[str]
    category_label: str

    def to_display_string(self) -> str:
        if self.category_id is None:
            return "has recognition data"
        return f"recognised as {self.category_label}"


RecognitionClause = Union[ConfidenceRangeClause, BelowFloorClause, CategoryClause]


@dataclass(frozen=True)
class MissingRecognitionClause:
    """File has no recognition record at all."""

    def to_display_string(self) -> str:
        return "files without recognition data"


# ──────────────────────────────────────────────
# Selection modes
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class StandardSelection:
    """Field clause groups joined by ``combinator``, plus ``recognition``.

    ``recognition_join`` is OR only for a ConfidenceRangeClause on a specific
    category: a file then matches when the groups or the category match, and
    its best confidence (over all its records when the groups matched, over
    the category otherwise) lies in the window.
    """
    groups: Tuple[ClauseGroup, ...] = field(default_factory=tuple)
    combinator: Combinator = Combinator.AND
    recognition: Optional[RecognitionClause] = None
    recognition_join: Combinator = Combinator.AND

    def to_display_string(self) -> str:
        joiner = f" {self.combinator.value} "
        field_text = joiner.join(g.to_display_string() for g in self.groups)
        if self.recognition is None:
            return field_text or "all files"
        recognition_text = self.recognition.to_display_string()
        if not field_text:
            return recognition_text
        if self.recognition_join is Combinator.OR:
            clause = self.recognition
            return (f"({field_text} OR recognised as {clause.category_label}) "
                    f"AND best confidence between {clause.low:.2f} and {clause.high:.2f}")
        if len(self.groups) > 1:
            field_text = f"({field_text})"
        return f"{field_text} AND {recognition_text}"


@dataclass(frozen=True)
class MissingRecognitionOnly:
    """Only files lacking recognition data; field clauses do not apply."""
    clause: MissingRecognitionClause = field(default_factory=MissingRecognitionClause)

    def to_display_string(self) -> str:
        return self.clause.to_display_string()


SelectionMode = Union[StandardSelection, MissingRecognitionOnly]


@dataclass(frozen=True)
class OrderingDirective:
    """Order results by best confidence, within each folder."""
    recognition_type: RecognitionType
    category_id: Optional[str] = None
    descending: bool = True
    partition_field: Optional[str] = 'RelativePath'

    def to_display_string(self) -> str:
        direction = "descending" if self.descending else "ascending"
        return f"ranked by confidence ({direction})"


@dataclass(frozen=True)
class EpisodeDirective:
    """Expand every match to the files of its episode."""
    episode_field_id: str

    def to_display_string(self) -> str:
        return f"with all files of each matching episode ({self.episode_field_id})"


@dataclass(frozen=True)
class CompiledPredicate:
    """Immutable selection handed to the file store."""
    mode: SelectionMode = field(default_factory=StandardSelection)
    ordering: Optional[OrderingDirective] = None
    episode: Optional[EpisodeDirective] = None

    @property
    def is_missing_recognition(self) -> bool:
        return isinstance(self.mode, MissingRecognitionOnly)

    @property
    def combinator(self) -> Combinator:
        if isinstance(self.mode, StandardSelection):
            return self.mode.combinator
        return Combinator.AND

    @property
    def groups(self) -> Tuple[ClauseGroup, ...]:
        if isinstance(self.mode, StandardSelection):
            return self.mode.groups
        return ()

    @property
    def recognition(self) -> Optional[RecognitionClause]:
        if isinstance(self.mode, StandardSelection):
            return self.mode.recognition
        return None

    @property
    def recognition_join(self) -> Combinator:
        if isinstance(self.mode, StandardSelection):
            return self.mode.recognition_join
        return Combinator.AND

    @property
    def field_clauses(self) -> Tuple[FieldClause, ...]:
        return tuple(clause for group in self.groups for clause in group.clauses)

    def joins(self) -> List[Combinator]:
        """Effective combinator between each adjacent pair of field clauses."""
        result: List[Combinator] = []
        for index, group in enumerate(self.groups):
            if index > 0:
                result.append(self.combinator)
            result.extend([Combinator.AND] * (len(group.clauses) - 1))
        return result

    def to_display_string(self) -> str:
        parts = [self.mode.to_display_string()]
        if self.ordering is not None:
            parts.append(self.ordering.to_display_string())
        if self.episode is not None:
            parts.append(self.episode.to_display_string())
        return ", ".join(parts)
