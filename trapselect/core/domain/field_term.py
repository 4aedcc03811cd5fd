# -*- coding: utf-8 -*-
"""
Field Term Model.

One FieldTerm per queryable catalog field: the comparison operator the user
picked, the value to compare against and whether the term is in use.
The operator is guaranteed to be legal for the field's control kind at all
times; value edits go through a per-kind coercion step.

This is a PURE PYTHON module with NO Qt dependencies.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .exceptions import (
    OperatorNotAllowedError,
    UnknownControlKindError,
    ValueInputError,
)


DATABASE_DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'
DISPLAY_DATETIME_FORMAT = '%d-%b-%Y %H:%M:%S'

_DATETIME_INPUT_FORMATS = (
    DISPLAY_DATETIME_FORMAT,
    DATABASE_DATETIME_FORMAT,
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%d',
    '%d-%b-%Y',
)

_COUNTER_INPUT = re.compile(r'^[0-9.\-]*$')
_UTC_OFFSET_INPUT = re.compile(r'^([+-])?(\d{1,2}):(\d{2})$')

FLAG_TRUE = 'true'
FLAG_FALSE = 'false'
_FLAG_TRUE_INPUTS = frozenset({'true', '1', 'yes', 'on', 'checked'})
_FLAG_FALSE_INPUTS = frozenset({'false', '0', 'no', 'off', 'unchecked', ''})

# Catalog columns that exist in the data table but are never offered for selection
UNSELECTABLE_FIELD_IDS = frozenset({'Date', 'Time', 'Folder'})


class ControlKind(Enum):
    """Kind of data-entry control behind a catalog field.

    The set is closed: every dispatch over control kinds handles each member
    explicitly and raises UnknownControlKindError otherwise.
    """
    COUNTER = "Counter"
    NOTE = "Note"
    FIXED_CHOICE = "FixedChoice"
    FLAG = "Flag"
    DATE_TIME = "DateTime"
    IMAGE_QUALITY = "ImageQuality"
    DELETE_FLAG = "DeleteFlag"
    RELATIVE_PATH = "RelativePath"
    UTC_OFFSET = "UtcOffset"
    FILE = "File"

    @classmethod
    def from_string(cls, value: str) -> 'ControlKind':
        """Create ControlKind from its catalog name (case-insensitive).

        Raises:
            UnknownControlKindError: If value names no known control kind
        """
        if isinstance(value, cls):
            return value
        for kind in cls:
            if str(value).lower() in (kind.value.lower(), kind.name.lower()):
                return kind
        raise UnknownControlKindError(
            f"Unknown control kind: {value}. Valid kinds: {[k.value for k in cls]}"
        )


class SearchOperator(Enum):
    """Comparison operators, valued by their display symbol."""
    EQUAL = "="
    NOT_EQUAL = "≠"
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_THAN_OR_EQUAL = "≤"
    GREATER_THAN_OR_EQUAL = "≥"
    GLOB = "Glob"

    @property
    def symbol(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: Union[str, 'SearchOperator']) -> 'SearchOperator':
        """Create SearchOperator from a symbol, ASCII alias or member name.

        Raises:
            ValueError: If value is not a recognised operator
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for op in cls:
            if text == op.value or text.upper() == op.name:
                return op
        alias = _OPERATOR_ALIASES.get(text.upper())
        if alias is not None:
            return alias
        raise ValueError(f"Unknown search operator: {value}. Valid operators: {[o.value for o in cls]}")


_OPERATOR_ALIASES = {
    '==': SearchOperator.EQUAL,
    '!=': SearchOperator.NOT_EQUAL,
    '<>': SearchOperator.NOT_EQUAL,
    '<=': SearchOperator.LESS_THAN_OR_EQUAL,
    '>=': SearchOperator.GREATER_THAN_OR_EQUAL,
    'GLOB': SearchOperator.GLOB,
}


COMPARISON_OPERATORS: Tuple[SearchOperator, ...] = (
    SearchOperator.EQUAL,
    SearchOperator.NOT_EQUAL,
    SearchOperator.LESS_THAN,
    SearchOperator.GREATER_THAN,
    SearchOperator.LESS_THAN_OR_EQUAL,
    SearchOperator.GREATER_THAN_OR_EQUAL,
)
EQUALITY_OPERATORS: Tuple[SearchOperator, ...] = (
    SearchOperator.EQUAL,
    SearchOperator.NOT_EQUAL,
)
TEXT_OPERATORS: Tuple[SearchOperator, ...] = COMPARISON_OPERATORS + (SearchOperator.GLOB,)
SUBTREE_OPERATORS: Tuple[SearchOperator, ...] = (SearchOperator.EQUAL,)


def legal_operators(kind: ControlKind, subtree_mode: bool = False) -> Tuple[SearchOperator, ...]:
    """
    Return the operators a term of the given control kind may use.

    Args:
        kind: Control kind of the field
        subtree_mode: For RelativePath only: True when '=' means
            "this folder or any subfolder"

    Returns:
        Tuple of legal operators, in menu order

    Raises:
        UnknownControlKindError: If kind is not a ControlKind member
    """
    if kind in (ControlKind.COUNTER, ControlKind.DATE_TIME,
                ControlKind.IMAGE_QUALITY, ControlKind.FIXED_CHOICE):
        return COMPARISON_OPERATORS
    if kind in (ControlKind.DELETE_FLAG, ControlKind.FLAG):
        return EQUALITY_OPERATORS
    if kind is ControlKind.RELATIVE_PATH:
        return SUBTREE_OPERATORS if subtree_mode else COMPARISON_OPERATORS
    if kind in (ControlKind.NOTE, ControlKind.FILE, ControlKind.UTC_OFFSET):
        return TEXT_OPERATORS
    raise UnknownControlKindError(f"No operator table for control kind: {kind!r}")


class DateBound(Enum):
    """Which end of the DateTime range a DateTime term constrains."""
    START = "start"
    END = "end"


def parse_datetime_input(text: Union[str, datetime, date]) -> Optional[datetime]:
    """Parse a datetime typed by the user or stored in the catalog. None if unparseable."""
    if isinstance(text, datetime):
        return text.replace(microsecond=0)
    if isinstance(text, date):
        return datetime(text.year, text.month, text.day)
    value = str(text).strip()
    for fmt in _DATETIME_INPUT_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def parse_utc_offset_input(text: Union[str, float, int]) -> Optional[float]:
    """Parse '+HH:MM', '-HH:MM' or decimal hours into decimal hours. None if unparseable."""
    if isinstance(text, (int, float)):
        hours = float(text)
    else:
        value = str(text).strip()
        match = _UTC_OFFSET_INPUT.match(value)
        if match:
            sign, hh, mm = match.groups()
            if int(mm) >= 60:
                return None
            hours = int(hh) + int(mm) / 60.0
            if sign == '-':
                hours = -hours
        else:
            try:
                hours = float(value)
            except ValueError:
                return None
    if hours < -14.0 or hours > 14.0:
        return None
    return hours


def format_utc_offset(hours: float) -> str:
    return f"{hours:.2f}"


@dataclass(frozen=True)
class FieldDefinition:
    """A catalog field as described by the image-set template.

    Attributes:
        field_id: Column name in the file table
        label: Human-readable label
        control_kind: ControlKind (or its catalog name)
        default_value: Template default for the field
        choices: Fixed choices for FixedChoice fields
    """
    field_id: str
    label: str
    control_kind: Union[ControlKind, str]
    default_value: str = ""
    choices: Tuple[str, ...] = field(default_factory=tuple)


class FieldTerm:
    """
    A single per-field constraint: ``<field> <operator> <value>``.

    ``enabled`` says whether the term takes part in the selection.
    Assigning an operator that is illegal for the control kind raises
    OperatorNotAllowedError and leaves the term unchanged.

    A RelativePath term in subtree mode only admits '=', which matches the
    folder and all of its subfolders. A locked term cannot be disabled.
    """

    def __init__(
        self,
        field_id: str,
        label: str,
        control_kind: ControlKind,
        operator: Union[SearchOperator, str] = SearchOperator.EQUAL,
        value: str = "",
        enabled: bool = False,
        choices: Iterable[str] = (),
        bound: Optional[DateBound] = None,
        subtree_mode: bool = False,
    ):
        self.field_id = field_id
        self.label = label
        self.control_kind = ControlKind.from_string(control_kind)
        self.value = value
        self.enabled = enabled
        self.choices: Tuple[str, ...] = tuple(choices)
        self.bound = bound
        self.locked = False
        self._subtree_mode = subtree_mode and self.control_kind is ControlKind.RELATIVE_PATH
        self._operator = SearchOperator.EQUAL
        self.set_operator(operator)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def key(self) -> str:
        """Unique key of the term within a session (DateTime terms carry their bound)."""
        if self.bound is None:
            return self.field_id
        return f"{self.field_id}:{self.bound.value}"

    # ------------------------------------------------------------------
    # Operator
    # ------------------------------------------------------------------

    @property
    def operator(self) -> SearchOperator:
        return self._operator

    @operator.setter
    def operator(self, value: Union[SearchOperator, str]):
        self.set_operator(value)

    @property
    def legal_operators(self) -> Tuple[SearchOperator, ...]:
        return legal_operators(self.control_kind, self._subtree_mode)

    def check_operator(self, value: Union[SearchOperator, str]) -> SearchOperator:
        """
        Parse an operator and check it is legal for this term, without assigning it.

        Raises:
            OperatorNotAllowedError: If the operator is unknown or not legal here
        """
        try:
            op = SearchOperator.from_string(value)
        except ValueError:
            raise OperatorNotAllowedError(self.control_kind, value, self.field_id)
        if op not in self.legal_operators:
            raise OperatorNotAllowedError(self.control_kind, op, self.field_id)
        return op

    def set_operator(self, value: Union[SearchOperator, str]) -> None:
        """
        Assign the comparison operator.

        Raises:
            OperatorNotAllowedError: If the operator is not legal for this term
        """
        self._operator = self.check_operator(value)

    @property
    def subtree_mode(self) -> bool:
        return self._subtree_mode

    def set_subtree_mode(self, enabled: bool) -> None:
        """Switch a RelativePath term between flat and subtree matching."""
        if self.control_kind is not ControlKind.RELATIVE_PATH:
            return
        self._subtree_mode = bool(enabled)
        if self._operator not in self.legal_operators:
            self._operator = SearchOperator.EQUAL

    # ------------------------------------------------------------------
    # Enablement
    # ------------------------------------------------------------------

    def set_enabled(self, enabled: bool) -> bool:
        """Set the use flag. Returns False when a locked term refuses to be disabled."""
        if self.locked and not enabled:
            return False
        self.enabled = bool(enabled)
        return True

    # ------------------------------------------------------------------
    # Value
    # ------------------------------------------------------------------

    def set_value_from_input(self, text: Any) -> bool:
        """
        Coerce user input for this term's control kind and store it.

        Returns:
            True if the value was accepted, False if the input was silently
            ignored (unparseable date/time or UTC offset)

        Raises:
            ValueInputError: If the input is refused outright (illegal
                counter characters, unknown flag word, value outside a
                fixed choice list). The previous value is kept.
        """
        kind = self.control_kind
        if kind is ControlKind.COUNTER:
            value = str(text).strip()
            if not _COUNTER_INPUT.match(value):
                raise ValueInputError(f"Counter '{self.label}' only accepts digits, '.' and '-': {text!r}")
            self.value = value
            return True
        if kind in (ControlKind.FLAG, ControlKind.DELETE_FLAG):
            self.value = coerce_flag(text, self.label)
            return True
        if kind is ControlKind.DATE_TIME:
            parsed = parse_datetime_input(text)
            if parsed is None:
                return False
            self.value = parsed.strftime(DATABASE_DATETIME_FORMAT)
            return True
        if kind is ControlKind.UTC_OFFSET:
            hours = parse_utc_offset_input(text)
            if hours is None:
                return False
            self.value = format_utc_offset(hours)
            return True
        if kind is ControlKind.FIXED_CHOICE:
            value = str(text)
            if self.choices and value not in self.choices:
                raise ValueInputError(f"'{value}' is not a choice of '{self.label}'")
            self.value = value
            return True
        if kind in (ControlKind.NOTE, ControlKind.FILE,
                    ControlKind.IMAGE_QUALITY, ControlKind.RELATIVE_PATH):
            self.value = "" if text is None else str(text)
            return True
        raise UnknownControlKindError(f"No value coercion for control kind: {kind!r}")

    def value_as_datetime(self) -> Optional[datetime]:
        if self.control_kind is not ControlKind.DATE_TIME:
            return None
        return parse_datetime_input(self.value)

    def display_value(self) -> str:
        """Value as shown in the selection dialog."""
        if self.control_kind is ControlKind.DATE_TIME:
            parsed = self.value_as_datetime()
            if parsed is not None:
                return parsed.strftime(DISPLAY_DATETIME_FORMAT)
        return self.value

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'operator': self._operator.value,
            'value': self.value,
            'enabled': self.enabled,
        }

    def __eq__(self, other):
        if not isinstance(other, FieldTerm):
            return NotImplemented
        return (self.key == other.key and self.control_kind == other.control_kind
                and self.to_dict() == other.to_dict()
                and self._subtree_mode == other._subtree_mode)

    def __repr__(self):
        state = 'on' if self.enabled else 'off'
        return f"FieldTerm({self.key} {self._operator.value} {self.value!r} [{state}])"

    def to_display_string(self) -> str:
        value = self.display_value()
        if self.control_kind is ControlKind.RELATIVE_PATH and self._subtree_mode:
            return f"{self.label} in folder '{value}' (and subfolders)"
        return f"{self.label} {self._operator.value} '{value}'"


def coerce_flag(text: Any, label: str = "flag") -> str:
    """Coerce a flag input to the canonical 'true' / 'false'."""
    if isinstance(text, bool):
        return FLAG_TRUE if text else FLAG_FALSE
    value = str(text).strip().lower()
    if value in _FLAG_TRUE_INPUTS:
        return FLAG_TRUE
    if value in _FLAG_FALSE_INPUTS:
        return FLAG_FALSE
    raise ValueInputError(f"'{text}' is not a valid value for {label}")


def build_field_terms(
    definitions: Iterable[FieldDefinition],
    default_datetime: Optional[datetime] = None,
    default_utc_offset: Optional[float] = None,
) -> List[FieldTerm]:
    """
    Create the session's search terms from the catalog field definitions.

    Rules:
    - Date, Time and Folder columns are skipped.
    - Counters default to '> 0'.
    - DateTime gets two terms: a start bound (>=) and an end bound (<=).
    - Flags default to 'false'.
    - Fixed choice lists get an empty entry prepended so that empty values
      can be selected.
    - Every term starts disabled.

    Args:
        definitions: Catalog field definitions, in display order
        default_datetime: Initial value of both DateTime terms
        default_utc_offset: Initial value of the UtcOffset term (hours)

    Returns:
        List of FieldTerm in display order
    """
    terms: List[FieldTerm] = []
    when = default_datetime or datetime.now().replace(microsecond=0)
    for definition in definitions:
        if definition.field_id in UNSELECTABLE_FIELD_IDS:
            continue
        kind = ControlKind.from_string(definition.control_kind)
        choices = tuple(definition.choices)
        if kind is ControlKind.FIXED_CHOICE and (not choices or choices[0] != ""):
            choices = ("",) + choices

        if kind is ControlKind.DATE_TIME:
            value = when.strftime(DATABASE_DATETIME_FORMAT)
            terms.append(FieldTerm(definition.field_id, definition.label, kind,
                                   SearchOperator.GREATER_THAN_OR_EQUAL, value,
                                   bound=DateBound.START))
            terms.append(FieldTerm(definition.field_id, definition.label, kind,
                                   SearchOperator.LESS_THAN_OR_EQUAL, value,
                                   bound=DateBound.END))
            continue

        operator = SearchOperator.EQUAL
        value = definition.default_value or ""
        if kind is ControlKind.COUNTER:
            operator = SearchOperator.GREATER_THAN
            value = "0"
        elif kind in (ControlKind.FLAG, ControlKind.DELETE_FLAG):
            value = coerce_flag(value or FLAG_FALSE, definition.label)
        elif kind is ControlKind.UTC_OFFSET:
            hours = default_utc_offset if default_utc_offset is not None else parse_utc_offset_input(value or "0")
            value = format_utc_offset(hours or 0.0)
        terms.append(FieldTerm(definition.field_id, definition.label, kind,
                               operator, value, choices=choices))
    return terms
