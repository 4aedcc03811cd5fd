# -*- coding: utf-8 -*-
"""
Recognition Criteria Model.

Selection settings driven by machine recognition data: which detection or
classification category to match, the confidence window, and the two
override modes (rank by confidence, show files without recognition data).

The confidence window is edited from two mirrored controls (a range slider
and a pair of spin boxes). Edits are funnelled through a single-writer
token so that refreshing the mirror control never loops back into the model.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .exceptions import UnknownCategoryError


DEFAULT_CONFIDENCE_RANGE: Tuple[float, float] = (0.8, 1.0)
NONE_FOUND_CONFIDENCE_RANGE: Tuple[float, float] = (1.0, 1.0)
DEFAULT_DETECTION_FLOOR = 0.01


class RecognitionType(Enum):
    """Which recognition table a category belongs to."""
    NONE = "none"
    DETECTION = "detection"
    CLASSIFICATION = "classification"

    @classmethod
    def from_string(cls, value: str) -> 'RecognitionType':
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown recognition type: {value}. Valid types: {[t.value for t in cls]}")


class CategorySentinel(Enum):
    """Category choices that are not real recognition categories."""
    ALL = "All"
    NONE_FOUND = "Empty"

    @property
    def label(self) -> str:
        return self.value


Category = Union[str, CategorySentinel]


def parse_category(value: Category) -> Category:
    """Map the 'All' / 'Empty' labels onto their sentinels; other labels pass through."""
    if isinstance(value, CategorySentinel):
        return value
    for sentinel in CategorySentinel:
        if value == sentinel.value:
            return sentinel
    return str(value)


def category_label(category: Category) -> str:
    if isinstance(category, CategorySentinel):
        return category.label
    return category


class EditOrigin(Enum):
    """The control an edit of the confidence window came from."""
    SLIDER = "slider"
    SPINNER = "spinner"
    PROGRAM = "program"


_MIRRORED_CONTROLS: FrozenSet[EditOrigin] = frozenset({EditOrigin.SLIDER, EditOrigin.SPINNER})


def round2(value: float) -> float:
    """Round a confidence to two decimals and clamp it into [0, 1]."""
    return min(1.0, max(0.0, round(float(value), 2)))


@dataclass(frozen=True)
class CategoryCatalog:
    """Recognition categories known to the store, keyed by category id.

    Label lookup tries detection categories first, then classification
    categories.
    """
    detection: Mapping[str, str] = field(default_factory=dict)
    classification: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_pairs(cls, detection: Iterable[Tuple[str, str]],
                   classification: Iterable[Tuple[str, str]]) -> 'CategoryCatalog':
        """Build from the store's (label, category_id) pairs."""
        return cls(
            detection={category_id: label for label, category_id in detection},
            classification={category_id: label for label, category_id in classification},
        )

    def resolve(self, label: str) -> Tuple[RecognitionType, str]:
        """
        Resolve a category label to (recognition type, category id).

        Raises:
            UnknownCategoryError: If no category carries that label
        """
        for category_id, category_name in self.detection.items():
            if category_name == label:
                return RecognitionType.DETECTION, category_id
        for category_id, category_name in self.classification.items():
            if category_name == label:
                return RecognitionType.CLASSIFICATION, category_id
        raise UnknownCategoryError(f"Unknown recognition category: {label}")

    def labels(self) -> List[str]:
        """Choice list for the category selector: All, Empty, detections, classifications."""
        result = [CategorySentinel.ALL.label, CategorySentinel.NONE_FOUND.label]
        for name in list(self.detection.values()) + list(self.classification.values()):
            if name not in result:
                result.append(name)
        return result

    @property
    def is_empty(self) -> bool:
        return not self.detection and not self.classification


@dataclass
class RecognitionCriteria:
    """Recognition part of the selection.

    ``confidence_low <= confidence_high`` always holds: moving one bound past
    the other drags the other along.
    """
    recognition_type: RecognitionType = RecognitionType.DETECTION
    category: Category = CategorySentinel.ALL
    confidence_low: float = DEFAULT_CONFIDENCE_RANGE[0]
    confidence_high: float = DEFAULT_CONFIDENCE_RANGE[1]
    use_recognition: bool = False
    rank_by_confidence: bool = False
    show_missing_recognition: bool = False
    detection_floor: float = field(default=DEFAULT_DETECTION_FLOOR, compare=False)
    default_range: Tuple[float, float] = field(default=DEFAULT_CONFIDENCE_RANGE, compare=False)
    _writer: Optional[EditOrigin] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        self.category = parse_category(self.category)
        self.confidence_low = round2(self.confidence_low)
        self.confidence_high = round2(self.confidence_high)
        if self.confidence_low > self.confidence_high:
            self.confidence_high = self.confidence_low

    # ------------------------------------------------------------------
    # Category
    # ------------------------------------------------------------------

    @property
    def is_none_found(self) -> bool:
        return self.category is CategorySentinel.NONE_FOUND

    @property
    def minimum_confidence(self) -> float:
        """Lowest value the confidence controls accept for the current category."""
        return 0.0 if self.is_none_found else round2(self.detection_floor)

    def set_category(self, category: Category,
                     recognition_type: Optional[RecognitionType] = None) -> None:
        """Select a category and reset the confidence window to its default."""
        self.category = parse_category(category)
        if recognition_type is not None:
            self.recognition_type = recognition_type
        elif isinstance(self.category, CategorySentinel):
            self.recognition_type = RecognitionType.DETECTION
        self.reset_confidence_range()

    def reset_confidence_range(self) -> None:
        low, high = NONE_FOUND_CONFIDENCE_RANGE if self.is_none_found else self.default_range
        self.confidence_low = low
        self.confidence_high = high

    # ------------------------------------------------------------------
    # Confidence window
    # ------------------------------------------------------------------

    @contextmanager
    def writer(self, origin: EditOrigin) -> Iterator[bool]:
        """
        Hold the write token for one edit cycle.

        Yields True if ``origin`` owns the cycle. While another control owns
        it, edits from ``origin`` are echoes of the mirror refresh and are
        ignored by set_confidence_low / set_confidence_high.
        """
        if self._writer is not None:
            yield self._writer is origin
            return
        self._writer = origin
        try:
            yield True
        finally:
            self._writer = None

    def _accepts(self, origin: EditOrigin) -> bool:
        return self._writer is None or self._writer is origin

    def set_confidence_low(self, value: float,
                           origin: EditOrigin = EditOrigin.PROGRAM) -> FrozenSet[EditOrigin]:
        """
        Move the lower bound; the upper bound follows if it would be passed.

        Returns:
            Controls that must be refreshed to mirror the new window
            (empty when the edit was an ignored echo)
        """
        if not self._accepts(origin):
            return frozenset()
        low = max(self.minimum_confidence, round2(value))
        self.confidence_low = low
        if low > self.confidence_high:
            self.confidence_high = low
        return _MIRRORED_CONTROLS - {origin}

    def set_confidence_high(self, value: float,
                            origin: EditOrigin = EditOrigin.PROGRAM) -> FrozenSet[EditOrigin]:
        """Move the upper bound; the lower bound follows if it would be passed."""
        if not self._accepts(origin):
            return frozenset()
        high = max(self.minimum_confidence, round2(value))
        self.confidence_high = high
        if high < self.confidence_low:
            self.confidence_low = high
        return _MIRRORED_CONTROLS - {origin}

    # ------------------------------------------------------------------
    # Uses
    # ------------------------------------------------------------------

    def clear_uses(self) -> None:
        self.use_recognition = False
        self.rank_by_confidence = False
        self.show_missing_recognition = False

    def to_display_string(self) -> str:
        if self.show_missing_recognition:
            return "Files without recognition data"
        if not self.use_recognition:
            return "Recognition not used"
        label = category_label(self.category)
        if self.is_none_found:
            return f"{label}: best confidence below {self.detection_floor:.2f}"
        if self.rank_by_confidence:
            return f"{label}: ranked by confidence"
        return f"{label}: confidence {self.confidence_low:.2f}-{self.confidence_high:.2f}"

