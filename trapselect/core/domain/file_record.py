# -*- coding: utf-8 -*-
"""
File Record Value Objects.

A catalog row (one image or video) together with the recognition records
attached to it. Used by in-memory stores and by the predicate evaluator.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .recognition_criteria import RecognitionType


@dataclass(frozen=True)
class RecognitionRecord:
    """One detection or classification attached to a file."""
    category_id: str
    confidence: float


@dataclass(frozen=True)
class FileRecord:
    """A catalog row: field values plus its recognition records."""
    values: Mapping[str, Any]
    detections: Tuple[RecognitionRecord, ...] = field(default_factory=tuple)
    classifications: Tuple[RecognitionRecord, ...] = field(default_factory=tuple)

    def get(self, field_id: str, default: Any = None) -> Any:
        return self.values.get(field_id, default)

    @property
    def has_recognition(self) -> bool:
        return bool(self.detections)

    def records_of(self, recognition_type: RecognitionType) -> Tuple[RecognitionRecord, ...]:
        if recognition_type is RecognitionType.CLASSIFICATION:
            return self.classifications
        if recognition_type is RecognitionType.DETECTION:
            return self.detections
        return ()

    def max_confidence(self, recognition_type: RecognitionType = RecognitionType.DETECTION,
                       category_id: Optional[str] = None) -> Optional[float]:
        """Best confidence among records of a type (and category, if given). None if none."""
        confidences = [
            record.confidence for record in self.records_of(recognition_type)
            if category_id is None or record.category_id == category_id
        ]
        return max(confidences) if confidences else None


def file_record_from_dict(data: Dict[str, Any]) -> FileRecord:
    """
    Build a FileRecord from a plain dict.

    ``detections`` and ``classifications`` may hold (category_id, confidence)
    pairs or dicts with those keys; every other key is a field value.
    """
    values = {k: v for k, v in data.items() if k not in ('detections', 'classifications')}

    def _records(items) -> Tuple[RecognitionRecord, ...]:
        records = []
        for item in items or ():
            if isinstance(item, dict):
                records.append(RecognitionRecord(str(item['category_id']), float(item['confidence'])))
            else:
                category_id, confidence = item
                records.append(RecognitionRecord(str(category_id), float(confidence)))
        return tuple(records)

    return FileRecord(
        values=values,
        detections=_records(data.get('detections')),
        classifications=_records(data.get('classifications')),
    )
