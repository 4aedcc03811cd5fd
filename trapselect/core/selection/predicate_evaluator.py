# -*- coding: utf-8 -*-
"""
Predicate Evaluator.

Evaluates a CompiledPredicate against FileRecords in Python. This is the
reference semantics used by the in-memory store and by tests; database
backed stores translate the same clauses into their own query language.

Matching rules:
- NULL never satisfies a comparison, except '=' with an empty value, which
  matches NULL or empty text
- Flags compare case-insensitively
- Counters compare numerically when both sides are numbers
- DateTime values compare as datetimes
- Glob is a case-sensitive shell pattern
- RelativePath in subtree mode matches the folder or any subfolder
"""

import fnmatch
import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ..domain.compiled_predicate import (
    BelowFloorClause,
    CategoryClause,
    Combinator,
    CompiledPredicate,
    ConfidenceRangeClause,
    FieldClause,
    OrderingDirective,
    RecognitionClause,
)
from ..domain.field_term import ControlKind, SearchOperator, parse_datetime_input
from ..domain.file_record import FileRecord
from ..domain.recognition_criteria import RecognitionType
from .clause_combiner import combine_results
from .operator_registry import get_comparison
from .predicate_compiler import normalize_relative_path

logger = logging.getLogger('TrapSelect.Core.Selection.Evaluator')


def _is_empty(raw: Any) -> bool:
    return raw is None or str(raw).strip() == ""


def _comparable(clause: FieldClause, raw: Any) -> Tuple[Any, Any]:
    """Convert the stored and wanted values to a comparable pair."""
    left, right = str(raw).strip(), clause.value
    if clause.case_insensitive:
        return left.lower(), right.lower()
    if clause.control_kind in (ControlKind.COUNTER, ControlKind.UTC_OFFSET):
        try:
            return float(left), float(right)
        except ValueError:
            return left, right
    if clause.control_kind is ControlKind.DATE_TIME:
        left_dt, right_dt = parse_datetime_input(left), parse_datetime_input(right)
        if left_dt is not None and right_dt is not None:
            return left_dt, right_dt
    return left, right


def _in_subtree(raw: Any, folder: str) -> bool:
    if not folder:
        return True
    if raw is None:
        return False
    path = normalize_relative_path(str(raw))
    return path == folder or path.startswith(folder + '\\')


def evaluate_field_clause(clause: FieldClause, record: FileRecord) -> bool:
    """True if the record satisfies a single field clause."""
    raw = record.get(clause.field_id)
    if clause.match_empty:
        return _is_empty(raw)
    if clause.subtree:
        return _in_subtree(raw, normalize_relative_path(clause.value))
    if raw is None:
        return False
    if clause.operator is SearchOperator.GLOB:
        return fnmatch.fnmatchcase(str(raw), clause.value)
    left, right = _comparable(clause, raw)
    try:
        return bool(get_comparison(clause.operator)(left, right))
    except TypeError:
        # Mixed types after a failed conversion compare as text
        return bool(get_comparison(clause.operator)(str(left), str(right)))


def evaluate_recognition_clause(clause: Optional[RecognitionClause], record: FileRecord) -> bool:
    """True if the record satisfies the recognition clause (or there is none)."""
    if clause is None:
        return True
    if isinstance(clause, BelowFloorClause):
        best = record.max_confidence(RecognitionType.DETECTION)
        return best is not None and best < clause.floor
    if isinstance(clause, CategoryClause):
        return record.max_confidence(clause.recognition_type, clause.category_id) is not None
    if isinstance(clause, ConfidenceRangeClause):
        best = record.max_confidence(clause.recognition_type, clause.category_id)
        if best is None:
            return False
        return clause.low <= best <= clause.high
    raise TypeError(f"Unsupported recognition clause: {clause!r}")


def evaluate_joined_range(clause: ConfidenceRangeClause, record: FileRecord, fields_matched: bool) -> bool:
    """
    Category range OR-ed with the field groups.

    A file whose fields matched qualifies with all of its records of the
    recognition type; otherwise only its records of the category count.
    """
    category_id = None if fields_matched else clause.category_id
    best = record.max_confidence(clause.recognition_type, category_id)
    if best is None:
        return False
    return clause.low <= best <= clause.high


def matches(predicate: CompiledPredicate, record: FileRecord) -> bool:
    """True if the record is selected by the predicate (before episode expansion)."""
    if predicate.is_missing_recognition:
        return not record.has_recognition
    group_results = [
        all(evaluate_field_clause(clause, record) for clause in group.clauses)
        for group in predicate.groups
    ]
    fields_matched = combine_results(group_results, predicate.combinator)
    if predicate.recognition_join is Combinator.OR:
        return evaluate_joined_range(predicate.recognition, record, fields_matched)
    if not fields_matched:
        return False
    return evaluate_recognition_clause(predicate.recognition, record)


def order_matches(indices: Sequence[int], records: Sequence[FileRecord],
                  ordering: Optional[OrderingDirective]) -> List[int]:
    """
    Apply an ordering directive to matched row indices.

    Without a directive the catalog order is kept. With one, rows are
    grouped by the partition field and ranked by best confidence inside
    each group; ties keep catalog order.
    """
    if ordering is None:
        return list(indices)

    def _key(index: int):
        record = records[index]
        partition = ""
        if ordering.partition_field:
            partition = str(record.get(ordering.partition_field) or "")
        best = record.max_confidence(ordering.recognition_type, ordering.category_id)
        score = best if best is not None else -1.0
        return partition, -score if ordering.descending else score

    return sorted(indices, key=_key)


def select_indices(predicate: CompiledPredicate, records: Iterable[FileRecord]) -> List[int]:
    """Row indices matched by the predicate, in catalog order."""
    return [index for index, record in enumerate(records) if matches(predicate, record)]
