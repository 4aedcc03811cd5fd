# -*- coding: utf-8 -*-
"""
Tests for the reference predicate evaluator.
"""

import pytest

from trapselect.core.domain.compiled_predicate import (
    BelowFloorClause,
    CategoryClause,
    ClauseGroup,
    Combinator,
    CompiledPredicate,
    ConfidenceRangeClause,
    FieldClause,
    MissingRecognitionOnly,
    OrderingDirective,
    StandardSelection,
)
from trapselect.core.domain.field_term import ControlKind, SearchOperator
from trapselect.core.domain.file_record import FileRecord, RecognitionRecord, file_record_from_dict
from trapselect.core.domain.recognition_criteria import RecognitionType
from trapselect.core.selection.predicate_evaluator import (
    evaluate_field_clause,
    evaluate_recognition_clause,
    matches,
    order_matches,
    select_indices,
)


@pytest.fixture
def records(catalog_rows):
    return [file_record_from_dict(row) for row in catalog_rows]


def _select(records, *clauses, combinator=Combinator.AND, recognition=None, join=Combinator.AND):
    groups = tuple(ClauseGroup((c,)) for c in clauses)
    predicate = CompiledPredicate(mode=StandardSelection(groups, combinator, recognition, join))
    return select_indices(predicate, records)


def _record(**values):
    return FileRecord(values=values)


class TestFieldClauses:
    """Per-kind comparison rules."""

    def test_counter_numeric(self, records):
        clause = FieldClause("Count", ControlKind.COUNTER, SearchOperator.GREATER_THAN, "1")
        assert _select(records, clause) == [0, 3]

    def test_counter_numeric_not_lexical(self):
        clause = FieldClause("Count", ControlKind.COUNTER, SearchOperator.LESS_THAN, "9")
        assert evaluate_field_clause(clause, _record(Count="10")) is False

    def test_flag_case_insensitive(self, records):
        clause = FieldClause("Reviewed", ControlKind.FLAG, SearchOperator.EQUAL, "true",
                             case_insensitive=True)
        assert _select(records, clause) == [0, 4]

    def test_empty_matches_null_and_blank(self, records):
        clause = FieldClause("Notes", ControlKind.NOTE, SearchOperator.EQUAL, "", match_empty=True)
        assert _select(records, clause) == [1, 2, 4, 5]

    def test_null_never_satisfies_comparison(self):
        clause = FieldClause("Notes", ControlKind.NOTE, SearchOperator.NOT_EQUAL, "buck")
        assert evaluate_field_clause(clause, _record(Notes=None)) is False

    def test_glob_case_sensitive(self, records):
        clause = FieldClause("File", ControlKind.FILE, SearchOperator.GLOB, "IMG_000[12].*")
        assert _select(records, clause) == [0, 1]
        lower = FieldClause("File", ControlKind.FILE, SearchOperator.GLOB, "img_*")
        assert _select(records, lower) == []

    def test_datetime_range(self, records):
        start = FieldClause("DateTime", ControlKind.DATE_TIME, SearchOperator.GREATER_THAN_OR_EQUAL,
                            "2023-01-01 00:00:00")
        end = FieldClause("DateTime", ControlKind.DATE_TIME, SearchOperator.LESS_THAN_OR_EQUAL,
                          "2023-01-31 23:59:59")
        predicate = CompiledPredicate(mode=StandardSelection((ClauseGroup((start, end)),), Combinator.OR))
        assert select_indices(predicate, records) == [0, 1, 2, 4]

    def test_subtree(self, records):
        clause = FieldClause("RelativePath", ControlKind.RELATIVE_PATH, SearchOperator.EQUAL, "SiteA",
                             subtree=True)
        assert _select(records, clause) == [0, 1, 2, 3]

    def test_subtree_empty_folder_matches_all(self, records):
        clause = FieldClause("RelativePath", ControlKind.RELATIVE_PATH, SearchOperator.EQUAL, "",
                             subtree=True)
        assert _select(records, clause) == list(range(len(records)))

    def test_flat_relative_path(self, records):
        clause = FieldClause("RelativePath", ControlKind.RELATIVE_PATH, SearchOperator.EQUAL, "SiteA")
        assert _select(records, clause) == [0, 1]

    def test_or_combinator(self, records):
        elk = FieldClause("Species", ControlKind.FIXED_CHOICE, SearchOperator.EQUAL, "elk")
        bear = FieldClause("Species", ControlKind.FIXED_CHOICE, SearchOperator.EQUAL, "bear")
        assert _select(records, elk, bear, combinator=Combinator.OR) == [3, 4]
        assert _select(records, elk, bear, combinator=Combinator.AND) == []


class TestRecognitionClauses:
    """Confidence window, floor and category presence."""

    def test_no_clause(self, records):
        assert evaluate_recognition_clause(None, records[4])

    def test_window_uses_best_confidence_of_category(self, records):
        clause = ConfidenceRangeClause(RecognitionType.DETECTION, '1', 'animal', 0.8, 1.0)
        assert [i for i, r in enumerate(records) if evaluate_recognition_clause(clause, r)] == [0, 3]

    def test_window_bounds_inclusive(self):
        record = FileRecord(values={}, detections=(RecognitionRecord('1', 0.8),))
        clause = ConfidenceRangeClause(RecognitionType.DETECTION, '1', 'animal', 0.8, 0.8)
        assert evaluate_recognition_clause(clause, record)

    def test_classification_window(self, records):
        clause = ConfidenceRangeClause(RecognitionType.CLASSIFICATION, '11', 'elk', 0.5, 1.0)
        assert [i for i, r in enumerate(records) if evaluate_recognition_clause(clause, r)] == [3]

    def test_below_floor_needs_detections(self, records):
        clause = BelowFloorClause(0.01)
        assert [i for i, r in enumerate(records) if evaluate_recognition_clause(clause, r)] == [2]

    def test_category_clause_any(self, records):
        clause = CategoryClause(RecognitionType.DETECTION, None, 'All')
        assert [i for i, r in enumerate(records) if evaluate_recognition_clause(clause, r)] == [0, 1, 2, 3, 5]

    def test_unsupported_clause(self, records):
        with pytest.raises(TypeError):
            evaluate_recognition_clause(object(), records[0])


class TestRecognitionJoinedWithOr:
    """A specific category OR-ed with the field groups, window still applied."""

    DEER = FieldClause("Species", ControlKind.FIXED_CHOICE, SearchOperator.EQUAL, "deer")
    ELK = FieldClause("Species", ControlKind.FIXED_CHOICE, SearchOperator.EQUAL, "elk")

    def test_fields_or_category(self, records):
        person = ConfidenceRangeClause(RecognitionType.DETECTION, '2', 'person', 0.8, 1.0)
        assert _select(records, self.DEER, self.ELK, combinator=Combinator.OR,
                       recognition=person, join=Combinator.OR) == [0, 3, 5]
        assert _select(records, self.DEER, self.ELK, combinator=Combinator.OR,
                       recognition=person) == []

    def test_window_applies_to_field_matches(self, records):
        person = ConfidenceRangeClause(RecognitionType.DETECTION, '2', 'person', 0.9, 1.0)
        assert _select(records, self.DEER, self.ELK, combinator=Combinator.OR,
                       recognition=person, join=Combinator.OR) == [0, 5]

    def test_field_match_without_recognition_data(self, records):
        bear = FieldClause("Species", ControlKind.FIXED_CHOICE, SearchOperator.EQUAL, "bear")
        person = ConfidenceRangeClause(RecognitionType.DETECTION, '2', 'person', 0.8, 1.0)
        assert _select(records, bear, combinator=Combinator.OR,
                       recognition=person, join=Combinator.OR) == [5]


class TestMatchesAndOrdering:
    """Tests for matches and order_matches."""

    def test_missing_recognition(self, records):
        predicate = CompiledPredicate(mode=MissingRecognitionOnly())
        assert [i for i, r in enumerate(records) if matches(predicate, r)] == [4]

    def test_no_ordering_keeps_catalog_order(self, records):
        assert order_matches([3, 1, 2], records, None) == [3, 1, 2]

    def test_ranked_within_folder(self, records):
        ordering = OrderingDirective(RecognitionType.DETECTION, '1')
        ranked = order_matches([0, 1, 2, 3], records, ordering)
        assert ranked == [0, 1, 3, 2]

    def test_ranked_without_partition(self, records):
        ordering = OrderingDirective(RecognitionType.DETECTION, None, partition_field=None)
        assert order_matches([0, 1, 2, 3, 5], records, ordering) == [5, 0, 3, 1, 2]

    def test_ascending(self, records):
        ordering = OrderingDirective(RecognitionType.DETECTION, '1', descending=False, partition_field=None)
        assert order_matches([0, 1, 2, 3], records, ordering) == [2, 1, 3, 0]
