# -*- coding: utf-8 -*-
"""
Tests for the Field Term model.

Operator legality per control kind, value coercion and the construction of
session terms from catalog field definitions.
"""

import itertools
from datetime import datetime

import pytest

from trapselect.core.domain.exceptions import (
    ConfigurationError,
    OperatorNotAllowedError,
    UnknownControlKindError,
    ValueInputError,
)
from trapselect.core.domain.field_term import (
    COMPARISON_OPERATORS,
    ControlKind,
    DateBound,
    FieldDefinition,
    FieldTerm,
    SearchOperator,
    build_field_terms,
    coerce_flag,
    legal_operators,
    parse_datetime_input,
    parse_utc_offset_input,
)


EXPECTED_OPERATORS = {
    ControlKind.COUNTER: {"=", "≠", "<", ">", "≤", "≥"},
    ControlKind.DATE_TIME: {"=", "≠", "<", ">", "≤", "≥"},
    ControlKind.IMAGE_QUALITY: {"=", "≠", "<", ">", "≤", "≥"},
    ControlKind.FIXED_CHOICE: {"=", "≠", "<", ">", "≤", "≥"},
    ControlKind.DELETE_FLAG: {"=", "≠"},
    ControlKind.FLAG: {"=", "≠"},
    ControlKind.RELATIVE_PATH: {"=", "≠", "<", ">", "≤", "≥"},
    ControlKind.NOTE: {"=", "≠", "<", ">", "≤", "≥", "Glob"},
    ControlKind.FILE: {"=", "≠", "<", ">", "≤", "≥", "Glob"},
    ControlKind.UTC_OFFSET: {"=", "≠", "<", ">", "≤", "≥", "Glob"},
}


class TestControlKind:
    """Tests for ControlKind enum."""

    def test_from_string_catalog_name(self):
        assert ControlKind.from_string("FixedChoice") == ControlKind.FIXED_CHOICE
        assert ControlKind.from_string("datetime") == ControlKind.DATE_TIME

    def test_from_string_member_passthrough(self):
        assert ControlKind.from_string(ControlKind.NOTE) is ControlKind.NOTE

    def test_from_string_unknown(self):
        with pytest.raises(UnknownControlKindError):
            ControlKind.from_string("Slider")

    def test_unknown_kind_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            ControlKind.from_string("Slider")


class TestSearchOperator:
    """Tests for SearchOperator enum."""

    def test_symbols(self):
        assert SearchOperator.NOT_EQUAL.symbol == "≠"
        assert SearchOperator.GLOB.symbol == "Glob"

    @pytest.mark.parametrize("text,expected", [
        ("=", SearchOperator.EQUAL),
        ("!=", SearchOperator.NOT_EQUAL),
        ("<>", SearchOperator.NOT_EQUAL),
        ("<=", SearchOperator.LESS_THAN_OR_EQUAL),
        (">=", SearchOperator.GREATER_THAN_OR_EQUAL),
        ("glob", SearchOperator.GLOB),
        ("GREATER_THAN", SearchOperator.GREATER_THAN),
    ])
    def test_from_string_aliases(self, text, expected):
        assert SearchOperator.from_string(text) is expected

    def test_from_string_invalid(self):
        with pytest.raises(ValueError):
            SearchOperator.from_string("LIKE")


class TestLegalOperators:
    """Operator table per control kind."""

    @pytest.mark.parametrize("kind", list(ControlKind))
    def test_table(self, kind):
        symbols = {op.symbol for op in legal_operators(kind)}
        assert symbols == EXPECTED_OPERATORS[kind]

    def test_relative_path_subtree_mode_only_equal(self):
        assert legal_operators(ControlKind.RELATIVE_PATH, subtree_mode=True) == (SearchOperator.EQUAL,)

    def test_unknown_kind_raises(self):
        with pytest.raises(UnknownControlKindError):
            legal_operators("Counter")

    @pytest.mark.parametrize("kind,operator", list(itertools.product(ControlKind, SearchOperator)))
    def test_every_kind_operator_pair(self, kind, operator):
        """Assignment succeeds exactly for legal pairs and leaves illegal ones unchanged."""
        term = FieldTerm("F", "F", kind)
        if operator.symbol in EXPECTED_OPERATORS[kind]:
            term.operator = operator
            assert term.operator is operator
        else:
            with pytest.raises(OperatorNotAllowedError):
                term.operator = operator
            assert term.operator is SearchOperator.EQUAL


class TestFieldTermOperator:
    """Tests for operator assignment on FieldTerm."""

    def test_glob_rejected_for_counter(self):
        term = FieldTerm("Count", "Count", ControlKind.COUNTER)
        with pytest.raises(OperatorNotAllowedError) as exc_info:
            term.set_operator(SearchOperator.GLOB)
        assert exc_info.value.field_id == "Count"
        assert exc_info.value.control_kind is ControlKind.COUNTER
        assert "Glob" in str(exc_info.value)

    def test_unparseable_operator_is_not_allowed(self):
        term = FieldTerm("Notes", "Notes", ControlKind.NOTE)
        with pytest.raises(OperatorNotAllowedError):
            term.set_operator("LIKE")

    def test_constructor_rejects_illegal_operator(self):
        with pytest.raises(OperatorNotAllowedError):
            FieldTerm("Reviewed", "Reviewed", ControlKind.FLAG, operator="<")

    def test_subtree_mode_resets_illegal_operator(self):
        term = FieldTerm("RelativePath", "Folder", ControlKind.RELATIVE_PATH, operator=">")
        term.set_subtree_mode(True)
        assert term.subtree_mode
        assert term.operator is SearchOperator.EQUAL
        with pytest.raises(OperatorNotAllowedError):
            term.set_operator("≠")

    def test_subtree_mode_ignored_for_other_kinds(self):
        term = FieldTerm("Notes", "Notes", ControlKind.NOTE, subtree_mode=True)
        term.set_subtree_mode(True)
        assert not term.subtree_mode


class TestFieldTermValue:
    """Tests for per-kind value coercion."""

    def test_counter_accepts_digits(self):
        term = FieldTerm("Count", "Count", ControlKind.COUNTER)
        assert term.set_value_from_input(" -2.5 ")
        assert term.value == "-2.5"

    def test_counter_rejects_letters_and_keeps_value(self):
        term = FieldTerm("Count", "Count", ControlKind.COUNTER, value="3")
        with pytest.raises(ValueInputError):
            term.set_value_from_input("3a")
        assert term.value == "3"

    @pytest.mark.parametrize("text,expected", [
        ("TRUE", "true"), ("1", "true"), (True, "true"),
        ("False", "false"), ("", "false"), (False, "false"),
    ])
    def test_flag_coercion(self, text, expected):
        term = FieldTerm("Reviewed", "Reviewed", ControlKind.FLAG)
        term.set_value_from_input(text)
        assert term.value == expected

    def test_flag_rejects_other_words(self):
        with pytest.raises(ValueInputError):
            coerce_flag("maybe", "Reviewed")

    def test_datetime_stored_in_database_format(self):
        term = FieldTerm("DateTime", "Date", ControlKind.DATE_TIME, bound=DateBound.START)
        assert term.set_value_from_input("05-Jan-2023 10:00:00")
        assert term.value == "2023-01-05 10:00:00"
        assert term.display_value() == "05-Jan-2023 10:00:00"

    def test_datetime_unparseable_is_silently_ignored(self):
        term = FieldTerm("DateTime", "Date", ControlKind.DATE_TIME, value="2023-01-05 10:00:00")
        assert term.set_value_from_input("not a date") is False
        assert term.value == "2023-01-05 10:00:00"

    def test_utc_offset_forms(self):
        term = FieldTerm("UtcOffset", "UTC", ControlKind.UTC_OFFSET)
        assert term.set_value_from_input("-05:30")
        assert term.value == "-5.50"
        assert term.set_value_from_input("2")
        assert term.value == "2.00"
        assert term.set_value_from_input("+15:00") is False
        assert term.value == "2.00"

    def test_fixed_choice_must_be_a_choice(self):
        term = FieldTerm("Species", "Species", ControlKind.FIXED_CHOICE, choices=("", "deer"))
        assert term.set_value_from_input("deer")
        with pytest.raises(ValueInputError):
            term.set_value_from_input("moose")
        assert term.value == "deer"

    def test_note_none_becomes_empty(self):
        term = FieldTerm("Notes", "Notes", ControlKind.NOTE, value="x")
        term.set_value_from_input(None)
        assert term.value == ""


class TestFieldTermState:
    """Enablement, locking and display."""

    def test_locked_term_refuses_disable(self):
        term = FieldTerm("RelativePath", "Folder", ControlKind.RELATIVE_PATH, enabled=True)
        term.locked = True
        assert term.set_enabled(False) is False
        assert term.enabled

    def test_key_includes_bound(self):
        start = FieldTerm("DateTime", "Date", ControlKind.DATE_TIME, bound=DateBound.START)
        assert start.key == "DateTime:start"
        assert FieldTerm("Notes", "Notes", ControlKind.NOTE).key == "Notes"

    def test_display_string_subtree(self):
        term = FieldTerm("RelativePath", "Folder", ControlKind.RELATIVE_PATH,
                         value="SiteA", subtree_mode=True)
        assert "subfolders" in term.to_display_string()

    def test_equality(self):
        a = FieldTerm("Notes", "Notes", ControlKind.NOTE, value="x", enabled=True)
        b = FieldTerm("Notes", "Notes", ControlKind.NOTE, value="x", enabled=True)
        assert a == b
        b.value = "y"
        assert a != b


class TestParsing:
    """Tests for the parsing helpers."""

    def test_parse_datetime_formats(self):
        expected = datetime(2023, 1, 5, 10, 0, 0)
        assert parse_datetime_input("2023-01-05 10:00:00") == expected
        assert parse_datetime_input("2023-01-05T10:00:00") == expected
        assert parse_datetime_input("2023-01-05") == datetime(2023, 1, 5)

    def test_parse_utc_offset_bad_minutes(self):
        assert parse_utc_offset_input("01:75") is None
        assert parse_utc_offset_input("abc") is None


class TestBuildFieldTerms:
    """Tests for building session terms from field definitions."""

    def test_defaults(self, field_definitions):
        terms = build_field_terms(field_definitions, datetime(2023, 1, 1), default_utc_offset=-7.0)
        by_key = {t.key: t for t in terms}

        assert not {"Date", "Time", "Folder"} & set(by_key)
        assert by_key["Count"].operator is SearchOperator.GREATER_THAN
        assert by_key["Count"].value == "0"
        assert by_key["DateTime:start"].operator is SearchOperator.GREATER_THAN_OR_EQUAL
        assert by_key["DateTime:end"].operator is SearchOperator.LESS_THAN_OR_EQUAL
        assert by_key["DateTime:start"].value == "2023-01-01 00:00:00"
        assert by_key["Reviewed"].value == "false"
        assert by_key["Species"].choices == ("", "deer", "elk", "bear")
        assert by_key["UtcOffset"].value == "-7.00"
        assert all(not t.enabled for t in terms)

    def test_display_order(self, field_definitions):
        keys = [t.key for t in build_field_terms(field_definitions, datetime(2023, 1, 1))]
        assert keys.index("RelativePath") < keys.index("DateTime:start") < keys.index("DateTime:end")
        assert keys.index("DateTime:end") < keys.index("Species")

    def test_comparison_operators_for_fixed_choice(self):
        terms = build_field_terms([FieldDefinition("Species", "Species", "FixedChoice")])
        assert terms[0].legal_operators == COMPARISON_OPERATORS
        assert terms[0].choices == ("",)
