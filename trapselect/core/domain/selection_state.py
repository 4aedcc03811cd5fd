# -*- coding: utf-8 -*-
"""
Selection State Persistence.

Saves and restores the user-editable selection settings through a flat
string-to-string mapping, the shape expected by the catalog's key/value
settings table. Restoring the output of selection_state_to_dict onto the
same catalog reproduces the same compiled predicate.
"""

from dataclasses import replace
from typing import Dict, Iterable, Mapping, Optional

from .compiled_predicate import Combinator
from .episode_expansion import EpisodeExpansion
from .field_term import FieldTerm
from .recognition_criteria import (
    CategoryCatalog,
    CategorySentinel,
    RecognitionCriteria,
    RecognitionType,
    category_label,
    parse_category,
    round2,
)

STATE_VERSION = "1"

_TRUE = "true"
_FALSE = "false"


def _bool_text(value: bool) -> str:
    return _TRUE if value else _FALSE


def _text_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() == _TRUE


def selection_state_to_dict(
    terms: Iterable[FieldTerm],
    combinator: Combinator,
    recognition: RecognitionCriteria,
    episode: EpisodeExpansion,
) -> Dict[str, str]:
    """Flatten the selection settings into string keys and values."""
    state: Dict[str, str] = {
        'version': STATE_VERSION,
        'combinator': combinator.value,
    }
    for term in terms:
        prefix = f"term.{term.key}"
        state[f"{prefix}.operator"] = term.operator.value
        state[f"{prefix}.value"] = term.value
        state[f"{prefix}.enabled"] = _bool_text(term.enabled)

    state['recognition.type'] = recognition.recognition_type.value
    state['recognition.category'] = category_label(recognition.category)
    state['recognition.low'] = repr(recognition.confidence_low)
    state['recognition.high'] = repr(recognition.confidence_high)
    state['recognition.use'] = _bool_text(recognition.use_recognition)
    state['recognition.rank'] = _bool_text(recognition.rank_by_confidence)
    state['recognition.missing'] = _bool_text(recognition.show_missing_recognition)

    state['episode.show_all'] = _bool_text(episode.show_all_if_any_match)
    return state


def _restored_recognition(
    state: Mapping[str, str],
    current: RecognitionCriteria,
    categories: Optional[CategoryCatalog],
) -> RecognitionCriteria:
    """
    Build the recognition settings described by ``state`` on a copy of
    ``current``; the live criteria are not touched.
    """
    restored = replace(current)
    if 'recognition.type' in state:
        restored.recognition_type = RecognitionType.from_string(state['recognition.type'])
    if 'recognition.category' in state:
        restored.category = parse_category(state['recognition.category'])
    if categories is not None and not isinstance(restored.category, CategorySentinel):
        restored.recognition_type, _ = categories.resolve(restored.category)
    if 'recognition.high' in state:
        restored.confidence_high = round2(float(state['recognition.high']))
    if 'recognition.low' in state:
        restored.confidence_low = round2(float(state['recognition.low']))
    if restored.confidence_low > restored.confidence_high:
        restored.confidence_high = restored.confidence_low
    restored.use_recognition = _text_bool(state.get('recognition.use'), current.use_recognition)
    restored.rank_by_confidence = _text_bool(state.get('recognition.rank'), current.rank_by_confidence)
    restored.show_missing_recognition = _text_bool(
        state.get('recognition.missing'), current.show_missing_recognition)
    return restored


def apply_selection_state(
    state: Mapping[str, str],
    terms: Iterable[FieldTerm],
    recognition: RecognitionCriteria,
    episode: EpisodeExpansion,
    categories: Optional[CategoryCatalog] = None,
) -> Combinator:
    """
    Restore saved settings onto existing models, in place.

    Every saved value is parsed and checked before any model is changed: a
    state that cannot be applied raises and leaves the models as they were.

    Terms absent from the state keep their current settings; keys for terms
    the catalog no longer has are ignored. Episode expansion is only
    restored when an episode field is available.

    Args:
        categories: Categories of the current catalog. When given, a saved
            category label must resolve against them.

    Returns:
        The restored combinator

    Raises:
        OperatorNotAllowedError: If a saved operator is illegal for its term
        UnknownCategoryError: If the saved category is not in ``categories``
        ConfigurationError: If the saved combinator is not AND/OR
        ValueError: If a saved recognition type or confidence is malformed
    """
    combinator = Combinator.from_string(state.get('combinator', Combinator.AND.value))

    pending = []
    for term in terms:
        prefix = f"term.{term.key}"
        operator = state.get(f"{prefix}.operator")
        if operator is not None:
            operator = term.check_operator(operator)
        pending.append((term, operator, state.get(f"{prefix}.value"), state.get(f"{prefix}.enabled")))

    restored = _restored_recognition(state, recognition, categories)

    for term, operator, value, enabled in pending:
        if operator is not None:
            term.set_operator(operator)
        if value is not None:
            term.value = value
        if enabled is not None:
            term.set_enabled(_text_bool(enabled))

    recognition.recognition_type = restored.recognition_type
    recognition.category = restored.category
    recognition.confidence_low = restored.confidence_low
    recognition.confidence_high = restored.confidence_high
    recognition.use_recognition = restored.use_recognition
    recognition.rank_by_confidence = restored.rank_by_confidence
    recognition.show_missing_recognition = restored.show_missing_recognition

    show_all = _text_bool(state.get('episode.show_all'), episode.show_all_if_any_match)
    episode.show_all_if_any_match = show_all and episode.available
    return combinator
