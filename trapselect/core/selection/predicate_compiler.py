# -*- coding: utf-8 -*-
"""
Predicate Compiler.

Turns the session models (field terms, combinator, recognition criteria,
episode expansion) into an immutable CompiledPredicate. Pure function of its
inputs: no store access, no side effects beyond debug logging.

Compilation is all-or-nothing. Any ConfigurationError (illegal operator,
unknown category) propagates and no predicate is produced.

Author: TrapSelect Team
"""

import logging
from typing import Iterable, Optional, Tuple, Union

from ..domain.compiled_predicate import (
    BelowFloorClause,
    CategoryClause,
    ClauseGroup,
    Combinator,
    CompiledPredicate,
    ConfidenceRangeClause,
    EpisodeDirective,
    FieldClause,
    MissingRecognitionOnly,
    OrderingDirective,
    RecognitionClause,
    StandardSelection,
)
from ..domain.episode_expansion import EpisodeExpansion
from ..domain.exceptions import OperatorNotAllowedError
from ..domain.field_term import (
    DATABASE_DATETIME_FORMAT,
    ControlKind,
    FieldTerm,
    SearchOperator,
    parse_datetime_input,
)
from ..domain.recognition_criteria import (
    CategoryCatalog,
    CategorySentinel,
    RecognitionCriteria,
    RecognitionType,
    category_label,
)
from .clause_combiner import group_enabled_terms

logger = logging.getLogger('TrapSelect.Core.Selection.Compiler')

PATH_SEPARATORS = ('\\', '/')


def normalize_relative_path(path: str, separator: str = '\\') -> str:
    """Use one separator throughout and drop leading/trailing separators."""
    text = path.strip()
    for sep in PATH_SEPARATORS:
        text = text.replace(sep, separator)
    return text.strip(separator)


def compile_field_term(term: FieldTerm) -> FieldClause:
    """
    Compile one enabled term into a FieldClause.

    Raises:
        OperatorNotAllowedError: If the term's operator is not legal for it
    """
    if term.operator not in term.legal_operators:
        raise OperatorNotAllowedError(term.control_kind, term.operator, term.field_id)

    value = (term.value or "").strip()
    if term.control_kind is ControlKind.DATE_TIME and value:
        parsed = parse_datetime_input(value)
        if parsed is not None:
            value = parsed.strftime(DATABASE_DATETIME_FORMAT)

    subtree = term.control_kind is ControlKind.RELATIVE_PATH and term.subtree_mode
    if subtree:
        value = normalize_relative_path(value)

    return FieldClause(
        field_id=term.field_id,
        control_kind=term.control_kind,
        operator=term.operator,
        value=value,
        match_empty=term.operator is SearchOperator.EQUAL and value == "" and not subtree,
        case_insensitive=term.control_kind in (ControlKind.FLAG, ControlKind.DELETE_FLAG),
        subtree=subtree,
    )


def compile_recognition(
    criteria: RecognitionCriteria,
    categories: CategoryCatalog,
) -> Tuple[Optional[RecognitionClause], Optional[OrderingDirective]]:
    """
    Compile recognition criteria into a clause and an optional ordering.

    - Not in use: no clause.
    - NoneFound category: best confidence below the detection floor; the
      confidence window is ignored.
    - Ranking: category restriction only (no window) plus a descending
      confidence ordering. All and NoneFound restrict to files having any
      recognition data.
    - Otherwise: best confidence of the category within the window.

    Raises:
        UnknownCategoryError: If a category label cannot be resolved
    """
    if not criteria.use_recognition:
        return None, None

    category = criteria.category
    label = category_label(category)
    if isinstance(category, CategorySentinel):
        recognition_type, category_id = RecognitionType.DETECTION, None
    else:
        recognition_type, category_id = categories.resolve(category)

    if criteria.rank_by_confidence:
        clause = CategoryClause(recognition_type, category_id, label)
        return clause, OrderingDirective(recognition_type, category_id)

    if category is CategorySentinel.NONE_FOUND:
        return BelowFloorClause(criteria.detection_floor), None

    return ConfidenceRangeClause(
        recognition_type=recognition_type,
        category_id=category_id,
        category_label=label,
        low=criteria.confidence_low,
        high=criteria.confidence_high,
    ), None


def recognition_join(
    combinator: Combinator,
    groups: Tuple[ClauseGroup, ...],
    clause: Optional[RecognitionClause],
) -> Combinator:
    """
    How the recognition clause joins the field groups.

    A specific category in a confidence range is one more term of the
    selection and takes the session combinator. Every other recognition
    clause (All, NoneFound, ranking) restricts the whole selection.
    """
    if (combinator is Combinator.OR and groups
            and isinstance(clause, ConfidenceRangeClause) and clause.category_id is not None):
        return Combinator.OR
    return Combinator.AND


def compile_predicate(
    terms: Iterable[FieldTerm],
    combinator: Union[Combinator, str],
    recognition: RecognitionCriteria,
    episode: Optional[EpisodeExpansion] = None,
    categories: Optional[CategoryCatalog] = None,
) -> CompiledPredicate:
    """
    Compile the session models into a CompiledPredicate.

    Args:
        terms: All session terms (disabled ones are skipped)
        combinator: Session combinator, AND or OR
        recognition: Recognition criteria
        episode: Episode expansion settings, if any
        categories: Known recognition categories for label resolution

    Returns:
        CompiledPredicate

    Raises:
        ConfigurationError: On an illegal operator, an unsupported
            combinator or an unknown category
    """
    combinator = Combinator.from_string(combinator)
    categories = categories or CategoryCatalog()

    episode_directive = None
    if episode is not None and episode.is_active:
        episode_directive = EpisodeDirective(episode.episode_field_id)

    if recognition.show_missing_recognition:
        logger.debug("Compiled missing-recognition selection")
        return CompiledPredicate(mode=MissingRecognitionOnly(), episode=episode_directive)

    groups = tuple(
        ClauseGroup(tuple(compile_field_term(term) for term in group))
        for group in group_enabled_terms(terms)
    )
    recognition_clause, ordering = compile_recognition(recognition, categories)

    predicate = CompiledPredicate(
        mode=StandardSelection(
            groups=groups,
            combinator=combinator,
            recognition=recognition_clause,
            recognition_join=recognition_join(combinator, groups, recognition_clause),
        ),
        ordering=ordering,
        episode=episode_directive,
    )
    logger.debug(f"Compiled predicate: {predicate.to_display_string()}")
    return predicate
