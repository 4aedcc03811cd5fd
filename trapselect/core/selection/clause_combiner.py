"""
Clause Combiner Module

Groups enabled field terms for combination and joins group results:
- Each enabled term forms its own group
- The DateTime start and end terms, when both enabled, form one group that
  is always AND-ed, whatever the session combinator
- Groups are joined with the session combinator (AND / OR)

Used by the predicate compiler (building groups) and the predicate
evaluator (joining per-group results).
"""

import logging
from typing import Iterable, List, Sequence, Tuple

from ..domain.compiled_predicate import Combinator
from ..domain.field_term import ControlKind, DateBound, FieldTerm

logger = logging.getLogger('TrapSelect.Core.Selection.Combiner')


def group_enabled_terms(terms: Iterable[FieldTerm]) -> List[Tuple[FieldTerm, ...]]:
    """
    Group enabled terms, pairing the DateTime range bounds.

    The pair takes the position of its first bound. A lone enabled DateTime
    bound is an ordinary single-term group.

    Args:
        terms: All session terms, in display order

    Returns:
        List of term tuples, in display order
    """
    enabled = [t for t in terms if t.enabled]
    date_bounds = {
        t.bound: t for t in enabled
        if t.control_kind is ControlKind.DATE_TIME and t.bound is not None
    }
    paired = DateBound.START in date_bounds and DateBound.END in date_bounds

    groups: List[Tuple[FieldTerm, ...]] = []
    pair_emitted = False
    for term in enabled:
        if paired and term.control_kind is ControlKind.DATE_TIME and term.bound is not None:
            if not pair_emitted:
                groups.append((date_bounds[DateBound.START], date_bounds[DateBound.END]))
                pair_emitted = True
            continue
        groups.append((term,))

    if paired:
        logger.debug("DateTime range bounds grouped with AND")
    return groups


def combine_results(group_results: Sequence[bool], combinator: Combinator) -> bool:
    """
    Join per-group match results with the session combinator.

    No groups means no field restriction, which matches everything.
    """
    if not group_results:
        return True
    if combinator is Combinator.AND:
        return all(group_results)
    if combinator is Combinator.OR:
        return any(group_results)
    raise ValueError(f"Unsupported combinator: {combinator!r}")
