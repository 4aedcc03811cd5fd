# -*- coding: utf-8 -*-
"""
TrapSelect - Search Operator Registry

Single source of truth for how each search operator is represented:
display symbol, SQL spelling for store adapters, and the Python comparison
used by in-memory evaluation.
"""

import operator as _op
from typing import Any, Callable, Dict, Optional, Union

from ..domain.field_term import SearchOperator


# Operator registry: maps operator to dialect-specific representation
OPERATORS: Dict[SearchOperator, Dict[str, Union[str, Callable[[Any, Any], bool]]]] = {
    SearchOperator.EQUAL: {
        'display': '=',
        'sql': '=',
        'python': _op.eq,
    },
    SearchOperator.NOT_EQUAL: {
        'display': '≠',
        'sql': '<>',
        'python': _op.ne,
    },
    SearchOperator.LESS_THAN: {
        'display': '<',
        'sql': '<',
        'python': _op.lt,
    },
    SearchOperator.GREATER_THAN: {
        'display': '>',
        'sql': '>',
        'python': _op.gt,
    },
    SearchOperator.LESS_THAN_OR_EQUAL: {
        'display': '≤',
        'sql': '<=',
        'python': _op.le,
    },
    SearchOperator.GREATER_THAN_OR_EQUAL: {
        'display': '≥',
        'sql': '>=',
        'python': _op.ge,
    },
    SearchOperator.GLOB: {
        'display': 'Glob',
        'sql': 'GLOB',
        'python': None,  # Pattern match, handled by the evaluator
    },
}


def get_operator_symbol(search_operator: SearchOperator, dialect: str = 'display') -> Optional[str]:
    """
    Get the dialect-specific spelling of an operator.

    Args:
        search_operator: Operator to look up
        dialect: 'display' or 'sql'

    Returns:
        The operator's spelling, or None for an unknown dialect
    """
    value = OPERATORS[search_operator].get(dialect)
    return value if isinstance(value, str) else None


def get_comparison(search_operator: SearchOperator) -> Optional[Callable[[Any, Any], bool]]:
    """Python comparison for an operator; None for pattern operators."""
    return OPERATORS[search_operator]['python']


def get_operator_symbols(dialect: str) -> Dict[SearchOperator, str]:
    """All operator spellings for a dialect."""
    result = {}
    for search_operator in OPERATORS:
        symbol = get_operator_symbol(search_operator, dialect)
        if symbol is not None:
            result[search_operator] = symbol
    return result
