"""
TrapSelect Core Selection Module.

Compiles session models into CompiledPredicate objects and evaluates them.

Components:
- operator_registry: Operator spellings and Python comparisons
- clause_combiner: Term grouping and AND/OR joining
- predicate_compiler: Session models -> CompiledPredicate
- predicate_evaluator: CompiledPredicate x FileRecord -> bool
"""
from .operator_registry import (
    OPERATORS,
    get_operator_symbol,
    get_operator_symbols,
    get_comparison,
)
from .clause_combiner import (
    group_enabled_terms,
    combine_results,
)
from .predicate_compiler import (
    compile_predicate,
    compile_field_term,
    compile_recognition,
    normalize_relative_path,
    recognition_join,
)
from .predicate_evaluator import (
    matches,
    evaluate_field_clause,
    evaluate_joined_range,
    evaluate_recognition_clause,
    order_matches,
    select_indices,
)

__all__ = [
    'OPERATORS',
    'get_operator_symbol',
    'get_operator_symbols',
    'get_comparison',
    'group_enabled_terms',
    'combine_results',
    'compile_predicate',
    'compile_field_term',
    'compile_recognition',
    'normalize_relative_path',
    'recognition_join',
    'matches',
    'evaluate_field_clause',
    'evaluate_joined_range',
    'evaluate_recognition_clause',
    'order_matches',
    'select_indices',
]
