"""
TrapSelect Core Domain Module.

Pure Python value objects and models for file selection, with NO Qt
dependencies.

Models (mutable, owned by one selection session):
- FieldTerm: Per-field operator/value/use constraint
- RecognitionCriteria: Category and confidence settings
- EpisodeExpansion: Episode field and expansion toggle

Value Objects (immutable, equality by value):
- FieldDefinition: Catalog field description
- CompiledPredicate: Output of the predicate compiler
- FileRecord / RecognitionRecord: Catalog rows for in-memory evaluation

Enums:
- ControlKind, SearchOperator, DateBound
- RecognitionType, CategorySentinel, EditOrigin
- Combinator
"""
from .exceptions import (
    TrapSelectError,
    ConfigurationError,
    OperatorNotAllowedError,
    UnknownControlKindError,
    UnknownCategoryError,
    InvalidSettingError,
    InputError,
    ValueInputError,
    FeatureUnavailableError,
    EpisodeFieldUnavailableError,
    CountError,
)
from .field_term import (
    ControlKind,
    SearchOperator,
    DateBound,
    FieldDefinition,
    FieldTerm,
    legal_operators,
    build_field_terms,
)
from .recognition_criteria import (
    RecognitionType,
    CategorySentinel,
    CategoryCatalog,
    EditOrigin,
    RecognitionCriteria,
)
from .episode_expansion import (
    EPISODE_PATTERN,
    EpisodeExpansion,
    detect_episode_field,
    expand_matches,
)
from .compiled_predicate import (
    Combinator,
    FieldClause,
    ClauseGroup,
    ConfidenceRangeClause,
    BelowFloorClause,
    CategoryClause,
    MissingRecognitionClause,
    StandardSelection,
    MissingRecognitionOnly,
    OrderingDirective,
    EpisodeDirective,
    CompiledPredicate,
)
from .file_record import (
    FileRecord,
    RecognitionRecord,
    file_record_from_dict,
)
from .selection_state import (
    selection_state_to_dict,
    apply_selection_state,
)

__all__ = [
    # Exceptions
    'TrapSelectError',
    'ConfigurationError',
    'OperatorNotAllowedError',
    'UnknownControlKindError',
    'UnknownCategoryError',
    'InvalidSettingError',
    'InputError',
    'ValueInputError',
    'FeatureUnavailableError',
    'EpisodeFieldUnavailableError',
    'CountError',
    # Field terms
    'ControlKind',
    'SearchOperator',
    'DateBound',
    'FieldDefinition',
    'FieldTerm',
    'legal_operators',
    'build_field_terms',
    # Recognition
    'RecognitionType',
    'CategorySentinel',
    'CategoryCatalog',
    'EditOrigin',
    'RecognitionCriteria',
    # Episodes
    'EPISODE_PATTERN',
    'EpisodeExpansion',
    'detect_episode_field',
    'expand_matches',
    # Compiled predicate
    'Combinator',
    'FieldClause',
    'ClauseGroup',
    'ConfidenceRangeClause',
    'BelowFloorClause',
    'CategoryClause',
    'MissingRecognitionClause',
    'StandardSelection',
    'MissingRecognitionOnly',
    'OrderingDirective',
    'EpisodeDirective',
    'CompiledPredicate',
    # Records
    'FileRecord',
    'RecognitionRecord',
    'file_record_from_dict',
    # Persistence
    'selection_state_to_dict',
    'apply_selection_state',
]
