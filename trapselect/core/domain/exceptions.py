# -*- coding: utf-8 -*-
"""
TrapSelect Domain Exceptions

Hierarchical exception system for the selection engine.
All engine exceptions inherit from TrapSelectError, enabling both
fine-grained and broad exception handling.

Two families matter to callers:

- ConfigurationError: a programming or setup mistake (illegal operator for a
  field kind, unknown category label). Fatal for the edit that caused it.
- InputError / FeatureUnavailableError: something the user did that can be
  refused politely; the session keeps running.

Usage::

    from trapselect.core.domain.exceptions import (
        OperatorNotAllowedError, EpisodeFieldUnavailableError,
    )

    try:
        session.set_show_all_episode(True)
    except EpisodeFieldUnavailableError:
        show_hint("No episode field was found in this catalog")
"""


# ──────────────────────────────────────────────
# Base
# ──────────────────────────────────────────────

class TrapSelectError(Exception):
    """Base exception for all TrapSelect errors."""


# ──────────────────────────────────────────────
# Configuration errors (programmer class)
# ──────────────────────────────────────────────

class ConfigurationError(TrapSelectError):
    """Selection model was configured in a way that can never be valid."""


class OperatorNotAllowedError(ConfigurationError):
    """An operator was assigned that is not legal for the field's control kind.

    Args:
        control_kind: The ControlKind of the offending term.
        operator: The rejected SearchOperator.
        field_id: Identifier of the field, when known.
    """

    def __init__(self, control_kind=None, operator=None, field_id=None):
        self.control_kind = control_kind
        self.operator = operator
        self.field_id = field_id
        kind_name = getattr(control_kind, 'value', control_kind)
        op_symbol = getattr(operator, 'symbol', operator)
        target = f" on field '{field_id}'" if field_id else ""
        super().__init__(
            f"Operator '{op_symbol}' is not allowed for {kind_name}{target}"
        )


class UnknownControlKindError(ConfigurationError):
    """A control kind outside the closed ControlKind set was encountered."""


class UnknownCategoryError(ConfigurationError):
    """A recognition category label matches neither detection nor classification categories."""


class InvalidSettingError(ConfigurationError):
    """A configuration value failed schema validation."""


# ──────────────────────────────────────────────
# Recoverable user errors
# ──────────────────────────────────────────────

class InputError(TrapSelectError):
    """User input was refused; the previous value stays in effect."""


class ValueInputError(InputError):
    """A typed value could not be accepted for the field's control kind."""


class FeatureUnavailableError(TrapSelectError):
    """A feature was requested that the current catalog cannot support."""


class EpisodeFieldUnavailableError(FeatureUnavailableError):
    """Episode expansion was requested but no episode field was detected."""


# ──────────────────────────────────────────────
# Counting
# ──────────────────────────────────────────────

class CountError(TrapSelectError):
    """The external count call failed. The count becomes unknown."""


__all__ = [
    # Base
    'TrapSelectError',
    # Configuration
    'ConfigurationError',
    'OperatorNotAllowedError',
    'UnknownControlKindError',
    'UnknownCategoryError',
    'InvalidSettingError',
    # Recoverable
    'InputError',
    'ValueInputError',
    'FeatureUnavailableError',
    'EpisodeFieldUnavailableError',
    # Counting
    'CountError',
]
