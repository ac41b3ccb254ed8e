"""Filesieve Core - Shared constants and validation.

Import specific names from submodules:
    from filesieve.core.constants import FilterKind, Limits, Reason
    from filesieve.core.validators import ValidationError, validate_pattern
"""

from filesieve.core import constants, validators

__all__ = [
    "constants",
    "validators",
]
