"""Domain layer: errors, constants and schemas."""

from .errors import (
    ErrorCodes,
    MalformedPlaceholderError,
    ScaffoldError,
    UnresolvedTokenError,
)
from .schemas import (
    HookVariant,
    Placeholder,
    PluginConfig,
    RunLog,
    WarningLog,
)

__all__ = [
    "ErrorCodes",
    "ScaffoldError",
    "UnresolvedTokenError",
    "MalformedPlaceholderError",
    "HookVariant",
    "Placeholder",
    "PluginConfig",
    "RunLog",
    "WarningLog",
]
