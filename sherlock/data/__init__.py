"""Static data shipped with the package."""

from sherlock.data.presets import (
    BUILTIN_SCOPES,
    DEFAULT_SCOPE_ID,
    get_all_scopes,
    get_default_scope,
    get_scope_by_id,
)

__all__ = [
    "BUILTIN_SCOPES",
    "DEFAULT_SCOPE_ID",
    "get_all_scopes",
    "get_default_scope",
    "get_scope_by_id",
]
