from .handles import (
    HANDLE_CACHE_KEY,
    HandleCache,
    normalize_handle,
)
from .profiles import ProfileCache

__all__ = [
    "HANDLE_CACHE_KEY",
    "HandleCache",
    "ProfileCache",
    "normalize_handle",
]
