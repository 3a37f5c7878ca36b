"""Adapters - I/O implementations of ports."""

from .json_store import JsonFileStore
from .covenant_api import CovenantApiAdapter, ApiError, AuthenticationError

__all__ = [
    "JsonFileStore",
    "CovenantApiAdapter",
    "ApiError",
    "AuthenticationError",
]
