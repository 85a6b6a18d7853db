"""Structured errors and response error normalization."""

from quickbase_client.errors.exceptions import NoConnectionsAvailableError, QuickBaseError
from quickbase_client.errors.handler import error_from_response, lower_keys, normalize_error, raise_for_status
from quickbase_client.errors.models import ErrorBody

__all__ = [
    "ErrorBody",
    "NoConnectionsAvailableError",
    "QuickBaseError",
    "error_from_response",
    "lower_keys",
    "normalize_error",
    "raise_for_status",
]
