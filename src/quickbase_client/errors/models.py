"""Error body model for Quickbase API responses."""

from dataclasses import dataclass
from typing import Any

UNKNOWN_ERROR_MESSAGE = "Unknown Quickbase Error"
UNKNOWN_ERROR_DESCRIPTION = "We were unable to determine the true error, please check your request and try again"


@dataclass
class ErrorBody:
    """Message and description extracted from a failed response body.

    Quickbase is not consistent about the shape of its error bodies. Seen in
    the wild:

    - ``{"message": "...", "description": "..."}``
    - ``{"message": "...", "errors": ["...", "..."]}``
    - ``{"error": "..."}``
    """

    message: str
    description: str

    @classmethod
    def from_payload(cls, payload: Any) -> "ErrorBody":
        """Parse a decoded response body.

        Args:
            payload: Decoded JSON body, or None when the body was empty or
                could not be decoded.

        Returns:
            ErrorBody with generic defaults for absent or malformed bodies.
        """
        if not isinstance(payload, dict):
            return cls(message=UNKNOWN_ERROR_MESSAGE, description=UNKNOWN_ERROR_DESCRIPTION)

        detail = _join_errors(payload.get("errors"))
        if not detail:
            detail = _as_text(payload.get("description")) or _as_text(payload.get("error"))

        message = _as_text(payload.get("message")) or detail or UNKNOWN_ERROR_MESSAGE
        description = detail or _as_text(payload.get("message")) or UNKNOWN_ERROR_DESCRIPTION

        return cls(message=message, description=description)


def _join_errors(errors: Any) -> str:
    if not isinstance(errors, list):
        return ""

    parts = []
    for item in errors:
        if isinstance(item, dict):
            item = item.get("message") or item.get("description") or ""
        text = _as_text(item)
        if text:
            parts.append(text)

    return " ".join(parts)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
