"""Structured exceptions for Quickbase API errors."""

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class QuickBaseError(Exception):
    """Error reported by the Quickbase API (or raised on its behalf).

    Attributes:
        code: HTTP status code, legacy ``errcode``, or an internal sentinel
            (1000 unparseable response, 1001 no connections available).
        message: Short summary of the failure.
        description: Longer explanation from the API.
        ray_id: Value of the ``QB-API-Ray`` response header, used to correlate
            the failure with Quickbase's server-side logs.
        response: The HTTP response the error was built from, if any.
    """

    def __init__(
        self,
        code: int,
        message: str,
        description: str = "",
        ray_id: str | None = None,
        response: "httpx.Response | None" = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.description = description
        self.ray_id = ray_id
        self.response = response

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.description and self.description != self.message:
            text += f": {self.description}"
        if self.ray_id:
            text += f" (ray id: {self.ray_id})"
        return text

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, "
            f"description={self.description!r}, ray_id={self.ray_id!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error into a plain dict."""
        return {
            "code": self.code,
            "message": self.message,
            "description": self.description,
            "ray_id": self.ray_id,
        }

    @classmethod
    def from_dict(cls, data: "str | dict[str, Any]") -> "QuickBaseError":
        """Rebuild an error from ``to_dict`` output or its JSON encoding.

        Raises:
            TypeError: If ``data`` does not decode to a JSON object.
        """
        if isinstance(data, str):
            data = json.loads(data)

        if not isinstance(data, dict):
            raise TypeError("data must be a dict or a JSON object string")

        return cls(
            code=data.get("code", 0),
            message=data.get("message", ""),
            description=data.get("description", ""),
            ray_id=data.get("ray_id"),
        )


class NoConnectionsAvailableError(QuickBaseError):
    """Raised by a throttle configured to fail instead of queueing."""

    CODE = 1001

    def __init__(self, limit: int):
        super().__init__(
            self.CODE,
            "No Connections Available",
            f"Maximum number of connections reached ({limit})",
        )
        self.limit = limit
