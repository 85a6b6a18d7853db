"""Testing utilities for code built on quickbase-client.

Response factories for ``httpx.MockTransport`` handlers, so tests can stand
in for the Quickbase API without network access.

Example:
    ```python
    import httpx

    from quickbase_client import QuickBase
    from quickbase_client.testing import create_error_response, create_json_response


    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/apps/bxxxxxxxx"):
            return create_json_response({"id": "bxxxxxxxx", "name": "Demo"})
        return create_error_response(404, message="Not Found")


    qb = QuickBase({"realm": "demo.quickbase.com"}, transport=httpx.MockTransport(handler))
    ```
"""

from collections.abc import Mapping
from typing import Any

import httpx

from quickbase_client.legacy.xml import build_payload


def create_json_response(
    body: Any = None,
    status_code: int = 200,
    headers: Mapping[str, str] | None = None,
) -> httpx.Response:
    """Successful (by default) JSON response."""
    return httpx.Response(status_code, json=body, headers=dict(headers or {}))


def create_error_response(
    status_code: int,
    *,
    message: str | None = None,
    description: str | None = None,
    errors: list[Any] | None = None,
    ray_id: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> httpx.Response:
    """Failed REST response shaped like Quickbase's error bodies."""
    body = {
        key: value
        for key, value in {"message": message, "description": description, "errors": errors}.items()
        if value is not None
    }

    all_headers = dict(headers or {})
    if ray_id is not None:
        all_headers["QB-API-Ray"] = ray_id

    return httpx.Response(status_code, json=body, headers=all_headers)


def create_legacy_response(
    action: str,
    *,
    errcode: int = 0,
    errtext: str = "No error",
    errdetail: str | None = None,
    **fields: Any,
) -> httpx.Response:
    """Legacy XML response for ``action`` with the given result fields."""
    values: dict[str, Any] = {"action": action, "errcode": errcode, "errtext": errtext}
    if errdetail is not None:
        values["errdetail"] = errdetail
    values.update(fields)

    return httpx.Response(
        200,
        content=build_payload(values).encode("utf-8"),
        headers={"Content-Type": "application/xml"},
    )


__all__ = [
    "create_error_response",
    "create_json_response",
    "create_legacy_response",
]
