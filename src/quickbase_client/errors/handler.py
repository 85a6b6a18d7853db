"""Error normalization for HTTP responses."""

from collections.abc import Mapping
from typing import Any

import httpx

from quickbase_client.errors.exceptions import QuickBaseError
from quickbase_client.errors.models import ErrorBody

RAY_ID_HEADER = "qb-api-ray"


def lower_keys(headers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a copy of ``headers`` with every key lower-cased."""
    if not headers:
        return {}
    return {str(key).lower(): value for key, value in headers.items()}


def normalize_error(status: int, headers: Mapping[str, Any] | None, body: Any) -> QuickBaseError:
    """Build a QuickBaseError from the pieces of a failed response.

    Pure function: no I/O and no client state is touched.

    Args:
        status: HTTP status code
        headers: Response headers, any key casing
        body: Decoded response body (None if absent or undecodable)

    Returns:
        QuickBaseError carrying the status, message, description and ray id
    """
    error_body = ErrorBody.from_payload(body)
    ray_id = lower_keys(headers).get(RAY_ID_HEADER)

    return QuickBaseError(
        code=status,
        message=error_body.message,
        description=error_body.description,
        ray_id=ray_id,
    )


def error_from_response(response: httpx.Response) -> QuickBaseError:
    """Normalize a failed httpx response into a QuickBaseError."""
    try:
        body = response.json()
    except (ValueError, TypeError, AttributeError):
        # Empty or non-JSON body
        body = None

    error = normalize_error(response.status_code, response.headers, body)
    error.response = response
    return error


def raise_for_status(response: httpx.Response) -> None:
    """Raise the normalized QuickBaseError for non-2xx responses.

    Args:
        response: HTTP response object

    Raises:
        QuickBaseError: If the response status is not 2xx
    """
    if response.is_success:
        return

    raise error_from_response(response)
