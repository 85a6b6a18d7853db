"""Authorization headers for the Quickbase REST API."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quickbase_client.config import QuickBaseOptions

USER_TOKEN_SCHEME = "QB-USER-TOKEN"
TEMP_TOKEN_SCHEME = "QB-TEMP-TOKEN"
APP_TOKEN_HEADER = "QB-App-Token"


def temp_token_applies(options: "QuickBaseOptions", resource_id: str | None) -> bool:
    """Whether the stored temporary token may be sent for ``resource_id``.

    A temporary token is bound to the table or app it was issued for and is
    never sent on a call addressed to a different one.
    """
    if not options.temp_token:
        return False
    if resource_id is None or not options.temp_token_dbid:
        return True
    return resource_id == options.temp_token_dbid


def authorization_headers(
    options: "QuickBaseOptions",
    *,
    resource_id: str | None = None,
    include_temp_token: bool = True,
) -> dict[str, str]:
    """Build the credential headers for one request.

    A temporary token wins over a user token when both are configured.

    Args:
        options: Client options holding the current credentials
        resource_id: Table or app id the request addresses
        include_temp_token: False for the temporary token endpoint itself,
            which must be called with the long-lived credential

    Returns:
        Header dict (may be empty when no credential applies)
    """
    headers: dict[str, str] = {}

    if include_temp_token:
        token = options.active_token(resource_id)
    elif options.user_token:
        token = (USER_TOKEN_SCHEME, options.user_token)
    else:
        token = None

    if token is not None:
        scheme, value = token
        headers["Authorization"] = f"{scheme} {value}"

    if options.app_token:
        headers[APP_TOKEN_HEADER] = options.app_token

    return headers
