"""Client configuration."""

import json
import logging
from dataclasses import asdict, dataclass, fields
from typing import Any

from quickbase_client.auth.credentials import CredentialResolver
from quickbase_client.auth.tokens import TEMP_TOKEN_SCHEME, USER_TOKEN_SCHEME, temp_token_applies

logger = logging.getLogger(__name__)

# Environment variables read by QuickBaseOptions.from_env
ENV_VARS: dict[str, str] = {
    "realm": "QB_REALM",
    "user_token": "QB_USER_TOKEN",
    "app_token": "QB_APP_TOKEN",
    "username": "QB_USERNAME",
    "password": "QB_PASSWORD",
}

# Environment variables naming a file that holds the secret, read when the
# plain variable is not set
FILE_ENV_VARS: dict[str, str] = {
    "user_token": "QB_USER_TOKEN_FILE",
    "app_token": "QB_APP_TOKEN_FILE",
    "password": "QB_PASSWORD_FILE",
}


@dataclass
class QuickBaseOptions:
    """Settings for one client instance.

    Built once when the client is constructed. Credential fields are updated
    in place by ``set_temp_token`` and by the request core when it renews a
    temporary token or a legacy ticket, so every later call picks up the new
    credential.

    Attributes:
        scheme: URL scheme of the API server
        server: REST API host
        version: REST API version path segment
        realm: Realm hostname, e.g. ``demo.quickbase.com``
        domain: Host suffix for the legacy API when ``realm`` is a bare name
        user_token: Long-lived user token
        temp_token: Temporary token; wins over ``user_token`` when both are set
        temp_token_dbid: Table or app id ``temp_token`` was issued for
        app_token: Application token, sent with every request when set
        username: Legacy API username, kept for re-authentication
        password: Legacy API password, kept for re-authentication
        ticket: Legacy API session ticket
        user_agent: Custom text prepended to the User-Agent header
        auto_renew_temp_tokens: Fetch a new temporary token when it expires
        connection_limit: Maximum concurrent requests (-1 for unbounded)
        connection_limit_period: Milliseconds each request counts against the
            limit, or None to count it only while in flight
        error_on_connection_limit: Raise instead of queueing at the limit
        retry_on_quota_exceeded: Wait and retry on 429 responses
        proxy: Outbound proxy URL
        timeout: Transport timeout in seconds
    """

    scheme: str = "https"
    server: str = "api.quickbase.com"
    version: str = "v1"
    realm: str = ""
    domain: str = "quickbase.com"
    user_token: str = ""
    temp_token: str = ""
    temp_token_dbid: str = ""
    app_token: str = ""
    username: str = ""
    password: str = ""
    ticket: str = ""
    user_agent: str = ""
    auto_renew_temp_tokens: bool = True
    connection_limit: int = 10
    connection_limit_period: float | None = 1000
    error_on_connection_limit: bool = False
    retry_on_quota_exceeded: bool = True
    proxy: str | None = None
    timeout: float | None = 30.0

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.server}/{self.version}/"

    @property
    def legacy_host(self) -> str:
        if "." in self.realm:
            return self.realm
        return f"{self.realm or 'www'}.{self.domain}"

    @property
    def legacy_base_url(self) -> str:
        return f"{self.scheme}://{self.legacy_host}/"

    @property
    def realm_hostname(self) -> str:
        """Value of the ``QB-Realm-Hostname`` header."""
        if not self.realm or "." in self.realm:
            return self.realm
        return f"{self.realm}.{self.domain}"

    def active_token(self, resource_id: str | None = None) -> tuple[str, str] | None:
        """Return ``(scheme, token)`` for the Authorization header, if any.

        The temporary token wins over the user token, but only for calls
        addressed to the table or app it was issued for.
        """
        if temp_token_applies(self, resource_id):
            return TEMP_TOKEN_SCHEME, self.temp_token
        if self.user_token:
            return USER_TOKEN_SCHEME, self.user_token
        return None

    def set_temp_token(self, dbid: str, temp_token: str) -> None:
        """Install a temporary token bound to table or app ``dbid``."""
        self.temp_token_dbid = dbid
        self.temp_token = temp_token

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_dict(cls, data: "str | dict[str, Any]") -> "QuickBaseOptions":
        """Build options from ``to_dict`` output or its JSON encoding.

        Unknown keys are ignored.

        Raises:
            TypeError: If ``data`` does not decode to a JSON object.
        """
        if isinstance(data, str):
            data = json.loads(data)

        if not isinstance(data, dict):
            raise TypeError("options must be a dict or a JSON object string")

        known = {f.name for f in fields(cls)}
        ignored = sorted(set(data) - known)
        if ignored:
            logger.debug(f"Ignoring unknown option(s): {', '.join(ignored)}")

        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_env(cls, resolver: CredentialResolver | None = None, **overrides: Any) -> "QuickBaseOptions":
        """Build options with credentials resolved from the environment.

        Explicit keyword arguments win over ``QB_*`` environment variables,
        which win over a ``.env`` file. Secrets may instead live in a file
        named by ``QB_USER_TOKEN_FILE``, ``QB_APP_TOKEN_FILE`` or
        ``QB_PASSWORD_FILE``.

        Example:
            ```python
            options = QuickBaseOptions.from_env(connection_limit=5)
            ```
        """
        resolver = resolver or CredentialResolver()

        values = dict(overrides)
        for name, env_var_name in ENV_VARS.items():
            resolved = resolver.resolve(value=overrides.get(name), env_var_name=env_var_name)
            if resolved is None and name in FILE_ENV_VARS:
                resolved = resolver.resolve_from_file(env_var_name=FILE_ENV_VARS[name])
            if resolved is not None:
                values[name] = resolved

        return cls(**values)
