"""Authentication components.

- Credential resolution (value → env → .env → default)
- Authorization headers for user and temporary tokens

Example:
    ```python
    from quickbase_client.auth import CredentialResolver

    resolver = CredentialResolver()
    user_token = resolver.resolve(env_var_name="QB_USER_TOKEN", required=True)
    ```
"""

from quickbase_client.auth.credentials import CredentialResolver
from quickbase_client.auth.exceptions import (
    CredentialError,
    CredentialFileError,
    CredentialNotFoundError,
)
from quickbase_client.auth.tokens import authorization_headers, temp_token_applies

__all__ = [
    "CredentialError",
    "CredentialFileError",
    "CredentialNotFoundError",
    "CredentialResolver",
    "authorization_headers",
    "temp_token_applies",
]
