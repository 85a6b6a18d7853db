"""Exceptions for credential resolution.

Example:
    ```python
    from quickbase_client.auth.exceptions import CredentialNotFoundError

    if not user_token:
        raise CredentialNotFoundError("User token not found", env_var_name="QB_USER_TOKEN")
    ```
"""


class CredentialError(Exception):
    """Base exception for credential-related errors."""

    pass


class CredentialNotFoundError(CredentialError):
    """Raised when a required credential cannot be resolved.

    Attributes:
        env_var_name: The environment variable name that was checked (if any).
    """

    def __init__(self, message: str, env_var_name: str | None = None):
        super().__init__(message)
        self.env_var_name = env_var_name


class CredentialFileError(CredentialError):
    """Raised when a credential file cannot be read."""

    pass
