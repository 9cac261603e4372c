"""Exceptions raised while loading credentials and settings."""


class CredentialError(Exception):
    """Base exception for credential loading errors."""

    pass


class CredentialNotFoundError(CredentialError):
    """Raised when a required setting is missing from every source.

    Attributes:
        env_var_name: The environment variable that was checked (if any).

    Example:
        ```python
        try:
            options = AuthOptions.from_env()
        except CredentialNotFoundError as e:
            print(f"Set {e.env_var_name} first")
        ```
    """

    def __init__(self, message: str, env_var_name: str | None = None):
        super().__init__(message)
        self.env_var_name = env_var_name
