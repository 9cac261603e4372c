"""OS_* setting lookup.

Each setting is looked up, highest priority first, from:

1. a value passed in by the caller
2. the process environment, trying each alias in turn (``OS_PROJECT_NAME``
   before ``OS_TENANT_NAME``)
3. a ``.env`` file, merged into the environment by python-dotenv without
   overriding variables that are already set
4. a default

Example:
    ```python
    from openstack_client_core.auth import CredentialResolver

    resolver = CredentialResolver()
    auth_url = resolver.resolve("OS_AUTH_URL", required=True)
    project = resolver.resolve("OS_PROJECT_NAME", "OS_TENANT_NAME")
    password = resolver.resolve("OS_PASSWORD", secret=True)
    ```

Values of settings marked ``secret`` never reach the log.
"""

import logging
import os
from threading import Lock

from dotenv import load_dotenv

from openstack_client_core.auth.exceptions import CredentialNotFoundError

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Resolve OS_* settings for AuthOptions and ClientConfig.

    Args:
        dotenv_path: .env file to merge into the environment. If None,
            python-dotenv searches the working directory and its parents.
        load_dotenv: Set to False to ignore .env files entirely.
    """

    def __init__(self, dotenv_path: str | None = None, load_dotenv: bool = True):
        self._dotenv_path = dotenv_path
        self._dotenv_enabled = load_dotenv
        self._dotenv_loaded = False
        self._lock = Lock()

        if load_dotenv:
            self._load_dotenv_once()

    def _load_dotenv_once(self) -> None:
        with self._lock:
            if self._dotenv_loaded:
                return
            if load_dotenv(dotenv_path=self._dotenv_path, override=False):
                logger.debug(f"Merged .env settings from {self._dotenv_path or 'nearest .env'}")
            self._dotenv_loaded = True

    def resolve(
        self,
        *env_var_names: str,
        value: str | None = None,
        default: str | None = None,
        required: bool = False,
        secret: bool = False,
    ) -> str | None:
        """Resolve one setting from its environment variable aliases.

        Variables set to an empty string count as unset.

        Raises:
            CredentialNotFoundError: If ``required`` and no source has a value.
        """
        if value is not None:
            self._log_source(value, "caller", secret)
            return value

        for name in env_var_names:
            found = os.environ.get(name)
            if found:
                self._log_source(found, name, secret)
                return found

        if default is not None:
            self._log_source(default, "default", secret)
            return default

        if required:
            checked = ", ".join(env_var_names) or "no variables"
            raise CredentialNotFoundError(
                f"Required setting is not set (checked: {checked})",
                env_var_name=env_var_names[0] if env_var_names else None,
            )
        return None

    @staticmethod
    def _log_source(value: str, source: str, secret: bool) -> None:
        logger.debug(f"Setting from {source}: {'***' if secret else value}")
