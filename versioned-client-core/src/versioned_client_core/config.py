"""Layered configuration for versioned clients.

Configuration holds process-wide values (such as a global ``api_version``
lock) and per-service mappings keyed by service identifier.

Resolution order (highest to lowest priority):
1. Explicitly set value (``config["api_version"] = ...``)
2. Environment variable
3. .env file (python-dotenv)
4. Absent

Environment variables:
    ``VERSIONED_CLIENT_API_VERSION`` sets the global version lock.
    ``VERSIONED_CLIENT_<IDENTIFIER>_API_VERSION`` locks a single service,
    e.g. ``VERSIONED_CLIENT_DYNAMODB_API_VERSION=2011-12-05``.

Example:
    ```python
    from versioned_client_core.config import Config

    config = Config(load_dotenv=False)

    # Lock one service
    config["dynamodb"] = {"api_version": "2011-12-05"}

    # Lock every service to the newest version not after this date
    config["api_version"] = "2012-10-01"
    ```
"""

import logging
import os
from collections.abc import Iterator, Mapping
from threading import Lock
from typing import Any

from dotenv import load_dotenv as _load_dotenv

logger = logging.getLogger(__name__)

API_VERSION_KEY = "api_version"
DEFAULT_ENV_PREFIX = "VERSIONED_CLIENT_"


class Config:
    """Process-wide configuration consulted read-only by service definitions.

    Attributes:
        env_prefix: Prefix for configuration environment variables.
    """

    def __init__(
        self,
        values: Mapping[str, Any] | None = None,
        *,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        dotenv_path: str | None = None,
        load_dotenv: bool = True,
    ):
        """Initialize configuration.

        Args:
            values: Initial explicit values.
            env_prefix: Prefix for environment variable lookups.
            dotenv_path: Path to .env file. If None, python-dotenv searches
                parent directories.
            load_dotenv: Whether to load the .env file. Set to False for tests
                or when not using .env.
        """
        self.env_prefix = env_prefix
        self._values: dict[str, Any] = dict(values or {})
        self._lock = Lock()
        self._dotenv_loaded = False
        self._dotenv_lock = Lock()
        self._dotenv_path = dotenv_path
        self._load_dotenv_enabled = load_dotenv

        if self._load_dotenv_enabled:
            self._ensure_dotenv_loaded()

    def _ensure_dotenv_loaded(self) -> None:
        """Load the .env file once (thread-safe)."""
        if self._dotenv_loaded:
            return

        with self._dotenv_lock:
            if self._dotenv_loaded:
                return

            try:
                _load_dotenv(dotenv_path=self._dotenv_path)
                logger.debug("Loaded .env file for client configuration")
            except Exception as e:
                logger.warning(f"Failed to load .env file: {e}")
            self._dotenv_loaded = True

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value

    def __delitem__(self, key: str) -> None:
        with self._lock:
            del self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(dict(self._values))

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def update(self, values: Mapping[str, Any]) -> None:
        with self._lock:
            self._values.update(values)

    def env_var_name(self, identifier: str | None = None) -> str:
        """Return the environment variable name for an ``api_version`` lock.

        Args:
            identifier: Service identifier, or None for the global lock.
        """
        if identifier is None:
            return f"{self.env_prefix}{API_VERSION_KEY.upper()}"
        service = identifier.upper().replace("-", "_")
        return f"{self.env_prefix}{service}_{API_VERSION_KEY.upper()}"

    def _from_environment(self, env_var_name: str) -> str | None:
        value = os.environ.get(env_var_name)
        if value:
            logger.debug(f"Resolved {API_VERSION_KEY} from environment variable '{env_var_name}': {value}")
            return value
        return None

    def service_defaults(self, identifier: str) -> dict[str, Any]:
        """Return a copy of the per-service configuration.

        A per-service ``api_version`` from the environment is included when
        the explicit mapping does not set one.
        """
        defaults = dict(self._values.get(identifier) or {})
        if defaults.get(API_VERSION_KEY) is None:
            env_version = self._from_environment(self.env_var_name(identifier))
            if env_version is not None:
                defaults[API_VERSION_KEY] = env_version
        return defaults

    def service_api_version(self, identifier: str) -> str | None:
        """Return the version locked for one service, if any."""
        return self.service_defaults(identifier).get(API_VERSION_KEY)

    @property
    def api_version(self) -> str | None:
        """Global API version lock, if any."""
        value = self._values.get(API_VERSION_KEY)
        if value is not None:
            return value
        return self._from_environment(self.env_var_name())
