"""Base client classes for versioned API clients.

A client type is a subclass of BaseClient bound to one ApiDescription. Each
client type carries its own plugin list. Plugins are plain objects that may
define either hook:

- ``before_initialize(client_class, config)``: mutate the config dict before
  it is stored on the instance
- ``after_initialize(client)``: inspect or decorate the new instance

Example:
    ```python
    from versioned_client_core.client import BaseClient

    DynamoDB = BaseClient.define(api)
    DynamoDB.add_plugin(MyPlugin())

    with DynamoDB(endpoint="https://dynamodb.example.com") as client:
        client.http_client  # httpx.Client bound to the endpoint
    ```
"""

import logging
from typing import Any, ClassVar

import httpx

from versioned_client_core.model import ApiDescription

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class BaseClient:
    """Base class for clients bound to one API description.

    Use ``define`` to create a client type; BaseClient itself has no API.
    """

    api: ClassVar[ApiDescription | None] = None
    _plugins: ClassVar[list[Any]] = []

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # Each subclass owns a copy of its parent's plugin list
        cls._plugins = list(cls._plugins)

    def __init__(self, **config: Any) -> None:
        cls = type(self)
        if cls.api is None:
            raise TypeError(f"{cls.__name__} is not bound to an API description; use BaseClient.define()")

        options = dict(config)
        plugins = cls.plugins()
        for plugin in plugins:
            hook = getattr(plugin, "before_initialize", None)
            if hook is not None:
                hook(cls, options)

        self.config = options
        self._http_client: httpx.Client | None = None

        for plugin in plugins:
            hook = getattr(plugin, "after_initialize", None)
            if hook is not None:
                hook(self)

    @classmethod
    def define(cls, api: ApiDescription, name: str | None = None) -> type["BaseClient"]:
        """Create a new client type bound to ``api``.

        Args:
            api: The API description for the new type.
            name: Class name. Defaults to ``V`` plus the version without
                dashes, e.g. ``V20120810``.

        Returns:
            A new subclass starting with a copy of this class's plugins.
        """
        name = name or f"V{api.version.replace('-', '')}"
        client_class = type(name, (cls,), {"api": api})
        logger.debug(f"Defined client type {name} for API {api.version}")
        return client_class

    @classmethod
    def add_plugin(cls, plugin: Any) -> None:
        """Add ``plugin`` to this client type. Adding twice is a no-op."""
        if plugin not in cls._plugins:
            cls._plugins.append(plugin)

    @classmethod
    def remove_plugin(cls, plugin: Any) -> None:
        """Remove ``plugin`` from this client type if present."""
        if plugin in cls._plugins:
            cls._plugins.remove(plugin)

    @classmethod
    def plugins(cls) -> tuple[Any, ...]:
        return tuple(cls._plugins)

    @property
    def api_version(self) -> str:
        return type(self).api.version

    @property
    def operation_names(self) -> list[str]:
        return type(self).api.operation_names()

    @property
    def http_client(self) -> httpx.Client:
        """HTTP client bound to the configured ``endpoint``.

        Built on first access from ``endpoint`` and the optional ``transport``,
        ``timeout`` and ``headers`` config values.

        Raises:
            ValueError: If no endpoint is configured.
        """
        if self._http_client is None:
            endpoint = self.config.get("endpoint")
            if not endpoint:
                raise ValueError(f"No endpoint configured for {type(self).__name__}")
            self._http_client = httpx.Client(
                base_url=endpoint,
                transport=self.config.get("transport"),
                timeout=self.config.get("timeout", DEFAULT_TIMEOUT),
                headers=self.config.get("headers"),
            )
        return self._http_client

    def close(self) -> None:
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} api_version={self.api_version}>"
