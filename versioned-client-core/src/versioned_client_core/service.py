"""Service definitions: versioned client construction for one service.

A ServiceDefinition owns the registered API versions of a service, the client
types built for them and the plugins attached to the service.

Example:
    ```python
    from versioned_client_core import Config, ServiceRegistry

    config = Config(load_dotenv=False)
    registry = ServiceRegistry(config)
    dynamodb = registry.define(
        "dynamodb",
        ["apis/dynamodb-2011-12-05.json", "apis/dynamodb-2012-08-10.json"],
    )

    dynamodb.new_client()
    #=> <dynamodb.V20120810 api_version=2012-08-10>

    dynamodb.new_client(api_version="2011-12-05")
    #=> <dynamodb.V20111205 api_version=2011-12-05>

    # Lock the service
    config["dynamodb"] = {"api_version": "2011-12-05"}

    # Or lock every service to the newest version not after a date
    config["api_version"] = "2012-10-01"
    ```
"""

import logging
import os
import re
from collections.abc import Iterable, Iterator
from threading import Lock
from typing import Any

from versioned_client_core.client import BaseClient
from versioned_client_core.config import API_VERSION_KEY, Config
from versioned_client_core.errors.exceptions import (
    DuplicateServiceError,
    InvalidVersionKeyError,
    NoVersionsRegisteredError,
)
from versioned_client_core.factory import ClientFactory
from versioned_client_core.loader import ApiLoader, DescriptionRef
from versioned_client_core.model import ApiDescription
from versioned_client_core.resolver import VersionResolver
from versioned_client_core.store import VersionStore

logger = logging.getLogger(__name__)

PATH_VERSION_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def version_from_ref(ref: DescriptionRef) -> str:
    """Derive the version key for a description reference.

    ApiDescription objects carry their own version; paths must contain a
    ``YYYY-MM-DD`` date in the file name or a directory name, e.g.
    ``apis/dynamodb-2012-08-10.json`` or ``apis/2012-08-10/dynamodb.json``.
    The first date in the path wins.
    """
    if isinstance(ref, ApiDescription):
        return ref.version
    match = PATH_VERSION_PATTERN.search(os.fspath(ref))
    if match is None:
        raise InvalidVersionKeyError(f"Cannot determine API version from path {ref}")
    return match.group(0)


class ServiceDefinition:
    """Versioned client constructor for one service.

    Args:
        identifier: Short lower-case service name, e.g. ``"dynamodb"``.
        config: Shared configuration consulted for version locks and
            per-service client defaults.
        loader: ApiLoader for description references.
        base_class: Client framework base class for built client types.
    """

    def __init__(
        self,
        identifier: str,
        config: Config | None = None,
        *,
        loader: ApiLoader | None = None,
        base_class: type[BaseClient] = BaseClient,
    ) -> None:
        self.identifier = identifier
        self.config = config if config is not None else Config(load_dotenv=False)
        self._store = VersionStore(identifier)
        self._resolver = VersionResolver(self.config)
        self._plugins: list[Any] = []
        self._plugins_lock = Lock()
        # Serializes add/remove so built types are patched in recorded order
        self._plugin_update_lock = Lock()
        self._factory = ClientFactory(
            self._store,
            plugins=self.plugins,
            loader=loader,
            base_class=base_class,
            identifier=identifier,
        )

    @classmethod
    def define(
        cls,
        identifier: str,
        apis: Iterable[DescriptionRef] = (),
        config: Config | None = None,
        **kwargs: Any,
    ) -> "ServiceDefinition":
        """Create a service and register each of ``apis``.

        Args:
            identifier: Service identifier.
            apis: ApiDescription objects or paths containing the
                ``YYYY-MM-DD`` version.
            config: Shared configuration.
            **kwargs: Passed to the constructor.
        """
        service = cls(identifier, config, **kwargs)
        for api in apis:
            service.add_version(version_from_ref(api), api)
        return service

    def add_version(self, api_version: str, api: DescriptionRef) -> None:
        """Register an API version.

        Args:
            api_version: Version in ``YYYY-MM-DD`` format.
            api: ApiDescription or path to a JSON description.

        Raises:
            InvalidVersionKeyError: If ``api_version`` is malformed.
            DuplicateVersionError: If a different API is already registered
                for ``api_version``.
        """
        self._store.add(api_version, api)

    def versions(self) -> list[str]:
        """Return registered API versions in ascending order."""
        return self._store.versions()

    def latest_version(self) -> str:
        """Return the newest registered API version.

        Raises:
            NoVersionsRegisteredError: If no versions are registered.
        """
        versions = self.versions()
        if not versions:
            raise NoVersionsRegisteredError(
                f"No API versions registered for {self.identifier}", identifier=self.identifier
            )
        return versions[-1]

    def default_version(self) -> str:
        """Return the version constructed when none is requested."""
        return self._resolver.resolve(self.identifier, self.versions())

    def service_defaults(self) -> dict[str, Any]:
        return self.config.service_defaults(self.identifier)

    def client_type(self, api_version: str | None = None) -> type[BaseClient]:
        """Return the client type for ``api_version`` (default version if None)."""
        version = self._resolver.resolve(self.identifier, self.versions(), api_version)
        return self._factory.client_type(version)

    def new_client(self, **options: Any) -> BaseClient:
        """Construct a client.

        The version comes from ``options["api_version"]``, then configuration,
        then the latest registered version. Per-service configuration values
        are used as defaults for ``options``.

        Raises:
            NoApplicableVersionError: If no version can be determined.
            UnknownVersionError: If the resolved version is not registered.
        """
        version = self._resolver.resolve(self.identifier, self.versions(), options.get(API_VERSION_KEY))
        client_type = self._factory.client_type(version)
        config = {**self.service_defaults(), **options}
        config[API_VERSION_KEY] = version
        return client_type(**config)

    def versioned_clients(self) -> list[type[BaseClient]]:
        """Return the client type of every registered version.

        Builds every client type that has not been built yet.
        """
        return [self._factory.client_type(version) for version in self.versions()]

    def plugins(self) -> tuple[Any, ...]:
        """Return the plugins attached to this service, in order."""
        with self._plugins_lock:
            return tuple(self._plugins)

    def add_plugin(self, plugin: Any) -> None:
        """Attach ``plugin`` to every client type of this service.

        Every registered version's client type is built first. Client types
        built later, including for versions registered later, receive the
        plugin too.
        """
        self.versioned_clients()
        with self._plugin_update_lock:
            with self._plugins_lock:
                if plugin not in self._plugins:
                    self._plugins.append(plugin)
            self._factory.add_plugin(plugin)
        logger.debug(f"Added plugin {plugin!r} to {self.identifier}")

    def remove_plugin(self, plugin: Any) -> None:
        """Detach ``plugin`` from every client type of this service."""
        self.versioned_clients()
        with self._plugin_update_lock:
            with self._plugins_lock:
                if plugin in self._plugins:
                    self._plugins.remove(plugin)
            self._factory.remove_plugin(plugin)
        logger.debug(f"Removed plugin {plugin!r} from {self.identifier}")

    def __repr__(self) -> str:
        return f"<ServiceDefinition {self.identifier} versions={self.versions()}>"


class ServiceRegistry:
    """Registry of service definitions keyed by identifier.

    Identifiers are case-insensitive and stored lower-case. Every definition
    owns its own versions, client types and plugins.
    """

    def __init__(self, config: Config | None = None, *, loader: ApiLoader | None = None) -> None:
        self.config = config if config is not None else Config()
        self.loader = loader
        self._services: dict[str, ServiceDefinition] = {}
        self._lock = Lock()

    def define(self, identifier: str, apis: Iterable[DescriptionRef] = (), **kwargs: Any) -> ServiceDefinition:
        """Define and register a new service.

        Raises:
            DuplicateServiceError: If ``identifier`` is already defined.
        """
        key = identifier.lower()
        kwargs.setdefault("loader", self.loader)
        service = ServiceDefinition.define(key, apis, self.config, **kwargs)

        with self._lock:
            if key in self._services:
                raise DuplicateServiceError(f"Service {key} is already defined", identifier=key)
            self._services[key] = service

        logger.debug(f"Defined service {key} with versions {service.versions()}")
        return service

    def get(self, identifier: str) -> ServiceDefinition | None:
        return self._services.get(identifier.lower())

    def identifiers(self) -> list[str]:
        return sorted(self._services)

    def __getitem__(self, identifier: str) -> ServiceDefinition:
        return self._services[identifier.lower()]

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and identifier.lower() in self._services

    def __iter__(self) -> Iterator[ServiceDefinition]:
        return iter([self._services[key] for key in sorted(self._services)])

    def __len__(self) -> int:
        return len(self._services)
