"""Memoized construction of one client type per API version.

Client types are built on first request, bound to the description the
ApiLoader realizes for that version, and cached for the lifetime of the
factory. Construction of a given version is serialized with a per-version
lock, so the loader runs at most once per version even under concurrent
requests. A failed build leaves nothing in the cache.
"""

import logging
from collections.abc import Callable, Sequence
from threading import Lock
from typing import Any

from versioned_client_core.client import BaseClient
from versioned_client_core.errors.exceptions import UnknownVersionError
from versioned_client_core.loader import ApiLoader
from versioned_client_core.store import VersionStore

logger = logging.getLogger(__name__)


class ClientFactory:
    """Build and cache client types for one service.

    Args:
        store: Registered description references for the service.
        plugins: Callable returning the plugins recorded for the service, in
            order. Every new client type receives all of them.
        loader: ApiLoader used to realize descriptions.
        base_class: Client framework base class.
        identifier: Service identifier, used in names and messages.
    """

    def __init__(
        self,
        store: VersionStore,
        *,
        plugins: Callable[[], Sequence[Any]] = tuple,
        loader: ApiLoader | None = None,
        base_class: type[BaseClient] = BaseClient,
        identifier: str | None = None,
    ) -> None:
        self.store = store
        self.loader = loader or ApiLoader()
        self.base_class = base_class
        self.identifier = identifier or store.identifier
        self._plugins = plugins
        self._client_types: dict[str, type[BaseClient]] = {}
        self._locks: dict[str, Lock] = {}
        self._locks_lock = Lock()

    def _lock_for(self, version: str) -> Lock:
        with self._locks_lock:
            lock = self._locks.get(version)
            if lock is None:
                lock = self._locks[version] = Lock()
            return lock

    def client_type(self, version: str) -> type[BaseClient]:
        """Return the client type for ``version``, building it if needed.

        Raises:
            UnknownVersionError: If ``version`` is not registered.
            DescriptionLoadError: If the description cannot be read.
            UnsupportedDescriptionShapeError: If the description is malformed.
        """
        if version not in self.store:
            raise UnknownVersionError(
                f"API {version} not defined for {self.identifier}",
                version=version,
                identifier=self.identifier,
            )

        client_type = self._client_types.get(version)
        if client_type is not None:
            return client_type

        with self._lock_for(version):
            # Double-check after acquiring the lock
            client_type = self._client_types.get(version)
            if client_type is not None:
                return client_type

            api = self.loader.load(self.store.get(version))
            client_type = self.base_class.define(api, name=self._class_name(version))
            if self.identifier:
                client_type.__qualname__ = f"{self.identifier}.{client_type.__name__}"
            for plugin in self._plugins():
                client_type.add_plugin(plugin)

            self._client_types[version] = client_type
            logger.debug(f"Built client type {client_type.__qualname__}")
            return client_type

    def _class_name(self, version: str) -> str:
        return f"V{version.replace('-', '')}"

    def cached(self, version: str) -> type[BaseClient] | None:
        """Return the cached client type for ``version`` without building it."""
        return self._client_types.get(version)

    def materialized(self) -> list[str]:
        """Return versions whose client types have been built, sorted."""
        return sorted(self._client_types)

    def add_plugin(self, plugin: Any) -> None:
        """Add ``plugin`` to every client type built so far.

        Holding each version's lock means a build in progress either finishes
        first (and is patched here) or has not yet read the plugin list.
        """
        for version in self.store.versions():
            with self._lock_for(version):
                client_type = self._client_types.get(version)
                if client_type is not None:
                    client_type.add_plugin(plugin)

    def remove_plugin(self, plugin: Any) -> None:
        """Remove ``plugin`` from every client type built so far."""
        for version in self.store.versions():
            with self._lock_for(version):
                client_type = self._client_types.get(version)
                if client_type is not None:
                    client_type.remove_plugin(plugin)
