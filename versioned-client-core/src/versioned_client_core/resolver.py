"""API version selection.

The version for a construction request is chosen by the first matching rule:

1. An explicitly requested version, used verbatim.
2. The per-service configured ``api_version``, used verbatim.
3. The global ``api_version`` lock, clamped to the newest registered version
   that does not exceed it. A lock older than every registered version is
   used verbatim and fails later as an unknown version.
4. The latest registered version.

Version keys are zero-padded ``YYYY-MM-DD`` dates, so plain string comparison
is chronological.
"""

import logging
from collections.abc import Sequence

from versioned_client_core.config import Config
from versioned_client_core.errors.exceptions import NoApplicableVersionError

logger = logging.getLogger(__name__)


class VersionResolver:
    """Resolve the effective API version for a service."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def configured_version(self, identifier: str) -> str | None:
        """Return the per-service locked version, if any."""
        return self.config.service_api_version(identifier)

    def globally_locked_version(self, versions: Sequence[str]) -> str | None:
        """Clamp the global version lock to the registered versions.

        Args:
            versions: Registered version keys.

        Returns:
            The newest version not exceeding the global lock, the lock itself
            when it predates every version, or None when no lock is set.
        """
        global_version = self.config.api_version
        if global_version is None:
            return None
        candidates = [v for v in versions if v <= global_version]
        return max(candidates) if candidates else global_version

    def resolve(self, identifier: str, versions: Sequence[str], requested_version: str | None = None) -> str:
        """Return the API version to construct.

        Args:
            identifier: Service identifier used for per-service configuration.
            versions: Registered version keys (any order).
            requested_version: Explicit request-time version.

        Raises:
            NoApplicableVersionError: If no rule yields a version.
        """
        if requested_version is not None:
            version, source = requested_version, "explicit request"
        elif (configured := self.configured_version(identifier)) is not None:
            version, source = configured, "service configuration"
        elif (locked := self.globally_locked_version(versions)) is not None:
            version, source = locked, "global version lock"
        elif versions:
            version, source = max(versions), "latest registered version"
        else:
            raise NoApplicableVersionError(f"No API versions available for {identifier}", identifier=identifier)

        logger.debug(f"Resolved {identifier} API version {version} from {source}")
        return version
