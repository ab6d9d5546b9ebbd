"""Per-service registry of API description references keyed by version."""

import logging
import re
from threading import Lock

from versioned_client_core.errors.exceptions import DuplicateVersionError, InvalidVersionKeyError
from versioned_client_core.loader import DescriptionRef, is_description_ref

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_version(version: str) -> str:
    """Check that ``version`` is a ``YYYY-MM-DD`` key and return it."""
    if not isinstance(version, str) or not VERSION_PATTERN.match(version):
        raise InvalidVersionKeyError(f"API version must be in YYYY-MM-DD format, got {version!r}", version=version)
    return version


class VersionStore:
    """Map version keys to API description references for one service.

    Entries are never removed. Registering a reference that is not equal to
    the one already stored under a key raises DuplicateVersionError.
    Re-registering an equal reference (the same path, or an ApiDescription
    that compares equal field by field) is a no-op.
    """

    def __init__(self, identifier: str | None = None) -> None:
        self.identifier = identifier
        self._refs: dict[str, DescriptionRef] = {}
        self._lock = Lock()

    def add(self, version: str, ref: DescriptionRef) -> None:
        """Register ``ref`` under ``version``.

        Raises:
            InvalidVersionKeyError: If ``version`` is not ``YYYY-MM-DD``.
            DuplicateVersionError: If another reference is registered for ``version``.
            TypeError: If ``ref`` is not an ApiDescription or a path.
        """
        validate_version(version)
        if not is_description_ref(ref):
            raise TypeError(f"API must be an ApiDescription or a path, got {type(ref).__name__}")

        with self._lock:
            existing = self._refs.get(version)
            if existing is not None:
                if existing is ref or existing == ref:
                    return
                raise DuplicateVersionError(
                    f"API {version} is already registered for {self.identifier}",
                    version=version,
                    identifier=self.identifier,
                )
            self._refs[version] = ref

        logger.debug(f"Registered API {version} for {self.identifier}")

    def get(self, version: str) -> DescriptionRef | None:
        return self._refs.get(version)

    def versions(self) -> list[str]:
        """Return all registered versions in ascending order."""
        return sorted(self._refs)

    def __contains__(self, version: object) -> bool:
        return version in self._refs

    def __len__(self) -> int:
        return len(self._refs)
