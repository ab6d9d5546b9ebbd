"""Exception taxonomy for versioned clients."""

from versioned_client_core.errors.exceptions import (
    DescriptionError,
    DescriptionLoadError,
    DuplicateServiceError,
    DuplicateVersionError,
    InvalidVersionKeyError,
    NoApplicableVersionError,
    NoVersionsRegisteredError,
    UnknownVersionError,
    UnsupportedDescriptionShapeError,
    VersionedClientError,
    VersionError,
)

__all__ = [
    "DescriptionError",
    "DescriptionLoadError",
    "DuplicateServiceError",
    "DuplicateVersionError",
    "InvalidVersionKeyError",
    "NoApplicableVersionError",
    "NoVersionsRegisteredError",
    "UnknownVersionError",
    "UnsupportedDescriptionShapeError",
    "VersionError",
    "VersionedClientError",
]
