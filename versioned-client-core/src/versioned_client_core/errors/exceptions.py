"""Structured exceptions for version resolution and API description loading."""


class VersionedClientError(Exception):
    """Base exception for all versioned client errors."""

    pass


class DuplicateServiceError(VersionedClientError):
    """Raised when a service identifier is defined twice in one registry."""

    def __init__(self, message: str, identifier: str | None = None):
        super().__init__(message)
        self.identifier = identifier


class VersionError(VersionedClientError):
    """Base exception for API version selection and registration errors."""

    def __init__(self, message: str, version: str | None = None, identifier: str | None = None):
        super().__init__(message)
        self.version = version
        self.identifier = identifier


class NoApplicableVersionError(VersionError):
    """No version requested, configured or registered."""

    pass


class NoVersionsRegisteredError(VersionError):
    """The service has no registered API versions."""

    pass


class UnknownVersionError(VersionError):
    """The resolved version has no registered API description."""

    pass


class DuplicateVersionError(VersionError):
    """A different API description is already registered under this version."""

    pass


class InvalidVersionKeyError(VersionError, ValueError):
    """Version key is not a zero-padded ``YYYY-MM-DD`` date."""

    pass


class DescriptionError(VersionedClientError):
    """Base exception for API description errors.

    Attributes:
        ref: The description reference (usually a path) being loaded.
    """

    def __init__(self, message: str, ref: object = None):
        super().__init__(message)
        self.ref = ref


class DescriptionLoadError(DescriptionError):
    """Raised when a description file cannot be read or parsed."""

    pass


class UnsupportedDescriptionShapeError(DescriptionError):
    """Raised when a description is neither normalized nor legacy format."""

    pass
