"""Normalized API description models."""

from dataclasses import dataclass, field
from typing import Any

from versioned_client_core.errors.exceptions import UnsupportedDescriptionShapeError

# Top-level key that marks a document as already normalized
METADATA_KEY = "metadata"


@dataclass(frozen=True)
class Operation:
    """A single API operation."""

    name: str
    http_method: str | None = None  # e.g. "POST"
    request_uri: str | None = None  # e.g. "/{Bucket}"
    input: str | None = None  # Input shape name
    output: str | None = None  # Output shape name
    errors: tuple[str, ...] = ()  # Error shape names
    documentation: str | None = None

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "Operation":
        """Build an operation from its normalized JSON structure.

        Args:
            name: Operation name (the key in the ``operations`` object).
            data: Normalized operation structure.

        Returns:
            Operation instance.
        """
        if not isinstance(data, dict):
            raise UnsupportedDescriptionShapeError(f"Operation {name!r} must be an object, got {type(data).__name__}")

        http = data.get("http") or {}
        if not isinstance(http, dict):
            raise UnsupportedDescriptionShapeError(f"Operation {name!r} 'http' must be an object")

        errors = data.get("errors") or []
        if not isinstance(errors, list):
            raise UnsupportedDescriptionShapeError(f"Operation {name!r} 'errors' must be a list")

        return cls(
            name=data.get("name", name),
            http_method=http.get("method"),
            request_uri=http.get("requestUri"),
            input=_shape_ref(data.get("input")),
            output=_shape_ref(data.get("output")),
            errors=tuple(ref for ref in (_shape_ref(error) for error in errors) if ref),
            documentation=data.get("documentation"),
        )


@dataclass(frozen=True)
class ApiDescription:
    """Normalized description of one API version of a service.

    The description is what a client type is bound to: the service metadata,
    the operations it exposes and the shapes those operations reference.
    """

    metadata: dict[str, Any]
    operations: dict[str, Operation] = field(default_factory=dict)
    shapes: dict[str, dict[str, Any]] = field(default_factory=dict)
    documentation: str | None = None

    def __post_init__(self) -> None:
        version = self.metadata.get("apiVersion")
        if not isinstance(version, str) or not version:
            raise UnsupportedDescriptionShapeError("API description metadata is missing 'apiVersion'")

    @property
    def version(self) -> str:
        """API version in ``YYYY-MM-DD`` format."""
        return self.metadata["apiVersion"]

    @property
    def endpoint_prefix(self) -> str | None:
        return self.metadata.get("endpointPrefix")

    def operation_names(self) -> list[str]:
        """Return the names of all defined operations, sorted."""
        return sorted(self.operations)

    def operation(self, name: str) -> Operation:
        """Return an operation by name.

        Raises:
            KeyError: If the operation is not defined.
        """
        return self.operations[name]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApiDescription":
        """Build a description from its normalized JSON structure.

        Args:
            data: Parsed document with a top-level ``metadata`` object.

        Returns:
            ApiDescription instance.

        Raises:
            UnsupportedDescriptionShapeError: If the structure is malformed.
        """
        if not isinstance(data, dict) or not isinstance(data.get(METADATA_KEY), dict):
            raise UnsupportedDescriptionShapeError("Normalized API description requires a 'metadata' object")

        operations = data.get("operations", {})
        if not isinstance(operations, dict):
            raise UnsupportedDescriptionShapeError("'operations' must be an object keyed by operation name")

        shapes = data.get("shapes", {})
        if not isinstance(shapes, dict):
            raise UnsupportedDescriptionShapeError("'shapes' must be an object keyed by shape name")

        return cls(
            metadata=dict(data[METADATA_KEY]),
            operations={name: Operation.from_dict(name, op) for name, op in operations.items()},
            shapes=dict(shapes),
            documentation=data.get("documentation"),
        )


def _shape_ref(ref: Any) -> str | None:
    """Extract a shape name from a ``{"shape": name}`` reference."""
    if isinstance(ref, dict):
        return ref.get("shape")
    if isinstance(ref, str):
        return ref
    return None
