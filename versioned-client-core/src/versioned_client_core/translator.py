"""Translation of legacy-format API descriptions into normalized form.

Legacy descriptions use snake_case metadata at the top level, inline
input/output structures on each operation and an embedded error catalog:

    {
        "api_version": "2011-12-05",
        "endpoint_prefix": "dynamodb",
        "type": "json",
        "operations": {
            "GetItem": {
                "name": "GetItem",
                "http": {"method": "POST", "uri": "/"},
                "input": {"type": "structure", "members": {...}},
                "output": {"type": "structure", "members": {...}},
                "errors": [{"shape_name": "ResourceNotFoundException", ...}],
                "documentation": "..."
            }
        }
    }

Translation hoists the inline structures into named shapes. Documentation and
error catalog entries are dropped unless explicitly requested.

Example:
    ```python
    from versioned_client_core.translator import ApiTranslator

    api = ApiTranslator.translate(legacy_src, documentation=False, errors=False)
    ```
"""

import logging
from typing import Any

from versioned_client_core.errors.exceptions import UnsupportedDescriptionShapeError
from versioned_client_core.model import ApiDescription, Operation

logger = logging.getLogger(__name__)

# Keys whose presence identifies a legacy-format description
LEGACY_MARKERS: frozenset[str] = frozenset(["api_version", "operations"])

METADATA_KEYS: dict[str, str] = {
    "api_version": "apiVersion",
    "endpoint_prefix": "endpointPrefix",
    "global_endpoint": "globalEndpoint",
    "json_version": "jsonVersion",
    "service_abbreviation": "serviceAbbreviation",
    "service_full_name": "serviceFullName",
    "signature_version": "signatureVersion",
    "target_prefix": "targetPrefix",
    "timestamp_format": "timestampFormat",
    "type": "protocol",
    "xmlnamespace": "xmlNamespace",
}

# Top-level legacy keys that are not metadata
STRUCTURE_KEYS: frozenset[str] = frozenset(["operations", "documentation", "pagination"])


def is_legacy(data: Any) -> bool:
    """Return True if ``data`` looks like a legacy-format description."""
    return isinstance(data, dict) and LEGACY_MARKERS.issubset(data)


class ApiTranslator:
    """Translate a legacy description into an ApiDescription.

    Args:
        legacy: Parsed legacy description.
        documentation: Keep documentation strings (default: False).
        errors: Keep the error catalog as shapes (default: False).
    """

    def __init__(self, legacy: dict[str, Any], *, documentation: bool = False, errors: bool = False) -> None:
        if not is_legacy(legacy):
            raise UnsupportedDescriptionShapeError(
                "Legacy API description requires 'api_version' and 'operations'"
            )
        self._legacy = legacy
        self.documentation = documentation
        self.errors = errors
        self._shapes: dict[str, dict[str, Any]] = {}

    @classmethod
    def translate(
        cls, legacy: dict[str, Any], *, documentation: bool = False, errors: bool = False
    ) -> ApiDescription:
        """Translate ``legacy`` in one call."""
        return cls(legacy, documentation=documentation, errors=errors).to_api()

    def to_api(self) -> ApiDescription:
        self._shapes = {}
        metadata = self._translate_metadata()
        operations = {}
        for name, src in self._iter_operations():
            operations[name] = self._translate_operation(name, src)

        logger.debug(
            f"Translated legacy API {metadata['apiVersion']} "
            f"({len(operations)} operations, {len(self._shapes)} shapes)"
        )

        return ApiDescription(
            metadata=metadata,
            operations=operations,
            shapes=self._shapes,
            documentation=self._legacy.get("documentation") if self.documentation else None,
        )

    def _translate_metadata(self) -> dict[str, Any]:
        metadata = {}
        for key, value in self._legacy.items():
            if key in STRUCTURE_KEYS:
                continue
            metadata[METADATA_KEYS.get(key, key)] = value
        return metadata

    def _iter_operations(self):
        operations = self._legacy["operations"]
        if isinstance(operations, dict):
            for name, src in operations.items():
                yield src.get("name", name) if isinstance(src, dict) else name, src
        elif isinstance(operations, list):
            for src in operations:
                if not isinstance(src, dict) or "name" not in src:
                    raise UnsupportedDescriptionShapeError("Legacy operation list entries require a 'name'")
                yield src["name"], src
        else:
            raise UnsupportedDescriptionShapeError("Legacy 'operations' must be an object or a list")

    def _translate_operation(self, name: str, src: dict[str, Any]) -> Operation:
        if not isinstance(src, dict):
            raise UnsupportedDescriptionShapeError(f"Legacy operation {name!r} must be an object")

        http = src.get("http") or {}
        if not isinstance(http, dict):
            raise UnsupportedDescriptionShapeError(f"Legacy operation {name!r} 'http' must be an object")

        errors = src.get("errors") or []
        if not isinstance(errors, list):
            raise UnsupportedDescriptionShapeError(f"Legacy operation {name!r} 'errors' must be a list")

        error_names: list[str] = []
        if self.errors:
            for error in errors:
                shape_name = error.get("shape_name") if isinstance(error, dict) else None
                if shape_name:
                    self._add_shape(shape_name, error)
                    error_names.append(shape_name)

        return Operation(
            name=name,
            http_method=http.get("method"),
            request_uri=http.get("uri"),
            input=self._hoist(f"{name}Request", src.get("input")),
            output=self._hoist(f"{name}Response", src.get("output")),
            errors=tuple(error_names),
            documentation=src.get("documentation") if self.documentation else None,
        )

    def _hoist(self, shape_name: str, structure: Any) -> str | None:
        """Register an inline structure as a named shape."""
        if not isinstance(structure, dict):
            return None
        self._add_shape(shape_name, structure)
        return shape_name

    def _add_shape(self, shape_name: str, structure: dict[str, Any]) -> None:
        shape = {k: v for k, v in structure.items() if k != "shape_name"}
        if not self.documentation:
            shape = _strip_documentation(shape)
        self._shapes[shape_name] = shape


def _strip_documentation(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _strip_documentation(v) for k, v in value.items() if k != "documentation"}
    if isinstance(value, list):
        return [_strip_documentation(item) for item in value]
    return value
