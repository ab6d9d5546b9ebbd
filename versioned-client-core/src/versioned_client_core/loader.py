"""Loading of API descriptions from registered references.

A reference is either an already-built ApiDescription (returned unchanged) or
a path to a JSON document on local storage. Documents with a top-level
``metadata`` object are normalized; documents carrying the legacy markers are
run through the ApiTranslator.

Example:
    ```python
    from versioned_client_core.loader import ApiLoader

    loader = ApiLoader()
    api = loader.load("~/apis/dynamodb-2012-08-10.json")
    api.version  # "2012-08-10"
    ```
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from versioned_client_core.errors.exceptions import DescriptionLoadError, UnsupportedDescriptionShapeError
from versioned_client_core.model import METADATA_KEY, ApiDescription
from versioned_client_core.translator import ApiTranslator, is_legacy

logger = logging.getLogger(__name__)

DescriptionRef = ApiDescription | str | os.PathLike


def is_description_ref(ref: Any) -> bool:
    """Return True if ``ref`` is a supported description reference."""
    return isinstance(ref, (ApiDescription, str, os.PathLike))


def expand_path(ref: str | os.PathLike) -> Path:
    """Expand ``~`` and ``$VAR`` in a path reference."""
    return Path(os.path.expanduser(os.path.expandvars(os.fspath(ref))))


class ApiLoader:
    """Realize API descriptions from references.

    Args:
        documentation: Keep documentation when translating legacy documents.
        errors: Keep error catalogs when translating legacy documents.
    """

    def __init__(self, *, documentation: bool = False, errors: bool = False) -> None:
        self.documentation = documentation
        self.errors = errors

    def load(self, ref: DescriptionRef) -> ApiDescription:
        """Load the description behind ``ref``.

        Args:
            ref: ApiDescription instance or path to a JSON document.

        Returns:
            Normalized ApiDescription.

        Raises:
            DescriptionLoadError: If the document cannot be read or parsed.
            UnsupportedDescriptionShapeError: If the document is neither
                normalized nor legacy format.
        """
        if isinstance(ref, ApiDescription):
            return ref

        if not isinstance(ref, (str, os.PathLike)):
            raise UnsupportedDescriptionShapeError(
                f"Unsupported API description reference type: {type(ref).__name__}", ref=ref
            )

        data = self._read(ref)

        try:
            if isinstance(data, dict) and METADATA_KEY in data:
                api = ApiDescription.from_dict(data)
            elif is_legacy(data):
                api = ApiTranslator.translate(data, documentation=self.documentation, errors=self.errors)
            else:
                raise UnsupportedDescriptionShapeError(
                    f"API description {ref} is neither normalized nor legacy format", ref=ref
                )
        except UnsupportedDescriptionShapeError as e:
            if e.ref is None:
                e.ref = ref
            raise

        logger.debug(f"Loaded API description {api.version} from {ref}")
        return api

    def _read(self, ref: str | os.PathLike) -> Any:
        path = expand_path(ref)

        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise DescriptionLoadError(f"API description not found: {path}", ref=ref) from None
        except PermissionError:
            raise DescriptionLoadError(f"Permission denied reading API description: {path}", ref=ref) from None
        except (OSError, UnicodeDecodeError) as e:
            raise DescriptionLoadError(f"Error reading API description {path}: {e}", ref=ref) from e

        try:
            return json.loads(content)
        except ValueError as e:
            raise DescriptionLoadError(f"Invalid JSON in API description {path}: {e}", ref=ref) from e
