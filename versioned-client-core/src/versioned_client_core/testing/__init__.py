"""Testing utilities for versioned clients.

This module provides factories for API description documents and objects,
so tests can register versions without shipping description files.

Example:
    ```python
    from versioned_client_core.testing import create_api, write_api_file


    def test_defaults_to_latest(tmp_path):
        service = ServiceDefinition("dynamodb")
        service.add_version("2011-12-05", create_api("2011-12-05"))
        service.add_version("2012-08-10", write_api_file(tmp_path, "2012-08-10"))
        assert service.default_version() == "2012-08-10"
    ```
"""

from versioned_client_core.testing.factories import (
    DEFAULT_OPERATIONS,
    create_api,
    create_api_dict,
    create_legacy_api_dict,
    write_api_file,
    write_legacy_api_file,
)

__all__ = [
    "DEFAULT_OPERATIONS",
    "create_api",
    "create_api_dict",
    "create_legacy_api_dict",
    "write_api_file",
    "write_legacy_api_file",
]
