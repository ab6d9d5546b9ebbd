"""Versioned Client Core - API version resolution for Python service clients.

This library decides which API version of a service to use and hands out one
client type per version:
- Layered version selection (request → service lock → global lock → latest)
- Lazy, memoized client types bound to normalized API descriptions
- Loading of normalized and legacy-format JSON API descriptions
- Plugins applied across every version of a service

Example:
    ```python
    from versioned_client_core import Config, ServiceRegistry

    config = Config()
    registry = ServiceRegistry(config)
    dynamodb = registry.define(
        "dynamodb",
        ["apis/dynamodb-2011-12-05.json", "apis/dynamodb-2012-08-10.json"],
    )

    # Newest version not after the global lock
    config["api_version"] = "2012-01-01"
    client = dynamodb.new_client(endpoint="https://dynamodb.example.com")
    client.api_version  # "2011-12-05"
    ```
"""

from versioned_client_core.client import BaseClient
from versioned_client_core.config import Config
from versioned_client_core.loader import ApiLoader
from versioned_client_core.model import ApiDescription, Operation
from versioned_client_core.service import ServiceDefinition, ServiceRegistry

__version__ = "0.1.0"

__all__ = [
    "ApiDescription",
    "ApiLoader",
    "BaseClient",
    "Config",
    "Operation",
    "ServiceDefinition",
    "ServiceRegistry",
    "__version__",
]
