"""Test basic package functionality."""

import versioned_client_core


def test_version():
    """Test that package version is defined."""
    assert hasattr(versioned_client_core, "__version__")
    assert versioned_client_core.__version__ == "0.1.0"


def test_public_exports():
    """Test that the composition root is importable from the package."""
    assert versioned_client_core.ServiceRegistry is not None
    assert versioned_client_core.ServiceDefinition is not None
    assert "Config" in versioned_client_core.__all__
