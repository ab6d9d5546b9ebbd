"""Tests for service definitions and the service registry."""

import threading
import time
from pathlib import Path

import pytest

from versioned_client_core.client import BaseClient
from versioned_client_core.errors import (
    DescriptionLoadError,
    DuplicateServiceError,
    DuplicateVersionError,
    InvalidVersionKeyError,
    NoApplicableVersionError,
    NoVersionsRegisteredError,
    UnknownVersionError,
)
from versioned_client_core.service import ServiceDefinition, ServiceRegistry, version_from_ref
from versioned_client_core.testing import create_api, write_api_file, write_legacy_api_file


class TestVersions:
    """Test version registration and enumeration."""

    def test_versions_sorted(self, config):
        service = ServiceDefinition("dynamodb", config)
        service.add_version("2012-08-10", create_api("2012-08-10"))
        service.add_version("2011-12-05", create_api("2011-12-05"))

        assert service.versions() == ["2011-12-05", "2012-08-10"]

    @pytest.mark.parametrize(
        "versions",
        [["2012-08-10"], ["2011-12-05", "2012-08-10"], ["2013-01-01", "2009-06-30", "2011-02-28"]],
    )
    def test_latest_version_is_maximum(self, config, versions):
        service = ServiceDefinition.define("dynamodb", [create_api(v) for v in versions], config)

        assert service.latest_version() == max(versions)

    def test_latest_version_empty_raises(self, config):
        with pytest.raises(NoVersionsRegisteredError):
            ServiceDefinition("dynamodb", config).latest_version()

    def test_default_version_empty_raises(self, config):
        with pytest.raises(NoApplicableVersionError):
            ServiceDefinition("dynamodb", config).default_version()

    def test_duplicate_version_raises(self, dynamodb):
        """Test that a different description under a registered version is rejected."""
        with pytest.raises(DuplicateVersionError):
            dynamodb.add_version("2012-08-10", create_api("2012-08-10", ["Query"]))

    def test_equal_description_reregistration_is_noop(self, dynamodb):
        """Test that an equal description under a registered version is accepted."""
        dynamodb.add_version("2012-08-10", create_api("2012-08-10"))

        assert dynamodb.versions() == ["2011-12-05", "2012-08-10"]

    def test_define_from_paths(self, config, tmp_path):
        """Test that define() derives versions from description file names."""
        service = ServiceDefinition.define(
            "dynamodb",
            [write_api_file(tmp_path, "2012-08-10"), str(write_legacy_api_file(tmp_path, "2011-12-05"))],
            config,
        )

        assert service.versions() == ["2011-12-05", "2012-08-10"]
        assert service.new_client(api_version="2011-12-05").api_version == "2011-12-05"

    def test_version_from_ref(self):
        assert version_from_ref(create_api("2012-08-10")) == "2012-08-10"
        assert version_from_ref("apis/dynamodb-2011-12-05.json") == "2011-12-05"

    def test_version_from_ref_directory_name(self):
        """Test that a date in a directory name is found."""
        assert version_from_ref("apis/2012-08-10/dynamodb.json") == "2012-08-10"
        assert version_from_ref(Path("apis") / "2011-12-05" / "dynamodb.json") == "2011-12-05"

    def test_version_from_ref_first_date_wins(self):
        assert version_from_ref("apis/2013-01-01/api-2012-08-10.json") == "2013-01-01"

    def test_version_from_ref_without_date(self):
        with pytest.raises(InvalidVersionKeyError):
            version_from_ref("apis/dynamodb.json")


class TestDefaultVersion:
    """End-to-end version selection."""

    def test_latest_when_unconfigured(self, dynamodb):
        assert dynamodb.default_version() == "2012-08-10"

    def test_service_lock(self, dynamodb, config):
        config["dynamodb"] = {"api_version": "2011-12-05"}

        assert dynamodb.default_version() == "2011-12-05"

    def test_global_lock_clamps(self, dynamodb, config):
        config["api_version"] = "2012-01-01"

        assert dynamodb.default_version() == "2011-12-05"

    def test_global_lock_before_all_versions_fails_at_construction(self, dynamodb, config):
        config["api_version"] = "2010-01-01"

        assert dynamodb.default_version() == "2010-01-01"
        with pytest.raises(UnknownVersionError) as exc_info:
            dynamodb.new_client()
        assert exc_info.value.version == "2010-01-01"


class TestNewClient:
    """Test client construction."""

    def test_defaults_to_latest(self, dynamodb):
        client = dynamodb.new_client()

        assert isinstance(client, BaseClient)
        assert client.api_version == "2012-08-10"
        assert type(client).__qualname__ == "dynamodb.V20120810"

    def test_explicit_version(self, dynamodb, config):
        config["api_version"] = "2013-01-01"
        config["dynamodb"] = {"api_version": "2012-08-10"}

        client = dynamodb.new_client(api_version="2011-12-05")

        assert client.api_version == "2011-12-05"
        assert client.config["api_version"] == "2011-12-05"

    def test_unknown_explicit_version(self, dynamodb):
        with pytest.raises(UnknownVersionError):
            dynamodb.new_client(api_version="2099-01-01")

    def test_service_defaults_merged_options_win(self, dynamodb, config):
        config["dynamodb"] = {"region": "us-east-1", "endpoint": "https://default.example.com"}

        client = dynamodb.new_client(endpoint="https://override.example.com")

        assert client.config == {
            "region": "us-east-1",
            "endpoint": "https://override.example.com",
            "api_version": "2012-08-10",
        }

    def test_clients_share_type_per_version(self, dynamodb):
        assert type(dynamodb.new_client()) is type(dynamodb.new_client())
        assert dynamodb.client_type() is dynamodb.client_type("2012-08-10")

    def test_failed_build_leaves_state_intact(self, config, tmp_path, plugin_factory):
        service = ServiceDefinition("dynamodb", config)
        service.add_version("2012-08-10", tmp_path / "api-2012-08-10.json")
        plugin = plugin_factory("a")
        service._plugins.append(plugin)

        with pytest.raises(DescriptionLoadError):
            service.new_client()

        assert service.versions() == ["2012-08-10"]
        assert service.plugins() == (plugin,)

        write_api_file(tmp_path, "2012-08-10")
        assert service.new_client().config["plugin_order"] == ["a"]


class TestPlugins:
    """Test plugins across versioned client types."""

    def test_add_plugin_materializes_all_versions(self, dynamodb, plugin_factory):
        plugin = plugin_factory("a")

        dynamodb.add_plugin(plugin)

        client_types = dynamodb.versioned_clients()
        assert [ct.api.version for ct in client_types] == ["2011-12-05", "2012-08-10"]
        assert all(ct.plugins() == (plugin,) for ct in client_types)
        assert dynamodb._factory.materialized() == ["2011-12-05", "2012-08-10"]

    def test_plugin_applies_to_previously_built_type(self, dynamodb, plugin_factory):
        built = dynamodb.client_type("2011-12-05")
        plugin = plugin_factory("a")

        dynamodb.add_plugin(plugin)

        assert built.plugins() == (plugin,)

    def test_plugin_applies_to_versions_registered_later(self, dynamodb, plugin_factory):
        first, second = plugin_factory("first"), plugin_factory("second")
        dynamodb.add_plugin(first)
        dynamodb.add_plugin(second)

        dynamodb.add_version("2013-01-01", create_api("2013-01-01"))
        client = dynamodb.new_client()

        assert client.api_version == "2013-01-01"
        assert type(client).plugins() == (first, second)
        assert client.config["plugin_order"] == ["first", "second"]

    def test_add_plugin_twice_records_once(self, dynamodb, plugin_factory):
        plugin = plugin_factory("a")

        dynamodb.add_plugin(plugin)
        dynamodb.add_plugin(plugin)

        assert dynamodb.plugins() == (plugin,)
        assert dynamodb.client_type().plugins() == (plugin,)

    def test_remove_plugin(self, dynamodb, plugin_factory):
        keep, drop = plugin_factory("keep"), plugin_factory("drop")
        dynamodb.add_plugin(keep)
        dynamodb.add_plugin(drop)

        dynamodb.remove_plugin(drop)
        dynamodb.add_version("2013-01-01", create_api("2013-01-01"))

        assert dynamodb.plugins() == (keep,)
        for client_type in dynamodb.versioned_clients():
            assert client_type.plugins() == (keep,)

    def test_concurrent_add_plugin_keeps_recorded_order(self, dynamodb, plugin_factory, monkeypatch):
        """Test that built types are patched in the order plugins were recorded."""
        dynamodb.versioned_clients()
        slow, fast = plugin_factory("slow"), plugin_factory("fast")
        patch_built_types = dynamodb._factory.add_plugin
        slow_recorded = threading.Event()

        def add_plugin(plugin):
            if plugin is slow:
                slow_recorded.set()
                time.sleep(0.05)
            patch_built_types(plugin)

        monkeypatch.setattr(dynamodb._factory, "add_plugin", add_plugin)

        first = threading.Thread(target=dynamodb.add_plugin, args=(slow,))
        first.start()
        slow_recorded.wait()
        second = threading.Thread(target=dynamodb.add_plugin, args=(fast,))
        second.start()
        first.join()
        second.join()

        assert dynamodb.plugins() == (slow, fast)
        for client_type in dynamodb.versioned_clients():
            assert client_type.plugins() == (slow, fast)

    def test_add_plugin_failure_does_not_record(self, config, tmp_path, plugin_factory):
        """Test that a failed eager build leaves the plugin list unchanged."""
        service = ServiceDefinition("dynamodb", config)
        service.add_version("2012-08-10", tmp_path / "api-2012-08-10.json")

        with pytest.raises(DescriptionLoadError):
            service.add_plugin(plugin_factory("a"))

        assert service.plugins() == ()

    def test_services_do_not_share_plugins(self, config, plugin_factory):
        dynamodb = ServiceDefinition.define("dynamodb", [create_api("2012-08-10")], config)
        s3 = ServiceDefinition.define("s3", [create_api("2012-08-10")], config)

        dynamodb.add_plugin(plugin_factory("a"))

        assert s3.plugins() == ()
        assert s3.client_type().plugins() == ()
        assert s3.client_type() is not dynamodb.client_type()


class TestServiceRegistry:
    """Test the identifier -> service registry."""

    def test_define_and_lookup(self, config):
        registry = ServiceRegistry(config)

        service = registry.define("DynamoDB", [create_api("2012-08-10")])

        assert service.identifier == "dynamodb"
        assert registry["dynamodb"] is service
        assert registry.get("DYNAMODB") is service
        assert "DynamoDB" in registry
        assert "s3" not in registry
        assert registry.get("s3") is None
        assert len(registry) == 1

    def test_duplicate_identifier_raises(self, config):
        registry = ServiceRegistry(config)
        registry.define("dynamodb")

        with pytest.raises(DuplicateServiceError) as exc_info:
            registry.define("DynamoDB")

        assert exc_info.value.identifier == "dynamodb"

    def test_iteration_sorted(self, config):
        registry = ServiceRegistry(config)
        registry.define("s3")
        registry.define("dynamodb")

        assert registry.identifiers() == ["dynamodb", "s3"]
        assert [service.identifier for service in registry] == ["dynamodb", "s3"]

    def test_services_share_config(self, config):
        registry = ServiceRegistry(config)
        dynamodb = registry.define("dynamodb", [create_api("2011-12-05"), create_api("2012-08-10")])
        s3 = registry.define("s3", [create_api("2006-03-01"), create_api("2012-10-01")])

        config["api_version"] = "2012-09-01"

        assert dynamodb.default_version() == "2012-08-10"
        assert s3.default_version() == "2006-03-01"

    def test_registry_loader_used(self, config, tmp_path):
        from versioned_client_core.loader import ApiLoader

        registry = ServiceRegistry(config, loader=ApiLoader(documentation=True))
        service = registry.define("dynamodb", [write_legacy_api_file(tmp_path, "2011-12-05")])

        assert service.client_type().api.documentation == "<p>Example service.</p>"
