"""Tests for ConfigManager layering."""

from pathlib import Path

import pytest

from layerconf.config import ConfigManager, ResolverSettings
from layerconf.exceptions import AggregateResolutionError, ConfigurationError, SourceSyntaxError


class TestLayerPrecedence:
    def test_schema_default_when_no_other_layer(self, settings, write_schema):
        module = write_schema("adapt-authoring-server", {"port": {"type": "number", "default": 5000}})
        manager = ConfigManager(settings, environ={})

        manager.initialize_sync([module])

        assert manager.get("adapt-authoring-server.port") == 5000

    def test_environment_overrides_schema_default(self, settings, write_schema):
        module = write_schema("adapt-authoring-server", {"port": {"type": "number", "default": 5000}})
        manager = ConfigManager(settings, environ={"ADAPT_AUTHORING_SERVER__port": "8000"})

        manager.initialize_sync([module])

        assert manager.get("adapt-authoring-server.port") == 8000

    def test_override_file_beats_environment(self, settings, write_schema, write_override):
        module = write_schema("adapt-authoring-server", {"port": {"type": "number", "default": 5000}})
        write_override({"adapt-authoring-server": {"port": 9000}})
        manager = ConfigManager(settings, environ={"ADAPT_AUTHORING_SERVER__port": "8000"})

        manager.initialize_sync([module])

        assert manager.get("adapt-authoring-server.port") == 9000

    def test_environment_passthrough(self, settings):
        manager = ConfigManager(settings, environ={"HOME": "/home/app"})

        manager.initialize_sync([])

        assert manager.get("env.HOME") == "/home/app"

    def test_override_file_for_other_environment_is_ignored(self, settings, write_schema, write_override):
        module = write_schema("server", {"port": {"type": "number", "default": 5000}})
        write_override({"server": {"port": 1}}, environment="production")
        manager = ConfigManager(settings, environ={})

        manager.initialize_sync([module])

        assert manager.get("server.port") == 5000

    def test_explicit_config_file(self, app_root, write_schema, tmp_path):
        module = write_schema("server", {"port": {"type": "number", "default": 5000}})
        explicit = tmp_path / "custom.json"
        explicit.write_text('{"server": {"port": 7000}}')
        settings = ResolverSettings(root_dir=app_root, environment="testing", config_file=explicit)
        manager = ConfigManager(settings, environ={})

        manager.initialize_sync([module])

        assert manager.user_config_path == explicit
        assert manager.get("server.port") == 7000


class TestConfigManager:
    def test_public_and_mutable_attribute_flow(self, settings, write_schema, write_override):
        module = write_schema(
            "mymodule",
            {"debug": {"type": "boolean", "default": False, "isPublic": True, "isMutable": True}},
        )
        write_override({"mymodule": {"debug": True}})
        manager = ConfigManager(settings, environ={})

        manager.initialize_sync([module])

        assert manager.public_config() == {"mymodule.debug": True}
        assert manager.set("mymodule.debug", False) is True
        assert manager.get("mymodule.debug") is False

    def test_immutable_attribute_rejects_unforced_write(self, settings, write_schema):
        module = write_schema("mymodule", {"timeout": {"type": "number", "default": 30}})
        manager = ConfigManager(settings, environ={})
        manager.initialize_sync([module])

        assert manager.set("mymodule.timeout", 60) is False
        assert manager.get("mymodule.timeout") == 30

    def test_root_token_expands_to_application_root(self, settings, app_root, write_schema):
        module = write_schema(
            "uploads", {"dir": {"type": "string", "isDirectory": True, "default": "$ROOT/uploads"}}
        )
        manager = ConfigManager(settings, environ={})

        manager.initialize_sync([module])

        assert manager.get("uploads.dir") == str(app_root.resolve() / "uploads")

    def test_data_token_comes_from_core_module(self, app_root, write_schema):
        core = write_schema("core", {"dataDir": {"type": "string", "default": "/srv/data"}})
        assets = write_schema(
            "assets", {"dir": {"type": "string", "isDirectory": True, "default": "$DATA/assets"}}
        )
        settings = ResolverSettings(root_dir=app_root, environment="testing", core_module="core")
        manager = ConfigManager(settings, environ={})

        manager.initialize_sync([assets, core])

        assert manager.get("assets.dir") == "/srv/data/assets"

    def test_validation_failure_is_aggregated(self, settings, write_schema):
        module = write_schema("mymodule", {"apiKey": {"type": "string"}}, required=["apiKey"])
        manager = ConfigManager(settings, environ={})

        with pytest.raises(AggregateResolutionError) as exc_info:
            manager.initialize_sync([module])

        assert "'testing' environment" in str(exc_info.value)
        assert "mymodule.apiKey" in str(exc_info.value)

    def test_malformed_override_file_is_fatal(self, settings, app_root):
        (app_root / "conf" / "testing.config.yaml").write_text("server: [oops\n")
        manager = ConfigManager(settings, environ={})

        with pytest.raises(SourceSyntaxError):
            manager.initialize_sync([])

    def test_initialize_only_once(self, settings):
        manager = ConfigManager(settings, environ={})
        manager.initialize_sync([])

        with pytest.raises(ConfigurationError) as exc_info:
            manager.initialize_sync([])

        assert exc_info.value.error_code == "ALREADY_INITIALIZED"

    @pytest.mark.asyncio
    async def test_async_initialize(self, settings, write_schema):
        module = write_schema("mymodule", {"timeout": {"type": "number", "default": 30}})
        manager = ConfigManager(settings, environ={})

        result = await manager.initialize([module])

        assert result.processed == ["mymodule"]
        assert manager.get_config_dict() == {"mymodule": {"timeout": 30}}

    def test_user_config_path_follows_environment(self, settings, app_root):
        manager = ConfigManager(settings, environ={})

        assert manager.user_config_path == app_root / "conf" / "testing.config.yaml"
        assert "testing" in repr(manager)


class TestResolverSettings:
    def test_reads_prefixed_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LAYERCONF_CORE_MODULE", "adapt-authoring-core")
        monkeypatch.setenv("LAYERCONF_ROOT_DIR", str(tmp_path))

        settings = ResolverSettings()

        assert settings.core_module == "adapt-authoring-core"
        assert settings.conf_path == Path(tmp_path) / "conf"

    def test_environment_falls_back_to_node_env(self, monkeypatch):
        monkeypatch.delenv("LAYERCONF_ENVIRONMENT", raising=False)
        monkeypatch.setenv("NODE_ENV", "production")

        assert ResolverSettings().environment == "production"

    def test_invalid_log_level_is_rejected(self):
        with pytest.raises(ValueError):
            ResolverSettings(log_level="LOUD")
