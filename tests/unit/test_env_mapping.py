"""Tests for the environment variable layer."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from layerconf.config.env import (
    DEFAULT_APP_PREFIX,
    env_var_to_config_key,
    load_environment,
    parse_env_value,
)
from layerconf.config.store import ConfigStore
from layerconf.exceptions import InvalidEnvironmentKeyError

module_segments = st.lists(st.from_regex(r"[A-Z][A-Z0-9]{0,7}", fullmatch=True), min_size=1, max_size=4)
attribute_names = st.from_regex(r"[A-Za-z][A-Za-z0-9]{0,15}", fullmatch=True)
plain_names = st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,30}", fullmatch=True).filter(
    lambda name: not name.startswith(f"{DEFAULT_APP_PREFIX}_")
)


class TestEnvVarToConfigKey:
    def test_prefixed_variable_targets_module(self):
        assert env_var_to_config_key("ADAPT_AUTHORING_SERVER__PORT") == "adapt-authoring-server.PORT"

    def test_unprefixed_variable_passes_through(self):
        assert env_var_to_config_key("NODE_ENV") == "env.NODE_ENV"

    def test_attribute_case_is_preserved(self):
        assert (
            env_var_to_config_key("ADAPT_AUTHORING_MONGODB__connectionUri")
            == "adapt-authoring-mongodb.connectionUri"
        )

    def test_splits_on_first_separator_only(self):
        assert env_var_to_config_key("ADAPT_AUTHORING_X__a__b") == "adapt-authoring-x.a__b"

    def test_custom_prefix(self):
        assert env_var_to_config_key("MYAPP_CORE__dataDir", app_prefix="MYAPP") == "myapp-core.dataDir"
        assert env_var_to_config_key("ADAPT_AUTHORING_CORE__dataDir", app_prefix="MYAPP") == (
            "env.ADAPT_AUTHORING_CORE__dataDir"
        )

    def test_prefix_without_trailing_underscore_is_passthrough(self):
        assert env_var_to_config_key("ADAPT_AUTHORINGX__a") == "env.ADAPT_AUTHORINGX__a"

    @pytest.mark.parametrize("name", ["ADAPT_AUTHORING_SERVER", "ADAPT_AUTHORING_SERVER__"])
    def test_prefixed_variable_without_attribute_is_rejected(self, name):
        with pytest.raises(InvalidEnvironmentKeyError) as exc_info:
            env_var_to_config_key(name)

        assert exc_info.value.error_code == "INVALID_ENVIRONMENT_KEY"
        assert exc_info.value.details["name"] == name

    @given(plain_names)
    def test_any_unprefixed_name_maps_to_env_namespace(self, name):
        assert env_var_to_config_key(name) == f"env.{name}"

    @given(module_segments, attribute_names)
    def test_prefixed_names_map_to_hyphenated_module(self, segments, attribute):
        module_part = "_".join(segments)
        name = f"{DEFAULT_APP_PREFIX}_{module_part}__{attribute}"

        namespace, _, attr = env_var_to_config_key(name).rpartition(".")

        assert namespace == f"{DEFAULT_APP_PREFIX}_{module_part}".replace("_", "-").lower()
        assert attr == attribute


class TestParseEnvValue:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("8080", 8080),
            ("1.5", 1.5),
            ("true", True),
            ("null", None),
            ('{"a": 1}', {"a": 1}),
            ('["x", "y"]', ["x", "y"]),
            ("hello", "hello"),
            ("", ""),
            ("/var/data", "/var/data"),
        ],
    )
    def test_json_coercion_with_string_fallback(self, raw, expected):
        assert parse_env_value(raw) == expected


class TestLoadEnvironment:
    def setup_method(self):
        self.store = ConfigStore()

    def test_writes_module_and_passthrough_keys(self):
        written = load_environment(
            self.store,
            {"ADAPT_AUTHORING_SERVER__port": "5000", "HOME": "/home/app"},
        )

        assert written == 2
        assert self.store.get("adapt-authoring-server.port") == 5000
        assert self.store.get("env.HOME") == "/home/app"

    def test_invalid_names_are_skipped(self):
        written = load_environment(
            self.store,
            {"ADAPT_AUTHORING_SERVER": "x", "ADAPT_AUTHORING_SERVER__host": "localhost"},
        )

        assert written == 1
        assert list(self.store.keys()) == ["adapt-authoring-server.host"]

    def test_existing_immutable_values_are_not_overwritten(self):
        self.store.set("adapt-authoring-server.port", 80)

        written = load_environment(self.store, {"ADAPT_AUTHORING_SERVER__port": "5000"})

        assert written == 0
        assert self.store.get("adapt-authoring-server.port") == 80

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("LAYERCONF_TEST_MARKER", "present")

        load_environment(self.store)

        assert self.store.get("env.LAYERCONF_TEST_MARKER") == "present"
