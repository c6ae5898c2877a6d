"""Tests for the configuration error hierarchy."""

from layerconf.config.models import IssueKind, ValidationIssue
from layerconf.exceptions import (
    AggregateResolutionError,
    ConfigurationError,
    SchemaSyntaxError,
    SourceError,
    ValidationFailure,
)


def _failure(module, *attributes):
    return ValidationFailure(
        [ValidationIssue(attr, IssueKind.MISSING, "missing required value") for attr in attributes]
    ).with_module(module)


class TestValidationFailure:
    def test_with_module_rebuilds_message(self):
        failure = ValidationFailure([ValidationIssue("port", IssueKind.TYPE, "should be number (got str)")])
        assert str(failure) == "configuration is invalid: port: should be number (got str)"

        failure.with_module("server")

        assert str(failure) == "'server' configuration is invalid: server.port: should be number (got str)"
        assert failure.details["module"] == "server"
        assert failure.details["issues"][0]["kind"] == "type"


class TestAggregateResolutionError:
    def test_message_lists_every_attribute(self):
        error = AggregateResolutionError(
            [_failure("server", "host", "port"), _failure("mailer", "from")], "production"
        )

        assert str(error).splitlines() == [
            "The following settings for the 'production' environment failed validation:",
            " - server.host: missing required value",
            " - server.port: missing required value",
            " - mailer.from: missing required value",
        ]
        assert error.modules == ["server", "mailer"]

    def test_to_dict(self):
        error = AggregateResolutionError([_failure("server", "host")])

        payload = error.to_dict()

        assert payload["error_code"] == "AGGREGATE_RESOLUTION_ERROR"
        assert payload["details"]["modules"] == ["server"]
        assert isinstance(error, ConfigurationError)


def test_schema_syntax_error_is_a_source_error(tmp_path):
    error = SchemaSyntaxError(tmp_path / "s.json", "Invalid JSON", module="server")

    assert isinstance(error, SourceError)
    assert error.details == {"path": str(tmp_path / "s.json"), "reason": "Invalid JSON", "module": "server"}
