"""Exceptions raised while loading and resolving configuration."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Union

if TYPE_CHECKING:
    from .config.models import ValidationIssue


class ConfigurationError(Exception):
    """Base exception for all configuration errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "CONFIGURATION_ERROR"
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}'"
            f")"
        )


class SourceError(ConfigurationError):
    """A configuration source exists but could not be used."""

    def __init__(
        self,
        path: Union[str, Path],
        reason: str,
        error_code: str = "SOURCE_ERROR",
    ):
        self.path = Path(path)
        self.reason = reason
        super().__init__(
            f"Failed to load {self.path}: {reason}",
            error_code,
            {"path": str(self.path), "reason": reason},
        )


class SourceSyntaxError(SourceError):
    """Override file (or manifest) is present but unparsable."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(path, reason, "SOURCE_SYNTAX_ERROR")


class SchemaSyntaxError(SourceSyntaxError):
    """A module schema file is present but malformed."""

    def __init__(self, path: Union[str, Path], reason: str, module: Optional[str] = None):
        super().__init__(path, reason)
        self.error_code = "SCHEMA_SYNTAX_ERROR"
        self.module = module
        if module:
            self.details["module"] = module


class SourceReadError(SourceError):
    """I/O failure other than the file being absent."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(path, reason, "SOURCE_READ_ERROR")


class InvalidEnvironmentKeyError(ConfigurationError):
    """A prefixed environment variable does not name an attribute."""

    def __init__(self, name: str, app_prefix: str):
        self.name = name
        super().__init__(
            f"Environment variable '{name}' uses the '{app_prefix}_' prefix "
            f"but has no '__<attribute>' part",
            "INVALID_ENVIRONMENT_KEY",
            {"name": name, "app_prefix": app_prefix},
        )


class NamespaceCollisionError(ConfigurationError):
    def __init__(self, namespace: str, reason: str = "declared more than once"):
        self.namespace = namespace
        super().__init__(
            f"Module namespace '{namespace}' {reason}",
            "NAMESPACE_COLLISION",
            {"namespace": namespace},
        )


class ValidationFailure(ConfigurationError):
    """One module's candidate configuration failed validation.

    Raised by validators without a module; the resolver tags it with the
    originating module before aggregating.
    """

    def __init__(self, issues: Iterable["ValidationIssue"], module: Optional[str] = None):
        self.issues: List["ValidationIssue"] = list(issues)
        self.module = module
        super().__init__(self._build_message(), "VALIDATION_FAILURE")
        self._refresh_details()

    def with_module(self, module: str) -> "ValidationFailure":
        self.module = module
        self.message = self._build_message()
        self.args = (self.message,)
        self._refresh_details()
        return self

    def describe(self) -> List[str]:
        return [issue.describe(self.module) for issue in self.issues]

    def _build_message(self) -> str:
        prefix = f"'{self.module}' " if self.module else ""
        return f"{prefix}configuration is invalid: " + "; ".join(self.describe())

    def _refresh_details(self) -> None:
        self.details = {
            "module": self.module,
            "issues": [
                {"attribute": i.attribute, "kind": i.kind.value, "message": i.message}
                for i in self.issues
            ],
        }


class AggregateResolutionError(ConfigurationError):
    """Raised once after every module has been processed and some failed."""

    def __init__(self, failures: Iterable[ValidationFailure], environment: Optional[str] = None):
        self.failures: List[ValidationFailure] = list(failures)
        self.environment = environment
        where = f" for the '{environment}' environment" if environment else ""
        lines = [f"The following settings{where} failed validation:"]
        for failure in self.failures:
            lines.extend(f" - {line}" for line in failure.describe())
        super().__init__(
            "\n".join(lines),
            "AGGREGATE_RESOLUTION_ERROR",
            {
                "environment": environment,
                "modules": [f.module for f in self.failures],
                "failures": [f.details for f in self.failures],
            },
        )

    @property
    def modules(self) -> List[str]:
        return [f.module or "" for f in self.failures]
