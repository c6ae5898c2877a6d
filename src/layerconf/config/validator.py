"""
Validation of module configuration against JSON schemas.

``JsonSchemaValidator`` fills declared defaults, reports every problem in one
pass, and expands directory tokens (``$ROOT``, ``$DATA``, ``$TEMP``) in
properties declared with ``isDirectory: true``.
"""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Set, Tuple

from jsonschema import Draft7Validator, FormatChecker, validators
from jsonschema.exceptions import ValidationError as JsonSchemaError

from ..exceptions import ValidationFailure
from ..logging import is_sensitive_key
from .models import IssueKind, ValidationIssue

DIRECTORY_KEYWORD = "isDirectory"

TokenProvider = Callable[[], Mapping[str, Optional[str]]]
PATH_SEPARATORS = ("/", "\\")


class ConfigValidator(Protocol):
    """Validates one module's candidate configuration."""

    def validate(self, schema: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        """Return the validated data with defaults applied.

        Raises:
            ValidationFailure: listing every violated attribute
        """
        ...


def extend_with_default(validator_class: Any) -> Any:
    """Return a validator class that fills ``default`` for absent properties."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if isinstance(instance, dict):
            for name, subschema in properties.items():
                if not isinstance(subschema, dict):
                    continue
                if "default" in subschema:
                    instance.setdefault(name, deepcopy(subschema["default"]))
                elif subschema.get("type") == "object" and subschema.get("required"):
                    # required members are only checked inside a present object
                    instance.setdefault(name, {})
        yield from validate_properties(validator, properties, instance, schema)

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultFillingValidator = extend_with_default(Draft7Validator)


def substitute_tokens(value: str, tokens: Mapping[str, Optional[str]]) -> str:
    """Replace a leading directory token in ``value``.

    The token must be the whole value or be followed by a path separator, so
    ``$ROOTS/x`` is left alone.
    """
    for token, replacement in tokens.items():
        if replacement is None or not value.startswith(token):
            continue
        rest = value[len(token):]
        if rest == "" or rest[0] in PATH_SEPARATORS:
            return str(Path(str(replacement) + rest))
    return value


def _describe_type(expected: Any) -> str:
    if isinstance(expected, list):
        return " or ".join(str(t) for t in expected)
    return str(expected)


class JsonSchemaValidator:
    """``ConfigValidator`` backed by jsonschema (Draft 7)."""

    def __init__(
        self,
        directory_tokens: Optional[TokenProvider] = None,
        formats: Optional[Mapping[str, Callable[[Any], bool]]] = None,
    ):
        self._directory_tokens = directory_tokens
        self.format_checker = FormatChecker()
        for name, check in (formats or {}).items():
            self.format_checker.checks(name)(check)

    def validate(self, schema: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        instance = deepcopy(data)
        validator = DefaultFillingValidator(schema, format_checker=self.format_checker)
        issues = self._collect_issues(validator.iter_errors(instance))
        if issues:
            raise ValidationFailure(issues)

        if self._directory_tokens is not None:
            self._expand_directories(schema.get("properties", {}), instance)
        return instance

    def _expand_directories(self, properties: Mapping[str, Any], instance: Dict[str, Any]) -> None:
        tokens = self._directory_tokens() if self._directory_tokens else {}
        for name, subschema in properties.items():
            if not isinstance(subschema, dict):
                continue
            value = instance.get(name)
            if subschema.get(DIRECTORY_KEYWORD) and isinstance(value, str):
                instance[name] = substitute_tokens(value, tokens)
            elif isinstance(value, dict) and isinstance(subschema.get("properties"), dict):
                self._expand_directories(subschema["properties"], value)

    def _collect_issues(self, errors: Iterable[JsonSchemaError]) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        seen: Set[Tuple[str, IssueKind]] = set()

        def add(issue: ValidationIssue) -> None:
            marker = (issue.attribute, issue.kind)
            if marker not in seen:
                seen.add(marker)
                issues.append(issue)

        for error in errors:
            path = [str(part) for part in error.absolute_path]

            if error.validator == "required":
                present = error.instance if isinstance(error.instance, dict) else {}
                declared = error.schema.get("properties", {}) if isinstance(error.schema, dict) else {}
                for name in error.validator_value:
                    if name in present:
                        continue
                    expected = declared.get(name, {}).get("type") if isinstance(declared.get(name), dict) else None
                    suffix = f" ({_describe_type(expected)})" if expected else ""
                    add(ValidationIssue(".".join(path + [name]), IssueKind.MISSING, f"missing required value{suffix}"))
                continue

            attribute = ".".join(path) or "<root>"
            if error.validator == "type":
                message = (
                    f"should be {_describe_type(error.validator_value)} "
                    f"(got {type(error.instance).__name__})"
                )
                add(ValidationIssue(attribute, IssueKind.TYPE, message))
            elif is_sensitive_key(attribute):
                add(ValidationIssue(attribute, IssueKind.INVALID, f"failed '{error.validator}' check"))
            else:
                add(ValidationIssue(attribute, IssueKind.INVALID, error.message))

        return sorted(issues, key=lambda i: (i.attribute, i.kind.value))
