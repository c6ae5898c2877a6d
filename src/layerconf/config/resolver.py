"""
Per-module schema resolution.

The core module is resolved first because other schemas may expand directory
tokens from its values; every other module is then resolved concurrently.
A module that fails validation does not stop the others: failures are
collected and raised together once the whole set has been processed.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Iterable, List, Optional

from ..exceptions import AggregateResolutionError, ValidationFailure
from ..logging import get_logger
from .models import ModuleDescriptor, ResolutionResult, SchemaDeclaration
from .modules import order_modules
from .schemas import SchemaRegistry
from .store import ConfigStore
from .validator import ConfigValidator

logger = get_logger(__name__)


class SchemaResolver:
    """Merges store values with module schemas and writes back validated values."""

    def __init__(
        self,
        store: ConfigStore,
        validator: ConfigValidator,
        registry: Optional[SchemaRegistry] = None,
        core_module: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.store = store
        self.validator = validator
        self.registry = registry or SchemaRegistry()
        self.core_module = core_module
        self.environment = environment

    async def resolve(self, modules: Iterable[ModuleDescriptor]) -> ResolutionResult:
        """
        Resolve every module's schema against the store.

        Raises:
            SchemaSyntaxError: a schema file is malformed (nothing is validated)
            AggregateResolutionError: one or more modules failed validation
        """
        start = time.perf_counter()
        ordered = order_modules(modules, self.core_module)
        schemas = await self.registry.load_all(ordered)

        result = ResolutionResult(order=[m.name for m in ordered])
        result.skipped = [m.name for m in ordered if m.name not in schemas]
        failures: List[ValidationFailure] = []

        pending = [m for m in ordered if m.name in schemas]
        if pending and pending[0].name == self.core_module:
            core = pending.pop(0)
            outcome = await self._settle(core, schemas[core.name])
            self._record(core, outcome, result, failures)

        outcomes = await asyncio.gather(
            *(self._settle(m, schemas[m.name]) for m in pending)
        )
        for module, outcome in zip(pending, outcomes):
            self._record(module, outcome, result, failures)

        logger.info(
            "Resolved module schemas",
            modules=len(ordered),
            processed=len(result.processed),
            skipped=len(result.skipped),
            failed=len(failures),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )

        if failures:
            raise AggregateResolutionError(failures, self.environment)
        return result

    def resolve_sync(self, modules: Iterable[ModuleDescriptor]) -> ResolutionResult:
        return asyncio.run(self.resolve(modules))

    async def _settle(
        self, module: ModuleDescriptor, schema: SchemaDeclaration
    ) -> Optional[ValidationFailure]:
        try:
            self.process_module(module, schema)
        except ValidationFailure as e:
            return e.with_module(module.name)
        return None

    def _record(
        self,
        module: ModuleDescriptor,
        outcome: Optional[ValidationFailure],
        result: ResolutionResult,
        failures: List[ValidationFailure],
    ) -> None:
        if outcome is None:
            result.processed.append(module.name)
            return
        failures.append(outcome)
        logger.warning(
            "Module configuration failed validation",
            module=module.name,
            issues=len(outcome.issues),
        )

    def build_candidate(self, module: ModuleDescriptor, schema: SchemaDeclaration) -> Dict[str, Any]:
        """Collect current store values for every declared property."""
        candidate: Dict[str, Any] = {}
        for name in schema.properties:
            value = self.store.get(module.key(name))
            if value is not None:
                candidate[name] = value
        return candidate

    def classify(self, module: ModuleDescriptor, schema: SchemaDeclaration) -> None:
        for name in schema.public:
            self.store.mark_public(module.key(name))
        for name in schema.mutable:
            self.store.mark_mutable(module.key(name))

    def process_module(self, module: ModuleDescriptor, schema: SchemaDeclaration) -> None:
        """
        Validate and apply one module's configuration.

        Classification is recorded before validation so it holds even when
        the module fails.

        Raises:
            ValidationFailure: untagged; callers attach the module name
        """
        self.classify(module, schema)
        candidate = self.build_candidate(module, schema)
        validated = self.validator.validate(schema.to_json_schema(), candidate)
        for name, value in validated.items():
            self.store.set(module.key(name), value, force=True)
        logger.debug("Applied module configuration", module=module.name, attributes=len(validated))
