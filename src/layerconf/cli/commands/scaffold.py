"""Commands that generate files from module schemas."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, Optional

import click

from ...config import ConfigManager, ModuleDescriptor, SchemaDeclaration, load_user_config, order_modules
from ...logging import get_logger
from ...scaffold import build_starter_config, render_markdown, required_placeholders, write_config_file
from ..utils import build_manager, handle_errors


def _load_schemas(manager: ConfigManager, modules: list[ModuleDescriptor]) -> Dict[str, SchemaDeclaration]:
    ordered = order_modules(modules, manager.settings.core_module)
    return asyncio.run(manager.registry.load_all(ordered))


def register(main: click.Group) -> None:
    """Attach generator commands to the root CLI."""

    @main.command()
    @click.option("--defaults", is_flag=True, help="Also write attributes that have a default")
    @click.option("--replace", is_flag=True, help="Overwrite values already in the file")
    @click.option("--update", is_flag=True, help="Add missing attributes, keeping existing values")
    @click.option(
        "--output",
        "-o",
        type=click.Path(dir_okay=False),
        help="Output path (default: the override file for the environment)",
    )
    @click.pass_context
    @handle_errors
    def generate(
        ctx: click.Context,
        defaults: bool,
        replace: bool,
        update: bool,
        output: Optional[str],
    ) -> None:
        """Write a starter override file for the environment."""
        if replace and update:
            raise click.UsageError("--replace and --update cannot be used together")

        logger = get_logger(__name__)
        manager, modules = build_manager(ctx)
        target = Path(output) if output else manager.user_config_path

        existing = None
        if target.exists():
            if not (replace or update):
                click.echo(
                    f"✗ {target} already exists; use --update to add missing attributes "
                    "or --replace to overwrite",
                    err=True,
                )
                ctx.exit(1)
            existing = load_user_config(target)

        schemas = _load_schemas(manager, modules)
        config = build_starter_config(
            schemas, existing=existing, include_defaults=defaults, replace=replace
        )
        write_config_file(target, config)
        logger.info("Wrote override file", path=str(target), modules=len(config))
        click.echo(f"✓ Wrote {target}")

        placeholders = required_placeholders(config)
        if placeholders:
            click.echo("\nThe following required attributes still need a value:")
            for key in placeholders:
                click.echo(f"  - {key}")

    @main.command()
    @click.option(
        "--output",
        "-o",
        type=click.Path(dir_okay=False),
        help="Write the markdown to a file instead of stdout",
    )
    @click.pass_context
    @handle_errors
    def docs(ctx: click.Context, output: Optional[str]) -> None:
        """Render a markdown reference of every module's attributes."""
        manager, modules = build_manager(ctx)
        content = render_markdown(_load_schemas(manager, modules))

        if output:
            path = Path(output)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            click.echo(f"✓ Wrote {path}")
        else:
            click.echo(content)
