"""Commands that resolve the configuration and report on it."""

from __future__ import annotations

from typing import Any, Dict

import click

from ...config.models import ENV_NAMESPACE
from ...logging import get_logger
from ..utils import build_manager, handle_errors, mask_sensitive, render


def register(main: click.Group) -> None:
    """Attach resolution commands to the root CLI."""

    @main.command()
    @click.pass_context
    @handle_errors
    def validate(ctx: click.Context) -> None:
        """Resolve every layer and report whether the result is valid."""
        logger = get_logger(__name__)
        manager, modules = build_manager(ctx)

        click.echo(f"Validating configuration for '{manager.settings.environment}'...")
        result = manager.initialize_sync(modules)

        for name in result.processed:
            click.echo(f"  ✓ {name}")
        for name in result.skipped:
            click.echo(f"  - {name} (no schema)")

        logger.info("Configuration validation successful", modules=result.module_count)
        click.echo("\nConfiguration is valid ✓")

    @main.command()
    @click.option("--public", "public_only", is_flag=True, help="Only show public attributes")
    @click.option(
        "--mutable", "mutable_only", is_flag=True, help="Only show public attributes that are mutable"
    )
    @click.option("--include-env", is_flag=True, help="Include raw environment passthrough values")
    @click.option(
        "--format", "fmt", type=click.Choice(["text", "json", "yaml"]), default="text", show_default=True
    )
    @click.pass_context
    @handle_errors
    def show(
        ctx: click.Context,
        public_only: bool,
        mutable_only: bool,
        include_env: bool,
        fmt: str,
    ) -> None:
        """Display the resolved configuration with secrets masked."""
        manager, modules = build_manager(ctx)
        manager.initialize_sync(modules)

        if public_only or mutable_only:
            data: Dict[str, Any] = manager.public_config(mutable_only=mutable_only)
            config = mask_sensitive({"": data})[""]
        else:
            nested = manager.get_config_dict()
            if not include_env:
                nested.pop(ENV_NAMESPACE, None)
            config = mask_sensitive(nested)

        if fmt != "text":
            click.echo(render(config, fmt))
            return

        click.echo(f"Environment: {manager.settings.environment}")
        click.echo(f"Override file: {manager.user_config_path}")
        if public_only or mutable_only:
            for key in sorted(config):
                click.echo(f"  {key} = {config[key]!r}")
            return
        for section in sorted(config):
            click.echo(f"\n[{section}]")
            for key in sorted(config[section]):
                click.echo(f"  {key} = {config[section][key]!r}")
