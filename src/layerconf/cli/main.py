"""Root Click group for the layerconf CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import click

from ..logging import get_logger, setup_logging
from .commands import register_all


@click.group()
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    default=".",
    show_default=True,
    help="Application root directory",
)
@click.option("--environment", "-e", help="Deployment environment (selects the override file)")
@click.option(
    "--manifest",
    "-m",
    type=click.Path(dir_okay=False),
    help="Module manifest (default: <root>/conf/modules.yaml)",
)
@click.option(
    "--module",
    "module_specs",
    multiple=True,
    metavar="NAME=PATH",
    help="Module to resolve; may be repeated instead of using a manifest",
)
@click.option("--core", help="Core module, resolved before all others")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
)
@click.option("--log-format", default="console", type=click.Choice(["json", "console"]))
@click.pass_context
def main(
    ctx: click.Context,
    root: str,
    environment: Optional[str],
    manifest: Optional[str],
    module_specs: Tuple[str, ...],
    core: Optional[str],
    log_level: str,
    log_format: str,
) -> None:
    """layerconf - resolve and inspect layered module configuration."""
    ctx.ensure_object(dict)

    setup_logging(log_level=log_level, log_format=log_format)

    overrides = {"root_dir": Path(root), "log_level": log_level, "log_format": log_format}
    if environment:
        overrides["environment"] = environment
    if core:
        overrides["core_module"] = core

    ctx.obj["settings_overrides"] = overrides
    ctx.obj["manifest"] = Path(manifest) if manifest else None
    ctx.obj["module_specs"] = module_specs

    get_logger(__name__).debug("layerconf CLI initialized", root=root, environment=environment)


register_all(main)


if __name__ == "__main__":  # pragma: no cover
    main()  # pylint: disable=no-value-for-parameter
