"""Command-line helpers for rocketlet authors and hosts."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from rocketlets.config import Settings, load_settings
from rocketlets.definition.metadata import RocketletInfo
from rocketlets.utils.logging import get_logger, setup_logging

log = get_logger(__name__)


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, log_level: str | None) -> None:
    """Rocketlets host tooling."""
    settings = load_settings(config_path)
    if log_level:
        settings.log_level = log_level
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    ctx.obj = settings


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def manifest(path: Path) -> None:
    """Validate a rocketlet manifest and print its identity."""
    try:
        info = RocketletInfo.from_manifest(json.loads(path.read_text()))
    except (json.JSONDecodeError, ValidationError) as e:
        log.error("manifest_invalid", path=str(path), error=str(e))
        click.echo(f"Invalid manifest {path}: {e}", err=True)
        sys.exit(1)

    click.echo(f"{info.name} ({info.id}) v{info.version}")
    click.echo(f"  slug: {info.name_slug}")
    click.echo(f"  requires API: {info.required_api_version}")
    click.echo(f"  author: {info.author.name}")


@cli.command("config")
@click.pass_obj
def show_config(settings: Settings) -> None:
    """Print the effective settings as YAML."""
    click.echo(yaml.safe_dump(settings.model_dump(), sort_keys=False))


if __name__ == "__main__":
    cli()
