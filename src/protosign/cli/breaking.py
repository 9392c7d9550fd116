"""protosign CLI - rule-attributed breaking-change detection."""

import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from protosign.breaking.loader import BreakingConfigLoader
from protosign.breaking.report import render_json, render_text
from protosign.breaking.schema import BreakingCategory, BreakingConfig
from protosign.config import get_config
from protosign.exceptions import ConfigError

from ._loading import fail, load_proto


def _split(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _load_config_file(path: Path) -> BreakingConfig:
    try:
        return BreakingConfigLoader().load(path)
    except (OSError, TypeError, yaml.YAMLError, ValidationError) as e:
        raise ConfigError(f"invalid configuration {path}: {e}") from e


def _build_config(
    config_file: Optional[Path],
    use_rules: Optional[str],
    use_categories: Optional[str],
    except_rules: Optional[str],
) -> BreakingConfig:
    """Configuration file first, then command-line overrides.

    Raises:
        ConfigError: If the file or a command-line category is invalid.
    """
    config = _load_config_file(config_file) if config_file is not None else BreakingConfig()

    updates: dict = {}
    categories = _split(use_categories)
    if categories:
        try:
            updates["use_categories"] = [BreakingCategory(c.upper()) for c in categories]
        except ValueError as e:
            raise ConfigError(f"unknown category: {e}") from e
    rules = _split(use_rules)
    if rules:
        updates["use_rules"] = rules
        # Explicit rules replace category selection.
        updates["use_categories"] = []
    excepts = _split(except_rules)
    if excepts:
        updates["except_rules"] = list(config.except_rules) + excepts
    return config.model_copy(update=updates) if updates else config


@click.command()
@click.argument("old", type=click.Path(path_type=Path))
@click.argument("new", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Report format (default: PROTOSIGN_OUTPUT_FORMAT or text)",
)
@click.option("--use-rules", help="Comma-separated rule ids to run (overrides categories)")
@click.option("--use-categories", help="Comma-separated categories: FILE,PACKAGE,WIRE,WIRE_JSON")
@click.option("--except-rules", help="Comma-separated rule ids to skip")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="buf-style YAML file with a 'breaking' section",
)
@click.pass_context
def breaking(
    ctx: click.Context,
    old: Path,
    new: Path,
    output_format: Optional[str],
    use_rules: Optional[str],
    use_categories: Optional[str],
    except_rules: Optional[str],
    config_file: Optional[Path],
):
    """Report breaking changes from OLD (previous) to NEW (current).

    Exits 1 when breaking changes are found, 2 on tool errors.

    Example:
        protosign breaking v1/user.proto v2/user.proto --use-categories WIRE_JSON
    """
    try:
        config = _build_config(config_file, use_rules, use_categories, except_rules)
    except ConfigError as e:
        fail(str(e))
    previous = load_proto(ctx, old)
    current = load_proto(ctx, new)

    result = previous.check_breaking_changes(current, config)

    fmt = output_format or get_config().output_format
    click.echo(render_json(result) if fmt == "json" else render_text(result))

    if result.has_breaking_changes:
        sys.exit(1)
