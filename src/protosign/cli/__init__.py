"""
protosign CLI - compare schema versions and detect breaking changes.

Commands:
    protosign compare       Green/Yellow/Red verdict for two schema files
    protosign fingerprint   Print the content fingerprint of a schema file
    protosign breaking      Rule-attributed breaking-change report
"""

from pathlib import Path
from typing import Optional, Tuple

import click

from protosign.config import get_config
from protosign.logger import configure_logging

from .breaking import breaking
from .compare import compare, fingerprint


@click.group()
@click.version_option(package_name="protosign")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Logging level (default: PROTOSIGN_LOG_LEVEL or warning)",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Log output format",
)
@click.option(
    "-I",
    "--include",
    "include_paths",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory searched for imports (repeatable)",
)
@click.option(
    "--no-fallback",
    is_flag=True,
    help="Fail instead of using degraded text extraction on parse errors",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: Optional[str],
    log_format: Optional[str],
    include_paths: Tuple[Path, ...],
    no_fallback: bool,
):
    """protosign - protobuf schema fingerprinting and breaking-change detection."""
    config = get_config()
    configure_logging(level=log_level or config.log_level, log_format=log_format or config.log_format)
    ctx.ensure_object(dict)
    ctx.obj["include_paths"] = list(config.get_include_paths()) + list(include_paths)
    ctx.obj["allow_fallback"] = config.allow_fallback and not no_fallback


main.add_command(compare)
main.add_command(fingerprint)
main.add_command(breaking)
