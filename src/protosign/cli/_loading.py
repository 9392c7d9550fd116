"""Shared file loading for CLI commands."""

import sys
from pathlib import Path

import click

from protosign.exceptions import ProtoSignError
from protosign.schema_file import ProtoFile

# Exit status for tool errors, distinct from "breaking changes found" (1).
EXIT_ERROR = 2


def fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(EXIT_ERROR)


def load_proto(ctx: click.Context, path: Path) -> ProtoFile:
    """Parse ``path`` using the group's include paths and fallback setting."""
    obj = ctx.find_root().obj or {}
    try:
        proto = ProtoFile.from_path(
            path,
            include_paths=obj.get("include_paths", []),
            allow_fallback=obj.get("allow_fallback", True),
        )
    except OSError as e:
        fail(f"cannot read {path}: {e}")
    except ProtoSignError as e:
        fail(str(e))
    if proto.degraded:
        click.echo(f"Warning: {path} could not be compiled; using degraded extraction", err=True)
    return proto
