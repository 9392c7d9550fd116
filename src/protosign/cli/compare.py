"""protosign CLI - fast compatibility verdict and fingerprint commands."""

import sys
from pathlib import Path

import click

from protosign.canonical.compatibility import Compatibility

from ._loading import load_proto


@click.command()
@click.argument("old", type=click.Path(path_type=Path))
@click.argument("new", type=click.Path(path_type=Path))
@click.option("--detailed", is_flag=True, help="Also print both fingerprints")
@click.pass_context
def compare(ctx: click.Context, old: Path, new: Path, detailed: bool):
    """Classify OLD -> NEW as Green, Yellow or Red.

    Exits 1 when the change is Red (breaking).

    Example:
        protosign compare v1/user.proto v2/user.proto --detailed
    """
    old_proto = load_proto(ctx, old)
    new_proto = load_proto(ctx, new)
    verdict = old_proto.compare_with(new_proto)

    click.echo(f"{verdict.value}: {verdict.description}")
    if detailed:
        click.echo(f"  Old fingerprint: {old_proto.fingerprint}")
        click.echo(f"  New fingerprint: {new_proto.fingerprint}")

    if verdict is Compatibility.RED:
        sys.exit(1)


@click.command()
@click.argument("file", type=click.Path(path_type=Path))
@click.pass_context
def fingerprint(ctx: click.Context, file: Path):
    """Print the fingerprint of FILE."""
    proto = load_proto(ctx, file)
    click.echo(proto.fingerprint)
