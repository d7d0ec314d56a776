"""
parcnet_pod/cli/inspect.py

pod content-id   : print the decimal content ID of entries or a POD
pod canonicalize : print the canonical JSON of entries or a POD

Both accept either shape: a POD object (entries + signature +
signerPublicKey) or a bare entries object.
"""

import sys

import click

from parcnet_pod.cli._io import is_pod_shape, load_json
from parcnet_pod.core.entries import PodEntries
from parcnet_pod.core.exceptions import PODError
from parcnet_pod.core.models import Pod


def _load(stream):
    data = load_json(stream)
    try:
        if is_pod_shape(data):
            return Pod.from_dict(data)
        return PodEntries.from_json_dict(data)
    except PODError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


@click.command(name="content-id")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--hex", "as_hex", is_flag=True, default=False, help="Print as 0x hex.")
def content_id_command(source, as_hex: bool) -> None:
    """Print the content ID of SOURCE (- for stdin)."""
    loaded = _load(source)
    try:
        content_id = loaded.content_id()
    except PODError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    click.echo(hex(content_id) if as_hex else str(content_id))


@click.command(name="canonicalize")
@click.argument("source", type=click.File("r", encoding="utf-8"))
def canonicalize_command(source) -> None:
    """Print SOURCE (- for stdin) in canonical JSON form."""
    click.echo(_load(source).to_json())
