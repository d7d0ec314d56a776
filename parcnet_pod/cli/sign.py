"""
parcnet_pod/cli/sign.py

pod sign: sign an entries JSON object.

Usage:
    pod sign entries.json --key <hex|base64>
    POD_PRIVATE_KEY=<hex|base64> pod sign entries.json
    cat entries.json | pod sign - --encoding hex

Exit codes:
    0  POD printed to stdout
    2  Error  (bad key, malformed entries)
"""

import sys

import click

from parcnet_pod.cli._io import load_json
from parcnet_pod.core.crypto import Signer
from parcnet_pod.core.encoding import ENCODINGS
from parcnet_pod.core.entries import PodEntries
from parcnet_pod.core.exceptions import PODError


@click.command(name="sign")
@click.argument("entries", type=click.File("r", encoding="utf-8"))
@click.option(
    "--key",
    envvar="POD_PRIVATE_KEY",
    required=True,
    metavar="KEY",
    help="32-byte private key as hex or base64. Defaults to $POD_PRIVATE_KEY.",
)
@click.option(
    "--encoding",
    type=click.Choice(list(ENCODINGS), case_sensitive=False),
    default="base64",
    show_default=True,
    help="Encoding of the signature and public key in the output.",
)
def sign_command(entries, key: str, encoding: str) -> None:
    """
    Sign ENTRIES (a JSON object of name → value, or - for stdin) and print
    the canonical POD JSON.
    """
    data = load_json(entries)
    try:
        signer = Signer(key, encoding=encoding.lower())
        pod    = signer.sign(PodEntries.from_json_dict(data))
    except PODError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    click.echo(pod.to_json())
