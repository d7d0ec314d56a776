"""Shared input handling for CLI commands."""

import json
import sys
from typing import Any, IO

import click


def load_json(stream: IO[str]) -> Any:
    """Parse JSON from an open click.File, exiting with code 2 on failure."""
    try:
        return json.load(stream)
    except ValueError as e:
        click.echo(f"Error: {stream.name} is not valid JSON: {e}", err=True)
        sys.exit(2)


def is_pod_shape(data: Any) -> bool:
    return isinstance(data, dict) and "signature" in data and "signerPublicKey" in data
