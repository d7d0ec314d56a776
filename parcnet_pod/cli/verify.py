"""
parcnet_pod/cli/verify.py

pod verify: POD Signature Verification CLI
==========================================

Usage:
    pod verify <pod.json>                  Human output (default)
    pod verify <pod.json> --format json    Machine-readable JSON
    pod verify <pod.json> --quiet          Exit code only
    pod verify <pod.json> --pcd            Input is in PCD shape

Exit codes:
    0  Signature valid
    1  Well-formed POD, signature does not match
    2  Error  (file missing, malformed JSON, malformed POD)
"""

import json
import sys

import click

from parcnet_pod.cli._io import load_json
from parcnet_pod.core.exceptions import PODError
from parcnet_pod.core.models import Pod
from parcnet_pod.core.verification import VerificationResult, verify_pod, verify_pod_dict


class _Color:
    """
    Minimal ANSI color wrapper.
    Auto-disables when not a TTY or --no-color is passed.
    """

    def __init__(self, enabled: bool) -> None:
        self.on = enabled and sys.stdout.isatty()

    def green(self, s: str) -> str:
        return f"\033[32m{s}\033[0m" if self.on else s

    def red(self, s: str) -> str:
        return f"\033[31m{s}\033[0m" if self.on else s

    def dim(self, s: str) -> str:
        return f"\033[2m{s}\033[0m" if self.on else s


def _exit_code(result: VerificationResult) -> int:
    if result.valid:
        return 0
    return 2 if result.error else 1


@click.command(name="verify")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option(
    "--format", "fmt",
    type=click.Choice(["human", "json"], case_sensitive=False),
    default="human",
    show_default=True,
    help="Output format: human (default) or json (CI/automation).",
)
@click.option(
    "--pcd",
    is_flag=True,
    default=False,
    help="Read the PCD shape {id, claim, proof} instead of the POD shape.",
)
@click.option(
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress all output. Use exit code only (0=valid, 1=invalid, 2=error).",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable ANSI color output.",
)
def verify_command(source, fmt: str, pcd: bool, quiet: bool, no_color: bool) -> None:
    """
    Verify the signature of the POD in SOURCE (- for stdin).

    \b
    Examples:
      pod verify pod.json
      pod verify pod.json --format json
      pod verify pod.json --quiet && echo "valid"
    """
    data = load_json(source)
    if pcd:
        try:
            result = verify_pod(Pod.from_pcd_dict(data))
        except PODError as e:
            result = VerificationResult(valid=False, error=True, reason=e.message, details=dict(e.details))
    else:
        result = verify_pod_dict(data)

    if not quiet:
        if fmt.lower() == "json":
            click.echo(json.dumps(result.to_dict(), indent=2))
        else:
            _output_human(result, _Color(not no_color))

    sys.exit(_exit_code(result))


def _output_human(result: VerificationResult, color: _Color) -> None:
    if result.valid:
        click.echo(f"  {color.green('VALID')}    {result.reason}")
    elif result.error:
        click.echo(f"  {color.red('ERROR')}    {result.reason}")
        for key, value in result.details.items():
            click.echo(f"           {color.dim(f'{key}={value}')}")
    else:
        click.echo(f"  {color.red('INVALID')}  {result.reason}")
    if result.content_id is not None:
        click.echo(f"  {color.dim('content ID')}  {result.content_id}")
