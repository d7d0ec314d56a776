"""
parcnet_pod/cli/__init__.py

POD CLI: root Click command group.

Registered in pyproject.toml as:

    [project.scripts]
    pod = "parcnet_pod.cli:cli"

Adding a new command:
    1. Create parcnet_pod/cli/your_command.py with a @click.command()
    2. Import it here
    3. cli.add_command(your_command)
"""

import logging

import click

from parcnet_pod.cli.inspect import canonicalize_command, content_id_command
from parcnet_pod.cli.sign import sign_command
from parcnet_pod.cli.verify import verify_command


@click.group()
@click.version_option(package_name="parcnet-pod")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug output to stderr.")
def cli(verbose: bool) -> None:
    """
    parcnet-pod: sign, verify and normalize PODs.

    \b
    Commands:
      sign          Sign an entries JSON file.
      verify        Verify a POD JSON file.
      content-id    Print the content ID of entries or a POD.
      canonicalize  Print the canonical JSON form.

    \b
    Quick start:
      export POD_PRIVATE_KEY=$(openssl rand -hex 32)
      pod sign entries.json > pod.json
      pod verify pod.json
      pod verify pod.json --format json
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


cli.add_command(sign_command)
cli.add_command(verify_command)
cli.add_command(content_id_command)
cli.add_command(canonicalize_command)
