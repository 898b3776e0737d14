"""
nftmarket/cli/__init__.py

nftmarket CLI: root Click command group.

Registered in pyproject.toml as:

    [project.scripts]
    nftmarket = "nftmarket.cli:cli"
"""

import click

from nftmarket.cli.commands import execute_command, init_command, query_command
from nftmarket.cli.verify import verify_command


@click.group()
@click.version_option(package_name="nftmarket")
def cli() -> None:
    """
    nftmarket: NFT marketplace settlement CLI.

    \b
    Commands:
      init      Instantiate a marketplace from its YAML configuration.
      execute   Run an execute message (list, buy, admin operations).
      query     Read sales, collections and the taker fee.
      verify    Verify the signed event journal.
    """
    pass


cli.add_command(init_command)
cli.add_command(execute_command)
cli.add_command(query_command)
cli.add_command(verify_command)
