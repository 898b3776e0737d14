"""
nftmarket/cli/commands.py

Marketplace commands against a configured deployment.

Usage:
    nftmarket init -c market.yaml
    nftmarket execute -c market.yaml seller '{"create_sale": {...}}'
    nftmarket execute -c market.yaml buyer '{"buy": {...}}' --funds 1000u
    nftmarket query -c market.yaml '{"get_sale": {...}}'

--config falls back to $NFTMARKET_CONFIG. Messages are JSON (or inline
YAML). Responses print as JSON.

Exit codes:
    0  Success
    1  Marketplace rejected the operation
    2  Error  (configuration, unreadable message or state)
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable, Tuple

import click
import yaml

from nftmarket.cli.style import Color
from nftmarket.core.exceptions import ConfigError, LedgerError, MarketError
from nftmarket.core.models import Coin
from nftmarket.runtime import messages
from nftmarket.runtime.config import ENV_VAR, MarketConfig


config_option = click.option(
    "--config", "-c",
    "config_path",
    envvar=ENV_VAR,
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help=f"Marketplace YAML configuration. Defaults to ${ENV_VAR}.",
)


def _fail(message: str, code: int) -> None:
    click.echo(Color.red(f"error: {message}"), err=True)
    sys.exit(code)


def _run(action: Callable[[], Any]) -> Any:
    """Call action, mapping marketplace errors to exit codes."""
    try:
        return action()
    except (ConfigError, LedgerError) as e:
        _fail(str(e), 2)
    except MarketError as e:
        _fail(str(e), 1)


def _parse_message(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        _fail(f"cannot parse message: {e}", 2)


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


@click.command(name="init")
@config_option
def init_command(config_path: str) -> None:
    """
    Instantiate the marketplace described by the configuration.

    The admin named in the file becomes the contract owner.
    """
    cfg = _run(lambda: MarketConfig.from_yaml(Path(config_path)))
    response = _run(lambda: cfg.instantiate(cfg.build()))
    _echo_json(response.to_dict())


@click.command(name="execute")
@config_option
@click.argument("sender")
@click.argument("message")
@click.option(
    "--funds",
    multiple=True,
    metavar="COIN",
    help="Attach funds, e.g. --funds 1000uatom. Repeatable.",
)
def execute_command(
    config_path: str,
    sender:      str,
    message:     str,
    funds:       Tuple[str, ...],
) -> None:
    """
    Run an execute MESSAGE as SENDER.

    \b
    Examples:
      nftmarket execute -c market.yaml admin '{"update_taker_fee": {"taker_fee": 3}}'
      nftmarket execute -c market.yaml buyer \\
          '{"buy": {"contract_address": "nfts", "token_id": "1"}}' --funds 1000u
    """
    cfg = _run(lambda: MarketConfig.from_yaml(Path(config_path)))
    msg = _parse_message(message)
    coins = _run(lambda: [Coin.parse(f) for f in funds])
    response = _run(lambda: messages.execute(cfg.build(), sender, msg, coins))
    _echo_json(response.to_dict())


@click.command(name="query")
@config_option
@click.argument("message")
def query_command(config_path: str, message: str) -> None:
    """
    Run a query MESSAGE against the stored state.

    \b
    Example:
      nftmarket query -c market.yaml '{"get_sale": {"contract_address": "nfts", "token_id": "1"}}'
    """
    cfg = _run(lambda: MarketConfig.from_yaml(Path(config_path)))
    msg = _parse_message(message)
    result = _run(lambda: messages.query(cfg.build(with_journal=False), msg))
    _echo_json(result)
