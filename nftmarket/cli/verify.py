"""
nftmarket/cli/verify.py

nftmarket verify: check a signed event journal.

Usage:
    nftmarket verify <journal>                 Human output (default)
    nftmarket verify <journal> --format json   Machine-readable JSON
    nftmarket verify <journal> --quiet         Exit code only

Exit codes:
    0  Journal fully valid  (sequence + chain + signatures)
    1  Journal has violations
    2  Error  (file missing, malformed JSON)
"""

import json
import sys
from pathlib import Path

import click

from nftmarket.cli.style import Color
from nftmarket.core.exceptions import LedgerError
from nftmarket.ledger.journal import EventJournal, JournalSummary


def _row(label: str, value: str) -> str:
    return f"  {Color.dim(f'{label:<20}')}  {value}"


def _output_human(journal: Path, summary: JournalSummary) -> None:
    click.echo()
    click.echo(f"  nftmarket verify  {journal}")
    click.echo()
    click.echo(_row("Entries", str(summary.total_entries)))
    click.echo(_row("Valid signatures", str(summary.valid_signatures)))
    click.echo(_row("Invalid signatures", str(summary.invalid_signatures)))
    click.echo(_row("Head hash", summary.head_hash or "-"))
    click.echo()
    for violation in summary.violations:
        click.echo(f"  {Color.red('x')}  {violation}")
    if summary.valid:
        click.echo(Color.green("  Journal valid"))
    else:
        click.echo(Color.red(f"  Journal invalid: {len(summary.violations)} violation(s)"))
    click.echo()


@click.command(name="verify")
@click.argument("journal", type=click.Path(exists=False))
@click.option(
    "--format", "fmt",
    type=click.Choice(["human", "json"], case_sensitive=False),
    default="human",
    show_default=True,
    help="Output format: human (default) or json (CI/automation).",
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
def verify_command(journal: str, fmt: str, quiet: bool, no_color: bool) -> None:
    """
    Verify a marketplace event journal: sequence, chain and signatures.

    JOURNAL is the path to a .jsonl journal file.
    """
    Color.configure(not no_color)
    journal_path = Path(journal)

    if not journal_path.exists():
        if not quiet:
            click.echo(Color.red(f"error: journal not found: {journal}"), err=True)
        sys.exit(2)

    try:
        summary = EventJournal.verify(journal_path)
    except LedgerError as e:
        if not quiet:
            click.echo(Color.red(f"error: {e}"), err=True)
        sys.exit(2)

    if not quiet:
        if fmt == "json":
            click.echo(json.dumps(summary.to_dict(), indent=2))
        else:
            _output_human(journal_path, summary)

    sys.exit(0 if summary.valid else 1)
