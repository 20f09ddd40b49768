"""Command-line interface for portfolio reconciliation."""

import asyncio
import sys
from typing import Sequence

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .api import APIError, PortfolioClient
from .config import Config
from .logger import RunLogger
from .validator import ReconciliationReport, ReconciliationValidator


console = Console(force_terminal=True)

USAGE = """
[bold]Usage:[/bold]
  python -m wallet_recon.cli                        Reconcile the configured wallets
  python -m wallet_recon.cli ADDRESS [ADDRESS ...]  Reconcile the given wallets
  python -m wallet_recon.cli --network devnet       Select the network (default from config)
  python -m wallet_recon.cli --help                 Show this help

[bold]Checks:[/bold]
  1. Per wallet: sum of token amount x price matches the reported total
  2. Per wallet: reported total equals tokensValue + stocksValue
  3. Net worth of all wallets equals the sum of the individual totals
  4. Net worth equals the sum of the balances endpoint's per-wallet values

[bold]Setup:[/bold]
  Settings come from .env and config.json (see WALLET_API_BASE_URL,
  WALLET_ADDRESSES, WALLET_RECON_TOLERANCE).
"""


def print_banner():
    """Print the application banner."""
    banner = (
        "\n[bold cyan]"
        "+-----------------------------------------------------------+\n"
        "|           WALLET PORTFOLIO RECONCILIATION                 |\n"
        "|     Check portfolio totals against token holdings         |\n"
        "+-----------------------------------------------------------+"
        "[/bold cyan]\n"
    )
    console.print(banner)


def parse_args(argv: Sequence[str]) -> tuple[list[str], str | None, bool]:
    """Split argv into (addresses, network, show_help)."""
    addresses: list[str] = []
    network: str | None = None
    args = list(argv)
    while args:
        arg = args.pop(0)
        if arg == "--help":
            return addresses, network, True
        if arg == "--network":
            if not args:
                raise ValueError("--network requires a value")
            network = args.pop(0)
        elif arg.startswith("--"):
            raise ValueError(f"Unknown option: {arg}")
        else:
            addresses.append(arg)
    return addresses, network, False


async def run_reconciliation(
    client: PortfolioClient,
    validator: ReconciliationValidator,
    addresses: Sequence[str],
    network: str = "mainnet",
    currency: str = "usd",
) -> list[ReconciliationReport]:
    """
    Fetch every wallet plus the aggregate balances and run all checks.

    Returns one report per wallet followed by the aggregate report.
    """
    portfolios = await client.fetch_multiple_portfolios(addresses, network)
    balances = await client.fetch_aggregate_balances(addresses, currency=currency, network=network)

    reports = [validator.reconcile_wallet(p) for p in portfolios]
    reports.append(validator.reconcile_aggregate(balances, portfolios))
    return reports


def display_report(report: ReconciliationReport):
    """Display one report as a table."""
    table = Table(title=report.subject)
    table.add_column("Check")
    table.add_column("Actual", justify="right")
    table.add_column("Expected", justify="right")
    table.add_column("Difference", justify="right")
    table.add_column("Result", width=8)

    for check in report.checks:
        table.add_row(
            check.label,
            f"${check.actual:,.2f}",
            f"${check.expected:,.2f}",
            f"${check.difference:,.4f}",
            "[green]PASS[/green]" if check.passed else "[red]FAIL[/red]",
        )

    console.print(table)


async def reconcile(
    config: Config,
    addresses: Sequence[str],
    network: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Run the reconciliation and print results. Returns the exit code."""
    validator = ReconciliationValidator.from_config(config)
    async with PortfolioClient.from_config(config, transport=transport) as client:
        try:
            reports = await run_reconciliation(
                client, validator, addresses, network=network, currency=config.currency,
            )
        except APIError as e:
            console.print(Panel(
                f"{e}",
                title="Request Failed",
                border_style="red",
            ))
            return 1

    for report in reports:
        display_report(report)

    failed = [r for r in reports if not r.passed]
    if failed:
        console.print(Panel(
            "\n".join(f"{r.subject}: {len(r.failures)} failed check(s)" for r in failed),
            title="Reconciliation Failed",
            border_style="red",
        ))
        return 1

    console.print(Panel(
        f"All checks passed within ${validator.tolerance}",
        title="Reconciliation Passed",
        border_style="green",
    ))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    print_banner()

    try:
        addresses, network, show_help = parse_args(sys.argv[1:] if argv is None else argv)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        console.print(USAGE)
        return 2

    if show_help:
        console.print(USAGE)
        return 0

    try:
        config = Config.load()
    except ValueError:
        return 2

    addresses = addresses or config.wallet_addresses
    if not addresses:
        console.print("[red]No wallet addresses given or configured.[/red]")
        return 2

    run_logger = RunLogger.from_config(config, console=console)
    run_name = f"Reconciliation of {len(addresses)} wallet(s)"
    run_logger.test_start(run_name)
    try:
        code = asyncio.run(reconcile(config, addresses, network or config.network))
    except Exception as e:
        run_logger.error("Reconciliation aborted", e)
        run_logger.test_end(run_name, passed=False)
        raise
    else:
        run_logger.test_end(run_name, passed=code == 0)
        return code
    finally:
        run_logger.close()


if __name__ == "__main__":
    sys.exit(main())
