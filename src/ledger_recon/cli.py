"""
Command-line interface for check register / bank feed reconciliation.
"""

from pathlib import Path
from typing import Optional
import sys

import click
from rich.console import Console
from rich.table import Table

from .config import ReconConfig, generate_default_config, load_config
from .locking import LockFileLedgerLock
from .matching.similarity import similarity as description_similarity
from .models.ledger import MatchCriteria, MatchRunResult
from .parsers.bank_feed_parser import BankFeedParser
from .parsers.check_register_parser import CheckRegisterParser
from .reports.excel_generator import ExcelReportGenerator
from .service import ReconciliationService, ServiceResult
from .store.memory import InMemoryRecordStore
from .store.workbook import WorkbookRecordStore
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging

console = Console()

config_option = click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
verbose_option = click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Check register to bank feed reconciliation tool."""
    pass


def _setup(config_path: Optional[Path], verbose: bool) -> ReconConfig:
    recon_config = load_config(config_path)
    setup_logging(recon_config.logging, verbose)
    return recon_config


def _open_service(workbook: Path, recon_config: ReconConfig) -> ReconciliationService:
    store = WorkbookRecordStore(workbook, recon_config.ledger)
    lock = LockFileLedgerLock(
        workbook.with_name(workbook.name + recon_config.lock.lock_file_suffix),
        poll_interval=recon_config.lock.poll_interval_seconds,
    )
    return ReconciliationService(store, lock, recon_config)


@main.command()
@click.argument("workbook", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--disable-tier",
    "disabled_tiers",
    type=click.IntRange(1, 3),
    multiple=True,
    help="Skip a matching tier (repeatable)",
)
@click.option("-r", "--report", type=click.Path(path_type=Path), help="Write an Excel run report")
@config_option
@verbose_option
def run(
    workbook: Path,
    disabled_tiers: tuple[int, ...],
    report: Optional[Path],
    config: Optional[Path],
    verbose: bool,
):
    """
    Match unmatched check register rows against the bank statement.

    WORKBOOK: Ledger workbook holding both sheets
    """
    try:
        recon_config = _setup(config, verbose)
        service = _open_service(workbook, recon_config)
    except ReconciliationError as e:
        console.print(f"[red]{e.kind.value}: {e}[/red]")
        sys.exit(1)

    criteria = MatchCriteria(
        enable_tier1=1 not in disabled_tiers,
        enable_tier2=2 not in disabled_tiers,
        enable_tier3=3 not in disabled_tiers,
    )
    outcome = service.run_auto_matching_process(criteria)

    if outcome.value is not None:
        _display_run(outcome.value)
        if report:
            _write_report(outcome.value, report, recon_config)

    _exit_on_error(outcome)
    console.print(f"\n[green]Ledger updated: {workbook}[/green]")


@main.command()
@click.argument("workbook", type=click.Path(exists=True, path_type=Path))
@click.argument("transaction_id")
@click.argument("row", type=int)
@config_option
@verbose_option
def manual(
    workbook: Path,
    transaction_id: str,
    row: int,
    config: Optional[Path],
    verbose: bool,
):
    """
    Match a check register row to a bank transaction by hand.

    TRANSACTION_ID: Bank transaction id; ROW: check register row number
    """
    try:
        recon_config = _setup(config, verbose)
        service = _open_service(workbook, recon_config)
    except ReconciliationError as e:
        console.print(f"[red]{e.kind.value}: {e}[/red]")
        sys.exit(1)

    outcome = service.validate_and_apply_manual_match(transaction_id, row)
    _exit_on_error(outcome)

    confirmation = outcome.value
    console.print(
        f"[green]Row {confirmation.check_register_row} "
        f"'{confirmation.check_item.description}' matched to "
        f"{confirmation.transaction_id} '{confirmation.bank_item.description}'[/green]"
    )


@main.command("import")
@click.argument("checks_csv", type=click.Path(exists=True, path_type=Path))
@click.argument("bank_csv", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="Ledger workbook to create",
)
@config_option
@verbose_option
def import_csv(
    checks_csv: Path,
    bank_csv: Path,
    output: Path,
    config: Optional[Path],
    verbose: bool,
):
    """
    Build a ledger workbook from check register and bank feed CSV files.
    """
    try:
        recon_config = _setup(config, verbose)
        check_items = CheckRegisterParser(recon_config).parse_file(checks_csv)
        bank_items = BankFeedParser(recon_config).parse_file(bank_csv)
        WorkbookRecordStore.create(output, check_items, bank_items, recon_config.ledger)
    except ReconciliationError as e:
        console.print(f"[red]{e.kind.value}: {e}[/red]")
        sys.exit(1)

    console.print(
        f"[green]Ledger workbook created: {output} "
        f"({len(check_items)} check rows, {len(bank_items)} bank rows)[/green]"
    )


@main.command()
@click.argument("checks_csv", type=click.Path(exists=True, path_type=Path))
@click.argument("bank_csv", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-r",
    "--report",
    type=click.Path(path_type=Path),
    help="Report path (defaults to output.filename_template in the working directory)",
)
@config_option
@verbose_option
def reconcile(
    checks_csv: Path,
    bank_csv: Path,
    report: Optional[Path],
    config: Optional[Path],
    verbose: bool,
):
    """
    Dry-run matching of two CSV files without writing a ledger.
    """
    try:
        recon_config = _setup(config, verbose)
        store = InMemoryRecordStore(
            CheckRegisterParser(recon_config).parse_file(checks_csv),
            BankFeedParser(recon_config).parse_file(bank_csv),
            recon_config.ledger.beginning_balance_label,
        )
    except ReconciliationError as e:
        console.print(f"[red]{e.kind.value}: {e}[/red]")
        sys.exit(1)

    outcome = ReconciliationService(store, config=recon_config).run_auto_matching_process()
    if outcome.value is not None:
        _display_run(outcome.value)
        _write_report(outcome.value, report, recon_config)

    _exit_on_error(outcome)


@main.command()
@click.argument("first")
@click.argument("second")
def similarity(first: str, second: str):
    """Show the description similarity score of two strings."""
    score = description_similarity(first, second)
    color = "green" if score > ReconConfig().matching.similarity_threshold else "yellow"
    console.print(f"[{color}]{score:.4f}[/{color}]")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _write_report(
    result: MatchRunResult, report: Optional[Path], recon_config: ReconConfig
) -> None:
    try:
        if report is None:
            report = Path(recon_config.output.report_filename(result.run_at))
        path = ExcelReportGenerator(recon_config).generate_report(result, report)
    except ReconciliationError as e:
        console.print(f"[red]{e.kind.value}: {e}[/red]")
        sys.exit(1)
    console.print(f"\n[green]Report generated: {path}[/green]")


def _exit_on_error(outcome: ServiceResult) -> None:
    if outcome.ok:
        return
    error = outcome.error
    console.print(f"[red]{error.kind.value}: {error.message}[/red]")
    for detail in error.details:
        console.print(f"  [red]- {detail}[/red]")
    sys.exit(1)


def _display_run(result: MatchRunResult) -> None:
    """Display match counts and the matched pairs."""
    table = Table(title="Matching Run")
    table.add_column("Tier", justify="center")
    table.add_column("Check Row", justify="right")
    table.add_column("Check Description")
    table.add_column("Bank ID")
    table.add_column("Bank Description")
    table.add_column("Amount", justify="right")
    table.add_column("Score", justify="right")

    for match in result.matches[:50]:
        table.add_row(
            str(match.tier),
            str(match.check_item.row),
            match.check_item.description[:40],
            match.bank_item.transaction_id,
            match.bank_item.description[:40],
            f"${match.bank_item.amount:,.2f}",
            f"{match.similarity:.3f}",
        )

    console.print(table)
    if result.total_matches > 50:
        console.print(f"... and {result.total_matches - 50} more matches")

    summary = Table(title="Summary")
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", justify="right")
    for label, value in result.counts().items():
        summary.add_row(label, str(value))
    summary.add_row("outstandingCheckRows", str(len(result.unmatched_check_items)))
    summary.add_row("unmatchedBankRows", str(len(result.unmatched_bank_items)))
    console.print(summary)


if __name__ == "__main__":
    main()
