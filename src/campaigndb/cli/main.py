"""
campaigndb CLI - Main entry point.

Typer-based command-line interface for the campaign store's lifecycle:
migrations, seeds, backups, analysis and monitoring.

Usage:
    campaigndb migrate up
    campaigndb migrate status
    campaigndb seed run basic_data
    campaigndb backup create before_import
    campaigndb restore before_import
    campaigndb analyze all
    campaigndb monitor report --days 7
    campaigndb status

Installation:
    pip install -e .
    # Then use: campaigndb --help
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from campaigndb.config.config import Config, ConfigurationError, validate_configuration
from campaigndb.domain.enums import Severity
from campaigndb.domain.errors import DatabaseToolkitError
from campaigndb.domain.types import (
    AlertRecord,
    IndexUsageReport,
    IntegrityIssue,
    PerformanceAnalysis,
    SizeReport,
)
from campaigndb.infrastructure.backup.backup_manager import BackupManager
from campaigndb.infrastructure.database.connection import open_connection
from campaigndb.infrastructure.database.migrations.migration_manager import MigrationRunner
from campaigndb.infrastructure.database.migrations.registry import load_registry
from campaigndb.infrastructure.database.migrations.scaffold import scaffold_migration
from campaigndb.infrastructure.database.seeds.registry import default_seeds
from campaigndb.infrastructure.database.seeds.seed_runner import SeedRunner
from campaigndb.infrastructure.monitoring.analyzer import REPRESENTATIVE_QUERIES, DatabaseAnalyzer
from campaigndb.infrastructure.monitoring.database_monitor import DatabaseMonitor
from campaigndb.utils.formatting import filename_timestamp, format_bytes
from campaigndb.utils.logging import setup_logging
from campaigndb.utils.tracing import new_run_id

app = typer.Typer(
    name="campaigndb",
    help="Campaign store toolkit - migrations, seeds, backups and monitoring",
    add_completion=False,
    no_args_is_help=True,
)
migrate_app = typer.Typer(help="Apply, revert and inspect schema migrations.", no_args_is_help=True)
seed_app = typer.Typer(help="Populate or clear table data.", no_args_is_help=True)
backup_app = typer.Typer(help="Create, list, verify and delete backups.", no_args_is_help=True)
analyze_app = typer.Typer(help="Query plans, indexes, integrity and size.", no_args_is_help=True)
monitor_app = typer.Typer(help="Health checks, performance reports and alerts.", no_args_is_help=True)

app.add_typer(migrate_app, name="migrate")
app.add_typer(seed_app, name="seed")
app.add_typer(backup_app, name="backup")
app.add_typer(analyze_app, name="analyze")
app.add_typer(monitor_app, name="monitor")

console = Console()

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "green",
}

ToolkitErrors = (DatabaseToolkitError, ConfigurationError, sqlite3.Error, OSError)

Confirm = Callable[[str], bool]


def confirm_on_stdin(prompt: str) -> bool:
    """Ask a yes/no question; only a literal y or yes counts as yes."""
    try:
        answer = console.input(f"{prompt} (y/N): ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


# Prompt used by destructive commands without --yes.
confirm: Confirm = confirm_on_stdin


def _require_confirmation(warning: str, yes: bool) -> None:
    console.print(f"[bold yellow]WARNING:[/bold yellow] {warning}")
    if yes:
        return
    if not confirm("Continue?"):
        console.print("[dim]Operation cancelled.[/dim]")
        raise typer.Exit(1)


def _load_config(verbose: bool) -> Config:
    config = Config.from_env()
    if verbose:
        level = "DEBUG"
    elif config.database.verbose:
        level = "INFO"
    else:
        level = config.logging.level
    setup_logging(level=level, log_file=config.logging.log_file)
    new_run_id()
    validate_configuration(config)
    return config


@contextmanager
def _session(verbose: bool) -> Iterator[Tuple[Config, sqlite3.Connection]]:
    """Load config, configure logging and hold one connection for a command."""
    config = _load_config(verbose)

    conn = open_connection(
        config.database.path,
        timeout=config.database.timeout,
        verbose=config.database.verbose,
    )
    try:
        yield config, conn
    finally:
        conn.close()


def _fail(error: Exception, verbose: bool) -> None:
    console.print(f"[red]✗ {escape(str(error))}[/red]")
    if verbose:
        console.print_exception()
    raise typer.Exit(1)


def _backup_manager(config: Config, conn: sqlite3.Connection) -> BackupManager:
    return BackupManager(
        conn,
        config.database.path,
        config.backup.directory,
        max_auto_backups=config.backup.max_auto_backups,
    )


# ============================================================================
# migrate
# ============================================================================


@migrate_app.command("up")
def migrate_up(
    target: Optional[int] = typer.Argument(None, help="Version to migrate to (default: latest)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Apply pending migrations."""
    try:
        with _session(verbose) as (config, conn):
            runner = MigrationRunner(conn)
            applied = runner.migrate_up(load_registry(), target)
            for migration in applied:
                console.print(f"[green]✓[/green] Applied {migration.version}: {migration.description}")
            if not applied:
                console.print(f"Database already at version {runner.current_version()}, nothing to apply.")
            console.print(f"[bold green]Database at version {runner.current_version()}[/bold green]")
    except ToolkitErrors as e:
        _fail(e, verbose)


@migrate_app.command("down")
def migrate_down(
    target: int = typer.Argument(..., help="Version to roll back to (0 = empty schema)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Revert migrations above the target version."""
    try:
        with _session(verbose) as (config, conn):
            runner = MigrationRunner(conn)
            reverted = runner.migrate_down(load_registry(), target)
            for migration in reverted:
                console.print(f"[green]✓[/green] Rolled back {migration.version}: {migration.description}")
            console.print(f"[bold green]Database at version {runner.current_version()}[/bold green]")
    except ToolkitErrors as e:
        _fail(e, verbose)


@migrate_app.command("status")
def migrate_status(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Show applied and pending migrations."""
    try:
        with _session(verbose) as (config, conn):
            _print_migration_status(MigrationRunner(conn))
    except ToolkitErrors as e:
        _fail(e, verbose)


@migrate_app.command("create")
def migrate_create(
    name: str = typer.Argument(..., help="Short description, e.g. 'add campaign budget'."),
    directory: Optional[Path] = typer.Option(
        None, "--dir", help="Directory to write into (default: the versions package)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Scaffold a new migration module for the next version."""
    try:
        _load_config(verbose)
        path = scaffold_migration(name, load_registry(), directory)
    except ToolkitErrors + (ValueError,) as e:
        _fail(e, verbose)
        return
    console.print(f"[green]✓[/green] Created {path}")
    console.print("[dim]Fill in SQL_UP and SQL_DOWN, then run: campaigndb migrate up[/dim]")


def _print_migration_status(runner: MigrationRunner) -> None:
    status = runner.status(load_registry())
    table = Table(title=f"Migrations (current version {status.current})")
    table.add_column("Version", justify="right", style="cyan")
    table.add_column("Description")
    table.add_column("Status", justify="center")
    table.add_column("Applied At", style="dim")

    for record in status.applied:
        table.add_row(str(record.version), record.description, "[green]applied[/green]", record.applied_at)
    for migration in status.pending:
        table.add_row(str(migration.version), migration.description, "[yellow]pending[/yellow]", "")

    console.print(table)
    if status.is_up_to_date:
        console.print("[green]Schema is up to date.[/green]")
    else:
        console.print(f"[yellow]{len(status.pending)} pending migration(s).[/yellow]")


# ============================================================================
# seed
# ============================================================================


@seed_app.command("run")
def seed_run(
    name: Optional[str] = typer.Argument(None, help="Seed to run (default: all)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Run one seed, or all of them in order."""
    try:
        with _session(verbose) as (config, conn):
            runner = SeedRunner(conn)
            seeds = default_seeds()
            if name:
                runner.run_one(seeds, name)
                console.print(f"[green]✓[/green] Seed {name} completed")
            else:
                completed = runner.run_all(seeds)
                console.print(f"[green]✓[/green] Ran {len(completed)} seed(s): {', '.join(completed)}")
    except ToolkitErrors as e:
        _fail(e, verbose)


@seed_app.command("clear")
def seed_clear(
    tables: Optional[str] = typer.Option(
        None, "--tables", "-t", help="Comma-separated tables to clear (default: all)."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Delete all rows from every table (or the given ones)."""
    names = [t.strip() for t in tables.split(",") if t.strip()] if tables else None
    target = ", ".join(names) if names else "ALL tables"
    _require_confirmation(f"This deletes every row in {target}.", yes)
    try:
        with _session(verbose) as (config, conn):
            runner = SeedRunner(conn)
            if names:
                cleared = runner.clear_tables(names, force=True)
            else:
                cleared = runner.clear_all_data(force=True)
            console.print(f"[bold green]✓ Cleared {len(cleared)} table(s)[/bold green]")
    except ToolkitErrors as e:
        _fail(e, verbose)


@seed_app.command("reset")
def seed_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Clear all data, then run every seed."""
    _require_confirmation("This deletes all data and reloads the seeds.", yes)
    try:
        with _session(verbose) as (config, conn):
            completed = SeedRunner(conn).reset(default_seeds(), force=True)
            console.print(f"[bold green]✓ Data reset, ran {len(completed)} seed(s)[/bold green]")
    except ToolkitErrors as e:
        _fail(e, verbose)


@seed_app.command("list")
def seed_list(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """List available seeds."""
    try:
        _load_config(verbose)
    except ToolkitErrors as e:
        _fail(e, verbose)
        return

    table = Table(title="Seeds")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for seed in default_seeds():
        table.add_row(seed.name, seed.description)
    console.print(table)


# ============================================================================
# backup / restore
# ============================================================================


@backup_app.command("create")
def backup_create(
    name: Optional[str] = typer.Argument(None, help="Backup name (default: timestamped)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Create a backup of the live store."""
    try:
        with _session(verbose) as (config, conn):
            manager = _backup_manager(config, conn)
            path = manager.create_backup(name)
            console.print(f"[green]✓[/green] Backup created: {path}")
            if config.backup.verify_after_create and not manager.verify_backup(path.stem):
                console.print("[red]✗ Backup failed verification[/red]")
                raise typer.Exit(1)
    except ToolkitErrors as e:
        _fail(e, verbose)


@backup_app.command("auto")
def backup_auto(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Create a timestamped automatic backup and rotate old ones."""
    try:
        with _session(verbose) as (config, conn):
            path = _backup_manager(config, conn).create_auto_backup()
            console.print(f"[green]✓[/green] Auto backup created: {path}")
            console.print(f"[dim]Keeping the {config.backup.max_auto_backups} most recent auto backups[/dim]")
    except ToolkitErrors as e:
        _fail(e, verbose)


@backup_app.command("list")
def backup_list(
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Show at most N backups."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """List backups, newest first."""
    try:
        with _session(verbose) as (config, conn):
            backups = _backup_manager(config, conn).list_backups(limit)
    except ToolkitErrors as e:
        _fail(e, verbose)
        return

    if not backups:
        console.print("[yellow]No backups found.[/yellow]")
        return

    table = Table(title="Backups")
    table.add_column("Name", style="cyan")
    table.add_column("Created")
    table.add_column("Size", justify="right")
    for backup in backups:
        table.add_row(backup.name, backup.created.strftime("%Y-%m-%d %H:%M:%S"), format_bytes(backup.size))
    console.print(table)


@backup_app.command("verify")
def backup_verify(
    name: str = typer.Argument(..., help="Backup name."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Check a backup's integrity in a read-only connection."""
    try:
        with _session(verbose) as (config, conn):
            ok = _backup_manager(config, conn).verify_backup(name)
    except ToolkitErrors as e:
        _fail(e, verbose)
        return

    if ok:
        console.print(f"[green]✓ Backup {name} is valid[/green]")
    else:
        console.print(f"[red]✗ Backup {name} failed verification[/red]")
        raise typer.Exit(1)


@backup_app.command("delete")
def backup_delete(
    name: str = typer.Argument(..., help="Backup name."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Delete a backup and its metadata."""
    try:
        with _session(verbose) as (config, conn):
            deleted = _backup_manager(config, conn).delete_backup(name)
    except ToolkitErrors as e:
        _fail(e, verbose)
        return
    if deleted:
        console.print(f"[green]✓[/green] Deleted backup {name}")
    else:
        console.print(f"[dim]No backup named {name}[/dim]")


@app.command()
def restore(
    name: str = typer.Argument(..., help="Backup to restore."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Overwrite the live store with a backup."""
    _require_confirmation(
        f"Restoring '{name}' overwrites the live database. "
        "Create a backup first if you may need the current data.",
        yes,
    )
    try:
        with _session(verbose) as (config, conn):
            restored = _backup_manager(config, conn).restore_backup(name, force=True)
            version = MigrationRunner(restored).current_version()
            restored.close()
            console.print(f"[bold green]✓ Restored {name} (schema version {version})[/bold green]")
    except ToolkitErrors as e:
        _fail(e, verbose)


# ============================================================================
# analyze
# ============================================================================


def _analyzer_command(verbose: bool, render: Callable[[DatabaseAnalyzer], None]) -> None:
    try:
        with _session(verbose) as (config, conn):
            render(DatabaseAnalyzer(conn))
    except ToolkitErrors as e:
        _fail(e, verbose)


@analyze_app.command("performance")
def analyze_performance(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Show query plans for representative queries."""
    _analyzer_command(verbose, lambda a: _print_performance(a.analyze_performance()))


@analyze_app.command("indexes")
def analyze_indexes(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """List indexes and recommended ones that are missing."""
    _analyzer_command(verbose, lambda a: _print_indexes(a.analyze_index_usage()))


@analyze_app.command("integrity")
def analyze_integrity(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Run structural, foreign key, business rule and orphan checks."""
    _analyzer_command(verbose, lambda a: _print_integrity(a.check_data_integrity()))


@analyze_app.command("size")
def analyze_size(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Show database and per-table size estimates."""
    _analyzer_command(verbose, lambda a: _print_size(a.analyze_database_size()))


@analyze_app.command("all")
def analyze_all(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Run size, index, performance and integrity analysis."""

    def render(analyzer: DatabaseAnalyzer) -> None:
        report = analyzer.run_complete_analysis()
        _print_size(report.size)
        _print_indexes(report.indexes)
        _print_performance(report.performance)
        _print_integrity(report.integrity)
        console.print("[bold green]✓ Complete analysis finished[/bold green]")

    _analyzer_command(verbose, render)


def _print_size(report: SizeReport) -> None:
    console.print(Panel(
        f"Database size: [bold]{format_bytes(report.total_bytes)}[/bold]\n"
        f"Pages: {report.page_count:,} x {report.page_size} bytes",
        title="Database Size",
    ))
    table = Table(title="Tables")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    table.add_column("Avg Row", justify="right")
    table.add_column("Est. Size", justify="right")
    for t in report.tables:
        table.add_row(t.name, f"{t.row_count:,}", f"{t.average_row_bytes:.0f} B", format_bytes(t.estimated_bytes))
    console.print(table)

    console.print("[bold]Largest tables:[/bold]")
    for i, t in enumerate(report.largest(5), 1):
        console.print(f"  {i}. {t.name}: {format_bytes(t.estimated_bytes)} ({t.row_count:,} rows)")


def _print_indexes(report: IndexUsageReport) -> None:
    table = Table(title="Indexes")
    table.add_column("Table", style="cyan")
    table.add_column("Index")
    table.add_column("Definition", style="dim")
    for table_name, indexes in report.indexes_by_table.items():
        for index in indexes:
            table.add_row(table_name, index.name, escape(index.sql or "(automatic)"))
    if report.indexes_by_table:
        console.print(table)
    else:
        console.print("[yellow]No custom indexes found.[/yellow]")
    _print_suggestions(report.missing)


def _print_suggestions(suggestions) -> None:
    if not suggestions:
        console.print("[green]All recommended indexes are present.[/green]")
        return
    console.print("[bold]Index suggestions:[/bold]")
    for suggestion in suggestions:
        console.print(f"  {escape(suggestion.create_sql)};")
        console.print(f"    [dim]Reason: {suggestion.reason}[/dim]")


def _print_performance(analysis: PerformanceAnalysis) -> None:
    for plan in analysis.plans:
        console.print(f"[bold cyan]{plan.name}[/bold cyan]")
        if plan.error:
            console.print(f"  [red]Error analyzing query: {escape(plan.error)}[/red]")
        for step in plan.steps:
            console.print(f"  {escape(step)}")
    _print_suggestions(analysis.suggestions)


def _print_integrity(issues: List[IntegrityIssue]) -> None:
    if not issues:
        console.print("[bold green]✓ No integrity issues found[/bold green]")
        return

    table = Table(title=f"Integrity Issues ({len(issues)})")
    table.add_column("Severity", justify="center")
    table.add_column("Type")
    table.add_column("Table", style="cyan")
    table.add_column("Description")
    table.add_column("Suggestion", style="dim")
    for issue in issues:
        style = SEVERITY_STYLES[issue.severity]
        table.add_row(
            f"[{style}]{issue.severity.value}[/{style}]",
            issue.type.value,
            issue.table,
            escape(issue.description),
            issue.suggestion or "",
        )
    console.print(table)


# ============================================================================
# monitor
# ============================================================================


@monitor_app.command("health")
def monitor_health(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Check integrity, WAL backlog, size and recent query activity."""
    try:
        with _session(verbose) as (config, conn):
            report = DatabaseMonitor(conn, config.monitoring).monitor_health()
    except ToolkitErrors as e:
        _fail(e, verbose)
        return

    table = Table(title="Database Health")
    table.add_column("Check", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Details", style="dim")
    table.add_row(
        "Integrity",
        "[green]PASS[/green]" if report.integrity_ok else "[red]FAIL[/red]",
        escape(report.integrity_result),
    )
    table.add_row("WAL", "", f"{report.wal_frames} frames, {report.wal_checkpointed} checkpointed")
    table.add_row("Size", "", format_bytes(report.size_bytes))
    table.add_row(
        "Last hour",
        "",
        f"{report.recent_queries} queries, {report.recent_average_ms:.0f}ms avg, "
        f"{report.recent_slow_queries} slow",
    )
    console.print(table)
    _print_alerts(report.alerts)


@monitor_app.command("report")
def monitor_report(
    days: int = typer.Option(7, "--days", "-d", help="Report window in days."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Summarize recorded query performance."""
    try:
        with _session(verbose) as (config, conn):
            text = DatabaseMonitor(conn, config.monitoring).generate_performance_report(days)
    except ToolkitErrors as e:
        _fail(e, verbose)
        return
    console.print(text, markup=False, highlight=False)


@monitor_app.command("benchmark")
def monitor_benchmark(
    iterations: int = typer.Option(10, "--iterations", "-i", help="Runs per query."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Time the representative queries and record them as samples."""
    try:
        with _session(verbose) as (config, conn):
            monitor = DatabaseMonitor(conn, config.monitoring)
            table = Table(title=f"Benchmark ({iterations} iterations)")
            table.add_column("Query", style="cyan")
            table.add_column("Rows", justify="right")
            table.add_column("Status")
            for query in REPRESENTATIVE_QUERIES:
                try:
                    rows = []
                    for _ in range(iterations):
                        rows = monitor.monitor_query(query.sql, query.parameters)
                    table.add_row(query.name, str(len(rows)), "[green]ok[/green]")
                except sqlite3.Error as e:
                    table.add_row(query.name, "-", f"[red]{escape(str(e))}[/red]")
            console.print(table)
            summary = monitor.summarize_performance(days=1)
            console.print(f"Average over the last day: {summary.average_ms:.2f}ms ({summary.total_queries} samples)")
    except ToolkitErrors as e:
        _fail(e, verbose)


@monitor_app.command("alerts")
def monitor_alerts(
    severity: Optional[str] = typer.Option(
        None, "--severity", "-s", help="Only show this severity (low, medium, high, critical)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """List stored alerts, newest first."""
    try:
        wanted = Severity(severity) if severity else None
    except ValueError:
        console.print(f"[red]Invalid severity: {escape(severity)}[/red]")
        raise typer.Exit(1)
    try:
        with _session(verbose) as (config, conn):
            alerts = DatabaseMonitor(conn, config.monitoring).get_alerts(wanted)
    except ToolkitErrors as e:
        _fail(e, verbose)
        return
    if not alerts:
        console.print("No alerts found.")
        return
    _print_alerts(alerts)


@monitor_app.command("clear-alerts")
def monitor_clear_alerts(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Delete all stored alerts."""
    try:
        with _session(verbose) as (config, conn):
            DatabaseMonitor(conn, config.monitoring).clear_alerts()
    except ToolkitErrors as e:
        _fail(e, verbose)
        return
    console.print("[green]✓ All alerts cleared[/green]")


@monitor_app.command("clean-logs")
def monitor_clean_logs(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Delete performance logs and alerts past the retention window."""
    try:
        with _session(verbose) as (config, conn):
            deleted = DatabaseMonitor(conn, config.monitoring).clean_old_logs()
    except ToolkitErrors as e:
        _fail(e, verbose)
        return
    console.print(f"[green]✓[/green] Cleaned {deleted} old log file(s)")


def _print_alerts(alerts: List[AlertRecord]) -> None:
    if not alerts:
        return
    table = Table(title="Alerts")
    table.add_column("Time", style="dim")
    table.add_column("Severity", justify="center")
    table.add_column("Type")
    table.add_column("Message")
    for alert in alerts:
        style = SEVERITY_STYLES[alert.severity]
        table.add_row(
            datetime.fromtimestamp(alert.timestamp).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{style}]{alert.severity.value}[/{style}]",
            alert.type.value,
            escape(alert.message),
        )
    console.print(table)


# ============================================================================
# status / reset
# ============================================================================


@app.command()
def status(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Migration status, database size and recent backups."""
    try:
        with _session(verbose) as (config, conn):
            _print_migration_status(MigrationRunner(conn))
            size = DatabaseAnalyzer(conn).analyze_database_size()
            backups = _backup_manager(config, conn).list_backups(5)
    except ToolkitErrors as e:
        _fail(e, verbose)
        return

    console.print(Panel(
        f"Path: {escape(str(config.database.path))}\n"
        f"Size: {format_bytes(size.total_bytes)} ({size.page_count:,} pages)",
        title="Database",
    ))
    if backups:
        table = Table(title="Recent Backups")
        table.add_column("Name", style="cyan")
        table.add_column("Created")
        table.add_column("Size", justify="right")
        for backup in backups:
            table.add_row(backup.name, backup.created.strftime("%Y-%m-%d %H:%M:%S"), format_bytes(backup.size))
        console.print(table)
    else:
        console.print("[dim]No backups yet.[/dim]")


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Back up, roll back every migration, re-apply them and reload seeds."""
    _require_confirmation("This drops and recreates the whole schema and reloads seed data.", yes)
    try:
        with _session(verbose) as (config, conn):
            backup_name = f"pre_reset_{filename_timestamp(datetime.now())}"
            path = _backup_manager(config, conn).create_backup(backup_name)
            console.print(f"[green]✓[/green] Safety backup: {path}")

            registry = load_registry()
            runner = MigrationRunner(conn)
            reverted = runner.reset(registry, force=True)
            console.print(f"[green]✓[/green] Rolled back {len(reverted)} migration(s)")
            applied = runner.migrate_up(registry)
            console.print(f"[green]✓[/green] Applied {len(applied)} migration(s)")
            seeds = SeedRunner(conn).run_all(default_seeds())
            console.print(f"[green]✓[/green] Ran {len(seeds)} seed(s)")

            console.print(Panel(
                f"Schema version {runner.current_version()}, backup saved as {backup_name}",
                title="[bold green]Reset complete[/bold green]",
            ))
    except ToolkitErrors as e:
        _fail(e, verbose)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
