"""Processing log commands."""

from datetime import datetime

import click
from momoetl.domain.audit import AuditLogger
from momoetl.domain.entities import LogLevel
from momoetl.utils.date_parser import parse_date


@click.group()
def logs_group():
    """Inspect and maintain the processing log."""
    pass


@logs_group.command("list")
@click.option("--batch", "batch_id", help="Only entries of this batch")
@click.option(
    "--level",
    type=click.Choice([level.value for level in LogLevel], case_sensitive=False),
    help="Only entries with this level",
)
@click.option("--stage", help="Only entries of this stage (parse_xml, clean_normalize, categorize, load_db, batch)")
@click.option("--ref", "reference_code", help="Only entries for this reference code")
@click.option("--limit", type=click.IntRange(min=1), default=200, show_default=True, help="Maximum entries to show")
@click.pass_context
def list_logs(
    ctx,
    batch_id: str | None,
    level: str | None,
    stage: str | None,
    reference_code: str | None,
    limit: int,
):
    """List processing log entries in the order they were written."""
    audit = AuditLogger(ctx.obj["db"])

    entries = audit.entries(
        batch_id=batch_id,
        level=LogLevel(level.upper()) if level else None,
        stage=stage,
        reference_code=reference_code,
        limit=limit,
    )
    if not entries:
        click.echo("No log entries found.")
        return

    for entry in entries:
        ref = entry.reference_code or "-"
        status = entry.status or "-"
        click.echo(
            f"{entry.log_timestamp.strftime('%Y-%m-%d %H:%M:%S')} {entry.log_level.value:8s} "
            f"{entry.process_name:16s} {status:14s} {ref:25s} {entry.message}"
        )


@logs_group.command("purge")
@click.option("--before", required=True, help="Delete entries older than this date (e.g. 2026-01-01, 'last month')")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def purge_logs(ctx, before: str, yes: bool):
    """Delete processing log entries older than a date.

    This is the only way entries are ever removed.
    """
    try:
        cutoff_date = parse_date(before)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    cutoff = datetime.combine(cutoff_date, datetime.min.time())
    if not yes:
        click.confirm(f"Delete all processing log entries before {cutoff_date.isoformat()}?", abort=True)

    deleted = AuditLogger(ctx.obj["db"]).purge(cutoff)
    click.echo(f"Deleted {deleted} log entries.")


def register_commands(cli):
    """Register logs commands with main CLI."""
    cli.add_command(logs_group, name="logs")
