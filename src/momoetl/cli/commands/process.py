"""Batch processing command."""

from decimal import Decimal

import click
from momoetl.cli.error_handling import handle_domain_error, handle_store_unavailable
from momoetl.domain.errors import StoreUnavailableError
from momoetl.domain.pipeline import Pipeline


@click.command("process")
@click.argument("xml_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--workers", type=click.IntRange(min=1), help="Worker threads (overrides MOMO_WORKERS)")
@click.option("--timeout", type=click.FloatRange(min=0), help="Batch timeout in seconds (overrides MOMO_BATCH_TIMEOUT)")
@click.option("--dead-letter-dir", type=click.Path(file_okay=False), help="Directory for rejected records")
@click.option("--currency", help="Currency for records that carry none (overrides MOMO_DEFAULT_CURRENCY)")
@click.option("--fee-percent", help="Percentage fee when the SMS states no fee (overrides MOMO_FEE_PERCENT)")
@click.option("--verbose", "-v", is_flag=True, help="List the outcome of every record")
@click.pass_context
def process(
    ctx,
    xml_file: str,
    workers: int | None,
    timeout: float | None,
    dead_letter_dir: str | None,
    currency: str | None,
    fee_percent: str | None,
    verbose: bool,
):
    """Process an XML SMS export into the ledger.

    Re-running the same file is safe: records already loaded are skipped.

    Examples:
        momo process sms_export.xml
        momo process sms_export.xml --workers 4 --timeout 60
    """
    db = ctx.obj["db"]

    try:
        settings = ctx.obj["settings"].with_overrides(
            workers=workers,
            batch_timeout=timeout,
            dead_letter_dir=dead_letter_dir,
            default_currency=currency.upper() if currency else None,
            fee_percent=Decimal(fee_percent) if fee_percent is not None else None,
        )
    except ArithmeticError:
        handle_domain_error(ctx, ValueError(f"Invalid fee percentage '{fee_percent}'"))
        return

    try:
        summary = Pipeline(db, settings=settings).run_file(xml_file)
    except StoreUnavailableError as e:
        handle_store_unavailable(ctx, e)
        return
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if verbose:
        for outcome in summary.outcomes:
            label = outcome.reference_code or "-"
            click.echo(f"{outcome.status.value:10s} {label:25s} {outcome.message}")
        click.echo()

    click.echo(f"Batch {summary.batch_id}")
    click.echo(f"  Completed: {summary.completed}")
    click.echo(f"  Failed:    {summary.failed}")
    click.echo(f"  Skipped:   {summary.skipped}")
    click.echo(f"  Unparsed:  {summary.unparsed}")
    click.echo(f"  Aborted:   {summary.aborted}")
    if summary.dead_letter_path:
        click.echo(f"Rejected records written to {summary.dead_letter_path}")
    click.echo(f"Details: momo logs list --batch {summary.batch_id}")


def register_commands(cli):
    """Register process command with main CLI."""
    cli.add_command(process)
