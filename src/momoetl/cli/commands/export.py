"""Snapshot export command."""

import click
from momoetl.domain.export import ExportService


@click.command("export")
@click.argument("output", type=click.Path(dir_okay=False), default="momo_snapshot.json")
@click.pass_context
def export(ctx, output: str):
    """Write the JSON report snapshot to OUTPUT (default momo_snapshot.json).

    The file is regenerated from scratch on every run.
    """
    snapshot = ExportService(ctx.obj["db"]).write(output)
    reports = snapshot["reports"]
    click.echo(
        f"Wrote {output}: {len(reports['by_category'])} category rows, "
        f"{len(reports['by_day'])} day rows, {len(reports['accounts'])} accounts"
    )


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export)
