"""Main CLI entry point."""

import click
from momoetl.config import Settings
from momoetl.database.factories import create_sqlite_database
from momoetl.utils.logger import setup_logging

# Import and register all commands at module level
from momoetl.cli.commands import (
    init_categories,
    seed,
    party,
    process,
    transaction,
    tag,
    logs,
    export,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides MOMO_DB_PATH environment variable)",
    envvar="MOMO_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level (overrides MOMO_LOG_LEVEL environment variable)",
    envvar="MOMO_LOG_LEVEL",
)
@click.option("--log-file", type=click.Path(), help="Also write log output to this file")
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None, log_file: str | None):
    """MoMo ETL - Mobile money SMS processing pipeline.

    Parse XML SMS exports, normalize and categorize each transaction and load
    it into a ledger of parties, accounts, transactions and fees.
    """
    ctx.ensure_object(dict)

    try:
        settings = Settings.from_env().with_overrides(db_path=db_path, log_level=log_level)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    setup_logging(settings.log_level, log_file)
    ctx.obj["settings"] = settings

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=settings.db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
init_categories.register_commands(cli)
seed.register_commands(cli)
party.register_commands(cli)
process.register_commands(cli)
transaction.register_commands(cli)
tag.register_commands(cli)
logs.register_commands(cli)
export.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
