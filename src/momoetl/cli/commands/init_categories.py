"""Initialize default categories."""

import click
from momoetl.domain.category import CategoryService


@click.command("init-categories")
@click.pass_context
def init_categories(ctx):
    """Create the default transaction categories that are missing."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    created = service.ensure_defaults()
    if created == 0:
        click.echo("Default categories already exist.")
    else:
        click.echo(f"Successfully created {created} categories.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
