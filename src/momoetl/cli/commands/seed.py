"""Seed sample reference data."""

import click
from momoetl.domain.category import CategoryService
from momoetl.domain.party import PartyService


@click.command("seed-sample")
@click.pass_context
def seed_sample(ctx):
    """Create the default categories and the sample parties with funded accounts.

    Safe to run more than once: existing categories and parties are left alone.
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]

    categories = CategoryService(db).ensure_defaults()
    parties = PartyService(
        db,
        country_code=settings.country_code,
        default_currency=settings.default_currency,
    ).seed_sample()

    click.echo(f"Created {categories} categories and {parties} parties.")


def register_commands(cli):
    """Register seed-sample command with main CLI."""
    cli.add_command(seed_sample)
