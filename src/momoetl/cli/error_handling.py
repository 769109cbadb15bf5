"""CLI error handling helpers."""

import click

from momoetl.domain.errors import DomainError, StoreUnavailableError

# Exit code for a batch stopped because the store could not be reached
STORE_UNAVAILABLE_EXIT_CODE = 2


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_store_unavailable(ctx: click.Context, error: StoreUnavailableError) -> None:
    """Render a fatal store error and exit."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(STORE_UNAVAILABLE_EXIT_CODE)
