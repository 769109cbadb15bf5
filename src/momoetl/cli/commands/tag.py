"""Transaction tag commands."""

import click
from momoetl.cli.error_handling import handle_domain_error
from momoetl.domain.errors import DomainError
from momoetl.domain.tags import TagService


@click.group()
def tag_group():
    """Tag transactions."""
    pass


@tag_group.command("add")
@click.argument("reference_code")
@click.argument("tag_name")
@click.option("--by", "assigned_by", default="admin", show_default=True, help="Who assigns the tag")
@click.pass_context
def add_tag(ctx, reference_code: str, tag_name: str, assigned_by: str):
    """Attach TAG_NAME to the transaction REFERENCE_CODE.

    Examples:
        momo tag add TXN-001-2026-001 verified
        momo tag add TXN-001-2026-004 requires-review --by system
    """
    service = TagService(ctx.obj["db"])
    try:
        service.add_tag(reference_code, tag_name, assigned_by=assigned_by)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Tagged {reference_code} with '{tag_name.strip().lower()}'")


@tag_group.command("remove")
@click.argument("reference_code")
@click.argument("tag_name")
@click.pass_context
def remove_tag(ctx, reference_code: str, tag_name: str):
    """Detach TAG_NAME from the transaction REFERENCE_CODE."""
    service = TagService(ctx.obj["db"])
    try:
        removed = service.remove_tag(reference_code, tag_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not removed:
        click.echo(f"Error: {reference_code} is not tagged '{tag_name}'", err=True)
        ctx.exit(1)
    click.echo(f"Removed tag '{tag_name}' from {reference_code}")


@tag_group.command("list")
@click.argument("reference_code", required=False)
@click.option("--tag", "tag_name", help="List transactions carrying this tag instead")
@click.pass_context
def list_tags(ctx, reference_code: str | None, tag_name: str | None):
    """List the tags of a transaction, or the transactions with a tag."""
    service = TagService(ctx.obj["db"])

    if (reference_code is None) == (tag_name is None):
        click.echo("Error: Give either a REFERENCE_CODE or --tag", err=True)
        ctx.exit(1)

    try:
        if tag_name is not None:
            transactions = service.transactions_with_tag(tag_name)
            if not transactions:
                click.echo(f"No transactions tagged '{tag_name}'.")
                return
            for txn in transactions:
                click.echo(f"{txn.transaction_code:25s} {txn.amount:>12} {txn.currency} {txn.status.value}")
            return

        tags = service.list_tags(reference_code)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not tags:
        click.echo(f"{reference_code} has no tags.")
        return
    for t in tags:
        by = f" (by {t.assigned_by})" if t.assigned_by else ""
        click.echo(f"{t.tag_name}{by}")


def register_commands(cli):
    """Register tag commands with main CLI."""
    cli.add_command(tag_group, name="tag")
