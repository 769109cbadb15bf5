"""Transaction commands."""

import click
from momoetl.cli.error_handling import handle_domain_error, handle_store_unavailable
from momoetl.domain.audit import AuditLogger
from momoetl.domain.entities import TransactionStatus
from momoetl.domain.errors import DomainError, StoreUnavailableError, transaction_not_found
from momoetl.domain.loader import LedgerLoader


@click.group()
def transaction_group():
    """View and reverse transactions."""
    pass


@transaction_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in TransactionStatus], case_sensitive=False),
    help="Only show transactions with this status",
)
@click.option("--limit", type=click.IntRange(min=1), help="Maximum number of transactions to show")
@click.pass_context
def list_transactions(ctx, status: str | None, limit: int | None):
    """List transactions with party and category names."""
    db = ctx.obj["db"]
    status_filter = _status(status) if status else None

    rows = db.get_transaction_summary(status=status_filter, limit=limit)
    if not rows:
        click.echo("No transactions found.")
        return

    click.echo(
        f"{'Code':20s} {'Date':16s} {'Sender':20s} {'Receiver':20s} {'Category':18s} "
        f"{'Amount':>12s} {'Status':10s}"
    )
    click.echo("-" * 124)
    for row in rows:
        click.echo(
            f"{row['transaction_code'][:20]:20s} "
            f"{row['transaction_timestamp'].strftime('%Y-%m-%d %H:%M'):16s} "
            f"{row['sender_name'][:20]:20s} {row['receiver_name'][:20]:20s} "
            f"{row['category_name'][:18]:18s} "
            f"{row['amount']:>12} {row['status'].value:10s}"
        )


@transaction_group.command("show")
@click.argument("reference_code")
@click.pass_context
def show_transaction(ctx, reference_code: str):
    """Show one transaction with its fees, tags and audit trail."""
    db = ctx.obj["db"]

    txn = db.get_transaction_by_code(reference_code)
    if txn is None:
        click.echo(f"Error: {transaction_not_found(reference_code)}", err=True)
        ctx.exit(1)

    sender = db.get_account(txn.sender_account_id)
    receiver = db.get_account(txn.receiver_account_id)
    sender_party = db.get_party(sender.party_id)
    receiver_party = db.get_party(receiver.party_id)
    category = db.get_category(txn.category_id)

    click.echo(f"Transaction {txn.transaction_code} (ID: {txn.id})")
    click.echo(f"  Status:    {txn.status.value}")
    click.echo(f"  Date:      {txn.transaction_timestamp.isoformat(sep=' ')}")
    click.echo(f"  Amount:    {txn.amount} {txn.currency}")
    click.echo(f"  Sender:    {sender_party.name} ({sender_party.phone_number}, account {sender.id})")
    click.echo(f"  Receiver:  {receiver_party.name} ({receiver_party.phone_number}, account {receiver.id})")
    click.echo(f"  Category:  {category.name if category else '-'}")
    if txn.description:
        click.echo(f"  Note:      {txn.description}")
    if txn.reversal_of_id is not None:
        original = db.get_transaction(txn.reversal_of_id)
        click.echo(f"  Reverses:  {original.transaction_code if original else txn.reversal_of_id}")

    for fee in db.get_fees(txn.id):
        rate = f" ({fee.fee_percentage}%)" if fee.fee_percentage is not None else ""
        click.echo(f"  Fee:       {fee.fee_amount} {fee.fee_type.value}{rate}")

    tags = db.list_transaction_tags(txn.id)
    if tags:
        click.echo(f"  Tags:      {', '.join(t.tag_name for t in tags)}")

    entries = AuditLogger(db).entries(reference_code=txn.transaction_code)
    if entries:
        click.echo("\nAudit trail:")
        for entry in entries:
            click.echo(
                f"  {entry.log_timestamp.strftime('%Y-%m-%d %H:%M:%S')} "
                f"{entry.log_level.value:8s} {entry.process_name:16s} {entry.message}"
            )


@transaction_group.command("reverse")
@click.argument("reference_code")
@click.option("--reason", help="Description for the compensating transaction")
@click.pass_context
def reverse_transaction(ctx, reference_code: str, reason: str | None):
    """Reverse a Completed transaction.

    Moves the amount back from the receiver to the sender with a new
    REV-<code> transaction and marks the original Reversed. Fees are not
    refunded.
    """
    db = ctx.obj["db"]
    loader = LedgerLoader(db)

    try:
        reversal_id = loader.reverse(reference_code, reason=reason)
    except StoreUnavailableError as e:
        handle_store_unavailable(ctx, e)
        return
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    reversal = db.get_transaction(reversal_id)
    click.echo(f"Reversed {reference_code} with {reversal.transaction_code} (ID: {reversal_id})")


def _status(value: str) -> TransactionStatus:
    for member in TransactionStatus:
        if member.value.lower() == value.lower():
            return member
    raise click.BadParameter(f"Unknown status '{value}'")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
