"""Party management commands."""

import click
from momoetl.cli.error_handling import handle_domain_error
from momoetl.domain.entities import PartyType
from momoetl.domain.errors import DomainError
from momoetl.domain.party import PartyService
from momoetl.utils.amount_parser import parse_amount


@click.group()
def party_group():
    """Manage parties and their accounts."""
    pass


@party_group.command("create")
@click.argument("name", metavar="NAME")
@click.argument("phone", metavar="PHONE")
@click.option(
    "--type",
    "party_type",
    type=click.Choice([t.value for t in PartyType], case_sensitive=False),
    default=PartyType.INDIVIDUAL.value,
    show_default=True,
    help="Party type",
)
@click.option("--national-id", help="National ID or business registration number")
@click.option("--email", help="Email address")
@click.option("--balance", default="0.00", show_default=True, help="Opening balance of the default account")
@click.option("--currency", help="Account currency (defaults to MOMO_DEFAULT_CURRENCY)")
@click.pass_context
def create_party(
    ctx,
    name: str,
    phone: str,
    party_type: str,
    national_id: str | None,
    email: str | None,
    balance: str,
    currency: str | None,
):
    """Register a party and open its default account.

    Examples:
        momo party create "Mugisha Moses" 0701234567 --balance 5000
        momo party create "TechHub Business Ltd" +256703456789 --type Business
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    service = PartyService(db, country_code=settings.country_code, default_currency=settings.default_currency)

    try:
        opening_balance = parse_amount(balance)
        party_id = service.register_party(
            name=name,
            phone_number=phone,
            party_type=_party_type(party_type),
            national_id=national_id,
            email=email,
            opening_balance=opening_balance,
            currency=currency,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created party '{name}' (ID: {party_id})")


@party_group.command("list")
@click.pass_context
def list_parties(ctx):
    """List parties with their accounts and balances."""
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    service = PartyService(db, country_code=settings.country_code, default_currency=settings.default_currency)

    parties = service.list_parties()
    if not parties:
        click.echo("No parties found.")
        return

    click.echo("\nParties:")
    click.echo("-" * 90)
    for p in parties:
        click.echo(f"ID: {p.id:3d} | {p.name:25s} | {p.party_type.value:10s} | {p.phone_number}")
        for acc in service.list_accounts(party_id=p.id):
            status = "" if acc.is_active else " (inactive)"
            click.echo(
                f"        Account {acc.id:3d} | {acc.account_type.value:8s} | "
                f"{acc.current_balance:>12} {acc.currency}{status}"
            )


def _party_type(value: str) -> PartyType:
    for member in PartyType:
        if member.value.lower() == value.lower():
            return member
    raise ValueError(f"Unknown party type '{value}'")


def register_commands(cli):
    """Register party commands with main CLI."""
    cli.add_command(party_group, name="party")
