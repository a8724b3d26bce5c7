"""Payment method commands."""

import click
from coopbook.cli.error_handling import handle_domain_error
from coopbook.domain.entities import PaymentMethodType
from coopbook.domain.payment_method import PaymentMethodService


@click.group()
def payment_method_group():
    """Manage payment methods."""
    pass


@payment_method_group.command("list")
@click.pass_context
def list_payment_methods(ctx):
    """List all payment methods."""
    service = PaymentMethodService(ctx.obj["db"])
    methods = service.list_payment_methods()
    if not methods:
        click.echo("No payment methods found. Run 'init-categories' to create the defaults.")
        return

    click.echo(f"\n{'ID':<5} {'Name':<25} {'Type':<15}")
    click.echo("-" * 45)
    for method in methods:
        click.echo(f"{method.id:<5} {method.name:<25} {method.method_type.value:<15}")


@payment_method_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "method_type",
    required=True,
    type=click.Choice([t.value for t in PaymentMethodType], case_sensitive=False),
    help="Payment method type",
)
@click.pass_context
def create_payment_method(ctx, name: str, method_type: str):
    """Create a payment method."""
    service = PaymentMethodService(ctx.obj["db"])
    try:
        method_id = service.create_payment_method(name, PaymentMethodType(method_type.lower()))
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created payment method '{name}' (ID: {method_id})")


def register_commands(cli):
    """Register payment method commands with main CLI."""
    cli.add_command(payment_method_group, name="payment-method")
