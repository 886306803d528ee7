"""Add transaction command."""

import click
from sqlalchemy.exc import SQLAlchemyError
from budgetwatch.cli.error_handling import (
    handle_domain_error,
    report_notifications,
    report_spending,
)
from budgetwatch.domain.category import CategoryService
from budgetwatch.domain.errors import DomainError
from budgetwatch.domain.transaction import TransactionService
from budgetwatch.utils.date_parser import parse_date
from budgetwatch.utils.amount_parser import parse_amount


@click.command("add")
@click.option("--name", required=True, help="Transaction description")
@click.option(
    "--amount", required=True, help="Transaction amount, negative for expenses (e.g., -45.20 or 1500)"
)
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--category", help="Category name or ID (omit for uncategorized)")
@click.pass_context
def add_transaction(ctx, name: str, amount: str, date: str, category: str | None):
    """Record a transaction.

    Category spending is refreshed right away and any budget or large
    transaction alerts are sent.

    Examples:
        budgetwatch add --name "Grocery store" --amount -54.20 --category "Food & Dining"
        budgetwatch add --name Salary --amount 3200 --date 2024-01-31
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    transaction_service = TransactionService(db, policy=ctx.obj["policy"])
    category_service = CategoryService(db)

    # Parse date
    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    # Parse amount
    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    # Resolve category if provided
    category_obj = None
    if category:
        try:
            category_obj = category_service.resolve_category(owner, category)
        except DomainError as e:
            handle_domain_error(ctx, e)

    try:
        result = transaction_service.create_transaction(
            owner_id=owner,
            name=name,
            amount=txn_amount,
            date=txn_date,
            category_id=category_obj.id if category_obj else None,
            notify_email=ctx.obj["email"],
        )
    except (DomainError, SQLAlchemyError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {result.transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: ${txn_amount:,.2f}")
    click.echo(f"  Category: {category_obj.name if category_obj else 'Uncategorized'}")
    report_spending(result.spending)
    report_notifications(result.notifications)


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
