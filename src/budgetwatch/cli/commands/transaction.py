"""Transaction management commands."""

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


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--limit", type=int, help="Show only the most recent N transactions")
@click.pass_context
def list_transactions(ctx, limit: int | None):
    """List transactions, newest first."""
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    service = TransactionService(db)

    transactions = service.list_transactions(owner)
    if limit is not None:
        transactions = transactions[:limit]

    if not transactions:
        click.echo("No transactions found.")
        return

    # Deleted categories simply drop out of this map
    categories = {cat.id: cat.name for cat in CategoryService(db).list_categories(owner)}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 90)
    click.echo(f"{'ID':<6} {'Date':<12} {'Amount':>12}  {'Category':<24} {'Name':<30}")
    click.echo("-" * 90)

    for txn in transactions:
        category_name = categories.get(txn.category_id, "Uncategorized")
        amount_str = f"${txn.amount:,.2f}"
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {amount_str:>12}  {category_name[:24]:<24} {txn.name[:30]:<30}"
        )

    total_expenses = sum(-txn.amount for txn in transactions if txn.amount < 0)
    total_income = sum(txn.amount for txn in transactions if txn.amount > 0)
    click.echo("-" * 90)
    click.echo(
        f"{'TOTAL':<6} Expenses: ${total_expenses:,.2f} | "
        f"Income: ${total_income:,.2f} | Count: {len(transactions)}"
    )


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--name", help="Transaction description")
@click.option("--amount", help="Transaction amount (e.g., 123.45 or -123.45)")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--category", help="Category name or ID, or empty string to clear")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    name: str | None,
    amount: str | None,
    date: str | None,
    category: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Use --category "" to clear the category.

    Examples:
        budgetwatch transaction update 1 --amount -75.00
        budgetwatch transaction update 1 --category ""  # Clear category
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    transaction_service = TransactionService(db, policy=ctx.obj["policy"])

    txn_date = None
    if date is not None:
        try:
            txn_date = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    txn_amount = None
    if amount is not None:
        try:
            txn_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    category_id = None
    clear_category = False
    if category is not None:
        if category == "":
            clear_category = True
        else:
            try:
                category_id = CategoryService(db).resolve_category(owner, category).id
            except DomainError as e:
                handle_domain_error(ctx, e)

    try:
        result = transaction_service.update_transaction(
            owner,
            transaction_id,
            name=name,
            amount=txn_amount,
            date=txn_date,
            category_id=category_id,
            clear_category=clear_category,
            notify_email=ctx.obj["email"],
        )
    except (DomainError, SQLAlchemyError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated transaction {transaction_id}")
    report_spending(result.spending)
    report_notifications(result.notifications)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        budgetwatch transaction delete 1
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    transaction_service = TransactionService(db, policy=ctx.obj["policy"])

    txn = transaction_service.get_transaction(transaction_id)
    if txn is None or txn.owner_id != owner:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        result = transaction_service.delete_transaction(
            owner, transaction_id, notify_email=ctx.obj["email"]
        )
    except (DomainError, SQLAlchemyError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted transaction {transaction_id}")
    report_spending(result.spending)
    report_notifications(result.notifications)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
