"""Dashboard summary command."""

import click
from budgetwatch.domain.summary import SummaryService


@click.command("summary")
@click.option("--recent", type=int, default=5, show_default=True, help="Number of recent transactions to show")
@click.pass_context
def summary(ctx, recent: int):
    """Show totals, budget usage per category and recent transactions."""
    db = ctx.obj["db"]
    dashboard = SummaryService(db).get_dashboard(ctx.obj["owner"], recent_limit=recent)

    click.echo("\nOverview")
    click.echo("-" * 60)
    click.echo(f"  Total budget:    ${dashboard.total_budget:,.2f}")
    click.echo(f"  Total spent:     ${dashboard.total_spent:,.2f}")
    click.echo(f"  Total income:    ${dashboard.total_income:,.2f}")
    click.echo(f"  Total expenses:  ${dashboard.total_expenses:,.2f}")
    click.echo(f"  Balance:         ${dashboard.balance:,.2f}")

    if dashboard.categories:
        click.echo("\nCategories")
        click.echo("-" * 60)
        for usage in dashboard.categories:
            cat = usage.category
            marker = "  OVER BUDGET" if usage.is_over_budget else ""
            click.echo(
                f"  {cat.name[:22]:<22} ${cat.spent:,.2f} of ${cat.budget:,.2f} "
                f"({usage.percent_used:.0f}% used, {usage.share_of_expenses:.1f}% of expenses){marker}"
            )

    if dashboard.recent_transactions:
        click.echo("\nRecent transactions")
        click.echo("-" * 60)
        for txn in dashboard.recent_transactions:
            click.echo(f"  {str(txn.date):<12} {f'${txn.amount:,.2f}':>12}  {txn.name}")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
