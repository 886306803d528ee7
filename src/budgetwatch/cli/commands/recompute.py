"""Recompute category spending command."""

import click
from budgetwatch.domain.spending import SpendingService


@click.command("recompute")
@click.pass_context
def recompute(ctx):
    """Rebuild every category's spent total from the transaction ledger."""
    db = ctx.obj["db"]
    result = SpendingService(db).recompute_spending(ctx.obj["owner"])

    click.echo(f"Updated {len(result.updated)} categories, {len(result.unchanged)} already up to date.")
    for failure in result.failures:
        click.echo(f"  Failed category {failure.category_id}: {failure.message}", err=True)
    if result.failures:
        ctx.exit(1)


def register_commands(cli):
    """Register recompute command with main CLI."""
    cli.add_command(recompute)
