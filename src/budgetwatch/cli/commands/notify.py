"""Notification maintenance commands."""

import click
from budgetwatch.cli.error_handling import report_notifications, report_spending
from budgetwatch.domain.entities import OutcomeStatus
from budgetwatch.domain.dedup import DEFAULT_RETENTION_DAYS, owner_prefix, purge_expired
from budgetwatch.domain.transaction import TransactionService


@click.group()
def notify_group():
    """Check and maintain budget alerts."""
    pass


@notify_group.command("check")
@click.pass_context
def check(ctx):
    """Refresh spending and send any pending budget threshold alerts."""
    db = ctx.obj["db"]
    service = TransactionService(db, policy=ctx.obj["policy"])

    spending, outcomes = service.refresh(ctx.obj["owner"], notify_email=ctx.obj["email"])
    report_spending(spending)
    report_notifications(outcomes)

    pending = [o for o in outcomes if o.status in (OutcomeStatus.SKIPPED_UNCONFIGURED, OutcomeStatus.FAILED_TRANSIENT)]
    if pending:
        click.echo(f"{len(pending)} alert(s) could not be sent and will be retried.")
    elif not any(o.status is OutcomeStatus.SENT for o in outcomes):
        click.echo("No new alerts.")


@notify_group.command("purge")
@click.option(
    "--days",
    type=click.IntRange(min=0),
    default=DEFAULT_RETENTION_DAYS,
    show_default=True,
    help="Remove alert markers older than this many days",
)
@click.pass_context
def purge(ctx, days: int):
    """Forget alerts sent longer ago than the retention window."""
    removed = purge_expired(ctx.obj["dedup_store"], retention_days=days)
    click.echo(f"Removed {removed} alert marker(s).")


@notify_group.command("reset")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def reset(ctx, yes: bool):
    """Forget every alert sent to this owner, so they can fire again."""
    if not yes and not click.confirm("Reset all sent alert markers?"):
        click.echo("Reset cancelled.")
        return
    removed = ctx.obj["dedup_store"].reset(owner_prefix(ctx.obj["owner"]))
    click.echo(f"Removed {removed} alert marker(s).")


def register_commands(cli):
    """Register notification commands with main CLI."""
    cli.add_command(notify_group, name="notify")
