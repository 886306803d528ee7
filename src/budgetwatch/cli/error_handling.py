"""CLI error handling and engine result reporting helpers."""

import click
from sqlalchemy.exc import SQLAlchemyError

from budgetwatch.domain.entities import (
    NotificationOutcome,
    OutcomeStatus,
    SpendingResult,
)
from budgetwatch.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError | SQLAlchemyError) -> None:
    """Render a domain or store error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def report_spending(result: SpendingResult) -> None:
    """Print categories whose spend could not be refreshed.

    These are warnings only; the triggering command still succeeds.
    """
    for failure in result.failures:
        click.echo(
            f"Warning: could not update spending for category {failure.category_id}: {failure.message}",
            err=True,
        )


def report_notifications(outcomes: tuple[NotificationOutcome, ...] | list[NotificationOutcome]) -> None:
    """Print the alerts that were sent by this command."""
    for outcome in outcomes:
        if outcome.status is OutcomeStatus.SENT:
            click.echo(f"Alert sent: {outcome.subject}")
