"""Main CLI entry point."""

import logging

import click
from budgetwatch.database.factories import create_sqlite_database, create_dedup_store
from budgetwatch.domain.notifications import (
    NotificationPolicy,
    NotificationSettings,
    RearmPolicy,
)
from budgetwatch.notifications.factories import create_email_transport

# Import and register all commands at module level
from budgetwatch.cli.commands import (
    add,
    category,
    notify,
    recompute,
    summary,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BUDGETWATCH_DB_PATH environment variable)",
    envvar="BUDGETWATCH_DB_PATH",
)
@click.option(
    "--owner",
    default="local",
    show_default=True,
    help="Owner ID whose budget is managed",
    envvar="BUDGETWATCH_OWNER",
)
@click.option(
    "--email",
    help="Address that receives budget alerts (no alerts are sent when unset)",
    envvar="BUDGETWATCH_EMAIL",
)
@click.option(
    "--rearm-policy",
    type=click.Choice([p.value for p in RearmPolicy], case_sensitive=False),
    default=RearmPolicy.NEVER.value,
    show_default=True,
    help="Whether budget threshold alerts fire again each calendar month",
    envvar="BUDGETWATCH_REARM_POLICY",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level",
    envvar="BUDGETWATCH_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, owner: str, email: str | None, rearm_policy: str, log_level: str):
    """Budgetwatch - Personal budgeting with spending alerts.

    Track spending against monthly category budgets and get an email when a
    category crosses 50%, 75%, 90% or 100% of its budget, or when a large
    transaction is recorded.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)

        ctx.obj["db"] = db
        ctx.obj["owner"] = owner
        ctx.obj["email"] = email
        ctx.obj["dedup_store"] = create_dedup_store(db)
        ctx.obj["policy"] = NotificationPolicy(
            dedup_store=ctx.obj["dedup_store"],
            transport=create_email_transport(),
            settings=NotificationSettings(rearm_policy=RearmPolicy(rearm_policy.lower())),
        )


# Register all commands
category.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
summary.register_commands(cli)
recompute.register_commands(cli)
notify.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
