"""Main CLI entry point."""

import logging

import click
from coopbook.database.factories import create_sqlite_database

# Import and register all commands at module level
from coopbook.cli.commands import (
    init_categories,
    category,
    pattern,
    payment_method,
    classify,
    validate,
    add,
    transaction,
    analytics,
)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level: str) -> None:
    """Configure root logging for a CLI run."""
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides COOPBOOK_DB_PATH environment variable)",
    envvar="COOPBOOK_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="COOPBOOK_LOG_LEVEL",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Coopbook - Cooperative bookkeeping.

    Records transactions, suggests categories for bank-transfer withdrawals,
    checks them against each category's spending policy, and reports how
    well the suggestions are doing.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
init_categories.register_commands(cli)
category.register_commands(cli)
pattern.register_commands(cli)
payment_method.register_commands(cli)
classify.register_commands(cli)
validate.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
analytics.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
