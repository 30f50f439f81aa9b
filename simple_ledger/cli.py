# run with: flask --app simple_ledger init-db
import click
from flask.cli import with_appcontext

from simple_ledger.accounting_db import db
import simple_ledger.common as common


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create all ledger tables (local development without migrations)."""
    db.create_all()
    common.logger.info("Database tables created")
    click.echo("database created")
