""" Development CLI tasks """
import click

from main import db

from . import dev_cli
from .fake import DEV_PASSWORD, FakeDataGenerator


@dev_cli.command("data")
def dev_data():
    """Make fake profiles, calls, proposals, reviews and budget requests"""
    fdg = FakeDataGenerator()
    fdg.run()
    click.echo(f"Created fake data. All dev profiles use the password {DEV_PASSWORD!r}")


@dev_cli.command("reset")
@click.confirmation_option(prompt="This will drop every table. Continue?")
def reset():
    """Drop and recreate the database tables"""
    db.drop_all()
    db.create_all()
