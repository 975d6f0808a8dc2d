"""Management commands: database setup and admin bootstrap."""

import os

import click
from dotenv import load_dotenv
from flask.cli import FlaskGroup

load_dotenv()

from filmmania import create_app  # noqa: E402
from filmmania.dao import user_dao  # noqa: E402
from filmmania.extensions import db  # noqa: E402


def _create_app():
    return create_app(os.getenv("APP_ENV", "development"))


cli = FlaskGroup(create_app=_create_app)


@cli.command("init-db")
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("Database initialized.")


@cli.command("drop-db")
@click.confirmation_option(prompt="Drop all tables?")
def drop_db():
    """Drop all tables."""
    db.drop_all()
    click.echo("Database dropped.")


@cli.command("create-admin")
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--first-name", default=None)
@click.option("--last-name", default=None)
def create_admin(email, password, first_name, last_name):
    """Create an admin user, or promote an existing one."""
    user = user_dao.get_by_email(email)
    if user:
        user.is_admin = True
        user_dao.save(user)
        click.echo(f"Promoted {user.email} to admin.")
        return

    user = user_dao.create(email, password, first_name=first_name, last_name=last_name, is_admin=True)
    click.echo(f"Created admin {user.email}.")


if __name__ == "__main__":
    cli()
