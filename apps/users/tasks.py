import click

from models.exc import AuthError
from models.user import Role

from . import register_user, users


@users.cli.command("create")
@click.argument("email")
@click.argument("name")
@click.argument("role", type=click.Choice([r.value for r in Role]))
@click.option("--department", help="Department the profile belongs to")
@click.password_option()
def create(email, name, role, department, password):
    """Create a profile of any role, including ones closed to registration"""
    try:
        user = register_user(email, password, name, role, department=department)
    except AuthError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Created {user.role} {user.email} with id {user.id}")
