from flask import Blueprint, redirect
from flask import current_app as app

from ..common.session import current_session
from ..grants import dashboard_url

base = Blueprint("base", __name__, cli_group=None)


@base.route("/")
def main():
    # Send signed-in profiles to their own dashboard
    ctx = current_session()
    if ctx is None:
        return app.login_manager.unauthorized()
    return redirect(dashboard_url(ctx.role))


from . import dev  # noqa
