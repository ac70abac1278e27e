""" Identity provider: password registration and sign-in.

    Every endpoint answers with JSON. A successful registration or sign-in
    starts a Flask-Login session and returns the signed-in profile.
"""

from flask import Blueprint
from flask import current_app as app
from flask_login import current_user
from wtforms import PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, Length, Optional, ValidationError

from models.exc import AuthError
from models.user import Role, User

from ..common import json_response
from ..common.fields import EmailField
from ..common.forms import Form
from ..common.session import begin_session, current_session, end_session
from ..common.store import store
from ..grants import dashboard_url, profile_data

users = Blueprint("users", __name__)

MIN_PASSWORD_LENGTH = 8


def registration_roles():
    return [Role(r) for r in app.config.get("REGISTRATION_ROLES", list(Role))]


def account_data(ctx):
    data = profile_data(ctx.profile)
    data["dashboard"] = dashboard_url(ctx.role)
    return data


def register_user(email, password, full_name, role, department=None) -> User:
    if User.get_by_email(email) is not None:
        raise AuthError("An account already exists for this email address")

    with store.transaction():
        user = User(email, full_name, role, department=department)
        user.set_password(password)
        store.insert(user)

    app.logger.info("Registered new %s with email %s and id %s", user.role, email, user.id)
    return user


def authenticate(email, password) -> User:
    user = User.get_by_email(email)
    if user is None or not user.check_password(password):
        app.logger.info("Failed sign-in for %s", email)
        raise AuthError("Incorrect email address or password")
    return user


class RegisterForm(Form):
    email = EmailField("Email")
    password = PasswordField("Password", [DataRequired(), Length(min=MIN_PASSWORD_LENGTH)])
    full_name = StringField("Name", [DataRequired(), Length(max=200)])
    role = SelectField("Role", [DataRequired()])
    department = StringField("Department", [Optional(), Length(max=200)])

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.role.choices = [(r.value, r.value.replace("_", " ").title()) for r in registration_roles()]

    def validate_email(form, field):
        if User.get_by_email(field.data) is not None:
            raise ValidationError("An account already exists for this email address")


class LoginForm(Form):
    email = EmailField("Email")
    password = PasswordField("Password", [DataRequired()])


@users.route("/register", methods=["POST"])
@json_response
def register():
    form = RegisterForm()
    if not form.validate_on_submit():
        return {"errors": form.errors}, 400

    try:
        user = register_user(
            form.email.data,
            form.password.data,
            form.full_name.data,
            form.role.data,
            department=form.department.data or None,
        )
    except AuthError as e:
        return {"error": "AuthError", "description": str(e)}, 400

    ctx = begin_session(user)
    return {"profile": account_data(ctx)}


@users.route("/login", methods=["POST"])
@json_response
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return {"errors": form.errors}, 400

    if current_user.is_authenticated:
        end_session()

    user = authenticate(form.email.data, form.password.data)
    ctx = begin_session(user)
    return {"profile": account_data(ctx)}


@users.route("/logout", methods=["POST"])
@json_response
def logout():
    end_session()
    return {"profile": None}


@users.route("/account")
@json_response
def account():
    ctx = current_session()
    if ctx is None:
        return app.login_manager.unauthorized()
    return {"profile": account_data(ctx)}


from . import tasks  # noqa: F401,E402
