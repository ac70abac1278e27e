""" The signed-in profile, as an explicit object.

    Views build a SessionContext from Flask-Login's session cookie and
    pass it to every lifecycle operation. The operations never read
    `current_user` themselves.
"""

import logging

from flask_login import current_user, login_user, logout_user

from loggingmanager import set_user_id
from models.exc import PermissionDenied
from models.user import Role, User

logger = logging.getLogger(__name__)


class SessionContext:
    def __init__(self, profile: User):
        self.profile = profile

    def __repr__(self):
        return f"<SessionContext {self.user_id} ({self.role})>"

    @property
    def user_id(self) -> int:
        return self.profile.id

    @property
    def role(self) -> Role:
        return self.profile.role

    def has_role(self, *roles: Role | str) -> bool:
        return self.profile.has_role(*roles)

    def require_role(self, *roles: Role | str):
        if not self.has_role(*roles):
            allowed = ", ".join(str(r) for r in roles)
            raise PermissionDenied(f"{self.role} may not do this (requires {allowed})")


def begin_session(user: User, remember: bool = False) -> SessionContext:
    """Sign a profile in after successful authentication"""
    login_user(user, remember=remember)
    set_user_id(user.email, user.role)
    logger.info("Signed in user %s (%s)", user.id, user.role)
    return SessionContext(user)


def end_session():
    if current_user.is_authenticated:
        logger.info("Signing out user %s", current_user.id)
    logout_user()
    set_user_id(None)


def current_session() -> SessionContext | None:
    if not current_user.is_authenticated:
        return None
    # current_user is a werkzeug proxy, so unwrap it to keep the profile past the request
    return SessionContext(current_user._get_current_object())
