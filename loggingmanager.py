""" A middleware to export the signed-in profile for logging.

    Werkzeug logs the request after the Flask app context has ended
    so we use Werkzeug's Local object to pass the user's email and
    role into the logging formatter.
"""

import logging
from werkzeug.local import Local, LocalManager

local = Local()
local_manager = LocalManager([local])


class ContextFormatter(logging.Formatter):
    """ A logging formatter which inserts the user's email and role
        into the logging record. """
    def format(self, record):
        record.user = getattr(local, 'user_id', None)
        record.role = getattr(local, 'role', None)
        return logging.Formatter.format(self, record)


def set_user_id(uid, role=None):
    """ Set the user ID (and role, where known) for later use in logging. """
    local.user_id = uid
    local.role = role


def create_logging_manager(app):
    app.wsgi_app = local_manager.make_middleware(app.wsgi_app)
