import logging

from decorator import decorator
from flask import abort
from flask import current_app as app
from flask.json import jsonify
from flask_login import current_user
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers import Response

from models.exc import AuthError, PermissionDenied, RecordNotFound, StoreError, SubmissionInvalid
from models.grants import GrantStateException

logger = logging.getLogger(__name__)


def require_role(*roles):
    """Only let signed-in profiles holding one of `roles` through.

    Anonymous users get the login manager's unauthorized response (401),
    other roles a 403.
    """

    def call(f, *args, **kwargs):
        if current_user.is_authenticated:
            if current_user.has_role(*roles):
                return f(*args, **kwargs)
            abort(403)
        return app.login_manager.unauthorized()

    return decorator(call)


def error_body(error, description, code):
    return jsonify({"error": error, "description": description}), code


@decorator
def json_response(f, *args, **kwargs):
    try:
        response = f(*args, **kwargs)

    except HTTPException as e:
        return error_body(e.name.replace(" ", ""), e.description, e.code)

    except AuthError as e:
        return error_body("AuthError", str(e), 401)

    except PermissionDenied as e:
        return error_body("PermissionDenied", str(e), 403)

    except RecordNotFound as e:
        return error_body("NotFound", str(e), 404)

    except SubmissionInvalid as e:
        return error_body("ValidationError", str(e), 400)

    except GrantStateException as e:
        return error_body(e.__class__.__name__, str(e), 409)

    except StoreError as e:
        app.logger.exception("Store error during json request: %r", e)
        return error_body("StoreError", "Your changes could not be saved, please try again", 503)

    except Exception as e:
        app.logger.exception("Exception during json request: %r", e)
        return error_body(e.__class__.__name__, str(e), 500)

    else:
        if isinstance(response, app.response_class | Response):
            return response

        if isinstance(response, tuple):
            body, code = response
            return jsonify(body), code

        return jsonify(response), 200
