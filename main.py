import logging
import logging.config
import time
from pathlib import Path

import email_validator
import yaml
from flask import Flask, jsonify, request
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase
from werkzeug.exceptions import HTTPException

from loggingmanager import create_logging_manager, set_user_id

ROOT = Path(__file__).parent

# If we have logging handlers set up here, don't touch them.
# This is especially problematic during testing as we don't
# want to overwrite pytest's handlers. Note: if anything
# logs before this point, logging.basicConfig will install
# a default stderr StreamHandler.
if len(logging.root.handlers) == 0:
    install_logging = True
    with open(ROOT / "logging.yaml") as f:
        conf = yaml.load(f, Loader=yaml.FullLoader)
        if (ROOT / "logging.override.yaml").is_file():
            with open(ROOT / "logging.override.yaml") as fo:
                conf_overrides = yaml.load(fo, Loader=yaml.FullLoader)

                def update_logging(d, s):
                    for k, v in s.items():
                        if isinstance(v, dict):
                            d[k] = update_logging(d.get(k, {}), v)
                        elif v is not None:
                            d[k] = v
                    return d

                update_logging(conf, conf_overrides)

        logging.config.dictConfig(conf)

else:
    install_logging = False

logger = logging.getLogger(__name__)

naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class BaseModel(DeclarativeBase):
    metadata = MetaData(naming_convention=naming_convention)


db = SQLAlchemy(model_class=BaseModel)
migrate = Migrate()
login_manager = LoginManager()


def create_app(dev_server=False, config_override=None):
    app = Flask(__name__)
    app.config.from_envvar("SETTINGS_FILE")
    if config_override:
        app.config.from_mapping(config_override)

    if "SECRET_KEY" not in app.config:
        raise RuntimeError("SECRET_KEY must be set in the app config")

    if install_logging:
        create_logging_manager(app)
        # Flask has now kindly installed its own log handler which we will summarily remove.
        app.logger.propagate = True
        app.logger.handlers = []
        if not app.debug:
            logging.root.setLevel(logging.INFO)
        else:
            logging.root.setLevel(logging.DEBUG)

    from apps.metrics import request_duration, request_total

    @app.before_request
    def before_request():
        request._start_time = time.time()

    @app.after_request
    def after_request(response):
        try:
            request_duration.labels(request.endpoint, request.method).observe(
                time.time() - request._start_time
            )
        except AttributeError:
            logger.exception("Request without _start_time - check app.before_request ordering")
        request_total.labels(request.endpoint, request.method, response.status_code).inc()
        return response

    db.init_app(app)
    migrate.init_app(app, db)

    login_manager.init_app(app)

    from models.user import AnonymousUser, User

    @login_manager.user_loader
    def load_user(userid: str) -> User | None:
        user = db.session.get(User, int(userid))
        if user:
            set_user_id(user.email, user.role)
        return user

    login_manager.anonymous_user = AnonymousUser

    @app.after_request
    def send_security_headers(response):
        response.headers["X-Frame-Options"] = "deny"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    if not app.debug:

        @app.errorhandler(Exception)
        def handle_exception(e):
            """Generic exception handler to catch and log unhandled exceptions in production."""
            if isinstance(e, HTTPException):
                # HTTPException is used to implement flask's HTTP errors so pass it through.
                return e

            app.logger.exception("Unhandled exception in request: %s", request)
            return jsonify({"error": "InternalServerError", "description": "Something went wrong"}), 500

    @app.errorhandler(401)
    @app.errorhandler(403)
    @app.errorhandler(404)
    @app.errorhandler(405)
    def handle_http_error(e):
        return jsonify({"error": e.name.replace(" ", ""), "description": e.description}), e.code

    @app.shell_context_processor
    def shell_imports():
        ctx = {}

        import models

        for attr in dir(models):
            if attr[0].isupper():
                ctx[attr] = getattr(models, attr)

        ctx["db"] = db

        return ctx

    if app.config.get("DEBUG") or app.testing:
        if not email_validator.TEST_ENVIRONMENT:
            email_validator.TEST_ENVIRONMENT = True
            email_validator.SPECIAL_USE_DOMAIN_NAMES.remove("invalid")

    from apps.base import base
    from apps.grants import grants
    from apps.metrics import metrics
    from apps.users import users

    app.register_blueprint(base)
    app.register_blueprint(users)
    app.register_blueprint(metrics)
    app.register_blueprint(grants)

    return app
