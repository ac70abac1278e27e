" PyTest Config. This contains global-level pytest fixtures. "
import datetime
import itertools
import os
import os.path
import shutil

import pytest
from flask import g
from freezegun import freeze_time

from main import create_app
from main import db as db_obj
from models.user import Role, User

from _utils import PASSWORD

# Everything happens on one frozen day
FAKE_NOW = datetime.datetime(2026, 3, 2, 9, 30)

_user_ids = itertools.count(1)


@pytest.fixture(scope="module")
def app():
    """Fixture to provide an instance of the app.
    This will also create a Flask app_context and tear it down.

    This fixture is scoped to the module level, so records made by one test
    are visible to later tests in the same module.
    """
    if "SETTINGS_FILE" not in os.environ:
        root = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..")
        os.environ["SETTINGS_FILE"] = os.path.join(root, "config", "test.cfg")

    tmpdir = os.environ.get("TMPDIR", "/tmp")
    prometheus_dir = os.path.join(tmpdir, "grants_test_prometheus")
    os.environ["PROMETHEUS_MULTIPROC_DIR"] = prometheus_dir

    if os.path.exists(prometheus_dir):
        shutil.rmtree(prometheus_dir)
    os.makedirs(prometheus_dir, exist_ok=True)

    app = create_app(dev_server=True)

    freezer = freeze_time(FAKE_NOW)
    freezer.start()
    with app.app_context():
        db_obj.drop_all()
        db_obj.create_all()

        yield app

        db_obj.session.close()
        db_obj.drop_all()
    freezer.stop()


@pytest.fixture
def client(app):
    "Yield a test HTTP client for the app"
    # Requests share the module app context, so drop any profile cached on g by an earlier test
    g.pop("_login_user", None)
    yield app.test_client()
    g.pop("_login_user", None)


@pytest.fixture(scope="module")
def db(app):
    "Yield the DB object"
    yield db_obj


@pytest.fixture
def request_context(app):
    "Run the test in an app request context"
    with app.test_request_context("/") as c:
        yield c


def create_user(db, role, email=None):
    if email is None:
        email = f"{role}{next(_user_ids)}@example.com"
    user = User.get_by_email(email)
    if not user:
        user = User(email, f"Test {role.replace('_', ' ').title()}", role, department="Physics")
        user.set_password(PASSWORD)
        db.session.add(user)
        db.session.commit()
    return user


@pytest.fixture(scope="module")
def make_user(db):
    "Yield a factory for fresh profiles, for tests which need a clean slate"

    def make(role):
        return create_user(db, Role(role))

    yield make


# One profile per role. These are identical across all tests in a module.


@pytest.fixture(scope="module")
def researcher(db):
    yield create_user(db, Role.RESEARCHER, "researcher@example.com")


@pytest.fixture(scope="module")
def reviewer(db):
    yield create_user(db, Role.REVIEWER, "reviewer@example.com")


@pytest.fixture(scope="module")
def coordinator(db):
    yield create_user(db, Role.COORDINATOR, "coordinator@example.com")


@pytest.fixture(scope="module")
def director(db):
    yield create_user(db, Role.DIRECTOR, "director@example.com")


@pytest.fixture(scope="module")
def vice_president(db):
    yield create_user(db, Role.VICE_PRESIDENT, "vp@example.com")

