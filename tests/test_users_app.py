import pytest

from models.user import Role, User

from _utils import PASSWORD, login


def register(client, **kwargs):
    data = {
        "email": "new.researcher@example.com",
        "password": PASSWORD,
        "full_name": "New Researcher",
        "role": "researcher",
        "department": "Geography",
    }
    data.update(kwargs)
    return client.post("/register", data=data)


def test_register(client, db):
    rv = register(client)
    assert rv.status_code == 200

    profile = rv.get_json()["profile"]
    assert profile["email"] == "new.researcher@example.com"
    assert profile["role"] == "researcher"
    assert profile["department"] == "Geography"
    assert profile["dashboard"] == "/researcher"
    assert "password_hash" not in profile

    user = User.get_by_email("New.Researcher@example.com")
    assert user.check_password(PASSWORD)
    assert not user.check_password("wrong password")

    # Registration signs the new profile in
    assert client.get("/researcher").status_code == 200


def test_register_duplicate_email(client, researcher):
    rv = register(client, email=researcher.email.upper().replace("@EXAMPLE.COM", "@example.com"))
    assert rv.status_code == 400
    assert "email" in rv.get_json()["errors"]


@pytest.mark.parametrize(
    "field,value",
    [
        ("email", "not-an-email"),
        ("password", "short"),
        ("full_name", ""),
        ("role", "administrator"),
    ],
)
def test_register_invalid(client, field, value):
    rv = register(client, **{"email": "invalid.case@example.com", field: value})
    assert rv.status_code == 400
    assert field in rv.get_json()["errors"]
    assert User.get_by_email("invalid.case@example.com") is None


def test_register_closed_role(app, client, monkeypatch):
    monkeypatch.setitem(app.config, "REGISTRATION_ROLES", ["researcher", "reviewer"])

    rv = register(client, email="would.be.director@example.com", role="director")
    assert rv.status_code == 400
    assert "role" in rv.get_json()["errors"]


def test_login_and_logout(client, reviewer):
    assert client.get("/account").status_code == 401

    rv = login(client, reviewer)
    assert rv.get_json()["profile"]["id"] == reviewer.id

    rv = client.get("/account")
    assert rv.status_code == 200
    assert rv.get_json()["profile"]["role"] == "reviewer"

    rv = client.post("/logout")
    assert rv.status_code == 200
    assert client.get("/account").status_code == 401
    assert client.get("/reviewer").status_code == 401


def test_bad_login(client, reviewer):
    rv = client.post("/login", data={"email": reviewer.email, "password": "not the password"})
    assert rv.status_code == 401
    assert rv.get_json()["error"] == "AuthError"

    # An unknown email looks the same as a wrong password
    rv2 = client.post("/login", data={"email": "nobody@example.com", "password": "not the password"})
    assert rv2.status_code == 401
    assert rv2.get_json() == rv.get_json()

    assert client.get("/account").status_code == 401


def test_switch_profile(client, reviewer, director):
    login(client, reviewer)
    login(client, director)

    assert client.get("/account").get_json()["profile"]["id"] == director.id
    assert client.get("/reviewer").status_code == 403


def test_create_user_command(app, db):
    runner = app.test_cli_runner()
    result = runner.invoke(
        args=[
            "users",
            "create",
            "vp.cli@example.com",
            "Vice President",
            "vice_president",
            "--department",
            "Finance",
            "--password",
            PASSWORD,
        ]
    )
    assert result.exit_code == 0, result.output

    user = User.get_by_email("vp.cli@example.com")
    assert user.role == Role.VICE_PRESIDENT
    assert user.department == "Finance"
    assert user.check_password(PASSWORD)

    result = runner.invoke(
        args=["users", "create", "vp.cli@example.com", "Again", "vice_president", "--password", PASSWORD]
    )
    assert result.exit_code != 0
    assert "already exists" in result.output
