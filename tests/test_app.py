from datetime import datetime

from sqlalchemy import select

from weekly_finance.models import User
from weekly_finance.views import money

from conftest import PASSWORD


def test_health_check(client):
    resp = client.get("/health-check")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert datetime.fromisoformat(body["timestamp"]).tzinfo is not None


def test_welcome_is_public(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.template.name == "welcome.html"
    assert resp.context["logged_in"] is False


def test_register_logs_user_in(client, db):
    resp = client.post(
        "/register",
        data={"username": "carol", "password": "long-enough-pw"},
        follow_redirects=False,
    )

    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard"
    assert db.execute(select(User).where(User.username == "carol")).scalar_one()
    assert client.get("/dashboard").status_code == 200


def test_register_validation(client, user):
    resp = client.post("/register", data={"username": user.username, "password": "short"})

    assert resp.status_code == 422
    assert resp.context["errors"] == {
        "username": "Username is already taken.",
        "password": "Password must be at least 8 characters.",
    }


def test_login_with_wrong_password(client, user):
    resp = client.post("/login", data={"username": user.username, "password": "nope"})

    assert resp.status_code == 422
    assert resp.context["errors"] == {"username": "Invalid credentials."}
    assert client.get("/dashboard", follow_redirects=False).status_code == 303


def test_login_and_logout(client, user):
    resp = client.post("/login", data={"username": user.username, "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.template.name == "dashboard.html"

    client.post("/logout")
    resp = client.get("/dashboard", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"


def test_money_filter():
    assert money("1234.5") == "$1,234.50"
    assert money(-3) == "-$3.00"
    assert money(None) == "$0.00"
