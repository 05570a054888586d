from datetime import timedelta
from decimal import Decimal

from conftest import TODAY


def test_dashboard_requires_login(client):
    resp = client.get("/dashboard", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"


def test_dashboard_shows_financial_summary(auth_client, user, make_income, make_expense, make_loan):
    make_income(user, "1000.00", TODAY - timedelta(days=1))
    make_expense(user, "250.00", TODAY + timedelta(days=1))
    make_loan(user, "100.00")

    resp = auth_client.get("/dashboard")

    assert resp.status_code == 200
    assert resp.template.name == "dashboard.html"
    summary = resp.context["summary"]
    assert summary.weekly_income == Decimal("1000.00")
    assert summary.weekly_expenses == Decimal("250.00")
    assert summary.pending_loans == Decimal("100.00")
    assert summary.remaining_balance == Decimal("650.00")
    assert "$650.00" in resp.text


def test_dashboard_excludes_last_weeks_expense(auth_client, user, make_expense):
    make_expense(user, "75.00", TODAY - timedelta(days=7))

    resp = auth_client.get("/dashboard")

    assert resp.context["summary"].weekly_expenses == Decimal("0.00")
    # still listed as recent activity
    assert len(resp.context["recent_expenses"]) == 1


def test_dashboard_shows_recent_transactions(auth_client, user, make_income, make_expense, make_loan):
    make_expense(user)
    make_income(user)
    make_loan(user)

    resp = auth_client.get("/dashboard")

    assert resp.status_code == 200
    assert len(resp.context["recent_expenses"]) == 1
    assert len(resp.context["recent_incomes"]) == 1
    assert len(resp.context["recent_loans"]) == 1


def test_dashboard_recent_lists_are_capped_and_newest_first(auth_client, user, make_expense):
    for i in range(7):
        make_expense(user, description=f"expense {i}")

    resp = auth_client.get("/dashboard")

    recent = resp.context["recent_expenses"]
    assert [e.description for e in recent] == [f"expense {i}" for i in range(6, 1, -1)]


def test_dashboard_only_shows_own_records(auth_client, other_user, make_expense, make_loan):
    make_expense(other_user, "10.00")
    make_loan(other_user, "10.00")

    resp = auth_client.get("/dashboard")

    assert resp.context["recent_expenses"] == []
    assert resp.context["recent_loans"] == []
    assert resp.context["summary"].pending_loans == Decimal("0.00")


def test_dashboard_cards_render_summary_props(auth_client, user, make_income, make_expense):
    make_income(user, "300.00")
    make_expense(user, "500.00")

    resp = auth_client.get("/dashboard")

    assert resp.context["totals"] == {
        "weeklyIncome": Decimal("300.00"),
        "weeklyExpenses": Decimal("500.00"),
        "pendingLoans": Decimal("0.00"),
        "remainingBalance": Decimal("-200.00"),
    }
    assert "-$200.00" in resp.text
