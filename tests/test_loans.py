from decimal import Decimal

from sqlalchemy import select

from weekly_finance.models import Loan, LoanStatus


def _loan(db, loan_id):
    db.expire_all()
    return db.execute(select(Loan).where(Loan.id == loan_id)).scalar_one_or_none()


def test_user_can_list_loans(auth_client, user, make_loan):
    make_loan(user, status=LoanStatus.PAID)

    resp = auth_client.get("/loans")

    assert resp.status_code == 200
    assert resp.template.name == "loans/index.html"
    assert resp.context["loans"].items[0].status is LoanStatus.PAID


def test_create_form_defaults_to_pending(auth_client):
    resp = auth_client.get("/loans/create")
    assert resp.context["values"]["status"] == "pending"


def test_user_can_create_loan(auth_client, db, user):
    resp = auth_client.post(
        "/loans",
        data={
            "description": "Loan to John for car repair",
            "amount": "300",
            "loan_date": "2024-01-10",
            "status": "pending",
            "notes": "Pays back next month",
        },
        follow_redirects=False,
    )

    assert resp.status_code == 303
    assert resp.headers["location"] == "/loans"
    loan = db.execute(select(Loan).where(Loan.user_id == user.id)).scalar_one()
    assert loan.amount == Decimal("300.00")
    assert loan.status is LoanStatus.PENDING
    assert loan.notes == "Pays back next month"


def test_loan_status_must_be_known(auth_client, db):
    resp = auth_client.post(
        "/loans",
        data={"description": "Weird", "amount": "10", "loan_date": "2024-01-10", "status": "forgiven"},
    )

    assert resp.status_code == 422
    assert resp.context["errors"] == {"status": "Status must be pending, paid, or cancelled."}
    assert db.execute(select(Loan)).first() is None


def test_loan_required_fields(auth_client):
    resp = auth_client.post("/loans", data={})

    assert resp.status_code == 422
    assert resp.context["errors"] == {
        "description": "Description is required.",
        "amount": "Amount is required.",
        "loan_date": "Loan date is required.",
        "status": "Status is required.",
    }


def test_marking_loan_paid_removes_it_from_pending_total(auth_client, db, user, make_loan):
    loan = make_loan(user, "100.00")
    assert auth_client.get("/dashboard").context["summary"].pending_loans == Decimal("100.00")

    resp = auth_client.put(
        f"/loans/{loan.id}",
        data={
            "description": loan.description,
            "amount": "100.00",
            "loan_date": loan.loan_date.isoformat(),
            "status": "paid",
        },
        follow_redirects=False,
    )

    assert resp.status_code == 303
    assert _loan(db, loan.id).status is LoanStatus.PAID
    assert auth_client.get("/dashboard").context["summary"].pending_loans == Decimal("0.00")


def test_user_can_delete_loan(auth_client, db, user, make_loan):
    loan = make_loan(user)

    resp = auth_client.delete(f"/loans/{loan.id}", follow_redirects=False)

    assert resp.status_code == 303
    assert resp.headers["location"] == "/loans"
    assert _loan(db, loan.id) is None


def test_other_users_loan_is_not_found(auth_client, other_user, make_loan):
    loan = make_loan(other_user)
    assert auth_client.get(f"/loans/{loan.id}/edit").status_code == 404


def test_out_of_range_loan_id_is_not_found(auth_client):
    assert auth_client.get("/loans/99999999999999999999").status_code == 404
    assert auth_client.get("/loans?page=99999999999999999999").status_code == 422
