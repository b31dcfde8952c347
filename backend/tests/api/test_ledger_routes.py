from datetime import date, timedelta
from decimal import Decimal
from io import BytesIO

import openpyxl
import pytest

from moneymanager.services.auth import get_token_service

PREFIX = "/api/v1.0"


@pytest.fixture
def auth_headers(make_profile):
    def _headers(email="alice@example.com"):
        profile = make_profile(email, email.split("@")[0].title())
        token = get_token_service().issue(profile.email)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def alice(auth_headers):
    return auth_headers("alice@example.com")


@pytest.fixture
def category_id(client, alice):
    response = client.post(f"{PREFIX}/categories", json={"name": "General", "icon": "📦", "type": "expense"}, headers=alice)
    assert response.status_code == 201
    return response.json()["id"]


def _add(client, headers, kind, category_id, name, amount, day=None):
    return client.post(f"{PREFIX}/{kind}", headers=headers, json={
        "category_id": category_id,
        "name": name,
        "amount": amount,
        "date": (day or date.today()).isoformat(),
    })


def test_categories(client, alice, category_id):
    duplicate = client.post(f"{PREFIX}/categories", json={"name": "General", "type": "income"}, headers=alice)
    assert duplicate.status_code == 409

    assert len(client.get(f"{PREFIX}/categories", headers=alice).json()) == 1
    assert client.get(f"{PREFIX}/categories/income", headers=alice).json() == []

    response = client.put(f"{PREFIX}/categories/{category_id}", headers=alice,
                          json={"name": "Misc", "icon": None, "type": "expense"})
    assert response.status_code == 200
    assert response.json()["name"] == "Misc"

    missing = client.put(f"{PREFIX}/categories/nope", headers=alice, json={"name": "X", "type": "expense"})
    assert missing.status_code == 404


def test_add_list_and_delete_expense(client, alice, category_id):
    response = _add(client, alice, "expenses", category_id, "Lunch", "12.50")
    assert response.status_code == 201
    created = response.json()
    assert created["category_name"] == "General"

    listed = client.get(f"{PREFIX}/expenses", headers=alice).json()
    assert [e["id"] for e in listed] == [created["id"]]

    assert client.delete(f"{PREFIX}/expenses/{created['id']}", headers=alice).status_code == 204
    assert client.delete(f"{PREFIX}/expenses/{created['id']}", headers=alice).status_code == 404


def test_add_with_unknown_category(client, alice):
    assert _add(client, alice, "incomes", "missing", "Salary", "10").status_code == 404


def test_negative_amount_is_rejected(client, alice, category_id):
    assert _add(client, alice, "incomes", category_id, "Salary", "-1").status_code == 422


def test_cannot_delete_another_profiles_income(client, alice, auth_headers, category_id):
    bob = auth_headers("bob@example.com")
    created = _add(client, alice, "incomes", category_id, "Salary", "100").json()

    assert client.delete(f"{PREFIX}/incomes/{created['id']}", headers=bob).status_code == 403
    assert len(client.get(f"{PREFIX}/incomes", headers=alice).json()) == 1


def test_filter(client, alice, category_id):
    today = date.today()
    _add(client, alice, "expenses", category_id, "Coffee", "3.50", today - timedelta(days=2))
    _add(client, alice, "expenses", category_id, "Rent", "900", today - timedelta(days=1))
    _add(client, alice, "expenses", category_id, "Next week coffee", "4", today + timedelta(days=7))

    response = client.post(f"{PREFIX}/filter", headers=alice, json={"type": "expense"})
    assert response.status_code == 200
    assert [e["name"] for e in response.json()] == ["Coffee", "Rent"]

    response = client.post(f"{PREFIX}/filter", headers=alice,
                           json={"type": "expense", "keyword": "COFFEE", "sort_field": "amount", "sort_order": "desc",
                                 "end_date": (today + timedelta(days=30)).isoformat()})
    assert [e["name"] for e in response.json()] == ["Next week coffee", "Coffee"]

    assert client.post(f"{PREFIX}/filter", headers=alice, json={"type": "transfer"}).status_code == 400
    assert client.post(f"{PREFIX}/filter", headers=alice,
                       json={"type": "income", "sort_field": "profile_id"}).status_code == 400


def test_dashboard(client, alice, category_id):
    _add(client, alice, "incomes", category_id, "Salary", "500.00")
    _add(client, alice, "expenses", category_id, "Groceries", "120.50")

    response = client.get(f"{PREFIX}/dashboard", headers=alice)
    assert response.status_code == 200
    view = response.json()
    assert Decimal(view["total_balance"]) == Decimal("379.50")
    assert Decimal(view["total_income"]) == Decimal("500.00")
    assert len(view["recent_5_income"]) == 1
    assert {t["type"] for t in view["recent_transactions"]} == {"income", "expense"}


def test_excel_download(client, alice, category_id):
    _add(client, alice, "incomes", category_id, "Salary", "500.00")

    response = client.get(f"{PREFIX}/excel/download/incomes", headers=alice)
    assert response.status_code == 200
    assert "income.xlsx" in response.headers["content-disposition"]

    ws = openpyxl.load_workbook(BytesIO(response.content)).active
    assert ws.title == "Incomes"
    assert ws.cell(row=2, column=2).value == "Salary"


def test_excel_email(client, alice, category_id, mailer):
    _add(client, alice, "expenses", category_id, "Groceries", "20")

    response = client.get(f"{PREFIX}/email/expense-excel", headers=alice)
    assert response.status_code == 200
    mail = mailer.sent[-1]
    assert mail["to"] == "alice@example.com"
    assert mail["filename"] == "expenses.xlsx"

    response = client.get(f"{PREFIX}/email/income-excel", headers=alice)
    assert mailer.sent[-1]["subject"] == "Your Income Excel Report"


def test_excel_email_delivery_failure(client, alice, mailer):
    mailer.fail_for.add("alice@example.com")
    response = client.get(f"{PREFIX}/email/income-excel", headers=alice)
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


def test_ledger_routes_require_identity(client):
    for method, path in [("get", "/incomes"), ("get", "/dashboard"), ("post", "/filter"), ("get", "/categories")]:
        assert getattr(client, method)(f"{PREFIX}{path}").status_code == 401
