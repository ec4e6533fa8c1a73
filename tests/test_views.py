import json
from datetime import datetime
from decimal import Decimal
from io import BytesIO

import pytest
from django.contrib.messages import get_messages
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from openpyxl import load_workbook

from finance.dates import UTC
from finance.models import Expense, Income
from finance.store import StoreUnavailable

pytestmark = pytest.mark.django_db


def _seed(user):
    Income.objects.create(owner=user, amount=Decimal("100"), occurred_at=datetime(2024, 1, 15, tzinfo=UTC),
                          source="Salary")
    Expense.objects.create(owner=user, amount=Decimal("40"), occurred_at=datetime(2024, 1, 20, tzinfo=UTC),
                           category="Food", title="Dinner")


def test_pages_require_login(client):
    resp = client.get(reverse("finance:dashboard"))
    assert resp.status_code == 302
    assert reverse("accounts:login") in resp["Location"]


def test_root_redirects_to_dashboard(auth_client):
    resp = auth_client.get("/")
    assert resp.status_code == 302
    assert resp["Location"] == reverse("finance:dashboard")


def test_dashboard_widgets(auth_client, user, other_user):
    _seed(user)
    Expense.objects.create(owner=other_user, amount=Decimal("500"), occurred_at=datetime(2024, 1, 5, tzinfo=UTC),
                           category="Travel")

    resp = auth_client.get(reverse("finance:dashboard"), {"month": 1, "year": 2024})
    ctx = resp.context
    assert resp.status_code == 200
    assert ctx["month"].name == "January"
    assert ctx["categories"] == [{"category": "Food", "total": Decimal("40")}]
    assert ctx["year_chart"][0] == {"period": "Jan", "income": 100.0, "expense": 40.0, "savings": 60.0}
    assert ctx["balance"]["balance"] == Decimal("60")
    assert [row.title for row in ctx["latest"]] == ["Dinner", "Salary"]
    assert 2020 in ctx["years"]


def test_dashboard_caps_latest_transactions(auth_client, user):
    for day in range(1, 29):
        for _ in range(2):
            Expense.objects.create(owner=user, amount=Decimal("1"), occurred_at=datetime(2024, 2, day, tzinfo=UTC),
                                   category="Food")
    ctx = auth_client.get(reverse("finance:dashboard"), {"month": 2, "year": 2024}).context
    assert len(ctx["latest"]) == 50
    assert ctx["statement_count"] == 56


def test_dashboard_store_failure_shows_empty_state(auth_client, monkeypatch):
    def broken(*a, **kw):
        raise StoreUnavailable("offline")

    monkeypatch.setattr("finance.views.fetch_entries", broken)
    resp = auth_client.get(reverse("finance:dashboard"))
    assert resp.status_code == 200
    assert resp.context["latest"] == []
    assert any("Failed to load" in str(m) for m in get_messages(resp.wsgi_request))


def test_bad_month_falls_back_to_current(auth_client):
    resp = auth_client.get(reverse("finance:dashboard"), {"month": 13, "year": "abc"})
    assert resp.status_code == 200


# ---- Manual entry ------------------------------------------------------------


@pytest.mark.parametrize("amount", ["-5", "0"])
def test_income_rejects_non_positive_amount(auth_client, amount):
    resp = auth_client.post(reverse("finance:income"), {"amount": amount, "label": "Salary",
                                                        "occurred_on": "2024-01-15"})
    assert resp.status_code == 400
    assert Income.objects.count() == 0


def test_income_accepts_valid_amount(auth_client, user):
    resp = auth_client.post(reverse("finance:income"), {"amount": "12.50", "label": "Salary",
                                                        "occurred_on": "2024-01-15"})
    assert resp.status_code == 302
    record = Income.objects.get(owner=user)
    assert record.amount == Decimal("12.50")
    assert record.occurred_at.date().isoformat() == "2024-01-15"


def test_expense_page_lists_newest_first(auth_client, user):
    auth_client.post(reverse("finance:expenses"), {"amount": "5", "label": "Food", "occurred_on": "2024-03-01"})
    auth_client.post(reverse("finance:expenses"), {"amount": "7", "label": "Other", "custom_label": "Pets",
                                                   "occurred_on": "2024-01-01"})
    resp = auth_client.get(reverse("finance:expenses"), {"year": 2024})
    assert [r.category for r in resp.context["records"]] == ["Pets", "Food"]
    assert resp.context["chart"][0] == {"period": "Jan", "total": 7.0}
    assert resp.context["chart"][2] == {"period": "Mar", "total": 5.0}


def _receipt(name="slip.png", content_type="image/png"):
    return SimpleUploadedFile(name, b"\x89PNG", content_type=content_type)


def test_income_receipt_prefills_form(auth_client, openai_stub):
    calls = openai_stub(json.dumps({"amount": 1250.5, "source": None, "text": "Monthly salary slip"}))
    resp = auth_client.post(reverse("finance:income"), {"action": "extract", "receipt": _receipt()})
    assert resp.status_code == 200
    assert resp.context["form"].initial == {"amount": "1250.50", "label": "Salary"}
    assert not resp.context["form"].is_bound
    assert calls[0]["input"][0]["content"][1]["type"] == "input_image"
    assert Income.objects.count() == 0


def test_income_receipt_with_unlisted_source_uses_other(auth_client, openai_stub):
    openai_stub(json.dumps({"amount": 80, "source": "Royalties", "text": "Quarterly statement"}))
    resp = auth_client.post(reverse("finance:income"), {"action": "extract", "receipt": _receipt()})
    assert resp.context["form"].initial == {"amount": "80.00", "label": "Other", "custom_label": "Royalties"}


def test_expense_receipt_prefills_category(auth_client, openai_stub):
    openai_stub(json.dumps({"amount": 640, "source": None, "text": "City Pharma, 2 items"}))
    upload = _receipt("bill.pdf", "application/pdf")
    resp = auth_client.post(reverse("finance:expenses"), {"action": "extract", "receipt": upload})
    assert resp.status_code == 200
    assert resp.context["form"].initial == {"amount": "640.00", "label": "Medical"}
    assert Expense.objects.count() == 0


def test_receipt_without_amount_leaves_amount_blank(auth_client, openai_stub):
    openai_stub(json.dumps({"amount": None, "source": None, "text": "Uber trip"}))
    resp = auth_client.post(reverse("finance:expenses"), {"action": "extract", "receipt": _receipt()})
    assert resp.context["form"].initial == {"amount": "", "label": "Travel"}
    levels = [m.level_tag for m in get_messages(resp.wsgi_request)]
    assert "warning" in levels


def test_receipt_extraction_failure(auth_client, openai_stub):
    openai_stub("garbage")
    resp = auth_client.post(reverse("finance:income"), {"action": "extract", "receipt": _receipt()})
    assert resp.status_code == 502
    assert resp.context["form"].initial == {}
    assert Income.objects.count() == 0


def test_receipt_rejects_other_file_types(auth_client, openai_stub):
    calls = openai_stub()
    upload = _receipt("notes.txt", "text/plain")
    resp = auth_client.post(reverse("finance:expenses"), {"action": "extract", "receipt": upload})
    assert resp.status_code == 400
    assert resp.context["receipt_form"].errors["receipt"] == ["Upload an image or a PDF."]
    assert calls == []


# ---- Statistics / exports ----------------------------------------------------


def test_statistics_page_and_xlsx(auth_client, user):
    _seed(user)
    params = {"from": "2024-01-01", "to": "2024-01-31"}
    resp = auth_client.get(reverse("finance:statistics"), params)
    assert resp.context["stats"]["savings"] == Decimal("60")
    assert resp.context["has_data"]

    resp = auth_client.get(reverse("finance:statistics_xlsx"), params)
    assert resp["Content-Type"].startswith("application/vnd.openxmlformats")
    rows = list(load_workbook(BytesIO(resp.content)).active.iter_rows(values_only=True))
    assert ("Food", 40.0) in rows


def test_statement_csv_export(auth_client, user):
    _seed(user)
    resp = auth_client.get(reverse("finance:statement_csv"), {"month": 1, "year": 2024})
    assert 'filename="Statement_January_2024.csv"' in resp["Content-Disposition"]
    lines = resp.content.decode().splitlines()
    assert lines == [
        "Date,Title,Type,Amount",
        '"2024-01-20","Dinner","Expense",-40.00',
        '"2024-01-15","Salary","Income",100.00',
    ]


def test_savings_csv_export(auth_client, user):
    _seed(user)
    resp = auth_client.get(reverse("finance:savings_csv"), {"year": 2024})
    assert 'filename="Savings_Trend_2024.csv"' in resp["Content-Disposition"]
    assert resp.content.decode().splitlines()[1] == "Jan,100.00,40.00,60.00"


# ---- Statement upload --------------------------------------------------------


def test_upload_review_then_save(auth_client, user, openai_stub):
    lines = [
        {"date": "2024-01-02", "description": "AMAZON order", "amount": 300, "type": "DR", "classifiedAs": "Expense"},
        {"date": "2024-01-01", "description": "Salary credit", "amount": 9000, "type": "CR", "classifiedAs": "Income"},
    ]
    openai_stub(json.dumps({"transactions": lines}))
    upload = SimpleUploadedFile("stmt.csv", b"x", content_type="text/csv")
    resp = auth_client.post(reverse("finance:upload"), {"receipt": upload})
    assert resp.status_code == 200
    assert len(resp.context["transactions"]) == 2
    assert resp.context["totals"] == {"Income": 9000.0, "Expense": 300.0}
    assert Expense.objects.count() == 0

    resp = auth_client.post(reverse("finance:upload"), {"action": "save", "payload": resp.context["payload"]})
    assert resp.status_code == 302
    assert Expense.objects.get(owner=user).category == "Shopping"
    assert Income.objects.get(owner=user).amount == Decimal("9000.00")


def test_upload_extraction_failure(auth_client, openai_stub):
    openai_stub("garbage")
    upload = SimpleUploadedFile("stmt.pdf", b"%PDF", content_type="application/pdf")
    resp = auth_client.post(reverse("finance:upload"), {"receipt": upload})
    assert resp.status_code == 502
    assert Expense.objects.count() == 0


def test_unknown_url_uses_custom_404(auth_client):
    resp = auth_client.get("/no-such-page/")
    assert resp.status_code == 404
