"""Shared fixtures: users, logged-in clients and a stubbed OpenAI client."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

import finance.ai as ai_mod
from finance.dates import UTC
from finance.store import Entry
from tests.helpers.openai_stub import make_client_class


@pytest.fixture(autouse=True)
def _fintrack_settings(settings):
    """Per-test copy of FINTRACK with a fake API key and a plain currency symbol."""
    settings.FINTRACK = {
        **settings.FINTRACK,
        "OPENAI_API_KEY": "sk-test",
        "OPENAI_MODEL": "test-model",
        "CURRENCY_SYMBOL": "₹",
    }
    return settings


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(
        username="alice", email="alice@example.com", password="pw-12345!", first_name="Alice",
    )


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(
        username="bob", email="bob@example.com", password="pw-12345!",
    )


@pytest.fixture
def auth_client(client, user):
    client.force_login(user)
    return client


@pytest.fixture
def openai_stub(monkeypatch):
    """Install a stub client; returns ``(queue_replies, calls)``."""
    calls: list[dict] = []

    def install(*replies):
        monkeypatch.setattr(ai_mod, "OpenAI", make_client_class(list(replies), calls))
        return calls

    return install


def make_entry(kind, amount, when, label="", title="", id=None):
    """Entry with an aware UTC occurred_at built from (y, m, d) or a datetime."""
    if isinstance(when, tuple):
        when = datetime(*when, tzinfo=UTC)
    if isinstance(amount, (int, str)) and not isinstance(amount, bool):
        amount = Decimal(str(amount))
    return Entry(id=id, kind=kind, amount=amount, occurred_at=when, recorded_at=when, label=label, title=title)
