"""
Shared fixtures for signal_engine tests.

FakeSource stands in for any SourceClient: it answers from a callable or a
constant and records every key it was asked for. No network involved.
"""
from datetime import datetime, timezone

import pytest

from signal_engine.core.types import FetchOutcome
from signal_engine.models.contracts import ContractAward
from signal_engine.models.events import GeopoliticalEvent, ImpactLevel
from signal_engine.models.market import MarketState, Quote, compute_change

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeSource:
    def __init__(self, name, answer=None, reason="unavailable", error=None):
        self.name = name
        self._answer = answer
        self._reason = reason
        self._error = error
        self.calls = []

    async def fetch(self, key):
        self.calls.append(key)
        if self._error is not None:
            raise self._error
        value = self._answer(key) if callable(self._answer) else self._answer
        if value is None:
            return FetchOutcome.failure(self.name, self._reason)
        return FetchOutcome.success(self.name, value)


def build_quote(ticker, price=100.0, previous=98.0, source="yahoo"):
    change, percent = compute_change(price, previous)
    return Quote(
        ticker=ticker,
        name=f"{ticker} Inc",
        current_price=price,
        previous_close=previous,
        day_change=change,
        day_change_percent=percent,
        volume=1000,
        market_cap=0.0,
        currency="USD",
        exchange="NYSE",
        market_state=MarketState.REGULAR,
        last_update=NOW,
        data_source=source,
    )


def build_event(event_id, relevance=1.0, impact=ImpactLevel.LOW, published_at=NOW, **extra):
    return GeopoliticalEvent(
        id=event_id,
        title=extra.pop("title", f"Headline {event_id}"),
        description="",
        url=f"https://news.example.com/{event_id}",
        published_at=published_at,
        source_name=extra.pop("source_name", "Test"),
        category="geopolitical",
        impact=impact,
        relevance_score=relevance,
        **extra,
    )


def build_award(award_id, amount, recipient="Lockheed Martin Corp", description="F-35 sustainment"):
    return ContractAward(
        id=award_id,
        award_id=f"AWD-{award_id}",
        recipient=recipient,
        amount=amount,
        description=description,
        start_date="2026-10-01",
        end_date="2027-10-01",
        awarding_agency="Department of Defense",
        awarding_sub_agency="Department of the Navy",
        award_type="DEFINITIVE CONTRACT",
    )


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def fake_source():
    return FakeSource


@pytest.fixture
def make_quote():
    return build_quote


@pytest.fixture
def make_event():
    return build_event


@pytest.fixture
def make_award():
    return build_award


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def fixed_clock():
    return lambda: NOW
