"""
Feed Channel Definitions

Channel naming scheme:
  quotes:all                  every watchlist quote
  quotes:ticker:{TICKER}      e.g. quotes:ticker:LMT
  events:all                  every ranked event
  events:impact:{level}       e.g. events:impact:high
  contracts:all               every enriched contract
  contracts:ticker:{TICKER}   one per impacted entity
"""
from __future__ import annotations

from signal_engine.models.contracts import DefenseContract
from signal_engine.models.events import GeopoliticalEvent
from signal_engine.models.market import Quote

# ── Well-known channel names ──────────────────────────────────────────────────

QUOTES_ALL = "quotes:all"
EVENTS_ALL = "events:all"
CONTRACTS_ALL = "contracts:all"

QUOTE_TICKER_PREFIX = "quotes:ticker:"
EVENT_IMPACT_PREFIX = "events:impact:"
CONTRACT_TICKER_PREFIX = "contracts:ticker:"


# ── Per-item helpers ──────────────────────────────────────────────────────────

def channels_for_quote(quote: Quote) -> list[str]:
    return [QUOTES_ALL, f"{QUOTE_TICKER_PREFIX}{quote.ticker.upper()}"]


def channels_for_event(event: GeopoliticalEvent) -> list[str]:
    return [EVENTS_ALL, f"{EVENT_IMPACT_PREFIX}{event.impact.value}"]


def channels_for_contract(contract: DefenseContract) -> list[str]:
    """contracts:all plus one ticker channel per impacted entity."""
    result = [CONTRACTS_ALL]
    for entity in contract.impacted_entities:
        result.append(f"{CONTRACT_TICKER_PREFIX}{entity.symbol.upper()}")
    return result
