"""
Signal Serializer

Converts engine models into the camelCase dicts served by the HTTP API and
published to Redis, and wraps them in the feed envelope:

  {
    "channel": "quotes:ticker:LMT",
    "data": { ...model fields... }
  }
"""
from __future__ import annotations

import json
from typing import Any, Optional, Union

from signal_engine.models.contracts import DefenseContract, ImpactedEntity, MarketImpact
from signal_engine.models.events import GeopoliticalEvent
from signal_engine.models.maritime import MaritimeEvent, VesselPosition, VesselTraffic
from signal_engine.models.market import HistoricalBar, MarketIndicator, Quote


class SerializationError(Exception):
    """Raised when serialization or deserialization fails."""


# ── Models -> dicts ───────────────────────────────────────────────────────────

def quote_to_dict(quote: Quote) -> dict[str, Any]:
    return {
        "ticker": quote.ticker,
        "name": quote.name,
        "currentPrice": quote.current_price,
        "previousClose": quote.previous_close,
        "dayChange": quote.day_change,
        "dayChangePercent": quote.day_change_percent,
        "volume": quote.volume,
        "marketCap": quote.market_cap,
        "currency": quote.currency,
        "exchange": quote.exchange,
        "marketState": quote.market_state.value,
        "lastUpdate": quote.last_update.isoformat(),
        "dataSource": quote.data_source,
    }


def bar_to_dict(bar: HistoricalBar) -> dict[str, Any]:
    return {
        "timestamp": bar.timestamp.isoformat(),
        "open": bar.open,
        "high": bar.high,
        "low": bar.low,
        "close": bar.close,
        "volume": bar.volume,
    }


def indicator_to_dict(indicator: MarketIndicator) -> dict[str, Any]:
    return {
        "name": indicator.name,
        "ticker": indicator.ticker,
        "value": indicator.value,
        "change": indicator.change,
        "changePercent": indicator.change_percent,
        "timestamp": indicator.timestamp.isoformat(),
    }


def event_to_dict(event: GeopoliticalEvent) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": event.id,
        "title": event.title,
        "description": event.description,
        "url": event.url,
        "publishedAt": event.published_at.isoformat(),
        "source": event.source_name,
        "category": event.category,
        "impact": event.impact.value,
        "relevanceScore": event.relevance_score,
        "rankScore": round(event.rank_score, 4),
    }
    # Optional extras are omitted rather than sent as null
    if event.engagement is not None:
        data["upvotes"] = event.engagement
    if event.comments is not None:
        data["comments"] = event.comments
    if event.sentiment is not None:
        data["sentiment"] = event.sentiment
    if event.image_url:
        data["imageUrl"] = event.image_url
    return data


def entity_to_dict(entity: ImpactedEntity) -> dict[str, Any]:
    return {
        "symbol": entity.symbol,
        "company": entity.company_name,
        "confidence": entity.confidence,
        "reasoning": entity.reasoning,
    }


def impact_to_dict(impact: MarketImpact) -> dict[str, Any]:
    return {
        "level": impact.level.value,
        "reasoning": impact.reasoning,
        "factors": list(impact.factors),
    }


def contract_to_dict(contract: DefenseContract) -> dict[str, Any]:
    award = contract.award
    return {
        "id": award.id,
        "awardId": award.award_id,
        "recipient": award.recipient,
        "amount": award.amount,
        "description": award.description,
        "startDate": award.start_date,
        "endDate": award.end_date,
        "awardingAgency": award.awarding_agency,
        "awardingSubAgency": award.awarding_sub_agency,
        "awardType": award.award_type,
        "source": contract.source,
        "impactedStocks": [entity_to_dict(e) for e in contract.impacted_entities],
        "marketImpact": impact_to_dict(contract.market_impact),
    }


def vessel_to_dict(vessel: VesselPosition) -> dict[str, Any]:
    return {
        "mmsi": vessel.mmsi,
        "name": vessel.name,
        "type": vessel.vessel_type,
        "latitude": vessel.latitude,
        "longitude": vessel.longitude,
        "course": vessel.course,
        "speed": vessel.speed,
        "heading": vessel.heading,
        "timestamp": vessel.timestamp.isoformat(),
        "destination": vessel.destination,
        "length": vessel.length,
        "width": vessel.width,
    }


def traffic_to_dict(traffic: Optional[VesselTraffic]) -> Optional[dict[str, Any]]:
    if traffic is None:
        return None
    return {
        "region": traffic.region,
        "totalVessels": traffic.total_vessels,
        "congestionLevel": traffic.congestion_level.value,
        "commercialVessels": traffic.commercial_vessels,
        "militaryVessels": traffic.military_vessels,
        "cargoVessels": traffic.cargo_vessels,
        "tankerVessels": traffic.tanker_vessels,
        "timestamp": traffic.timestamp.isoformat(),
    }


def maritime_event_to_dict(event: MaritimeEvent) -> dict[str, Any]:
    return {
        "id": event.id,
        "type": event.event_type.value,
        "region": event.region,
        "description": event.description,
        "impactScore": event.impact_score,
        "vesselsAffected": event.vessels_affected,
        "economicImpact": event.economic_impact,
        "timestamp": event.timestamp.isoformat(),
    }


# ── Envelope ──────────────────────────────────────────────────────────────────

def serialize(channel: str, data: dict[str, Any]) -> str:
    """
    Encode a channel name and data dict into a JSON string for Redis.

    Raises SerializationError if encoding fails.
    """
    try:
        return json.dumps({"channel": channel, "data": data}, default=str)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to serialize feed message: {exc}") from exc


def deserialize(raw: Union[str, bytes]) -> tuple[str, dict[str, Any]]:
    """
    Decode a JSON string from Redis into (channel, data).

    Raises SerializationError if decoding fails or the envelope is malformed.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SerializationError(f"Failed to deserialize feed message: {exc}") from exc

    if not isinstance(envelope, dict) or "channel" not in envelope or "data" not in envelope:
        raise SerializationError("Malformed feed envelope, expected {channel, data}")

    return envelope["channel"], envelope["data"]
