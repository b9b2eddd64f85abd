"""
Contract Data Models

Government contract awards and the tradable entities they implicate.
"""
from __future__ import annotations

from dataclasses import dataclass

from signal_engine.models.events import ImpactLevel


@dataclass(frozen=True)
class ImpactedEntity:
    """A tradable entity implicated by free text, with a [0, 1] confidence."""

    symbol: str
    company_name: str
    confidence: float
    reasoning: str

    def __post_init__(self) -> None:
        if not self.symbol:
            raise ValueError("symbol must be non-empty")
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(
                f"confidence must be in [0.0, 1.0], got {self.confidence}"
            )


@dataclass(frozen=True)
class MarketImpact:
    """Qualitative impact level with the factors that produced it."""

    level: ImpactLevel
    reasoning: str
    factors: tuple[str, ...]
    score: int = 0


@dataclass(frozen=True)
class ContractAward:
    """Award record as normalized from the spending provider, before enrichment."""

    id: str
    award_id: str
    recipient: str
    amount: float
    description: str
    start_date: str
    end_date: str
    awarding_agency: str
    awarding_sub_agency: str
    award_type: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id must be non-empty")
        if self.amount < 0:
            raise ValueError(f"amount must be non-negative, got {self.amount}")


@dataclass(frozen=True)
class DefenseContract:
    """An award enriched with impacted entities and a market impact assessment."""

    award: ContractAward
    impacted_entities: tuple[ImpactedEntity, ...]
    market_impact: MarketImpact
    source: str = "USASpending.gov"

    def __post_init__(self) -> None:
        confidences = [e.confidence for e in self.impacted_entities]
        if confidences != sorted(confidences, reverse=True):
            raise ValueError("impacted_entities must be ordered by descending confidence")

    @property
    def id(self) -> str:
        return self.award.id

    @property
    def amount(self) -> float:
        return self.award.amount
