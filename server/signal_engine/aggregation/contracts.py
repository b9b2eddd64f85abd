"""
Contract Service

Fetches defense contract awards and enriches each one with the entities it
implicates and an assessment of its market impact.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from signal_engine.core.types import InvalidInputError
from signal_engine.fetch.fallback import FallbackFetcher
from signal_engine.models.contracts import ContractAward, DefenseContract
from signal_engine.scoring.entities import EntityImpactMatcher
from signal_engine.scoring.impact import ImpactAssessor
from signal_engine.sources.base import SourceClient
from signal_engine.sources.usaspending import (
    MAX_CONTRACT_DAYS,
    MAX_CONTRACT_LIMIT,
    ContractQuery,
)

logger = logging.getLogger(__name__)


class ContractService:
    def __init__(
        self,
        sources: Sequence[SourceClient],
        matcher: Optional[EntityImpactMatcher] = None,
        assessor: Optional[ImpactAssessor] = None,
    ) -> None:
        self._fetcher = FallbackFetcher[list[ContractAward]](sources, resource="contracts")
        self._matcher = matcher or EntityImpactMatcher()
        self._assessor = assessor or ImpactAssessor()

    @property
    def source_names(self) -> tuple[str, ...]:
        return self._fetcher.source_names

    def enrich(self, award: ContractAward) -> DefenseContract:
        """Entities come from recipient plus description; impact from the description."""
        return DefenseContract(
            award=award,
            impacted_entities=self._matcher.match(f"{award.recipient} {award.description}"),
            market_impact=self._assessor.assess(award.amount, award.description),
        )

    async def contracts(
        self,
        days: int = 30,
        min_amount: float = 1_000_000,
        limit: int = 20,
    ) -> list[DefenseContract]:
        """Enriched awards sorted by amount descending; empty when no source answers."""
        if not (1 <= days <= MAX_CONTRACT_DAYS):
            raise InvalidInputError(
                f"days must be between 1 and {MAX_CONTRACT_DAYS}", field="days", value=days
            )
        if min_amount < 0:
            raise InvalidInputError("minAmount must be non-negative", field="minAmount", value=min_amount)
        if not (1 <= limit <= MAX_CONTRACT_LIMIT):
            raise InvalidInputError(
                f"limit must be between 1 and {MAX_CONTRACT_LIMIT}", field="limit", value=limit
            )

        outcome = await self._fetcher.fetch(
            ContractQuery(days=days, min_amount=min_amount, limit=limit)
        )
        if not outcome.ok:
            return []

        awards = sorted(outcome.value, key=lambda a: a.amount, reverse=True)[:limit]
        enriched = [self.enrich(award) for award in awards]
        logger.info(
            f"Enriched {len(enriched)} contracts",
            extra={"source": outcome.source, "count": len(enriched)},
        )
        return enriched


def total_value(contracts: Sequence[DefenseContract]) -> float:
    return sum(c.amount for c in contracts)
