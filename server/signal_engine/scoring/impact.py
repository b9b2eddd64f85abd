"""
Contract Impact Assessor

Weighted amount and keyword rules producing a qualitative market impact.
"""
from __future__ import annotations

from signal_engine.models.contracts import MarketImpact
from signal_engine.models.events import ImpactLevel

DEFAULT_REASONING = "Standard defense contract with typical market impact"

# (threshold, points, factor), highest first; only the first tier that applies counts
AMOUNT_TIERS: tuple[tuple[float, int, str], ...] = (
    (1_000_000_000, 3, "Large contract value (>$1B)"),
    (100_000_000, 2, "Significant contract value (>$100M)"),
    (10_000_000, 1, "Notable contract value (>$10M)"),
)

HIGH_IMPACT_TERMS: tuple[str, ...] = (
    "aircraft", "submarine", "destroyer", "fighter", "missile defense",
    "satellite", "cyber warfare", "artificial intelligence", "autonomous",
)

MEDIUM_IMPACT_TERMS: tuple[str, ...] = (
    "maintenance", "upgrade", "modification", "support services",
    "training", "logistics", "spare parts",
)

HIGH_THRESHOLD = 5
MEDIUM_THRESHOLD = 2


def level_for_score(score: int) -> ImpactLevel:
    if score >= HIGH_THRESHOLD:
        return ImpactLevel.HIGH
    if score >= MEDIUM_THRESHOLD:
        return ImpactLevel.MEDIUM
    return ImpactLevel.LOW


class ImpactAssessor:
    """
    Scores a contract amount plus free text.

    Example:
        >>> ImpactAssessor().assess(1.5e9, "next-generation stealth aircraft program").level
        <ImpactLevel.HIGH: 'high'>
    """

    def assess(self, amount: float, text: str) -> MarketImpact:
        factors: list[str] = []
        score = 0

        for threshold, points, factor in AMOUNT_TIERS:
            if amount > threshold:
                score += points
                factors.append(factor)
                break

        lowered = text.lower()
        for term in HIGH_IMPACT_TERMS:
            if term in lowered:
                score += 2
                factors.append(f"High-impact technology: {term}")

        for term in MEDIUM_IMPACT_TERMS:
            if term in lowered:
                score += 1
                factors.append(f"Medium-impact service: {term}")

        return MarketImpact(
            level=level_for_score(score),
            reasoning="; ".join(factors) if factors else DEFAULT_REASONING,
            factors=tuple(factors),
            score=score,
        )
