"""
Entity Impact Matcher

Connects free text (contract descriptions, headlines) to tradable entities
through a static catalog of company keywords and specialty terms.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from signal_engine.models.contracts import ImpactedEntity

logger = logging.getLogger(__name__)

KEYWORD_WEIGHT = 0.8
SPECIALTY_WEIGHT = 0.3
MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 1.0


@dataclass(frozen=True)
class EntityProfile:
    """One catalog entry. Keywords and specialties are matched lowercase."""

    symbol: str
    company_name: str
    keywords: tuple[str, ...]
    specialties: tuple[str, ...]


DEFENSE_CONTRACTORS: tuple[EntityProfile, ...] = (
    EntityProfile(
        "LMT", "Lockheed Martin",
        ("lockheed", "martin", "lmt"),
        ("missile", "aerospace", "defense systems", "f-35", "aegis"),
    ),
    EntityProfile(
        "RTX", "Raytheon Technologies",
        ("raytheon", "rtx", "technologies"),
        ("missile defense", "radar", "patriot", "tomahawk"),
    ),
    EntityProfile(
        "NOC", "Northrop Grumman",
        ("northrop", "grumman", "noc"),
        ("aerospace", "cyber", "b-21", "stealth"),
    ),
    EntityProfile(
        "BA", "Boeing",
        ("boeing", "ba"),
        ("aircraft", "helicopter", "apache", "chinook"),
    ),
    EntityProfile(
        "GD", "General Dynamics",
        ("general dynamics", "gd"),
        ("submarines", "tanks", "combat systems"),
    ),
    EntityProfile(
        "HII", "Huntington Ingalls Industries",
        ("huntington", "ingalls", "hii"),
        ("shipbuilding", "naval", "aircraft carrier"),
    ),
    EntityProfile(
        "LDOS", "Leidos",
        ("leidos", "ldos"),
        ("it services", "intelligence", "surveillance"),
    ),
    EntityProfile(
        "PLTR", "Palantir Technologies",
        ("palantir", "pltr"),
        ("data analytics", "intelligence", "ai"),
    ),
)


class EntityImpactMatcher:
    """
    Scores text against every catalog entry.

    Per entry: +0.8 for the first matching keyword (only one counts), +0.3 for
    each matching specialty, capped at 1.0. Entries below 0.3 are dropped;
    the rest come back by descending confidence, catalog order on ties.
    """

    def __init__(self, catalog: tuple[EntityProfile, ...] = DEFENSE_CONTRACTORS) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> tuple[EntityProfile, ...]:
        return self._catalog

    def score(self, profile: EntityProfile, text: str) -> tuple[float, str]:
        """Confidence and reasoning trace for one entry."""
        lowered = text.lower()
        confidence = 0.0
        reasoning = ""

        for keyword in profile.keywords:
            if keyword in lowered:
                confidence += KEYWORD_WEIGHT
                reasoning += f"Direct mention of {keyword}. "
                break

        for specialty in profile.specialties:
            if specialty in lowered:
                confidence += SPECIALTY_WEIGHT
                reasoning += f"Contract involves {specialty} ({profile.company_name} specialty). "

        # Rounded so 0.3 + 0.3 + ... does not drift under the threshold
        return round(min(confidence, MAX_CONFIDENCE), 6), reasoning.strip()

    def match(self, text: str) -> tuple[ImpactedEntity, ...]:
        matches: list[ImpactedEntity] = []
        for profile in self._catalog:
            confidence, reasoning = self.score(profile, text)
            if confidence >= MIN_CONFIDENCE:
                matches.append(
                    ImpactedEntity(
                        symbol=profile.symbol,
                        company_name=profile.company_name,
                        confidence=confidence,
                        reasoning=reasoning,
                    )
                )

        # sorted() is stable, so catalog order breaks ties
        matches.sort(key=lambda e: e.confidence, reverse=True)
        if matches:
            logger.debug(
                f"Matched {len(matches)} entities",
                extra={"symbols": [e.symbol for e in matches]},
            )
        return tuple(matches)
