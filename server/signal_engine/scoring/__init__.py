"""
Scoring: keyword relevance, entity matching and contract impact.

Pure functions over static vocabularies. Nothing here does I/O.
"""
from signal_engine.scoring.entities import (
    DEFENSE_CONTRACTORS,
    EntityImpactMatcher,
    EntityProfile,
)
from signal_engine.scoring.impact import ImpactAssessor
from signal_engine.scoring.relevance import (
    GEOPOLITICAL_KEYWORDS,
    RelevanceScorer,
    assess_geopolitical_impact,
    keyword_score,
    recency_boost,
)

__all__ = [
    "DEFENSE_CONTRACTORS",
    "EntityImpactMatcher",
    "EntityProfile",
    "GEOPOLITICAL_KEYWORDS",
    "ImpactAssessor",
    "RelevanceScorer",
    "assess_geopolitical_impact",
    "keyword_score",
    "recency_boost",
]
