# Recommendation module
from .candidates import (
    DEFAULT_CANDIDATES_PATH,
    Candidate,
    CandidateSource,
    HttpCandidateSource,
    JsonFileCandidateSource,
    StaticCandidateSource,
    source_from_config,
)
from .engine import (
    RecommendationEngine,
    ScoredRecommendation,
    analyze_reading_pattern,
    classify,
    default_engine,
    personalized_score,
)

__all__ = [
    "DEFAULT_CANDIDATES_PATH",
    "Candidate",
    "CandidateSource",
    "HttpCandidateSource",
    "JsonFileCandidateSource",
    "StaticCandidateSource",
    "source_from_config",
    "RecommendationEngine",
    "ScoredRecommendation",
    "analyze_reading_pattern",
    "classify",
    "default_engine",
    "personalized_score",
]
