"""Scraper utilities for price parsing, weight detection and fetching."""

from .normalizer import (
    PriceNormalizer,
    TieredPrice,
    resolve_tiered_price,
    dedupe_entries,
    UNIT_SYNONYMS,
)
from .weights import WeightMatch, extract_weight, infer_weight, detect_weight
from .user_agents import get_random_user_agent, build_headers, USER_AGENTS
from .retry import fetch_retrying, RETRYABLE_ERRORS


__all__ = [
    # Normalization
    "PriceNormalizer",
    "TieredPrice",
    "resolve_tiered_price",
    "dedupe_entries",
    "UNIT_SYNONYMS",
    # Weights
    "WeightMatch",
    "extract_weight",
    "infer_weight",
    "detect_weight",
    # User agents
    "get_random_user_agent",
    "build_headers",
    "USER_AGENTS",
    # Retry
    "fetch_retrying",
    "RETRYABLE_ERRORS",
]
