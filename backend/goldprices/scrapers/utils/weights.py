"""Bar weight detection from product titles and card text."""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from goldprices.scrapers.base import GRAM, KG, OUNCE
from goldprices.scrapers.utils.normalizer import PriceNormalizer


@dataclass(frozen=True)
class WeightMatch:
    """A detected bar weight."""

    unit: str
    amount: Optional[Decimal] = None


# Tried in this order; the first match wins
WEIGHT_PATTERNS = [
    re.compile(r"(\d+(?:[.,]\d+)?)\s*(grama|grams|gram|gr|g)\b", re.IGNORECASE),
    re.compile(r"(\d+(?:[.,]\d+)?)\s*(kilograms|kilogram|kilo|kg)\b", re.IGNORECASE),
    re.compile(r"(\d+(?:[.,]\d+)?)\s*(unca troy|ounces|ounce|unca|unce|oz)\b", re.IGNORECASE),
]

# Round-number title tokens, checked in order when no explicit weight is given
INFERENCE_TABLE = [
    (("1000", "1.000"), KG, Decimal("1")),
    (("500",), GRAM, Decimal("500")),
    (("250",), GRAM, Decimal("250")),
    (("100",), GRAM, Decimal("100")),
    (("50",), GRAM, Decimal("50")),
    (("31", "unca", "ounce"), OUNCE, Decimal("1")),
    (("20",), GRAM, Decimal("20")),
    (("10",), GRAM, Decimal("10")),
    (("5",), GRAM, Decimal("5")),
]

_THOUSANDS_RE = re.compile(r"\d{1,3}(?:\.\d{3})+")


def _parse_amount(raw: str) -> Optional[Decimal]:
    if _THOUSANDS_RE.fullmatch(raw):
        raw = raw.replace(".", "")
    try:
        return Decimal(raw.replace(",", "."))
    except InvalidOperation:
        return None


def extract_weight(text: Optional[str]) -> Optional[WeightMatch]:
    """Find an explicit weight such as "100 g", "1 kg" or "1 unca".

    Gram weights of 1000 or more are reported in kilograms.
    """
    if not text:
        return None

    for pattern in WEIGHT_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue

        amount = _parse_amount(match.group(1))
        unit = PriceNormalizer.normalize_unit(match.group(2))
        if unit == GRAM and amount is not None and amount >= 1000:
            amount = amount / 1000
            unit = KG
        return WeightMatch(unit=unit, amount=amount)

    return None


def infer_weight(title: Optional[str]) -> Optional[WeightMatch]:
    """Guess the weight from round-number tokens in a product title."""
    if not title:
        return None

    title_lower = title.lower()
    for tokens, unit, amount in INFERENCE_TABLE:
        if any(token in title_lower for token in tokens):
            return WeightMatch(unit=unit, amount=amount)
    return None


def detect_weight(title: Optional[str], text: Optional[str] = None) -> Optional[WeightMatch]:
    """Explicit weight from title and text, else inference from the title."""
    combined = " ".join(part for part in (title, text) if part)
    return extract_weight(combined) or infer_weight(title)
