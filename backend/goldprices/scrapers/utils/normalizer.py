"""Price parsing and unit normalization utilities.

Vendor pages mix European ("1.234,56 €") and American ("1,234.56 €")
number formats, sometimes on the same site. Everything here is pure and
never raises on bad input.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Pattern, Union

# A grouped number in either locale: "1.234,56", "1,234.56", "146,50", "950"
GROUPED_NUMBER = r"\d{1,3}(?:[.,]\d{3})*(?:[.,]\d{2})?"

# Strict European format followed by the euro sign, used for del/ins blocks
EURO_PRICE_RE = re.compile(r"(\d{1,3}(?:\.\d{3})*(?:,\d{2})?)\s*€")

# Strict American format followed by a euro marker
AMERICAN_PRICE_RE = re.compile(r"(\d{1,3}(?:,\d{3})*(?:\.\d{2})?)\s*(?:€|EUR|eur)")

# Either locale followed by a euro marker
CURRENCY_PRICE_RE = re.compile(rf"({GROUPED_NUMBER})\s*(?:€|EUR|eur)", re.IGNORECASE)

# European format followed by any euro marker, used inside table cells
EURO_CELL_PRICE_RE = re.compile(r"(\d{1,3}(?:\.\d{3})*(?:,\d{2})?)\s*(?:€|EUR|eur)", re.IGNORECASE)

# Ordered patterns for finding one price in free product text
PRICE_TEXT_PATTERNS: List[Pattern[str]] = [
    re.compile(rf"({GROUPED_NUMBER})\s*€"),
    re.compile(rf"({GROUPED_NUMBER})\s*EUR", re.IGNORECASE),
    re.compile(rf"€\s*({GROUPED_NUMBER})"),
    re.compile(rf"cijena[:\s]+({GROUPED_NUMBER})", re.IGNORECASE),
]

# "Unit price" labels on Croatian shops ("od 1 kom.", "jedinična cijena")
BASE_PRICE_RE = re.compile(
    r"(?:od\s+1\s+kom\.|jedinična\s+cijena)[:\s]*(\d{1,3}(?:\.\d{3})*(?:,\d{2})?)",
    re.IGNORECASE,
)

_CURRENCY_CHARS_RE = re.compile(r"[€$£¥\s]")
_NON_NUMERIC_RE = re.compile(r"[^\d.,-]")
_NON_DECIMAL_RE = re.compile(r"[^\d.]")

UNIT_SYNONYMS = {
    "g": "gram",
    "gr": "gram",
    "gram": "gram",
    "grams": "gram",
    "grama": "gram",
    "kg": "kg",
    "kilo": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "oz": "ounce",
    "ounce": "ounce",
    "ounces": "ounce",
    "unca": "ounce",
    "unce": "ounce",
    "unca troy": "ounce",
}

# Regular and discounted prices closer than this are the same price
SAME_PRICE_TOLERANCE = Decimal("0.01")

PriceInput = Union[str, int, float, Decimal, None]


class PriceNormalizer:
    """Price text interpretation helpers."""

    @staticmethod
    def parse_price(raw: PriceInput) -> Optional[Decimal]:
        """Parse a scraped price string into a positive Decimal.

        The separator that appears last is the decimal point, unless it is
        repeated with no other separator, in which case only the final group
        is decimal. A lone separator is decimal except for a three-digit
        group after a single dot with a leading group longer than three digits.

        Handles:
        - "146,50 €" -> 146.50
        - "1.234,56 €" -> 1234.56
        - "1,234.56 €" -> 1234.56
        - "128.104.70" -> 128104.70

        Args:
            raw: Raw price text (numbers are accepted as-is)

        Returns:
            Decimal price, or None if unparseable or not positive
        """
        if raw is None or isinstance(raw, bool):
            return None

        if isinstance(raw, (int, float, Decimal)):
            try:
                value = Decimal(str(raw))
            except InvalidOperation:
                return None
            return value if value.is_finite() and value > 0 else None

        cleaned = _CURRENCY_CHARS_RE.sub("", raw)
        cleaned = _NON_NUMERIC_RE.sub("", cleaned)
        if not cleaned:
            return None

        last_dot = cleaned.rfind(".")
        last_comma = cleaned.rfind(",")
        dot_count = cleaned.count(".")
        comma_count = cleaned.count(",")

        if last_dot > last_comma:
            if comma_count == 0 and dot_count == 1:
                cleaned = _resolve_single_separator(cleaned, ".")
            elif comma_count == 0:
                # 128.104.70: dots group thousands, final group is decimal
                head, _, tail = cleaned.rpartition(".")
                cleaned = head.replace(".", "") + "." + tail
            else:
                # 128,104.70
                cleaned = cleaned.replace(",", "")
        elif last_comma > last_dot:
            if dot_count == 0 and comma_count == 1:
                cleaned = _resolve_single_separator(cleaned, ",")
            elif dot_count == 0:
                # 128,104,70
                head, _, tail = cleaned.rpartition(",")
                cleaned = head.replace(",", "") + "." + tail
            else:
                # 128.104,70
                cleaned = cleaned.replace(".", "").replace(",", ".")

        cleaned = _NON_DECIMAL_RE.sub("", cleaned)
        head, sep, tail = cleaned.rpartition(".")
        if sep and "." in head:
            cleaned = head.replace(".", "") + "." + tail

        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            return None

        if not value.is_finite() or value <= 0:
            return None
        return value

    @staticmethod
    def normalize_unit(raw: Optional[str]) -> str:
        """Map a unit synonym to 'gram', 'kg' or 'ounce'.

        Unknown units are returned lower-cased and trimmed.
        """
        if not raw:
            return ""
        normalized = " ".join(str(raw).lower().split())
        return UNIT_SYNONYMS.get(normalized, normalized)

    @staticmethod
    def extract_price_from_text(text: Optional[str]) -> Optional[Decimal]:
        """Find the first currency-marked price in free text.

        Args:
            text: Text containing price information

        Returns:
            Parsed price, or None if no pattern matches
        """
        if not text:
            return None

        for pattern in PRICE_TEXT_PATTERNS:
            match = pattern.search(text)
            if match:
                price = PriceNormalizer.parse_price(match.group(1))
                if price is not None:
                    return price
        return None

    @staticmethod
    def find_all_prices(text: Optional[str], pattern: Pattern[str] = EURO_PRICE_RE) -> List[Decimal]:
        """Parse every match of a price pattern, in document order.

        The pattern's first group must capture the number.
        """
        if not text:
            return []

        prices = []
        for match in pattern.finditer(text):
            price = PriceNormalizer.parse_price(match.group(1))
            if price is not None:
                prices.append(price)
        return prices


def _resolve_single_separator(cleaned: str, separator: str) -> str:
    """Decide whether a lone separator is decimal or thousands grouping."""
    head, _, tail = cleaned.partition(separator)
    if separator == "." and len(tail) == 3 and len(head) > 3:
        return head + tail
    return head + "." + tail


@dataclass(frozen=True)
class TieredPrice:
    """Resolved regular/discounted/current price triple."""

    regular: Optional[Decimal] = None
    discounted: Optional[Decimal] = None
    current: Optional[Decimal] = None

    @property
    def price(self) -> Optional[Decimal]:
        """Effective price: discounted, then current, then regular."""
        return self.discounted or self.current or self.regular


def resolve_tiered_price(
    regular: Optional[Decimal],
    discounted: Optional[Decimal],
    current: Optional[Decimal],
) -> TieredPrice:
    """Reconcile up to three scraped price tiers for one item.

    - A current price below the regular price is the discounted price.
    - A lone regular price is also the current price.
    - A discounted price equal to (or above) the regular price is no
      discount, so the regular price is dropped.

    Args:
        regular: Struck-through or "old" price
        discounted: Sale price
        current: Price not struck through

    Returns:
        TieredPrice; its price property is the effective price
    """
    regular = regular if regular and regular > 0 else None
    discounted = discounted if discounted and discounted > 0 else None
    current = current if current and current > 0 else None

    if regular and current and not discounted and current < regular:
        discounted = current

    if regular and not current and not discounted:
        current = regular

    if regular and discounted:
        if abs(regular - discounted) < SAME_PRICE_TOLERANCE or discounted > regular:
            regular = None

    return TieredPrice(regular=regular, discounted=discounted, current=current)


def _round_price(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return value.quantize(Decimal("0.01"))


def dedupe_entries(entries: Iterable) -> List:
    """Drop duplicate and unpriced entries, keeping first occurrences.

    Entries are duplicates when unit and rounded price, sell and buy
    prices all match. Running this twice gives the same result as once.
    """
    unique = []
    seen = set()

    for entry in entries:
        if not any(
            value is not None and value > 0
            for value in (entry.price, entry.sell_price, entry.buy_price)
        ):
            continue

        key = (
            entry.unit,
            _round_price(entry.price),
            _round_price(entry.sell_price),
            _round_price(entry.buy_price),
        )
        if key in seen:
            continue
        seen.add(key)
        unique.append(entry)

    return unique
