"""Elementum extractor.

Price pages either embed chart data as a JSON object in a <script>
("data = {"prices": [{"unit": "g", "price": ..., "buyPrice": ...}]}")
or show price rows in a table, with kuna or euro amounts. A row with two
amounts lists the buy-back price first and the sale price second.
"""

import json
import re
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from bs4 import BeautifulSoup

from goldprices.scrapers.base import GRAM, KG, OUNCE, BaseExtractor, PriceEntry, Strategy
from goldprices.scrapers.strategies import scan_document
from goldprices.scrapers.utils.html import text_of
from goldprices.scrapers.utils.normalizer import GROUPED_NUMBER, PriceNormalizer

_DATA_ASSIGNMENT_RE = re.compile(r"data\s*[:=]\s*(?=\{)")

ROW_PRICE_RE = re.compile(rf"({GROUPED_NUMBER})\s*(?:kn|hrk|eur|€)", re.IGNORECASE)
ROW_UNIT_RE = re.compile(r"\d+(?:[.,]\d+)?\s*(gram|gr|g|ounce|oz|kilogram|kilo|kg|unca)", re.IGNORECASE)

CONTAINER_SELECTORS = "table, .price-table, .prices, [class*='price']"
ROW_SELECTORS = "tr, .price-row, .item"


def _row_unit(text: str) -> str:
    match = ROW_UNIT_RE.search(text)
    if match:
        return PriceNormalizer.normalize_unit(match.group(1))

    lowered = text.lower()
    if "unca" in lowered or "ounce" in lowered:
        return OUNCE
    if "kilogram" in lowered or "kg" in lowered:
        return KG
    return GRAM


class ElementumExtractor(BaseExtractor):
    """Elementum price page extractor."""

    vendor_slug = "elementum"
    vendor_name = "Elementum"

    @property
    def strategies(self) -> Sequence[Strategy]:
        return (self.parse_embedded_json, self.parse_price_rows, self.parse_document)

    def parse_embedded_json(self, soup: BeautifulSoup) -> List[PriceEntry]:
        """Price lists assigned to a "data" object inside scripts."""
        entries = []
        decoder = json.JSONDecoder()

        for script in soup.find_all("script"):
            content = script.string or script.get_text()
            for match in _DATA_ASSIGNMENT_RE.finditer(content):
                try:
                    payload, _ = decoder.raw_decode(content, match.end())
                except json.JSONDecodeError:
                    continue
                if isinstance(payload, dict) and isinstance(payload.get("prices"), list):
                    entries.extend(self._entries_from_json(payload["prices"]))

        return entries

    def parse_price_rows(self, soup: BeautifulSoup) -> List[PriceEntry]:
        """Rows with kuna or euro amounts."""
        entries = []
        for container in soup.select(CONTAINER_SELECTORS):
            for row in container.select(ROW_SELECTORS):
                text = text_of(row)
                amounts = [
                    price
                    for price in (PriceNormalizer.parse_price(m.group(1)) for m in ROW_PRICE_RE.finditer(text))
                    if price is not None
                ]
                if not amounts:
                    continue

                if len(amounts) >= 2:
                    fields = {"buy_price": amounts[0], "sell_price": amounts[1]}
                else:
                    fields = {"price": amounts[0]}
                entries.append(PriceEntry(unit=_row_unit(text), **fields))
        return entries

    def parse_document(self, soup: BeautifulSoup) -> List[PriceEntry]:
        return scan_document(soup)

    def _entries_from_json(self, items: List[Any]) -> List[PriceEntry]:
        entries = []
        for item in items:
            if not isinstance(item, dict) or not item.get("price") or not item.get("unit"):
                continue
            try:
                entries.append(
                    PriceEntry(
                        unit=PriceNormalizer.normalize_unit(str(item["unit"])),
                        price=self._json_price(item.get("price")),
                        buy_price=self._json_price(item.get("buyPrice")),
                        sell_price=self._json_price(item.get("sellPrice")),
                    )
                )
            except ValueError as e:
                self.logger.warning("failed_to_parse_json_price", item=item, error=str(e))
        return entries

    @staticmethod
    def _json_price(value: Any) -> Optional[Decimal]:
        if value is None:
            return None
        if isinstance(value, (int, float)):
            return PriceNormalizer.parse_price(value)
        return PriceNormalizer.parse_price(str(value))
