"""Plemenit (plemenit.hr) extractor.

Price comparison page. Structure:
  table tr
    - td.prvakolona (product name with weight, optional link)
    - td.drugakolona (FIZIKA price)
    - td.trecakolona (GEOGRAFIJA price)
    - td.cetvrtakolona (MATEMATIKA price)
Price cells may show a struck-through regular price next to a sale price,
and sometimes a "od 1 kom." unit price.
"""

from decimal import Decimal
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from goldprices.scrapers.base import GRAM, BaseExtractor, PriceEntry, Strategy
from goldprices.scrapers.strategies import (
    WEIGHT_HINT_RE,
    build_entry,
    cell_price_tiers,
    scan_document,
    scan_table_rows,
)
from goldprices.scrapers.utils.html import absolute_url, text_of
from goldprices.scrapers.utils.normalizer import (
    PRICE_TEXT_PATTERNS,
    PriceNormalizer,
    TieredPrice,
    resolve_tiered_price,
)
from goldprices.scrapers.utils.weights import extract_weight

# FIZIKA first: it is the most commonly filled column
PRICE_COLUMNS = ("drugakolona", "trecakolona", "cetvrtakolona")

BLOCK_SELECTORS = ".product, .wp-block-columns, .wp-block-group, article"


def _merge_tiers(tiers: Sequence[TieredPrice]) -> TieredPrice:
    """First non-empty value per tier across columns."""
    return TieredPrice(
        regular=next((t.regular for t in tiers if t.regular), None),
        discounted=next((t.discounted for t in tiers if t.discounted), None),
        current=next((t.current for t in tiers if t.current), None),
    )


class PlemenitExtractor(BaseExtractor):
    """Plemenit comparison table extractor."""

    vendor_slug = "plemenit"
    vendor_name = "Plemenit"

    @property
    def strategies(self) -> Sequence[Strategy]:
        return (
            self.parse_comparison_table,
            self.parse_table_rows,
            self.parse_price_blocks,
            self.parse_document,
        )

    def parse_comparison_table(self, soup: BeautifulSoup) -> List[PriceEntry]:
        """Rows of the three-column comparison table."""
        entries = []
        for row in soup.select("table tr"):
            cells = row.find_all("td")
            if row.find("th") is not None or len(cells) < 2:
                continue
            try:
                entry = self._parse_comparison_row(row, cells)
            except Exception as e:
                self.logger.warning("failed_to_parse_table_row", error=str(e))
                continue
            if entry:
                entries.append(entry)
        return entries

    def parse_table_rows(self, soup: BeautifulSoup) -> List[PriceEntry]:
        return scan_table_rows(soup, self.base_url)

    def parse_price_blocks(self, soup: BeautifulSoup) -> List[PriceEntry]:
        """First price of each content block, for pages without tables."""
        entries = []
        for block in soup.select(BLOCK_SELECTORS):
            text = text_of(block)
            price = self._first_block_price(text)
            if price is None:
                continue
            weight = extract_weight(text)
            entries.append(
                PriceEntry(
                    unit=weight.unit if weight else GRAM,
                    price=price,
                    sell_price=price,
                    weight=weight.amount if weight else None,
                )
            )
        return entries

    def parse_document(self, soup: BeautifulSoup) -> List[PriceEntry]:
        # The unit price is the highest amount on the page
        return scan_document(soup, minimum=Decimal("10"), limit=1)

    def _parse_comparison_row(self, row: Tag, cells: List[Tag]) -> Optional[PriceEntry]:
        product_cell = row.select_one("td.prvakolona")
        if product_cell is None:
            return None

        anchor = product_cell.find("a")
        title = text_of(anchor) or text_of(product_cell)
        link = absolute_url(anchor.get("href") if anchor else None, self.base_url)

        name_text = f"{title} {text_of(product_cell)}"
        weight = extract_weight(name_text)
        if weight is None and not WEIGHT_HINT_RE.search(name_text):
            return None

        tiers = _merge_tiers([
            cell_price_tiers(row.select_one(f"td.{column}")) for column in PRICE_COLUMNS
        ])
        if not (tiers.regular or tiers.discounted or tiers.current):
            tiers = _merge_tiers([
                cell_price_tiers(cell) for cell in cells if cell is not product_cell
            ])

        resolved = resolve_tiered_price(tiers.regular, tiers.discounted, tiers.current)
        if resolved.price is None:
            return None
        return build_entry(weight, resolved, title=title or None, link=link)

    @staticmethod
    def _first_block_price(text: str) -> Optional[Decimal]:
        for pattern in PRICE_TEXT_PATTERNS:
            matches = list(pattern.finditer(text))
            if not matches:
                continue
            for match in matches:
                price = PriceNormalizer.parse_price(match.group(1))
                if price is not None:
                    return price
            return None
        return None
