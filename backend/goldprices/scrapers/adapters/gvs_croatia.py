"""GVS Croatia (zlatosrebro.hr) extractor.

Magento storefront. Structure:
  li.item.product-item > div.product-item-info
    - a.product-item-link (title, link)
    - div.price-box span.price (listed price, also data-price-amount)
Some cards label buy-back and sale prices ("Kupnja: ...", "Prodaja: ...").
"""

import re
from decimal import Decimal
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from goldprices.scrapers.base import GRAM, KG, BaseExtractor, PriceEntry, Strategy
from goldprices.scrapers.strategies import (
    card_price,
    labelled_prices,
    scan_document,
    scan_list_items,
    title_and_link,
)
from goldprices.scrapers.utils.html import text_of
from goldprices.scrapers.utils.weights import WeightMatch, extract_weight

CARD_SELECTORS = (
    ".product-item, .products-grid .product, .product-item-info, [data-product-id], "
    ".item.product-item, li.item, .products-grid .item"
)

PRICE_SELECTORS = (
    ".price",
    ".price-box .price",
    ".price-box .price-final",
    ".regular-price",
    ".special-price",
    "[class*='price']",
    "[id*='product-price']",
    "[data-price-amount]",
    ".product-price",
    ".price-wrapper",
)

LINK_SELECTORS = ("a.product-item-link", ".product-name a", "h2 a", "h3 a")
TITLE_SELECTORS = ("h2", "h3", ".product-name")

# Layered-navigation filter links carry the weight in grams
_FILTER_WEIGHT_RE = re.compile(r"(?:unze_gewicht|gewicht)=(\d+)")


class GvsCroatiaExtractor(BaseExtractor):
    """GVS Croatia gold bar price list extractor."""

    vendor_slug = "gvs-croatia"
    vendor_name = "GVS Croatia"

    @property
    def strategies(self) -> Sequence[Strategy]:
        return (self.parse_product_cards, self.parse_list_items, self.parse_document)

    def parse_product_cards(self, soup: BeautifulSoup) -> List[PriceEntry]:
        """Magento product cards."""
        entries = []
        for card in soup.select(CARD_SELECTORS):
            try:
                entry = self._parse_card(card)
            except Exception as e:
                self.logger.warning("failed_to_parse_product_card", error=str(e))
                continue
            if entry:
                entries.append(entry)
        return entries

    def parse_list_items(self, soup: BeautifulSoup) -> List[PriceEntry]:
        return scan_list_items(soup, self.base_url)

    def parse_document(self, soup: BeautifulSoup) -> List[PriceEntry]:
        return scan_document(soup)

    def _parse_card(self, card: Tag) -> Optional[PriceEntry]:
        listed = card_price(card, PRICE_SELECTORS)
        if listed is None:
            return None

        title, link = title_and_link(card, LINK_SELECTORS, TITLE_SELECTORS, self.base_url)
        card_text = text_of(card)
        weight = extract_weight(f"{title or ''} {card_text}") or self._filter_link_weight(card)

        buy, sell = labelled_prices(card_text)
        price = sell or listed

        return PriceEntry(
            unit=weight.unit if weight else GRAM,
            price=price,
            buy_price=buy,
            sell_price=price,
            product_title=title,
            product_link=link,
            weight=weight.amount if weight else None,
        )

    @staticmethod
    def _filter_link_weight(card: Tag) -> Optional[WeightMatch]:
        for anchor in card.select("a[href*='gewicht']"):
            match = _FILTER_WEIGHT_RE.search(anchor.get("href", ""))
            if not match:
                continue
            grams = Decimal(match.group(1))
            if grams >= 1000:
                return WeightMatch(unit=KG, amount=grams / 1000)
            return WeightMatch(unit=GRAM, amount=grams)
        return None
