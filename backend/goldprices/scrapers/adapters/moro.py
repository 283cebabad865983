"""Moro (moro.hr) extractor.

WooCommerce category page. Structure:
  ul.products > li.product
    - h2.woocommerce-loop-product__title (title)
    - a.woocommerce-LoopProduct-link (link)
    - span.price > span.woocommerce-Price-amount > bdi ("1.234,56 €")
"""

from decimal import Decimal
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from goldprices.scrapers.base import GRAM, BaseExtractor, PriceEntry, Strategy
from goldprices.scrapers.strategies import (
    card_price,
    labelled_prices,
    scan_document,
    scan_list_items,
    title_and_link,
)
from goldprices.scrapers.utils.html import text_of
from goldprices.scrapers.utils.normalizer import CURRENCY_PRICE_RE
from goldprices.scrapers.utils.weights import detect_weight

CARD_SELECTORS = (
    "li.product, .product.type-product, .wc-block-grid__product, article.product, ul.products li"
)

PRICE_SELECTORS = (
    ".price ins .woocommerce-Price-amount",
    ".price .woocommerce-Price-amount",
    ".price bdi",
    ".price",
    ".woocommerce-Price-amount",
    ".amount",
    "[class*='price']",
    ".product-price",
)

LINK_SELECTORS = (
    "h2 a",
    "h3 a",
    ".woocommerce-loop-product__title a",
    ".wp-block-post-title a",
    "a.woocommerce-LoopProduct-link",
)
TITLE_SELECTORS = ("h2", "h3", ".woocommerce-loop-product__title", ".wp-block-post-title")


class MoroExtractor(BaseExtractor):
    """Moro gold bar category extractor."""

    vendor_slug = "moro"
    vendor_name = "Moro"

    @property
    def strategies(self) -> Sequence[Strategy]:
        return (self.parse_product_cards, self.parse_list_items, self.parse_document)

    def parse_product_cards(self, soup: BeautifulSoup) -> List[PriceEntry]:
        """WooCommerce product cards."""
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
        return scan_document(soup, pattern=CURRENCY_PRICE_RE, minimum=Decimal("100"))

    def _parse_card(self, card: Tag) -> Optional[PriceEntry]:
        listed = card_price(card, PRICE_SELECTORS)
        card_text = text_of(card)
        buy, sell = labelled_prices(card_text)

        price = sell or listed or buy
        if price is None:
            return None

        title, link = title_and_link(card, LINK_SELECTORS, TITLE_SELECTORS, self.base_url)
        weight = detect_weight(title, card_text)

        return PriceEntry(
            unit=weight.unit if weight else GRAM,
            price=sell or listed,
            buy_price=buy,
            sell_price=sell or listed,
            product_title=title,
            product_link=link,
            weight=weight.amount if weight else None,
        )
