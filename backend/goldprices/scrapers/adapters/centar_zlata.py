"""Centar Zlata (centarzlata.com) extractor.

WooCommerce category page with tiered pricing. Structure:
  ul.products > li.product
    - h2.woocommerce-loop-product__title (title)
    - a.woocommerce-LoopProduct-link (link)
    - span.price
        del > span.woocommerce-Price-amount (regular price)
        ins > span.woocommerce-Price-amount (discounted price)

Listing prices of small bars lag behind the product pages, so 1 g
products are revisited individually after the listing is parsed.
"""

import asyncio
from dataclasses import replace
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from goldprices.config import settings
from goldprices.core.exceptions import FetchError
from goldprices.scrapers.base import GRAM, BaseExtractor, PriceEntry, ProgressCallback, Strategy
from goldprices.scrapers.strategies import (
    build_entry,
    price_from_text,
    scan_document,
    title_and_link,
    visible_price,
)
from goldprices.scrapers.utils.html import (
    data_price,
    html_of,
    is_struck_through,
    select_first,
    strip_struck_through,
    text_of,
)
from goldprices.scrapers.utils.normalizer import (
    BASE_PRICE_RE,
    EURO_PRICE_RE,
    PriceNormalizer,
    TieredPrice,
    resolve_tiered_price,
)
from goldprices.scrapers.utils.weights import detect_weight

if TYPE_CHECKING:
    from goldprices.scrapers.fetcher import Fetcher

CARD_SELECTORS = "li.product, .product.type-product, .wc-block-grid__product, ul.products li.product"

LINK_SELECTORS = (
    "h2 a",
    "h3 a",
    ".woocommerce-loop-product__title a",
    ".wp-block-post-title a",
    "a.woocommerce-LoopProduct-link",
    ".product-title a",
)
TITLE_SELECTORS = (
    "h2",
    "h3",
    ".woocommerce-loop-product__title",
    ".wp-block-post-title",
    ".product-title",
)

AMOUNT_SELECTORS = ".woocommerce-Price-amount, bdi, .amount"

# Used when a card has no .price container
FALLBACK_PRICE_SELECTORS = (
    ".sale-price",
    ".current-price",
    ".price-final",
    ".woocommerce-Price-amount",
    ".amount",
    ".fusion-price-rating .price",
)

DETAIL_CONTAINER_SELECTORS = (".summary .price", ".price", ".woocommerce-Price-amount", ".product-price")
DETAIL_SUMMARY_SELECTORS = (".summary", ".product-info", ".product-details", ".entry-summary")

# A 1 g bar never costs this much; larger summary amounts are other products
DETAIL_SUMMARY_MAX_PRICE = Decimal("500")
MAX_LISTING_PRICE = Decimal("1000000")
# Bar weight whose product pages are revisited
ONE_GRAM = Decimal("1")


def _euro_price(element: Optional[Tag]) -> Optional[Decimal]:
    """Euro-formatted amount in an element's text, else its whole text."""
    if element is None:
        return None
    text = text_of(element)
    match = EURO_PRICE_RE.search(text)
    if match:
        return PriceNormalizer.parse_price(match.group(1))
    return PriceNormalizer.parse_price(text)


def _first_unstruck(root: Tag, selectors: str) -> Optional[Tag]:
    return next((el for el in root.select(selectors) if not is_struck_through(el)), None)


def _first_data_price(root: Tag) -> Optional[Decimal]:
    for selector in ("[data-price-amount]", "[data-price]", "[data-price-final]"):
        price = PriceNormalizer.parse_price(data_price(root.select_one(selector)))
        if price is not None:
            return price
    return None


class CentarZlataExtractor(BaseExtractor):
    """Centar Zlata gold bar category extractor with product page revisits."""

    vendor_slug = "centar-zlata"
    vendor_name = "Centar Zlata"

    def __init__(
        self,
        base_url: str = "",
        detail_page_limit: Optional[int] = None,
        detail_page_delay: Optional[float] = None,
    ):
        super().__init__(base_url=base_url)
        self.detail_page_limit = (
            settings.DETAIL_PAGE_LIMIT if detail_page_limit is None else detail_page_limit
        )
        self.detail_page_delay = (
            settings.DETAIL_PAGE_DELAY_SECONDS if detail_page_delay is None else detail_page_delay
        )

    @property
    def strategies(self) -> Sequence[Strategy]:
        return (self.parse_product_cards, self.parse_document)

    def parse_product_cards(self, soup: BeautifulSoup) -> List[PriceEntry]:
        """WooCommerce product cards with del/ins price tiers."""
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

    def parse_document(self, soup: BeautifulSoup) -> List[PriceEntry]:
        return scan_document(soup)

    def _parse_card(self, card: Tag) -> Optional[PriceEntry]:
        container = card.select_one(".price")
        tiers = self._container_tiers(container, card) if container is not None else TieredPrice()

        if not (tiers.regular or tiers.discounted or tiers.current):
            tiers = TieredPrice(current=self._fallback_price(card, container))

        resolved = resolve_tiered_price(tiers.regular, tiers.discounted, tiers.current)
        price = resolved.price
        if price is None or price > MAX_LISTING_PRICE:
            return None

        title, link = title_and_link(card, LINK_SELECTORS, TITLE_SELECTORS, self.base_url)
        weight = detect_weight(title, text_of(card))
        return build_entry(weight, resolved, title=title, link=link)

    def _container_tiers(self, container: Tag, card: Tag) -> TieredPrice:
        regular = _euro_price(container.select_one("del"))
        discounted = _euro_price(container.select_one("ins"))
        current = discounted

        if current is None:
            amount = _first_unstruck(container, AMOUNT_SELECTORS)
            current = _euro_price(amount) if amount is not None else visible_price(container)

        # Several amounts without <ins>: the lowest one below regular is the sale price
        if regular and not discounted:
            lower = [p for p in PriceNormalizer.find_all_prices(html_of(container)) if p < regular]
            if lower:
                discounted = current = min(lower)

        if not regular or not discounted:
            regular, discounted, current = self._tiers_from_price_elements(card, regular, discounted, current)

        return TieredPrice(regular=regular, discounted=discounted, current=current)

    @staticmethod
    def _tiers_from_price_elements(card: Tag, regular, discounted, current):
        """Split every price element of the card into struck and unstruck amounts."""
        struck, unstruck = [], []
        for element in card.select(".price, .woocommerce-Price-amount, [class*='price']"):
            match = EURO_PRICE_RE.search(text_of(element))
            value = PriceNormalizer.parse_price(match.group(1)) if match else None
            if value is None:
                continue
            (struck if is_struck_through(element) else unstruck).append(value)

        if len(struck) + len(unstruck) < 2:
            return regular, discounted, current

        if struck and unstruck:
            high, low = max(struck), min(unstruck)
        else:
            values = struck or unstruck
            high, low = max(values), min(values)

        if low < high:
            regular = regular or high
            if not discounted:
                discounted = current = low
        return regular, discounted, current

    @staticmethod
    def _fallback_price(card: Tag, container: Optional[Tag]) -> Optional[Decimal]:
        """Current price for cards without a usable .price container."""
        for selector in FALLBACK_PRICE_SELECTORS:
            element = _first_unstruck(card, selector)
            if element is None:
                continue
            text = text_of(element)
            if len(text) >= 3 and any(char.isdigit() for char in text):
                price = price_from_text(text)
                if price is not None:
                    return price

        if container is not None:
            price = PriceNormalizer.parse_price(data_price(container)) or _first_data_price(container)
            if price is not None:
                return price
        price = _first_data_price(card)
        if price is not None:
            return price

        card_text = text_of(card)
        match = BASE_PRICE_RE.search(card_text)
        if match:
            return PriceNormalizer.parse_price(match.group(1))

        match = EURO_PRICE_RE.search(strip_struck_through(html_of(card))) or EURO_PRICE_RE.search(card_text)
        if match:
            return PriceNormalizer.parse_price(match.group(1))
        return None

    def parse_product_page(self, html: str) -> Optional[TieredPrice]:
        """Read the price tiers from a single product page.

        Returns:
            Resolved tiers, or None if the page shows no price
        """
        soup = BeautifulSoup(html, "html.parser")
        regular = discounted = current = None

        container = select_first(soup, DETAIL_CONTAINER_SELECTORS)
        if container is not None:
            regular = _euro_price(container.select_one("del"))
            discounted = _euro_price(container.select_one("ins"))
            current = discounted

            if current is None:
                amount = _first_unstruck(container, AMOUNT_SELECTORS)
                if amount is not None and amount is not container:
                    current = _euro_price(amount)
            if current is None:
                current = visible_price(container)
            if current is None:
                current = PriceNormalizer.parse_price(data_price(container)) or _first_data_price(soup)

        if current is None and discounted is None:
            summary = select_first(soup, DETAIL_SUMMARY_SELECTORS)
            if summary is not None:
                match = EURO_PRICE_RE.search(strip_struck_through(html_of(summary)))
                price = PriceNormalizer.parse_price(match.group(1)) if match else None
                if price is not None and price < DETAIL_SUMMARY_MAX_PRICE:
                    current = price

        if not (regular or discounted or current):
            return None
        return resolve_tiered_price(regular, discounted, current)

    def _detail_targets(self, entries: List[PriceEntry]) -> List[int]:
        targets = [
            index
            for index, entry in enumerate(entries)
            if entry.unit == GRAM and entry.product_link and entry.weight == ONE_GRAM
        ]
        return targets[: self.detail_page_limit]

    @staticmethod
    def apply_product_page(entry: PriceEntry, page: TieredPrice) -> PriceEntry:
        """Overwrite listing prices with the product page's prices.

        The page's discount replaces the listing's; a page without one
        clears it. The listing's regular price is kept unless the page
        shows its own.
        """
        regular = page.regular or entry.regular_price
        discounted = page.discounted
        if regular and discounted and not discounted < regular:
            regular = None

        price = page.discounted or page.current or entry.price
        return replace(
            entry,
            price=price,
            sell_price=price,
            regular_price=regular,
            discounted_price=discounted,
        )

    async def refine(
        self,
        entries: List[PriceEntry],
        fetcher: "Fetcher",
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[PriceEntry]:
        """Revisit 1 g product pages for their current prices.

        A failed revisit keeps the listing price for that product.
        """
        targets = self._detail_targets(entries)
        if not targets:
            return entries

        refined = list(entries)
        for position, index in enumerate(targets):
            entry = refined[index]
            try:
                html = await fetcher.fetch(entry.product_link, vendor=self.vendor_name, attempts=1)
                page = self.parse_product_page(html)
                if page is not None:
                    refined[index] = self.apply_product_page(entry, page)
                    self.logger.debug("product_page_refined", link=entry.product_link, price=str(refined[index].price))
            except FetchError as e:
                self.logger.warning("product_page_failed", link=entry.product_link, error=str(e))
            except Exception as e:
                self.logger.warning(
                    "product_page_failed", link=entry.product_link, error=str(e) or e.__class__.__name__, exc_info=True
                )

            if on_progress is not None:
                on_progress(int((position + 1) * 100 / len(targets)))
            if position < len(targets) - 1:
                await asyncio.sleep(self.detail_page_delay)

        return refined
