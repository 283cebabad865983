"""Generic extraction strategies shared by the vendor extractors.

Vendor adapters try their own DOM selectors first and fall back to the
scans here: table rows, list items, and finally every currency-formatted
number in the document.
"""

import re
from decimal import Decimal
from typing import List, Optional, Pattern, Sequence, Tuple

import structlog
from bs4 import BeautifulSoup, Tag

from goldprices.scrapers.base import GRAM, PriceEntry
from goldprices.scrapers.utils.html import (
    absolute_url,
    data_price,
    html_of,
    is_struck_through,
    select_first,
    strip_struck_through,
    text_of,
)
from goldprices.scrapers.utils.normalizer import (
    AMERICAN_PRICE_RE,
    BASE_PRICE_RE,
    CURRENCY_PRICE_RE,
    EURO_CELL_PRICE_RE,
    EURO_PRICE_RE,
    GROUPED_NUMBER,
    PriceNormalizer,
    TieredPrice,
    resolve_tiered_price,
)
from goldprices.scrapers.utils.weights import WeightMatch, detect_weight, extract_weight


logger = structlog.get_logger(__name__)

# Sell labels are checked before buy labels
SELL_KEYWORDS = ("prodaja", "prodajna", "sell", "cijena")
BUY_KEYWORDS = ("otkup", "kupnja", "buy")

BUY_LABEL_RE = re.compile(rf"kupnja[:\s]+({GROUPED_NUMBER})", re.IGNORECASE)
SELL_LABEL_RE = re.compile(rf"(?:prodaja|prodajna)[:\s]+({GROUPED_NUMBER})", re.IGNORECASE)

# A row or block only describes a bar when it mentions a weight
WEIGHT_HINT_RE = re.compile(r"\d+\s*(?:g|gram|kg|oz|ounce|unca)", re.IGNORECASE)

_LOOSE_NUMBER_RE = re.compile(r"(\d{1,3}(?:\.\d{3})*(?:,\d{2})?)")

REGULAR_SELECTORS = "del, .old-price, .regular-price"
DISCOUNTED_SELECTORS = "ins, .sale-price, .special-price"
CURRENT_SELECTORS = ".price, .amount, [class*='price']"

LIST_ITEM_SELECTORS = "li.item, .product-list-item, .category-products .item, .product-item"
LIST_PRICE_SELECTORS = (".price", ".price-box .price", "[class*='price']", "[data-price-amount]", ".product-price")
LIST_TITLE_SELECTORS = ("a.product-item-link", ".product-name a", "h2 a", "h3 a", "a")

# Plausible range for a listed gold bar price in euros
DOCUMENT_MIN_PRICE = Decimal("100")
DOCUMENT_MAX_PRICE = Decimal("100000")
DOCUMENT_PRICE_LIMIT = 20


def classify_label(text: str) -> Optional[str]:
    """Return 'sell', 'buy' or None for a price label."""
    lowered = text.lower()
    if any(keyword in lowered for keyword in SELL_KEYWORDS):
        return "sell"
    if any(keyword in lowered for keyword in BUY_KEYWORDS):
        return "buy"
    return None


def labelled_prices(text: str) -> Tuple[Optional[Decimal], Optional[Decimal]]:
    """Find "kupnja: ..." and "prodaja: ..." prices in card text.

    Returns:
        (buy_price, sell_price)
    """
    buy_match = BUY_LABEL_RE.search(text)
    sell_match = SELL_LABEL_RE.search(text)
    buy = PriceNormalizer.parse_price(buy_match.group(1)) if buy_match else None
    sell = PriceNormalizer.parse_price(sell_match.group(1)) if sell_match else None
    return buy, sell


def price_from_text(text: str) -> Optional[Decimal]:
    """First currency-marked price in the text, else the whole text parsed."""
    return PriceNormalizer.extract_price_from_text(text) or PriceNormalizer.parse_price(text)


def visible_price(element: Tag) -> Optional[Decimal]:
    """Price of an element ignoring anything struck through inside it."""
    fragment = BeautifulSoup(strip_struck_through(html_of(element)), "html.parser")
    text = text_of(fragment)
    if not text:
        return None
    return price_from_text(text)


def card_price(card: Tag, selectors: Sequence[str]) -> Optional[Decimal]:
    """Find the listed price of a product card.

    Tries, in order: visible text of each price selector, its data
    attributes, its inner HTML, then the card's own text and HTML.
    Struck-through elements are skipped.
    """
    for selector in selectors:
        element = next((el for el in card.select(selector) if not is_struck_through(el)), None)
        if element is None:
            continue

        text = text_of(element)
        if len(text) >= 3 and any(char.isdigit() for char in text):
            price = visible_price(element)
            if price is not None:
                return price

        attr_price = PriceNormalizer.parse_price(data_price(element))
        if attr_price is not None:
            return attr_price

        match = CURRENCY_PRICE_RE.search(html_of(element))
        if match:
            price = PriceNormalizer.parse_price(match.group(1))
            if price is not None:
                return price

    price = PriceNormalizer.extract_price_from_text(text_of(card))
    if price is not None:
        return price

    match = CURRENCY_PRICE_RE.search(html_of(card))
    if match:
        return PriceNormalizer.parse_price(match.group(1))
    return None


def title_and_link(
    card: Tag,
    link_selectors: Sequence[str],
    title_selectors: Sequence[str],
    base_url: str,
) -> Tuple[Optional[str], Optional[str]]:
    """Product title and absolute link of a card.

    The heading wins over the link text: WooCommerce links wrap the
    whole card, price included.
    """
    link = select_first(card, link_selectors)
    title = text_of(select_first(card, title_selectors)) or text_of(link)
    href = link.get("href") if link is not None else None
    return title or None, absolute_url(href, base_url)


def cell_price_tiers(cell: Optional[Tag], loose: bool = True) -> TieredPrice:
    """Read regular, discounted and current prices from one element.

    Regular prices come from struck-through markup, discounted prices
    from <ins>/sale markup, and the current price from price elements
    outside <del>. When tiers are still missing the inner HTML is scanned:
    a "unit price" label gives the current price, several euro amounts
    give regular (highest) and discounted (lowest).

    Args:
        cell: Table cell or price container
        loose: Fall back to any bare number in the text

    Returns:
        Unresolved TieredPrice; pass it through resolve_tiered_price
    """
    if cell is None:
        return TieredPrice()

    regular = discounted = current = None

    regular_el = cell.select_one(REGULAR_SELECTORS)
    if regular_el is not None:
        regular = price_from_text(text_of(regular_el))

    discounted_el = cell.select_one(DISCOUNTED_SELECTORS)
    if discounted_el is not None:
        discounted = price_from_text(text_of(discounted_el))

    for element in cell.select(CURRENT_SELECTORS):
        if is_struck_through(element):
            continue
        current = visible_price(element)
        if current is not None:
            break

    if regular is None or discounted is None or current is None:
        cell_html = html_of(cell)

        base_match = BASE_PRICE_RE.search(cell_html)
        if base_match and current is None:
            current = PriceNormalizer.parse_price(base_match.group(1))

        amounts = PriceNormalizer.find_all_prices(cell_html, EURO_CELL_PRICE_RE)
        if len(amounts) > 1:
            highest, lowest = max(amounts), min(amounts)
            if regular is None:
                regular = highest
            if discounted is None and lowest < highest:
                discounted = lowest
        elif len(amounts) == 1 and current is None:
            current = amounts[0]
        elif not amounts and current is None:
            match = AMERICAN_PRICE_RE.search(cell_html)
            if match:
                current = PriceNormalizer.parse_price(match.group(1))

    if loose and regular is None and discounted is None and current is None:
        cell_text = text_of(cell)
        match = BASE_PRICE_RE.search(cell_text) or _LOOSE_NUMBER_RE.search(cell_text)
        if match:
            current = PriceNormalizer.parse_price(match.group(1))

    return TieredPrice(regular=regular, discounted=discounted, current=current)


def build_entry(
    weight: Optional[WeightMatch],
    tier: TieredPrice,
    sell: Optional[Decimal] = None,
    buy: Optional[Decimal] = None,
    title: Optional[str] = None,
    link: Optional[str] = None,
) -> Optional[PriceEntry]:
    """Assemble a PriceEntry from resolved tiers and labelled prices.

    Returns None when nothing positive was found.
    """
    price = tier.price or sell or buy
    if price is None and sell is None and buy is None:
        return None

    return PriceEntry(
        unit=weight.unit if weight else GRAM,
        price=price,
        regular_price=tier.regular,
        discounted_price=tier.discounted,
        buy_price=buy,
        sell_price=sell or tier.price,
        product_title=title,
        product_link=link,
        weight=weight.amount if weight else None,
    )


def scan_table_rows(soup: BeautifulSoup, base_url: str = "") -> List[PriceEntry]:
    """Scan every table row that mentions a weight.

    Each cell's price is classified as sell or buy by its label;
    unlabeled prices count as sell prices.
    """
    entries: List[PriceEntry] = []

    for row in soup.select("tr"):
        cells = row.find_all(["td", "th"])
        if row.find("th") is not None and len(cells) < 3:
            continue

        row_text = text_of(row)
        weight = extract_weight(row_text)
        if weight is None and not WEIGHT_HINT_RE.search(row_text):
            continue

        regular = discounted = current = sell = buy = None
        for cell in cells:
            cell_tier = cell_price_tiers(cell, loose=False)
            value = cell_tier.discounted or cell_tier.current
            if classify_label(text_of(cell)) == "buy":
                buy = buy or value
                continue

            regular = regular or cell_tier.regular
            discounted = discounted or cell_tier.discounted
            current = current or cell_tier.current
            sell = sell or value

        try:
            entry = build_entry(
                weight,
                resolve_tiered_price(regular, discounted, current),
                sell=sell,
                buy=buy,
            )
        except ValueError as e:
            logger.warning("failed_to_parse_table_row", row=row_text[:80], error=str(e))
            continue
        if entry:
            entries.append(entry)

    return entries


def scan_list_items(
    soup: BeautifulSoup,
    base_url: str = "",
    selectors: str = LIST_ITEM_SELECTORS,
) -> List[PriceEntry]:
    """Scan generic product list/grid items for a price and weight."""
    entries: List[PriceEntry] = []

    for item in soup.select(selectors):
        price = card_price(item, LIST_PRICE_SELECTORS)
        if price is None:
            continue

        title, link = title_and_link(item, LIST_TITLE_SELECTORS, ("h2", "h3", ".product-name"), base_url)
        weight = detect_weight(title, text_of(item))
        try:
            entries.append(
                PriceEntry(
                    unit=weight.unit if weight else GRAM,
                    price=price,
                    sell_price=price,
                    product_title=title,
                    product_link=link,
                    weight=weight.amount if weight else None,
                )
            )
        except ValueError as e:
            logger.warning("failed_to_parse_list_item", title=title, error=str(e))

    return entries


def scan_document(
    soup: BeautifulSoup,
    pattern: Pattern[str] = EURO_PRICE_RE,
    minimum: Decimal = DOCUMENT_MIN_PRICE,
    maximum: Decimal = DOCUMENT_MAX_PRICE,
    limit: int = DOCUMENT_PRICE_LIMIT,
) -> List[PriceEntry]:
    """Last resort: one gram entry per distinct price in the page text.

    Prices outside (minimum, maximum) are ignored; the rest are sorted
    highest first and capped at limit.
    """
    root = soup.body or soup
    amounts = PriceNormalizer.find_all_prices(text_of(root), pattern)
    distinct = sorted({amount for amount in amounts if minimum < amount < maximum}, reverse=True)

    return [PriceEntry(unit=GRAM, price=amount, sell_price=amount) for amount in distinct[:limit]]
