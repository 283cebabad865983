"""BeautifulSoup helpers shared by the vendor extractors."""

import re
from typing import Iterable, Optional
from urllib.parse import urljoin

from bs4 import Tag

DATA_PRICE_ATTRS = ("data-price-amount", "data-price", "data-price-final")

_DEL_BLOCK_RE = re.compile(r"<del[^>]*>.*?</del>", re.IGNORECASE | re.DOTALL)


def text_of(element: Optional[Tag]) -> str:
    """Visible text of an element with whitespace collapsed."""
    if element is None:
        return ""
    return " ".join(element.get_text(" ", strip=True).split())


def html_of(element: Optional[Tag]) -> str:
    """Inner HTML of an element."""
    if element is None:
        return ""
    return element.decode_contents()


def select_first(root: Tag, selectors: Iterable[str]) -> Optional[Tag]:
    """Return the first element matched by the earliest matching selector."""
    for selector in selectors:
        element = root.select_one(selector)
        if element is not None:
            return element
    return None


def absolute_url(href: Optional[str], base_url: str) -> Optional[str]:
    """Resolve a product link against the listing page URL."""
    if not href:
        return None
    href = href.strip()
    if href.startswith("http"):
        return href
    return urljoin(base_url, href)


def is_struck_through(element: Tag) -> bool:
    """Whether the element is, or sits inside, a <del> tag."""
    return element.name == "del" or element.find_parent("del") is not None


def strip_struck_through(html: str) -> str:
    """Remove <del>...</del> blocks from an HTML fragment."""
    return _DEL_BLOCK_RE.sub("", html)


def data_price(element: Optional[Tag]) -> Optional[str]:
    """First price-carrying data attribute on the element, if any."""
    if element is None:
        return None
    for attr in DATA_PRICE_ATTRS:
        value = element.get(attr)
        if value:
            return value
    return None
