"""Pytest configuration and shared fixtures."""

import asyncio
from decimal import Decimal
from typing import List, Optional

import httpx
import pytest

from goldprices.scrapers.base import GRAM, PriceEntry, ScrapeOutcome, VendorSnapshot


# ============================================================================
# VENDOR PAGES
# ============================================================================

GVS_LISTING_HTML = """
<html><body>
<ol class="products list items product-items">
  <li class="item product product-item">
    <div class="product-item-info">
      <strong class="product-item-name">
        <a class="product-item-link" href="https://www.zlatosrebro.hr/zlatna-poluga-10-g.html">Zlatna poluga 10 g</a>
      </strong>
      <div class="price-box"><span class="price" data-price-amount="650">650,00 €</span></div>
      <p class="labels">Kupnja: 600,00 € Prodaja: 655,00 €</p>
    </div>
  </li>
</ol>
</body></html>
"""

PLEMENIT_TABLE_HTML = """
<html><body>
<table>
  <tr><th>Proizvod</th><th>Fizika</th><th>Geografija</th><th>Matematika</th></tr>
  <tr>
    <td class="prvakolona"><a href="/proizvod/zlatna-poluga-100-g/">Zlatna poluga 100 g</a></td>
    <td class="drugakolona"><del>9.800,00 €</del> <ins>9.650,00 €</ins></td>
    <td class="trecakolona">9.700,00 €</td>
    <td class="cetvrtakolona"></td>
  </tr>
  <tr>
    <td class="prvakolona">Zlatna poluga 1 g</td>
    <td class="drugakolona">od 1 kom. 98,50 €</td>
  </tr>
</table>
</body></html>
"""

MORO_LISTING_HTML = """
<html><body>
<ul class="products columns-4">
  <li class="product type-product">
    <a class="woocommerce-LoopProduct-link" href="https://www.moro.hr/proizvod/zlatna-poluga-5-g/">
      <h2 class="woocommerce-loop-product__title">Zlatna poluga 5 g</h2>
      <span class="price">
        <del aria-hidden="true"><span class="woocommerce-Price-amount amount"><bdi>520,00&nbsp;<span class="woocommerce-Price-currencySymbol">&euro;</span></bdi></span></del>
        <ins><span class="woocommerce-Price-amount amount"><bdi>498,00&nbsp;<span class="woocommerce-Price-currencySymbol">&euro;</span></bdi></span></ins>
      </span>
    </a>
  </li>
  <li class="product type-product">
    <a class="woocommerce-LoopProduct-link" href="https://www.moro.hr/proizvod/zlatna-poluga-1-kg/">
      <h2 class="woocommerce-loop-product__title">Zlatna poluga 1 kg</h2>
      <span class="price"><span class="woocommerce-Price-amount amount"><bdi>92.450,00&nbsp;<span class="woocommerce-Price-currencySymbol">&euro;</span></bdi></span></span>
    </a>
  </li>
</ul>
</body></html>
"""

CENTAR_ZLATA_LISTING_HTML = """
<html><body>
<ul class="products">
  <li class="product type-product">
    <a class="woocommerce-LoopProduct-link" href="https://www.centarzlata.com/proizvod/zlatna-poluga-1g/">
      <h2 class="woocommerce-loop-product__title">Zlatna poluga 1g</h2>
      <span class="price">
        <del><span class="woocommerce-Price-amount amount"><bdi>105,00 €</bdi></span></del>
        <ins><span class="woocommerce-Price-amount amount"><bdi>99,50 €</bdi></span></ins>
      </span>
    </a>
  </li>
  <li class="product type-product">
    <a class="woocommerce-LoopProduct-link" href="https://www.centarzlata.com/proizvod/zlatna-poluga-10g/">
      <h2 class="woocommerce-loop-product__title">Zlatna poluga 10g</h2>
      <span class="price"><span class="woocommerce-Price-amount amount"><bdi>890,00 €</bdi></span></span>
    </a>
  </li>
</ul>
</body></html>
"""

CENTAR_ZLATA_PRODUCT_HTML = """
<html><body>
<div class="summary entry-summary">
  <h1 class="product_title">Zlatna poluga 1g</h1>
  <p class="price"><span class="woocommerce-Price-amount amount"><bdi>97,80 €</bdi></span></p>
</div>
</body></html>
"""

ELEMENTUM_SCRIPT_HTML = """
<html><body>
<script>
  var chart = { data: {"prices": [
    {"unit": "g", "price": 95.4, "buyPrice": 91.2, "sellPrice": 95.4},
    {"unit": "unca", "price": "2.950,00"}
  ]} };
</script>
</body></html>
"""


@pytest.fixture
def gvs_html() -> str:
    return GVS_LISTING_HTML


@pytest.fixture
def plemenit_html() -> str:
    return PLEMENIT_TABLE_HTML


@pytest.fixture
def moro_html() -> str:
    return MORO_LISTING_HTML


@pytest.fixture
def centar_zlata_html() -> str:
    return CENTAR_ZLATA_LISTING_HTML


@pytest.fixture
def centar_zlata_product_html() -> str:
    return CENTAR_ZLATA_PRODUCT_HTML


@pytest.fixture
def elementum_html() -> str:
    return ELEMENTUM_SCRIPT_HTML


# ============================================================================
# RUNNER STUBS
# ============================================================================

def make_snapshot(vendor: str, price: str = "100.00") -> VendorSnapshot:
    """Snapshot with a single gram entry."""
    amount = Decimal(price)
    return VendorSnapshot(
        vendor=vendor,
        url=f"https://{vendor.lower().replace(' ', '-')}.example/",
        prices=(PriceEntry(unit=GRAM, price=amount, sell_price=amount, weight=Decimal("1")),),
    )


class StubRunner:
    """Runner double with scripted outcomes.

    Each run pops the next scripted result: a VendorSnapshot becomes a
    successful outcome, a string a failed one, an exception is raised.
    When gate is set, runs wait for it before finishing.
    """

    def __init__(self, vendor: str, slug: Optional[str] = None, results: Optional[List] = None):
        self.vendor = vendor
        self.slug = slug or vendor.lower().replace(" ", "-")
        self.results = list(results) if results else [make_snapshot(vendor)]
        self.gate: Optional[asyncio.Event] = None
        self.calls = 0

    async def run(self, on_progress=None) -> ScrapeOutcome:
        self.calls += 1
        if on_progress is not None:
            on_progress(0)
            on_progress(50)
        if self.gate is not None:
            await self.gate.wait()

        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, str):
            return ScrapeOutcome(vendor=self.vendor, success=False, error=result)
        return ScrapeOutcome(vendor=self.vendor, success=True, data=result)


@pytest.fixture
def stub_runners() -> List[StubRunner]:
    return [StubRunner("Moro"), StubRunner("Centar Zlata")]


# ============================================================================
# HTTP
# ============================================================================

def html_transport(pages: dict, status_code: int = 404) -> httpx.MockTransport:
    """MockTransport serving fixed HTML per URL; other URLs get status_code."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = pages.get(str(request.url))
        if body is None:
            return httpx.Response(status_code, text="not found")
        return httpx.Response(200, text=body, headers={"content-type": "text/html; charset=utf-8"})

    return httpx.MockTransport(handler)
