"""Tests for the vendor extractors."""

from decimal import Decimal, InvalidOperation

import httpx

from goldprices.scrapers.adapters import (
    CentarZlataExtractor,
    ElementumExtractor,
    GvsCroatiaExtractor,
    MoroExtractor,
    PlemenitExtractor,
)
from goldprices.scrapers.base import GRAM, KG, OUNCE, PriceEntry
from goldprices.scrapers.fetcher import Fetcher
from goldprices.scrapers.utils.normalizer import TieredPrice

from conftest import html_transport

CENTAR_ZLATA_URL = "https://www.centarzlata.com/kategorija/investicijsko-zlato/zlatne-poluge/"
ONE_GRAM_URL = "https://www.centarzlata.com/proizvod/zlatna-poluga-1g/"


def one_gram_entry(link: str) -> PriceEntry:
    return PriceEntry(
        unit=GRAM,
        price=Decimal("99.50"),
        sell_price=Decimal("99.50"),
        product_title="Zlatna poluga 1g",
        product_link=link,
        weight=Decimal("1"),
    )


class TestGvsCroatiaExtractor:
    """Tests for GvsCroatiaExtractor."""

    def test_product_card_with_labels(self, gvs_html):
        entries = GvsCroatiaExtractor(base_url="https://www.zlatosrebro.hr/").extract(gvs_html)

        assert len(entries) == 1
        entry = entries[0]
        assert entry.unit == GRAM
        assert entry.weight == Decimal("10")
        assert entry.price == Decimal("655.00")
        assert entry.sell_price == Decimal("655.00")
        assert entry.buy_price == Decimal("600.00")
        assert entry.product_link == "https://www.zlatosrebro.hr/zlatna-poluga-10-g.html"

    def test_weight_from_filter_link(self):
        html = (
            '<ol><li class="item product-item">'
            '<a class="product-item-link" href="/heraeus.html">Zlatna poluga Heraeus</a>'
            '<a href="/kupnja.html?gewicht=1000">Filter</a>'
            '<span class="price">95.000,00 €</span>'
            "</li></ol>"
        )

        entries = GvsCroatiaExtractor(base_url="https://www.zlatosrebro.hr/").extract(html)

        assert [(e.unit, e.weight, e.price) for e in entries] == [(KG, Decimal("1"), Decimal("95000.00"))]

    def test_document_fallback(self):
        html = "<html><body><p>Cijene: 1.950,00 € i 650,00 €</p></body></html>"

        entries = GvsCroatiaExtractor().extract(html)

        assert [e.price for e in entries] == [Decimal("1950.00"), Decimal("650.00")]

    def test_page_without_prices(self):
        assert GvsCroatiaExtractor().extract("<html><body>Održavanje</body></html>") == []


class TestPlemenitExtractor:
    """Tests for PlemenitExtractor."""

    def test_comparison_table(self, plemenit_html):
        extractor = PlemenitExtractor(base_url="https://plemenit.hr/cijene/cijena-zlatnih-poluga/")

        entries = extractor.extract(plemenit_html)

        assert len(entries) == 2
        bar, gram = entries
        assert bar.weight == Decimal("100")
        assert bar.regular_price == Decimal("9800.00")
        assert bar.discounted_price == Decimal("9650.00")
        assert bar.price == Decimal("9650.00")
        assert bar.product_title == "Zlatna poluga 100 g"
        assert bar.product_link == "https://plemenit.hr/proizvod/zlatna-poluga-100-g/"

        assert gram.weight == Decimal("1")
        assert gram.price == Decimal("98.50")
        assert gram.product_link is None

    def test_document_fallback_keeps_highest(self):
        html = "<html><body><p>Cijena 1 g: 98,50 €, 1 kg: 95.000,00 €</p></body></html>"

        entries = PlemenitExtractor().extract(html)

        assert [e.price for e in entries] == [Decimal("95000.00")]


class TestMoroExtractor:
    """Tests for MoroExtractor."""

    def test_product_cards(self, moro_html):
        entries = MoroExtractor(base_url="https://www.moro.hr/").extract(moro_html)

        assert len(entries) == 2
        small, kilo = entries
        assert small.product_title == "Zlatna poluga 5 g"
        assert small.weight == Decimal("5")
        assert small.price == Decimal("498.00")
        assert small.product_link == "https://www.moro.hr/proizvod/zlatna-poluga-5-g/"

        assert kilo.unit == KG
        assert kilo.weight == Decimal("1")
        assert kilo.price == Decimal("92450.00")

    def test_labelled_buy_price(self):
        html = (
            '<ul class="products"><li class="product">'
            "<h2>Zlatna poluga 20 g</h2>"
            "<p>Kupnja: 1.700,00 € Prodaja: 1.790,00 €</p>"
            "</li></ul>"
        )

        entry = MoroExtractor().extract(html)[0]

        assert entry.price == Decimal("1790.00")
        assert entry.buy_price == Decimal("1700.00")


class TestCentarZlataExtractor:
    """Tests for CentarZlataExtractor."""

    def test_listing_tiers(self, centar_zlata_html):
        entries = CentarZlataExtractor(base_url=CENTAR_ZLATA_URL).extract(centar_zlata_html)

        assert len(entries) == 2
        one_gram, ten_gram = entries
        assert one_gram.regular_price == Decimal("105.00")
        assert one_gram.discounted_price == Decimal("99.50")
        assert one_gram.price == Decimal("99.50")
        assert one_gram.product_link == ONE_GRAM_URL

        assert ten_gram.weight == Decimal("10")
        assert ten_gram.price == Decimal("890.00")
        assert ten_gram.discounted_price is None

    def test_parse_product_page(self, centar_zlata_product_html):
        page = CentarZlataExtractor().parse_product_page(centar_zlata_product_html)

        assert page.price == Decimal("97.80")
        assert page.discounted is None

    def test_product_page_without_price(self):
        assert CentarZlataExtractor().parse_product_page("<html><body></body></html>") is None

    def test_apply_product_page_clears_stale_discount(self):
        entry = PriceEntry(
            unit=GRAM,
            price=Decimal("99.50"),
            regular_price=Decimal("105.00"),
            discounted_price=Decimal("99.50"),
            sell_price=Decimal("99.50"),
        )

        updated = CentarZlataExtractor.apply_product_page(entry, TieredPrice(current=Decimal("97.80")))

        assert updated.price == Decimal("97.80")
        assert updated.sell_price == Decimal("97.80")
        assert updated.discounted_price is None
        assert updated.regular_price == Decimal("105.00")

    def test_apply_product_page_discount(self):
        entry = PriceEntry(unit=GRAM, price=Decimal("99.50"), sell_price=Decimal("99.50"))
        page = TieredPrice(regular=Decimal("104.00"), discounted=Decimal("96.00"), current=Decimal("96.00"))

        updated = CentarZlataExtractor.apply_product_page(entry, page)

        assert updated.price == Decimal("96.00")
        assert updated.regular_price == Decimal("104.00")
        assert updated.discounted_price == Decimal("96.00")

    async def test_refine_revisits_one_gram_products(self, centar_zlata_html, centar_zlata_product_html):
        extractor = CentarZlataExtractor(base_url=CENTAR_ZLATA_URL, detail_page_delay=0)
        entries = extractor.extract(centar_zlata_html)
        fetcher = Fetcher(retry_delay=0, transport=html_transport({ONE_GRAM_URL: centar_zlata_product_html}))
        progress = []

        refined = await extractor.refine(entries, fetcher, on_progress=progress.append)

        assert refined[0].price == Decimal("97.80")
        assert refined[1] == entries[1]
        assert progress == [100]

    async def test_refine_keeps_listing_price_on_failure(self, centar_zlata_html):
        extractor = CentarZlataExtractor(base_url=CENTAR_ZLATA_URL, detail_page_delay=0)
        entries = extractor.extract(centar_zlata_html)
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(500, text="error")

        fetcher = Fetcher(retry_attempts=2, retry_delay=0, transport=httpx.MockTransport(handler))

        refined = await extractor.refine(entries, fetcher)

        assert refined == entries
        assert calls == [ONE_GRAM_URL]  # One attempt per product page

    async def test_refine_keeps_listing_price_on_invalid_link(self):
        extractor = CentarZlataExtractor(base_url=CENTAR_ZLATA_URL, detail_page_delay=0)
        entry = one_gram_entry("https://www.centarzlata.com:abc/poluga-1g/")

        refined = await extractor.refine([entry], Fetcher(retry_delay=0, transport=html_transport({})))

        assert refined == [entry]

    async def test_refine_keeps_listing_price_on_parse_error(self, centar_zlata_product_html, monkeypatch):
        extractor = CentarZlataExtractor(base_url=CENTAR_ZLATA_URL, detail_page_delay=0)
        entry = one_gram_entry(ONE_GRAM_URL)

        def broken_parser(html):
            raise InvalidOperation("bad amount")

        monkeypatch.setattr(extractor, "parse_product_page", broken_parser)
        fetcher = Fetcher(retry_delay=0, transport=html_transport({ONE_GRAM_URL: centar_zlata_product_html}))

        refined = await extractor.refine([entry], fetcher)

        assert refined == [entry]

    async def test_refine_targets_one_gram_weight_only(self, centar_zlata_product_html):
        extractor = CentarZlataExtractor(base_url=CENTAR_ZLATA_URL, detail_page_delay=0)
        ounce_link = "https://www.centarzlata.com/proizvod/zlatna-poluga-311g/"
        troy_ounce = PriceEntry(
            unit=GRAM,
            price=Decimal("2950.00"),
            sell_price=Decimal("2950.00"),
            product_title="Zlatna poluga 31,1g",
            product_link=ounce_link,
            weight=Decimal("31.1"),
        )
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(200, text=centar_zlata_product_html)

        fetcher = Fetcher(retry_delay=0, transport=httpx.MockTransport(handler))

        refined = await extractor.refine([troy_ounce, one_gram_entry(ONE_GRAM_URL)], fetcher)

        assert calls == [ONE_GRAM_URL]
        assert refined[0] == troy_ounce
        assert refined[1].price == Decimal("97.80")

    async def test_refine_limit(self, centar_zlata_html):
        extractor = CentarZlataExtractor(base_url=CENTAR_ZLATA_URL, detail_page_limit=0)
        entries = extractor.extract(centar_zlata_html)

        assert await extractor.refine(entries, Fetcher()) == entries


class TestElementumExtractor:
    """Tests for ElementumExtractor."""

    def test_embedded_json(self, elementum_html):
        entries = ElementumExtractor().extract(elementum_html)

        assert len(entries) == 2
        gram, ounce = entries
        assert gram.unit == GRAM
        assert gram.price == Decimal("95.4")
        assert gram.buy_price == Decimal("91.2")
        assert ounce.unit == OUNCE
        assert ounce.price == Decimal("2950.00")

    def test_price_rows(self):
        html = (
            '<table class="price-table">'
            "<tr><td>Poluga 1 kg</td><td>88.000,00 EUR</td><td>92.000,00 EUR</td></tr>"
            "<tr><td>Zlatnik 1 unca</td><td>2.900,00 kn</td></tr>"
            "</table>"
        )

        entries = ElementumExtractor().extract(html)

        assert len(entries) == 2
        kilo, ounce = entries
        assert kilo.unit == KG
        assert kilo.buy_price == Decimal("88000.00")
        assert kilo.sell_price == Decimal("92000.00")
        assert ounce.unit == OUNCE
        assert ounce.price == Decimal("2900.00")
