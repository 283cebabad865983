"""Tests for the generic extraction strategies."""

from decimal import Decimal

from bs4 import BeautifulSoup

from goldprices.scrapers.base import GRAM
from goldprices.scrapers.strategies import (
    build_entry,
    card_price,
    cell_price_tiers,
    classify_label,
    labelled_prices,
    scan_document,
    scan_list_items,
    scan_table_rows,
    visible_price,
)
from goldprices.scrapers.utils.normalizer import TieredPrice


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class TestLabels:
    """Tests for buy/sell label classification."""

    def test_classify(self):
        assert classify_label("Prodajna cijena") == "sell"
        assert classify_label("Otkup") == "buy"
        assert classify_label("Naziv proizvoda") is None

    def test_sell_checked_first(self):
        assert classify_label("Kupnja i prodaja") == "sell"

    def test_labelled_prices(self):
        buy, sell = labelled_prices("Kupnja: 1.400,00 € Prodaja: 1.500,00 €")

        assert buy == Decimal("1400.00")
        assert sell == Decimal("1500.00")

    def test_unlabelled(self):
        assert labelled_prices("1.500,00 €") == (None, None)


class TestCardPrice:
    """Tests for visible and card-level price lookup."""

    def test_visible_price_ignores_struck_through(self):
        element = soup_of('<span class="price"><del>1.500,00 €</del> 1.450,00 €</span>').span
        assert visible_price(element) == Decimal("1450.00")

    def test_skips_struck_elements(self):
        card = soup_of(
            '<div><del><span class="price">1.500,00 €</span></del>'
            '<span class="price">1.450,00 €</span></div>'
        ).div
        assert card_price(card, (".price",)) == Decimal("1450.00")

    def test_data_attribute(self):
        card = soup_of('<div><span class="price" data-price-amount="1234.5"></span></div>').div
        assert card_price(card, (".price",)) == Decimal("1234.5")

    def test_falls_back_to_card_text(self):
        card = soup_of("<div><p>Zlatna poluga 5 g</p><p>Cijena 498,00 €</p></div>").div
        assert card_price(card, (".price",)) == Decimal("498.00")


class TestCellPriceTiers:
    """Tests for reading price tiers out of one cell."""

    def test_del_and_ins(self):
        cell = soup_of("<td><del>1.500,00 €</del><ins>1.450,00 €</ins></td>").td

        tier = cell_price_tiers(cell)

        assert tier.regular == Decimal("1500.00")
        assert tier.discounted == Decimal("1450.00")

    def test_unit_price_label(self):
        cell = soup_of("<td>od 1 kom. 1.234,56 €</td>").td
        assert cell_price_tiers(cell).current == Decimal("1234.56")

    def test_several_amounts_without_markup(self):
        """Highest is regular, lowest is discounted."""
        cell = soup_of("<td>9.800,00 € 9.650,00 €</td>").td

        tier = cell_price_tiers(cell)

        assert tier.regular == Decimal("9800.00")
        assert tier.discounted == Decimal("9650.00")

    def test_strict_mode_ignores_bare_numbers(self):
        cell = soup_of("<td>Poluga 1 g</td>").td

        assert cell_price_tiers(cell, loose=False) == TieredPrice()
        assert cell_price_tiers(cell).current == Decimal("1")

    def test_missing_cell(self):
        assert cell_price_tiers(None) == TieredPrice()


class TestBuildEntry:
    """Tests for build_entry."""

    def test_nothing_priced(self):
        assert build_entry(None, TieredPrice()) is None

    def test_buy_price_only(self):
        entry = build_entry(None, TieredPrice(), buy=Decimal("90"))

        assert entry.unit == GRAM
        assert entry.price == Decimal("90")
        assert entry.sell_price is None


class TestScanTableRows:
    """Tests for the generic table scan."""

    def test_buy_and_sell_columns(self):
        soup = soup_of(
            "<table>"
            "<tr><th>Proizvod</th><th>Otkup</th><th>Prodaja</th></tr>"
            "<tr><td>Poluga 10 g</td><td>Otkup 600,00 €</td><td>Prodaja 650,00 €</td></tr>"
            "</table>"
        )

        entries = scan_table_rows(soup)

        assert len(entries) == 1
        entry = entries[0]
        assert entry.weight == Decimal("10")
        assert entry.price == Decimal("650.00")
        assert entry.sell_price == Decimal("650.00")
        assert entry.buy_price == Decimal("600.00")

    def test_weight_in_name_is_not_a_price(self):
        soup = soup_of("<table><tr><td>Poluga 1 g</td><td>98,50 €</td></tr></table>")

        entries = scan_table_rows(soup)

        assert [(e.weight, e.price) for e in entries] == [(Decimal("1"), Decimal("98.50"))]

    def test_rows_without_weight_are_skipped(self):
        soup = soup_of("<table><tr><td>Dostava</td><td>5,00 €</td></tr></table>")
        assert scan_table_rows(soup) == []


class TestScanListItems:
    """Tests for the generic list scan."""

    def test_list_item(self):
        soup = soup_of(
            '<ul><li class="item"><h2 class="product-name"><a href="/poluga-20g">Poluga 20 g</a></h2>'
            '<span class="price">1.780,00 €</span></li></ul>'
        )

        entries = scan_list_items(soup, "https://shop.example/kategorija/")

        assert len(entries) == 1
        assert entries[0].price == Decimal("1780.00")
        assert entries[0].weight == Decimal("20")
        assert entries[0].product_title == "Poluga 20 g"
        assert entries[0].product_link == "https://shop.example/poluga-20g"


class TestScanDocument:
    """Tests for the whole-document fallback."""

    def test_distinct_prices_in_range(self):
        soup = soup_of("<body><p>Akcija 98,50 € i 1.950,00 €, 1.950,00 €, dostava 5,00 €</p></body>")

        entries = scan_document(soup)

        assert [e.price for e in entries] == [Decimal("1950.00")]
        assert entries[0].unit == GRAM

    def test_sorted_and_capped(self):
        soup = soup_of("<body>500,00 € 2.000,00 € 1.000,00 €</body>")

        entries = scan_document(soup, limit=2)

        assert [e.price for e in entries] == [Decimal("2000.00"), Decimal("1000.00")]
