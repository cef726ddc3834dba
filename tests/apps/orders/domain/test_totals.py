import pytest
from decimal import Decimal

from apps.exchange.domain.models import Currency
from apps.orders.domain.models import (
    DeliveryServices,
    Order,
    OrderLineProduct,
    ServiceCharge,
)
from apps.orders.domain.totals import TotalsAggregator


def line(line_id="line-1", product_id="item-861", category="Misc", base_price="861", **overrides):
    return OrderLineProduct(
        id=line_id,
        catalog_product_id=product_id,
        name=product_id,
        category=category,
        base_price=Decimal(base_price),
        **overrides,
    )


class TestDeriveTotals:
    """Tests for the totals formula."""

    def test_tax_and_total(self, catalog, snapshot):
        """
        Test subtotal 861 gives tax 137.76 and total 998.76.
        """
        order = Order(lines=(line(),), exchange_rate_snapshot=snapshot)

        totals = TotalsAggregator.derive_totals(order, catalog)

        assert totals.subtotal == Decimal("861")
        assert totals.tax == Decimal("137.76")
        assert totals.total == Decimal("998.76")

    def test_delivery_services_added_after_tax(self, catalog, snapshot):
        order = Order(
            lines=(line(),),
            exchange_rate_snapshot=snapshot,
            delivery_services=DeliveryServices(
                express=ServiceCharge(True, Decimal("20")),
                haulage=ServiceCharge(False, Decimal("30")),
                assembly=ServiceCharge(True, Decimal("10")),
            ),
        )

        totals = TotalsAggregator.derive_totals(order, catalog)

        assert totals.delivery_cost == Decimal("30")
        assert totals.total == Decimal("1028.76")

    def test_line_and_general_discounts(self, catalog, snapshot):
        order = Order(
            lines=(
                line("a", base_price="600", discount=Decimal("100")),
                line("b", base_price="400", quantity=2, discount=Decimal("50")),
            ),
            general_discount=Decimal("150"),
            exchange_rate_snapshot=snapshot,
        )

        totals = TotalsAggregator.derive_totals(order, catalog)

        assert totals.subtotal_before_discounts == Decimal("1400")
        assert totals.product_discount_total == Decimal("150")
        assert totals.subtotal_after_line_discounts == Decimal("1250")
        assert totals.general_discount == Decimal("150")
        assert totals.subtotal == Decimal("1100")
        assert totals.for_line("b").total == Decimal("750")

    def test_line_discount_clamped_to_base(self, catalog, snapshot):
        order = Order(
            lines=(line(base_price="1000", discount=Decimal("2000")),),
            exchange_rate_snapshot=snapshot,
        )

        totals = TotalsAggregator.derive_totals(order, catalog)

        assert totals.for_line("line-1").discount == Decimal("1000")
        assert totals.subtotal == Decimal("0")

    @pytest.mark.parametrize("general_discount", ["0", "500", "861", "10000"])
    def test_subtotal_never_negative(self, catalog, snapshot, general_discount):
        order = Order(
            lines=(line(),),
            general_discount=Decimal(general_discount),
            exchange_rate_snapshot=snapshot,
        )

        totals = TotalsAggregator.derive_totals(order, catalog)

        assert totals.subtotal >= 0
        assert totals.general_discount <= totals.subtotal_after_line_discounts
        assert totals.total >= 0

    def test_empty_order(self, catalog, snapshot):
        totals = TotalsAggregator.derive_totals(Order(exchange_rate_snapshot=snapshot), catalog)

        assert totals.lines == ()
        assert totals.total == Decimal("0")

    def test_recursive_price_in_totals(self, catalog, snapshot):
        """
        Test a sofa with no selections still includes its bundled legs.
        """
        order = Order(
            lines=(line(product_id="sofa-1", category="Sofas", base_price="365.00"),),
            exchange_rate_snapshot=snapshot,
        )

        totals = TotalsAggregator.derive_totals(order, catalog)

        assert totals.for_line("line-1").unit_price == Decimal("435.00")

    def test_line_totals_use_composed_line_total(self, catalog, snapshot):
        """
        Test the base total is quantity times the composed unit price plus markup.
        """
        sofa = line(product_id="sofa-1", category="Sofas", base_price="365.00", quantity=2, markup=Decimal("15"))

        line_totals = TotalsAggregator.line_totals(sofa, catalog, snapshot)

        assert line_totals.unit_price == Decimal("435.00")
        assert line_totals.base_total == Decimal("885.00")


class TestProjection:
    """Tests for multi-currency display."""

    def test_project_divides_by_rate(self, catalog, snapshot):
        totals = TotalsAggregator.derive_totals(
            Order(lines=(line(base_price="730"),), exchange_rate_snapshot=snapshot), catalog
        )

        projected = TotalsAggregator.project(totals, Currency.USD, snapshot)

        assert projected["subtotal"] == Decimal("20")
        assert projected["total"] == totals.total / Decimal("36.50")

    def test_unavailable_currency_projects_to_none(self, catalog, usd_only_snapshot):
        totals = TotalsAggregator.derive_totals(
            Order(lines=(line(),), exchange_rate_snapshot=usd_only_snapshot), catalog
        )

        projections = TotalsAggregator.project_totals(
            totals, [Currency.USD, Currency.EUR], usd_only_snapshot
        )

        assert list(projections) == [Currency.BS, Currency.USD, Currency.EUR]
        assert projections[Currency.EUR] is None
        assert projections[Currency.BS]["total"] == Decimal("998.76")

    def test_project_unavailable(self, catalog, usd_only_snapshot):
        totals = TotalsAggregator.derive_totals(
            Order(lines=(line(),), exchange_rate_snapshot=usd_only_snapshot), catalog
        )

        assert TotalsAggregator.project(totals, Currency.EUR, usd_only_snapshot) is None

    def test_display_currencies_always_include_canonical(self, snapshot):
        assert TotalsAggregator.display_currencies([], snapshot) == [Currency.BS]
        assert TotalsAggregator.display_currencies(
            [Currency.EUR, Currency.USD], snapshot
        ) == [Currency.BS, Currency.USD, Currency.EUR]

    def test_toggle_currency(self, snapshot):
        selected = TotalsAggregator.toggle_currency([Currency.BS], Currency.USD, snapshot)
        assert selected == [Currency.BS, Currency.USD]

        selected = TotalsAggregator.toggle_currency(selected, Currency.USD, snapshot)
        assert selected == [Currency.BS]

    def test_toggle_canonical_is_ignored(self, snapshot):
        assert TotalsAggregator.toggle_currency(
            [Currency.BS, Currency.EUR], Currency.BS, snapshot
        ) == [Currency.BS, Currency.EUR]

    def test_toggle_unavailable_is_ignored(self, usd_only_snapshot):
        assert TotalsAggregator.toggle_currency(
            [Currency.BS], Currency.EUR, usd_only_snapshot
        ) == [Currency.BS]
