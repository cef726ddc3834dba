import pytest
from decimal import Decimal

from apps.exchange.domain.models import Currency
from apps.orders.domain.discounts import DiscountEngine
from apps.orders.domain.models import DiscountType, OrderLineProduct

BASE_TOTAL = Decimal("1000")


def table_line(**overrides):
    fields = dict(
        id="line-1",
        catalog_product_id="table-1",
        name="Table",
        category="Tables",
        base_price=BASE_TOTAL,
    )
    fields.update(overrides)
    return OrderLineProduct(**fields)


class TestProductDiscount:
    """Tests for per-line discounts."""

    def test_percentage_ignores_category_cap(self, tables_category, snapshot):
        """
        Test base 1000 with a 100 Bs cap: 50% gives 500.
        """
        line = DiscountEngine.set_product_discount(
            table_line(), Decimal("50"), DiscountType.PERCENTAGE, Currency.BS,
            BASE_TOTAL, tables_category, snapshot,
        )

        assert line.discount == Decimal("500.00")
        assert line.discount_type is DiscountType.PERCENTAGE

    def test_amount_capped_by_category(self, tables_category, snapshot):
        """
        Test base 1000 with a 100 Bs cap: 300 Bs gives 100.
        """
        line = DiscountEngine.set_product_discount(
            table_line(), Decimal("300"), DiscountType.AMOUNT, Currency.BS,
            BASE_TOTAL, tables_category, snapshot,
        )

        assert line.discount == Decimal("100")

    def test_amount_in_foreign_currency(self, misc_category, snapshot):
        line = DiscountEngine.set_product_discount(
            table_line(), Decimal("2"), DiscountType.AMOUNT, Currency.USD,
            BASE_TOTAL, misc_category, snapshot,
        )

        assert line.discount == Decimal("73.00")
        assert line.discount_currency is Currency.USD

    def test_amount_clamped_to_base_total(self, misc_category, snapshot):
        line = DiscountEngine.set_product_discount(
            table_line(), Decimal("5000"), DiscountType.AMOUNT, Currency.BS,
            BASE_TOTAL, misc_category, snapshot,
        )

        assert line.discount == BASE_TOTAL

    def test_amount_missing_rate_uses_raw_value(self, misc_category, usd_only_snapshot):
        line = DiscountEngine.set_product_discount(
            table_line(), Decimal("50"), DiscountType.AMOUNT, Currency.EUR,
            BASE_TOTAL, misc_category, usd_only_snapshot,
        )

        assert line.discount == Decimal("50")

    @pytest.mark.parametrize("raw, expected", [
        ("150", "1000.00"),
        ("-20", "0.00"),
        ("12.345", "123.45"),
    ])
    def test_percentage_clamped(self, misc_category, snapshot, raw, expected):
        line = DiscountEngine.set_product_discount(
            table_line(), Decimal(raw), DiscountType.PERCENTAGE, Currency.BS,
            BASE_TOTAL, misc_category, snapshot,
        )

        assert line.discount == Decimal(expected)

    @pytest.mark.parametrize("raw", ["-5", "0", "99.99", "100", "250", "5000"])
    @pytest.mark.parametrize("base", ["0", "80", "1000"])
    def test_amount_within_bounds(self, tables_category, snapshot, raw, base):
        """
        Test an amount discount always lands in [0, min(base_total, cap)].
        """
        base_total = Decimal(base)
        discount = DiscountEngine.compute_discount(
            Decimal(raw), DiscountType.AMOUNT, Currency.BS, base_total, snapshot,
            cap=DiscountEngine.category_cap(tables_category, snapshot),
        )

        assert Decimal("0") <= discount <= min(base_total, Decimal("100"))

    def test_negative_ceiling_gives_zero(self, snapshot):
        discount = DiscountEngine.compute_discount(
            Decimal("10"), DiscountType.PERCENTAGE, Currency.BS, Decimal("-5"), snapshot
        )

        assert discount == Decimal("0")

    def test_category_cap_in_foreign_currency(self, snapshot):
        from apps.orders.domain.models import Category

        category = Category("Imported", max_discount=Decimal("2"), max_discount_currency=Currency.USD)

        assert DiscountEngine.category_cap(category, snapshot) == Decimal("73.00")

    def test_no_cap_when_zero(self, misc_category, snapshot):
        assert DiscountEngine.category_cap(misc_category, snapshot) is None


class TestSwitchDiscountType:
    """Switching type changes the display, not the stored discount."""

    def test_percentage_to_amount_keeps_canonical_discount(self, misc_category, snapshot):
        line = DiscountEngine.set_product_discount(
            table_line(), Decimal("50"), DiscountType.PERCENTAGE, Currency.BS,
            BASE_TOTAL, misc_category, snapshot,
        )

        switched = DiscountEngine.switch_product_discount_type(
            line, DiscountType.AMOUNT, BASE_TOTAL, misc_category, snapshot, Currency.USD
        )

        assert switched.discount == Decimal("500.00")
        assert switched.discount_currency is Currency.USD
        display = DiscountEngine.display_value(
            switched.discount, switched.discount_type, switched.discount_currency,
            BASE_TOTAL, snapshot,
        )
        assert display == Decimal("500.00") / Decimal("36.50")

    def test_switch_into_amount_applies_cap(self, tables_category, snapshot):
        line = DiscountEngine.set_product_discount(
            table_line(), Decimal("50"), DiscountType.PERCENTAGE, Currency.BS,
            BASE_TOTAL, tables_category, snapshot,
        )

        switched = DiscountEngine.switch_product_discount_type(
            line, DiscountType.AMOUNT, BASE_TOTAL, tables_category, snapshot
        )

        assert switched.discount == Decimal("100")

    def test_amount_to_percentage(self, tables_category, snapshot):
        line = table_line(discount=Decimal("100"))

        switched = DiscountEngine.switch_product_discount_type(
            line, DiscountType.PERCENTAGE, BASE_TOTAL, tables_category, snapshot
        )

        assert switched.discount == Decimal("100")
        assert DiscountEngine.display_value(
            switched.discount, switched.discount_type, switched.discount_currency,
            BASE_TOTAL, snapshot,
        ) == Decimal("10")


class TestDisplayValue:

    def test_percentage_of_zero_base(self, snapshot):
        assert DiscountEngine.display_value(
            Decimal("0"), DiscountType.PERCENTAGE, Currency.BS, Decimal("0"), snapshot
        ) == Decimal("0")

    def test_amount_in_canonical(self, snapshot):
        assert DiscountEngine.display_value(
            Decimal("73"), DiscountType.AMOUNT, Currency.BS, BASE_TOTAL, snapshot
        ) == Decimal("73")

    def test_amount_unavailable_currency(self, usd_only_snapshot):
        assert DiscountEngine.display_value(
            Decimal("73"), DiscountType.AMOUNT, Currency.EUR, BASE_TOTAL, usd_only_snapshot
        ) is None
