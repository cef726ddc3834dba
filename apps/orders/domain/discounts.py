"""
Discount engine.

Discounts are stored as absolute canonical amounts. The type (amount or
percentage) and the input currency only drive how the operator's input is
interpreted and how the stored value is displayed back.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Optional

from apps.exchange.domain.models import CANONICAL_CURRENCY, Currency, ExchangeRateSnapshot
from apps.orders.domain.models import ZERO, Category, DiscountType, OrderLineProduct
from apps.orders.domain.money import clamp, round2, to_canonical_or_raw

HUNDRED = Decimal("100")


class DiscountEngine:

    @staticmethod
    def category_cap(
        category: Optional[Category],
        snapshot: ExchangeRateSnapshot
    ) -> Optional[Decimal]:
        """Canonical cap for absolute discounts, or None if the category has none."""
        if category is None or category.max_discount <= 0:
            return None
        return to_canonical_or_raw(category.max_discount, category.max_discount_currency, snapshot)

    @staticmethod
    def compute_discount(
        raw_value: Decimal,
        discount_type: DiscountType,
        currency: Currency,
        ceiling: Decimal,
        snapshot: ExchangeRateSnapshot,
        cap: Optional[Decimal] = None
    ) -> Decimal:
        """
        Turn operator input into a canonical discount within [0, ceiling].

        Percentages are clamped to [0, 100] and ignore `cap`. Amounts are
        converted from `currency`, clamped to the ceiling, then to `cap`.
        """
        ceiling = max(ceiling, ZERO)

        if discount_type is DiscountType.PERCENTAGE:
            pct = clamp(raw_value, ZERO, HUNDRED)
            return min(round2(ceiling * pct / HUNDRED), ceiling)

        amount = clamp(to_canonical_or_raw(raw_value, currency, snapshot), ZERO, ceiling)
        if cap is not None:
            amount = min(amount, cap)
        return amount

    @staticmethod
    def set_product_discount(
        line: OrderLineProduct,
        raw_value: Decimal,
        discount_type: DiscountType,
        currency: Currency,
        base_total: Decimal,
        category: Optional[Category],
        snapshot: ExchangeRateSnapshot
    ) -> OrderLineProduct:
        """Return the line with the discount derived from the operator's input."""
        discount = DiscountEngine.compute_discount(
            raw_value,
            discount_type,
            currency,
            base_total,
            snapshot,
            cap=DiscountEngine.category_cap(category, snapshot),
        )
        return replace(
            line,
            discount=discount,
            discount_type=discount_type,
            discount_currency=currency,
        )

    @staticmethod
    def switch_product_discount_type(
        line: OrderLineProduct,
        discount_type: DiscountType,
        base_total: Decimal,
        category: Optional[Category],
        snapshot: ExchangeRateSnapshot,
        currency: Optional[Currency] = None
    ) -> OrderLineProduct:
        """
        Change how a line discount is displayed.

        The stored discount is kept as is, except when switching into amount
        mode makes the category cap apply.
        """
        discount = clamp(line.discount, ZERO, max(base_total, ZERO))
        if discount_type is DiscountType.AMOUNT:
            cap = DiscountEngine.category_cap(category, snapshot)
            if cap is not None:
                discount = min(discount, cap)

        return replace(
            line,
            discount=discount,
            discount_type=discount_type,
            discount_currency=currency or line.discount_currency,
        )

    @staticmethod
    def clamp_to_ceiling(discount: Decimal, ceiling: Decimal) -> Decimal:
        """Re-clamp a stored discount after the amount it applies to changed."""
        return clamp(discount, ZERO, max(ceiling, ZERO))

    @staticmethod
    def display_value(
        discount: Decimal,
        discount_type: DiscountType,
        currency: Currency,
        ceiling: Decimal,
        snapshot: ExchangeRateSnapshot
    ) -> Optional[Decimal]:
        """
        The stored discount as the operator sees it.

        Percentage of `ceiling` (0 when the ceiling is 0), or the amount in
        `currency`; None when that currency has no rate.
        """
        if discount_type is DiscountType.PERCENTAGE:
            if ceiling <= 0:
                return ZERO
            return discount / ceiling * HUNDRED
        if currency is CANONICAL_CURRENCY:
            return discount
        return snapshot.from_canonical(discount, currency)
