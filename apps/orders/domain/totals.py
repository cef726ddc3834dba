"""
Totals aggregation and multi-currency projection.
"""

from decimal import Decimal
from typing import Iterable, Optional

from apps.exchange.domain.models import CANONICAL_CURRENCY, Currency, ExchangeRateSnapshot
from apps.orders.domain.discounts import DiscountEngine
from apps.orders.domain.models import ZERO, Catalog, LineTotals, Order, OrderLineProduct, Totals
from apps.orders.domain.pricing import AttributePriceComposer


class TotalsAggregator:
    """
    Pure derivation of an order's totals.

        subtotal_after_line_discounts = max(sum(base_total) - sum(discount), 0)
        subtotal = max(subtotal_after_line_discounts - general_discount, 0)
        tax = subtotal * tax_rate
        total = subtotal + tax + delivery_cost

    Nothing is cached; call it again after every change to the order.
    """

    @staticmethod
    def line_totals(
        line: OrderLineProduct,
        catalog: Catalog,
        snapshot: ExchangeRateSnapshot
    ) -> LineTotals:
        category = catalog.category(line.category)
        unit_price = AttributePriceComposer.compute_unit_price(line, category, catalog, snapshot)
        base_total = AttributePriceComposer.compute_line_total(line, category, catalog, snapshot)
        return LineTotals(
            line_id=line.id,
            unit_price=unit_price,
            base_total=base_total,
            discount=DiscountEngine.clamp_to_ceiling(line.discount, base_total),
        )

    @staticmethod
    def derive_totals(order: Order, catalog: Catalog) -> Totals:
        snapshot = order.exchange_rate_snapshot
        lines = tuple(
            TotalsAggregator.line_totals(line, catalog, snapshot)
            for line in order.lines
        )

        subtotal_before = sum((lt.base_total for lt in lines), ZERO)
        product_discounts = sum((lt.discount for lt in lines), ZERO)
        after_line_discounts = max(subtotal_before - product_discounts, ZERO)

        general_discount = DiscountEngine.clamp_to_ceiling(
            order.general_discount, after_line_discounts
        )
        subtotal = max(after_line_discounts - general_discount, ZERO)
        tax = subtotal * order.tax_rate
        delivery_cost = order.delivery_cost

        return Totals(
            lines=lines,
            subtotal_before_discounts=subtotal_before,
            product_discount_total=product_discounts,
            subtotal_after_line_discounts=after_line_discounts,
            general_discount=general_discount,
            subtotal=subtotal,
            tax=tax,
            delivery_cost=delivery_cost,
            total=subtotal + tax + delivery_cost,
        )

    @staticmethod
    def project(
        totals: Totals,
        currency: Currency,
        snapshot: ExchangeRateSnapshot
    ) -> Optional[dict[str, Decimal]]:
        """Order amounts in `currency`, or None when it has no rate."""
        if not snapshot.is_available(currency):
            return None
        return {
            name: snapshot.from_canonical(amount, currency)
            for name, amount in totals.amounts().items()
        }

    @staticmethod
    def project_totals(
        totals: Totals,
        currencies: Iterable[Currency],
        snapshot: ExchangeRateSnapshot
    ) -> dict[Currency, Optional[dict[str, Decimal]]]:
        """
        Project into the canonical currency plus every requested one.
        A requested currency without rate maps to None.
        """
        requested = set(currencies)
        return {
            currency: TotalsAggregator.project(totals, currency, snapshot)
            for currency in Currency
            if currency is CANONICAL_CURRENCY or currency in requested
        }

    @staticmethod
    def display_currencies(
        requested: Iterable[Currency],
        snapshot: ExchangeRateSnapshot
    ) -> list[Currency]:
        """
        The canonical currency first, then the requested foreign currencies
        that have a rate, in enum order.
        """
        wanted = set(requested)
        return [
            currency for currency in Currency
            if currency is CANONICAL_CURRENCY
            or (currency in wanted and snapshot.is_available(currency))
        ]

    @staticmethod
    def toggle_currency(
        selected: Iterable[Currency],
        currency: Currency,
        snapshot: ExchangeRateSnapshot
    ) -> list[Currency]:
        """
        Add or remove a display currency.

        The canonical currency cannot be removed and a currency without rate
        cannot be added; both toggles leave the selection unchanged.
        """
        current = TotalsAggregator.display_currencies(selected, snapshot)
        if currency is CANONICAL_CURRENCY:
            return current
        if currency in current:
            return [c for c in current if c is not currency]
        if not snapshot.is_available(currency):
            return current
        return TotalsAggregator.display_currencies([*current, currency], snapshot)
