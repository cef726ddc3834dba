"""
Attribute price composition.

A line's unit price is its base price plus the adjustments of the attribute
values selected for it, plus the full price of every product bundled through
a ProductRef attribute (with that product's own adjustments).
"""

import logging
from decimal import Decimal
from typing import Mapping, Optional

from apps.exchange.domain.models import ExchangeRateSnapshot
from apps.orders.domain.models import (
    ZERO,
    AttributeKey,
    AttributeSelection,
    AttributeValueType,
    Catalog,
    Category,
    OrderLineProduct,
    ReferencedProductKey,
    to_decimal,
)
from apps.orders.domain.money import to_canonical_or_raw

logger = logging.getLogger(__name__)


class AttributePriceComposer:
    """
    Domain service resolving unit prices.

    Steps:
    1. Start from the line's base price (canonical)
    2. Add the adjustments of Number / Select / MultipleSelect selections
    3. For every ProductRef attribute, add each referenced product's price and
       its own adjustments (per-instance edits, else the product's defaults)
    """

    @staticmethod
    def attribute_adjustments(
        selections: Mapping[AttributeKey, AttributeSelection],
        category: Category,
        snapshot: ExchangeRateSnapshot
    ) -> Decimal:
        """
        Sum the canonical adjustments of non-ProductRef selections.

        Number attributes contribute their value directly; the others look up
        the selected value(s) by id or label. Unknown keys and values add nothing.
        """
        total = ZERO

        for key, selected in selections.items():
            definition = category.get_attribute(key)
            if definition is None:
                logger.debug("Attribute %s not defined in category %s", key.title, category.name)
                continue

            if definition.value_type is AttributeValueType.PRODUCT_REF:
                continue

            if definition.value_type is AttributeValueType.NUMBER:
                number = to_decimal(selected)
                if number is None:
                    logger.debug("Non-numeric value %r for attribute %s", selected, key.title)
                    continue
                total += number
                continue

            raw_values = selected if isinstance(selected, tuple) else (selected,)
            for raw in raw_values:
                value = definition.find_value(raw)
                if value is None:
                    continue
                total += to_canonical_or_raw(
                    value.price_adjustment,
                    value.price_adjustment_currency,
                    snapshot,
                )

        return total

    @staticmethod
    def referenced_products_price(
        line: OrderLineProduct,
        category: Category,
        catalog: Catalog,
        snapshot: ExchangeRateSnapshot
    ) -> Decimal:
        """
        Price of the products bundled through ProductRef attributes.

        Every value of a ProductRef attribute is a mandatory component, so it is
        always included even when the operator never touched it.
        """
        total = ZERO

        for definition in category.product_ref_attributes():
            for value in definition.values:
                if value.product_id is None:
                    continue

                product = catalog.product(value.product_id)
                if product is None:
                    logger.warning(
                        "Referenced product %s (attribute %s) not in catalog",
                        value.product_id, definition.key.title,
                    )
                    continue

                total += to_canonical_or_raw(product.price, product.price_currency, snapshot)

                product_category = catalog.category(product.category)
                if product_category is None:
                    continue

                key = ReferencedProductKey(definition.key.id, product.id)
                edits = line.referenced_attributes.get(key)
                if edits is None:
                    edits = product.attributes

                total += AttributePriceComposer.attribute_adjustments(
                    edits, product_category, snapshot
                )

        return total

    @staticmethod
    def compute_unit_price(
        line: OrderLineProduct,
        category: Optional[Category],
        catalog: Catalog,
        snapshot: ExchangeRateSnapshot
    ) -> Decimal:
        """
        Unit price in the canonical currency.

        Args:
            line: Order line with its selections
            category: The line's category; None prices the line at its base price
            catalog: Catalog used to resolve referenced products
            snapshot: Rates the order is priced with

        Returns:
            base price + attribute adjustments + referenced products
        """
        if category is None:
            logger.warning("Category %s unavailable; pricing %s at base price", line.category, line.name)
            return line.base_price

        return (
            line.base_price
            + AttributePriceComposer.attribute_adjustments(line.selected_attributes, category, snapshot)
            + AttributePriceComposer.referenced_products_price(line, category, catalog, snapshot)
        )

    @staticmethod
    def compute_line_total(
        line: OrderLineProduct,
        category: Optional[Category],
        catalog: Catalog,
        snapshot: ExchangeRateSnapshot
    ) -> Decimal:
        """Base total: unit price times quantity, plus the line markup."""
        unit_price = AttributePriceComposer.compute_unit_price(line, category, catalog, snapshot)
        return unit_price * line.quantity + line.markup
