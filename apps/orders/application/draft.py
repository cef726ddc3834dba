"""
In-memory order draft.

The draft owns the order being assembled by a single operator. Domain
objects are immutable; every mutation swaps in a new Order and re-derives
the totals from scratch, clamping stored discounts to their new ceilings.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Mapping, Optional
from uuid import uuid4

from apps.exchange.domain.models import (
    CANONICAL_CURRENCY,
    Currency,
    ExchangeRate,
    ExchangeRateSnapshot,
)
from apps.exchange.domain.services import ExchangeRateService
from apps.orders.application.dto import (
    FrozenOrderDTO,
    LineBreakdownDTO,
    OrderQuoteDTO,
    PaymentDTO,
    PaymentSummaryDTO,
)
from apps.orders.domain.discounts import DiscountEngine
from apps.orders.domain.exceptions import (
    LineNotFoundError,
    OrderValidationError,
    PaymentNotFoundError,
    ProductNotFoundError,
)
from apps.orders.domain.models import (
    ZERO,
    AttributeSelection,
    AttributeKey,
    Catalog,
    DeliveryServices,
    DiscountType,
    Order,
    OrderLineProduct,
    Payment,
    PaymentDetails,
    PaymentMethod,
    PaymentSummary,
    ReferencedProductKey,
    SaleType,
    ServiceCharge,
    Totals,
)
from apps.orders.domain.money import to_canonical_or_raw
from apps.orders.domain.payments import PaymentReconciliation
from apps.orders.domain.totals import TotalsAggregator

logger = logging.getLogger(__name__)

LINE_FIELDS = ("quantity", "selected_attributes", "referenced_attributes", "markup", "observations")
PAYMENT_FIELDS = ("method", "original_amount", "original_currency", "date", "details")


def _selections_to_dict(selections: Mapping[AttributeKey, AttributeSelection]) -> dict:
    """Title-keyed selections, in the raw shape `add_product` accepts."""
    return {
        key.title: list(value) if isinstance(value, tuple) else str(value)
        for key, value in selections.items()
    }


class OrderDraft:
    """
    Single-editor order wizard state.

    Usage:
        draft = OrderDraft.start(catalog, ExchangeRateRepository.load_domain_rates())
        line = draft.add_product("sofa-1")
        draft.set_product_discount(line.id, Decimal("10"), DiscountType.PERCENTAGE)
        draft.add_payment(PaymentMethod.ZELLE, Decimal("20"), Currency.USD)
        frozen = draft.freeze()
    """

    def __init__(
        self,
        catalog: Catalog,
        order: Order,
        display_currencies: Iterable[Currency] = ()
    ):
        self._catalog = catalog
        self._order = order
        self._display_currencies = TotalsAggregator.display_currencies(
            display_currencies, order.exchange_rate_snapshot
        )
        self._totals: Optional[Totals] = None
        self._recompute()

    @classmethod
    def start(
        cls,
        catalog: Catalog,
        recorded_rates: Iterable[ExchangeRate],
        as_of: Optional[date] = None,
        snapshot: Optional[ExchangeRateSnapshot] = None
    ) -> "OrderDraft":
        """Open a new draft, capturing the rates that apply on `as_of`."""
        snapshot = ExchangeRateService.resolve_rates(
            as_of or date.today(), recorded_rates, snapshot
        )
        return cls(catalog, Order(exchange_rate_snapshot=snapshot))

    @classmethod
    def reopen(cls, catalog: Catalog, order: Order) -> "OrderDraft":
        """Edit an existing order; its snapshot stays authoritative."""
        return cls(catalog, order)

    @classmethod
    def assemble(
        cls,
        payload: Mapping,
        catalog: Catalog,
        recorded_rates: Iterable[ExchangeRate]
    ) -> "OrderDraft":
        """
        Replay a posted draft (validated API data) into a new OrderDraft.

        Raises:
            ProductNotFoundError: A line references a product outside the catalog
        """
        snapshot_data = payload.get("exchange_rate_snapshot")
        snapshot = ExchangeRateSnapshot.from_dict(snapshot_data) if snapshot_data is not None else None

        draft = cls.start(catalog, recorded_rates, payload.get("as_of"), snapshot)
        draft.set_sale_type(SaleType(payload.get("sale_type", SaleType.LAYAWAY.value)))
        draft.set_observations(payload.get("observations", ""))

        for code in payload.get("display_currencies", ()):
            currency = Currency(code)
            if currency not in draft.display_currencies:
                draft.toggle_currency(currency)

        services = payload.get("delivery_services") or {}
        draft.set_delivery_services(DeliveryServices(**{
            name: ServiceCharge(
                enabled=bool(services[name].get("enabled", False)),
                cost=Decimal(str(services[name].get("cost", 0))),
            )
            for name in ("express", "haulage", "assembly")
            if name in services
        }))

        for line_data in payload.get("lines", ()):
            line = draft.add_product(
                line_data["catalog_product_id"],
                quantity=line_data.get("quantity", 1),
                selected_attributes=line_data.get("selected_attributes"),
                referenced_attributes=line_data.get("referenced_attributes"),
                markup=Decimal(str(line_data.get("markup", 0))),
                observations=line_data.get("observations", ""),
            )
            discount = line_data.get("discount")
            if discount:
                draft.set_product_discount(
                    line.id,
                    Decimal(str(discount.get("value", 0))),
                    DiscountType(discount.get("type", DiscountType.AMOUNT.value)),
                    Currency(discount.get("currency", CANONICAL_CURRENCY.value)),
                )

        general = payload.get("general_discount")
        if general:
            draft.set_general_discount(
                Decimal(str(general.get("value", 0))),
                DiscountType(general.get("type", DiscountType.AMOUNT.value)),
                Currency(general.get("currency", CANONICAL_CURRENCY.value)),
            )

        for payment_data in payload.get("payments", ()):
            details = payment_data.get("details") or {}
            draft.add_payment(
                PaymentMethod(payment_data["method"]),
                Decimal(str(payment_data["amount"])),
                Currency(payment_data.get("currency", CANONICAL_CURRENCY.value)),
                payment_date=payment_data.get("date"),
                details=PaymentDetails(**details),
            )

        return draft

    @property
    def order(self) -> Order:
        return self._order

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def snapshot(self) -> ExchangeRateSnapshot:
        return self._order.exchange_rate_snapshot

    @property
    def totals(self) -> Totals:
        return self._totals

    @property
    def display_currencies(self) -> list[Currency]:
        return list(self._display_currencies)

    @property
    def payment_summary(self) -> PaymentSummary:
        return PaymentReconciliation.reconcile(self._totals.total, self._order.payments)

    @property
    def is_payments_valid(self) -> bool:
        return self.payment_summary.is_valid

    # Lines

    def add_product(
        self,
        catalog_product_id: str,
        quantity: int = 1,
        selected_attributes: Optional[Mapping] = None,
        referenced_attributes=None,
        markup: Decimal = ZERO,
        observations: str = ""
    ) -> OrderLineProduct:
        """
        Add a catalog product as a new line.

        Without `selected_attributes` the product's own defaults are used.
        `referenced_attributes` holds the edits made on ProductRef instances,
        either as `{ReferencedProductKey: raw selections}` or as a list of
        `{"attribute", "product_id", "selections"}` entries.
        """
        product = self._catalog.product(catalog_product_id)
        if product is None:
            raise ProductNotFoundError(catalog_product_id)

        category = self._catalog.category(product.category)
        if selected_attributes is None:
            selections = product.attributes
        elif category is not None:
            selections = category.resolve_selections(selected_attributes)
        else:
            selections = {}

        line = OrderLineProduct(
            id=uuid4().hex,
            catalog_product_id=product.id,
            name=product.name,
            category=product.category,
            base_price=to_canonical_or_raw(product.price, product.price_currency, self.snapshot),
            quantity=quantity,
            selected_attributes=selections,
            referenced_attributes=self._resolve_referenced(product.category, referenced_attributes),
            markup=markup,
            observations=observations,
        )
        return self.add_line(line)

    def add_line(self, line: OrderLineProduct) -> OrderLineProduct:
        self._set_order(lines=self._order.lines + (line,))
        return self._order.find_line(line.id)

    def update_line(self, line_id: str, **changes) -> OrderLineProduct:
        """
        Change quantity, selections, markup or observations of a line.
        Raw selections are resolved against the line's category.
        """
        line = self._get_line(line_id)
        unknown = set(changes) - set(LINE_FIELDS)
        if unknown:
            raise TypeError(f"Cannot update line fields: {', '.join(sorted(unknown))}")

        if "selected_attributes" in changes:
            category = self._catalog.category(line.category)
            raw = changes["selected_attributes"]
            changes["selected_attributes"] = category.resolve_selections(raw) if category else {}
        if "referenced_attributes" in changes:
            changes["referenced_attributes"] = self._resolve_referenced(
                line.category, changes["referenced_attributes"]
            )

        self._replace_line(replace(line, **changes))
        return self._order.find_line(line_id)

    def remove_line(self, line_id: str) -> None:
        self._get_line(line_id)
        self._set_order(lines=tuple(l for l in self._order.lines if l.id != line_id))

    # Discounts

    def set_product_discount(
        self,
        line_id: str,
        raw_value: Decimal,
        discount_type: DiscountType,
        currency: Currency = CANONICAL_CURRENCY
    ) -> OrderLineProduct:
        line = self._get_line(line_id)
        updated = DiscountEngine.set_product_discount(
            line,
            raw_value,
            discount_type,
            currency,
            self._totals.for_line(line_id).base_total,
            self._catalog.category(line.category),
            self.snapshot,
        )
        self._replace_line(updated)
        return self._order.find_line(line_id)

    def switch_product_discount_type(
        self,
        line_id: str,
        discount_type: DiscountType,
        currency: Optional[Currency] = None
    ) -> OrderLineProduct:
        line = self._get_line(line_id)
        updated = DiscountEngine.switch_product_discount_type(
            line,
            discount_type,
            self._totals.for_line(line_id).base_total,
            self._catalog.category(line.category),
            self.snapshot,
            currency,
        )
        self._replace_line(updated)
        return self._order.find_line(line_id)

    def product_discount_display(self, line_id: str) -> Optional[Decimal]:
        line = self._get_line(line_id)
        return DiscountEngine.display_value(
            line.discount,
            line.discount_type,
            line.discount_currency,
            self._totals.for_line(line_id).base_total,
            self.snapshot,
        )

    def set_general_discount(
        self,
        raw_value: Decimal,
        discount_type: DiscountType,
        currency: Currency = CANONICAL_CURRENCY
    ) -> Decimal:
        discount = DiscountEngine.compute_discount(
            raw_value,
            discount_type,
            currency,
            self._totals.subtotal_after_line_discounts,
            self.snapshot,
        )
        self._set_order(
            general_discount=discount,
            general_discount_type=discount_type,
            general_discount_currency=currency,
        )
        return self._order.general_discount

    def switch_general_discount_type(
        self,
        discount_type: DiscountType,
        currency: Optional[Currency] = None
    ) -> Decimal:
        self._set_order(
            general_discount_type=discount_type,
            general_discount_currency=currency or self._order.general_discount_currency,
        )
        return self._order.general_discount

    def general_discount_display(self) -> Optional[Decimal]:
        return DiscountEngine.display_value(
            self._order.general_discount,
            self._order.general_discount_type,
            self._order.general_discount_currency,
            self._totals.subtotal_after_line_discounts,
            self.snapshot,
        )

    # Payments

    def add_payment(
        self,
        method: PaymentMethod,
        original_amount: Decimal,
        currency: Currency = CANONICAL_CURRENCY,
        payment_date: Optional[date] = None,
        details: Optional[PaymentDetails] = None
    ) -> Payment:
        if method.is_digital_wallet:
            currency = Currency.USD

        payment = PaymentReconciliation.normalize_amount(
            Payment(
                id=uuid4().hex,
                method=method,
                original_amount=original_amount,
                original_currency=currency,
                date=payment_date or date.today(),
                details=details or PaymentDetails(),
            ),
            self.snapshot,
        )
        self._set_order(payments=self._order.payments + (payment,))
        return payment

    def update_payment(self, payment_id: str, **changes) -> Payment:
        """
        Edit a payment and re-normalize it. Changing the currency drops the
        rate stored for the previous one.
        """
        payment = self._get_payment(payment_id)
        unknown = set(changes) - set(PAYMENT_FIELDS)
        if unknown:
            raise TypeError(f"Cannot update payment fields: {', '.join(sorted(unknown))}")

        method = changes.get("method", payment.method)
        if method.is_digital_wallet:
            changes["original_currency"] = Currency.USD

        currency = changes.get("original_currency", payment.original_currency)
        if currency is not payment.original_currency:
            details = changes.get("details", payment.details)
            changes["details"] = replace(details, exchange_rate_used=None)

        updated = PaymentReconciliation.normalize_amount(replace(payment, **changes), self.snapshot)
        self._set_order(payments=tuple(
            updated if p.id == payment_id else p for p in self._order.payments
        ))
        return updated

    def remove_payment(self, payment_id: str) -> None:
        self._get_payment(payment_id)
        self._set_order(payments=tuple(p for p in self._order.payments if p.id != payment_id))

    # Order settings

    def set_delivery_services(self, delivery_services: DeliveryServices) -> None:
        self._set_order(delivery_services=delivery_services)

    def set_sale_type(self, sale_type: SaleType) -> None:
        self._set_order(sale_type=sale_type)

    def set_observations(self, observations: str) -> None:
        self._set_order(observations=observations)

    def toggle_currency(self, currency: Currency) -> list[Currency]:
        """Add or remove a display currency; see TotalsAggregator.toggle_currency."""
        self._display_currencies = TotalsAggregator.toggle_currency(
            self._display_currencies, currency, self.snapshot
        )
        return self.display_currencies

    def projected_totals(self) -> dict[Currency, Optional[dict[str, Decimal]]]:
        return TotalsAggregator.project_totals(
            self._totals, self._display_currencies, self.snapshot
        )

    # Finalization

    def validation_errors(self) -> list[str]:
        errors = []
        if not self._order.lines:
            errors.append("The order has no products")
        if not self._order.payments:
            errors.append("The order has no payments")
        if self._order.sale_type.requires_full_payment and not self.is_payments_valid:
            summary = self.payment_summary
            errors.append(
                f"Payments do not match the order total for a cash sale "
                f"(remaining {summary.remaining:.2f})"
            )
        return errors

    def quote(self) -> OrderQuoteDTO:
        return OrderQuoteDTO(**self._quote_fields())

    def freeze(self) -> FrozenOrderDTO:
        """
        Finalize the order for persistence.

        Raises:
            OrderValidationError: The order has no lines or no payments, or is
                a cash sale whose payments do not cover the total
        """
        errors = self.validation_errors()
        if errors:
            raise OrderValidationError(errors)
        logger.info(
            "Order frozen: %d line(s), total %s", len(self._order.lines), self._totals.total
        )
        return FrozenOrderDTO(**self._quote_fields(), frozen_at=datetime.now(timezone.utc))

    # Internals

    def _get_line(self, line_id: str) -> OrderLineProduct:
        line = self._order.find_line(line_id)
        if line is None:
            raise LineNotFoundError(line_id)
        return line

    def _get_payment(self, payment_id: str) -> Payment:
        payment = self._order.find_payment(payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        return payment

    def _replace_line(self, updated: OrderLineProduct) -> None:
        self._set_order(lines=tuple(
            updated if l.id == updated.id else l for l in self._order.lines
        ))

    def _set_order(self, **changes) -> None:
        self._order = replace(self._order, **changes)
        self._recompute()

    def _recompute(self) -> None:
        snapshot = self.snapshot
        lines = []
        for line in self._order.lines:
            base_total = TotalsAggregator.line_totals(line, self._catalog, snapshot).base_total
            discount = DiscountEngine.clamp_to_ceiling(line.discount, base_total)
            lines.append(line if discount == line.discount else replace(line, discount=discount))

        order = replace(self._order, lines=tuple(lines))
        totals = TotalsAggregator.derive_totals(order, self._catalog)
        self._order = replace(order, general_discount=totals.general_discount)
        self._totals = totals

    def _resolve_referenced(
        self,
        category_name: str,
        raw
    ) -> dict[ReferencedProductKey, Mapping[AttributeKey, AttributeSelection]]:
        """
        Resolve ProductRef edits. Attribute keys are resolved against the
        line's category and selections against the referenced product's.
        """
        if not raw:
            return {}

        if isinstance(raw, Mapping):
            entries = [
                {"attribute": key.attribute_id, "product_id": key.referenced_product_id, "selections": edits}
                for key, edits in raw.items()
            ]
        else:
            entries = list(raw)

        category = self._catalog.category(category_name)
        resolved = {}
        for entry in entries:
            attribute_key = category.resolve_key(entry["attribute"]) if category else None
            product = self._catalog.product(entry["product_id"])
            if attribute_key is None or product is None:
                logger.debug("Dropping referenced edits for %s / %s", entry["attribute"], entry["product_id"])
                continue
            product_category = self._catalog.category(product.category)
            if product_category is None:
                continue
            resolved[ReferencedProductKey(attribute_key.id, product.id)] = (
                product_category.resolve_selections(entry.get("selections") or {})
            )
        return resolved

    def _quote_fields(self) -> dict:
        order = self._order
        totals = self._totals
        snapshot = self.snapshot

        lines = []
        for line in order.lines:
            line_totals = totals.for_line(line.id)
            lines.append(LineBreakdownDTO(
                id=line.id,
                catalog_product_id=line.catalog_product_id,
                name=line.name,
                category=line.category,
                quantity=line.quantity,
                unit_price=line_totals.unit_price,
                markup=line.markup,
                base_total=line_totals.base_total,
                discount=line_totals.discount,
                discount_type=line.discount_type.value,
                discount_currency=line.discount_currency.value,
                discount_display=self.product_discount_display(line.id),
                total=line_totals.total,
                selected_attributes=_selections_to_dict(line.selected_attributes),
                referenced_attributes=[
                    {
                        "attribute": key.attribute_id,
                        "product_id": key.referenced_product_id,
                        "selections": _selections_to_dict(edits),
                    }
                    for key, edits in line.referenced_attributes.items()
                ],
                observations=line.observations,
            ))

        payments = [
            PaymentDTO(
                id=p.id,
                method=p.method.value,
                original_amount=p.original_amount,
                original_currency=p.original_currency.value,
                amount=p.amount,
                date=p.date,
                exchange_rate_used=p.details.exchange_rate_used,
                cash_received=p.details.cash_received,
                change=PaymentReconciliation.cash_change(p),
                change_canonical=PaymentReconciliation.cash_change_canonical(p, snapshot),
                reference=p.details.reference,
                bank=p.details.bank,
                phone=p.details.phone,
                account=p.details.account,
                email=p.details.email,
            )
            for p in order.payments
        ]

        summary = self.payment_summary
        services = order.delivery_services

        return {
            "sale_type": order.sale_type.value,
            "exchange_rate_snapshot": snapshot.to_dict(),
            "lines": lines,
            "totals": totals.amounts(),
            "projections": {
                currency.value: amounts
                for currency, amounts in self.projected_totals().items()
            },
            "display_currencies": [c.value for c in self._display_currencies],
            "general_discount_type": order.general_discount_type.value,
            "general_discount_currency": order.general_discount_currency.value,
            "general_discount_display": self.general_discount_display(),
            "delivery_services": {
                name: {"enabled": charge.enabled, "cost": str(charge.cost)}
                for name, charge in (
                    ("express", services.express),
                    ("haulage", services.haulage),
                    ("assembly", services.assembly),
                )
            },
            "payments": payments,
            "payment_summary": PaymentSummaryDTO(
                total=summary.total,
                total_paid=summary.total_paid,
                remaining=summary.remaining,
                is_valid=summary.is_valid,
                change_due=summary.change_due,
            ),
            "validation_errors": self.validation_errors(),
            "observations": order.observations,
        }
