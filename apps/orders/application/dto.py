"""
Data Transfer Objects for the orders application layer.
Amounts are kept as Decimal; `to_dict` renders them as 2-decimal strings.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from apps.orders.domain.money import round2


def _money(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(round2(value))


@dataclass
class LineBreakdownDTO:
    """Per-line pricing breakdown."""
    id: str
    catalog_product_id: str
    name: str
    category: str
    quantity: int
    unit_price: Decimal
    markup: Decimal
    base_total: Decimal
    discount: Decimal
    discount_type: str
    discount_currency: str
    discount_display: Optional[Decimal]
    total: Decimal
    selected_attributes: Dict[str, object] = field(default_factory=dict)
    referenced_attributes: List[dict] = field(default_factory=list)
    observations: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "catalog_product_id": self.catalog_product_id,
            "name": self.name,
            "category": self.category,
            "quantity": self.quantity,
            "unit_price": _money(self.unit_price),
            "markup": _money(self.markup),
            "base_total": _money(self.base_total),
            "discount": _money(self.discount),
            "discount_type": self.discount_type,
            "discount_currency": self.discount_currency,
            "discount_display": _money(self.discount_display),
            "total": _money(self.total),
            "selected_attributes": self.selected_attributes,
            "referenced_attributes": self.referenced_attributes,
            "observations": self.observations,
        }


@dataclass
class PaymentDTO:
    """A payment with its normalized canonical amount."""
    id: str
    method: str
    original_amount: Decimal
    original_currency: str
    amount: Decimal
    date: date
    exchange_rate_used: Optional[Decimal] = None
    cash_received: Optional[Decimal] = None
    change: Decimal = Decimal("0")
    change_canonical: Optional[Decimal] = None
    reference: str = ""
    bank: str = ""
    phone: str = ""
    account: str = ""
    email: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "method": self.method,
            "original_amount": _money(self.original_amount),
            "original_currency": self.original_currency,
            "amount": _money(self.amount),
            "date": self.date.isoformat(),
            "exchange_rate_used": None if self.exchange_rate_used is None else str(self.exchange_rate_used),
            "cash_received": _money(self.cash_received),
            "change": _money(self.change),
            "change_canonical": _money(self.change_canonical),
            "reference": self.reference,
            "bank": self.bank,
            "phone": self.phone,
            "account": self.account,
            "email": self.email,
        }


@dataclass
class PaymentSummaryDTO:
    total: Decimal
    total_paid: Decimal
    remaining: Decimal
    is_valid: bool
    change_due: Decimal

    def to_dict(self) -> dict:
        return {
            "total": _money(self.total),
            "total_paid": _money(self.total_paid),
            "remaining": _money(self.remaining),
            "is_valid": self.is_valid,
            "change_due": _money(self.change_due),
        }


@dataclass
class OrderQuoteDTO:
    """Computed state of a draft: totals, breakdown, projections and payments."""
    sale_type: str
    exchange_rate_snapshot: dict
    lines: List[LineBreakdownDTO]
    totals: Dict[str, Decimal]
    projections: Dict[str, Optional[Dict[str, Decimal]]]
    display_currencies: List[str]
    general_discount_type: str
    general_discount_currency: str
    general_discount_display: Optional[Decimal]
    delivery_services: dict
    payments: List[PaymentDTO]
    payment_summary: PaymentSummaryDTO
    validation_errors: List[str] = field(default_factory=list)
    observations: str = ""

    def to_dict(self) -> dict:
        return {
            "sale_type": self.sale_type,
            "exchange_rate_snapshot": self.exchange_rate_snapshot,
            "lines": [line.to_dict() for line in self.lines],
            "totals": {name: _money(value) for name, value in self.totals.items()},
            "projections": {
                currency: None if amounts is None else {
                    name: _money(value) for name, value in amounts.items()
                }
                for currency, amounts in self.projections.items()
            },
            "display_currencies": self.display_currencies,
            "general_discount_type": self.general_discount_type,
            "general_discount_currency": self.general_discount_currency,
            "general_discount_display": _money(self.general_discount_display),
            "delivery_services": self.delivery_services,
            "payments": [payment.to_dict() for payment in self.payments],
            "payment_summary": self.payment_summary.to_dict(),
            "validation_errors": self.validation_errors,
            "observations": self.observations,
        }


@dataclass
class FrozenOrderDTO(OrderQuoteDTO):
    """Finalized order handed to the persistence collaborator."""
    frozen_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["frozen_at"] = self.frozen_at.isoformat() if self.frozen_at else None
        return data
