"""
Pure domain entities (POPOs) for order pricing.
No dependency on Django or the ORM.

Every monetary field is expressed in the canonical currency unless its name
says otherwise (`original_amount`, `price` + `price_currency`, ...).
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from apps.exchange.domain.models import CANONICAL_CURRENCY, Currency, ExchangeRateSnapshot

TAX_RATE = Decimal("0.16")
PAYMENT_TOLERANCE = Decimal("0.01")

ZERO = Decimal("0")

# A selection is a value id/label, a list of them, or a plain number.
AttributeSelection = Union[str, Decimal, Tuple[str, ...]]


def to_decimal(value) -> Optional[Decimal]:
    """Coerce a raw numeric input to Decimal; None if it is not a number."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


class AttributeValueType(str, Enum):
    NUMBER = "Number"
    SELECT = "Select"
    MULTIPLE_SELECT = "MultipleSelect"
    PRODUCT_REF = "Product"


class DiscountType(str, Enum):
    AMOUNT = "amount"
    PERCENTAGE = "percentage"


class SaleType(str, Enum):
    LAYAWAY = "layaway"
    DELIVERY = "delivery"
    CASH = "cash"

    @property
    def requires_full_payment(self) -> bool:
        return self is SaleType.CASH


class PaymentMethod(str, Enum):
    MOBILE_PAYMENT = "mobile_payment"
    CASH = "cash"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    CASHEA = "cashea"
    BINANCE = "binance"
    AIRTM = "airtm"
    ZELLE = "zelle"
    PAYPAL = "paypal"
    MERCANTIL_PANAMA = "mercantil_panama"
    BANESCO_PANAMA = "banesco_panama"
    FACEBANK = "facebank"

    @property
    def is_digital_wallet(self) -> bool:
        return self in DIGITAL_WALLET_METHODS

    @property
    def is_cash(self) -> bool:
        return self is PaymentMethod.CASH


# Wallets settled in dollars; their payments are always USD.
DIGITAL_WALLET_METHODS = frozenset({
    PaymentMethod.ZELLE,
    PaymentMethod.PAYPAL,
    PaymentMethod.MERCANTIL_PANAMA,
    PaymentMethod.BANESCO_PANAMA,
    PaymentMethod.FACEBANK,
})


@dataclass(frozen=True)
class AttributeKey:
    """Identity of a category attribute, resolved once from an id or a title."""

    id: str
    title: str

    def matches(self, raw_key: str) -> bool:
        return raw_key == self.id or raw_key == self.title


@dataclass(frozen=True)
class ReferencedProductKey:
    """
    Key of the attribute edits made on one referenced product instance.

    The same catalog product can be referenced by two attributes, each with
    its own customizations.
    """

    attribute_id: str
    referenced_product_id: str


@dataclass(frozen=True)
class AttributeValue:

    id: str
    label: str
    price_adjustment: Decimal = ZERO
    price_adjustment_currency: Currency = CANONICAL_CURRENCY
    product_id: Optional[str] = None

    def matches(self, raw: str) -> bool:
        return raw == self.id or raw == self.label


@dataclass(frozen=True)
class CategoryAttributeDefinition:

    key: AttributeKey
    value_type: AttributeValueType
    values: Tuple[AttributeValue, ...] = ()

    def find_value(self, raw) -> Optional[AttributeValue]:
        raw = str(raw)
        return next((v for v in self.values if v.matches(raw)), None)


@dataclass(frozen=True)
class Category:

    name: str
    attributes: Tuple[CategoryAttributeDefinition, ...] = ()
    max_discount: Decimal = ZERO
    max_discount_currency: Currency = CANONICAL_CURRENCY

    def __post_init__(self):
        if self.max_discount < 0:
            raise ValueError(f"max_discount must be non-negative, got {self.max_discount}")

    def resolve_key(self, raw_key) -> Optional[AttributeKey]:
        """Resolve a raw key: ids win over titles."""
        raw_key = str(raw_key)
        for definition in self.attributes:
            if definition.key.id == raw_key:
                return definition.key
        for definition in self.attributes:
            if definition.key.title == raw_key:
                return definition.key
        return None

    def get_attribute(self, key: AttributeKey) -> Optional[CategoryAttributeDefinition]:
        return next((d for d in self.attributes if d.key == key), None)

    def product_ref_attributes(self) -> list[CategoryAttributeDefinition]:
        return [d for d in self.attributes if d.value_type is AttributeValueType.PRODUCT_REF]

    def resolve_selections(self, raw: Mapping) -> Mapping[AttributeKey, AttributeSelection]:
        """
        Turn `{id-or-title: value}` into `{AttributeKey: selection}`.
        Keys that do not belong to this category are dropped.
        """
        resolved = {}
        for raw_key, raw_value in (raw or {}).items():
            key = self.resolve_key(raw_key)
            if key is None:
                continue
            if isinstance(raw_value, (list, tuple)):
                resolved[key] = tuple(str(v) for v in raw_value)
            elif isinstance(raw_value, (int, float, Decimal)) and not isinstance(raw_value, bool):
                resolved[key] = Decimal(str(raw_value))
            else:
                resolved[key] = str(raw_value)
        return _freeze(resolved)


@dataclass(frozen=True)
class CatalogProduct:

    id: str
    name: str
    price: Decimal
    price_currency: Currency
    category: str
    attributes: Mapping[AttributeKey, AttributeSelection] = field(default_factory=dict)

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"price must be non-negative, got {self.price}")
        object.__setattr__(self, "attributes", _freeze(self.attributes))


@dataclass(frozen=True)
class Catalog:
    """Read-only catalog data the pricing runs against."""

    categories: Mapping[str, Category] = field(default_factory=dict)
    products: Mapping[str, CatalogProduct] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "categories", _freeze(self.categories))
        object.__setattr__(self, "products", _freeze(self.products))

    def category(self, name: str) -> Optional[Category]:
        return self.categories.get(name)

    def product(self, product_id: str) -> Optional[CatalogProduct]:
        return self.products.get(str(product_id))


@dataclass(frozen=True)
class OrderLineProduct:

    id: str
    catalog_product_id: str
    name: str
    category: str
    base_price: Decimal
    quantity: int = 1
    selected_attributes: Mapping[AttributeKey, AttributeSelection] = field(default_factory=dict)
    referenced_attributes: Mapping[
        ReferencedProductKey, Mapping[AttributeKey, AttributeSelection]
    ] = field(default_factory=dict)
    discount: Decimal = ZERO
    discount_type: DiscountType = DiscountType.AMOUNT
    discount_currency: Currency = CANONICAL_CURRENCY
    markup: Decimal = ZERO
    observations: str = ""

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {self.quantity}")
        if self.base_price < 0:
            raise ValueError(f"base_price must be non-negative, got {self.base_price}")
        if self.discount < 0:
            raise ValueError(f"discount must be non-negative, got {self.discount}")
        if self.markup < 0:
            raise ValueError(f"markup must be non-negative, got {self.markup}")
        object.__setattr__(self, "selected_attributes", _freeze(self.selected_attributes))
        object.__setattr__(self, "referenced_attributes", _freeze({
            key: _freeze(edits) for key, edits in self.referenced_attributes.items()
        }))


@dataclass(frozen=True)
class PaymentDetails:
    """Method-specific data captured with a payment."""

    reference: str = ""
    bank: str = ""
    phone: str = ""
    account: str = ""
    email: str = ""
    exchange_rate_used: Optional[Decimal] = None
    cash_received: Optional[Decimal] = None


@dataclass(frozen=True)
class Payment:
    """
    A payment entry.

    `original_amount` / `original_currency` are what the operator typed;
    `amount` is the derived canonical value that gets summed. Use
    PaymentReconciliation.normalize_amount to derive it.
    """

    id: str
    method: PaymentMethod
    original_amount: Decimal
    original_currency: Currency
    date: date
    amount: Decimal = ZERO
    details: PaymentDetails = field(default_factory=PaymentDetails)

    def __post_init__(self):
        if self.original_amount < 0:
            raise ValueError(f"original_amount must be non-negative, got {self.original_amount}")
        if self.method.is_digital_wallet and self.original_currency is not Currency.USD:
            raise ValueError(f"{self.method.value} payments are always in USD")

    @property
    def currency(self) -> Currency:
        return self.original_currency


@dataclass(frozen=True)
class ServiceCharge:

    enabled: bool = False
    cost: Decimal = ZERO

    def __post_init__(self):
        if self.cost < 0:
            raise ValueError(f"cost must be non-negative, got {self.cost}")

    @property
    def charged(self) -> Decimal:
        return self.cost if self.enabled else ZERO


@dataclass(frozen=True)
class DeliveryServices:
    """Delivery and service costs added on top of the taxed subtotal."""

    express: ServiceCharge = field(default_factory=ServiceCharge)
    haulage: ServiceCharge = field(default_factory=ServiceCharge)
    assembly: ServiceCharge = field(default_factory=ServiceCharge)

    @property
    def cost(self) -> Decimal:
        return self.express.charged + self.haulage.charged + self.assembly.charged


@dataclass(frozen=True)
class Order:

    lines: Tuple[OrderLineProduct, ...] = ()
    general_discount: Decimal = ZERO
    general_discount_type: DiscountType = DiscountType.AMOUNT
    general_discount_currency: Currency = CANONICAL_CURRENCY
    payments: Tuple[Payment, ...] = ()
    exchange_rate_snapshot: ExchangeRateSnapshot = field(default_factory=ExchangeRateSnapshot)
    delivery_services: DeliveryServices = field(default_factory=DeliveryServices)
    tax_rate: Decimal = TAX_RATE
    sale_type: SaleType = SaleType.LAYAWAY
    observations: str = ""

    def __post_init__(self):
        if self.general_discount < 0:
            raise ValueError(f"general_discount must be non-negative, got {self.general_discount}")

    @property
    def delivery_cost(self) -> Decimal:
        return self.delivery_services.cost

    def find_line(self, line_id: str) -> Optional[OrderLineProduct]:
        return next((line for line in self.lines if line.id == line_id), None)

    def find_payment(self, payment_id: str) -> Optional[Payment]:
        return next((p for p in self.payments if p.id == payment_id), None)


@dataclass(frozen=True)
class LineTotals:

    line_id: str
    unit_price: Decimal
    base_total: Decimal
    discount: Decimal

    @property
    def total(self) -> Decimal:
        return self.base_total - self.discount


@dataclass(frozen=True)
class Totals:

    lines: Tuple[LineTotals, ...]
    subtotal_before_discounts: Decimal
    product_discount_total: Decimal
    subtotal_after_line_discounts: Decimal
    general_discount: Decimal
    subtotal: Decimal
    tax: Decimal
    delivery_cost: Decimal
    total: Decimal

    def for_line(self, line_id: str) -> Optional[LineTotals]:
        return next((lt for lt in self.lines if lt.line_id == line_id), None)

    def amounts(self) -> dict[str, Decimal]:
        """Order-level amounts, in display order."""
        return {
            "subtotal_before_discounts": self.subtotal_before_discounts,
            "product_discount_total": self.product_discount_total,
            "subtotal_after_line_discounts": self.subtotal_after_line_discounts,
            "general_discount": self.general_discount,
            "subtotal": self.subtotal,
            "tax": self.tax,
            "delivery_cost": self.delivery_cost,
            "total": self.total,
        }


@dataclass(frozen=True)
class PaymentSummary:

    total: Decimal
    total_paid: Decimal
    remaining: Decimal
    is_valid: bool

    @property
    def has_outstanding_balance(self) -> bool:
        return not self.is_valid and self.remaining > 0

    @property
    def is_overpaid(self) -> bool:
        return not self.is_valid and self.remaining < 0

    @property
    def change_due(self) -> Decimal:
        return -self.remaining if self.is_overpaid else ZERO
