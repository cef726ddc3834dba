"""
Mappers from the catalog collaborator's plain data to domain objects.

Expected shapes:
    category: {"name", "max_discount", "max_discount_currency",
               "attributes": [{"id", "title", "value_type",
                               "values": [{"id", "label", "price_adjustment",
                                           "price_adjustment_currency", "product_id"}]}]}
    product:  {"id", "name", "price", "price_currency", "category",
               "attributes": {id-or-title: value | [values] | number}}
"""

from decimal import Decimal
from typing import Iterable, Mapping, Optional

from apps.exchange.domain.models import CANONICAL_CURRENCY, Currency
from apps.orders.domain.models import (
    ZERO,
    AttributeKey,
    AttributeValue,
    AttributeValueType,
    Catalog,
    CatalogProduct,
    Category,
    CategoryAttributeDefinition,
)


def _decimal(value, default: Decimal = ZERO) -> Decimal:
    if value in (None, ""):
        return default
    return Decimal(str(value))


def _currency(value) -> Currency:
    return Currency(value) if value else CANONICAL_CURRENCY


def attribute_value_from_dict(data: Mapping) -> AttributeValue:
    product_id = data.get("product_id")
    return AttributeValue(
        id=str(data["id"]),
        label=str(data.get("label", "")),
        price_adjustment=_decimal(data.get("price_adjustment")),
        price_adjustment_currency=_currency(data.get("price_adjustment_currency")),
        product_id=str(product_id) if product_id else None,
    )


def category_from_dict(data: Mapping) -> Category:
    attributes = tuple(
        CategoryAttributeDefinition(
            key=AttributeKey(id=str(attr["id"]), title=str(attr.get("title", attr["id"]))),
            value_type=AttributeValueType(attr["value_type"]),
            values=tuple(attribute_value_from_dict(v) for v in attr.get("values", ())),
        )
        for attr in data.get("attributes", ())
    )
    return Category(
        name=data["name"],
        attributes=attributes,
        max_discount=_decimal(data.get("max_discount")),
        max_discount_currency=_currency(data.get("max_discount_currency")),
    )


def product_from_dict(data: Mapping, category: Optional[Category]) -> CatalogProduct:
    """
    Build a catalog product. Its default attributes are resolved against
    `category`; without one they are dropped.
    """
    raw_attributes = data.get("attributes") or {}
    return CatalogProduct(
        id=str(data["id"]),
        name=data.get("name", ""),
        price=_decimal(data.get("price")),
        price_currency=_currency(data.get("price_currency")),
        category=data.get("category", ""),
        attributes=category.resolve_selections(raw_attributes) if category else {},
    )


def catalog_from_data(
    categories: Iterable[Mapping],
    products: Iterable[Mapping]
) -> Catalog:
    by_name = {c.name: c for c in (category_from_dict(data) for data in categories)}
    by_id = {}
    for data in products:
        product = product_from_dict(data, by_name.get(data.get("category", "")))
        by_id[product.id] = product
    return Catalog(categories=by_name, products=by_id)
