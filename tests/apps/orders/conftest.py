import pytest
from decimal import Decimal
from datetime import date

from apps.exchange.domain.models import Currency, ExchangeRateSnapshot, SnapshotRate
from apps.orders.domain.models import (
    AttributeKey,
    AttributeValue,
    AttributeValueType,
    Catalog,
    CatalogProduct,
    Category,
    CategoryAttributeDefinition,
)
from apps.orders.infrastructure.persistence import models

COLOR = AttributeKey("attr-color", "Color")
EXTRAS = AttributeKey("attr-extras", "Extras")
WIDTH = AttributeKey("attr-width", "Width")
LEGS = AttributeKey("attr-legs", "Legs")
FINISH = AttributeKey("attr-finish", "Finish")


@pytest.fixture
def snapshot():
    """USD at 36.50 Bs, EUR at 40 Bs."""
    return ExchangeRateSnapshot(rates={
        Currency.USD: SnapshotRate(Decimal("36.50"), date(2024, 5, 21)),
        Currency.EUR: SnapshotRate(Decimal("40.00"), date(2024, 5, 21)),
    })


@pytest.fixture
def usd_only_snapshot():
    return ExchangeRateSnapshot(rates={
        Currency.USD: SnapshotRate(Decimal("36.50"), date(2024, 5, 21)),
    })


@pytest.fixture
def legs_category():
    return Category(
        name="Legs",
        attributes=(
            CategoryAttributeDefinition(FINISH, AttributeValueType.SELECT, (
                AttributeValue("finish-matte", "Matte"),
                AttributeValue("finish-gloss", "Gloss", Decimal("20")),
            )),
        ),
    )


@pytest.fixture
def sofas_category():
    """
    Color: Red (+0) / Leather (+10 USD)
    Extras: Pillows (+50 Bs) / Cover (+2 EUR)
    Width: number
    Legs: bundles the "legs-1" product
    Cap: 100 Bs on absolute discounts
    """
    return Category(
        name="Sofas",
        max_discount=Decimal("100"),
        attributes=(
            CategoryAttributeDefinition(COLOR, AttributeValueType.SELECT, (
                AttributeValue("color-red", "Red"),
                AttributeValue("color-leather", "Leather", Decimal("10"), Currency.USD),
            )),
            CategoryAttributeDefinition(EXTRAS, AttributeValueType.MULTIPLE_SELECT, (
                AttributeValue("extra-pillows", "Pillows", Decimal("50")),
                AttributeValue("extra-cover", "Cover", Decimal("2"), Currency.EUR),
            )),
            CategoryAttributeDefinition(WIDTH, AttributeValueType.NUMBER),
            CategoryAttributeDefinition(LEGS, AttributeValueType.PRODUCT_REF, (
                AttributeValue("legs-wood", "Wood legs", product_id="legs-1"),
            )),
        ),
    )


@pytest.fixture
def tables_category():
    return Category(name="Tables", max_discount=Decimal("100"))


@pytest.fixture
def misc_category():
    return Category(name="Misc")


@pytest.fixture
def catalog(sofas_category, legs_category, tables_category, misc_category):
    """
    sofa-1: 10 USD (365 Bs) + wood legs (50 Bs + Gloss 20 Bs by default)
    table-1: 1000 Bs, capped category
    item-861: 861 Bs, no cap
    """
    return Catalog(
        categories={
            c.name: c for c in (sofas_category, legs_category, tables_category, misc_category)
        },
        products={
            "sofa-1": CatalogProduct(
                "sofa-1", "Sofa", Decimal("10"), Currency.USD, "Sofas",
                attributes={COLOR: "Red"},
            ),
            "legs-1": CatalogProduct(
                "legs-1", "Wood legs", Decimal("50"), Currency.BS, "Legs",
                attributes={FINISH: "Gloss"},
            ),
            "table-1": CatalogProduct("table-1", "Table", Decimal("1000"), Currency.BS, "Tables"),
            "item-861": CatalogProduct("item-861", "Cabinet", Decimal("861"), Currency.BS, "Misc"),
        },
    )


@pytest.fixture
def catalog_rows(db):
    """
    Stored catalog: a sofa (10 USD) bundling wood legs (50 Bs, Gloss +20 Bs
    by default), and a 861 Bs cabinet.
    """
    models.AttributeValue.objects.all().delete()
    models.CatalogProduct.objects.all().delete()
    models.CategoryAttribute.objects.all().delete()
    models.Category.objects.all().delete()

    legs_category = models.Category.objects.create(name="Legs")
    finish = models.CategoryAttribute.objects.create(
        category=legs_category, title="Finish", value_type="Select"
    )
    models.AttributeValue.objects.create(attribute=finish, label="Matte", position=0)
    models.AttributeValue.objects.create(
        attribute=finish, label="Gloss", price_adjustment=Decimal("20"), position=1
    )
    legs = models.CatalogProduct.objects.create(
        name="Wood legs", price=Decimal("50"), category=legs_category,
        attributes={"Finish": "Gloss"},
    )

    sofas = models.Category.objects.create(name="Sofas", max_discount=Decimal("100"))
    color = models.CategoryAttribute.objects.create(
        category=sofas, title="Color", value_type="Select", position=0
    )
    models.AttributeValue.objects.create(attribute=color, label="Red", position=0)
    models.AttributeValue.objects.create(
        attribute=color, label="Leather", price_adjustment=Decimal("10"),
        price_adjustment_currency="USD", position=1,
    )
    legs_ref = models.CategoryAttribute.objects.create(
        category=sofas, title="Legs", value_type="Product", position=1
    )
    models.AttributeValue.objects.create(attribute=legs_ref, label="Wood legs", product=legs)
    sofa = models.CatalogProduct.objects.create(
        name="Sofa", price=Decimal("10"), price_currency="USD", category=sofas,
        attributes={"Color": "Red"},
    )

    misc = models.Category.objects.create(name="Misc")
    cabinet = models.CatalogProduct.objects.create(name="Cabinet", price=Decimal("861"), category=misc)

    return {"sofa": sofa, "legs": legs, "cabinet": cabinet, "sofas": sofas}
