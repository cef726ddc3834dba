import pytest
from decimal import Decimal
from datetime import date

from django.db import DatabaseError

from apps.exchange.domain.models import Currency, ExchangeRateSnapshot, SnapshotRate
from apps.orders.domain.models import AttributeValueType, OrderLineProduct
from apps.orders.domain.pricing import AttributePriceComposer
from apps.orders.infrastructure.persistence.models import Category
from apps.orders.infrastructure.persistence.repositories import CatalogRepository


@pytest.mark.django_db(transaction=True)
class TestCatalogRepository:
    """Tests for CatalogRepository."""

    def test_load_catalog(self, catalog_rows):
        catalog = CatalogRepository.load_catalog()

        assert set(catalog.categories) == {"Legs", "Sofas", "Misc"}
        sofa = catalog.product(str(catalog_rows["sofa"].id))
        assert sofa.price == Decimal("10")
        assert sofa.price_currency is Currency.USD
        assert [k.title for k in sofa.attributes] == ["Color"]

    def test_attributes_keep_position_order(self, catalog_rows):
        sofas = CatalogRepository.load_catalog().category("Sofas")

        assert [d.key.title for d in sofas.attributes] == ["Color", "Legs"]
        assert [v.label for v in sofas.attributes[0].values] == ["Red", "Leather"]
        assert sofas.attributes[1].value_type is AttributeValueType.PRODUCT_REF
        assert sofas.attributes[1].values[0].product_id == str(catalog_rows["legs"].id)
        assert sofas.max_discount == Decimal("100")

    def test_loaded_catalog_prices_referenced_products(self, catalog_rows):
        """
        Test the stored sofa prices as 365 + legs 50 + Gloss 20.
        """
        catalog = CatalogRepository.load_catalog()
        snapshot = ExchangeRateSnapshot(rates={
            Currency.USD: SnapshotRate(Decimal("36.50"), date(2024, 5, 21)),
        })
        sofa = catalog.product(str(catalog_rows["sofa"].id))
        line = OrderLineProduct(
            id="l1", catalog_product_id=sofa.id, name=sofa.name, category=sofa.category,
            base_price=Decimal("365.00"), selected_attributes=sofa.attributes,
        )

        unit_price = AttributePriceComposer.compute_unit_price(
            line, catalog.category("Sofas"), catalog, snapshot
        )

        assert unit_price == Decimal("435.00")

    def test_empty_catalog(self, db):
        catalog = CatalogRepository.load_catalog()

        assert dict(catalog.categories) == {}
        assert dict(catalog.products) == {}

    def test_database_error_yields_empty_catalog(self, mocker):
        mocker.patch.object(
            CatalogRepository, "get_categories", side_effect=DatabaseError("gone")
        )

        catalog = CatalogRepository.load_catalog()

        assert dict(catalog.categories) == {}

    def test_category_constraints(self, db):
        from django.db import IntegrityError

        with pytest.raises(IntegrityError):
            Category.objects.create(name="Bad", max_discount=Decimal("-1"))
