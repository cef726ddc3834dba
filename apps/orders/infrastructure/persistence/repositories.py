"""
Repository pattern implementation.
Reads the catalog once and maps it to immutable domain objects.
"""

import logging
from typing import List

from django.db import DatabaseError
from django.db.models import Prefetch

from apps.orders.application.mappers import catalog_from_data
from apps.orders.domain.models import Catalog
from apps.orders.infrastructure.persistence.models import (
    AttributeValue,
    CatalogProduct,
    Category,
    CategoryAttribute,
)

logger = logging.getLogger(__name__)


class CatalogRepository:
    """Repository for the Catalog aggregate (categories + products)."""

    @staticmethod
    def category_to_dict(model: Category) -> dict:
        return {
            "name": model.name,
            "max_discount": model.max_discount,
            "max_discount_currency": model.max_discount_currency,
            "attributes": [
                {
                    "id": str(attribute.id),
                    "title": attribute.title,
                    "value_type": attribute.value_type,
                    "values": [
                        {
                            "id": str(value.id),
                            "label": value.label,
                            "price_adjustment": value.price_adjustment,
                            "price_adjustment_currency": value.price_adjustment_currency,
                            "product_id": str(value.product_id) if value.product_id else None,
                        }
                        for value in attribute.values.all()
                    ],
                }
                for attribute in model.attributes.all()
            ],
        }

    @staticmethod
    def product_to_dict(model: CatalogProduct) -> dict:
        return {
            "id": str(model.id),
            "name": model.name,
            "price": model.price,
            "price_currency": model.price_currency,
            "category": model.category.name,
            "attributes": model.attributes or {},
        }

    @staticmethod
    def get_categories() -> List[Category]:
        return list(
            Category.objects.prefetch_related(
                Prefetch(
                    "attributes",
                    queryset=CategoryAttribute.objects.prefetch_related(
                        Prefetch("values", queryset=AttributeValue.objects.all())
                    ),
                )
            )
        )

    @staticmethod
    def get_products() -> List[CatalogProduct]:
        return list(CatalogProduct.objects.select_related("category"))

    @staticmethod
    def load_catalog() -> Catalog:
        """
        Read categories and products as a domain Catalog.

        A failed read yields an empty catalog ("no category / no product")
        rather than an exception.
        """
        try:
            categories = CatalogRepository.get_categories()
            products = CatalogRepository.get_products()
        except DatabaseError as e:
            logger.error("Failed to read catalog: %s", e)
            return Catalog()

        return catalog_from_data(
            [CatalogRepository.category_to_dict(c) for c in categories],
            [CatalogRepository.product_to_dict(p) for p in products],
        )
