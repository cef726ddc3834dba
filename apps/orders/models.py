"""
Model registry entry point.
Django imports `<app>.models`; the models themselves live in the infrastructure layer.
"""

from apps.orders.infrastructure.persistence.models import (  # noqa: F401
    AttributeValue,
    CatalogProduct,
    Category,
    CategoryAttribute,
)
