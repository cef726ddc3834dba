"""
Django Admin configuration for the catalog the orders are priced against.
"""

from django.contrib import admin

from apps.orders.infrastructure.persistence.models import (
    AttributeValue,
    CatalogProduct,
    Category,
    CategoryAttribute,
)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    """Admin interface for Category model."""

    list_display = ('name', 'max_discount', 'max_discount_currency', 'created_at')
    search_fields = ('name',)
    readonly_fields = ('id', 'created_at', 'updated_at')


@admin.register(CategoryAttribute)
class CategoryAttributeAdmin(admin.ModelAdmin):

    list_display = ('title', 'category', 'value_type', 'position')
    list_filter = ('value_type', 'category')
    search_fields = ('title', 'category__name')
    list_select_related = ('category',)


@admin.register(AttributeValue)
class AttributeValueAdmin(admin.ModelAdmin):
    """Admin interface for AttributeValue model. ProductRef values point at a catalog product."""

    list_display = ('label', 'attribute', 'price_adjustment', 'price_adjustment_currency', 'product')
    list_filter = ('attribute__category', 'price_adjustment_currency')
    search_fields = ('label', 'attribute__title')
    list_select_related = ('attribute', 'product')


@admin.register(CatalogProduct)
class CatalogProductAdmin(admin.ModelAdmin):
    """Admin interface for CatalogProduct model."""

    list_display = ('name', 'category', 'price', 'price_currency', 'created_at')
    list_filter = ('category', 'price_currency')
    search_fields = ('name',)
    readonly_fields = ('id', 'created_at', 'updated_at')
    list_select_related = ('category',)
