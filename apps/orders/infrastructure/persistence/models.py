"""
Django ORM models for the catalog the order engine prices against.
Infrastructure layer — technical storage detail.
"""

from django.db import models

from apps.exchange.infrastructure.persistence.models import BaseModel


class CurrencyCode(models.TextChoices):

    BS = "Bs", "Bolívar"
    USD = "USD", "US Dollar"
    EUR = "EUR", "Euro"


class AttributeValueType(models.TextChoices):

    NUMBER = "Number", "Number"
    SELECT = "Select", "Select"
    MULTIPLE_SELECT = "MultipleSelect", "Multiple select"
    PRODUCT_REF = "Product", "Product"


class Category(BaseModel):

    name = models.CharField(max_length=120, unique=True)
    max_discount = models.DecimalField(
        decimal_places=2,
        max_digits=14,
        default=0,
        help_text="Cap for absolute per-product discounts; 0 means no cap.",
    )
    max_discount_currency = models.CharField(
        max_length=3,
        choices=CurrencyCode.choices,
        default=CurrencyCode.BS,
    )

    class Meta:
        verbose_name_plural = "categories"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(max_discount__gte=0),
                name="category_max_discount_non_negative",
            )
        ]

    def __str__(self):
        return self.name


class CategoryAttribute(BaseModel):

    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name="attributes")
    title = models.CharField(max_length=120)
    value_type = models.CharField(max_length=20, choices=AttributeValueType.choices)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["category", "position", "title"]
        unique_together = ["category", "title"]

    def __str__(self):
        return f"{self.category.name} / {self.title} ({self.value_type})"


class CatalogProduct(BaseModel):

    name = models.CharField(max_length=200)
    price = models.DecimalField(decimal_places=2, max_digits=14)
    price_currency = models.CharField(
        max_length=3,
        choices=CurrencyCode.choices,
        default=CurrencyCode.BS,
    )
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="products")
    attributes = models.JSONField(
        default=dict,
        blank=True,
        help_text="Default selections, keyed by attribute id or title.",
    )

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="catalog_product_price_non_negative",
            )
        ]

    def __str__(self):
        return f"{self.name} ({self.price} {self.price_currency})"


class AttributeValue(BaseModel):

    attribute = models.ForeignKey(CategoryAttribute, on_delete=models.CASCADE, related_name="values")
    label = models.CharField(max_length=120)
    price_adjustment = models.DecimalField(decimal_places=2, max_digits=14, default=0)
    price_adjustment_currency = models.CharField(
        max_length=3,
        choices=CurrencyCode.choices,
        default=CurrencyCode.BS,
    )
    product = models.ForeignKey(
        CatalogProduct,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="referenced_by",
        help_text="Bundled product, for ProductRef attributes.",
    )
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["attribute", "position", "label"]

    def __str__(self):
        return f"{self.attribute.title}: {self.label}"
