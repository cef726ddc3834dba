"""
Django ORM models for persistence.
Infrastructure layer — technical storage detail.
"""

import uuid
from django.db import models


class BaseModel(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ForeignCurrency(models.TextChoices):
    """
    Currencies that carry a rate against the canonical currency (Bs).
    Mirrors FOREIGN_CURRENCIES in the domain.
    """

    USD = "USD", "US Dollar"
    EUR = "EUR", "Euro"


class ExchangeRate(BaseModel):

    currency = models.CharField(
        max_length=3,
        choices=ForeignCurrency.choices,
        db_index=True,
    )
    rate = models.DecimalField(
        decimal_places=6,
        max_digits=18,
        help_text="Units of Bs per 1 unit of the currency.",
    )
    effective_date = models.DateField(db_index=True)
    is_active = models.BooleanField(
        default=True,
        help_text="Only one rate per currency is active; recording a new one deactivates the rest.",
    )

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rate__gt=0),
                name="exchange_rate_positive",
            )
        ]
        ordering = ["-effective_date", "-created_at"]

    def __str__(self):
        status = "active" if self.is_active else "inactive"
        return f"1 {self.currency} = {self.rate} Bs | {self.effective_date} | {status}"
