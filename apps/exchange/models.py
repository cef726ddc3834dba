"""
Model registry entry point.
Django imports `<app>.models`; the models themselves live in the infrastructure layer.
"""

from apps.exchange.infrastructure.persistence.models import ExchangeRate  # noqa: F401
