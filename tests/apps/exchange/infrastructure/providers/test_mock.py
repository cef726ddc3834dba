import pytest
from decimal import Decimal
from datetime import date

from apps.exchange.domain.models import Currency
from apps.exchange.infrastructure.providers.mock import MockProvider


@pytest.fixture
def provider():
    return MockProvider()


def test_get_exchange_rate_data_success(provider):
    """
    Test that MockProvider generates a valid Bs rate for USD.
    """
    rate = provider.get_exchange_rate_data(Currency.USD, date(2024, 5, 21))

    assert rate is not None
    assert isinstance(rate, Decimal)
    # Around 36.50 Bs with ±2% variation
    assert Decimal("35.77") <= rate <= Decimal("37.23")


def test_get_exchange_rate_data_eur(provider):
    """
    Test that EUR is priced around its base rate.
    """
    rate = provider.get_exchange_rate_data(Currency.EUR, date(2024, 5, 21))

    assert Decimal("38.80") <= rate <= Decimal("40.40")


def test_get_exchange_rate_data_deterministic(provider):
    """
    Test that same inputs produce same output (deterministic based on date seed).
    """
    rate1 = provider.get_exchange_rate_data(Currency.USD, date(2024, 5, 21))
    rate2 = provider.get_exchange_rate_data(Currency.USD, date(2024, 5, 21))

    assert rate1 == rate2


def test_get_exchange_rate_data_different_dates(provider):
    """
    Test that different dates produce different rates (due to random variation).
    """
    rate1 = provider.get_exchange_rate_data(Currency.USD, date(2024, 5, 21))
    rate2 = provider.get_exchange_rate_data(Currency.USD, date(2024, 5, 22))

    assert rate1 != rate2


def test_get_exchange_rate_data_canonical_currency(provider):
    """
    Test that the canonical currency has no mock rate.
    """
    rate = provider.get_exchange_rate_data(Currency.BS, date(2024, 5, 21))

    assert rate is None


def test_get_exchange_rate_data_precision(provider):
    """
    Test that rates are rounded to 6 decimal places.
    """
    rate = provider.get_exchange_rate_data(Currency.EUR, date(2024, 5, 21))

    assert rate == rate.quantize(Decimal("0.000001"))
