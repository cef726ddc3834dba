"""
Money helpers shared by the pricing services.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP

from apps.exchange.domain.models import Currency, ExchangeRateSnapshot

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def round2(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    # an inverted range collapses to the lower bound
    if upper < lower:
        return lower
    return max(lower, min(value, upper))


def to_canonical_or_raw(
    amount: Decimal,
    currency: Currency,
    snapshot: ExchangeRateSnapshot
) -> Decimal:
    """
    Convert to the canonical currency.

    Without a rate for `currency` the raw value is returned unconverted.
    This is lossy; display layers show the currency as unavailable instead.
    """
    converted = snapshot.to_canonical(amount, currency)
    if converted is None:
        logger.warning(
            "No %s rate in snapshot; using %s unconverted", currency.value, amount
        )
        return amount
    return converted

