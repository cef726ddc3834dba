"""
Payment normalization and reconciliation against the order total.
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional

from apps.exchange.domain.models import ExchangeRateSnapshot
from apps.orders.domain.models import PAYMENT_TOLERANCE, ZERO, Payment, PaymentSummary

logger = logging.getLogger(__name__)


class PaymentReconciliation:

    @staticmethod
    def normalize_amount(payment: Payment, snapshot: ExchangeRateSnapshot) -> Payment:
        """
        Derive the canonical amount of a payment.

        A rate already stored on the payment wins over the snapshot so a
        reopened order keeps its history. The rate used is written back to
        `details.exchange_rate_used`. Without any rate the raw amount is
        credited as is.
        """
        currency = payment.original_currency

        if currency.is_canonical:
            return replace(
                payment,
                amount=payment.original_amount,
                details=replace(payment.details, exchange_rate_used=None),
            )

        rate = payment.details.exchange_rate_used or snapshot.rate_for(currency)
        if rate is None:
            logger.warning(
                "No %s rate for payment %s; crediting %s unconverted",
                currency.value, payment.id, payment.original_amount,
            )
            return replace(payment, amount=payment.original_amount)

        return replace(
            payment,
            amount=payment.original_amount * rate,
            details=replace(payment.details, exchange_rate_used=rate),
        )

    @staticmethod
    def cash_change(payment: Payment) -> Decimal:
        """Change owed for a cash payment, in the payment currency."""
        received = payment.details.cash_received
        if not payment.method.is_cash or received is None:
            return ZERO
        return max(received - payment.original_amount, ZERO)

    @staticmethod
    def cash_change_canonical(payment: Payment, snapshot: ExchangeRateSnapshot) -> Optional[Decimal]:
        change = PaymentReconciliation.cash_change(payment)
        if payment.original_currency.is_canonical:
            return change
        rate = payment.details.exchange_rate_used or snapshot.rate_for(payment.original_currency)
        if rate is None:
            return None
        return change * rate

    @staticmethod
    def total_paid(payments: Iterable[Payment]) -> Decimal:
        return sum((p.amount for p in payments), ZERO)

    @staticmethod
    def reconcile(total: Decimal, payments: Iterable[Payment]) -> PaymentSummary:
        """
        Compare the credited payments to the order total.

        Read only: a mismatch is reported, never corrected.
        """
        paid = PaymentReconciliation.total_paid(payments)
        remaining = total - paid
        return PaymentSummary(
            total=total,
            total_paid=paid,
            remaining=remaining,
            is_valid=abs(remaining) < PAYMENT_TOLERANCE,
        )
