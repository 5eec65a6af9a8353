"""
Pricing Calculator

Pure functions computing what a stay costs and what a cancellation
refunds. Each figure is derived from nights x nightly rate and rounded to
cents once, so no figure is obtained by subtracting an already rounded one
(except the refund, which by definition is what is left of the total).
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from shared.domain.value_objects import Money, round2
from apps.bookings.domain.exceptions import InvalidRangeError, ValidationError
from apps.bookings.domain.policy import CANCELLATION_FEE_RATE, TAX_RATE


@dataclass(frozen=True)
class StayQuote:
    nights: int
    nightly_rate: Money
    subtotal: Money
    tax: Money
    total: Money


@dataclass(frozen=True)
class CancellationQuote:
    total: Money
    cancellation_fee: Money
    refund: Money


def count_nights(start_date: date, end_date: date) -> int:
    """
    Nights between check-in and check-out

    Plain dates give whole days. A datetime with a time component counts
    a started day as a full night.
    """
    if isinstance(start_date, datetime) or isinstance(end_date, datetime):
        seconds = (end_date - start_date).total_seconds()
        nights = math.ceil(seconds / 86400)
    else:
        nights = (end_date - start_date).days

    if nights <= 0:
        raise InvalidRangeError()
    return nights


def quote_stay(nightly_rate, start_date: date, end_date: date) -> StayQuote:
    """
    Price a stay

    >>> quote_stay(Decimal('100'), date(2025, 1, 1), date(2025, 1, 4)).total
    Money(336.00)
    """
    amount = nightly_rate.amount if isinstance(nightly_rate, Money) else Decimal(str(nightly_rate))
    if amount <= 0:
        raise ValidationError('Nightly rate must be positive.')
    rate = Money(amount)

    nights = count_nights(start_date, end_date)
    base = rate.amount * nights

    subtotal = round2(base)
    tax = round2(base * TAX_RATE)
    return StayQuote(
        nights=nights,
        nightly_rate=rate,
        subtotal=Money(subtotal),
        tax=Money(tax),
        total=Money(subtotal + tax),
    )


def quote_cancellation(total: Money) -> CancellationQuote:
    fee = Money(total.amount * CANCELLATION_FEE_RATE)
    return CancellationQuote(total=total, cancellation_fee=fee, refund=total - fee)
