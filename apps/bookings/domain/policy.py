"""
Booking policy constants

These values are persisted into reservations and shown on invoices, so
they are fixed in code rather than exposed as settings.
"""

from datetime import date
from decimal import Decimal

from apps.bookings.domain.exceptions import LeadTimeError

TAX_RATE = Decimal('0.12')
CANCELLATION_FEE_RATE = Decimal('0.03')

# Minimum number of days between today and the check-in date, for both
# booking and cancelling
MIN_LEAD_DAYS = 5


def days_until(start_date: date, today: date) -> int:
    return (start_date - today).days


def ensure_lead_time(start_date: date, today: date, action: str = 'book') -> None:
    """Raise LeadTimeError unless start_date is at least MIN_LEAD_DAYS away"""
    remaining = days_until(start_date, today)
    if remaining < MIN_LEAD_DAYS:
        if action == 'cancel':
            message = (
                f"Cancellation is only allowed at least {MIN_LEAD_DAYS} days before the "
                f"rental start date. This rental starts in {remaining} day(s)."
            )
        else:
            message = f"Bookings must be made at least {MIN_LEAD_DAYS} days in advance."
        raise LeadTimeError(message, days_remaining=remaining)
