"""
Booking engine errors

Every failure the engine reports is a BookingError subclass with a stable
``code``; the API layer turns them into responses and never has to parse
messages.
"""


class BookingError(Exception):
    """Base class for engine errors"""

    code = 'booking_error'
    default_message = 'The booking request could not be processed.'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRangeError(BookingError):
    """Check-out is not after check-in"""

    code = 'invalid_range'
    default_message = 'Check-out date must be after check-in date.'


class LeadTimeError(BookingError):
    """The minimum lead time before check-in is violated"""

    code = 'lead_time'
    default_message = 'The minimum lead time before check-in is not met.'

    def __init__(self, message: str | None = None, days_remaining: int | None = None):
        super().__init__(message)
        self.days_remaining = days_remaining


class AvailabilityError(BookingError):
    """The requested dates overlap an active reservation"""

    code = 'unavailable'
    default_message = 'Selected dates are not available.'

    def __init__(self, message: str | None = None, conflicts=()):
        super().__init__(message)
        self.conflicts = tuple(conflicts)


class NotFoundError(BookingError):
    code = 'not_found'
    default_message = 'Not found.'


class AlreadyCancelledError(BookingError):
    code = 'already_cancelled'
    default_message = 'This reservation has already been cancelled.'


class InvalidTransitionError(BookingError):
    """The reservation status does not allow the requested operation"""

    code = 'invalid_transition'
    default_message = 'This operation is not allowed in the current reservation status.'


class PermissionDeniedError(BookingError):
    code = 'permission_denied'
    default_message = 'You are not allowed to perform this operation.'


class ValidationError(BookingError):
    """Input that passed type checks but breaks an engine rule"""

    code = 'validation_error'
    default_message = 'Invalid booking data.'


class DuplicateReferenceError(BookingError):
    """Raised by the store when a reservation number is already taken"""

    code = 'duplicate_reference'
    default_message = 'Reservation number is already in use.'


class ReferenceCollisionError(BookingError):
    """No unique reservation number could be issued within the retry budget"""

    code = 'reference_collision'
    default_message = 'Could not issue a unique reservation number, please try again.'
