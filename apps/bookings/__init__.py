"""Bookings app package.

This app holds the booking engine: pricing, availability, reservation
numbers and the reservation lifecycle. The domain layer is plain Python;
the application layer runs it inside database transactions that lock the
property row, so two overlapping reservations can never both be stored.
"""
