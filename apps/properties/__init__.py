"""Properties app package.

Holds the listing record the booking engine books against: owner,
nightly price, bookable status and the property rating aggregate.
"""
