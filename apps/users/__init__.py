"""Users app package.

Defines the custom user model with marketplace roles (renter, homeowner,
administrator) and the renter rating aggregate. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout the
project.
"""
