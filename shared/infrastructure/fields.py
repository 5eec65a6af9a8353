"""
Custom Django model fields for sensitive data.

EncryptedCharField encrypts on the way into the database and decrypts on
the way out, so application code only ever handles plaintext.
"""

import logging

from cryptography.fernet import InvalidToken
from django.db import models

from .encryption import decrypt_string, encrypt_string

logger = logging.getLogger(__name__)


class EncryptedCharField(models.TextField):
    """Text column holding a Fernet token of the assigned value"""

    description = "Encrypted text field"

    def __init__(self, *args, **kwargs):
        # ciphertext is longer than the plaintext, so the length limit is
        # only validated, never used for the column
        self.max_length_validation = kwargs.pop('max_length', None)
        super().__init__(*args, **kwargs)

    def deconstruct(self):
        name, path, args, kwargs = super().deconstruct()
        if self.max_length_validation is not None:
            kwargs['max_length'] = self.max_length_validation
        return name, path, args, kwargs

    def from_db_value(self, value, expression, connection):
        if value is None:
            return value
        try:
            return decrypt_string(value)
        except InvalidToken:
            logger.error("Could not decrypt %s, was ENCRYPTION_KEY rotated?", self.name)
            return ''

    def get_prep_value(self, value):
        if value is None or value == '':
            return ''
        return encrypt_string(str(value))

    def to_python(self, value):
        if value is None:
            return value
        return str(value)
