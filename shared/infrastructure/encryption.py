"""
Encryption utilities

Symmetric (Fernet) encryption for sensitive values stored at rest, such
as the payment token captured on guest checkout.
"""

import base64
import hashlib

from cryptography.fernet import Fernet
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


def get_encryption_key() -> bytes:
    """
    Derive the Fernet key from settings.ENCRYPTION_KEY

    Any string is accepted and hashed down to the 32 bytes Fernet needs.
    """
    key = getattr(settings, 'ENCRYPTION_KEY', None)

    if not key:
        raise ImproperlyConfigured("ENCRYPTION_KEY is not configured")

    if isinstance(key, str):
        key = base64.urlsafe_b64encode(hashlib.sha256(key.encode()).digest())

    return key


def encrypt_string(plaintext: str) -> str:
    if not plaintext:
        return ''
    return Fernet(get_encryption_key()).encrypt(plaintext.encode()).decode()


def decrypt_string(encrypted: str) -> str:
    if not encrypted:
        return ''
    return Fernet(get_encryption_key()).decrypt(encrypted.encode()).decode()


def mask_secret(value: str, visible: int = 4) -> str:
    """Keep only the last ``visible`` characters, e.g. '************4242'"""
    if not value:
        return ''
    tail = value[-visible:]
    return '*' * max(len(value) - visible, 0) + tail
