import string

from django.conf import settings
from django.utils.crypto import get_random_string

SLUG_ALPHABET = string.ascii_letters + string.digits


def generate_booking_code(day, sequence):
    """Human-readable booking code, e.g. ``YJS-20260201-001`` for the first booking of the day."""
    if sequence < 1:
        raise ValueError("Booking sequence starts at 1")
    return f"{settings.BOOKING_CODE_PREFIX}-{day:%Y%m%d}-{sequence:03d}"


def generate_public_slug():
    return get_random_string(settings.PUBLIC_SLUG_LENGTH, allowed_chars=SLUG_ALPHABET)
