# certificates/codes.py
import logging

from django.conf import settings
from django.utils import timezone
from django.utils.crypto import get_random_string

from .models import Certificate

logger = logging.getLogger(__name__)

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


class ValidationCodeError(Exception):
    """No unused validation code could be produced."""


def build_validation_code(prefix=None, length=None, year=None):
    prefix = prefix or settings.CERTIFICATE_CODE_PREFIX
    length = length or settings.CERTIFICATE_CODE_LENGTH
    year = year or timezone.now().year
    return f"{prefix}-{year}-{get_random_string(length, CODE_ALPHABET)}"


def generate_validation_code():
    """
    Return a validation code not used by any certificate yet.

    The unique index on ``Certificate.validation_code`` remains the final
    guard; this only keeps collisions away from the insert.
    """
    attempts = settings.CERTIFICATE_CODE_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        code = build_validation_code()
        if not Certificate.objects.filter(validation_code=code).exists():
            return code
        logger.warning("Validation code collision on attempt %s/%s", attempt, attempts)
    raise ValidationCodeError(f"Could not generate a unique validation code after {attempts} attempts")
