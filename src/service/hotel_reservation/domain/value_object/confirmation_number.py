import re
import secrets
import string

from src.platform.exception.exceptions import InvalidArgumentError


# 0-9 and A-Z
CONFIRMATION_NUMBER_ALPHABET = string.digits + string.ascii_uppercase
DEFAULT_CONFIRMATION_NUMBER_LENGTH = 6

# Generated numbers are 6 uppercase alphanumerics, callers may also supply UUID-like ids
_CONFIRMATION_NUMBER_PATTERN = re.compile(r'^[A-Za-z0-9-]{1,64}$')


def generate_confirmation_number(length: int = DEFAULT_CONFIRMATION_NUMBER_LENGTH) -> str:
    return ''.join(secrets.choice(CONFIRMATION_NUMBER_ALPHABET) for _ in range(length))


def validate_confirmation_number(confirmation_number: object) -> str:
    if not isinstance(confirmation_number, str) or not confirmation_number:
        raise InvalidArgumentError('confirmation number should not be null nor empty')
    if not _CONFIRMATION_NUMBER_PATTERN.fullmatch(confirmation_number):
        raise InvalidArgumentError(
            f'confirmation number {confirmation_number!r} is not a valid identifier'
        )
    return confirmation_number
