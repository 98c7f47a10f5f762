"""
Request and operation id helpers.
"""
import random
import time

_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"


def ulid() -> str:
    """
    Generate a sortable ULID-like identifier.
    Format: millisecond timestamp (10 chars) + random (16 chars)
    """
    timestamp = int(time.time() * 1000)
    random_part = "".join(random.choices(_ALPHABET, k=16))
    return f"{_base32(timestamp, 10)}{random_part}"


def _base32(num: int, length: int) -> str:
    digits = []
    while num > 0 and len(digits) < length:
        num, remainder = divmod(num, 32)
        digits.append(_ALPHABET[remainder])
    digits.extend("0" * (length - len(digits)))
    return "".join(reversed(digits))


def request_id(header_value: str | None = None) -> str:
    """Reuse the caller's X-Request-ID when present, otherwise mint one."""
    if header_value and header_value.strip():
        return header_value.strip()
    return ulid()
