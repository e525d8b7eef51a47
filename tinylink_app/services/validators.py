"""Validation helpers for short codes and target URLs."""

import string
from urllib.parse import urlparse

CODE_ALPHABET = frozenset(string.ascii_letters + string.digits)
ALLOWED_SCHEMES = ("http", "https")
MIN_CODE_LENGTH = 6
MAX_CODE_LENGTH = 8


def is_valid_code(code) -> bool:
    """
    Check that a short code is 6-8 ASCII letters or digits.

    Never raises: anything that is not a string is simply invalid.
    """
    if not isinstance(code, str):
        return False
    if not MIN_CODE_LENGTH <= len(code) <= MAX_CODE_LENGTH:
        return False
    # str.isalnum() would also accept non-ASCII letters and digits
    return all(char in CODE_ALPHABET for char in code)

def is_valid_url(url) -> bool:
    """Check that a URL is absolute and uses http or https."""
    if not isinstance(url, str) or not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        # e.g. unbalanced brackets in an IPv6 host
        return False
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(parsed.netloc)
