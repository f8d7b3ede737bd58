"""
ISBN normalization and checksum validation.
"""

import re


_ISBN13 = re.compile(r"^97[89]\d{10}$")
_ISBN10 = re.compile(r"^\d{9}[\dX]$")


def normalize_isbn(isbn: str) -> str:
    """Uppercase and drop hyphens and whitespace."""
    return re.sub(r"[-\s]", "", (isbn or "").upper())


def is_valid_isbn13(isbn: str) -> bool:
    isbn = normalize_isbn(isbn)
    if not _ISBN13.match(isbn):
        return False

    # Weights alternate 1, 3, 1, 3, ...
    total = sum(int(digit) * (3 if i % 2 else 1) for i, digit in enumerate(isbn))
    return total % 10 == 0


def is_valid_isbn10(isbn: str) -> bool:
    isbn = normalize_isbn(isbn)
    if not _ISBN10.match(isbn):
        return False

    total = 0
    for i, char in enumerate(isbn):
        value = 10 if char == "X" else int(char)
        total += value * (10 - i)
    return total % 11 == 0


def is_valid_isbn(isbn: str) -> bool:
    """
    Validate an ISBN-10 or ISBN-13.

    Args:
        isbn: ISBN, hyphens allowed

    Returns:
        True if the checksum matches
    """
    normalized = normalize_isbn(isbn)
    if len(normalized) == 13:
        return is_valid_isbn13(normalized)
    if len(normalized) == 10:
        return is_valid_isbn10(normalized)
    return False
