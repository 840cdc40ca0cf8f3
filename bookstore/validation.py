"""
validation.py - Pure field checks and number parsing

Predicates return bool and never raise. The parse_* functions raise
ValidationFailed on malformed input so handlers can let the error propagate
to the engine. Money is handled exclusively as integer cents.
"""

from __future__ import annotations
from typing import Tuple

from .core import (
    ValidationFailed,
    KEYWORD_SEPARATOR,
    MAX_USER_ID_LENGTH, MAX_PASSWORD_LENGTH, MAX_USERNAME_LENGTH,
    MAX_ISBN_LENGTH, MAX_BOOK_TEXT_LENGTH, MAX_KEYWORD_LENGTH,
    MAX_INTEGER,
)


_IDENTIFIER_CHARS = frozenset(
    "0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "_"
)
_DIGITS = frozenset("0123456789")
_MAX_INTEGER_DIGITS = len(str(MAX_INTEGER))


# ============================================================================
# CHARSET PREDICATES
# ============================================================================

def is_visible_ascii(text: str) -> bool:
    """True if every character is in 0x20..0x7E."""
    return all(" " <= c <= "~" for c in text)


def _is_identifier(text: str, max_length: int) -> bool:
    return 0 < len(text) <= max_length and all(c in _IDENTIFIER_CHARS for c in text)


def is_valid_user_id(text: str) -> bool:
    return _is_identifier(text, MAX_USER_ID_LENGTH)


def is_valid_password(text: str) -> bool:
    return _is_identifier(text, MAX_PASSWORD_LENGTH)


def is_valid_username(text: str) -> bool:
    return 0 < len(text) <= MAX_USERNAME_LENGTH and is_visible_ascii(text)


def is_valid_isbn(text: str) -> bool:
    return 0 < len(text) <= MAX_ISBN_LENGTH and is_visible_ascii(text)


def is_valid_book_text(text: str) -> bool:
    """Book name or author: visible ASCII without double quotes."""
    return len(text) <= MAX_BOOK_TEXT_LENGTH and is_visible_ascii(text) and '"' not in text


def is_valid_keyword_field(text: str) -> bool:
    """Whole keyword field (tags joined by '|'), same charset as book text."""
    return len(text) <= MAX_KEYWORD_LENGTH and is_visible_ascii(text) and '"' not in text


# ============================================================================
# KEYWORDS
# ============================================================================

def split_keywords(text: str) -> Tuple[str, ...]:
    """
    Split a keyword field into its tags.

    Args:
        text: Tags joined by '|'

    Returns:
        Tuple of tags in input order

    Raises:
        ValidationFailed: If the field is invalid, or a tag is empty or repeated
    """
    if not is_valid_keyword_field(text):
        raise ValidationFailed(f"invalid keyword field: {text!r}")
    tags = tuple(text.split(KEYWORD_SEPARATOR))
    seen = set()
    for tag in tags:
        if not tag:
            raise ValidationFailed(f"empty keyword in {text!r}")
        if tag in seen:
            raise ValidationFailed(f"duplicate keyword {tag!r}")
        seen.add(tag)
    return tags


def parse_stored_keywords(text: str) -> Tuple[str, ...]:
    """Split a stored keyword field without validation. Empty field means no tags."""
    if not text:
        return ()
    return tuple(text.split(KEYWORD_SEPARATOR))


# ============================================================================
# NUMBERS
# ============================================================================

def parse_int(text: str) -> int:
    """
    Parse a strict decimal integer.

    Accepts an optional leading '-', rejects a leading '+' and any character
    other than ASCII digits.

    Raises:
        ValidationFailed: If text is not a strict integer or exceeds MAX_INTEGER
    """
    digits = text[1:] if text.startswith("-") else text
    if not digits or not all(c in _DIGITS for c in digits):
        raise ValidationFailed(f"not an integer: {text!r}")
    significant = digits.lstrip("0")
    if len(significant) > _MAX_INTEGER_DIGITS:
        raise ValidationFailed(f"integer out of range: {len(digits)} digits")
    value = int(significant or "0")
    if text.startswith("-"):
        value = -value
    if abs(value) > MAX_INTEGER:
        raise ValidationFailed(f"integer out of range: {text!r}")
    return value


def parse_money(text: str) -> int:
    """
    Parse a non-negative amount into integer cents.

    Accepted forms: "12", "12.", "12.3", "12.34", ".5" and a bare "." (zero).
    At most two fraction digits; no sign.

    Examples:
        parse_money("15")    -> 1500
        parse_money("15.5")  -> 1550
        parse_money("0.05")  -> 5

    Raises:
        ValidationFailed: If text is not a well-formed amount or exceeds
                          MAX_INTEGER cents
    """
    whole, dot, fraction = text.partition(".")
    if not text:
        raise ValidationFailed(f"not a money amount: {text!r}")
    if not all(c in _DIGITS for c in whole) or not all(c in _DIGITS for c in fraction):
        raise ValidationFailed(f"not a money amount: {text!r}")
    if len(fraction) > 2:
        raise ValidationFailed(f"too many fraction digits: {text!r}")
    significant = whole.lstrip("0")
    if len(significant) > _MAX_INTEGER_DIGITS:
        raise ValidationFailed(f"money amount out of range: {len(whole)} digits")
    whole_cents = int(significant or "0") * 100
    fraction_cents = int(fraction.ljust(2, "0")) if fraction else 0
    cents = whole_cents + fraction_cents
    if cents > MAX_INTEGER:
        raise ValidationFailed(f"money amount out of range: {text!r}")
    return cents


def format_money(cents: int) -> str:
    """Render integer cents as '<integer>.<2 digits>'."""
    sign = "-" if cents < 0 else ""
    whole, fraction = divmod(abs(cents), 100)
    return f"{sign}{whole}.{fraction:02d}"
