"""
codec.py - Line encoding for persisted records

Each record is one line of tab-separated fields. Free-text fields are escaped
so that backslash, tab, newline and carriage return never appear raw inside
a field:

    \\  -> \\\\
    TAB -> \\t
    LF  -> \\n
    CR  -> \\r

Decoding reverses the escape. A backslash followed by any other character is
kept as-is. Numeric and flag fields are written unescaped.
"""

from __future__ import annotations
from typing import Callable, Dict, List, TypeVar

from .core import Account, Book, LedgerEntry, AuditEntry, EntryType, ValidationFailed
from .validation import parse_int, parse_stored_keywords


FIELD_SEPARATOR = "\t"

_ESCAPES = {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", "t": "\t", "n": "\n", "r": "\r"}

R = TypeVar("R")


def escape_field(text: str) -> str:
    return "".join(_ESCAPES.get(c, c) for c in text)


def unescape_field(text: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(text):
        c = text[i]
        if c == "\\" and i + 1 < len(text) and text[i + 1] in _UNESCAPES:
            out.append(_UNESCAPES[text[i + 1]])
            i += 2
        else:
            out.append(c)
            i += 1
    return "".join(out)


def _split(line: str, expected: int, kind: str) -> List[str]:
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) != expected:
        raise ValueError(f"{kind} record needs {expected} fields, got {len(parts)}: {line!r}")
    return parts


def _int_field(text: str, kind: str) -> int:
    try:
        return parse_int(text)
    except ValidationFailed as e:
        raise ValueError(f"{kind} record has a bad number: {text!r}") from e


# ============================================================================
# ACCOUNTS
# ============================================================================

def encode_account(account: Account) -> str:
    return FIELD_SEPARATOR.join([
        escape_field(account.user_id),
        escape_field(account.password),
        str(account.privilege),
        escape_field(account.username),
        "1" if account.active else "0",
    ])


def decode_account(line: str) -> Account:
    user_id, password, privilege, username, active = _split(line, 5, "account")
    if active not in ("0", "1"):
        raise ValueError(f"account record has a bad active flag: {active!r}")
    return Account(
        user_id=unescape_field(user_id),
        password=unescape_field(password),
        privilege=_int_field(privilege, "account"),
        username=unescape_field(username),
        active=active == "1",
    )


# ============================================================================
# BOOKS
# ============================================================================

def encode_book(book: Book) -> str:
    return FIELD_SEPARATOR.join([
        escape_field(book.isbn),
        escape_field(book.name),
        escape_field(book.author),
        escape_field(book.keyword_text),
        str(book.price_cents),
        str(book.stock),
    ])


def decode_book(line: str) -> Book:
    isbn, name, author, keywords, price, stock = _split(line, 6, "book")
    return Book(
        isbn=unescape_field(isbn),
        name=unescape_field(name),
        author=unescape_field(author),
        keywords=parse_stored_keywords(unescape_field(keywords)),
        price_cents=_int_field(price, "book"),
        stock=_int_field(stock, "book"),
    )


# ============================================================================
# LEDGER AND AUDIT LOG
# ============================================================================

def encode_ledger_entry(entry: LedgerEntry) -> str:
    return f"{entry.entry_type.value}{FIELD_SEPARATOR}{entry.amount_cents}"


def decode_ledger_entry(line: str) -> LedgerEntry:
    entry_type, amount = _split(line, 2, "ledger")
    try:
        kind = EntryType(entry_type)
    except ValueError as e:
        raise ValueError(f"ledger record has unknown type: {entry_type!r}") from e
    return LedgerEntry(kind, _int_field(amount, "ledger"))


def encode_audit_entry(entry: AuditEntry) -> str:
    return f"{escape_field(entry.actor)}{FIELD_SEPARATOR}{escape_field(entry.raw_line)}"


def decode_audit_entry(line: str) -> AuditEntry:
    actor, raw_line = _split(line, 2, "audit")
    return AuditEntry(unescape_field(actor), unescape_field(raw_line))


# Encoder/decoder pairs keyed by record kind, used by the file store.
CODECS: Dict[str, tuple] = {
    "accounts": (encode_account, decode_account),
    "books": (encode_book, decode_book),
    "finance": (encode_ledger_entry, decode_ledger_entry),
    "audit": (encode_audit_entry, decode_audit_entry),
}


def decode_lines(lines: List[str], decode: Callable[[str], R]) -> List[R]:
    """Decode every non-empty line, in order."""
    return [decode(line) for line in lines if line]
