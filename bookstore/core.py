"""
Core types and constants for the bookstore command interpreter.

This module provides the foundational data structures shared by every layer:
1. Constants: privilege levels, field limits, root seed, failure marker
2. Immutable records: Account, Book, LedgerEntry, AuditEntry
3. Enums: EntryType, CommandResult
4. Exceptions: BookstoreError and the rejection taxonomy

Records are frozen dataclasses. Mutations build a new record with
dataclasses.replace() and hand the whole set back to the record store.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


# ============================================================================
# CONSTANTS
# ============================================================================

# Privilege levels. 0 is the implicit level of an empty session stack.
PRIVILEGE_GUEST = 0
PRIVILEGE_CUSTOMER = 1
PRIVILEGE_CLERK = 3
PRIVILEGE_ROOT = 7

VALID_PRIVILEGES = frozenset({PRIVILEGE_CUSTOMER, PRIVILEGE_CLERK, PRIVILEGE_ROOT})

# Superuser seeded on first run.
ROOT_USER_ID = "root"
ROOT_PASSWORD = "sjtu"
ROOT_USERNAME = "root"
ROOT_PRIVILEGE = PRIVILEGE_ROOT

# Actor recorded in the audit log when nobody is logged in.
GUEST_ACTOR = "guest"

# Field length limits.
MAX_USER_ID_LENGTH = 30
MAX_PASSWORD_LENGTH = 30
MAX_USERNAME_LENGTH = 30
MAX_ISBN_LENGTH = 20
MAX_BOOK_TEXT_LENGTH = 60
MAX_KEYWORD_LENGTH = 60

# Largest quantity, stock level or amount in cents the store accepts.
MAX_INTEGER = 2**63 - 1

# Separator between keyword tags in a book record.
KEYWORD_SEPARATOR = "|"

# The only line ever printed for a rejected command.
FAILURE_MARKER = "Invalid"


# ============================================================================
# ENUMS
# ============================================================================

class EntryType(Enum):
    """Kind of monetary event in the finance ledger."""
    BUY = "BUY"        # Customer purchase, counted as income
    IMPORT = "IMPORT"  # Restocking cost, counted as expense


class CommandResult(Enum):
    """
    Outcome of processing one input line.

    APPLIED: The command ran and its effects (if any) are durable.
    REJECTED: The command was refused; nothing it would have changed was committed.
    SKIPPED: Blank line, ignored without output or audit entry.
    TERMINATED: quit/exit; processing stops.
    """
    APPLIED = "applied"
    REJECTED = "rejected"
    SKIPPED = "skipped"
    TERMINATED = "terminated"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class BookstoreError(Exception):
    """Base exception for every rejected command."""
    pass


class MalformedCommand(BookstoreError):
    """Raised for wrong token counts, unknown commands, bad or duplicate flags."""
    pass


class ValidationFailed(BookstoreError):
    """Raised when a field violates its charset, length or number format."""
    pass


class AuthorizationFailed(BookstoreError):
    """Raised for insufficient privilege, bad credentials or privilege-ordering violations."""
    pass


class BusinessRuleViolation(BookstoreError):
    """Raised on uniqueness conflicts, insufficient stock, missing records or no selection."""
    pass


class PersistenceFailed(BookstoreError):
    """Raised when a durable write or append did not complete."""
    pass


# ============================================================================
# RECORDS
# ============================================================================

@dataclass(frozen=True, slots=True)
class Account:
    """
    A user account.

    Attributes:
        user_id: Login identifier, unique among active accounts.
        password: Plain password (same charset as user_id).
        privilege: One of 1, 3, 7.
        username: Display name.
        active: False once the account has been deleted. Inactive rows are
                kept in the record set but are invisible to lookup and login.
    """
    user_id: str
    password: str
    privilege: int
    username: str
    active: bool = True


@dataclass(frozen=True, slots=True)
class Book:
    """
    A catalog entry.

    Attributes:
        isbn: Unique key of the book.
        name: Title, may be empty for a book created by select.
        author: Author, may be empty.
        keywords: Ordered, pairwise distinct tags.
        price_cents: Unit price in integer cents.
        stock: Copies on hand, never negative.
    """
    isbn: str
    name: str = ""
    author: str = ""
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    price_cents: int = 0
    stock: int = 0

    @property
    def keyword_text(self) -> str:
        """Keywords joined the way they are stored and displayed."""
        return KEYWORD_SEPARATOR.join(self.keywords)


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """One monetary event. The ledger is append-only; position is the only index."""
    entry_type: EntryType
    amount_cents: int

    def __post_init__(self):
        if self.amount_cents < 0:
            raise ValueError(f"LedgerEntry amount must be non-negative, got {self.amount_cents}")


@dataclass(frozen=True, slots=True)
class AuditEntry:
    """One processed input line and the actor it was attributed to."""
    actor: str
    raw_line: str


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    """
    Result of Engine.execute() for a single line.

    Attributes:
        result: What happened to the line.
        output: Text to print (already newline-terminated), empty if nothing.
        reason: Rejection message for diagnostics, None unless REJECTED.
        error: The exception that caused the rejection, if any.
    """
    result: CommandResult
    output: str = ""
    reason: Optional[str] = None
    error: Optional[BookstoreError] = None

    @property
    def ok(self) -> bool:
        return self.result == CommandResult.APPLIED
