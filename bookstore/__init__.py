"""
bookstore - Session-stacked command interpreter for a small bookstore

Accounts with privilege levels, a book catalog and a finance ledger, kept in
flat record files and driven one command line at a time.

Usage:
    from bookstore import Engine, FileRecordStore, StoreConfig

    store = FileRecordStore(StoreConfig(data_dir=Path("data")))
    store.initialize()                     # seeds root / sjtu / 7 on first run
    engine = Engine(store)

    engine.execute("su root sjtu")
    engine.execute("select 978-0")
    engine.execute("import 10 5.00")
    outcome = engine.execute("show")
    print(outcome.output, end="")
"""

# Core types
from .core import (
    Account,
    Book,
    LedgerEntry,
    AuditEntry,
    EntryType,
    CommandResult,
    CommandOutcome,
    BookstoreError,
    MalformedCommand,
    ValidationFailed,
    AuthorizationFailed,
    BusinessRuleViolation,
    PersistenceFailed,
    PRIVILEGE_GUEST,
    PRIVILEGE_CUSTOMER,
    PRIVILEGE_CLERK,
    PRIVILEGE_ROOT,
    FAILURE_MARKER,
    GUEST_ACTOR,
)

# Configuration
from .config import StoreConfig

# Codec
from .codec import (
    escape_field,
    unescape_field,
    encode_account,
    decode_account,
    encode_book,
    decode_book,
    encode_ledger_entry,
    decode_ledger_entry,
    encode_audit_entry,
    decode_audit_entry,
)

# Validation
from .validation import (
    is_valid_user_id,
    is_valid_password,
    is_valid_username,
    is_valid_isbn,
    is_valid_book_text,
    is_valid_keyword_field,
    split_keywords,
    parse_int,
    parse_money,
    format_money,
)

# Record store
from .store import RecordStore, FileRecordStore, root_account

# Session
from .session import SessionFrame, SessionStack

# Reports
from .reports import FinanceSummary, summarize_ledger, count_by_actor

# Commands and engine
from .tokenizer import tokenize
from .commands import CommandContext, DEFAULT_HANDLERS
from .engine import Engine, create_default_engine

__all__ = [
    # Core
    'Account', 'Book', 'LedgerEntry', 'AuditEntry', 'EntryType',
    'CommandResult', 'CommandOutcome',
    'BookstoreError', 'MalformedCommand', 'ValidationFailed',
    'AuthorizationFailed', 'BusinessRuleViolation', 'PersistenceFailed',
    'PRIVILEGE_GUEST', 'PRIVILEGE_CUSTOMER', 'PRIVILEGE_CLERK', 'PRIVILEGE_ROOT',
    'FAILURE_MARKER', 'GUEST_ACTOR',
    # Configuration
    'StoreConfig',
    # Codec
    'escape_field', 'unescape_field',
    'encode_account', 'decode_account', 'encode_book', 'decode_book',
    'encode_ledger_entry', 'decode_ledger_entry',
    'encode_audit_entry', 'decode_audit_entry',
    # Validation
    'is_valid_user_id', 'is_valid_password', 'is_valid_username',
    'is_valid_isbn', 'is_valid_book_text', 'is_valid_keyword_field',
    'split_keywords', 'parse_int', 'parse_money', 'format_money',
    # Store
    'RecordStore', 'FileRecordStore', 'root_account',
    # Session
    'SessionFrame', 'SessionStack',
    # Reports
    'FinanceSummary', 'summarize_ledger', 'count_by_actor',
    # Engine
    'tokenize', 'CommandContext', 'DEFAULT_HANDLERS',
    'Engine', 'create_default_engine',
]

__version__ = '1.0.0'
