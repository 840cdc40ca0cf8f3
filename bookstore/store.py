"""
store.py - Record Store for accounts, books, the finance ledger and the audit log

Every record set is loaded in full, mutated in memory by the caller and
written back in full. There is no cache between commands: each call reads the
file again, so the unit of work is one command.

Durability rules:
    - replace_*: write the whole set to a temporary file in the same
      directory, fsync, then os.replace() over the old file. Either the new
      content is in place or the old content remains authoritative.
    - append_*: one line appended to the ledger or audit log.
    - Any OSError surfaces as PersistenceFailed; the caller must not treat
      the mutation as committed.

Files are UTF-8. Bytes that are not valid UTF-8 are carried through as
surrogate escapes, so they load and write back unchanged.
"""

from __future__ import annotations
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Protocol, Sequence, runtime_checkable

from .codec import CODECS, decode_lines
from .config import StoreConfig
from .core import (
    Account, Book, LedgerEntry, AuditEntry,
    PersistenceFailed,
    ROOT_USER_ID, ROOT_PASSWORD, ROOT_PRIVILEGE, ROOT_USERNAME,
)


KIND_ACCOUNTS = "accounts"
KIND_BOOKS = "books"
KIND_FINANCE = "finance"
KIND_AUDIT = "audit"

FILE_ENCODING = "utf-8"
FILE_ERRORS = "surrogateescape"


def root_account() -> Account:
    """The superuser seeded on first run."""
    return Account(
        user_id=ROOT_USER_ID,
        password=ROOT_PASSWORD,
        privilege=ROOT_PRIVILEGE,
        username=ROOT_USERNAME,
        active=True,
    )


# ============================================================================
# PROTOCOL
# ============================================================================

@runtime_checkable
class RecordStore(Protocol):
    """
    Interface the command engine needs from persistence.

    FileRecordStore is the production implementation. Tests use an in-memory
    implementation with the same contract.
    """

    def load_accounts(self) -> List[Account]:
        """All accounts, active and inactive, in stored order."""
        ...

    def load_books(self) -> List[Book]:
        ...

    def load_ledger(self) -> List[LedgerEntry]:
        ...

    def load_audit(self) -> List[AuditEntry]:
        ...

    def replace_accounts(self, accounts: Sequence[Account]) -> None:
        """Durably overwrite the account set. Raises PersistenceFailed."""
        ...

    def replace_books(self, books: Sequence[Book]) -> None:
        """Durably overwrite the book set. Raises PersistenceFailed."""
        ...

    def append_ledger(self, entry: LedgerEntry) -> None:
        """Durably append one ledger entry. Raises PersistenceFailed."""
        ...

    def append_audit(self, entry: AuditEntry) -> None:
        """Durably append one audit entry. Raises PersistenceFailed."""
        ...


# ============================================================================
# FILE STORE
# ============================================================================

class FileRecordStore:
    """
    Flat-file record store.

    One newline-terminated file per record kind inside config.data_dir.
    Implements the RecordStore protocol.

    Example:
        store = FileRecordStore(StoreConfig(data_dir=Path("data")))
        store.initialize()
        accounts = store.load_accounts()
    """

    def __init__(self, config: StoreConfig):
        self.config = config
        self._paths: Dict[str, Path] = {
            KIND_ACCOUNTS: config.accounts_path,
            KIND_BOOKS: config.books_path,
            KIND_FINANCE: config.finance_path,
            KIND_AUDIT: config.audit_path,
        }

    def initialize(self) -> None:
        """
        Create the data directory and any missing record file.

        The accounts file is seeded with the root account the first time it is
        created. Existing files are left untouched.

        Raises:
            PersistenceFailed: If the directory or a file cannot be created
        """
        try:
            self.config.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceFailed(f"cannot create data directory {self.config.data_dir}: {e}") from e
        if not self._paths[KIND_ACCOUNTS].exists():
            self._replace(KIND_ACCOUNTS, [root_account()])
        for kind in (KIND_BOOKS, KIND_FINANCE, KIND_AUDIT):
            if not self._paths[kind].exists():
                self._replace(kind, [])

    # ------------------------------------------------------------------------
    # Generic kind-based access
    # ------------------------------------------------------------------------

    def _load(self, kind: str) -> list:
        path = self._paths[kind]
        _, decode = CODECS[kind]
        try:
            with open(path, "r", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="") as f:
                text = f.read()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise PersistenceFailed(f"cannot read {path}: {e}") from e
        lines = text.replace("\r", "").split("\n")
        try:
            return decode_lines(lines, decode)
        except ValueError as e:
            raise PersistenceFailed(f"corrupt record in {path}: {e}") from e

    def _replace(self, kind: str, records: Sequence) -> None:
        path = self._paths[kind]
        encode, _ = CODECS[kind]
        data = "".join(encode(record) + "\n" for record in records)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", delete=False, encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="",
                dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp",
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except (OSError, UnicodeError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceFailed(f"cannot rewrite {path}: {e}") from e

    def _append(self, kind: str, record) -> None:
        path = self._paths[kind]
        encode, _ = CODECS[kind]
        try:
            with open(path, "a", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="") as f:
                f.write(encode(record) + "\n")
                f.flush()
                os.fsync(f.fileno())
        except (OSError, UnicodeError) as e:
            raise PersistenceFailed(f"cannot append to {path}: {e}") from e

    # ------------------------------------------------------------------------
    # RecordStore protocol
    # ------------------------------------------------------------------------

    def load_accounts(self) -> List[Account]:
        return self._load(KIND_ACCOUNTS)

    def load_books(self) -> List[Book]:
        return self._load(KIND_BOOKS)

    def load_ledger(self) -> List[LedgerEntry]:
        return self._load(KIND_FINANCE)

    def load_audit(self) -> List[AuditEntry]:
        return self._load(KIND_AUDIT)

    def replace_accounts(self, accounts: Sequence[Account]) -> None:
        self._replace(KIND_ACCOUNTS, accounts)

    def replace_books(self, books: Sequence[Book]) -> None:
        self._replace(KIND_BOOKS, books)

    def append_ledger(self, entry: LedgerEntry) -> None:
        self._append(KIND_FINANCE, entry)

    def append_audit(self, entry: AuditEntry) -> None:
        self._append(KIND_AUDIT, entry)

    def __repr__(self) -> str:
        return f"FileRecordStore({self.config.data_dir})"
