"""
config.py - Store configuration

One frozen StoreConfig names the data directory, the four record files and
the verbose flag. from_env() reads BOOKSTORE_DATA_DIR and BOOKSTORE_VERBOSE;
with_overrides() applies command-line values on top. Both validate before
returning: file names must be non-empty and distinct, and data_dir must be a
directory if it already exists.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional


DEFAULT_DATA_DIR = "."


@dataclass(frozen=True, slots=True)
class StoreConfig:
    """Where the four record sets live and how chatty the engine is."""
    data_dir: Path = Path(DEFAULT_DATA_DIR)
    accounts_file: str = "accounts.db"
    books_file: str = "books.db"
    finance_file: str = "finance.db"
    audit_file: str = "ops.log"
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "StoreConfig":
        config = cls(
            data_dir=Path(os.getenv("BOOKSTORE_DATA_DIR", DEFAULT_DATA_DIR).strip() or DEFAULT_DATA_DIR),
            verbose=os.getenv("BOOKSTORE_VERBOSE", "false").lower() in ("1", "true", "yes"),
        )
        config.validate()
        return config

    def with_overrides(self, data_dir: Optional[str] = None, verbose: Optional[bool] = None) -> "StoreConfig":
        config = self
        if data_dir is not None:
            config = replace(config, data_dir=Path(data_dir))
        if verbose is not None:
            config = replace(config, verbose=verbose)
        config.validate()
        return config

    def validate(self) -> None:
        names = [self.accounts_file, self.books_file, self.finance_file, self.audit_file]
        if any(not name.strip() for name in names):
            raise ValueError("record file names cannot be empty")
        if len(set(names)) != len(names):
            raise ValueError(f"record file names must be distinct, got {names}")
        if self.data_dir.exists() and not self.data_dir.is_dir():
            raise ValueError(f"data directory {self.data_dir} is not a directory")

    @property
    def accounts_path(self) -> Path:
        return self.data_dir / self.accounts_file

    @property
    def books_path(self) -> Path:
        return self.data_dir / self.books_file

    @property
    def finance_path(self) -> Path:
        return self.data_dir / self.finance_file

    @property
    def audit_path(self) -> Path:
        return self.data_dir / self.audit_file
