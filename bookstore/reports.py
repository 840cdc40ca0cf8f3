"""
reports.py - Pure aggregation and formatting over loaded records

Nothing here touches the record store; handlers load the records and pass
them in. Amounts are integer cents throughout and only become text in the
format_* functions.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .core import (
    Book, LedgerEntry, AuditEntry, EntryType,
    MalformedCommand, BusinessRuleViolation,
)
from .validation import format_money


@dataclass(frozen=True, slots=True)
class FinanceSummary:
    """Income (BUY) and expense (IMPORT) totals over a span of the ledger."""
    income_cents: int = 0
    expense_cents: int = 0


def summarize_ledger(entries: Sequence[LedgerEntry], count: Optional[int] = None) -> FinanceSummary:
    """
    Sum the last count entries of the ledger (all of them when count is None).

    Args:
        entries: Ledger in append order
        count: Number of most recent entries to include

    Returns:
        FinanceSummary over the selected span

    Raises:
        MalformedCommand: If count is negative
        BusinessRuleViolation: If count exceeds the ledger length (never clamped)
    """
    if count is None:
        span = entries
    else:
        if count < 0:
            raise MalformedCommand(f"negative entry count {count}")
        if count > len(entries):
            raise BusinessRuleViolation(
                f"requested {count} entries, ledger has {len(entries)}"
            )
        span = entries[len(entries) - count:]
    income = sum(e.amount_cents for e in span if e.entry_type == EntryType.BUY)
    expense = sum(e.amount_cents for e in span if e.entry_type == EntryType.IMPORT)
    return FinanceSummary(income_cents=income, expense_cents=expense)


def count_by_actor(audit: Sequence[AuditEntry]) -> List[Tuple[str, int]]:
    """Number of audit entries per actor, sorted by actor id."""
    counts = Counter(entry.actor for entry in audit)
    return sorted(counts.items())


# ============================================================================
# FORMATTERS
# ============================================================================

def format_book(book: Book) -> str:
    return "\t".join([
        book.isbn,
        book.name,
        book.author,
        book.keyword_text,
        format_money(book.price_cents),
        str(book.stock),
    ])


def format_finance(summary: FinanceSummary) -> str:
    return f"+ {format_money(summary.income_cents)} - {format_money(summary.expense_cents)}"


def format_finance_total(summary: FinanceSummary) -> str:
    return f"Total\t+ {format_money(summary.income_cents)}\t- {format_money(summary.expense_cents)}"


def format_audit_entry(entry: AuditEntry) -> str:
    return f"{entry.actor}\t{entry.raw_line}"


def render_lines(lines: Sequence[str]) -> str:
    """Join result lines; an empty result is a single blank line."""
    if not lines:
        return "\n"
    return "".join(line + "\n" for line in lines)
