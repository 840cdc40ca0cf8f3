"""
test_tokenizer_and_reports.py - Unit tests for line tokenizing and report helpers

Tests:
- Whitespace splitting and double-quoted literals
- summarize_ledger over the whole ledger and over the last N entries
- count_by_actor ordering
"""

import pytest
from bookstore import (
    tokenize, summarize_ledger, count_by_actor, FinanceSummary,
    LedgerEntry, AuditEntry, EntryType,
    MalformedCommand, BusinessRuleViolation,
)


class TestTokenize:

    def test_whitespace(self):
        assert tokenize("  su   root\tsjtu ") == ["su", "root", "sjtu"]

    def test_quoted_literal_keeps_spaces(self):
        assert tokenize('modify -name="War and Peace"') == ["modify", "-name=War and Peace"]

    def test_quotes_stripped(self):
        assert tokenize('show -keyword="sf"') == ["show", "-keyword=sf"]

    def test_unterminated_quote_runs_to_end(self):
        assert tokenize('modify -name="open ended') == ["modify", "-name=open ended"]

    def test_empty_quotes_produce_nothing(self):
        assert tokenize('""') == []

    def test_blank(self):
        assert tokenize("   ") == []

    def test_all_ascii_whitespace_separates(self):
        assert tokenize("a\x0bb\x0cc\rd") == ["a", "b", "c", "d"]

    @pytest.mark.parametrize("space", ["\u00a0", "\u3000", "\x1c", "\x85"])
    def test_unicode_space_is_part_of_token(self, space):
        assert tokenize(f"a{space}b c") == [f"a{space}b", "c"]


def _ledger():
    return [
        LedgerEntry(EntryType.IMPORT, 1000),
        LedgerEntry(EntryType.BUY, 250),
        LedgerEntry(EntryType.BUY, 125),
        LedgerEntry(EntryType.IMPORT, 40),
    ]


class TestSummarizeLedger:

    def test_whole_ledger(self):
        assert summarize_ledger(_ledger()) == FinanceSummary(375, 1040)

    def test_last_two(self):
        assert summarize_ledger(_ledger(), 2) == FinanceSummary(125, 40)

    def test_exact_length(self):
        assert summarize_ledger(_ledger(), 4) == summarize_ledger(_ledger())

    def test_zero_entries(self):
        assert summarize_ledger(_ledger(), 0) == FinanceSummary(0, 0)

    def test_count_beyond_length_rejected(self):
        with pytest.raises(BusinessRuleViolation):
            summarize_ledger(_ledger(), 5)

    def test_negative_count_rejected(self):
        with pytest.raises(MalformedCommand):
            summarize_ledger(_ledger(), -1)

    def test_empty_ledger(self):
        assert summarize_ledger([]) == FinanceSummary(0, 0)


class TestCountByActor:

    def test_sorted_by_actor(self):
        audit = [
            AuditEntry("u1", "show"),
            AuditEntry("root", "su root sjtu"),
            AuditEntry("guest", "register a b c"),
            AuditEntry("u1", "buy 1 1"),
        ]
        assert count_by_actor(audit) == [("guest", 1), ("root", 1), ("u1", 2)]

    def test_empty(self):
        assert count_by_actor([]) == []
