"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the bookstore engine.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_account_uniqueness.py - At most one active account per user id
2. test_session_gating.py - Login stack privilege rules and per-frame selection
3. test_record_codec.py - Lossless record encoding, exact money arithmetic
4. test_catalog.py - Stock never negative, show ordering and exact filters
5. test_write_failures.py - A failed write leaves every record set unchanged

These tests use hypothesis for property-based testing.
"""

from bookstore import Engine

from tests.fake_store import seeded_store


def make_root_engine() -> Engine:
    """Fresh in-memory engine with root logged in. Hypothesis tests cannot use fixtures."""
    engine = Engine(seeded_store(), verbose=False)
    engine.execute("su root sjtu")
    return engine
