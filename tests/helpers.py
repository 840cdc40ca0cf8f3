"""
helpers.py - Assertion helpers shared by the command tests
"""

from typing import List

from bookstore import Engine, CommandResult, FAILURE_MARKER


def run_lines(engine: Engine, lines: List[str]) -> List[str]:
    """Execute each line and return the output of each, in order."""
    return [engine.execute(line).output for line in lines]


def assert_applied(engine: Engine, line: str) -> str:
    """Execute a line that must succeed and return its output."""
    outcome = engine.execute(line)
    assert outcome.result == CommandResult.APPLIED, f"{line!r} rejected: {outcome.reason}"
    return outcome.output


def assert_rejected(engine: Engine, line: str) -> None:
    """Execute a line that must be refused with the failure marker."""
    outcome = engine.execute(line)
    assert outcome.result == CommandResult.REJECTED, f"{line!r} unexpectedly applied"
    assert outcome.output == FAILURE_MARKER + "\n"
