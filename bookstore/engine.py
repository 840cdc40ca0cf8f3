"""
engine.py - Command Engine

The Engine is the only place that turns input lines into effects. It owns the
session stack, dispatches each line to a handler from the command registry
and records every processed line in the audit log.

Processing of one line:
    1. Blank line -> SKIPPED (no output, no audit entry)
    2. Tokenize; 'quit' / 'exit' as first token -> TERMINATED (no audit entry)
    3. Look up the handler by command name and run it
    4. Any BookstoreError -> REJECTED, output is the failure marker
    5. Append (current actor, raw line) to the audit log, whatever the outcome

The audit entry is attributed to whoever is logged in after the command ran,
or to 'guest'. A failure to append it is not swallowed: PersistenceFailed
propagates to the caller.
"""

from __future__ import annotations
import sys
from typing import Dict, Iterable, Optional, TextIO

from .commands import CommandContext, CommandHandler, DEFAULT_HANDLERS
from .config import StoreConfig
from .core import (
    AuditEntry, CommandOutcome, CommandResult,
    BookstoreError, MalformedCommand,
    FAILURE_MARKER, GUEST_ACTOR,
)
from .session import SessionStack
from .store import FileRecordStore, RecordStore
from .tokenizer import WHITESPACE, tokenize


TERMINATE_COMMANDS = frozenset({"quit", "exit"})


class Engine:
    """
    Sequential command interpreter over a RecordStore.

    Thread Safety:
        Not thread-safe. One line completes, audit entry included, before the
        next one starts.

    Example:
        store = FileRecordStore(StoreConfig(data_dir=Path("data")))
        store.initialize()
        engine = Engine(store, verbose=False)
        engine.execute("su root sjtu")
        print(engine.execute("show").output, end="")
    """

    def __init__(
        self,
        store: RecordStore,
        session: Optional[SessionStack] = None,
        handlers: Optional[Dict[str, CommandHandler]] = None,
        verbose: bool = False,
        diagnostics: Optional[TextIO] = None,
    ):
        """
        Create an engine.

        Args:
            store: Record store to read and write
            session: Session stack (a fresh empty one if not provided)
            handlers: Command registry (DEFAULT_HANDLERS if not provided)
            verbose: Print one diagnostic line per processed command
            diagnostics: Stream for diagnostic lines (default: sys.stderr)
        """
        self.store = store
        self.session = session if session is not None else SessionStack()
        self.handlers: Dict[str, CommandHandler] = dict(handlers or DEFAULT_HANDLERS)
        self.verbose = verbose
        self._diagnostics = diagnostics
        self.context = CommandContext(store=self.store, session=self.session)

    def register(self, name: str, handler: CommandHandler) -> None:
        """Register or replace the handler for a command name."""
        self.handlers[name] = handler

    @property
    def actor(self) -> str:
        """User id credited in the audit log for the next entry."""
        return self.session.user_id or GUEST_ACTOR

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def execute(self, line: str) -> CommandOutcome:
        """
        Process one input line.

        Args:
            line: Raw input line, with or without its trailing newline

        Returns:
            CommandOutcome describing the result and the text to print

        Raises:
            PersistenceFailed: If the audit entry cannot be appended
        """
        raw_line = line.rstrip("\r\n")
        if not raw_line.strip(WHITESPACE):
            return CommandOutcome(CommandResult.SKIPPED)

        tokens = tokenize(raw_line)
        if tokens and tokens[0] in TERMINATE_COMMANDS:
            return CommandOutcome(CommandResult.TERMINATED)

        try:
            output = self._dispatch(tokens)
            outcome = CommandOutcome(CommandResult.APPLIED, output=output)
        except BookstoreError as e:
            outcome = CommandOutcome(
                CommandResult.REJECTED,
                output=FAILURE_MARKER + "\n",
                reason=f"{type(e).__name__}: {e}",
                error=e,
            )

        # Audit trail is mandatory
        self.store.append_audit(AuditEntry(self.actor, raw_line))

        if self.verbose:
            self._print_outcome(raw_line, outcome)
        return outcome

    def _dispatch(self, tokens) -> str:
        if not tokens:
            raise MalformedCommand("line has no tokens")
        name, args = tokens[0], tokens[1:]
        handler = self.handlers.get(name)
        if handler is None:
            raise MalformedCommand(f"unknown command {name!r}")
        return handler(self.context, args)

    def run(self, lines: Iterable[str], out: TextIO) -> int:
        """
        Process lines until end of input or quit/exit.

        Args:
            lines: Input lines (e.g. a file object)
            out: Stream receiving command output

        Returns:
            Number of lines that were executed (applied or rejected)
        """
        processed = 0
        for line in lines:
            outcome = self.execute(line)
            if outcome.result == CommandResult.TERMINATED:
                break
            if outcome.result == CommandResult.SKIPPED:
                continue
            processed += 1
            if outcome.output:
                out.write(outcome.output)
        out.flush()
        return processed

    def _print_outcome(self, raw_line: str, outcome: CommandOutcome) -> None:
        stream = self._diagnostics or sys.stderr
        if outcome.ok:
            print(f"✓ APPLIED [{self.actor}]: {raw_line}", file=stream)
        else:
            print(f"✗ REJECTED [{self.actor}]: {raw_line} ({outcome.reason})", file=stream)


def create_default_engine(config: StoreConfig) -> Engine:
    """
    Build an Engine on a FileRecordStore, creating and seeding the data
    directory on first run.
    """
    store = FileRecordStore(config)
    store.initialize()
    return Engine(store, verbose=config.verbose)
