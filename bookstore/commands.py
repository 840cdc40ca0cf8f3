"""
commands.py - Command handler functions

Each handler takes (context, args) and returns the text to print, already
newline-terminated, or "" when the command prints nothing. args excludes the
command name. Any refusal is raised as a BookstoreError subclass; the engine
turns it into the failure marker.

Layout:
- No handler classes, just functions
- Dict of functions keyed by command name (DEFAULT_HANDLERS)
- Every handler checks privilege first, then argument shape, then field
  syntax, then loads records and applies business rules

Mutations follow load -> modify in memory -> replace whole set. Nothing is
written until every check has passed.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence

from .core import (
    Account, Book, LedgerEntry, EntryType,
    MalformedCommand, ValidationFailed, AuthorizationFailed,
    BusinessRuleViolation, PersistenceFailed,
    PRIVILEGE_GUEST, PRIVILEGE_CUSTOMER, PRIVILEGE_CLERK, PRIVILEGE_ROOT,
    VALID_PRIVILEGES, KEYWORD_SEPARATOR, MAX_INTEGER,
)
from .reports import (
    summarize_ledger, count_by_actor,
    format_book, format_finance, format_finance_total, format_audit_entry,
    render_lines,
)
from .session import SessionStack
from .store import RecordStore
from .validation import (
    is_valid_user_id, is_valid_password, is_valid_username,
    is_valid_isbn, is_valid_book_text,
    split_keywords, parse_int, parse_money, format_money,
)


@dataclass
class CommandContext:
    """What a handler may touch: the record store and the session stack."""
    store: RecordStore
    session: SessionStack


CommandHandler = Callable[[CommandContext, List[str]], str]

SHOW_FILTERS = ("-ISBN", "-name", "-author", "-keyword")
MODIFY_FIELDS = ("-ISBN", "-name", "-author", "-keyword", "-price")


# ============================================================================
# HELPERS
# ============================================================================

def _expect_arg_count(args: Sequence[str], *allowed: int) -> None:
    if len(args) not in allowed:
        raise MalformedCommand(f"expected {' or '.join(map(str, allowed))} arguments, got {len(args)}")


def _require_valid(ok: bool, what: str, value: str) -> None:
    if not ok:
        raise ValidationFailed(f"invalid {what}: {value!r}")


def _find_active_account(accounts: Sequence[Account], user_id: str) -> Optional[int]:
    for i, account in enumerate(accounts):
        if account.active and account.user_id == user_id:
            return i
    return None


def _find_book(books: Sequence[Book], isbn: str) -> Optional[int]:
    for i, book in enumerate(books):
        if book.isbn == isbn:
            return i
    return None


def _parse_flags(args: Sequence[str], allowed: Sequence[str]) -> Dict[str, str]:
    """
    Parse '-key=value' arguments.

    Raises:
        MalformedCommand: On a missing '=', unknown or repeated key, or empty value
    """
    flags: Dict[str, str] = {}
    for arg in args:
        key, eq, value = arg.partition("=")
        if not eq:
            raise MalformedCommand(f"expected -key=value, got {arg!r}")
        if key not in allowed:
            raise MalformedCommand(f"unknown flag {key!r}")
        if key in flags:
            raise MalformedCommand(f"duplicate flag {key!r}")
        if not value:
            raise MalformedCommand(f"empty value for {key!r}")
        flags[key] = value
    return flags


def _add_account(ctx: CommandContext, account: Account) -> None:
    accounts = ctx.store.load_accounts()
    if _find_active_account(accounts, account.user_id) is not None:
        raise BusinessRuleViolation(f"user id {account.user_id!r} already in use")
    accounts.append(account)
    ctx.store.replace_accounts(accounts)


def _commit_stock_change(ctx: CommandContext, old_books: List[Book], new_books: List[Book], entry: LedgerEntry) -> None:
    """
    Rewrite the book set, then append the ledger entry.

    If the ledger append fails the previous book set is written back so the
    stock change is not left committed without its ledger entry.
    """
    ctx.store.replace_books(new_books)
    try:
        ctx.store.append_ledger(entry)
    except PersistenceFailed:
        ctx.store.replace_books(old_books)
        raise


# ============================================================================
# ACCOUNT COMMANDS
# ============================================================================

def handle_su(ctx: CommandContext, args: List[str]) -> str:
    """su <user-id> [<password>]"""
    _expect_arg_count(args, 1, 2)
    user_id = args[0]
    _require_valid(is_valid_user_id(user_id), "user id", user_id)
    accounts = ctx.store.load_accounts()
    index = _find_active_account(accounts, user_id)
    if index is None:
        raise AuthorizationFailed(f"no active account {user_id!r}")
    password = args[1] if len(args) == 2 else None
    ctx.session.login(accounts[index], password)
    return ""


def handle_logout(ctx: CommandContext, args: List[str]) -> str:
    ctx.session.require(PRIVILEGE_CUSTOMER)
    _expect_arg_count(args, 0)
    ctx.session.logout()
    return ""


def handle_register(ctx: CommandContext, args: List[str]) -> str:
    """register <user-id> <password> <username>"""
    ctx.session.require(PRIVILEGE_GUEST)
    _expect_arg_count(args, 3)
    user_id, password, username = args
    _require_valid(is_valid_user_id(user_id), "user id", user_id)
    _require_valid(is_valid_password(password), "password", password)
    _require_valid(is_valid_username(username), "username", username)
    _add_account(ctx, Account(user_id, password, PRIVILEGE_CUSTOMER, username))
    return ""


def handle_passwd(ctx: CommandContext, args: List[str]) -> str:
    """
    passwd <user-id> [<current-password>] <new-password>

    Only privilege 7 may omit the current password, for any target account.
    """
    ctx.session.require(PRIVILEGE_CUSTOMER)
    _expect_arg_count(args, 2, 3)
    if len(args) == 2:
        ctx.session.require(PRIVILEGE_ROOT)
        user_id, new_password = args
        current_password = None
    else:
        user_id, current_password, new_password = args
        _require_valid(is_valid_password(current_password), "password", current_password)
    _require_valid(is_valid_user_id(user_id), "user id", user_id)
    _require_valid(is_valid_password(new_password), "password", new_password)

    accounts = ctx.store.load_accounts()
    index = _find_active_account(accounts, user_id)
    if index is None:
        raise BusinessRuleViolation(f"no active account {user_id!r}")
    if current_password is not None and accounts[index].password != current_password:
        raise AuthorizationFailed(f"wrong password for {user_id}")
    accounts[index] = replace(accounts[index], password=new_password)
    ctx.store.replace_accounts(accounts)
    return ""


def handle_useradd(ctx: CommandContext, args: List[str]) -> str:
    """useradd <user-id> <password> <privilege> <username>"""
    ctx.session.require(PRIVILEGE_CLERK)
    _expect_arg_count(args, 4)
    user_id, password, privilege_text, username = args
    privilege = parse_int(privilege_text)
    if privilege not in VALID_PRIVILEGES:
        raise ValidationFailed(f"privilege must be one of 1, 3, 7, got {privilege}")
    if privilege >= ctx.session.privilege:
        raise AuthorizationFailed(
            f"cannot create privilege {privilege} from privilege {ctx.session.privilege}"
        )
    _require_valid(is_valid_user_id(user_id), "user id", user_id)
    _require_valid(is_valid_password(password), "password", password)
    _require_valid(is_valid_username(username), "username", username)
    _add_account(ctx, Account(user_id, password, privilege, username))
    return ""


def handle_delete(ctx: CommandContext, args: List[str]) -> str:
    """delete <user-id>: soft-deactivate; refused while the user is anywhere in the stack."""
    ctx.session.require(PRIVILEGE_ROOT)
    _expect_arg_count(args, 1)
    user_id = args[0]
    accounts = ctx.store.load_accounts()
    index = _find_active_account(accounts, user_id)
    if index is None:
        raise BusinessRuleViolation(f"no active account {user_id!r}")
    if ctx.session.contains(user_id):
        raise BusinessRuleViolation(f"{user_id!r} is logged in")
    accounts[index] = replace(accounts[index], active=False)
    ctx.store.replace_accounts(accounts)
    return ""


# ============================================================================
# BOOK COMMANDS
# ============================================================================

def _book_matches(book: Book, key: str, value: str) -> bool:
    if key == "-ISBN":
        return book.isbn == value
    if key == "-name":
        return book.name == value
    if key == "-author":
        return book.author == value
    return value in book.keywords


def _check_show_filter(key: str, value: str) -> None:
    # Other values are matched as given; one that no book can carry matches nothing.
    if key == "-keyword" and KEYWORD_SEPARATOR in value:
        raise MalformedCommand("show accepts a single keyword")


def handle_show(ctx: CommandContext, args: List[str]) -> str:
    """
    show [-ISBN=<isbn> | -name=<name> | -author=<author> | -keyword=<keyword>]

    Lists matching books sorted by ISBN. 'show finance ...' is routed to
    handle_show_finance.
    """
    if args and args[0] == "finance":
        return handle_show_finance(ctx, args[1:])
    ctx.session.require(PRIVILEGE_CUSTOMER)
    _expect_arg_count(args, 0, 1)
    books = ctx.store.load_books()
    if args:
        ((key, value),) = _parse_flags(args, SHOW_FILTERS).items()
        _check_show_filter(key, value)
        books = [b for b in books if _book_matches(b, key, value)]
    books.sort(key=lambda b: b.isbn)
    return render_lines([format_book(b) for b in books])


def handle_buy(ctx: CommandContext, args: List[str]) -> str:
    """buy <isbn> <quantity>: prints the total price."""
    ctx.session.require(PRIVILEGE_CUSTOMER)
    _expect_arg_count(args, 2)
    isbn, quantity_text = args
    _require_valid(is_valid_isbn(isbn), "ISBN", isbn)
    quantity = parse_int(quantity_text)
    if quantity <= 0:
        raise ValidationFailed(f"quantity must be positive, got {quantity}")

    books = ctx.store.load_books()
    index = _find_book(books, isbn)
    if index is None:
        raise BusinessRuleViolation(f"no book with ISBN {isbn!r}")
    book = books[index]
    if book.stock < quantity:
        raise BusinessRuleViolation(f"only {book.stock} copies of {isbn!r} in stock")

    total = book.price_cents * quantity
    if total > MAX_INTEGER:
        raise BusinessRuleViolation(f"sale total for {quantity} copies of {isbn!r} is out of range")
    updated = list(books)
    updated[index] = replace(book, stock=book.stock - quantity)
    _commit_stock_change(ctx, books, updated, LedgerEntry(EntryType.BUY, total))
    return render_lines([format_money(total)])


def handle_select(ctx: CommandContext, args: List[str]) -> str:
    """select <isbn>: creates a bare book if the ISBN is new."""
    ctx.session.require(PRIVILEGE_CLERK)
    _expect_arg_count(args, 1)
    isbn = args[0]
    _require_valid(is_valid_isbn(isbn), "ISBN", isbn)
    books = ctx.store.load_books()
    if _find_book(books, isbn) is None:
        books.append(Book(isbn=isbn))
        ctx.store.replace_books(books)
    ctx.session.select(isbn)
    return ""


def handle_modify(ctx: CommandContext, args: List[str]) -> str:
    """
    modify (-ISBN=... | -name=... | -author=... | -keyword=... | -price=...)+

    All edits are validated before the selected book is rewritten; one bad
    field rejects the whole command. A new ISBN moves the current frame's
    selection with it.
    """
    ctx.session.require(PRIVILEGE_CLERK)
    selected = ctx.session.require_selection()
    if not args:
        raise MalformedCommand("modify needs at least one field")
    flags = _parse_flags(args, MODIFY_FIELDS)

    books = ctx.store.load_books()
    index = _find_book(books, selected)
    if index is None:
        raise BusinessRuleViolation(f"selected book {selected!r} no longer exists")
    changes = {}
    if "-ISBN" in flags:
        new_isbn = flags["-ISBN"]
        _require_valid(is_valid_isbn(new_isbn), "ISBN", new_isbn)
        if new_isbn == selected:
            raise BusinessRuleViolation("new ISBN equals the current one")
        if _find_book(books, new_isbn) is not None:
            raise BusinessRuleViolation(f"ISBN {new_isbn!r} already exists")
        changes["isbn"] = new_isbn
    if "-name" in flags:
        _require_valid(is_valid_book_text(flags["-name"]), "name", flags["-name"])
        changes["name"] = flags["-name"]
    if "-author" in flags:
        _require_valid(is_valid_book_text(flags["-author"]), "author", flags["-author"])
        changes["author"] = flags["-author"]
    if "-keyword" in flags:
        changes["keywords"] = split_keywords(flags["-keyword"])
    if "-price" in flags:
        changes["price_cents"] = parse_money(flags["-price"])

    books[index] = replace(books[index], **changes)
    ctx.store.replace_books(books)
    if "isbn" in changes:
        ctx.session.select(changes["isbn"])
    return ""


def handle_import(ctx: CommandContext, args: List[str]) -> str:
    """import <quantity> <total-cost>: restocks the selected book."""
    ctx.session.require(PRIVILEGE_CLERK)
    selected = ctx.session.require_selection()
    _expect_arg_count(args, 2)
    quantity = parse_int(args[0])
    if quantity <= 0:
        raise ValidationFailed(f"quantity must be positive, got {quantity}")
    cost = parse_money(args[1])
    if cost <= 0:
        raise ValidationFailed(f"total cost must be positive, got {args[1]!r}")

    books = ctx.store.load_books()
    index = _find_book(books, selected)
    if index is None:
        raise BusinessRuleViolation(f"selected book {selected!r} no longer exists")
    if books[index].stock + quantity > MAX_INTEGER:
        raise BusinessRuleViolation(f"stock of {selected!r} would exceed {MAX_INTEGER}")
    updated = list(books)
    updated[index] = replace(books[index], stock=books[index].stock + quantity)
    _commit_stock_change(ctx, books, updated, LedgerEntry(EntryType.IMPORT, cost))
    return ""


# ============================================================================
# FINANCE AND AUDIT COMMANDS
# ============================================================================

def handle_show_finance(ctx: CommandContext, args: List[str]) -> str:
    """show finance [<count>]: '+ <income> - <expense>' over the last count entries."""
    ctx.session.require(PRIVILEGE_ROOT)
    _expect_arg_count(args, 0, 1)
    count = parse_int(args[0]) if args else None
    if count is not None and count < 0:
        raise MalformedCommand(f"negative entry count {count}")
    if count == 0:
        return render_lines([])
    summary = summarize_ledger(ctx.store.load_ledger(), count)
    return render_lines([format_finance(summary)])


def handle_log(ctx: CommandContext, args: List[str]) -> str:
    ctx.session.require(PRIVILEGE_ROOT)
    _expect_arg_count(args, 0)
    return render_lines([format_audit_entry(e) for e in ctx.store.load_audit()])


def handle_report(ctx: CommandContext, args: List[str]) -> str:
    """report finance | report employee"""
    ctx.session.require(PRIVILEGE_ROOT)
    _expect_arg_count(args, 1)
    if args[0] == "finance":
        summary = summarize_ledger(ctx.store.load_ledger())
        return render_lines([format_finance_total(summary)])
    if args[0] == "employee":
        counts = count_by_actor(ctx.store.load_audit())
        return render_lines([f"{actor}\t{n}" for actor, n in counts])
    raise MalformedCommand(f"unknown report {args[0]!r}")


# ============================================================================
# HANDLER REGISTRY
# ============================================================================

DEFAULT_HANDLERS: Dict[str, CommandHandler] = {
    "su": handle_su,
    "logout": handle_logout,
    "register": handle_register,
    "passwd": handle_passwd,
    "useradd": handle_useradd,
    "delete": handle_delete,
    "show": handle_show,
    "buy": handle_buy,
    "select": handle_select,
    "modify": handle_modify,
    "import": handle_import,
    "log": handle_log,
    "report": handle_report,
}
