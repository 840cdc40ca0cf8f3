"""
session.py - Nested login stack

The stack holds one SessionFrame per successful su. The top frame is the
current user; its privilege is a snapshot taken at login and is never re-read
from the account store. Each frame carries its own selected book, so logging
out restores the previous frame's selection.

An empty stack means nobody is logged in: privilege is 0 and every
privilege-gated command is refused.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from .core import (
    Account,
    AuthorizationFailed, BusinessRuleViolation,
    PRIVILEGE_GUEST, PRIVILEGE_CUSTOMER,
)


@dataclass(slots=True)
class SessionFrame:
    """
    One logged-in identity.

    Attributes:
        user_id: Account id at login time.
        privilege: Privilege snapshot at login time.
        selected_isbn: Book targeted by modify/import, empty until select.
    """
    user_id: str
    privilege: int
    selected_isbn: str = ""


class SessionStack:
    """
    Ordered stack of SessionFrame objects, owned by one engine.

    Example:
        session = SessionStack()
        session.login(root_account, "sjtu")
        session.require(7)
        session.logout()
    """

    def __init__(self):
        self._frames: List[SessionFrame] = []

    # ========================================================================
    # QUERIES
    # ========================================================================

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def is_logged_in(self) -> bool:
        return bool(self._frames)

    @property
    def current(self) -> Optional[SessionFrame]:
        """Top frame, or None when the stack is empty."""
        return self._frames[-1] if self._frames else None

    @property
    def privilege(self) -> int:
        """Privilege of the top frame, 0 when nobody is logged in."""
        return self._frames[-1].privilege if self._frames else PRIVILEGE_GUEST

    @property
    def user_id(self) -> Optional[str]:
        return self._frames[-1].user_id if self._frames else None

    @property
    def selected_isbn(self) -> str:
        return self._frames[-1].selected_isbn if self._frames else ""

    @property
    def frames(self) -> List[SessionFrame]:
        """Copy of the frames, bottom first."""
        return list(self._frames)

    def contains(self, user_id: str) -> bool:
        """True if user_id is logged in at any depth."""
        return any(frame.user_id == user_id for frame in self._frames)

    def require(self, privilege: int) -> None:
        """
        Check the current privilege.

        Raises:
            AuthorizationFailed: If the top frame's privilege is below the requirement
        """
        if self.privilege < privilege:
            raise AuthorizationFailed(
                f"privilege {privilege} required, current is {self.privilege}"
            )

    # ========================================================================
    # TRANSITIONS
    # ========================================================================

    def login(self, account: Account, password: Optional[str] = None) -> SessionFrame:
        """
        Push a frame for account.

        With a password: succeeds iff the account is active and the password
        matches. Without one: succeeds only when someone is logged in and the
        current privilege strictly exceeds the target's.

        Raises:
            AuthorizationFailed: On inactive account, bad password or
                                 insufficient privilege for a password-less switch
        """
        if not account.active:
            raise AuthorizationFailed(f"account {account.user_id} is not active")
        if password is not None:
            if password != account.password:
                raise AuthorizationFailed(f"wrong password for {account.user_id}")
        elif not self._frames or self.privilege <= account.privilege:
            raise AuthorizationFailed(
                f"cannot switch to {account.user_id} without password "
                f"from privilege {self.privilege}"
            )
        frame = SessionFrame(user_id=account.user_id, privilege=account.privilege)
        self._frames.append(frame)
        return frame

    def logout(self) -> SessionFrame:
        """
        Pop the top frame.

        Raises:
            AuthorizationFailed: If nobody is logged in
        """
        self.require(PRIVILEGE_CUSTOMER)
        return self._frames.pop()

    def select(self, isbn: str) -> None:
        """Set the top frame's selected book."""
        if not self._frames:
            raise AuthorizationFailed("no session to select a book in")
        self._frames[-1].selected_isbn = isbn

    def require_selection(self) -> str:
        """
        Return the top frame's selected ISBN.

        Raises:
            BusinessRuleViolation: If no book is selected in the current frame
        """
        isbn = self.selected_isbn
        if not isbn:
            raise BusinessRuleViolation("no book selected")
        return isbn

    def __repr__(self) -> str:
        chain = " > ".join(f"{f.user_id}({f.privilege})" for f in self._frames) or "<empty>"
        return f"SessionStack({chain})"
