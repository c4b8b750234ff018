# =============================================================================
# core/models/session.py - Session State Snapshots
# =============================================================================
# Immutable snapshots published by the two stateful services:
# - AuthSnapshot: emitted by AuthSessionStore
# - SwipeSessionState: emitted by SwipeSessionEngine
#
# The presentation layer only ever sees these snapshots. Mutation happens
# inside the services, which then publish a fresh snapshot.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field

from .profile import Profile
from .user import User


class AuthStatus(str, Enum):
    """
    States of the auth session.

    Flow: logged_out -> logged_in -> (logout) -> logged_out
    """
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"


class AuthSnapshot(BaseModel):
    """
    Read-only view of the auth session.

    A restored session is LOGGED_IN with user=None: the token was found on
    disk but the user has not been fetched again.
    """

    status: AuthStatus = AuthStatus.LOGGED_OUT
    user: User | None = None
    error_message: str | None = None

    class Config:
        frozen = True

    @property
    def is_logged_in(self) -> bool:
        return self.status is AuthStatus.LOGGED_IN


class SwipeDirection(str, Enum):
    """Swipe decision: right likes, left passes."""
    LEFT = "left"
    RIGHT = "right"


class PaginationCursor(BaseModel):
    """
    Where the next GET /profiles starts.

    current_page only moves after a successful fetch; has_more turns False
    only once a response reports its page as the last one.
    """

    current_page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)
    has_more: bool = True

    class Config:
        frozen = True


class SwipeSessionState(BaseModel):
    """
    Read-only view of the swipe session.

    cursor_index never exceeds len(queue). The current candidate is
    queue[cursor_index] while that index is in range.
    """

    queue: tuple[Profile, ...] = ()
    cursor_index: int = Field(default=0, ge=0)
    liked_count: int = Field(default=0, ge=0)
    pending_match: Profile | None = None
    pagination: PaginationCursor = Field(default_factory=PaginationCursor)
    is_loading: bool = False
    error_message: str | None = None
    generation: int = 0

    class Config:
        frozen = True

    @property
    def current_candidate(self) -> Profile | None:
        if self.cursor_index < len(self.queue):
            return self.queue[self.cursor_index]
        return None

    @property
    def next_candidates(self) -> tuple[Profile, ...]:
        """Up to two profiles queued behind the current candidate."""
        start = self.cursor_index + 1
        return self.queue[start:start + 2]

    @property
    def has_more_profiles(self) -> bool:
        return self.cursor_index < len(self.queue)

    @property
    def is_complete(self) -> bool:
        """Nothing left to show and nothing left to fetch."""
        return (
            self.cursor_index >= len(self.queue)
            and not self.is_loading
            and not self.pagination.has_more
        )

    @property
    def show_match(self) -> bool:
        return self.pending_match is not None
