# =============================================================================
# lib/observable.py - Snapshot State Container
# =============================================================================
# Holds one immutable snapshot and notifies subscribers whenever it changes.
#
# Usage:
#   container = StateContainer(SwipeSessionState())
#   unsubscribe = container.subscribe(lambda state: render(state))
#
#   # Only the owning service calls this
#   container.update(liked_count=container.snapshot.liked_count + 1)
#
#   unsubscribe()
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseModel)

Subscriber = Callable[[S], None]


class StateContainer(Generic[S]):
    """
    Owns the current snapshot of a service's state.

    Snapshots are frozen pydantic models; `update` builds a new one with
    model_copy and broadcasts it. A subscriber that raises is logged and
    dropped so it cannot break the service that published the change.
    """

    def __init__(self, initial: S):
        self._snapshot = initial
        self._subscribers: list[Subscriber[S]] = []

    @property
    def snapshot(self) -> S:
        return self._snapshot

    def subscribe(self, callback: Subscriber[S], emit_current: bool = True) -> Callable[[], None]:
        """
        Register a subscriber.

        Args:
            callback: Called with every new snapshot
            emit_current: Also call it right away with the current snapshot

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)
        logger.debug(f"Subscriber added. Total subscribers: {len(self._subscribers)}")

        if emit_current and not self._deliver(callback, self._snapshot):
            self._subscribers.remove(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)
                logger.debug(f"Subscriber removed. Total subscribers: {len(self._subscribers)}")

        return unsubscribe

    def set(self, snapshot: S) -> S:
        """Replace the snapshot and notify subscribers."""
        self._snapshot = snapshot
        self._broadcast(snapshot)
        return snapshot

    def update(self, **changes: Any) -> S:
        """Copy the snapshot with `changes` applied, then publish it."""
        return self.set(self._snapshot.model_copy(update=changes))

    def _deliver(self, callback: Subscriber[S], snapshot: S) -> bool:
        try:
            callback(snapshot)
            return True
        except Exception as e:
            logger.warning(f"Subscriber {callback!r} failed, dropping it: {e}")
            return False

    def _broadcast(self, snapshot: S) -> int:
        dead: list[Subscriber[S]] = []
        sent_count = 0

        for callback in list(self._subscribers):
            if self._deliver(callback, snapshot):
                sent_count += 1
            else:
                dead.append(callback)

        for callback in dead:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        if dead:
            logger.info(f"Cleaned up {len(dead)} failing subscribers")

        return sent_count
