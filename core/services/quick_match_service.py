# =============================================================================
# core/services/quick_match_service.py - Swipe Session Engine
# =============================================================================
# Serves one candidate at a time, applies swipe decisions and keeps the
# queue topped up.
#
# Behavior worth knowing before changing anything here:
# - liked_count is an optimistic UI counter. It goes up the moment swipe()
#   is called, not when the backend confirms the like.
# - The cursor moves past a swiped profile after a short fixed delay,
#   whether or not the like/pass call has finished.
# - A successful like/pass removes the profile from the queue by id. A
#   failed one records error_message and changes nothing else: the cursor
#   has already moved on and the profile is not shown again.
# - Every background task remembers the generation it was started in.
#   reset() bumps the generation, so results arriving afterwards are dropped.
#
# All methods must run on the event loop that owns the engine.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

from app.config import settings
from app.exceptions import NexoError, user_message_for
from core.models.match import LikeReceived, Match
from core.models.profile import Profile, ProfilePage
from core.models.session import PaginationCursor, SwipeDirection, SwipeSessionState
from lib.observable import StateContainer
from lib.quick_match_api import QuickMatchAPI

logger = logging.getLogger(__name__)


class SwipeSessionEngine:
    """
    Paginated, prefetching swipe queue.

    Example:
        engine = SwipeSessionEngine(QuickMatchAPI(gateway, auth.access_token))
        await engine.start()
        engine.swipe(SwipeDirection.RIGHT, engine.current_candidate())
        await engine.wait_until_idle()
    """

    def __init__(
        self,
        api: QuickMatchAPI,
        page_size: int | None = None,
        advance_delay: float | None = None,
        match_display_seconds: float | None = None,
        prefetch_threshold: int | None = None,
    ):
        """
        Args:
            api: Authorized quick-match client
            page_size: Profiles per page (defaults to settings)
            advance_delay: Seconds before the cursor moves past a swipe
            match_display_seconds: How long pending_match stays set
            prefetch_threshold: Load more when this close to the queue's end
        """
        self.api = api
        self.page_size = page_size or settings.QUICK_MATCH_PAGE_SIZE
        self.advance_delay = settings.SWIPE_ADVANCE_DELAY_SECONDS if advance_delay is None else advance_delay
        self.match_display_seconds = (
            settings.MATCH_DISPLAY_SECONDS if match_display_seconds is None else match_display_seconds
        )
        self.prefetch_threshold = (
            settings.PREFETCH_THRESHOLD if prefetch_threshold is None else prefetch_threshold
        )

        self._generation = 0
        self._match_token = 0
        self._tasks: set[asyncio.Task] = set()
        self._state: StateContainer[SwipeSessionState] = StateContainer(self._initial_state())

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def snapshot(self) -> SwipeSessionState:
        return self._state.snapshot

    def subscribe(self, callback: Callable[[SwipeSessionState], None]) -> Callable[[], None]:
        return self._state.subscribe(callback)

    def current_candidate(self) -> Profile | None:
        return self._state.snapshot.current_candidate

    def next_candidates(self) -> tuple[Profile, ...]:
        return self._state.snapshot.next_candidates

    @property
    def is_complete(self) -> bool:
        return self._state.snapshot.is_complete

    def clear_error(self) -> None:
        if self._state.snapshot.error_message is not None:
            self._state.update(error_message=None)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """
        Return to the initial state.

        In-flight calls are left to finish, but their results are ignored.
        """
        self._generation += 1
        self._match_token += 1
        self._state.set(self._initial_state())
        logger.info(f"Swipe session reset (generation {self._generation})")

    async def start(self) -> None:
        """Reset and load the first page."""
        self.reset()
        await self.load_page()

    async def wait_until_idle(self) -> None:
        """Wait for every background task, including ones spawned meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    async def load_page(self) -> None:
        """
        Fetch the next page of candidates.

        No-op while another load is in flight or after the last page. The
        first page replaces the queue; later pages are appended in order,
        skipping ids already queued.
        """
        state = self._state.snapshot
        if state.is_loading or not state.pagination.has_more:
            logger.debug(
                f"Skipping page load (loading={state.is_loading}, has_more={state.pagination.has_more})"
            )
            return

        generation = self._generation
        page = state.pagination.current_page
        self._state.update(is_loading=True, error_message=None)

        try:
            result = await self.api.get_profiles(page=page, limit=self.page_size)
        except Exception as e:
            if self._is_stale(generation):
                return
            self._state.update(is_loading=False)
            self._record_error(f"Loading page {page}", e)
            return

        if self._is_stale(generation):
            logger.debug(f"Dropping page {page} from generation {generation}")
            return

        self._apply_page(page, result)

    def _apply_page(self, requested_page: int, result: ProfilePage) -> None:
        state = self._state.snapshot

        if requested_page == 1:
            base: tuple[Profile, ...] = ()
            cursor = 0
        else:
            base = state.queue
            cursor = state.cursor_index

        seen = {p.id for p in base}
        added = []
        for profile in result.profiles:
            if profile.id not in seen:
                seen.add(profile.id)
                added.append(profile)

        queue = base + tuple(added)
        pagination = PaginationCursor(
            current_page=result.pagination.page + 1,
            page_size=self.page_size,
            has_more=result.pagination.has_more,
        )
        self._state.update(
            queue=queue,
            cursor_index=min(cursor, len(queue)),
            pagination=pagination,
            is_loading=False,
        )
        logger.info(
            f"Loaded page {result.pagination.page}/{result.pagination.total_pages}: "
            f"+{len(added)} profiles, queue={len(queue)}, has_more={pagination.has_more}"
        )

    # -------------------------------------------------------------------------
    # Swiping
    # -------------------------------------------------------------------------

    def swipe(self, direction: SwipeDirection | str, profile: Profile) -> None:
        """
        Apply a swipe decision.

        Right: liked_count goes up now and a like call is fired. Left: a
        pass call is fired. Either way the cursor moves on after
        `advance_delay`, independently of the call.
        """
        direction = SwipeDirection(direction)
        generation = self._generation

        if direction is SwipeDirection.RIGHT:
            self._state.update(liked_count=self._state.snapshot.liked_count + 1)
            self._spawn(self._like(profile, generation), f"like-{profile.id}")
        else:
            self._spawn(self._pass(profile, generation), f"pass-{profile.id}")

        self._spawn(self._advance_after_delay(profile.id, generation), f"advance-{profile.id}")

    def like_current(self) -> bool:
        """Swipe right on the current candidate. False when there is none."""
        return self._swipe_current(SwipeDirection.RIGHT)

    def pass_current(self) -> bool:
        """Swipe left on the current candidate. False when there is none."""
        return self._swipe_current(SwipeDirection.LEFT)

    def _swipe_current(self, direction: SwipeDirection) -> bool:
        profile = self.current_candidate()
        if profile is None:
            return False
        self.swipe(direction, profile)
        return True

    async def _like(self, profile: Profile, generation: int) -> None:
        try:
            result = await self.api.like_profile(profile.id)
        except Exception as e:
            if not self._is_stale(generation):
                self._record_error(f"Like {profile.id}", e)
            return

        if self._is_stale(generation):
            return

        self._remove_by_id(profile.id)

        if result.is_match:
            # No matchedProfile in the answer: show the profile that was swiped
            self._show_match(result.matched_profile or profile, generation)

    async def _pass(self, profile: Profile, generation: int) -> None:
        try:
            await self.api.pass_profile(profile.id)
        except Exception as e:
            if not self._is_stale(generation):
                self._record_error(f"Pass {profile.id}", e)
            return

        if not self._is_stale(generation):
            self._remove_by_id(profile.id)

    async def _advance_after_delay(self, profile_id: str, generation: int) -> None:
        await asyncio.sleep(self.advance_delay)

        if self._is_stale(generation):
            return

        self._advance_past(profile_id)

        state = self._state.snapshot
        if (
            state.cursor_index >= len(state.queue) - self.prefetch_threshold
            and state.pagination.has_more
            and not state.is_loading
        ):
            logger.debug(f"Prefetching page {state.pagination.current_page}")
            self._spawn(self.load_page(), f"prefetch-{state.pagination.current_page}")

    def _advance_past(self, profile_id: str) -> None:
        """
        Move the cursor past `profile_id`.

        If a successful like/pass already removed the profile, the next
        candidate has slid under the cursor and the cursor stays put.
        """
        state = self._state.snapshot
        queue, cursor = state.queue, state.cursor_index

        if any(p.id == profile_id for p in queue):
            cursor += 1

        self._state.update(cursor_index=min(cursor, len(queue)))

    def _remove_by_id(self, profile_id: str) -> None:
        """
        Drop a profile from the queue.

        Idempotent. Removing a profile behind the cursor shifts the cursor
        back by one so the current candidate stays the same.
        """
        state = self._state.snapshot
        index = next((i for i, p in enumerate(state.queue) if p.id == profile_id), None)
        if index is None:
            return

        queue = tuple(p for p in state.queue if p.id != profile_id)
        cursor = state.cursor_index - 1 if index < state.cursor_index else state.cursor_index
        self._state.update(queue=queue, cursor_index=max(0, min(cursor, len(queue))))

    # -------------------------------------------------------------------------
    # Matches
    # -------------------------------------------------------------------------

    def _show_match(self, profile: Profile, generation: int) -> None:
        self._match_token += 1
        token = self._match_token
        self._state.update(pending_match=profile)
        logger.info(f"It's a match: {profile.id}")
        self._spawn(self._clear_match_after_delay(token, generation), f"match-{profile.id}")

    async def _clear_match_after_delay(self, token: int, generation: int) -> None:
        await asyncio.sleep(self.match_display_seconds)
        # A newer match restarts the display window
        if self._is_stale(generation) or token != self._match_token:
            return
        self._state.update(pending_match=None)

    def dismiss_match(self) -> None:
        """Clear pending_match before the display window ends."""
        self._match_token += 1
        if self._state.snapshot.pending_match is not None:
            self._state.update(pending_match=None)

    async def fetch_matches(self) -> list[Match]:
        """Mutual matches. Failures are recorded and yield an empty list."""
        try:
            return await self.api.get_matches()
        except Exception as e:
            self._record_error("Loading matches", e)
            return []

    async def fetch_likes_received(self) -> list[LikeReceived]:
        """Incoming likes. Failures are recorded and yield an empty list."""
        try:
            return await self.api.get_likes_received()
        except Exception as e:
            self._record_error("Loading likes", e)
            return []

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _initial_state(self) -> SwipeSessionState:
        return SwipeSessionState(
            pagination=PaginationCursor(page_size=self.page_size),
            generation=self._generation,
        )

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _spawn(self, coro: Coroutine[Any, Any, None], name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _record_error(self, operation: str, error: Exception) -> None:
        if isinstance(error, NexoError):
            logger.warning(f"{operation} failed: {error}")
        else:
            logger.exception(f"{operation} failed unexpectedly")
        self._state.update(error_message=user_message_for(error))
