# =============================================================================
# lib/quick_match_api.py - Quick Match Endpoints
# =============================================================================
# Typed, authorized calls for the swipe feature:
#   GET  /profiles?page=&limit=
#   POST /like            {profileId}
#   POST /pass            {profileId}
#   GET  /matches
#   GET  /likes-received
#
# Paths are joined under settings.quick_match_prefix. Every call needs an
# access token; without one the call fails with a 401 ApiError before any
# request is sent.
# =============================================================================

from __future__ import annotations

import logging
from typing import Callable

from app.config import settings
from app.exceptions import ApiError
from core.models.match import LikeReceived, Match
from core.models.profile import LikeResult, ProfilePage
from core.models.user import Message
from lib.gateway import HttpGateway
from lib.normalizer import (
    normalize_like_result,
    normalize_likes_received,
    normalize_matches,
    normalize_message,
    normalize_profile_page,
)

logger = logging.getLogger(__name__)

# Returns the current access token, or None when signed out
TokenProvider = Callable[[], str | None]


class QuickMatchAPI:
    """
    Client for the quick-match endpoints.

    The token is read through `token_provider` on every call; this class
    never stores or changes it.
    """

    def __init__(
        self,
        gateway: HttpGateway,
        token_provider: TokenProvider,
        prefix: str | None = None,
    ):
        self.gateway = gateway
        self.token_provider = token_provider
        self.prefix = settings.quick_match_prefix if prefix is None else prefix.rstrip("/")

    def _token(self) -> str:
        token = self.token_provider()
        if not token:
            raise ApiError.not_authenticated()
        return token

    def _path(self, path: str) -> str:
        return f"{self.prefix}{path}"

    async def get_profiles(self, page: int = 1, limit: int = 20) -> ProfilePage:
        payload = await self.gateway.request(
            "GET",
            self._path("/profiles"),
            params={"page": page, "limit": limit},
            token=self._token(),
        )
        return normalize_profile_page(payload, requested_page=page)

    async def like_profile(self, profile_id: str) -> LikeResult:
        payload = await self.gateway.request(
            "POST",
            self._path("/like"),
            json={"profileId": profile_id},
            token=self._token(),
        )
        return normalize_like_result(payload)

    async def pass_profile(self, profile_id: str) -> Message:
        """Any 2xx body counts as success; only string/object bodies are read."""
        payload = await self.gateway.request(
            "POST",
            self._path("/pass"),
            json={"profileId": profile_id},
            token=self._token(),
        )
        if isinstance(payload, (dict, str)):
            return normalize_message(payload)
        return Message()

    async def get_matches(self) -> list[Match]:
        payload = await self.gateway.request("GET", self._path("/matches"), token=self._token())
        return normalize_matches(payload)

    async def get_likes_received(self) -> list[LikeReceived]:
        payload = await self.gateway.request("GET", self._path("/likes-received"), token=self._token())
        return normalize_likes_received(payload)
