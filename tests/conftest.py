# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up test environment variables before any imports
# - Provides sample backend payloads in the shapes the backend really sends
# - Provides an in-memory fake of the quick-match API for engine tests
# - Provides a canned HTTP backend wired into HttpGateway via MockTransport
# =============================================================================

import os
import tempfile

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately


os.environ.setdefault("NEXO_API_BASE_URL", "https://api.nexo.test")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("TOKEN_STORE_PATH", os.path.join(tempfile.gettempdir(), "nexo-test-token.json"))

import asyncio
import json
from typing import Any

import httpx
import pytest
import pytest_asyncio

from app.exceptions import ApiError
from core.models.profile import LikeResult, Pagination, ProfilePage
from core.models.user import Message
from lib.gateway import HttpGateway
from lib.normalizer import normalize_profile


# =============================================================================
# Sample payloads
# =============================================================================

@pytest.fixture
def sample_user_dict():
    """A user object as the backend sends it (Mongo-style _id)."""
    return {
        "_id": "u-1",
        "email": "maya@example.com",
        "name": "Maya",
        "location": "Sydney",
    }


@pytest.fixture
def sample_profile_dict():
    """A fully populated candidate profile."""
    return {
        "_id": "665f1c2a",
        "name": "Maya",
        "age": 27,
        "email": "maya@example.com",
        "avatarUrl": "https://cdn.example.com/maya-avatar.jpg",
        "coverImageUrl": "https://cdn.example.com/maya-cover.jpg",
        "location": "Sydney",
        "distance": "3 km",
        "bio": "Trail runner, weekend climber",
        "sportsInterests": ["Running", "Climbing", "Yoga", "Tennis"],
        "sports": [
            {"name": "Running", "icon": "🏃", "level": "Advanced"},
            {"name": "Climbing", "icon": "🧗", "level": "Beginner"},
        ],
        "interests": ["Trail running", "Bouldering"],
        "rating": 4,
        "activitiesJoined": 12,
    }


def profile_payload(index: int) -> dict:
    return {"_id": f"p{index}", "name": f"Person {index}", "age": 20 + index % 30}


# =============================================================================
# Fake quick-match API
# =============================================================================

class FakeQuickMatchAPI:
    """
    In-memory stand-in for lib.quick_match_api.QuickMatchAPI.

    Serves `total` profiles in pages and records every call. Individual
    calls can be made to fail, or held until a gate is opened.
    """

    def __init__(self, total: int = 45):
        self.profiles = [normalize_profile(profile_payload(i)) for i in range(total)]
        self.page_calls: list[int] = []
        self.like_calls: list[str] = []
        self.pass_calls: list[str] = []

        self.failing_pages: set[int] = set()
        self.failing_likes: set[str] = set()
        self.failing_passes: set[str] = set()
        self.like_results: dict[str, LikeResult] = {}

        # When set, calls wait on the gate before answering
        self.page_gate: asyncio.Event | None = None
        self.like_gate: asyncio.Event | None = None

    async def get_profiles(self, page: int = 1, limit: int = 20) -> ProfilePage:
        self.page_calls.append(page)
        if self.page_gate is not None:
            await self.page_gate.wait()
        if page in self.failing_pages:
            raise ApiError(500, "Profiles are unavailable right now.")

        start = (page - 1) * limit
        total_pages = -(-len(self.profiles) // limit)
        return ProfilePage(
            profiles=tuple(self.profiles[start:start + limit]),
            pagination=Pagination(
                total=len(self.profiles),
                page=page,
                total_pages=total_pages,
                limit=limit,
            ),
        )

    async def like_profile(self, profile_id: str) -> LikeResult:
        self.like_calls.append(profile_id)
        if self.like_gate is not None:
            await self.like_gate.wait()
        if profile_id in self.failing_likes:
            raise ApiError(500, "Could not save your like.")
        return self.like_results.get(profile_id, LikeResult(is_match=False))

    async def pass_profile(self, profile_id: str) -> Message:
        self.pass_calls.append(profile_id)
        if profile_id in self.failing_passes:
            raise ApiError(503, ["Service unavailable", "Try later"])
        return Message(message="Passed")

    async def get_matches(self):
        return []

    async def get_likes_received(self):
        return []


@pytest.fixture
def fake_quick_match_api():
    return FakeQuickMatchAPI(total=45)


# =============================================================================
# Mock backend (httpx.MockTransport)
# =============================================================================

class MockBackend:
    """
    Canned HTTP backend for httpx.MockTransport.

    Routes map (method, path) to (status, body) or to an exception to raise.
    Unknown routes answer 404 the way the backend does. Every request is
    recorded in `requests`.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        self.routes[(method, path)] = (status, body)

    def fail(self, method: str, path: str, error: Exception) -> None:
        self.routes[(method, path)] = error

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))

        if route is None:
            return httpx.Response(404, json={
                "statusCode": 404,
                "message": f"Cannot {request.method} {request.url.path}",
                "error": "Not Found",
            })
        if isinstance(route, Exception):
            raise route

        status, body = route
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def body_of(self, index: int = -1) -> Any:
        """Decoded JSON body of a recorded request."""
        return json.loads(self.requests[index].content)


@pytest.fixture
def backend():
    return MockBackend()


@pytest_asyncio.fixture
async def gateway(backend):
    async with HttpGateway(
        base_url="https://api.nexo.test",
        timeout=5,
        transport=httpx.MockTransport(backend.handle),
    ) as gw:
        yield gw
