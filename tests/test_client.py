# =============================================================================
# tests/test_client.py - End-to-End Client Tests
# =============================================================================
# Drives create_client() against the canned backend: sign in, load
# candidates with the issued token, swipe, and sign out.
# =============================================================================

import httpx
import pytest

from app.config import Settings
from app.exceptions import ApiError
from app.main import create_client
from lib.token_store import InMemoryTokenStore


@pytest.fixture
def client_settings():
    return Settings(
        _env_file=None,
        NEXO_API_BASE_URL="https://api.nexo.test/",
        NEXO_QUICK_MATCH_PREFIX="quick-match",
        SWIPE_ADVANCE_DELAY_SECONDS=0,
        MATCH_DISPLAY_SECONDS=0,
        QUICK_MATCH_PAGE_SIZE=2,
    )


class TestNexoClient:
    """Tests for the assembled client."""

    @pytest.mark.asyncio
    async def test_login_then_swipe(self, backend, client_settings, sample_user_dict):
        backend.add("POST", "/auth/login", 201, {"accessToken": "tok-1", "user": sample_user_dict})
        backend.add("GET", "/quick-match/profiles", 200, {
            "profiles": [{"_id": "p1", "name": "Sam"}, {"_id": "p2", "name": "Kim"}],
            "pagination": {"total": 2, "page": 1, "totalPages": 1, "limit": 2},
        })
        backend.add("POST", "/quick-match/like", 201, {"isMatch": True})

        async with create_client(
            settings=client_settings,
            token_store=InMemoryTokenStore(),
            transport=httpx.MockTransport(backend.handle),
        ) as client:
            await client.auth.login("maya@example.com", "secret")
            await client.quick_match.start()

            assert client.quick_match.current_candidate().name == "Sam"

            matches = []
            client.quick_match.subscribe(
                lambda state: state.pending_match and matches.append(state.pending_match.id)
            )
            client.quick_match.like_current()
            await client.quick_match.wait_until_idle()

            assert client.quick_match.current_candidate().name == "Kim"
            assert set(matches) == {"p1"}

        profiles_request = backend.requests[1]
        assert str(profiles_request.url) == "https://api.nexo.test/quick-match/profiles?page=1&limit=2"
        assert profiles_request.headers["Authorization"] == "Bearer tok-1"
        assert backend.body_of() == {"profileId": "p1"}

    @pytest.mark.asyncio
    async def test_logout_revokes_access(self, backend, client_settings):
        async with create_client(
            settings=client_settings,
            token_store=InMemoryTokenStore("saved"),
            transport=httpx.MockTransport(backend.handle),
        ) as client:
            assert client.auth.is_logged_in

            client.auth.logout()
            await client.quick_match.start()

            assert client.quick_match.snapshot.error_message == ApiError.not_authenticated().user_message
            assert backend.requests == []
