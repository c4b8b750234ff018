# =============================================================================
# tests/test_auth_store.py - Auth Session Store Tests
# =============================================================================
# Tests for core/services/auth_service.py against a canned backend:
# - login/register success in each response shape
# - failures leave the store logged out with an error message
# - register without a token falls through to login
# - logout and session restore
# - password reset flows
#
# Run with: pytest tests/test_auth_store.py -v
# =============================================================================

import httpx
import pytest

from app.exceptions import ApiError, NormalizationError, TokenStoreError, TransportError
from core.models.session import AuthStatus
from core.services.auth_service import AuthSessionStore
from lib.auth_api import AuthAPI
from lib.token_store import InMemoryTokenStore


class BrokenTokenStore(InMemoryTokenStore):
    """Token store whose every operation fails."""

    def save(self, token):
        raise TokenStoreError("save", "disk full")

    def load(self):
        raise TokenStoreError("load", "permission denied")

    def remove(self):
        raise TokenStoreError("remove", "permission denied")


@pytest.fixture
def token_store():
    return InMemoryTokenStore()


@pytest.fixture
def store(gateway, token_store):
    return AuthSessionStore(AuthAPI(gateway), token_store)


# =============================================================================
# Login
# =============================================================================

class TestLogin:
    """Tests for AuthSessionStore.login()."""

    @pytest.mark.asyncio
    async def test_login_success(self, store, backend, token_store, sample_user_dict):
        backend.add("POST", "/auth/login", 201, {"accessToken": "tok-1", "user": sample_user_dict})

        user = await store.login("maya@example.com", "secret")

        assert user.email == "maya@example.com"
        assert store.is_logged_in
        assert store.snapshot.status is AuthStatus.LOGGED_IN
        assert store.current_user == user
        assert store.snapshot.error_message is None
        assert token_store.load() == "tok-1"
        assert store.access_token() == "tok-1"
        assert backend.body_of() == {"email": "maya@example.com", "password": "secret"}

    @pytest.mark.asyncio
    async def test_login_nested_data(self, store, backend, sample_user_dict):
        backend.add("POST", "/auth/login", 200, {"data": {"token": "tok-2", "user": sample_user_dict}})

        await store.login("maya@example.com", "secret")

        assert store.access_token() == "tok-2"

    @pytest.mark.asyncio
    async def test_login_rejected(self, store, backend, token_store):
        backend.add("POST", "/auth/login", 401, {
            "statusCode": 401,
            "message": "Invalid credentials",
            "error": "Unauthorized",
        })

        with pytest.raises(ApiError) as exc_info:
            await store.login("maya@example.com", "wrong")

        assert exc_info.value.status_code == 401
        assert not store.is_logged_in
        assert store.current_user is None
        assert store.snapshot.error_message == "Invalid credentials"
        assert token_store.load() is None

    @pytest.mark.asyncio
    async def test_login_unreachable(self, store, backend):
        backend.fail("POST", "/auth/login", httpx.ConnectError("Connection refused"))

        with pytest.raises(TransportError):
            await store.login("maya@example.com", "secret")

        assert not store.is_logged_in
        assert store.snapshot.error_message.startswith("Unable to reach the server")

    @pytest.mark.asyncio
    async def test_login_malformed_user(self, store, backend, token_store):
        """A token is not persisted when the user in the response is unusable."""
        backend.add("POST", "/auth/login", 200, {"accessToken": "tok", "user": {"id": "u-1"}})

        with pytest.raises(NormalizationError):
            await store.login("maya@example.com", "secret")

        assert not store.is_logged_in
        assert token_store.load() is None
        assert store.snapshot.error_message == "Unexpected response format. Please update the app."

    @pytest.mark.asyncio
    async def test_login_message_only(self, store, backend, token_store):
        backend.add("POST", "/auth/login", 200, {"message": "Login successful"})

        user = await store.login("maya@example.com", "secret")

        assert user.email == "maya@example.com"
        assert user.is_anonymous
        assert store.is_logged_in
        assert token_store.load() is None

    @pytest.mark.asyncio
    async def test_tokenless_login_drops_previous_token(self, gateway, backend):
        """A restored session's token is not reused for a user logged in without one."""
        token_store = InMemoryTokenStore("token-of-previous-user")
        store = AuthSessionStore(AuthAPI(gateway), token_store)
        backend.add("POST", "/auth/login", 200, {"message": "ok"})

        user = await store.login("b@b.com", "pw")

        assert user.email == "b@b.com"
        assert store.is_logged_in
        assert store.access_token() is None
        assert token_store.load() is None

    @pytest.mark.asyncio
    async def test_token_not_saved(self, gateway, backend, sample_user_dict):
        store = AuthSessionStore(AuthAPI(gateway), BrokenTokenStore())
        backend.add("POST", "/auth/login", 200, {"accessToken": "tok", "user": sample_user_dict})

        with pytest.raises(TokenStoreError):
            await store.login("maya@example.com", "secret")

        assert not store.is_logged_in
        assert store.snapshot.error_message == "Could not access saved credentials."

    @pytest.mark.asyncio
    async def test_subscribers_see_transition(self, store, backend, sample_user_dict):
        backend.add("POST", "/auth/login", 200, {"accessToken": "tok", "user": sample_user_dict})
        statuses = []
        store.subscribe(lambda snapshot: statuses.append(snapshot.status))

        await store.login("maya@example.com", "secret")

        assert statuses == [AuthStatus.LOGGED_OUT, AuthStatus.LOGGED_IN]


# =============================================================================
# Register
# =============================================================================

class TestRegister:
    """Tests for AuthSessionStore.register()."""

    @pytest.mark.asyncio
    async def test_register_with_token(self, store, backend, token_store, sample_user_dict):
        backend.add("POST", "/auth/register", 201, {"accessToken": "tok-r", "user": sample_user_dict})

        user = await store.register("maya@example.com", "secret", "Maya", "Sydney")

        assert user.id == "u-1"
        assert store.is_logged_in
        assert token_store.load() == "tok-r"
        assert backend.body_of() == {
            "email": "maya@example.com",
            "password": "secret",
            "name": "Maya",
            "location": "Sydney",
        }

    @pytest.mark.asyncio
    async def test_register_without_token_logs_in(self, store, backend, token_store, sample_user_dict):
        """No token from register means a follow-up login with the same credentials."""
        backend.add("POST", "/auth/register", 201, {"message": "User registered successfully"})
        backend.add("POST", "/auth/login", 200, {"accessToken": "tok-l", "user": sample_user_dict})

        user = await store.register("maya@example.com", "secret", "Maya", "Sydney")

        assert [r.url.path for r in backend.requests] == ["/auth/register", "/auth/login"]
        assert backend.body_of() == {"email": "maya@example.com", "password": "secret"}
        assert user.id == "u-1"
        assert store.is_logged_in
        assert token_store.load() == "tok-l"

    @pytest.mark.asyncio
    async def test_register_user_only_logs_in(self, store, backend, sample_user_dict):
        backend.add("POST", "/auth/register", 201, {"user": sample_user_dict})
        backend.add("POST", "/auth/login", 200, {"accessToken": "tok-l", "user": sample_user_dict})

        await store.register("maya@example.com", "secret", "Maya", "Sydney")

        assert store.access_token() == "tok-l"

    @pytest.mark.asyncio
    async def test_register_conflict(self, store, backend):
        backend.add("POST", "/auth/register", 409, {
            "statusCode": 409,
            "message": "Email already registered",
            "error": "Conflict",
        })

        with pytest.raises(ApiError):
            await store.register("maya@example.com", "secret", "Maya", "Sydney")

        assert not store.is_logged_in
        assert store.snapshot.error_message == "Email already registered"
        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_register_validation_messages(self, store, backend):
        backend.add("POST", "/auth/register", 400, {
            "statusCode": 400,
            "message": ["email must be an email", "password is too short"],
            "error": "Bad Request",
        })

        with pytest.raises(ApiError) as exc_info:
            await store.register("not-an-email", "x", "Maya", "Sydney")

        assert exc_info.value.messages == ["email must be an email", "password is too short"]
        assert store.snapshot.error_message == "email must be an email"


# =============================================================================
# Logout & restore
# =============================================================================

class TestSession:
    """Tests for logout(), restore and access_token()."""

    @pytest.mark.asyncio
    async def test_logout(self, store, backend, token_store, sample_user_dict):
        backend.add("POST", "/auth/login", 200, {"accessToken": "tok", "user": sample_user_dict})
        await store.login("maya@example.com", "secret")

        store.logout()

        assert not store.is_logged_in
        assert store.current_user is None
        assert token_store.load() is None
        assert store.access_token() is None

    @pytest.mark.asyncio
    async def test_logout_survives_storage_failure(self, gateway):
        store = AuthSessionStore(AuthAPI(gateway), BrokenTokenStore())

        store.logout()

        assert store.snapshot.status is AuthStatus.LOGGED_OUT

    @pytest.mark.asyncio
    async def test_restores_persisted_token(self, gateway):
        store = AuthSessionStore(AuthAPI(gateway), InMemoryTokenStore("saved-token"))

        assert store.is_logged_in
        assert store.current_user is None
        assert store.access_token() == "saved-token"

    @pytest.mark.asyncio
    async def test_unreadable_token_means_logged_out(self, gateway):
        store = AuthSessionStore(AuthAPI(gateway), BrokenTokenStore())

        assert not store.is_logged_in
        assert store.access_token() is None

    @pytest.mark.asyncio
    async def test_empty_token_is_no_token(self, gateway):
        store = AuthSessionStore(AuthAPI(gateway), InMemoryTokenStore(""))

        assert not store.is_logged_in
        assert store.access_token() is None


# =============================================================================
# Password reset
# =============================================================================

class TestPasswordReset:
    """Tests for forgot_password / validate_reset_token / reset_password."""

    @pytest.mark.asyncio
    async def test_forgot_password(self, store, backend):
        backend.add("POST", "/auth/forgot-password", 200, {"message": "Reset email sent"})

        message = await store.forgot_password("maya@example.com")

        assert message == "Reset email sent"
        assert backend.body_of() == {"email": "maya@example.com"}

    @pytest.mark.asyncio
    async def test_validate_reset_token(self, store, backend):
        backend.add("GET", "/auth/reset-password", 200, {"valid": True})

        assert await store.validate_reset_token("abc") is True
        assert backend.requests[-1].url.params["token"] == "abc"

    @pytest.mark.asyncio
    async def test_reset_password(self, store, backend):
        backend.add("POST", "/auth/reset-password", 200, {"msg": "Password updated"})

        assert await store.reset_password("abc", "new-secret") == "Password updated"
        assert backend.body_of() == {"token": "abc", "password": "new-secret"}

    @pytest.mark.asyncio
    async def test_expired_token(self, store, backend):
        backend.add("POST", "/auth/reset-password", 400, {
            "statusCode": 400,
            "message": "Reset token has expired",
        })

        with pytest.raises(ApiError):
            await store.reset_password("abc", "new-secret")

        assert store.snapshot.error_message == "Reset token has expired"
        store.clear_error()
        assert store.snapshot.error_message is None
