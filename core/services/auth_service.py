# =============================================================================
# core/services/auth_service.py - Auth Session Store
# =============================================================================
# Owns the authentication state: logged-in flag, current user, access token.
#
# States:
#   LOGGED_OUT -> login()/register() -> LOGGED_IN(user)
#   LOGGED_IN  -> logout()           -> LOGGED_OUT
#
# A failed login/register never leaves partial state behind: the token is
# persisted before the transition, and the transition is the last step.
#
# The presentation layer reads AuthSnapshot through subscribe()/snapshot and
# calls the async commands; it never mutates the state itself.
# =============================================================================

import logging
from typing import Callable

from app.exceptions import NexoError, user_message_for
from core.models.session import AuthSnapshot, AuthStatus
from core.models.user import (
    AuthResult,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    User,
)
from lib.auth_api import AuthAPI
from lib.observable import StateContainer
from lib.token_store import TokenStore

logger = logging.getLogger(__name__)


class AuthSessionStore:
    """
    Authentication state machine.

    Example:
        store = AuthSessionStore(AuthAPI(gateway), FileTokenStore())
        await store.login("a@b.com", "secret")
        store.snapshot.is_logged_in  # True
    """

    def __init__(self, api: AuthAPI, token_store: TokenStore):
        """
        Create the store and restore a persisted session.

        A token already on disk puts the store straight into LOGGED_IN with
        no user: the user is unknown until fetched again.

        Args:
            api: Client for the /auth endpoints
            token_store: Where the access token is persisted
        """
        self.api = api
        self.token_store = token_store
        self._state: StateContainer[AuthSnapshot] = StateContainer(AuthSnapshot())
        self._restore()

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def snapshot(self) -> AuthSnapshot:
        return self._state.snapshot

    @property
    def is_logged_in(self) -> bool:
        return self._state.snapshot.is_logged_in

    @property
    def current_user(self) -> User | None:
        return self._state.snapshot.user

    def subscribe(self, callback: Callable[[AuthSnapshot], None]) -> Callable[[], None]:
        return self._state.subscribe(callback)

    def access_token(self) -> str | None:
        """
        Current access token, or None.

        Read errors count as "no token" so callers only have to handle one
        signed-out case.
        """
        try:
            token = self.token_store.load()
        except Exception as e:
            logger.warning(f"Failed to load access token: {e}")
            return None
        return token or None

    def clear_error(self) -> None:
        if self._state.snapshot.error_message is not None:
            self._state.update(error_message=None)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def login(self, email: str, password: str) -> User:
        """
        Sign in and persist the issued token.

        Returns:
            The signed-in user

        Raises:
            TransportError / ApiError: Backend unreachable or refused
            NormalizationError: Response matched no accepted shape
            TokenStoreError: Token could not be persisted
        """
        try:
            result = await self.api.login(LoginRequest(email=email, password=password))
            self._persist(result)
        except Exception as e:
            self._record_error("Login", e)
            raise

        return self._enter_logged_in(result.user)

    async def register(self, email: str, password: str, name: str, location: str) -> User:
        """
        Create an account and establish a session.

        Register sometimes succeeds without issuing a token. In that case the
        account exists but there is no session yet, so login() is called with
        the same credentials to get one.

        Returns:
            The signed-in user
        """
        try:
            result = await self.api.register(
                RegisterRequest(email=email, password=password, name=name, location=location)
            )
        except Exception as e:
            self._record_error("Registration", e)
            raise

        if not result.has_token:
            logger.info(f"Registration for {email} issued no token, logging in")
            return await self.login(email, password)

        try:
            self._persist(result)
        except Exception as e:
            self._record_error("Registration", e)
            raise

        return self._enter_logged_in(result.user)

    def logout(self) -> None:
        """
        Sign out.

        Removing the persisted token is best-effort: a storage failure is
        logged and the store still ends up LOGGED_OUT.
        """
        try:
            self.token_store.remove()
        except Exception as e:
            logger.warning(f"Failed to remove persisted token during logout: {e}")

        self._state.set(AuthSnapshot(status=AuthStatus.LOGGED_OUT))
        logger.info("Logged out")

    async def forgot_password(self, email: str) -> str:
        """Request a password reset email. Returns the backend's message."""
        try:
            message = await self.api.forgot_password(ForgotPasswordRequest(email=email))
        except Exception as e:
            self._record_error("Password reset request", e)
            raise
        return message.message

    async def validate_reset_token(self, token: str) -> bool:
        try:
            validation = await self.api.validate_reset_token(token)
        except Exception as e:
            self._record_error("Reset token validation", e)
            raise
        return validation.valid

    async def reset_password(self, token: str, new_password: str) -> str:
        try:
            message = await self.api.reset_password(
                ResetPasswordRequest(token=token, password=new_password)
            )
        except Exception as e:
            self._record_error("Password reset", e)
            raise
        return message.message

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _restore(self) -> None:
        token = self.access_token()
        if token:
            self._state.set(AuthSnapshot(status=AuthStatus.LOGGED_IN, user=None))
            logger.info("Restored persisted session (user not loaded)")

    def _persist(self, result: AuthResult) -> None:
        if result.has_token:
            self.token_store.save(result.access_token)
        else:
            # A token left by an earlier session must not outlive this login
            self.token_store.remove()
            logger.warning(f"Login for {result.user.email} completed without an access token")

    def _enter_logged_in(self, user: User) -> User:
        self._state.set(AuthSnapshot(status=AuthStatus.LOGGED_IN, user=user))
        logger.info(f"Logged in as {user.email}")
        return user

    def _record_error(self, operation: str, error: Exception) -> None:
        level = logging.WARNING if isinstance(error, NexoError) else logging.ERROR
        logger.log(level, f"{operation} failed: {error}")
        self._state.update(error_message=user_message_for(error))
