# =============================================================================
# lib/auth_api.py - /auth Endpoints
# =============================================================================
# Typed calls for the auth endpoints. Each method sends the request through
# the gateway and hands the body to the normalizer.
#
# Usage:
#   api = AuthAPI(gateway)
#   result = await api.login(LoginRequest(email=..., password=...))
# =============================================================================

import logging

from core.models.user import (
    AuthResult,
    ForgotPasswordRequest,
    LoginRequest,
    Message,
    RegisterRequest,
    ResetPasswordRequest,
    ResetTokenValidation,
    User,
)
from lib.gateway import HttpGateway
from lib.normalizer import (
    normalize_auth_result,
    normalize_message,
    normalize_reset_token,
)

logger = logging.getLogger(__name__)


class AuthAPI:
    """Client for POST/GET /auth/*."""

    def __init__(self, gateway: HttpGateway):
        self.gateway = gateway

    async def login(self, body: LoginRequest) -> AuthResult:
        """
        POST /auth/login.

        A message-only answer falls back to a user carrying just the
        submitted email, with no token.
        """
        payload = await self.gateway.request("POST", "/auth/login", json=body.model_dump())
        return normalize_auth_result(payload, fallback_user=lambda: User(email=body.email))

    async def register(self, body: RegisterRequest) -> AuthResult:
        """
        POST /auth/register.

        Register answers in several shapes, some without a token. The
        submitted email/name/location back the message-only shape and are
        only turned into a User when that shape is the one received.
        """
        payload = await self.gateway.request("POST", "/auth/register", json=body.model_dump())
        return normalize_auth_result(payload, fallback_user=body.fallback_user)

    async def forgot_password(self, body: ForgotPasswordRequest) -> Message:
        payload = await self.gateway.request("POST", "/auth/forgot-password", json=body.model_dump())
        return normalize_message(payload)

    async def validate_reset_token(self, token: str) -> ResetTokenValidation:
        payload = await self.gateway.request("GET", "/auth/reset-password", params={"token": token})
        return normalize_reset_token(payload)

    async def reset_password(self, body: ResetPasswordRequest) -> Message:
        payload = await self.gateway.request("POST", "/auth/reset-password", json=body.model_dump())
        return normalize_message(payload)
