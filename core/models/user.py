# =============================================================================
# core/models/user.py - Auth Schemas
# =============================================================================
# Canonical user/auth models plus the request bodies sent to /auth/*.
#
# The canonical models never vary with the wire shape - lib/normalizer.py
# is the only place that knows about id/_id, accessToken/access_token/token
# and friends.
# =============================================================================

from pydantic import BaseModel, Field


class User(BaseModel):
    """
    The signed-in user.

    `id` is None when the backend never told us one (e.g. a register call that
    only answered with a message). Such a user is anonymous/unsaved.
    """

    id: str | None = Field(
        default=None,
        description="Backend identifier (id or _id on the wire)"
    )

    email: str = Field(
        ...,
        min_length=1,
        description="Email address (email or username on the wire)"
    )

    name: str | None = None
    location: str | None = None

    class Config:
        frozen = True

    @property
    def is_anonymous(self) -> bool:
        return self.id is None


class AuthResult(BaseModel):
    """
    Outcome of a login or register call.

    An empty access_token means the backend did not issue a session and the
    caller has to authenticate separately.
    """

    access_token: str = ""
    user: User

    class Config:
        frozen = True

    @property
    def has_token(self) -> bool:
        return bool(self.access_token)


class Message(BaseModel):
    """Plain acknowledgement body ({message} / {msg} / {status})."""

    message: str = "OK"

    class Config:
        frozen = True


class ResetTokenValidation(BaseModel):
    """Result of GET /auth/reset-password?token=..."""

    valid: bool = False
    message: str | None = None

    class Config:
        frozen = True


# -----------------------------------------------------------------------------
# Request bodies
# -----------------------------------------------------------------------------
# Field names match the backend DTOs exactly, so model_dump() is the body.

class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str
    location: str

    def fallback_user(self) -> User:
        """User synthesized from the submitted fields (id unknown)."""
        return User(id=None, email=self.email, name=self.name, location=self.location)


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    password: str
