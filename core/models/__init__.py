# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains the canonical domain model:
# - user.py: User, AuthResult, Message and /auth request bodies
# - profile.py: Profile candidate cards, pagination, like results
# - match.py: Matches and received likes
# - session.py: Auth and swipe session snapshots
#
# These models never vary with the backend's wire shape.
# =============================================================================

# -----------------------------------------------------------------------------
# User Models - Authentication
# -----------------------------------------------------------------------------
from .user import (
    AuthResult,
    ForgotPasswordRequest,
    LoginRequest,
    Message,
    RegisterRequest,
    ResetPasswordRequest,
    ResetTokenValidation,
    User,
)

# -----------------------------------------------------------------------------
# Profile Models - Swipe candidates
# -----------------------------------------------------------------------------
from .profile import (
    LikeResult,
    Pagination,
    Profile,
    ProfilePage,
    SportInfo,
)

# -----------------------------------------------------------------------------
# Match Models - Inbox
# -----------------------------------------------------------------------------
from .match import (
    LikeReceived,
    LikeUser,
    Match,
    MatchUser,
)

# -----------------------------------------------------------------------------
# Session Models - Published snapshots
# -----------------------------------------------------------------------------
from .session import (
    AuthSnapshot,
    AuthStatus,
    PaginationCursor,
    SwipeDirection,
    SwipeSessionState,
)

__all__ = [
    # User
    "AuthResult",
    "ForgotPasswordRequest",
    "LoginRequest",
    "Message",
    "RegisterRequest",
    "ResetPasswordRequest",
    "ResetTokenValidation",
    "User",
    # Profile
    "LikeResult",
    "Pagination",
    "Profile",
    "ProfilePage",
    "SportInfo",
    # Match
    "LikeReceived",
    "LikeUser",
    "Match",
    "MatchUser",
    # Session
    "AuthSnapshot",
    "AuthStatus",
    "PaginationCursor",
    "SwipeDirection",
    "SwipeSessionState",
]
