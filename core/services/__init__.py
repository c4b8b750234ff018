# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .auth_service import AuthSessionStore
from .quick_match_service import SwipeSessionEngine

__all__ = [
    "AuthSessionStore",
    "SwipeSessionEngine",
]
