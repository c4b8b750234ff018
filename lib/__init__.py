# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains the client's I/O and decoding building blocks:
# - gateway.py: httpx wrapper, error envelope parsing
# - normalizer.py: Tolerant JSON -> canonical model decoding
# - auth_api.py / quick_match_api.py: Typed endpoint clients
# - token_store.py: Access token persistence capability
# - observable.py: Snapshot state container with subscribers
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.gateway import HttpGateway
from lib.normalizer import (
    normalize_auth_result,
    normalize_like_result,
    normalize_message,
    normalize_profile,
    normalize_profile_page,
    normalize_user,
)
from lib.observable import StateContainer
from lib.token_store import FileTokenStore, InMemoryTokenStore, TokenStore

__all__ = [
    # Transport
    "HttpGateway",
    # Normalizer
    "normalize_auth_result",
    "normalize_like_result",
    "normalize_message",
    "normalize_profile",
    "normalize_profile_page",
    "normalize_user",
    # State
    "StateContainer",
    # Tokens
    "FileTokenStore",
    "InMemoryTokenStore",
    "TokenStore",
]
