# =============================================================================
# app/main.py - Client Entry Point
# =============================================================================
# Wires the client core together: settings, logging, HTTP gateway, token
# store, auth session store and swipe session engine.
#
# Usage:
#   from app.main import create_client
#
#   async with create_client() as client:
#       await client.auth.login("a@b.com", "secret")
#       await client.quick_match.start()
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.config import Settings, settings as default_settings
from core.services.auth_service import AuthSessionStore
from core.services.quick_match_service import SwipeSessionEngine
from lib.auth_api import AuthAPI
from lib.gateway import HttpGateway
from lib.quick_match_api import QuickMatchAPI
from lib.token_store import FileTokenStore, TokenStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings = default_settings) -> None:
    """Set up root logging once for the process."""
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    # httpx logs every request at INFO; the gateway already traces them
    logging.getLogger("httpx").setLevel(logging.WARNING)


@dataclass
class NexoClient:
    """
    The assembled client core.

    `auth` owns the session, `quick_match` owns the swipe queue and reads
    its token from `auth`. Close the client to release the HTTP connection.
    """
    gateway: HttpGateway
    auth: AuthSessionStore
    quick_match: SwipeSessionEngine

    async def __aenter__(self) -> "NexoClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.quick_match.wait_until_idle()
        await self.gateway.aclose()


def create_client(
    settings: Settings = default_settings,
    token_store: TokenStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> NexoClient:
    """
    Build a NexoClient.

    Args:
        settings: Settings to use (defaults to the global instance)
        token_store: Token persistence (defaults to FileTokenStore)
        transport: Custom httpx transport, for tests

    Returns:
        NexoClient with a restored auth session when a token was persisted
    """
    gateway = HttpGateway(
        base_url=settings.api_base_url,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )
    auth = AuthSessionStore(
        AuthAPI(gateway),
        token_store or FileTokenStore(settings.TOKEN_STORE_PATH),
    )
    quick_match = SwipeSessionEngine(
        QuickMatchAPI(gateway, auth.access_token, prefix=settings.quick_match_prefix),
        page_size=settings.QUICK_MATCH_PAGE_SIZE,
        advance_delay=settings.SWIPE_ADVANCE_DELAY_SECONDS,
        match_display_seconds=settings.MATCH_DISPLAY_SECONDS,
        prefetch_threshold=settings.PREFETCH_THRESHOLD,
    )

    logger.info(f"NEXO client ready ({settings.ENVIRONMENT}) against {gateway.base_url}")
    return NexoClient(gateway=gateway, auth=auth, quick_match=quick_match)
