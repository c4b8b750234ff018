# =============================================================================
# lib/token_store.py - Access Token Persistence
# =============================================================================
# The auth store persists its token through the TokenStore capability:
#   save(token) / load() -> token | None / remove()
#
# Implementations:
# - InMemoryTokenStore: process-local, used by tests
# - FileTokenStore: JSON file with owner-only permissions, the default
#
# Platform secure storage (keychain, keystore) plugs in by implementing the
# same three methods.
# =============================================================================

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

from app.config import settings
from app.exceptions import TokenStoreError

logger = logging.getLogger(__name__)


@runtime_checkable
class TokenStore(Protocol):
    """Capability for persisting a single access token."""

    def save(self, token: str) -> None: ...

    def load(self) -> str | None: ...

    def remove(self) -> None: ...


class InMemoryTokenStore:
    """Token store that lives only as long as the process."""

    def __init__(self, token: str | None = None):
        self._token = token

    def save(self, token: str) -> None:
        self._token = token

    def load(self) -> str | None:
        return self._token

    def remove(self) -> None:
        self._token = None


class FileTokenStore:
    """
    Token store backed by a small JSON file.

    The file holds {"accessToken": "..."} and is created with 0600
    permissions. A missing file means "no token".
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else settings.TOKEN_STORE_PATH

    def save(self, token: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Write then rename so a crash never leaves a half-written file
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"accessToken": token}, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise TokenStoreError("save", str(e)) from e
        logger.debug(f"Saved access token to {self.path}")

    def load(self) -> str | None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise TokenStoreError("load", str(e)) from e

        try:
            data = json.loads(raw)
        except ValueError as e:
            raise TokenStoreError("load", f"corrupt token file: {e}") from e

        token = data.get("accessToken") if isinstance(data, dict) else None
        return token if isinstance(token, str) and token else None

    def remove(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise TokenStoreError("remove", str(e)) from e
        logger.debug(f"Removed access token file {self.path}")
