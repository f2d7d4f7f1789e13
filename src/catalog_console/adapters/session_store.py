"""File-backed session token store."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from catalog_console.services.sessions import SessionStore

_TOKEN_KEY = "token"

_logger = logging.getLogger(__name__)


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` for a URL."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


@dataclass
class FileSessionStore(SessionStore):
    """Persists one token per API origin in a JSON file."""

    path: Path
    origin: str

    def get(self) -> str | None:
        """Return the stored token for this origin, if any."""
        entry = self._load().get(self.origin)
        if not isinstance(entry, dict):
            return None
        token = entry.get(_TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def set(self, token: str) -> None:
        """Store the token for this origin, overwriting any previous one."""
        data = self._load()
        data[self.origin] = {_TOKEN_KEY: token}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        staging = self.path.with_name(f".{self.path.name}.tmp")
        fd = os.open(staging, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            os.fchmod(handle.fileno(), 0o600)
            json.dump(data, handle, indent=2)
        os.replace(staging, self.path)

    def _load(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            _logger.warning("Ignoring unreadable session file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}
