"""
Persisted session token storage.

The token lives in a small JSON file under a fixed key, so a restarted
client picks up the previous session the way a browser tab reads it back
from local storage.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"


class TokenStore:
    """File-backed storage for the single session token."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> dict:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self) -> Optional[str]:
        """Return the stored token, or None when no session is persisted."""
        return self._read().get(TOKEN_KEY) or None

    def set(self, token: str):
        data = self._read()
        data[TOKEN_KEY] = token
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f)
        logger.debug(f"Session token stored in {self.path}")

    def clear(self):
        data = self._read()
        if TOKEN_KEY not in data:
            return
        del data[TOKEN_KEY]
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f)
        logger.debug("Session token cleared")


class MemoryTokenStore(TokenStore):
    """Token storage that lives only as long as the process."""

    def __init__(self, token: Optional[str] = None):
        self.path = None
        self._token = token

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str):
        self._token = token

    def clear(self):
        self._token = None
