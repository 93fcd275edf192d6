from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import Credentials

logger = logging.getLogger("cardiologger.credentials")

KEY_API_KEY = "key"
KEY_USER_ID = "user"


class CredentialStore:
    """Durable key/value slots for the API key and user id.

    Every read goes to disk, so a write is visible to the next ``get`` with no
    caching in between.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text()
        except FileNotFoundError:
            return {}
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("ignoring unreadable credentials file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self) -> Credentials:
        data = self._read()
        api_key = data.get(KEY_API_KEY)
        user_id = data.get(KEY_USER_ID)
        return Credentials(
            api_key=api_key if isinstance(api_key, str) else None,
            user_id=user_id if isinstance(user_id, str) else None,
        )

    def save(self, api_key: str, user_id: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps({KEY_API_KEY: api_key, KEY_USER_ID: user_id}, ensure_ascii=False)
        self.path.write_text(payload + "\n")
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
