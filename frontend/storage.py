"""
Durable client-side storage for the ``token`` / ``user`` pair.

Both entries live in one JSON file and are always written, read and removed
together: a file holding only one of them is treated as empty.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class SessionStorage:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Tuple[Optional[str], Optional[Dict[str, Any]]]:
        """Return ``(token, user)`` or ``(None, None)`` when nothing usable is stored."""
        if not self.path.exists():
            return None, None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return None, None

        token = data.get("token") if isinstance(data, dict) else None
        user = data.get("user") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token or not isinstance(user, dict):
            return None, None
        return token, user

    def save(self, token: str, user: Dict[str, Any]) -> None:
        if not token or user is None:
            raise ValueError("token and user must be stored together")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump({"token": token, "user": user}, fh)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
