from __future__ import annotations

import json
import logging
from pathlib import Path

from slot_booking.application.ports.identity import IdentityStorePort


class MemoryIdentityStore(IdentityStorePort):
    def __init__(self, identity: str | None = None) -> None:
        self._identity = identity

    def read(self) -> str | None:
        return self._identity

    def write(self, identity: str) -> None:
        self._identity = identity


class JsonIdentityStore(IdentityStorePort):
    """Keeps the single cached fingerprint in a small JSON file."""

    def __init__(self, path: str = "./data/identity.json") -> None:
        self._path = Path(path)
        self._logger = logging.getLogger(__name__)

    def read(self) -> str | None:
        if not self._path.exists():
            return None
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            # unreadable cache is treated as missing and rewritten
            self._logger.warning("Identity cache unreadable", extra={"reason": str(e)})
            return None
        value = data.get("fingerprint") if isinstance(data, dict) else None
        return value if isinstance(value, str) and value else None

    def write(self, identity: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump({"fingerprint": identity}, f)
            temp_path.replace(self._path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise
