"""Slot-based storage backends for locally persisted state."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol

from ..config import settings


class SlotStorage(Protocol):
    """A named-slot text store. ``read`` returns ``None`` for a slot never written."""

    def read(self, slot: str) -> str | None: ...

    def write(self, slot: str, text: str) -> None: ...


class FileStorage:
    """Stores each slot as ``<slot>.json`` under the data root."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, slot: str) -> Path:
        if not slot or "/" in slot or "\\" in slot or slot.startswith("."):
            raise ValueError(f"Invalid storage slot name '{slot}'.")
        return self.root / f"{slot}.json"

    def read(self, slot: str) -> str | None:
        path = self.path_for(slot)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return handle.read()

    def write(self, slot: str, text: str) -> None:
        path = self.path_for(slot)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Same-directory temp file so os.replace stays on one filesystem.
        fd, tmp_name = tempfile.mkstemp(prefix=f".{slot}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


class MemoryStorage:
    """In-process storage, mainly for tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.slots: dict[str, str] = dict(initial or {})

    def read(self, slot: str) -> str | None:
        return self.slots.get(slot)

    def write(self, slot: str, text: str) -> None:
        self.slots[slot] = text
