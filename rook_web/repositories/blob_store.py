from __future__ import annotations

import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

_SAFE_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class BlobStore:
    """Key/value store for whole serialized blobs."""
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str) -> None:
        raise NotImplementedError


@dataclass
class MemoryBlobStore(BlobStore):
    data: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def put(self, key: str, value: str) -> None:
        self.data[key] = value


@dataclass
class FileBlobStore(BlobStore):
    """One `<key>.json` file per key under `directory`."""
    directory: Path

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY_RE.match(key or ""):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        p = self._path(key)
        if not p.exists():
            return None
        return p.read_text(encoding="utf-8")

    def put(self, key: str, value: str) -> None:
        p = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        # write-then-rename so readers never see a half-written file
        fd, tmp = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=str(self.directory))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp, p)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
