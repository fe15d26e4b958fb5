from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from rook_web.domain.models import AnalysisInput
from rook_web.domain.results import AnalysisResult, SavedAnalysis, derive_summary, derive_title
from rook_web.repositories.blob_store import BlobStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "rook_lite_history"
HISTORY_LIMIT = 20


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class HistoryRepository:
    """
    Repository pattern: the last `limit` completed analyses, newest first,
    persisted as one JSON list under `key` in the blob store.
    """
    blob_store: BlobStore
    key: str = HISTORY_KEY
    limit: int = HISTORY_LIMIT
    clock: Callable[[], int] = _now_ms
    _items: List[SavedAnalysis] = field(default_factory=list, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self._items = self._load()

    def _load(self) -> List[SavedAnalysis]:
        try:
            raw = self.blob_store.get(self.key)
        except OSError as e:
            logger.warning("History unreadable (%s); starting empty", e)
            return []
        if not raw:
            return []

        try:
            entries = json.loads(raw)
        except ValueError as e:
            logger.warning("History blob is not valid JSON (%s); starting empty", e)
            return []
        if not isinstance(entries, list):
            logger.warning("History blob is %s, expected list; starting empty", type(entries).__name__)
            return []

        items: List[SavedAnalysis] = []
        for entry in entries:
            try:
                items.append(SavedAnalysis.from_dict(entry))
            except Exception as e:
                logger.warning("Skipping unreadable history entry: %s", e)
        return items[: self.limit]

    def _persist(self, items: List[SavedAnalysis]) -> None:
        # memory only changes once the blob write went through
        self.blob_store.put(self.key, json.dumps([i.to_dict() for i in items]))

    def _new_id(self, ts: int) -> str:
        taken = {i.id for i in self._items}
        candidate = str(ts)
        n = 1
        while candidate in taken:
            candidate = f"{ts}-{n}"
            n += 1
        return candidate

    def record(self, result: AnalysisResult, inputs: AnalysisInput) -> SavedAnalysis:
        with self._lock:
            ts = int(self.clock())
            saved = SavedAnalysis(
                id=self._new_id(ts),
                timestamp=ts,
                mode=result.analysis_mode,
                title=derive_title(result),
                summary=derive_summary(result),
                inputs=inputs,
                result=result,
            )
            items = [saved] + self._items[: self.limit - 1]
            self._persist(items)
            self._items = items
            return saved

    def remove(self, saved_id: str) -> bool:
        with self._lock:
            kept = [i for i in self._items if i.id != saved_id]
            if len(kept) == len(self._items):
                return False
            self._persist(kept)
            self._items = kept
            return True

    def list(self) -> Tuple[SavedAnalysis, ...]:
        with self._lock:
            return tuple(self._items)

    def get(self, saved_id: str) -> Optional[SavedAnalysis]:
        with self._lock:
            return next((i for i in self._items if i.id == saved_id), None)
