from __future__ import annotations

import base64
import logging
import mimetypes
import re
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from rook_web.domain.errors import MediaError
from rook_web.domain.models import MediaItem

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?:;[^,]*)?,(?P<data>.*)$", re.DOTALL)

DEFAULT_MIME = "application/octet-stream"


def to_data_uri(mime: str, raw: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


def split_data_uri(uri: str, default_mime: str = DEFAULT_MIME) -> Tuple[str, str]:
    """
    Returns (mime, base64 payload). A bare base64 string (no data: prefix)
    is returned as-is with `default_mime`.
    """
    uri = (uri or "").strip()
    m = _DATA_URI_RE.match(uri)
    if not m:
        return default_mime, uri
    return (m.group("mime") or default_mime), m.group("data")


def classify(mime: str) -> str:
    return "video" if (mime or "").lower().startswith("video") else "image"


def _mime_of(file) -> str:
    mime = getattr(file, "mimetype", None) or getattr(file, "content_type", None)
    if mime:
        # werkzeug's content_type may carry parameters
        return mime.split(";", 1)[0].strip()
    name = getattr(file, "filename", None) or getattr(file, "name", None) or ""
    guessed, _ = mimetypes.guess_type(str(name))
    return guessed or DEFAULT_MIME


def _read_all(file) -> bytes:
    name = getattr(file, "filename", None) or getattr(file, "name", None) or "<upload>"
    try:
        raw = file.read()
    except Exception as e:
        raise MediaError(f"Could not read {name}: {e}") from e
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    return raw


def remove(items: Sequence[MediaItem], media_id: str) -> Tuple[MediaItem, ...]:
    return tuple(m for m in items if m.id != media_id)


@dataclass
class MediaEncoder:
    """
    Turns uploaded files into MediaItems (whole-file base64 data URIs).
    No size or type checks: oversized or unsupported files are passed through
    and surface as service errors later.
    """
    max_workers: int = 4
    id_factory: Callable[[], str] = field(default=lambda: uuid.uuid4().hex)

    def encode(self, file) -> MediaItem:
        try:
            mime = _mime_of(file)
            raw = _read_all(file)
            return MediaItem(id=self.id_factory(), kind=classify(mime), payload=to_data_uri(mime, raw))
        except MediaError:
            raise
        except Exception as e:
            name = getattr(file, "filename", None) or "<upload>"
            raise MediaError(f"Could not encode {name}: {e}") from e

    def encode_audio(self, file, default_mime: str = "audio/webm") -> str:
        mime = _mime_of(file)
        if mime == DEFAULT_MIME:
            mime = default_mime
        raw = _read_all(file)
        if not raw:
            raise MediaError("The recording is empty.")
        return to_data_uri(mime, raw)

    def encode_many(
        self,
        files: Iterable,
        on_encoded: Callable[[MediaItem], None],
    ) -> List[MediaError]:
        """
        Encode files concurrently. `on_encoded` runs once per file, in completion
        order. Failures are collected and returned; they do not stop other files.
        """
        files = [f for f in files if f is not None]
        if not files:
            return []

        failures: List[MediaError] = []
        workers = max(1, min(self.max_workers, len(files)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self.encode, f) for f in files]
            for fut in as_completed(futures):
                try:
                    item: Optional[MediaItem] = fut.result()
                except MediaError as e:
                    logger.warning("Media encode failed: %s", e)
                    failures.append(e)
                    continue
                on_encoded(item)

        return failures
