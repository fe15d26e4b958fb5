######## models.py
########

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class AnalysisMode(str, Enum):
    AUDIT = "audit"
    IDEA = "idea"
    COMPARE = "compare"


VARIANTS = ("a", "b")


@dataclass(frozen=True)
class MediaItem:
    id: str
    kind: str                   # "image" | "video"
    payload: str                # data:<mime>;base64,<data>

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "kind": self.kind, "payload": self.payload}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MediaItem":
        return MediaItem(id=str(d["id"]), kind=str(d["kind"]), payload=str(d["payload"]))


@dataclass(frozen=True)
class AnalysisInput:
    primary_text: str = ""
    secondary_text: str = ""
    media_a: Tuple[MediaItem, ...] = ()
    media_b: Tuple[MediaItem, ...] = ()

    def is_submittable(self, mode: AnalysisMode) -> bool:
        if not self.primary_text.strip():
            return False
        if mode == AnalysisMode.COMPARE and not self.secondary_text.strip():
            return False
        return True

    def media_for(self, variant: str) -> Tuple[MediaItem, ...]:
        return self.media_a if variant == "a" else self.media_b

    def text_for(self, variant: str) -> str:
        return self.primary_text if variant == "a" else self.secondary_text

    def with_media(self, variant: str, media: Tuple[MediaItem, ...]) -> "AnalysisInput":
        if variant == "a":
            return replace(self, media_a=tuple(media))
        return replace(self, media_b=tuple(media))

    def with_text(self, variant: str, text: str) -> "AnalysisInput":
        if variant == "a":
            return replace(self, primary_text=text)
        return replace(self, secondary_text=text)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary_text": self.primary_text,
            "secondary_text": self.secondary_text,
            "media_a": [m.to_dict() for m in self.media_a],
            "media_b": [m.to_dict() for m in self.media_b],
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AnalysisInput":
        return AnalysisInput(
            primary_text=str(d.get("primary_text") or ""),
            secondary_text=str(d.get("secondary_text") or ""),
            media_a=tuple(MediaItem.from_dict(m) for m in d.get("media_a") or []),
            media_b=tuple(MediaItem.from_dict(m) for m in d.get("media_b") or []),
        )


@dataclass(frozen=True)
class RequestPart:
    """One ordered segment of a request: text, or inline media."""
    text: Optional[str] = None
    mime_type: Optional[str] = None
    data: Optional[str] = None  # base64 payload

    @staticmethod
    def from_text(text: str) -> "RequestPart":
        return RequestPart(text=text)

    @staticmethod
    def from_media(mime_type: str, data: str) -> "RequestPart":
        return RequestPart(mime_type=mime_type, data=data)

    @property
    def is_text(self) -> bool:
        return self.text is not None

