from __future__ import annotations

import io
import json
import logging
import re
import time
import wave
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Type

from pydantic import BaseModel

from rook_web.domain.errors import ContractViolation, InputValidationError, ServiceError
from rook_web.domain.models import AnalysisInput, AnalysisMode, RequestPart
from rook_web.domain.results import AnalysisResult, result_from_dict
from rook_web.services.media_encoder import split_data_uri, to_data_uri
from rook_web.services.mode_contracts import contract_for
from rook_web.services.search_policy import HeuristicSearchPolicy, SearchPolicy

logger = logging.getLogger(__name__)

TRANSCRIBE_INSTRUCTION = (
    "Transcribe this recording verbatim. Return only the spoken words as plain text, "
    "without timestamps, speaker labels or commentary."
)

BRIEF_INSTRUCTION = "Read this marketing briefing in a confident, upbeat, professional tone:"

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(?P<body>.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)
_RATE_RE = re.compile(r"rate=(\d+)")

RAW_LOG_LIMIT = 2000


class ContentGenerator:
    """
    Port for the external generative service.
    Implemented by rook_web.adapters.gemini_client.GeminiContentGenerator.
    """

    def generate_json(
        self,
        parts: Sequence[RequestPart],
        *,
        schema: Type[BaseModel],
        system_instruction: str,
        allow_search: bool,
    ) -> str:
        raise NotImplementedError

    def generate_text(self, parts: Sequence[RequestPart]) -> str:
        raise NotImplementedError

    def generate_speech(self, text: str) -> Optional[Tuple[bytes, str]]:
        """Returns (audio bytes, mime type) or None when no audio came back."""
        raise NotImplementedError


def _strip_code_fence(text: str) -> str:
    m = _FENCE_RE.match(text)
    return m.group("body") if m else text


def pcm_to_wav(pcm: bytes, rate: int = 24000, channels: int = 1, sample_width: int = 2) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(rate)
        wf.writeframes(pcm)
    return buf.getvalue()


@dataclass
class AnalysisClient:
    """
    Typed client over the generative service: three analysis modes plus
    audio transcription and an audio brief. Stateless; nothing is retried.
    """
    generator: ContentGenerator
    search_policy: SearchPolicy = field(default_factory=HeuristicSearchPolicy)

    def analyze(self, mode: AnalysisMode, inputs: AnalysisInput) -> AnalysisResult:
        mode = AnalysisMode(mode)
        if not inputs.is_submittable(mode):
            if mode == AnalysisMode.COMPARE:
                raise InputValidationError("Both Variant A and Variant B are required.")
            raise InputValidationError("Input text is required.")

        contract = contract_for(mode)
        parts = contract.build_parts(inputs)
        allow_search = self.search_policy.allow_search(mode, inputs)

        started = time.monotonic()
        text = self.generator.generate_json(
            parts,
            schema=contract.schema,
            system_instruction=contract.system_instruction,
            allow_search=allow_search,
        )
        elapsed = time.monotonic() - started

        if not (text or "").strip():
            raise ServiceError("No response generated from Gemini.")

        try:
            data = json.loads(_strip_code_fence(text))
        except ValueError as e:
            logger.error("Failed to parse JSON response (mode=%s): %s\n%s", mode.value, e, text[:RAW_LOG_LIMIT])
            raise ContractViolation(f"invalid JSON: {e}") from e

        try:
            result = result_from_dict(data, expected_mode=mode)
        except ContractViolation as e:
            logger.error("Response violates %s contract: %s\n%s", mode.value, e.detail, text[:RAW_LOG_LIMIT])
            raise

        logger.info(
            "Analysis ok mode=%s parts=%d search=%s duration=%.1fs",
            mode.value, len(parts), allow_search, elapsed,
        )
        return result

    def transcribe(self, encoded_audio: str) -> str:
        mime, data = split_data_uri(encoded_audio, default_mime="audio/webm")
        if not data:
            return ""
        parts = [RequestPart.from_media(mime, data), RequestPart.from_text(TRANSCRIBE_INSTRUCTION)]
        text = self.generator.generate_text(parts)
        return (text or "").strip()

    def synthesize_brief(self, text: str) -> str:
        """Returns a data:audio/wav URI (or the service's own audio type when it is not raw PCM)."""
        text = (text or "").strip()
        if not text:
            raise InputValidationError("Nothing to read out.")

        out = self.generator.generate_speech(f"{BRIEF_INSTRUCTION}\n{text}")
        if not out or not out[0]:
            raise ServiceError("No audio generated.")

        audio, mime = out
        mime = (mime or "").lower()
        if not mime or mime.startswith("audio/l16") or mime.startswith("audio/pcm"):
            m = _RATE_RE.search(mime)
            return to_data_uri("audio/wav", pcm_to_wav(audio, rate=int(m.group(1)) if m else 24000))
        return to_data_uri(mime.split(";", 1)[0], audio)
