from __future__ import annotations

import base64
import binascii
import logging
from typing import List, Optional, Sequence, Tuple, Type

from google import genai
from google.genai import errors, types
from pydantic import BaseModel

from rook_web.domain.errors import ConfigurationError, MediaError, ServiceError
from rook_web.domain.models import RequestPart
from rook_web.services.analysis_client import ContentGenerator

logger = logging.getLogger(__name__)


def _to_part(part: RequestPart) -> types.Part:
    if part.is_text:
        return types.Part.from_text(text=part.text)
    try:
        raw = base64.b64decode(part.data or "", validate=False)
    except (binascii.Error, ValueError) as e:
        raise MediaError(f"Attachment is not valid base64 ({part.mime_type}): {e}") from e
    return types.Part.from_bytes(data=raw, mime_type=part.mime_type or "application/octet-stream")


def _contents(parts: Sequence[RequestPart]) -> List[types.Content]:
    return [types.Content(role="user", parts=[_to_part(p) for p in parts])]


def _first_inline_audio(response) -> Optional[Tuple[bytes, str]]:
    for cand in getattr(response, "candidates", None) or []:
        content = getattr(cand, "content", None)
        for p in getattr(content, "parts", None) or []:
            inline = getattr(p, "inline_data", None)
            if inline is not None and inline.data:
                return inline.data, (inline.mime_type or "")
    return None


class GeminiContentGenerator(ContentGenerator):
    """
    Adapter: ContentGenerator on top of google-genai.
    The client is created on first use so the app can start (and show history)
    without a key; calls without a key raise ConfigurationError.
    """

    def __init__(
        self,
        api_key: str,
        *,
        analysis_model: str,
        transcription_model: str,
        speech_model: str,
        voice: str,
    ):
        self._api_key = (api_key or "").strip()
        self.analysis_model = analysis_model
        self.transcription_model = transcription_model
        self.speech_model = speech_model
        self.voice = voice
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if not self._api_key:
            raise ConfigurationError(
                "API key is missing. Set GEMINI_API_KEY (or api_key under [gemini] in the INI file)."
            )
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    def _call(self, model: str, contents, config: Optional[types.GenerateContentConfig] = None):
        client = self._get_client()
        try:
            return client.models.generate_content(model=model, contents=contents, config=config)
        except errors.APIError as e:
            logger.warning("Gemini call failed model=%s code=%s: %s", model, getattr(e, "code", None), e)
            raise ServiceError(str(e)) from e

    def generate_json(
        self,
        parts: Sequence[RequestPart],
        *,
        schema: Type[BaseModel],
        system_instruction: str,
        allow_search: bool,
    ) -> str:
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            response_mime_type="application/json",
            response_schema=schema,
            tools=[types.Tool(google_search=types.GoogleSearch())] if allow_search else None,
        )
        response = self._call(self.analysis_model, _contents(parts), config)
        return response.text or ""

    def generate_text(self, parts: Sequence[RequestPart]) -> str:
        response = self._call(self.transcription_model, _contents(parts))
        return response.text or ""

    def generate_speech(self, text: str) -> Optional[Tuple[bytes, str]]:
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self.voice),
                ),
            ),
        )
        response = self._call(self.speech_model, text, config)
        return _first_inline_audio(response)
