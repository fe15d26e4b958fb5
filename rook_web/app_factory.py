from __future__ import annotations

import secrets
from typing import Optional

from flask import Flask

from rook_web.adapters.gemini_client import GeminiContentGenerator
from rook_web.config.ini_config import AppSettings, IniConfig
from rook_web.repositories.blob_store import BlobStore, FileBlobStore
from rook_web.repositories.history_repository import HistoryRepository
from rook_web.services.analysis_client import AnalysisClient, ContentGenerator
from rook_web.services.media_encoder import MediaEncoder
from rook_web.services.search_policy import policy_from_setting
from rook_web.services.session_state import SessionRegistry
from rook_web.web.routes import create_blueprint


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    generator: Optional[ContentGenerator] = None,
    blob_store: Optional[BlobStore] = None,
) -> Flask:
    """Composition root: settings -> adapter -> services -> blueprint."""
    if settings is None:
        settings = IniConfig.from_env_or_default().load_settings()

    if generator is None:
        generator = GeminiContentGenerator(
            settings.api_key,
            analysis_model=settings.analysis_model,
            transcription_model=settings.transcription_model,
            speech_model=settings.speech_model,
            voice=settings.voice,
        )

    analysis_client = AnalysisClient(
        generator=generator,
        search_policy=policy_from_setting(settings.live_search),
    )

    history_repo = HistoryRepository(
        blob_store=blob_store if blob_store is not None else FileBlobStore(settings.history_dir),
        key=settings.history_key,
        limit=settings.history_limit,
    )

    media_encoder = MediaEncoder(max_workers=settings.media_max_workers)
    sessions = SessionRegistry(max_sessions=settings.max_sessions)

    app = Flask(__name__)
    app.register_blueprint(create_blueprint(analysis_client, history_repo, media_encoder, sessions))

    # sessions only carry an id; a random key just means a restart logs everyone out
    app.secret_key = settings.secret_key or secrets.token_hex(32)
    app.config["HOST"] = settings.flask_host
    app.config["PORT"] = settings.flask_port
    app.config["DEBUG"] = settings.flask_debug

    return app
