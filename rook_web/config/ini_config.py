########## ini_config.py

import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path

INI_DEFAULT_NAME = "rook_web.ini"

LIVE_SEARCH_CHOICES = {"auto", "always", "never"}


@dataclass(frozen=True)
class AppSettings:
    api_key: str
    analysis_model: str
    transcription_model: str
    speech_model: str
    voice: str
    live_search: str

    history_dir: Path
    history_key: str
    history_limit: int

    media_max_workers: int

    flask_host: str
    flask_port: int
    flask_debug: bool
    secret_key: str
    max_sessions: int = 500


class IniConfig:
    """
    Adapter around ConfigParser and environment overrides.
    Keeps INI handling out of your app/service code.
    """

    def __init__(self, ini_path: Path):
        self._ini_path = ini_path
        self._cfg = ConfigParser()
        read_ok = self._cfg.read(str(ini_path), encoding="utf-8-sig")
        if not read_ok:
            raise FileNotFoundError(f"INI file not found or unreadable: {ini_path}")

    @staticmethod
    def from_env_or_default() -> "IniConfig":
        ini_raw = (os.getenv("APP_INI") or "").strip()
        # If APP_INI is not set, default to repo-root-relative ini location
        ini_path = Path(ini_raw) if ini_raw else (Path(__file__).resolve().parents[2] / INI_DEFAULT_NAME)
        return IniConfig(ini_path)

    def _str(self, section: str, key: str, default: str) -> str:
        return (self._cfg.get(section, key, fallback=default) or "").strip() or default

    def _cfg_path(self, section: str, key: str, default: str) -> Path:
        raw = self._str(section, key, default)
        raw = os.path.expandvars(os.path.expanduser(raw))
        p = Path(raw)
        if not p.is_absolute():
            # relative paths are relative to the INI file, not the cwd
            p = Path(self._ini_path).resolve().parent / p
        return p.resolve()

    def load_settings(self) -> AppSettings:
        # Gemini; env wins over INI so keys stay out of files
        api_key = (
            (os.getenv("GEMINI_API_KEY") or "").strip()
            or (os.getenv("API_KEY") or "").strip()
            or (self._cfg.get("gemini", "api_key", fallback="") or "").strip()
        )
        analysis_model = self._str("gemini", "analysis_model", "gemini-3-pro-preview")
        transcription_model = self._str("gemini", "transcription_model", "gemini-2.5-flash")
        speech_model = self._str("gemini", "speech_model", "gemini-2.5-flash-preview-tts")
        voice = self._str("gemini", "voice", "Kore")
        live_search = self._str("gemini", "live_search", "auto").lower()

        # History
        history_dir = self._cfg_path("history", "directory", "~/.rook_lite")
        history_key = self._str("history", "key", "rook_lite_history")
        history_limit = self._cfg.getint("history", "limit", fallback=20)

        # Media
        media_max_workers = self._cfg.getint("media", "max_workers", fallback=4)

        # Flask
        flask_host = self._str("flask", "host", "127.0.0.1")
        flask_port = self._cfg.getint("flask", "port", fallback=5000)
        flask_debug = self._cfg.getboolean("flask", "debug", fallback=True)
        secret_key = (os.getenv("FLASK_SECRET_KEY") or "").strip() or self._str("flask", "secret_key", "")
        max_sessions = self._cfg.getint("flask", "max_sessions", fallback=500)

        # Validate
        if live_search not in LIVE_SEARCH_CHOICES:
            raise ValueError(f"[gemini] live_search must be one of {sorted(LIVE_SEARCH_CHOICES)}, got {live_search!r}")
        if history_limit < 1:
            raise ValueError(f"[history] limit must be >= 1, got {history_limit}")
        if media_max_workers < 1:
            raise ValueError(f"[media] max_workers must be >= 1, got {media_max_workers}")
        if max_sessions < 1:
            raise ValueError(f"[flask] max_sessions must be >= 1, got {max_sessions}")

        return AppSettings(
            api_key=api_key,
            analysis_model=analysis_model,
            transcription_model=transcription_model,
            speech_model=speech_model,
            voice=voice,
            live_search=live_search,
            history_dir=history_dir,
            history_key=history_key,
            history_limit=history_limit,
            media_max_workers=media_max_workers,
            flask_host=flask_host,
            flask_port=flask_port,
            flask_debug=flask_debug,
            secret_key=secret_key,
            max_sessions=max_sessions,
        )
