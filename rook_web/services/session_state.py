from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from rook_web.domain.errors import InputValidationError, RookError, SessionBusyError
from rook_web.domain.models import VARIANTS, AnalysisInput, AnalysisMode, MediaItem
from rook_web.domain.results import AnalysisResult, SavedAnalysis
from rook_web.services import media_encoder
from rook_web.services.demo_content import demo_inputs

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An unexpected error occurred during analysis."
HISTORY_SAVE_FAILED = "The analysis finished but could not be saved to history."
MAX_SESSIONS = 500

MediaUpdate = Callable[[Tuple[MediaItem, ...]], Tuple[MediaItem, ...]]


def _check_variant(variant: str) -> str:
    if variant not in VARIANTS:
        raise InputValidationError(f"Unknown variant: {variant!r}")
    return variant


@dataclass
class SessionState:
    """
    What one browser session is looking at: mode, inputs, loading flags,
    last error and last result.

    States: idle -> loading -> success | error; success/error accept edits and
    go back to loading on the next submit. All mutation happens under `_lock`.
    """
    mode: AnalysisMode = AnalysisMode.AUDIT
    inputs: AnalysisInput = field(default_factory=AnalysisInput)
    loading: bool = False
    transcribing: bool = False
    error: Optional[str] = None
    result: Optional[AnalysisResult] = None
    history_warning: Optional[str] = None
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def status(self) -> str:
        if self.loading:
            return "loading"
        if self.error:
            return "error"
        if self.result is not None:
            return "success"
        return "idle"

    def can_submit(self) -> bool:
        return not self.loading and self.inputs.is_submittable(self.mode)

    # -----------------------------
    # Edits
    # -----------------------------
    def select_mode(self, mode: AnalysisMode) -> None:
        mode = AnalysisMode(mode)
        with self._lock:
            if self.loading:
                raise SessionBusyError("Wait for the current analysis to finish before switching mode.")
            self.mode = mode
            self.inputs = AnalysisInput()
            self.result = None
            self.error = None

    def set_text(self, primary: Optional[str] = None, secondary: Optional[str] = None) -> None:
        with self._lock:
            if primary is not None:
                self.inputs = self.inputs.with_text("a", primary)
            if secondary is not None:
                self.inputs = self.inputs.with_text("b", secondary)

    def load_demo(self) -> None:
        with self._lock:
            self.inputs = demo_inputs(self.mode)
            self.error = None

    def update_media(self, variant: str, fn: MediaUpdate) -> Tuple[MediaItem, ...]:
        """Read-modify-write on the current media sequence of `variant`."""
        variant = _check_variant(variant)
        with self._lock:
            updated = tuple(fn(self.inputs.media_for(variant)))
            self.inputs = self.inputs.with_media(variant, updated)
            return updated

    def add_media(self, variant: str, item: MediaItem) -> None:
        self.update_media(variant, lambda current: current + (item,))

    def remove_media(self, variant: str, media_id: str) -> None:
        self.update_media(variant, lambda current: media_encoder.remove(current, media_id))

    # -----------------------------
    # Service calls
    # -----------------------------
    def submit(self, client, history) -> Optional[AnalysisResult]:
        """
        Run one analysis. Failures land in `error` (returns None) and leave
        history untouched; nothing is retried. A result that could not be
        written to history is still kept, with `history_warning` set.
        """
        with self._lock:
            if self.loading:
                raise SessionBusyError("An analysis is already running.")
            if not self.inputs.is_submittable(self.mode):
                raise InputValidationError("Fill in the required text before submitting.")
            mode = self.mode
            snapshot = self.inputs
            self.loading = True
            self.error = None
            self.result = None
            self.history_warning = None

        try:
            result = client.analyze(mode, snapshot)
        except Exception as e:
            if isinstance(e, RookError):
                logger.warning("Analysis failed (mode=%s): %s", mode.value, e)
            else:
                logger.exception("Unexpected analysis failure (mode=%s)", mode.value)
            with self._lock:
                self.error = str(e) or GENERIC_ERROR
                self.loading = False
            return None

        warning = None
        try:
            history.record(result, snapshot)
        except Exception:
            logger.exception("Could not save analysis to history (mode=%s)", mode.value)
            warning = HISTORY_SAVE_FAILED

        with self._lock:
            self.result = result
            self.history_warning = warning
            self.loading = False
        return result

    def transcribe_into(self, client, variant: str, encoded_audio: str) -> str:
        """
        Transcribe a recording and append it to the variant's text. Independent
        of the analysis `loading` flag; errors propagate to the caller.
        """
        variant = _check_variant(variant)
        with self._lock:
            if self.transcribing:
                raise SessionBusyError("A recording is already being transcribed.")
            self.transcribing = True

        try:
            text = client.transcribe(encoded_audio)
        finally:
            with self._lock:
                self.transcribing = False

        if text:
            with self._lock:
                current = self.inputs.text_for(variant)
                joined = f"{current.rstrip()}\n{text}" if current.strip() else text
                self.inputs = self.inputs.with_text(variant, joined)
        return text

    def load_saved(self, saved: SavedAnalysis) -> None:
        """Replace mode, inputs and result in one step; no service call."""
        with self._lock:
            self.mode = saved.mode
            self.inputs = saved.inputs
            self.result = saved.result
            self.error = None


@dataclass
class SessionRegistry:
    """
    In-memory map from the cookie session id to its SessionState.
    Holds at most `max_sessions`; the least recently used idle sessions go first.
    """
    max_sessions: int = MAX_SESSIONS
    _sessions: "OrderedDict[str, SessionState]" = field(default_factory=OrderedDict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        if self.max_sessions < 1:
            raise ValueError(f"max_sessions must be >= 1, got {self.max_sessions}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def get(self, session_id: str) -> SessionState:
        with self._lock:
            state = self._sessions.get(session_id)
            if state is not None:
                self._sessions.move_to_end(session_id)
                return state
            state = self._sessions[session_id] = SessionState()
            self._evict()
            return state

    def drop(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def _evict(self) -> None:
        overflow = len(self._sessions) - self.max_sessions
        if overflow <= 0:
            return
        # oldest first; sessions with a call in flight are skipped
        for sid in list(self._sessions):
            if overflow <= 0:
                break
            state = self._sessions[sid]
            if state.loading or state.transcribing:
                continue
            del self._sessions[sid]
            overflow -= 1
        logger.debug("Session registry holds %d sessions", len(self._sessions))
