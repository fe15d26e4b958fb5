## routes.py
from __future__ import annotations

import base64
import io

from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    send_file,
    session,
    url_for,
)

from rook_web.domain.errors import RookError
from rook_web.domain.models import VARIANTS, AnalysisMode
from rook_web.domain.results import brief_script, result_to_dict
from rook_web.services.media_encoder import split_data_uri
from rook_web.services.session_state import SessionState

MODE_LABELS = {
    AnalysisMode.AUDIT: "Page Audit",
    AnalysisMode.IDEA: "Idea & GTM",
    AnalysisMode.COMPARE: "Compare",
}

MODE_DESCRIPTIONS = {
    AnalysisMode.AUDIT: "Paste a landing page URL or raw copy. Rook Lite will identify gaps and optimize it.",
    AnalysisMode.IDEA: "Describe your product idea, target audience, and goals. Rook Lite will build your GTM strategy.",
    AnalysisMode.COMPARE: "Compare your product (Variant A) against competitors (Variant B) to find your winning edge.",
}


def _variant_or_404(variant: str) -> str:
    if variant not in VARIANTS:
        abort(404)
    return variant


def _back():
    return redirect(url_for("web.index"))


def create_blueprint(analysis_client, history_repo, media_encoder, sessions) -> Blueprint:
    bp = Blueprint("web", __name__)

    def current_state() -> SessionState:
        sid = session.get("sid")
        if not sid:
            sid = session["sid"] = sessions.new_id()
        return sessions.get(sid)

    def save_text(state: SessionState) -> None:
        # every form on the dashboard posts the textareas along with its action
        primary = request.form.get("primary_text")
        secondary = request.form.get("secondary_text")
        if primary is not None or secondary is not None:
            state.set_text(primary, secondary)

    @bp.get("/")
    def index():
        state = current_state()
        result = result_to_dict(state.result) if state.result is not None else None
        return render_template(
            "index.html",
            state=state,
            result=result,
            history=history_repo.list(),
            modes=list(AnalysisMode),
            mode_labels=MODE_LABELS,
            mode_description=MODE_DESCRIPTIONS[state.mode],
        )

    @bp.post("/mode")
    def select_mode():
        state = current_state()
        raw = (request.form.get("mode") or "").strip()
        try:
            mode = AnalysisMode(raw)
        except ValueError:
            abort(400)
        try:
            state.select_mode(mode)
        except RookError as e:
            flash(str(e), "error")
        return _back()

    @bp.post("/inputs")
    def update_inputs():
        save_text(current_state())
        return _back()

    @bp.post("/demo")
    def load_demo():
        current_state().load_demo()
        return _back()

    @bp.post("/media/<variant>")
    def add_media(variant: str):
        variant = _variant_or_404(variant)
        state = current_state()
        save_text(state)

        files = [f for f in request.files.getlist(f"files_{variant}") if f and f.filename]
        failures = media_encoder.encode_many(files, lambda item: state.add_media(variant, item))
        for err in failures:
            flash(str(err), "error")
        current_app.logger.info("Media %s: %d attached, %d failed", variant, len(files) - len(failures), len(failures))
        return _back()

    @bp.post("/media/<variant>/<media_id>/delete")
    def remove_media(variant: str, media_id: str):
        variant = _variant_or_404(variant)
        state = current_state()
        save_text(state)
        state.remove_media(variant, media_id)
        return _back()

    @bp.post("/analyze")
    def analyze():
        state = current_state()
        save_text(state)
        try:
            result = state.submit(analysis_client, history_repo)
        except RookError as e:
            # refused before any call: busy or missing input
            flash(str(e), "error")
            return _back()

        current_app.logger.info("Analysis mode=%s status=%s", state.mode.value, state.status)
        if state.history_warning:
            flash(state.history_warning, "error")
        if result is None:
            current_app.logger.info("Analysis error shown to user: %s", state.error)
        return _back()

    @bp.post("/transcribe/<variant>")
    def transcribe(variant: str):
        variant = _variant_or_404(variant)
        state = current_state()
        save_text(state)

        audio = request.files.get(f"audio_{variant}")
        if audio is None or not audio.filename:
            flash("Choose or record an audio clip first.", "error")
            return _back()

        try:
            encoded = media_encoder.encode_audio(audio)
            text = state.transcribe_into(analysis_client, variant, encoded)
        except RookError as e:
            current_app.logger.warning("Transcription failed: %s", e)
            flash(str(e), "error")
            return _back()

        if not text:
            flash("No speech was recognised in the recording.", "info")
        return _back()

    @bp.get("/brief")
    def audio_brief():
        state = current_state()
        if state.result is None:
            abort(404)
        try:
            uri = analysis_client.synthesize_brief(brief_script(state.result))
        except RookError as e:
            current_app.logger.warning("Audio brief failed: %s", e)
            flash(str(e), "error")
            return _back()

        mime, data = split_data_uri(uri, default_mime="audio/wav")
        return send_file(io.BytesIO(base64.b64decode(data)), mimetype=mime, download_name="rook-brief.wav")

    @bp.get("/result.json")
    def result_json():
        state = current_state()
        if state.result is None:
            abort(404)
        return jsonify(result_to_dict(state.result))

    @bp.get("/history")
    def list_history():
        return jsonify([
            {
                "id": s.id,
                "timestamp": s.timestamp,
                "mode": s.mode.value,
                "title": s.title,
                "summary": s.summary,
            }
            for s in history_repo.list()
        ])

    @bp.post("/history/<saved_id>/load")
    def load_history_item(saved_id: str):
        saved = history_repo.get(saved_id)
        if saved is None:
            abort(404)
        current_state().load_saved(saved)
        return _back()

    @bp.post("/history/<saved_id>/delete")
    def delete_history_item(saved_id: str):
        removed = history_repo.remove(saved_id)
        current_app.logger.info("History delete id=%s removed=%s", saved_id, removed)
        return _back()

    return bp
