from __future__ import annotations

import copy
import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from rook_web.domain.models import RequestPart
from rook_web.services.analysis_client import ContentGenerator


AUDIT_PAYLOAD: Dict[str, Any] = {
    "mode": "audit",
    "reasoning_log": ["Read the copy", "Benchmarked against Jira and Linear"],
    "overview": {
        "page_intent": "Sign up developer teams for a project tracker",
        "target_audience": "Small engineering teams",
        "strategic_analysis": "Generic claims, no proof, weak CTA.",
        "recommendations": ["Lead with the GitHub integration", "Add social proof", "Clarify pricing"],
    },
    "messaging_gaps": [
        {"title": "No differentiation", "explanation": "Every tool says 'best'.", "severity": "Critical"},
        {"title": "Vague integrations", "explanation": "'and stuff' erodes trust.", "severity": "Minor"},
    ],
    "improved_copy": {
        "headline": "Ship on time without leaving GitHub",
        "subheadline": "Boards, burndown and bug tracking wired into your repos.",
        "cta_optimizations": [
            {"original": "Sign up today", "improved": "Start your free sprint", "reasoning": "Concrete outcome"},
        ],
    },
    "seo": {
        "title_tag": {"current": "DevStream", "suggested": "DevStream | GitHub-native project tracking", "reasoning": "Keyword"},
        "meta_description": {"current": "", "suggested": "Track bugs and sprints in GitHub.", "reasoning": "Missing"},
        "focus_keywords": {"current": [], "suggested": ["github project management"], "reasoning": "Intent"},
    },
    "ad_concepts": [{"platform": "Google", "headline": "GitHub-native sprints", "primary_text": "Try free"}],
    "social_posts": [{"platform": "Twitter", "content": "Deadlines, met.", "hashtags": ["#devtools"]}],
    "email_draft": {"subject_line": "Your sprint, simplified", "preview_text": "Two minutes", "body": "Hi there"},
    "competitor_radar": [
        {"dimension": "Clarity", "score": 4, "fix": "Say who it is for"},
        {"dimension": "Trust", "score": 2.5, "fix": "Add logos"},
    ],
}

IDEA_PAYLOAD: Dict[str, Any] = {
    "mode": "idea",
    "reasoning_log": ["Houseplant market is growing"],
    "opportunity_scan": {
        "problem_summary": "Plant owners kill plants through bad watering",
        "who_is_suffering": "Urban millennials",
        "why_now": "Cheap on-device vision models",
    },
    "icp": {
        "summary": "Renters with 5+ plants",
        "persona": {
            "role": "Product designer, 29",
            "situation": "Small flat, busy schedule",
            "pains": ["Yellow leaves", "Forgets to water"],
            "success_definition": "Plants survive a whole year",
        },
    },
    "positioning": {"statement": "The plant doctor in your pocket", "narrative": "Snap, diagnose, relax."},
    "landing_page_structure": {
        "sections": [{"title": "Hero", "description": "Photo to diagnosis"}],
        "hero_example": {"headline": "Never kill a plant again", "subheadline": "AI diagnosis", "cta": "Scan a plant"},
    },
    "channel_strategy": {"channels": ["Instagram", "TikTok"], "test_first": "Instagram Reels", "reasoning": "Visual"},
    "launch_plan": [{"day": 1, "content": "Teaser reel"}, {"day": 2, "content": "Waitlist"}],
    "sample_assets": {
        "ads": [{"platform": "Instagram", "headline": "Save your monstera", "primary_text": "Scan it"}],
        "social": [{"platform": "Instagram", "content": "Before/after", "hashtags": ["#plantsofinstagram"]}],
        "email": {"subject_line": "Your plants called", "preview_text": "They're thirsty", "body": "Hello"},
    },
}

COMPARE_PAYLOAD: Dict[str, Any] = {
    "mode": "compare",
    "reasoning_log": ["Asana leads on proof and AI"],
    "verdict": "Asana wins on trust; TaskFlow can win on simplicity for small teams.",
    "scoreboard": [
        {"category": "Clarity", "score_a": 6, "score_b": 8, "winner": "B"},
        {"category": "Price", "score_a": 9, "score_b": 5, "winner": "A"},
        {"category": "Mobile", "score_a": 7, "score_b": 7, "winner": "Tie"},
    ],
    "social_intel": {
        "summary": "Asana is very active on LinkedIn.",
        "key_channels": ["LinkedIn", "YouTube"],
        "sentiment_analysis": "Mostly positive, some complaints about complexity.",
    },
    "differences": {"b_better_points": ["Social proof"], "a_edge_points": ["Price", "Simplicity"]},
    "action_plan": {
        "borrow_from_b": ["Show customer logos"],
        "lean_into_a": ["Own 'simple'"],
        "revised_headline_a": "Task management without the enterprise bloat",
    },
}


@pytest.fixture
def audit_payload() -> Dict[str, Any]:
    return copy.deepcopy(AUDIT_PAYLOAD)


@pytest.fixture
def idea_payload() -> Dict[str, Any]:
    return copy.deepcopy(IDEA_PAYLOAD)


@pytest.fixture
def compare_payload() -> Dict[str, Any]:
    return copy.deepcopy(COMPARE_PAYLOAD)


@pytest.fixture
def payloads() -> Dict[str, Dict[str, Any]]:
    return {
        "audit": copy.deepcopy(AUDIT_PAYLOAD),
        "idea": copy.deepcopy(IDEA_PAYLOAD),
        "compare": copy.deepcopy(COMPARE_PAYLOAD),
    }


# -----------------------------
# Test doubles
# -----------------------------
class FakeGenerator(ContentGenerator):
    """Records every call and answers with canned values."""

    def __init__(
        self,
        json_text: str = "",
        text: str = "",
        speech: Optional[Tuple[bytes, str]] = None,
        error: Optional[Exception] = None,
    ):
        self.json_text = json_text
        self.text = text
        self.speech = speech
        self.error = error
        self.json_calls: List[Dict[str, Any]] = []
        self.text_calls: List[List[RequestPart]] = []
        self.speech_calls: List[str] = []

    def generate_json(self, parts: Sequence[RequestPart], *, schema, system_instruction, allow_search) -> str:
        self.json_calls.append(
            {
                "parts": list(parts),
                "schema": schema,
                "system_instruction": system_instruction,
                "allow_search": allow_search,
            }
        )
        if self.error:
            raise self.error
        return self.json_text

    def generate_text(self, parts: Sequence[RequestPart]) -> str:
        self.text_calls.append(list(parts))
        if self.error:
            raise self.error
        return self.text

    def generate_speech(self, text: str):
        self.speech_calls.append(text)
        if self.error:
            raise self.error
        return self.speech


@pytest.fixture
def fake_generator_for():
    def make(payload: Dict[str, Any], **kwargs) -> FakeGenerator:
        return FakeGenerator(json_text=json.dumps(payload), **kwargs)

    return make


class FakeUpload:
    """Minimal stand-in for werkzeug's FileStorage."""

    def __init__(self, filename: str, data: bytes, mimetype: Optional[str] = None, fail: bool = False):
        self.filename = filename
        self._data = data
        self.mimetype = mimetype
        self._fail = fail

    def read(self) -> bytes:
        if self._fail:
            raise OSError("disk went away")
        return self._data


@pytest.fixture
def upload():
    return FakeUpload


@pytest.fixture
def make_generator():
    return FakeGenerator
