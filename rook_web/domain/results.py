######## results.py
########
#
# Response-shape contracts. The same pydantic models are sent to Gemini as
# `response_schema` and re-validate every answer locally.

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, TypeAdapter, ValidationError

from rook_web.domain.errors import ContractViolation
from rook_web.domain.models import AnalysisInput, AnalysisMode

AdPlatform = Literal["Google", "Facebook", "LinkedIn", "Instagram"]
SocialPlatform = Literal["Twitter", "LinkedIn", "Instagram"]
Severity = Literal["Critical", "Major", "Minor"]
Winner = Literal["A", "B", "Tie"]

# numbers only (no strings, no booleans); range is trusted, never clamped
Score = Annotated[StrictFloat, Field(description="Score on a 0-10 scale.")]


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# -----------------------------
# Shared
# -----------------------------
class AdCopy(_Model):
    platform: AdPlatform
    headline: str
    primary_text: str


class SocialPost(_Model):
    platform: SocialPlatform
    content: str
    hashtags: Tuple[str, ...]


class EmailDraft(_Model):
    subject_line: str
    preview_text: str
    body: str


class SeoSuggestion(_Model):
    current: str
    suggested: str
    reasoning: str


class FocusKeywords(_Model):
    current: Tuple[str, ...]
    suggested: Tuple[str, ...]
    reasoning: str


class SeoData(_Model):
    title_tag: SeoSuggestion
    meta_description: SeoSuggestion
    focus_keywords: FocusKeywords


class _Result(_Model):
    @property
    def analysis_mode(self) -> AnalysisMode:
        return AnalysisMode(getattr(self, "mode"))


# -----------------------------
# Audit
# -----------------------------
class Overview(_Model):
    page_intent: str
    target_audience: str
    strategic_analysis: str
    recommendations: Tuple[str, ...]


class Gap(_Model):
    title: str
    explanation: str
    severity: Severity


class CtaRewrite(_Model):
    original: str
    improved: str
    reasoning: str


class ImprovedCopy(_Model):
    headline: str
    subheadline: str
    cta_optimizations: Tuple[CtaRewrite, ...]
    supporting_copy: Optional[str] = None


class CompetitorRadarPoint(_Model):
    dimension: str
    score: Score
    fix: str


class AuditResult(_Result):
    mode: Literal["audit"]
    reasoning_log: Tuple[str, ...]
    overview: Overview
    messaging_gaps: Tuple[Gap, ...]
    improved_copy: ImprovedCopy
    seo: SeoData
    ad_concepts: Tuple[AdCopy, ...]
    social_posts: Tuple[SocialPost, ...]
    email_draft: EmailDraft
    competitor_radar: Tuple[CompetitorRadarPoint, ...]


# -----------------------------
# Idea
# -----------------------------
class OpportunityScan(_Model):
    problem_summary: str
    who_is_suffering: str
    why_now: str


class Persona(_Model):
    role: str
    situation: str
    pains: Tuple[str, ...]
    success_definition: str


class Icp(_Model):
    summary: str
    persona: Persona


class Positioning(_Model):
    statement: str
    narrative: str


class PageSection(_Model):
    title: str
    description: str


class HeroExample(_Model):
    headline: str
    subheadline: str
    cta: str


class LandingPageStructure(_Model):
    sections: Tuple[PageSection, ...]
    hero_example: HeroExample


class ChannelStrategy(_Model):
    channels: Tuple[str, ...]
    test_first: str
    reasoning: str


class LaunchDay(_Model):
    day: int
    content: str


class SampleAssets(_Model):
    ads: Tuple[AdCopy, ...]
    social: Tuple[SocialPost, ...]
    email: EmailDraft


class IdeaResult(_Result):
    mode: Literal["idea"]
    reasoning_log: Tuple[str, ...]
    opportunity_scan: OpportunityScan
    icp: Icp
    positioning: Positioning
    landing_page_structure: LandingPageStructure
    channel_strategy: ChannelStrategy
    launch_plan: Tuple[LaunchDay, ...]
    sample_assets: SampleAssets


# -----------------------------
# Compare
# -----------------------------
class ScoreboardItem(_Model):
    category: str
    score_a: Score
    score_b: Score
    winner: Winner


class SocialIntel(_Model):
    summary: str = Field(description="Overview of social media activity or reputation found via search.")
    key_channels: Tuple[str, ...]
    sentiment_analysis: str = Field(description="General sentiment of the brand/competitor online.")


class Differences(_Model):
    b_better_points: Tuple[str, ...]
    a_edge_points: Tuple[str, ...]


class ActionPlan(_Model):
    borrow_from_b: Tuple[str, ...]
    lean_into_a: Tuple[str, ...]
    revised_headline_a: Optional[str] = None


class CompareResult(_Result):
    mode: Literal["compare"]
    reasoning_log: Tuple[str, ...]
    verdict: str
    scoreboard: Tuple[ScoreboardItem, ...]
    social_intel: SocialIntel
    differences: Differences
    action_plan: ActionPlan


AnalysisResult = Union[AuditResult, IdeaResult, CompareResult]

RESULT_MODELS = {
    AnalysisMode.AUDIT: AuditResult,
    AnalysisMode.IDEA: IdeaResult,
    AnalysisMode.COMPARE: CompareResult,
}

_RESULT_ADAPTER = TypeAdapter(Annotated[AnalysisResult, Field(discriminator="mode")])


def _describe(error: ValidationError, tag: str) -> str:
    first = error.errors()[0]
    loc = list(first.get("loc") or ())
    if loc and loc[0] == tag:
        # discriminated unions prefix the location with the tag
        loc = loc[1:]
    path = "$" + "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in loc)
    more = error.error_count() - 1
    suffix = f" (+{more} more)" if more > 0 else ""
    return f"{path}: {first.get('msg')}{suffix}"


def result_from_dict(data: Any, expected_mode: Optional[AnalysisMode] = None) -> AnalysisResult:
    """
    Validate `data` against its mode's model and build the typed result.
    Raises ContractViolation on any mismatch, including a mode other than expected_mode.
    """
    if not isinstance(data, dict):
        raise ContractViolation(f"top-level value is {type(data).__name__}, expected object")

    raw_mode = data.get("mode")
    try:
        mode = AnalysisMode(raw_mode)
    except ValueError:
        raise ContractViolation(f"unknown mode tag {raw_mode!r}") from None

    if expected_mode is not None and mode != AnalysisMode(expected_mode):
        raise ContractViolation(f"mode tag {mode.value!r} does not match requested {AnalysisMode(expected_mode).value!r}")

    try:
        return _RESULT_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise ContractViolation(_describe(e, mode.value)) from e


def result_to_dict(result: AnalysisResult) -> Dict[str, Any]:
    return result.model_dump(mode="json", exclude_none=True)


# -----------------------------
# Projections
# -----------------------------
def derive_title(result: AnalysisResult) -> str:
    if isinstance(result, AuditResult):
        return result.improved_copy.headline or "Page Audit"
    if isinstance(result, IdeaResult):
        return "Idea Strategy"
    if isinstance(result, CompareResult):
        return "Comparison Analysis"
    return "Strategy Session"


def derive_summary(result: AnalysisResult) -> str:
    if isinstance(result, AuditResult):
        return result.overview.page_intent
    if isinstance(result, IdeaResult):
        return result.opportunity_scan.problem_summary
    if isinstance(result, CompareResult):
        return result.verdict
    return ""


def brief_script(result: AnalysisResult, max_points: int = 3) -> str:
    """Short spoken-style briefing for the audio summary."""
    lines = [derive_title(result) + ".", derive_summary(result)]

    if isinstance(result, AuditResult):
        points = list(result.overview.recommendations[:max_points])
        lead = "Top recommendations:"
    elif isinstance(result, IdeaResult):
        points = [result.positioning.statement, f"Test {result.channel_strategy.test_first} first."]
        lead = "Positioning:"
    else:
        points = list(result.action_plan.borrow_from_b[:max_points])
        lead = "Borrow from the competition:"

    points = [p.strip() for p in points if p and p.strip()]
    if points:
        lines.append(lead)
        lines.extend(points)

    return "\n".join(line for line in lines if line)


# -----------------------------
# History entry
# -----------------------------
@dataclass(frozen=True)
class SavedAnalysis:
    id: str
    timestamp: int              # epoch milliseconds
    mode: AnalysisMode
    title: str
    summary: str
    inputs: AnalysisInput
    result: AnalysisResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "mode": self.mode.value,
            "title": self.title,
            "summary": self.summary,
            "inputs": self.inputs.to_dict(),
            "result": result_to_dict(self.result),
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "SavedAnalysis":
        mode = AnalysisMode(d["mode"])
        return SavedAnalysis(
            id=str(d["id"]),
            timestamp=int(d["timestamp"]),
            mode=mode,
            title=str(d.get("title") or ""),
            summary=str(d.get("summary") or ""),
            inputs=AnalysisInput.from_dict(d.get("inputs") or {}),
            result=result_from_dict(d["result"], expected_mode=mode),
        )
