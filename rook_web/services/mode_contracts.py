from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Type

from pydantic import BaseModel

from rook_web.domain.models import AnalysisInput, AnalysisMode, MediaItem, RequestPart
from rook_web.domain.results import AuditResult, CompareResult, IdeaResult
from rook_web.services.media_encoder import split_data_uri

SYSTEM_INSTRUCTION = (
    "You are Rook Lite, a world-class Chief Marketing Officer (CMO).\n"
    "Your goal is to provide deep, strategic, conversion-focused analysis.\n"
    "Avoid generic advice. Be specific, critical, and authoritative.\n"
    "Always use internal reasoning before generating the final JSON output."
)

IMAGE_NOTE = (
    "Attached images are screenshots or creatives. Judge visual hierarchy, "
    "above-the-fold clarity, and whether the visuals support the copy."
)
VIDEO_NOTE = (
    "Attached videos are recordings or ad creatives. Judge the hook in the first seconds, "
    "pacing, and whether the spoken and on-screen message matches the copy."
)

AUDIT_TASK = (
    "Perform a deep conversion audit on the following landing page content.\n"
    "INPUT: \"{text}\"\n"
    "Provide strategic reasoning, find gaps (with severity), rewrite copy, and suggest ads.\n"
    "Suggest SEO title tag, meta description and focus keywords, each with the current value, "
    "your suggestion and the reasoning.\n"
    "Score the page against competitors on 0-10 radar dimensions with one fix each.\n"
    "If the input contains URLs, use Google Search to gather context about the brand if needed."
)

IDEA_TASK = (
    "Act as a GTM strategist. I have a product idea but no website.\n"
    "IDEA INPUT: \"{text}\"\n"
    "Create an opportunity scan, ICP, positioning, landing page structure, channel strategy, "
    "a day-by-day launch plan, and sample ads, social posts and a launch email.\n"
    "Use Google Search to validate market trends if specific industries are mentioned."
)

COMPARE_VARIANT_A = "VARIANT A (My Product): \"{text}\""
COMPARE_VARIANT_B = "VARIANT B (Competitor(s)): \"{text}\""
COMPARE_TASK = (
    "Compare these two marketing assets.\n"
    "NOTE: Variant B may contain multiple competitors. Analyze them as a group or the strongest among them.\n"
    "\n"
    "TASKS:\n"
    "1. Provide a verdict and 0-10 scoreboard.\n"
    "2. USE GOOGLE SEARCH to research the social media presence (LinkedIn, Twitter, etc.) "
    "of the brands mentioned in the inputs.\n"
    "3. Summarize the social intelligence found (channels, sentiment).\n"
    "4. Analyze differences and create an action plan."
)


def media_notes(media: Sequence[MediaItem]) -> str:
    kinds = {m.kind for m in media}
    notes = []
    if "image" in kinds:
        notes.append(IMAGE_NOTE)
    if "video" in kinds:
        notes.append(VIDEO_NOTE)
    return "\n".join(notes)


def media_parts(media: Sequence[MediaItem]) -> List[RequestPart]:
    parts = []
    for m in media:
        mime, data = split_data_uri(m.payload)
        parts.append(RequestPart.from_media(mime, data))
    return parts


def _with_notes(text: str, media: Sequence[MediaItem]) -> str:
    notes = media_notes(media)
    return f"{text}\n{notes}" if notes else text


def _single_variant_parts(template: str) -> Callable[[AnalysisInput], List[RequestPart]]:
    def build(inputs: AnalysisInput) -> List[RequestPart]:
        text = _with_notes(template.format(text=inputs.primary_text), inputs.media_a)
        return media_parts(inputs.media_a) + [RequestPart.from_text(text)]

    return build


def _compare_parts(inputs: AnalysisInput) -> List[RequestPart]:
    # A text, A media, B text, B media, task: keeps each variant's context together
    parts = [RequestPart.from_text(_with_notes(COMPARE_VARIANT_A.format(text=inputs.primary_text), inputs.media_a))]
    parts += media_parts(inputs.media_a)
    parts.append(RequestPart.from_text(_with_notes(COMPARE_VARIANT_B.format(text=inputs.secondary_text), inputs.media_b)))
    parts += media_parts(inputs.media_b)
    parts.append(RequestPart.from_text(COMPARE_TASK))
    return parts


@dataclass(frozen=True)
class ModeContract:
    mode: AnalysisMode
    schema: Type[BaseModel]
    build_parts: Callable[[AnalysisInput], List[RequestPart]]
    system_instruction: str = SYSTEM_INSTRUCTION


CONTRACTS: Dict[AnalysisMode, ModeContract] = {
    AnalysisMode.AUDIT: ModeContract(AnalysisMode.AUDIT, AuditResult, _single_variant_parts(AUDIT_TASK)),
    AnalysisMode.IDEA: ModeContract(AnalysisMode.IDEA, IdeaResult, _single_variant_parts(IDEA_TASK)),
    AnalysisMode.COMPARE: ModeContract(AnalysisMode.COMPARE, CompareResult, _compare_parts),
}


def contract_for(mode: AnalysisMode) -> ModeContract:
    return CONTRACTS[AnalysisMode(mode)]
