import re
from dataclasses import dataclass

from rook_web.domain.models import AnalysisInput, AnalysisMode

_URL_RE = re.compile(r"https?://\S+", flags=re.IGNORECASE)
_DOMAIN_RE = re.compile(r"\b[\w-]+\.[a-z]{2,}\b", flags=re.IGNORECASE)
_QUOTED_NAME_RE = re.compile(r"\"[A-Z][^\"\n]{1,40}\"")
_LABEL_RE = re.compile(r"^\s*(?:product|idea|brand|company)\s*:", flags=re.IGNORECASE | re.MULTILINE)


class SearchPolicy:
    """Strategy interface: may the service use live search for this request?"""
    def allow_search(self, mode: AnalysisMode, inputs: AnalysisInput) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class FixedSearchPolicy(SearchPolicy):
    enabled: bool = True

    def allow_search(self, mode: AnalysisMode, inputs: AnalysisInput) -> bool:
        return self.enabled


@dataclass(frozen=True)
class HeuristicSearchPolicy(SearchPolicy):
    always_for_compare: bool = True

    def allow_search(self, mode: AnalysisMode, inputs: AnalysisInput) -> bool:
        if mode == AnalysisMode.COMPARE and self.always_for_compare:
            return True

        text = "\n".join(t for t in (inputs.primary_text, inputs.secondary_text) if t)
        if not text.strip():
            return False

        return any(rx.search(text) for rx in (_URL_RE, _DOMAIN_RE, _QUOTED_NAME_RE, _LABEL_RE))


def policy_from_setting(value: str) -> SearchPolicy:
    v = (value or "").strip().lower()
    if v in ("", "auto"):
        return HeuristicSearchPolicy()
    if v in ("always", "on", "true", "yes"):
        return FixedSearchPolicy(True)
    if v in ("never", "off", "false", "no"):
        return FixedSearchPolicy(False)
    raise ValueError(f"Unknown live_search setting: {value!r} (expected auto, always or never)")
