from .analysis_client import AnalysisClient, ContentGenerator
from .media_encoder import MediaEncoder
from .search_policy import FixedSearchPolicy, HeuristicSearchPolicy, SearchPolicy
from .session_state import SessionRegistry, SessionState

__all__ = [
    "AnalysisClient",
    "ContentGenerator",
    "MediaEncoder",
    "SearchPolicy",
    "HeuristicSearchPolicy",
    "FixedSearchPolicy",
    "SessionState",
    "SessionRegistry",
]
