"""Discovery and ranking of tool installations."""

from .ranking import InstallationRanker, discover_all_sorted, select_best
from .scanner import CandidateScanner, dedupe_candidates
from .specs import CLAUDE_TOOL, NODE_RUNTIME, RuntimeSpec, ToolSpec, source_preference
from .types import InstallationCandidate, InstallationType, RuntimeDescriptor, RuntimeSource

__all__ = [
    "CandidateScanner",
    "InstallationRanker",
    "InstallationCandidate",
    "InstallationType",
    "RuntimeDescriptor",
    "RuntimeSource",
    "ToolSpec",
    "RuntimeSpec",
    "CLAUDE_TOOL",
    "NODE_RUNTIME",
    "dedupe_candidates",
    "discover_all_sorted",
    "select_best",
    "source_preference",
]
