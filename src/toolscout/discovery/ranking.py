"""Ranking of discovered installations.

Preference is a short list of comparator stages evaluated in order; the
first stage that tells two candidates apart decides. Each stage returns a
positive number when ``a`` is preferred, negative when ``b`` is, 0 on a tie.
"""

from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Callable, Iterable, List, Optional, Sequence

from ..versions import compare_versions
from .specs import CLAUDE_TOOL, source_preference
from .types import InstallationCandidate

logger = logging.getLogger(__name__)

Stage = Callable[[InstallationCandidate, InstallationCandidate], int]


def prefer_versioned(a: InstallationCandidate, b: InstallationCandidate) -> int:
    """A candidate with a known version beats one without."""
    return int(a.version is not None) - int(b.version is not None)


def prefer_newer_version(a: InstallationCandidate, b: InstallationCandidate) -> int:
    if a.version is None or b.version is None:
        return 0
    return int(compare_versions(a.version, b.version))


def prefer_resolved_path(tool_name: str) -> Stage:
    """Between two versionless candidates, a real path beats the bare command name.

    The bare name depends on PATH at launch time, which may have changed.
    """

    def stage(a: InstallationCandidate, b: InstallationCandidate) -> int:
        if a.version is not None or b.version is not None:
            return 0
        return int(not a.is_bare_command(tool_name)) - int(not b.is_bare_command(tool_name))

    return stage


def prefer_source(a: InstallationCandidate, b: InstallationCandidate) -> int:
    """Lower source preference rank wins."""
    return source_preference(b.source) - source_preference(a.source)


def prefer_lower_path(a: InstallationCandidate, b: InstallationCandidate) -> int:
    """Final tie-break so that selection never depends on input order."""
    return (a.path < b.path) - (a.path > b.path)


def compose(stages: Sequence[Stage]) -> Stage:
    def compare(a: InstallationCandidate, b: InstallationCandidate) -> int:
        for stage in stages:
            result = stage(a, b)
            if result:
                return result
        return 0

    return compare


def selection_stages(tool_name: str = CLAUDE_TOOL.name) -> List[Stage]:
    return [
        prefer_versioned,
        prefer_newer_version,
        prefer_resolved_path(tool_name),
        prefer_source,
        prefer_lower_path,
    ]


PRESENTATION_STAGES: List[Stage] = [prefer_versioned, prefer_newer_version, prefer_source]


def select_best(
    candidates: Iterable[InstallationCandidate],
    tool_name: str = CLAUDE_TOOL.name,
) -> Optional[InstallationCandidate]:
    """Pick the single best installation, or None if there are none."""
    candidates = list(candidates)
    if not candidates:
        return None
    best = max(candidates, key=cmp_to_key(compose(selection_stages(tool_name))))
    logger.info(
        "Selected installation: path=%s, version=%s, source=%s",
        best.path,
        best.version,
        best.source,
    )
    return best


def discover_all_sorted(candidates: Iterable[InstallationCandidate]) -> List[InstallationCandidate]:
    """All candidates, best first: versioned before versionless, newest first,
    then by source preference. Equal entries keep their discovery order."""
    return sorted(candidates, key=cmp_to_key(compose(PRESENTATION_STAGES)), reverse=True)


class InstallationRanker:
    """Ranks candidates for one tool."""

    def __init__(self, tool_name: str = CLAUDE_TOOL.name):
        self.tool_name = tool_name

    def select_best(self, candidates: Iterable[InstallationCandidate]) -> Optional[InstallationCandidate]:
        return select_best(candidates, self.tool_name)

    def discover_all_sorted(self, candidates: Iterable[InstallationCandidate]) -> List[InstallationCandidate]:
        return discover_all_sorted(candidates)
