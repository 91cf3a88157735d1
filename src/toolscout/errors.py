"""Error taxonomy for tool and runtime resolution.

Every error carries a stable, language-neutral ``code`` so that a host
application can map it to localized text and remediation advice.
"""

from __future__ import annotations

from typing import Dict, Optional


class ToolscoutError(Exception):
    """Base class for all resolution errors."""

    code = "toolscout_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(ToolscoutError):
    """No candidate or runtime could be located."""

    code = "not_found"


class RuntimeUnavailableError(NotFoundError):
    """Every runtime tier failed.

    The message is the download tier's, since it is the most actionable one.
    ``tier_errors`` keeps the failure of each tier keyed by tier name.
    """

    code = "runtime_unavailable"

    def __init__(self, message: str, tier_errors: Optional[Dict[str, ToolscoutError]] = None):
        super().__init__(message)
        self.tier_errors = dict(tier_errors or {})


class ExtractionError(ToolscoutError):
    """Archive unreadable, binary missing after extraction, or permissions not set."""

    code = "extraction_failed"


class TransportError(ToolscoutError):
    """Download failed: connection error or non-2xx response."""

    code = "download_failed"

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class UnsupportedPlatformError(TransportError):
    """No runtime artifact is published for this OS/architecture."""

    code = "unsupported_platform"


class VersionParseError(ToolscoutError):
    """A version string could not be extracted. Always degraded to "no version"."""

    code = "version_unparsable"


REMEDIATION_HINTS: Dict[str, str] = {
    NotFoundError.code: (
        "Install the CLI with: npm install -g @anthropic-ai/claude-code, "
        "or point the application at an existing binary."
    ),
    RuntimeUnavailableError.code: (
        "Install Node.js (https://nodejs.org or: brew install node), "
        "or allow the application to download its own runtime."
    ),
    TransportError.code: "Check the network connection and proxy settings, then retry.",
    UnsupportedPlatformError.code: (
        "No prebuilt Node.js is available for this platform; install Node.js manually."
    ),
    ExtractionError.code: "Check that the application data directory is writable, then retry.",
}


def format_error_with_suggestion(error: ToolscoutError) -> str:
    """Render an error with its remediation hint, if one is known."""
    hint = REMEDIATION_HINTS.get(error.code)
    if not hint:
        return error.message
    return f"{error.message}\n\nSuggestion: {hint}"
