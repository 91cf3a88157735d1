"""Subprocess helpers for probing external executables."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a finished command."""

    returncode: int
    stdout: str
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[[Sequence[str], Optional[Mapping[str, str]]], Optional[CommandResult]]


def run_command(
    args: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT_S,
) -> Optional[CommandResult]:
    """Run a command and capture its output.

    Args:
        args: Program and arguments
        env: Environment for the child (also used to resolve a bare program name)
        timeout: Seconds before the child is killed

    Returns:
        CommandResult, or None if the program could not be started or timed out
    """
    try:
        completed = subprocess.run(
            list(args),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            env=dict(env) if env is not None else None,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Command timed out after %.1fs: %s", timeout, " ".join(args))
        return None
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Failed to run %s: %s", args[0], e)
        return None

    return CommandResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
