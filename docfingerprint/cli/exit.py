"""Pipeline outcomes and the exit codes they map to."""

from __future__ import annotations

from enum import Enum


class Outcome(Enum):
    """How a pipeline run ended."""

    ALL_MATCHED = 0
    """Every record matched a fingerprint."""
    PARTIAL = 1
    """Some records were unmatched or skipped."""
    REFUSAL = 2
    """The pipeline failed or the command line was rejected."""

    def exit_code(self) -> int:
        """The process exit code for this outcome."""
        return self.value