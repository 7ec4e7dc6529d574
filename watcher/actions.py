"""
Action Executor
───────────────
Turns an analysis outcome into a side effect:
  • KnownMalicious          → delete the file
  • SuspiciousStrings       → alert (log)
  • VulnerableScanfPattern  → alert (log)
  • NoFinding               → nothing
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from engine.models import (
    AnalysisOutcome,
    KnownMalicious,
    SuspiciousStrings,
    VulnerableScanfPattern,
)

logger = logging.getLogger(__name__)


class ActionExecutor:
    def execute(self, path: str | Path, outcome: AnalysisOutcome) -> bool:
        """Act on *outcome* for *path*. Returns True if the file was removed."""
        if isinstance(outcome, KnownMalicious):
            logger.warning(
                "Detected malware file \"%s\" is \"%s\", removing...",
                path, outcome.definition.title,
            )
            return self.remove(path)

        if isinstance(outcome, SuspiciousStrings):
            logger.warning(
                "Suspicious strings in \"%s\": %s",
                path, ", ".join(outcome.strings),
            )
        elif isinstance(outcome, VulnerableScanfPattern):
            logger.warning(
                "Unbounded scanf(\"%%s\") in main of \"%s\" (%d call-site(s))",
                path, len(outcome.call_sites),
            )
        return False

    def remove(self, path: str | Path) -> bool:
        try:
            os.remove(path)
        except OSError as exc:
            logger.error("Failed to remove file \"%s\": %s", path, exc)
            return False
        logger.info("Successfully removed file \"%s\"", path)
        return True
