"""
Analyzer
────────
Drives one file at a time through the two analysis phases:
  • heuristic: format sniffing, SHA-256 signature match, string heuristics
  • static:    ELF only; finds unbounded ``scanf("%s", ...)`` calls in ``main``

Per-file state lives in an ``AnalysisSession`` that is replaced wholesale by
``set_target``, so nothing from a previous file survives into the next one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from elftools.common.exceptions import ELFError

from .elf import parse_elf
from .errors import (
    FormatUnknownError,
    MalformedBinaryError,
    ReadFailedError,
    UnsupportedFormatError,
)
from .models import (
    AnalysisOutcome,
    AnalyzedLevel,
    BinaryFormat,
    KnownMalicious,
    NoFinding,
    SuspiciousStrings,
    VulnerableScanfPattern,
)
from .patterns import find_vulnerable_scanf_calls
from .signatures import SignatureStore
from .strings import find_suspicious_strings
from .utils import compute_sha256, sniff_format

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TEXT_SECTION = ".text"
MAIN_SYMBOL = "main"
SCANF_SYMBOL = "__isoc99_scanf"


@dataclass
class AnalysisSession:
    """Mutable state for the file currently being analysed."""

    path: Path
    data: bytes = b""
    format: BinaryFormat | None = None
    sha256: str = ""
    level: AnalyzedLevel = AnalyzedLevel.NONE

    def advance(self, level: AnalyzedLevel) -> None:
        self.level = max(self.level, level)


class Analyzer:
    def __init__(self, signatures: SignatureStore) -> None:
        self._signatures = signatures
        self._session: AnalysisSession | None = None

    # -- session -------------------------------------------------------------

    def set_target(self, path: str | Path) -> None:
        self._session = AnalysisSession(path=Path(path))

    @property
    def target(self) -> Path | None:
        return self._session.path if self._session else None

    @property
    def level(self) -> AnalyzedLevel:
        return self._session.level if self._session else AnalyzedLevel.NONE

    @property
    def file_format(self) -> BinaryFormat | None:
        return self._session.format if self._session else None

    @property
    def sha256(self) -> str:
        return self._session.sha256 if self._session else ""

    def _current(self) -> AnalysisSession:
        if self._session is None:
            raise RuntimeError("No target set; call set_target() first")
        return self._session

    # -- heuristic phase -----------------------------------------------------

    def analyze_heuristic(self) -> AnalysisOutcome:
        """Sniff, hash and string-scan the current target.

        Returns ``KnownMalicious`` on a signature hit (the string scan is
        skipped), ``SuspiciousStrings`` when network indicators are found,
        otherwise ``NoFinding``. The level reaches ``HEURISTIC`` once the
        file has been read and hashed, whatever the outcome.

        Raises ``FormatUnknownError`` or ``ReadFailedError``; the level is
        left untouched in both cases.
        """
        session = self._current()
        path = str(session.path)
        logger.info("Analyzing heuristically: \"%s\"...", path)

        try:
            file_format = sniff_format(session.path)
        except OSError as exc:
            raise FormatUnknownError(path, str(exc)) from exc

        try:
            data = session.path.read_bytes()
        except OSError as exc:
            raise ReadFailedError(path, str(exc)) from exc

        session.format = file_format
        session.data = data
        session.sha256 = compute_sha256(data)
        session.advance(AnalyzedLevel.HEURISTIC)
        logger.debug("%s: format=%s sha256=%s", path, file_format.value, session.sha256)

        definition = self._signatures.lookup(session.sha256)
        if definition is not None:
            return KnownMalicious(definition)

        strings = find_suspicious_strings(data)
        if strings:
            return SuspiciousStrings(tuple(strings))
        return NoFinding()

    # -- static phase --------------------------------------------------------

    def analyze_static(self) -> AnalysisOutcome:
        """Look for ``scanf("%s", ...)`` inside the ELF ``main`` function.

        A missing ``.text`` section or a missing ``main``/scanf symbol yields
        ``NoFinding`` without the level reaching ``STATIC``.

        Raises ``UnsupportedFormatError`` for non-ELF targets and
        ``MalformedBinaryError`` when the container cannot be parsed.
        """
        session = self._current()
        path = str(session.path)

        if session.format is not BinaryFormat.ELF:
            raise UnsupportedFormatError(path, "static analysis supports ELF files only")

        logger.info("Analyzing statically: \"%s\"...", path)

        try:
            outcome = self._scan_elf(session)
        except (ELFError, OverflowError) as exc:
            raise MalformedBinaryError(path, str(exc)) from exc

        if outcome is not None:
            session.advance(AnalyzedLevel.STATIC)
            return outcome
        return NoFinding()

    def _scan_elf(self, session: AnalysisSession) -> AnalysisOutcome | None:
        """Run the pattern scan; ``None`` when a prerequisite is missing."""
        path = str(session.path)
        resolver = parse_elf(session.data)

        text = resolver.section(TEXT_SECTION)
        if text is None:
            logger.info("%s: no %s section", path, TEXT_SECTION)
            return None

        main = resolver.find(MAIN_SYMBOL)
        scanf = resolver.find(SCANF_SYMBOL)
        if main is None or scanf is None:
            logger.info(
                "%s: missing symbol(s): %s",
                path,
                ", ".join(
                    name for name, sym in ((MAIN_SYMBOL, main), (SCANF_SYMBOL, scanf))
                    if sym is None
                ),
            )
            return None

        call_sites = find_vulnerable_scanf_calls(
            session.data,
            start=resolver.virtual_to_file_offset(text, main.virtual_address),
            length=main.size,
            base_address=main.virtual_address,
            scanf_address=scanf.virtual_address,
            resolver=resolver,
            path=path,
        )
        if call_sites:
            return VulnerableScanfPattern(tuple(call_sites))
        return NoFinding()
