"""Shared data models used by the analysis engine, the watcher and the MCP tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class BinaryFormat(str, Enum):
    ELF = "ELF"
    PE = "PE"
    UNKNOWN = "UNKNOWN"


class AnalyzedLevel(IntEnum):
    """How far the current target has been analysed. Ordered."""

    NONE = 0
    HEURISTIC = 1
    STATIC = 2


# ---------------------------------------------------------------------------
# Signature records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Definition:
    """A known-malicious content hash plus a human-readable title."""

    title: str
    content_hash: str

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Definition:
        """Build from a persisted ``{"title": ..., "hash": ...}`` record."""
        if not isinstance(raw, dict):
            raise ValueError(f"Malformed definition record: {raw!r}")
        title = raw.get("title")
        content_hash = raw.get("hash")
        if not isinstance(title, str) or not isinstance(content_hash, str):
            raise ValueError(f"Malformed definition record: {raw!r}")
        return cls(title=title, content_hash=content_hash)

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "hash": self.content_hash}


# ---------------------------------------------------------------------------
# ELF helpers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ElfSymbol:
    name: str
    virtual_address: int
    size: int


@dataclass(frozen=True)
class SectionDescriptor:
    """Where a section lives in the file and in the address space."""

    name: str
    file_offset: int
    virtual_address: int
    size: int

    def contains(self, address: int) -> bool:
        return self.virtual_address <= address < self.virtual_address + self.size


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

class AnalysisOutcome:
    """Result of one analysis phase.

    The heuristic phase yields ``NoFinding``, ``KnownMalicious`` or
    ``SuspiciousStrings``; the static phase yields ``NoFinding`` or
    ``VulnerableScanfPattern``.
    """

    kind: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind}


@dataclass(frozen=True)
class NoFinding(AnalysisOutcome):
    kind = "no_finding"


@dataclass(frozen=True)
class KnownMalicious(AnalysisOutcome):
    definition: Definition

    kind = "known_malicious"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "definition": self.definition.to_dict()}


@dataclass(frozen=True)
class SuspiciousStrings(AnalysisOutcome):
    strings: tuple[str, ...]

    kind = "suspicious_strings"

    def __post_init__(self) -> None:
        if not self.strings:
            raise ValueError("SuspiciousStrings requires at least one string")
        object.__setattr__(self, "strings", tuple(self.strings))

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "strings": list(self.strings)}


@dataclass(frozen=True)
class VulnerableScanfPattern(AnalysisOutcome):
    call_sites: tuple[int, ...] = ()

    kind = "vulnerable_scanf_pattern"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "call_sites": [f"0x{addr:x}" for addr in self.call_sites],
        }


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

@dataclass
class ScanReport:
    """Aggregated output of an on-demand scan of one file."""

    path: str
    format: BinaryFormat = BinaryFormat.UNKNOWN
    sha256: str = ""
    level: AnalyzedLevel = AnalyzedLevel.NONE
    outcomes: list[AnalysisOutcome] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def add(self, outcome: AnalysisOutcome) -> None:
        self.outcomes.append(outcome)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "format": self.format.value,
            "sha256": self.sha256,
            "level": self.level.name.lower(),
            "outcomes": [o.to_dict() for o in self.outcomes],
            "errors": list(self.errors),
        }
