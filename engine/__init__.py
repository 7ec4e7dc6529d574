"""Analysis engine: signature matching, string heuristics and ELF pattern scanning."""

from .analyzer import Analyzer, AnalysisSession
from .errors import (
    DetectionError,
    FormatUnknownError,
    MalformedBinaryError,
    ReadFailedError,
    UnsupportedFormatError,
)
from .models import (
    AnalysisOutcome,
    AnalyzedLevel,
    BinaryFormat,
    Definition,
    KnownMalicious,
    NoFinding,
    ScanReport,
    SuspiciousStrings,
    VulnerableScanfPattern,
)
from .signatures import SignatureStore, default_definitions_path, load_definitions

__all__ = [
    "Analyzer",
    "AnalysisSession",
    "DetectionError",
    "FormatUnknownError",
    "MalformedBinaryError",
    "ReadFailedError",
    "UnsupportedFormatError",
    "AnalysisOutcome",
    "AnalyzedLevel",
    "BinaryFormat",
    "Definition",
    "KnownMalicious",
    "NoFinding",
    "ScanReport",
    "SuspiciousStrings",
    "VulnerableScanfPattern",
    "SignatureStore",
    "default_definitions_path",
    "load_definitions",
]
