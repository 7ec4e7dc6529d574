"""
Static Scanner MCP Server
─────────────────────────
On-demand version of the full watcher pipeline for a single file:
  • Heuristic phase first (format, SHA-256, signatures, strings)
  • For ELF files without a signature hit: unbounded ``scanf("%s", ...)``
    detection in ``main``
"""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from engine.analyzer import Analyzer
from engine.errors import DetectionError
from engine.models import BinaryFormat, KnownMalicious, ScanReport
from engine.signatures import SignatureStore
from tools.heuristic_scanner import run_heuristic, signature_store

# ---------------------------------------------------------------------------
# MCP server
# ---------------------------------------------------------------------------

mcp = FastMCP("static-scanner")

# ---------------------------------------------------------------------------
# Tool
# ---------------------------------------------------------------------------


def scan_static_impl(
    file_path: str, signatures: SignatureStore | None = None,
) -> dict[str, Any]:
    """Scan one file through both phases (plain callable)."""
    analyzer = Analyzer(signatures if signatures is not None else signature_store())
    analyzer.set_target(file_path)

    report = ScanReport(path=file_path)
    if not run_heuristic(analyzer, report):
        return report.to_dict()

    if isinstance(report.outcomes[-1], KnownMalicious):
        return report.to_dict()
    if analyzer.file_format is not BinaryFormat.ELF:
        return report.to_dict()

    try:
        report.add(analyzer.analyze_static())
    except DetectionError as exc:
        report.errors.append(f"{type(exc).__name__}: {exc}")
    report.level = analyzer.level
    return report.to_dict()


@mcp.tool()
def scan_static(file_path: str) -> dict[str, Any]:
    """Run the heuristic scan and, for ELF executables, check ``main``
    for ``scanf("%s", ...)`` calls (unbounded string reads).

    Returns the detected format, SHA-256, analysis level reached, every
    phase outcome, and any detection errors.
    """
    return scan_static_impl(file_path)


# ---------------------------------------------------------------------------
# Standalone
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    mcp.run()
