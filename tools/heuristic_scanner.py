"""
Heuristic Scanner MCP Server
────────────────────────────
On-demand version of the watcher's first phase for a single file:
  • File-format sniffing and SHA-256
  • Exact match against the known-malicious signature set
  • URL / IPv4 string heuristics (skipped on a signature hit)

Detection errors are reported in the ``errors`` list, never raised.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastmcp import FastMCP

from engine.analyzer import Analyzer
from engine.errors import DetectionError
from engine.models import ScanReport
from engine.signatures import SignatureStore, default_definitions_path, load_definitions

# ---------------------------------------------------------------------------
# MCP server
# ---------------------------------------------------------------------------

mcp = FastMCP("heuristic-scanner")

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def signature_store() -> SignatureStore:
    """Definitions are loaded once per server process."""
    return load_definitions(default_definitions_path())


def run_heuristic(analyzer: Analyzer, report: ScanReport) -> bool:
    """Run the heuristic phase into *report*. Returns False on a detection error."""
    try:
        report.add(analyzer.analyze_heuristic())
    except DetectionError as exc:
        report.errors.append(f"{type(exc).__name__}: {exc}")
        return False
    finally:
        report.level = analyzer.level
        report.sha256 = analyzer.sha256
        if analyzer.file_format is not None:
            report.format = analyzer.file_format
    return True


# ---------------------------------------------------------------------------
# Tool
# ---------------------------------------------------------------------------


def scan_heuristic_impl(
    file_path: str, signatures: SignatureStore | None = None,
) -> dict[str, Any]:
    """Heuristically scan one file (plain callable)."""
    analyzer = Analyzer(signatures if signatures is not None else signature_store())
    analyzer.set_target(file_path)

    report = ScanReport(path=file_path)
    run_heuristic(analyzer, report)
    return report.to_dict()


@mcp.tool()
def scan_heuristic(file_path: str) -> dict[str, Any]:
    """Hash a file, match it against known-malicious signatures and look
    for embedded URLs / IPv4 addresses.

    Returns the detected format, SHA-256, analysis level reached, the
    outcome, and any detection errors.
    """
    return scan_heuristic_impl(file_path)


# ---------------------------------------------------------------------------
# Standalone
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    mcp.run()
