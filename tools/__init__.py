"""MCP tool servers for on-demand file scans."""

from .heuristic_scanner import mcp as heuristic_mcp
from .static_scanner import mcp as static_mcp

__all__ = [
    "heuristic_mcp",
    "static_mcp",
]
