"""
String Heuristics
─────────────────
Pulls NUL-delimited text runs out of raw file bytes and keeps the ones that
look like network indicators:
  • URL-like strings (optional scheme, dotted host, 2-6 letter TLD, optional path)
  • IPv4 addresses (four octets, each 0-255)

The patterns are deliberately approximate. A hit only marks the file as
suspicious for triage.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_URL_RE = re.compile(
    r"(?:[a-z][a-z0-9+.-]*://)?"       # scheme
    r"(?:[a-z0-9-]+\.)+"               # dotted host
    r"[a-z]{2,6}"                      # TLD
    r"(?::\d{1,5})?"                   # port
    r"(?:/[^\s\x00]*)?",               # path
    re.IGNORECASE | re.ASCII,
)

_OCTET = r"(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)"
_IPV4_RE = re.compile(rf"{_OCTET}(?:\.{_OCTET}){{3}}", re.ASCII)

# ---------------------------------------------------------------------------
# Minimum run length (characters); shorter runs are discarded
# ---------------------------------------------------------------------------

MIN_STRING_LEN = 4


def is_url_like(text: str) -> bool:
    return _URL_RE.fullmatch(text) is not None


def is_ipv4_like(text: str) -> bool:
    return _IPV4_RE.fullmatch(text) is not None


def extract_strings(data: bytes) -> list[str]:
    """Split *data* on NUL and decode each run, replacing invalid UTF-8."""
    runs = (run.decode("utf-8", errors="replace") for run in data.split(b"\x00"))
    return [s for s in runs if len(s) >= MIN_STRING_LEN]


def find_suspicious_strings(data: bytes) -> list[str]:
    """Return the URL-like or IPv4-like strings of *data* in input order.

    Duplicates are kept.
    """
    return [
        s for s in extract_strings(data)
        if is_url_like(s) or is_ipv4_like(s)
    ]
