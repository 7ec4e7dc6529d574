"""Utility helpers: format sniffing and content hashing."""

from __future__ import annotations

import hashlib
from pathlib import Path

from .models import BinaryFormat

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PE_MAGIC = b"MZ"
ELF_MAGIC = b"\x7fELF"

HEADER_PROBE_SIZE = 16

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def detect_format(data: bytes) -> BinaryFormat:
    """Detect binary format from magic bytes."""
    if data[:4] == ELF_MAGIC:
        return BinaryFormat.ELF
    if data[:2] == PE_MAGIC:
        return BinaryFormat.PE
    return BinaryFormat.UNKNOWN


def sniff_format(path: str | Path) -> BinaryFormat:
    """Classify the file at *path* by its leading bytes.

    Raises ``OSError`` if *path* cannot be opened or read.
    """
    with open(path, "rb") as fh:
        header = fh.read(HEADER_PROBE_SIZE)
    return detect_format(header)


def compute_sha256(data: bytes) -> str:
    """Return the lowercase hex SHA-256 digest of *data*."""
    return hashlib.sha256(data).hexdigest()
