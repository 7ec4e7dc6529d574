"""Known-malicious content hashes.

The store is loaded once at startup and never mutated afterwards. Lookups go
through a hash index; when two definitions share a hash the one stored first
wins.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator

from .models import Definition

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFINITIONS_ENV = "DROPWATCH_DEFINITIONS"
BUNDLED_DEFINITIONS = Path(__file__).with_name("sha256_definitions.json")

# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SignatureStore:
    """Immutable, ordered set of ``Definition`` records."""

    def __init__(self, definitions: Iterable[Definition] = ()) -> None:
        self._definitions = tuple(definitions)
        index: dict[str, Definition] = {}
        for definition in self._definitions:
            index.setdefault(definition.content_hash, definition)
        self._index = MappingProxyType(index)

    def lookup(self, content_hash: str) -> Definition | None:
        """Return the first definition whose hash equals *content_hash*."""
        return self._index.get(content_hash)

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[Definition]:
        return iter(self._definitions)

    def __repr__(self) -> str:
        return f"SignatureStore({len(self)} definitions)"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def default_definitions_path() -> Path:
    override = os.getenv(DEFINITIONS_ENV)
    return Path(override) if override else BUNDLED_DEFINITIONS


def load_definitions(path: str | Path) -> SignatureStore:
    """Load a ``{"definitions": [{"title": ..., "hash": ...}]}`` document.

    Raises ``OSError`` if the file cannot be read and ``ValueError`` if it is
    not a well-formed definitions document.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid definitions file {path}: {exc}") from exc

    records = document.get("definitions") if isinstance(document, dict) else None
    if not isinstance(records, list):
        raise ValueError(f"Invalid definitions file {path}: missing 'definitions' list")

    store = SignatureStore(Definition.from_dict(record) for record in records)
    logger.info("Loaded %d definitions from %s", len(store), path)
    return store
