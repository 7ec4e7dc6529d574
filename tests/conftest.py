from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from engine.analyzer import Analyzer
from engine.models import Definition
from engine.signatures import SignatureStore


@pytest.fixture
def write_file(tmp_path: Path):
    """Write *content* to a file under tmp_path and return its path."""

    def _write(name: str, content: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def evilbot() -> Definition:
    return Definition(
        title="EvilBot",
        content_hash=hashlib.sha256(b"MALWARE_BYTES").hexdigest(),
    )


@pytest.fixture
def signatures(evilbot: Definition) -> SignatureStore:
    return SignatureStore([evilbot])


@pytest.fixture
def analyzer(signatures: SignatureStore) -> Analyzer:
    return Analyzer(signatures)
