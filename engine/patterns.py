"""
Vulnerable scanf Pattern Scanner
────────────────────────────────
Finds ``scanf("%s", buf)`` call-sites in raw x86-64 code without a
disassembler. Only two instruction shapes are decoded:
  • near CALL        E8 rel32
  • RIP-relative LEA 48 8D 05 disp32   (lea rax, [rip + disp32])

For every CALL whose target is the scanf entry point, the bytes before it
are walked backwards looking for the LEA that loaded the format string. If
that LEA points at the literal ``"%s\\0"`` the call-site is reported.

This is a byte-pattern match. Data that happens to look like these opcodes
can produce false positives; optimised or position-independent code that
loads the format differently is missed.
"""

from __future__ import annotations

import logging
import struct

from .elf import ElfSymbolResolver
from .errors import MalformedBinaryError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Instruction encodings
# ---------------------------------------------------------------------------

CALL_OPCODE = 0xE8
CALL_LENGTH = 5                     # opcode + rel32

LEA_PREFIX = bytes([0x48, 0x8D, 0x05])  # REX.W, LEA, ModRM rax <- [rip+disp32]
LEA_LENGTH = 7                      # prefix + disp32

UNBOUNDED_STRING_FORMAT = b"%s\x00"

_REL32 = struct.Struct("<i")


def _read(data: bytes, offset: int, size: int, path: str = "") -> bytes:
    """Bounds-checked slice of *data*."""
    if offset < 0 or size < 0 or offset + size > len(data):
        raise MalformedBinaryError(
            path, f"read of {size} bytes at offset {offset:#x} is outside the file"
        )
    return data[offset:offset + size]


def _rel32(data: bytes, offset: int, path: str = "") -> int:
    return _REL32.unpack(_read(data, offset, 4, path))[0]


def _loads_unbounded_format(
    data: bytes, address: int, resolver: ElfSymbolResolver,
) -> bool:
    section = resolver.section_containing(address)
    if section is None:
        return False
    offset = resolver.virtual_to_file_offset(section, address)
    end = min(section.file_offset + section.size, len(data))
    if offset + len(UNBOUNDED_STRING_FORMAT) > end:
        return False
    return data[offset:offset + len(UNBOUNDED_STRING_FORMAT)] == UNBOUNDED_STRING_FORMAT


def _format_load_before(
    data: bytes,
    call_pos: int,
    start: int,
    base_address: int,
    resolver: ElfSymbolResolver,
) -> int | None:
    """Walk back from *call_pos* for a LEA loading ``"%s"``; return its address."""
    for pos in range(call_pos - LEA_LENGTH, start - 1, -1):
        if data[pos:pos + len(LEA_PREFIX)] != LEA_PREFIX:
            continue
        lea_address = base_address + (pos - start)
        target = lea_address + LEA_LENGTH + _rel32(data, pos + len(LEA_PREFIX))
        if _loads_unbounded_format(data, target, resolver):
            return lea_address
    return None


def find_vulnerable_scanf_calls(
    data: bytes,
    start: int,
    length: int,
    base_address: int,
    scanf_address: int,
    resolver: ElfSymbolResolver,
    path: str = "",
) -> list[int]:
    """Return the addresses of every ``scanf("%s", ...)`` call in a code range.

    *start* and *length* delimit the range as file offsets into *data*;
    *base_address* is the virtual address of ``data[start]``. The whole range
    is always scanned, so every matching call-site is reported.

    Raises ``MalformedBinaryError`` if the range or a call operand lies
    outside *data*.
    """
    _read(data, start, length, path)

    matches: list[int] = []
    for pos in range(start, start + length):
        if data[pos] != CALL_OPCODE:
            continue

        call_address = base_address + (pos - start)
        target = call_address + CALL_LENGTH + _rel32(data, pos + 1, path)
        if target != scanf_address:
            continue

        lea_address = _format_load_before(data, pos, start, base_address, resolver)
        if lea_address is None:
            logger.debug("scanf call at %#x does not load \"%%s\"", call_address)
            continue

        logger.info(
            "Unbounded scanf(\"%%s\") at %#x (format loaded at %#x)%s",
            call_address,
            lea_address,
            f" in {path}" if path else "",
        )
        matches.append(call_address)

    return matches
