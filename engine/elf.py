"""ELF section and symbol resolution on top of *pyelftools*."""

from __future__ import annotations

from io import BytesIO

from elftools.elf.constants import SH_FLAGS
from elftools.elf.elffile import ELFFile
from elftools.elf.sections import SymbolTableSection

from .models import ElfSymbol, SectionDescriptor

SYMTAB_SECTION = ".symtab"


class ElfSymbolResolver:
    """Name and address lookups over one parsed ELF image.

    Lookups read section data lazily, so a corrupt header surfaces here as
    ``ELFError`` (or ``OverflowError`` for an offset past what a seek
    accepts). ``Analyzer.analyze_static`` turns both into
    ``MalformedBinaryError``.
    """

    def __init__(self, elf: ELFFile) -> None:
        self._elf = elf

    def section(self, name: str) -> SectionDescriptor | None:
        sec = self._elf.get_section_by_name(name)
        if sec is None:
            return None
        return _describe(sec)

    def find(self, name: str) -> ElfSymbol | None:
        """Exact, case-sensitive symbol lookup in ``.symtab``. First match wins."""
        symtab = self._elf.get_section_by_name(SYMTAB_SECTION)
        if not isinstance(symtab, SymbolTableSection):
            return None
        matches = symtab.get_symbol_by_name(name)
        if not matches:
            return None
        sym = matches[0]
        return ElfSymbol(
            name=sym.name,
            virtual_address=sym["st_value"],
            size=sym["st_size"],
        )

    def section_containing(self, address: int) -> SectionDescriptor | None:
        """The loaded, file-backed section whose address range holds *address*."""
        for sec in self._elf.iter_sections():
            if not sec["sh_flags"] & SH_FLAGS.SHF_ALLOC:
                continue
            if sec["sh_type"] == "SHT_NOBITS":
                continue
            desc = _describe(sec)
            if desc.contains(address):
                return desc
        return None

    @staticmethod
    def virtual_to_file_offset(section: SectionDescriptor, address: int) -> int:
        """Translate *address* to a file offset through *section*.

        Only meaningful when *address* lies inside *section*; that is not
        checked here.
        """
        return address - section.virtual_address + section.file_offset


def parse_elf(data: bytes) -> ElfSymbolResolver:
    """Parse *data* as an ELF image.

    Parser errors (``ELFError``, ``OverflowError``) propagate unchanged.
    """
    return ElfSymbolResolver(ELFFile(BytesIO(data)))


def _describe(sec) -> SectionDescriptor:
    return SectionDescriptor(
        name=sec.name,
        file_offset=sec["sh_offset"],
        virtual_address=sec["sh_addr"],
        size=sec["sh_size"],
    )

