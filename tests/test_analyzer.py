import pytest

import engine.analyzer as analyzer_module
from engine.analyzer import Analyzer
from engine.errors import (
    FormatUnknownError,
    MalformedBinaryError,
    ReadFailedError,
    UnsupportedFormatError,
)
from engine.models import (
    AnalyzedLevel,
    BinaryFormat,
    KnownMalicious,
    NoFinding,
    SuspiciousStrings,
    VulnerableScanfPattern,
)
from engine.signatures import SignatureStore

from elf_builder import (
    TEXT_ADDR,
    build_elf,
    scanf_main,
    vulnerable_elf,
    with_section_offset,
)


# ---------------------------------------------------------------------------
# heuristic phase
# ---------------------------------------------------------------------------


def test_signature_hit_skips_string_scan(analyzer, evilbot, write_file, monkeypatch):
    def _fail(data):
        raise AssertionError("string scan must not run on a signature hit")

    monkeypatch.setattr(analyzer_module, "find_suspicious_strings", _fail)
    analyzer.set_target(write_file("bot.bin", b"MALWARE_BYTES"))

    outcome = analyzer.analyze_heuristic()

    assert outcome == KnownMalicious(evilbot)
    assert outcome.definition.title == "EvilBot"
    assert analyzer.level is AnalyzedLevel.HEURISTIC


def test_url_in_nul_separated_runs(write_file):
    analyzer = Analyzer(SignatureStore([]))
    content = b"\x00".join([b"some text", b"http://evil.example.com/payload", b"ok"])
    analyzer.set_target(write_file("dropper", content))

    assert analyzer.analyze_heuristic() == SuspiciousStrings(("http://evil.example.com/payload",))


def test_ipv4_run(analyzer, write_file):
    analyzer.set_target(write_file("cfg", b"192.168.1.1\x00hi\x00"))
    assert analyzer.analyze_heuristic() == SuspiciousStrings(("192.168.1.1",))


def test_clean_file(analyzer, write_file):
    analyzer.set_target(write_file("notes.txt", b"hello world\nnothing to see\n"))

    assert analyzer.analyze_heuristic() == NoFinding()
    assert analyzer.level is AnalyzedLevel.HEURISTIC
    assert analyzer.file_format is BinaryFormat.UNKNOWN
    assert len(analyzer.sha256) == 64


def test_missing_file_is_format_unknown(analyzer, tmp_path):
    analyzer.set_target(tmp_path / "gone")
    with pytest.raises(FormatUnknownError):
        analyzer.analyze_heuristic()
    assert analyzer.level is AnalyzedLevel.NONE
    assert analyzer.sha256 == ""


def test_directory_is_format_unknown(analyzer, tmp_path):
    analyzer.set_target(tmp_path)
    with pytest.raises(FormatUnknownError):
        analyzer.analyze_heuristic()
    assert analyzer.level is AnalyzedLevel.NONE


def test_read_failure_after_sniffing(analyzer, tmp_path, monkeypatch):
    monkeypatch.setattr(analyzer_module, "sniff_format", lambda path: BinaryFormat.ELF)
    analyzer.set_target(tmp_path / "vanished")
    with pytest.raises(ReadFailedError):
        analyzer.analyze_heuristic()
    assert analyzer.level is AnalyzedLevel.NONE
    assert analyzer.file_format is None


def test_heuristic_pass_is_repeatable(analyzer, write_file):
    analyzer.set_target(write_file("a", b"10.0.0.1\x00"))
    first = analyzer.analyze_heuristic()
    first_hash = analyzer.sha256
    second = analyzer.analyze_heuristic()

    assert first == second
    assert analyzer.sha256 == first_hash


def test_phase_without_target(analyzer):
    with pytest.raises(RuntimeError):
        analyzer.analyze_heuristic()
    with pytest.raises(RuntimeError):
        analyzer.analyze_static()


# ---------------------------------------------------------------------------
# set_target
# ---------------------------------------------------------------------------


def test_set_target_resets_after_heuristic(analyzer, write_file):
    analyzer.set_target(write_file("a", b"plain"))
    analyzer.analyze_heuristic()
    analyzer.set_target(write_file("b", b"plain"))

    assert analyzer.level is AnalyzedLevel.NONE
    assert analyzer.sha256 == ""
    assert analyzer.file_format is None


def test_set_target_resets_after_static(analyzer, write_file):
    path = write_file("vuln", vulnerable_elf())
    analyzer.set_target(path)
    analyzer.analyze_heuristic()
    analyzer.analyze_static()
    assert analyzer.level is AnalyzedLevel.STATIC

    analyzer.set_target(path)
    assert analyzer.level is AnalyzedLevel.NONE
    analyzer.set_target(path)
    assert analyzer.level is AnalyzedLevel.NONE


# ---------------------------------------------------------------------------
# static phase
# ---------------------------------------------------------------------------


def _heuristic_done(analyzer, path):
    analyzer.set_target(path)
    analyzer.analyze_heuristic()
    return analyzer


def test_static_rejects_non_elf(analyzer, write_file):
    _heuristic_done(analyzer, write_file("notes.txt", b"plain text"))

    with pytest.raises(UnsupportedFormatError):
        analyzer.analyze_static()
    assert analyzer.level is AnalyzedLevel.HEURISTIC


def test_static_before_heuristic_is_unsupported(analyzer, write_file):
    analyzer.set_target(write_file("vuln", vulnerable_elf()))
    with pytest.raises(UnsupportedFormatError):
        analyzer.analyze_static()
    assert analyzer.level is AnalyzedLevel.NONE


def test_vulnerable_scanf(analyzer, write_file):
    _heuristic_done(analyzer, write_file("vuln", vulnerable_elf()))
    assert analyzer.file_format is BinaryFormat.ELF

    outcome = analyzer.analyze_static()

    assert outcome == VulnerableScanfPattern((TEXT_ADDR + 19,))
    assert analyzer.level is AnalyzedLevel.STATIC


def test_bounded_format_is_clean_but_completes(analyzer, write_file):
    _heuristic_done(analyzer, write_file("safe", vulnerable_elf(b"%d\x00")))

    assert analyzer.analyze_static() == NoFinding()
    assert analyzer.level is AnalyzedLevel.STATIC


def test_heuristic_rerun_does_not_lower_level(analyzer, write_file):
    _heuristic_done(analyzer, write_file("vuln", vulnerable_elf()))
    analyzer.analyze_static()
    analyzer.analyze_heuristic()
    assert analyzer.level is AnalyzedLevel.STATIC


def test_missing_text_section_does_not_complete(analyzer, write_file):
    main = scanf_main(0, 0)
    image = build_elf(
        main,
        symbols=[("main", TEXT_ADDR, len(main)), ("__isoc99_scanf", TEXT_ADDR, 1)],
        text_name=".code",
    )
    _heuristic_done(analyzer, write_file("notext", image))

    assert analyzer.analyze_static() == NoFinding()
    assert analyzer.level is AnalyzedLevel.HEURISTIC


@pytest.mark.parametrize("symbols", [
    [("main", TEXT_ADDR, 8)],
    [("__isoc99_scanf", TEXT_ADDR, 8)],
    [("scanf", TEXT_ADDR, 4), ("main", TEXT_ADDR + 4, 4)],
    [],
])
def test_missing_symbols_do_not_complete(analyzer, write_file, symbols):
    image = build_elf(b"\x90" * 8, symbols=symbols)
    _heuristic_done(analyzer, write_file("nosym", image))

    assert analyzer.analyze_static() == NoFinding()
    assert analyzer.level is AnalyzedLevel.HEURISTIC


def test_corrupt_elf_is_malformed(analyzer, write_file):
    _heuristic_done(analyzer, write_file("bad", b"\x7fELF" + b"\xff" * 60))

    with pytest.raises(MalformedBinaryError):
        analyzer.analyze_static()
    assert analyzer.level is AnalyzedLevel.HEURISTIC


def test_main_extending_past_the_file_is_malformed(analyzer, write_file):
    image = build_elf(
        b"\x90" * 8,
        symbols=[("main", TEXT_ADDR, 0x10000), ("__isoc99_scanf", TEXT_ADDR, 1)],
    )
    _heuristic_done(analyzer, write_file("huge", image))

    with pytest.raises(MalformedBinaryError):
        analyzer.analyze_static()
    assert analyzer.level is AnalyzedLevel.HEURISTIC


def _unseekable_shstrtab() -> bytes:
    # .shstrtab is the last header; its offset is past what a seek accepts
    return with_section_offset(vulnerable_elf(), 5, 0xFFFFFFFFFFFFFF00)


def test_out_of_range_section_offset_is_malformed(analyzer, write_file):
    _heuristic_done(analyzer, write_file("farout", _unseekable_shstrtab()))

    with pytest.raises(MalformedBinaryError):
        analyzer.analyze_static()
    assert analyzer.level is AnalyzedLevel.HEURISTIC
