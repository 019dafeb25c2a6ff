from pathlib import Path

import pytest

from hltas_core import ERRORS, Document, ErrorCode, HLTASError, read_file

ERROR_DATA = Path(__file__).resolve().parent / "data" / "error"


@pytest.mark.parametrize(
    "name, code, line",
    [
        ("no-version", ErrorCode.FAILVER, 1),
        ("zero-version", ErrorCode.FAILVER, 1),
        ("too-high-version", ErrorCode.NOTSUPPORTED, 1),
        ("no-save-name", ErrorCode.NOSAVENAME, 3),
        ("too-few-dashes-field-0", ErrorCode.FAILFRAME, 3),
        ("no-seed", ErrorCode.NOSEED, 3),
        ("no-yaw", ErrorCode.NOYAW, 6),
        ("no-buttons", ErrorCode.NOBUTTONS, 3),
        ("both-j-d", ErrorCode.BOTHAJDT, 3),
        ("no-lgagst-action", ErrorCode.NOLGAGSTACTION, 3),
        ("no-lgagst-min-speed", ErrorCode.NOLGAGSTMINSPEED, 3),
        ("lgagst-action-times", ErrorCode.LGAGSTACTIONTIMES, 3),
        ("no-reset-seed", ErrorCode.NORESETSEED, 3),
        ("invalid-algorithm", ErrorCode.INVALID_ALGORITHM, 3),
        ("no-constraints", ErrorCode.MISSING_CONSTRAINTS, 3),
        ("no-pm-in-tolerance", ErrorCode.NO_PM_IN_TOLERANCE, 3),
        ("no-from-to-parameters", ErrorCode.MISSING_ALGORITHM_FROMTO_PARAMETERS, 3),
        ("no-to-in-from-to", ErrorCode.NO_TO_IN_FROMTO_ALGORITHM, 3),
        ("no-yawspeed", ErrorCode.NO_YAWSPEED, 3),
        ("unsupported-yawspeed-dir", ErrorCode.UNSUPPORTED_YAWSPEED_DIR, 3),
        ("bad-change", ErrorCode.FAILFRAME, 3),
    ],
)
def test_error_files(name, code, line):
    with pytest.raises(HLTASError) as exc:
        read_file(ERROR_DATA / f"{name}.hltas")
    assert exc.value.code == code
    assert exc.value.line_number == line


def test_missing_file_fails_open():
    with pytest.raises(HLTASError) as exc:
        Document.from_path(ERROR_DATA / "does-not-exist.hltas")
    assert exc.value.code == ErrorCode.FAILOPEN
    assert exc.value.line_number == 0


def test_undecodable_line(tmp_path):
    path = tmp_path / "binary.hltas"
    path.write_bytes(b"version 1\nframes\n\xff\xfe\n")
    with pytest.raises(HLTASError) as exc:
        read_file(path)
    assert exc.value.code == ErrorCode.FAILLINE
    assert exc.value.line_number == 3


def test_empty_input_fails_version():
    with pytest.raises(HLTASError) as exc:
        Document.from_string("")
    assert exc.value.code == ErrorCode.FAILVER
    assert exc.value.line_number == 1


def test_every_code_has_a_message():
    assert set(ERRORS) == set(ErrorCode)


def test_error_codes_match_exit_codes():
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.FAILOPEN) == 1
    assert int(ErrorCode.NORESETSEED) == 15
    assert int(ErrorCode.UNSUPPORTED_YAWSPEED_DIR) == 22


def test_render_shows_source_line():
    with pytest.raises(HLTASError) as exc:
        read_file(ERROR_DATA / "no-yaw.hltas")
    text = exc.value.render()
    assert text.startswith("NOYAW: ")
    assert "(line 6)" in text
    assert text.endswith("6 | s03-------|------|------|0.001|-|-|1")
    assert str(exc.value) == text


def test_at_line_keeps_code():
    err = HLTASError(ErrorCode.NOSEED).at_line(12, "seed")
    assert err.code == ErrorCode.NOSEED
    assert err.line_number == 12
    assert err.description.message == ERRORS[ErrorCode.NOSEED]
