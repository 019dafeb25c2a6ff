"""Reading HLTAS scripts.

Parsing is a single fail-fast pass: version line, property block, then the
frames block. The first error aborts with the physical line it occurred on.
"""
from __future__ import annotations

import logging
import warnings
from pathlib import Path

from . import protocol as P
from .errors import ErrorCode, HLTASError
from .tokens import DIGITS, parse_float, parse_int64, parse_uint, read_number, split_first_word, strip_comment
from .types import (
    ActionKeys,
    Autofunc,
    AvgVelocityYaw,
    Button,
    Buttons,
    Change,
    ChangeTarget,
    CountValue,
    DIRECTIONLESS,
    Frame,
    FrameBulk,
    LgagstMinSpeed,
    Line,
    LookAt,
    MovementKeys,
    PointValue,
    Reset,
    Save,
    Script,
    SharedSeed,
    StrafeButtons,
    StrafeDir,
    StrafeSettings,
    StrafeType,
    Strafing,
    StrafingAlgorithm,
    TargetYaw,
    TargetYawOverride,
    VelocityYaw,
    VelocityYawLocking,
    YawConstraint,
    YawRange,
    YawSpeedValue,
    YawValue,
    check_leave_ground,
)

logger = logging.getLogger(__name__)


class YawRequirement:
    """Tracks strafing continuity between consecutive frame bulks.

    The first bulk of a new strafing run must state its directional value,
    unless the direction steers on its own (left, right, best).
    """

    def __init__(self) -> None:
        self.previous_dir: StrafeDir | None = None

    def advance(self, strafe: StrafeSettings | None) -> bool:
        if strafe is None:
            self.previous_dir = None
            return False
        required = strafe.dir != self.previous_dir and strafe.needs_value
        self.previous_dir = strafe.dir
        return required


# ---------------------------------------------------------------------------
# Frame bulk decoder
# ---------------------------------------------------------------------------

def _fail() -> HLTASError:
    return HLTASError(ErrorCode.FAILFRAME)


class _AutofuncCursor:
    """Walks the fixed-position codes of the autofuncs field."""

    def __init__(self, text: str, pos: int):
        self.text = text
        self.pos = pos

    def take(self, code: str, variant_code: str | None = None) -> Autofunc | None:
        if self.pos >= len(self.text):
            raise _fail()
        c = self.text[self.pos]
        self.pos += 1
        if c == P.EMPTY_CODE:
            return None
        if c != code and c != variant_code:
            raise _fail()
        times, self.pos = read_number(self.text, self.pos)
        return Autofunc(times, variant=c == variant_code)


def _decode_strafe(text: str, caps: P.Capabilities) -> StrafeSettings | None:
    if text.startswith(P.NO_STRAFE_CODE):
        return None
    if text[0] != P.STRAFE_CODE or not (text[1] in DIGITS and text[2] in DIGITS):
        raise _fail()
    type_code, dir_code = int(text[1]), int(text[2])
    if type_code not in caps.strafe_types or dir_code not in caps.strafe_dirs:
        raise _fail()
    return StrafeSettings(StrafeType(type_code), StrafeDir(dir_code))


def _decode_autofuncs(text: str, caps: P.Capabilities) -> tuple[StrafeSettings | None, dict[str, Autofunc | None]]:
    if len(text) < P.AUTOFUNCS_MIN_LEN:
        raise _fail()
    strafe = _decode_strafe(text, caps)

    cursor = _AutofuncCursor(text, len(P.NO_STRAFE_CODE))
    funcs: dict[str, Autofunc | None] = {}
    for name, code, variant_code in P.AUTOFUNC_CODES:
        funcs[name] = cursor.take(code, variant_code)
        if name == "jumpbug":
            check_leave_ground(funcs["lgagst"], funcs["autojump"], funcs["ducktap"])

    if cursor.pos < len(text):
        warnings.warn(f"ignoring trailing characters {text[cursor.pos:]!r} in autofuncs field {text!r}")
    return strafe, funcs


def _decode_keys(text: str, codes: str) -> list[bool]:
    if len(text) != P.KEYS_FIELD_LEN:
        raise _fail()
    keys = []
    for c, code in zip(text, codes):
        if c == code:
            keys.append(True)
        elif c == P.EMPTY_CODE:
            keys.append(False)
        else:
            raise _fail()
    return keys


def _decode_target(text: str, strafe: StrafeSettings | None, yaw_required: bool):
    if strafe is not None and strafe.type == StrafeType.CONSTYAWSPEED:
        if text == P.EMPTY_CODE:
            raise HLTASError(ErrorCode.NO_YAWSPEED)
        return YawSpeedValue(parse_float(text))

    if text == P.EMPTY_CODE:
        if yaw_required:
            raise HLTASError(ErrorCode.NOYAW)
        return None

    if strafe is None:
        return YawValue(parse_float(text))
    if strafe.dir in DIRECTIONLESS:
        raise _fail()
    if strafe.dir == StrafeDir.POINT:
        parts = text.split()
        if len(parts) != 2:
            raise _fail()
        return PointValue(parse_float(parts[0]), parse_float(parts[1]))
    if strafe.dir in (StrafeDir.LEFT_RIGHT, StrafeDir.RIGHT_LEFT):
        return CountValue(parse_uint(text))
    return YawValue(parse_float(text))


def decode_frame_bulk(text: str, yaw_required: bool = False, version: int = P.MAX_SUPPORTED_VERSION) -> FrameBulk:
    """Decode one pipe-delimited movement line.

    ``yaw_required`` comes from :class:`YawRequirement` and decides whether an
    empty directional field is an error. Raises :class:`HLTASError` for
    semantic violations and ``ValueError`` for malformed numbers.
    """
    caps = P.capabilities(version)
    fields = text.split(P.FIELD_SEPARATOR)
    if len(fields) < P.BULK_FIELD_COUNT:
        raise _fail()
    commands = P.FIELD_SEPARATOR.join(fields[P.BULK_FIELD_COUNT:])
    fields = [f.strip() for f in fields[:P.BULK_FIELD_COUNT]]
    if not all(fields):
        raise _fail()

    strafe, funcs = _decode_autofuncs(fields[0], caps)
    movement = MovementKeys(*_decode_keys(fields[1], P.MOVEMENT_KEY_CODES))
    actions = ActionKeys(*_decode_keys(fields[2], P.ACTION_KEY_CODES))

    frame_time = fields[3]
    target = _decode_target(fields[4], strafe, yaw_required)
    pitch = None if fields[5] == P.EMPTY_CODE else parse_float(fields[5])
    repeats = 1 if fields[6] == P.EMPTY_CODE else parse_uint(fields[6])

    return FrameBulk(
        frame_time=frame_time,
        repeats=repeats or 1,
        strafe=strafe,
        target=target,
        pitch=pitch,
        movement=movement,
        actions=actions,
        commands=commands,
        **funcs,
    )


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------

def _required(value: str, code: ErrorCode) -> str:
    if not value:
        raise HLTASError(code)
    return value


def _read_buttons(value: str) -> Buttons:
    if not value:
        return Buttons()
    parts = value.split()
    if len(parts) != P.BUTTON_SLOTS or not all(len(p) == 1 and p in DIGITS and int(p) <= P.BUTTON_CODE_MAX for p in parts):
        raise HLTASError(ErrorCode.NOBUTTONS)
    return Buttons(StrafeButtons(*(Button(int(p)) for p in parts)))


def _read_tolerance(value: str) -> float:
    if not value:
        return 0.0
    if not value.startswith(P.TOLERANCE_PREFIX):
        raise HLTASError(ErrorCode.NO_PM_IN_TOLERANCE)
    return parse_float(value[len(P.TOLERANCE_PREFIX):])


_VELOCITY_CONSTRAINTS = {
    "velocity": VelocityYaw,
    "velocity_avg": AvgVelocityYaw,
    "velocity_lock": VelocityYawLocking,
}


def _read_constraints(value: str):
    if not value:
        raise HLTASError(ErrorCode.MISSING_CONSTRAINTS)
    word, rest = split_first_word(value)

    if word in _VELOCITY_CONSTRAINTS:
        return _VELOCITY_CONSTRAINTS[word](_read_tolerance(rest))

    if word == "from":
        parts = rest.split()
        if not parts:
            raise HLTASError(ErrorCode.MISSING_ALGORITHM_FROMTO_PARAMETERS)
        if len(parts) < 2 or parts[1] != "to":
            raise HLTASError(ErrorCode.NO_TO_IN_FROMTO_ALGORITHM)
        if len(parts) != 3:
            raise _fail()
        return YawRange(parse_float(parts[0]), parse_float(parts[2]))

    if word == "look_at":
        parts = rest.split()
        entity = 0
        if parts[:1] == ["entity"]:
            if len(parts) < 2:
                raise _fail()
            entity = parse_uint(parts[1])
            if entity == 0:
                raise _fail()
            parts = parts[2:]
        if len(parts) != 3:
            raise _fail()
        x, y, z = (parse_float(p) for p in parts)
        return LookAt(x, y, z, entity=entity)

    return YawConstraint(parse_float(word), _read_tolerance(rest))


def _read_change(value: str) -> Change:
    parts = value.split()
    if len(parts) != 6 or parts[1] != "to" or parts[3] != "over" or parts[5] != "s":
        raise _fail()
    try:
        target = ChangeTarget(parts[0])
    except ValueError:
        raise _fail() from None
    return Change(target, parse_float(parts[2]), parse_float(parts[4]))


def _read_target_yaw_override(value: str) -> TargetYawOverride:
    parts = value.split()
    if not parts:
        raise _fail()
    return TargetYawOverride(tuple(parse_float(p) for p in parts))


def _read_strafing(value: str) -> Strafing:
    try:
        return Strafing(StrafingAlgorithm(value))
    except ValueError:
        raise HLTASError(ErrorCode.INVALID_ALGORITHM) from None


_DIRECTIVES = {
    P.SAVE: lambda v: Save(_required(v, ErrorCode.NOSAVENAME)),
    P.SEED: lambda v: SharedSeed(parse_uint(_required(v, ErrorCode.NOSEED))),
    P.BUTTONS: _read_buttons,
    P.LGAGST_MIN_SPEED: lambda v: LgagstMinSpeed(parse_float(_required(v, ErrorCode.NOLGAGSTMINSPEED))),
    P.RESET: lambda v: Reset(parse_int64(_required(v, ErrorCode.NORESETSEED))),
    P.STRAFING: _read_strafing,
    P.TARGET_YAW: lambda v: TargetYaw(_read_constraints(v)),
    P.CHANGE: _read_change,
    P.TARGET_YAW_OVERRIDE: _read_target_yaw_override,
}


def read_line(text: str, yaw: YawRequirement, version: int = P.MAX_SUPPORTED_VERSION) -> Line:
    """Classify one non-comment frames line and decode it."""
    caps = P.capabilities(version)
    word, value = split_first_word(text)
    if word in caps.directives:
        return _DIRECTIVES[word](value)

    # The yaw state only moves on bulks, so peek at the strafe code first.
    if len(text) < len(P.NO_STRAFE_CODE):
        raise _fail()
    strafe = _decode_strafe(text, caps)
    return decode_frame_bulk(text, yaw_required=yaw.advance(strafe), version=version)


# ---------------------------------------------------------------------------
# Document parser
# ---------------------------------------------------------------------------

def _read_version(line: str | None) -> int:
    if line is None:
        raise HLTASError(ErrorCode.FAILVER, 1)
    word, value = split_first_word(strip_comment(line, P.COMMENT_PREFIX))
    if word != P.VERSION_KEYWORD:
        raise HLTASError(ErrorCode.FAILVER, 1, line)
    try:
        version = parse_uint(value, maximum=2**31 - 1)
    except ValueError:
        raise HLTASError(ErrorCode.FAILVER, 1, line) from None
    if version == 0:
        raise HLTASError(ErrorCode.FAILVER, 1, line)
    if version > P.MAX_SUPPORTED_VERSION or version not in P.CAPABILITIES:
        raise HLTASError(ErrorCode.NOTSUPPORTED, 1, line)
    return version


def parse(text: str) -> Script:
    """Parse a whole script. Raises :class:`HLTASError` on the first problem."""
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    version = _read_version(lines[0] if text else None)
    script = Script(version=P.MAX_SUPPORTED_VERSION)

    rest = iter(enumerate(lines[1:], start=2))
    for number, line in rest:
        content = strip_comment(line, P.COMMENT_PREFIX)
        if not content:
            continue
        if content == P.FRAMES_KEYWORD:
            break
        key, value = split_first_word(content)
        script.properties[key] = value

    yaw = YawRequirement()
    comments = ""
    for number, line in rest:
        content = line.lstrip()
        if not content.strip():
            continue
        if content.startswith(P.COMMENT_PREFIX):
            comments += content[len(P.COMMENT_PREFIX):] + "\n"
            continue
        try:
            payload = read_line(content, yaw, version)
        except HLTASError as exc:
            raise exc.at_line(number, line) from None
        except ValueError as exc:
            raise HLTASError(ErrorCode.FAILFRAME, number, line) from exc
        script.frames.append(Frame(payload, comments))
        comments = ""

    script.trailing_comments = comments
    logger.debug(
        "parsed version %d script: %d properties, %d frames",
        version,
        len(script.properties),
        len(script.frames),
    )
    return script


def read_file(path: str | Path) -> Script:
    """Read and parse a script file."""
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise HLTASError(ErrorCode.FAILOPEN) from exc
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        line_number = raw.count(b"\n", 0, exc.start) + 1
        raise HLTASError(ErrorCode.FAILLINE, line_number) from exc
    return parse(text)
