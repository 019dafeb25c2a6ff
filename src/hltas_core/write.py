"""Writing HLTAS scripts.

Output is canonical: floats use ten significant digits, limited autofuncs
carry their times suffix, and an empty commands field is omitted.
"""
from __future__ import annotations

import io
import logging
from dataclasses import astuple
from typing import TextIO

from . import protocol as P
from .errors import ErrorCode, HLTASError
from .types import (
    AvgVelocityYaw,
    Buttons,
    Change,
    CountValue,
    FrameBulk,
    LgagstMinSpeed,
    Line,
    LookAt,
    PointValue,
    Reset,
    Save,
    Script,
    SharedSeed,
    Strafing,
    TargetYaw,
    TargetYawOverride,
    VelocityYaw,
    VelocityYawLocking,
    YawConstraint,
    YawRange,
    YawSpeedValue,
    YawValue,
)

logger = logging.getLogger(__name__)


def format_float(value: float) -> str:
    return P.FLOAT_FORMAT % value


# ---------------------------------------------------------------------------
# Frame bulk encoder
# ---------------------------------------------------------------------------

def encode_autofuncs(bulk: FrameBulk) -> str:
    if bulk.strafe is None:
        out = P.NO_STRAFE_CODE
    else:
        out = f"{P.STRAFE_CODE}{int(bulk.strafe.type)}{int(bulk.strafe.dir)}"
    for name, code, variant_code in P.AUTOFUNC_CODES:
        func = getattr(bulk, name)
        if func is None:
            out += P.EMPTY_CODE
            continue
        out += variant_code if func.variant and variant_code else code
        if func.times:
            out += str(func.times)
    return out


def _encode_keys(keys, codes: str) -> str:
    return "".join(code if on else P.EMPTY_CODE for on, code in zip(astuple(keys), codes))


def encode_target(target) -> str:
    if target is None:
        return P.EMPTY_CODE
    if isinstance(target, YawValue):
        return format_float(target.yaw)
    if isinstance(target, PointValue):
        return f"{format_float(target.x)} {format_float(target.y)}"
    if isinstance(target, CountValue):
        return str(target.count)
    if isinstance(target, YawSpeedValue):
        return format_float(target.yawspeed)
    raise TypeError(f"unknown directional value {target!r}")


def encode_frame_bulk(bulk: FrameBulk) -> str:
    fields = [
        encode_autofuncs(bulk),
        _encode_keys(bulk.movement, P.MOVEMENT_KEY_CODES),
        _encode_keys(bulk.actions, P.ACTION_KEY_CODES),
        bulk.frame_time,
        encode_target(bulk.target),
        P.EMPTY_CODE if bulk.pitch is None else format_float(bulk.pitch),
        str(bulk.repeats),
    ]
    if bulk.commands:
        fields.append(bulk.commands)
    return P.FIELD_SEPARATOR.join(fields)


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------

def _tolerance(value: float) -> str:
    return f" {P.TOLERANCE_PREFIX}{format_float(value)}" if value else ""


def encode_constraints(constraints) -> str:
    if isinstance(constraints, VelocityYaw):
        return "velocity" + _tolerance(constraints.tolerance)
    if isinstance(constraints, AvgVelocityYaw):
        return "velocity_avg" + _tolerance(constraints.tolerance)
    if isinstance(constraints, VelocityYawLocking):
        return "velocity_lock" + _tolerance(constraints.tolerance)
    if isinstance(constraints, YawConstraint):
        return format_float(constraints.yaw) + _tolerance(constraints.tolerance)
    if isinstance(constraints, YawRange):
        return f"from {format_float(constraints.lowest)} to {format_float(constraints.highest)}"
    if isinstance(constraints, LookAt):
        entity = f" entity {constraints.entity}" if constraints.entity else ""
        coords = " ".join(format_float(v) for v in (constraints.x, constraints.y, constraints.z))
        return f"look_at{entity} {coords}"
    raise TypeError(f"unknown constraints {constraints!r}")


def encode_line(line: Line) -> str:
    """Encode one frame payload (without its comments)."""
    if isinstance(line, FrameBulk):
        return encode_frame_bulk(line)
    if isinstance(line, Save):
        return f"{P.SAVE} {line.name}"
    if isinstance(line, SharedSeed):
        return f"{P.SEED} {line.seed}"
    if isinstance(line, Buttons):
        if line.buttons is None:
            return P.BUTTONS
        return " ".join([P.BUTTONS, *(str(int(b)) for b in line.buttons.as_tuple())])
    if isinstance(line, LgagstMinSpeed):
        return f"{P.LGAGST_MIN_SPEED} {format_float(line.speed)}"
    if isinstance(line, Reset):
        return f"{P.RESET} {line.non_shared_seed}"
    if isinstance(line, Strafing):
        return f"{P.STRAFING} {line.algorithm.value}"
    if isinstance(line, TargetYaw):
        return f"{P.TARGET_YAW} {encode_constraints(line.constraints)}"
    if isinstance(line, Change):
        return (
            f"{P.CHANGE} {line.target.value} to {format_float(line.final_value)}"
            f" over {format_float(line.over)} s"
        )
    if isinstance(line, TargetYawOverride):
        return " ".join([P.TARGET_YAW_OVERRIDE, *(format_float(y) for y in line.yaws)])
    raise TypeError(f"unknown frame line {line!r}")


def _comment_lines(comments: str) -> list[str]:
    return [P.COMMENT_PREFIX + c for c in comments.split("\n")[:-1]] if comments else []


# ---------------------------------------------------------------------------
# Document serializer
# ---------------------------------------------------------------------------

def iter_lines(script: Script):
    yield f"{P.VERSION_KEYWORD} {script.version}"
    for key, value in script.properties.items():
        yield f"{key} {value}" if value else key
    yield P.FRAMES_KEYWORD
    for frame in script.frames:
        yield from _comment_lines(frame.comments)
        yield encode_line(frame.line)
    yield from _comment_lines(script.trailing_comments)


def write_script(script: Script, fp: TextIO) -> None:
    """Serialize ``script`` into ``fp``.

    A failing write raises FAILWRITE pinned to the line being written.
    """
    count = 0
    for count, line in enumerate(iter_lines(script), start=1):
        try:
            fp.write(line + "\n")
        except OSError as exc:
            raise HLTASError(ErrorCode.FAILWRITE, count) from exc
    logger.debug("wrote %d lines (%d frames)", count, len(script.frames))


def dumps(script: Script) -> str:
    buf = io.StringIO()
    write_script(script, buf)
    return buf.getvalue()
