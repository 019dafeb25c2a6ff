"""HLTAS script format constants.

Single source of truth for keywords, field layout and the per-version
capability table. Reader and writer must remain synchronized.
"""
from __future__ import annotations

from dataclasses import dataclass

MAX_SUPPORTED_VERSION = 1

# Header and section keywords
VERSION_KEYWORD = "version"
FRAMES_KEYWORD = "frames"
COMMENT_PREFIX = "//"

# Directive keywords
SAVE = "save"
SEED = "seed"
BUTTONS = "buttons"
LGAGST_MIN_SPEED = "lgagstminspeed"
RESET = "reset"
STRAFING = "strafing"
TARGET_YAW = "target_yaw"
CHANGE = "change"
TARGET_YAW_OVERRIDE = "target_yaw_override"

# Frame bulk layout: [autofuncs | movement keys | action keys | frametime | yaw | pitch | repeats]
FIELD_SEPARATOR = "|"
BULK_FIELD_COUNT = 7
AUTOFUNCS_MIN_LEN = 10
KEYS_FIELD_LEN = 6
MOVEMENT_KEY_CODES = "flrbud"
ACTION_KEY_CODES = "jdu12r"
EMPTY_CODE = "-"
NO_STRAFE_CODE = "---"
STRAFE_CODE = "s"

# Autofunc codes in field order: (name, code, variant code)
AUTOFUNC_CODES = (
    ("lgagst", "l", "L"),
    ("autojump", "j", None),
    ("ducktap", "d", "D"),
    ("jumpbug", "b", None),
    ("dbc", "c", "C"),
    ("dbg", "g", None),
    ("dwj", "w", None),
)

# Buttons directive: four slots, each one of eight button codes
BUTTON_SLOTS = 4
BUTTON_CODE_MAX = 7

# Floating values are written with 10 significant digits
FLOAT_FORMAT = "%.10g"

# Tolerance prefix in target_yaw constraints
TOLERANCE_PREFIX = "+-"


@dataclass(frozen=True)
class Capabilities:
    """Grammar features available in one format version."""

    directives: frozenset[str]
    strafe_types: frozenset[int]
    strafe_dirs: frozenset[int]


CAPABILITIES: dict[int, Capabilities] = {
    1: Capabilities(
        directives=frozenset({
            SAVE,
            SEED,
            BUTTONS,
            LGAGST_MIN_SPEED,
            RESET,
            STRAFING,
            TARGET_YAW,
            CHANGE,
            TARGET_YAW_OVERRIDE,
        }),
        strafe_types=frozenset(range(5)),
        strafe_dirs=frozenset(range(8)),
    ),
}


def capabilities(version: int) -> Capabilities:
    """Return the capability set of a supported version."""
    return CAPABILITIES[version]
