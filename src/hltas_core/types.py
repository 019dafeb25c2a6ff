"""Frame model of an HLTAS script.

A script is an ordered list of ``Frame`` records. Each frame pairs one line
payload (a movement ``FrameBulk`` or one of the single-purpose directives) with
the comment block written above it.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Optional, Union

from .errors import ErrorCode, HLTASError
from .tokens import INT64_MAX, INT64_MIN, UINT32_MAX, starts_numeric


class StrafeType(IntEnum):
    MAXACCEL = 0
    MAXANGLE = 1
    MAXDECCEL = 2
    CONSTSPEED = 3
    CONSTYAWSPEED = 4


class StrafeDir(IntEnum):
    LEFT = 0
    RIGHT = 1
    BEST = 2
    YAW = 3
    POINT = 4
    LINE = 5
    LEFT_RIGHT = 6
    RIGHT_LEFT = 7


# Directions that steer on their own and take no directional value.
DIRECTIONLESS = frozenset({StrafeDir.LEFT, StrafeDir.RIGHT, StrafeDir.BEST})
YAWSPEED_DIRS = frozenset({StrafeDir.LEFT, StrafeDir.RIGHT})


class Button(IntEnum):
    FORWARD = 0
    FORWARD_LEFT = 1
    LEFT = 2
    BACK_LEFT = 3
    BACK = 4
    BACK_RIGHT = 5
    RIGHT = 6
    FORWARD_RIGHT = 7


class StrafingAlgorithm(Enum):
    YAW = "yaw"
    VECTORIAL = "vectorial"


class ChangeTarget(Enum):
    YAW = "yaw"
    PITCH = "pitch"
    TARGET_YAW = "target_yaw"
    TARGET_YAW_OFFSET = "target_yaw_offset"


@dataclass(frozen=True)
class StrafeSettings:
    type: StrafeType
    dir: StrafeDir

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", StrafeType(self.type))
        object.__setattr__(self, "dir", StrafeDir(self.dir))
        if self.type == StrafeType.CONSTYAWSPEED and self.dir not in YAWSPEED_DIRS:
            raise HLTASError(ErrorCode.UNSUPPORTED_YAWSPEED_DIR)

    @property
    def needs_value(self) -> bool:
        """True when a new run in this direction must state its directional value."""
        return self.type == StrafeType.CONSTYAWSPEED or self.dir not in DIRECTIONLESS


# Directional value union. Exactly one member is meaningful for a given bulk.

@dataclass(frozen=True)
class YawValue:
    yaw: float


@dataclass(frozen=True)
class PointValue:
    x: float
    y: float


@dataclass(frozen=True)
class CountValue:
    count: int

    def __post_init__(self) -> None:
        if not 1 <= self.count <= UINT32_MAX:
            raise ValueError(f"alternation count must be positive, got {self.count}")


@dataclass(frozen=True)
class YawSpeedValue:
    yawspeed: float


DirectionalValue = Union[YawValue, PointValue, CountValue, YawSpeedValue]


def target_kind(strafe: Optional[StrafeSettings]) -> Optional[type]:
    """Return the directional value class admitted by the strafe settings.

    ``None`` means the field must stay empty.
    """
    if strafe is None:
        return YawValue
    if strafe.type == StrafeType.CONSTYAWSPEED:
        return YawSpeedValue
    if strafe.dir in (StrafeDir.YAW, StrafeDir.LINE):
        return YawValue
    if strafe.dir == StrafeDir.POINT:
        return PointValue
    if strafe.dir in (StrafeDir.LEFT_RIGHT, StrafeDir.RIGHT_LEFT):
        return CountValue
    return None


@dataclass(frozen=True)
class Autofunc:
    """An enabled automatic action.

    ``times == 0`` keeps it on until a later bulk toggles it off; otherwise it
    runs that many times. ``variant`` selects the uppercase code: full maxspeed
    for lgagst, 0 ms for ducktap, ceilings for duck-before-collision.
    """

    times: int = 0
    variant: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.times <= UINT32_MAX:
            raise ValueError(f"times must be a 32-bit unsigned value, got {self.times}")

    @property
    def limited(self) -> bool:
        return self.times > 0


AUTOFUNCS = ("lgagst", "autojump", "ducktap", "jumpbug", "dbc", "dbg", "dwj")
VARIANT_AUTOFUNCS = frozenset({"lgagst", "ducktap", "dbc"})


def check_leave_ground(
    lgagst: Optional[Autofunc],
    autojump: Optional[Autofunc],
    ducktap: Optional[Autofunc],
) -> None:
    if autojump is not None and ducktap is not None:
        raise HLTASError(ErrorCode.BOTHAJDT)
    if lgagst is not None and autojump is None and ducktap is None:
        raise HLTASError(ErrorCode.NOLGAGSTACTION)
    if lgagst is not None and any(f is not None and f.limited for f in (autojump, ducktap)):
        raise HLTASError(ErrorCode.LGAGSTACTIONTIMES)


@dataclass(frozen=True)
class MovementKeys:
    forward: bool = False
    left: bool = False
    right: bool = False
    back: bool = False
    up: bool = False
    down: bool = False


@dataclass(frozen=True)
class ActionKeys:
    jump: bool = False
    duck: bool = False
    use: bool = False
    attack1: bool = False
    attack2: bool = False
    reload: bool = False


@dataclass(frozen=True)
class FrameBulk:
    """A movement line: ``repeats`` simulation frames sharing the same inputs."""

    frame_time: str
    repeats: int = 1
    strafe: Optional[StrafeSettings] = None
    target: Optional[DirectionalValue] = None
    pitch: Optional[float] = None
    lgagst: Optional[Autofunc] = None
    autojump: Optional[Autofunc] = None
    ducktap: Optional[Autofunc] = None
    jumpbug: Optional[Autofunc] = None
    dbc: Optional[Autofunc] = None
    dbg: Optional[Autofunc] = None
    dwj: Optional[Autofunc] = None
    movement: MovementKeys = field(default_factory=MovementKeys)
    actions: ActionKeys = field(default_factory=ActionKeys)
    commands: str = ""

    def __post_init__(self) -> None:
        if not starts_numeric(self.frame_time) or any(c.isspace() or c == "|" for c in self.frame_time):
            raise ValueError(f"invalid frame time {self.frame_time!r}")
        if not 1 <= self.repeats <= UINT32_MAX:
            raise ValueError(f"repeats must be at least 1, got {self.repeats}")
        if "\n" in self.commands or "\r" in self.commands:
            raise ValueError("commands must fit on one line")

        kind = self.target_kind()
        if self.target is None:
            if kind is YawSpeedValue:
                raise HLTASError(ErrorCode.NO_YAWSPEED)
        elif kind is None or not isinstance(self.target, kind):
            expected = kind.__name__ if kind else "no value"
            raise ValueError(
                f"{type(self.target).__name__} does not match the strafe settings (expected {expected})"
            )

        for name in AUTOFUNCS:
            func = getattr(self, name)
            if func is not None and func.variant and name not in VARIANT_AUTOFUNCS:
                raise ValueError(f"{name} has no variant mode")

        check_leave_ground(self.lgagst, self.autojump, self.ducktap)

    def target_kind(self) -> Optional[type]:
        return target_kind(self.strafe)

    def _value(self, kind: type) -> DirectionalValue:
        if not isinstance(self.target, kind):
            raise TypeError(f"this frame bulk has no {kind.__name__} (it has {self.target!r})")
        return self.target

    @property
    def yaw(self) -> float:
        return self._value(YawValue).yaw

    @property
    def point(self) -> tuple[float, float]:
        value = self._value(PointValue)
        return value.x, value.y

    @property
    def count(self) -> int:
        return self._value(CountValue).count

    @property
    def yawspeed(self) -> float:
        return self._value(YawSpeedValue).yawspeed

    @property
    def lgagst_full_maxspeed(self) -> bool:
        return self.lgagst is not None and self.lgagst.variant

    @property
    def ducktap_0ms(self) -> bool:
        return self.ducktap is not None and self.ducktap.variant

    @property
    def dbc_ceilings(self) -> bool:
        return self.dbc is not None and self.dbc.variant

    def with_autofunc(self, name: str, times: int = 0, variant: bool = False) -> "FrameBulk":
        """Return a copy with ``name`` enabled for ``times`` executions (0 = unlimited)."""
        if name not in AUTOFUNCS:
            raise ValueError(f"unknown autofunc {name!r}")
        return replace(self, **{name: Autofunc(times, variant)})

    def without_autofunc(self, name: str) -> "FrameBulk":
        if name not in AUTOFUNCS:
            raise ValueError(f"unknown autofunc {name!r}")
        return replace(self, **{name: None})

    def with_strafe(
        self,
        strafe: Optional[StrafeSettings],
        target: Optional[DirectionalValue] = None,
    ) -> "FrameBulk":
        return replace(self, strafe=strafe, target=target)

    def with_repeats(self, repeats: int) -> "FrameBulk":
        return replace(self, repeats=repeats)

    def reset_autofuncs(self) -> "FrameBulk":
        """Return the bulk as it stands after its first execution.

        Autofuncs with a limited number of times are switched off; a limited
        lgagst takes its autojump or ducktap action with it.
        """
        changes: dict[str, Optional[Autofunc]] = {}
        if self.lgagst is not None and self.lgagst.limited:
            changes.update(lgagst=None, autojump=None, ducktap=None)
        for name in AUTOFUNCS[1:]:
            func = changes.get(name, getattr(self, name))
            if func is not None and func.limited:
                changes[name] = None
        if not changes:
            return self
        return replace(self, **changes)


@dataclass(frozen=True)
class Save:
    name: str

    def __post_init__(self) -> None:
        if not self.name or self.name != self.name.strip() or "\n" in self.name:
            raise ValueError(f"invalid save name {self.name!r}")


@dataclass(frozen=True)
class SharedSeed:
    seed: int

    def __post_init__(self) -> None:
        if not 0 <= self.seed <= UINT32_MAX:
            raise ValueError(f"shared seed must be a 32-bit unsigned value, got {self.seed}")


@dataclass(frozen=True)
class StrafeButtons:
    air_left: Button = Button.FORWARD
    air_right: Button = Button.FORWARD
    ground_left: Button = Button.FORWARD
    ground_right: Button = Button.FORWARD

    def __post_init__(self) -> None:
        for name in ("air_left", "air_right", "ground_left", "ground_right"):
            object.__setattr__(self, name, Button(getattr(self, name)))

    def as_tuple(self) -> tuple[Button, Button, Button, Button]:
        return self.air_left, self.air_right, self.ground_left, self.ground_right


@dataclass(frozen=True)
class Buttons:
    """Set the strafing buttons, or reset them when ``buttons`` is None."""

    buttons: Optional[StrafeButtons] = None

    @property
    def is_reset(self) -> bool:
        return self.buttons is None


@dataclass(frozen=True)
class LgagstMinSpeed:
    speed: float


@dataclass(frozen=True)
class Reset:
    non_shared_seed: int

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.non_shared_seed <= INT64_MAX:
            raise ValueError(f"reset seed must be a 64-bit value, got {self.non_shared_seed}")


@dataclass(frozen=True)
class Strafing:
    algorithm: StrafingAlgorithm


# Vectorial strafing constraints. Tolerances are in degrees; 0 means exact.

@dataclass(frozen=True)
class VelocityYaw:
    tolerance: float = 0.0


@dataclass(frozen=True)
class AvgVelocityYaw:
    tolerance: float = 0.0


@dataclass(frozen=True)
class VelocityYawLocking:
    tolerance: float = 0.0


@dataclass(frozen=True)
class YawConstraint:
    yaw: float
    tolerance: float = 0.0


@dataclass(frozen=True)
class YawRange:
    """Inclusive yaw range in degrees, mod 360. Order matters."""

    lowest: float
    highest: float


@dataclass(frozen=True)
class LookAt:
    """Look at a point, or at an offset from entity ``entity`` when it is non-zero."""

    x: float
    y: float
    z: float
    entity: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.entity <= UINT32_MAX:
            raise ValueError(f"invalid entity index {self.entity}")


Constraints = Union[VelocityYaw, AvgVelocityYaw, VelocityYawLocking, YawConstraint, YawRange, LookAt]


@dataclass(frozen=True)
class TargetYaw:
    constraints: Constraints


@dataclass(frozen=True)
class Change:
    """Smoothly change ``target`` to ``final_value`` over ``over`` seconds."""

    target: ChangeTarget
    final_value: float
    over: float


@dataclass(frozen=True)
class TargetYawOverride:
    yaws: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "yaws", tuple(self.yaws))
        if not self.yaws:
            raise ValueError("target yaw override needs at least one yaw")


Line = Union[
    FrameBulk,
    Save,
    SharedSeed,
    Buttons,
    LgagstMinSpeed,
    Reset,
    Strafing,
    TargetYaw,
    Change,
    TargetYawOverride,
]


@dataclass(frozen=True)
class Frame:
    """One entry of the frames section together with the comments above it.

    ``comments`` holds one newline-terminated entry per ``//`` line, without
    the ``//`` prefix.
    """

    line: Line
    comments: str = ""

    def __post_init__(self) -> None:
        if self.comments and not self.comments.endswith("\n"):
            object.__setattr__(self, "comments", self.comments + "\n")

    @property
    def is_movement(self) -> bool:
        return isinstance(self.line, FrameBulk)

    @property
    def bulk(self) -> FrameBulk:
        if not isinstance(self.line, FrameBulk):
            raise TypeError(f"frame is a {type(self.line).__name__}, not a frame bulk")
        return self.line


@dataclass
class Script:
    """Complete content of a script, as produced by the reader and consumed by the writer."""

    version: int
    properties: dict[str, str] = field(default_factory=dict)
    frames: list[Frame] = field(default_factory=list)
    trailing_comments: str = ""
