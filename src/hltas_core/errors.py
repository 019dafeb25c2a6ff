"""Error taxonomy for reading and writing HLTAS scripts."""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ErrorCode(IntEnum):
    OK = 0
    FAILOPEN = 1
    FAILVER = 2
    NOTSUPPORTED = 3
    FAILLINE = 4
    NOSAVENAME = 5
    FAILFRAME = 6
    FAILWRITE = 7
    NOSEED = 8
    NOYAW = 9
    NOBUTTONS = 10
    BOTHAJDT = 11
    NOLGAGSTACTION = 12
    NOLGAGSTMINSPEED = 13
    LGAGSTACTIONTIMES = 14
    NORESETSEED = 15
    INVALID_ALGORITHM = 16
    MISSING_CONSTRAINTS = 17
    NO_PM_IN_TOLERANCE = 18
    MISSING_ALGORITHM_FROMTO_PARAMETERS = 19
    NO_TO_IN_FROMTO_ALGORITHM = 20
    NO_YAWSPEED = 21
    UNSUPPORTED_YAWSPEED_DIR = 22


ERRORS = {
    ErrorCode.OK: "No error.",
    ErrorCode.FAILOPEN: "Failed to open the file.",
    ErrorCode.FAILVER: "Failed to read the version.",
    ErrorCode.NOTSUPPORTED: "This version is not supported.",
    ErrorCode.FAILLINE: "Failed to read line.",
    ErrorCode.NOSAVENAME: "Save name is required.",
    ErrorCode.FAILFRAME: "Failed parsing the frame data.",
    ErrorCode.FAILWRITE: "Failed to write data to the file.",
    ErrorCode.NOSEED: "Seeds are required.",
    ErrorCode.NOYAW: "The yaw field needs a value on this frame.",
    ErrorCode.NOBUTTONS: "Buttons are required.",
    ErrorCode.BOTHAJDT: "Cannot have both Autojump and Ducktap enabled on the same frame.",
    ErrorCode.NOLGAGSTACTION: "Lgagst requires either Autojump or Ducktap.",
    ErrorCode.NOLGAGSTMINSPEED: "Lgagst min speed is required.",
    ErrorCode.LGAGSTACTIONTIMES: "You cannot specify the Autojump or Ducktap times if you have Lgagst enabled.",
    ErrorCode.NORESETSEED: "RNG seed is required.",
    ErrorCode.INVALID_ALGORITHM: 'Invalid strafing algorithm (only "yaw" and "vectorial" allowed).',
    ErrorCode.MISSING_CONSTRAINTS: "Missing constraints.",
    ErrorCode.NO_PM_IN_TOLERANCE: "Missing +- before tolerance.",
    ErrorCode.MISSING_ALGORITHM_FROMTO_PARAMETERS: "Missing from/to parameters.",
    ErrorCode.NO_TO_IN_FROMTO_ALGORITHM: 'Missing "to" in the from/to constraint.',
    ErrorCode.NO_YAWSPEED: "The yaw field needs a yaw speed on this frame.",
    ErrorCode.UNSUPPORTED_YAWSPEED_DIR: "Constant yaw speed strafing supports only the left and right directions.",
}


@dataclass(frozen=True)
class ErrorDescription:
    """Error code plus the 1-based line it occurred on (0 means the whole file)."""

    code: ErrorCode
    line_number: int = 0

    @property
    def message(self) -> str:
        return ERRORS[self.code]


class HLTASError(Exception):
    """Raised when a script cannot be read or written."""

    def __init__(self, code: ErrorCode, line_number: int = 0, source_line: str | None = None):
        self.description = ErrorDescription(code, line_number)
        self.source_line = source_line
        super().__init__(self.render())

    @property
    def code(self) -> ErrorCode:
        return self.description.code

    @property
    def line_number(self) -> int:
        return self.description.line_number

    def at_line(self, line_number: int, source_line: str | None = None) -> "HLTASError":
        """Return a copy of this error pinned to a line of the script."""
        return HLTASError(self.code, line_number, source_line)

    def render(self) -> str:
        """Human-readable diagnostic: message, line number and the offending line."""
        text = f"{self.code.name}: {self.description.message}"
        if self.line_number:
            text += f" (line {self.line_number})"
        if self.source_line is not None:
            text += f"\n{self.line_number} | {self.source_line}"
        return text
