"""HLTAS core - reading, editing and writing frame bulk scripts."""
from .document import Document
from .errors import ERRORS, ErrorCode, ErrorDescription, HLTASError
from .protocol import CAPABILITIES, MAX_SUPPORTED_VERSION, capabilities
from .read import decode_frame_bulk, parse, read_file
from .types import (
    ActionKeys,
    Autofunc,
    AvgVelocityYaw,
    Button,
    Buttons,
    Change,
    ChangeTarget,
    CountValue,
    Frame,
    FrameBulk,
    LgagstMinSpeed,
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
)
from .write import dumps, encode_frame_bulk, encode_line

__all__ = [
    "Document",
    "ERRORS",
    "ErrorCode",
    "ErrorDescription",
    "HLTASError",
    "CAPABILITIES",
    "MAX_SUPPORTED_VERSION",
    "capabilities",
    "decode_frame_bulk",
    "parse",
    "read_file",
    "dumps",
    "encode_frame_bulk",
    "encode_line",
    "ActionKeys",
    "Autofunc",
    "AvgVelocityYaw",
    "Button",
    "Buttons",
    "Change",
    "ChangeTarget",
    "CountValue",
    "Frame",
    "FrameBulk",
    "LgagstMinSpeed",
    "LookAt",
    "MovementKeys",
    "PointValue",
    "Reset",
    "Save",
    "Script",
    "SharedSeed",
    "StrafeButtons",
    "StrafeDir",
    "StrafeSettings",
    "StrafeType",
    "Strafing",
    "StrafingAlgorithm",
    "TargetYaw",
    "TargetYawOverride",
    "VelocityYaw",
    "VelocityYawLocking",
    "YawConstraint",
    "YawRange",
    "YawSpeedValue",
    "YawValue",
]
