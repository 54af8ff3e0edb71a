"""Data models for device contracts and run results."""

from .device import Device, DeviceDirectory
from .checks import (
    StatusCheck,
    BooleanCheck,
    IntRangeCheck,
    FloatRangeCheck,
    EnumCheck,
    is_boolean,
    is_integer_in_range,
    is_float_in_range,
    is_one_of,
    json_repr,
    json_type,
)
from .contract import COMMAND_ACKNOWLEDGEMENT, CommandSpec, ContractRow
from .results import CheckKind, CheckOutcome, CheckResult, RunReport

__all__ = [
    "Device",
    "DeviceDirectory",
    "StatusCheck",
    "BooleanCheck",
    "IntRangeCheck",
    "FloatRangeCheck",
    "EnumCheck",
    "is_boolean",
    "is_integer_in_range",
    "is_float_in_range",
    "is_one_of",
    "json_repr",
    "json_type",
    "COMMAND_ACKNOWLEDGEMENT",
    "CommandSpec",
    "ContractRow",
    "CheckKind",
    "CheckOutcome",
    "CheckResult",
    "RunReport",
]
