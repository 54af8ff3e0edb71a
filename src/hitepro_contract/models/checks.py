"""Status validators for device status values.

Each check is a frozen pydantic model tagged by ``kind`` so a contract table
can be declared in code or loaded from plain data. Type discrimination is
strict: JSON booleans are never numbers and numbers are never booleans, even
though ``bool`` is a subclass of ``int`` in Python.
"""

import json
import math
from typing import Annotated, Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_validator


def json_type(value: Any) -> str:
    """Name of the JSON type a decoded value came from."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def json_repr(value: Any) -> str:
    """Render a decoded JSON value the way it appeared on the wire."""
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class _BaseCheck(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    def violation(self, value: Any) -> Optional[str]:
        """Return why ``value`` fails the check, or None if it passes."""
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def accepts(self, value: Any) -> bool:
        return self.violation(value) is None


class BooleanCheck(_BaseCheck):
    """Status must be a JSON boolean."""

    kind: Literal["boolean"] = "boolean"

    def describe(self) -> str:
        return "boolean"

    def violation(self, value: Any) -> Optional[str]:
        if isinstance(value, bool):
            return None
        return f"is a {json_type(value)}, not a boolean"


class IntRangeCheck(_BaseCheck):
    """Status must be a mathematical integer within an inclusive range."""

    kind: Literal["int_range"] = "int_range"
    minimum: int
    maximum: int

    @model_validator(mode="after")
    def check_bounds(self) -> "IntRangeCheck":
        if self.minimum > self.maximum:
            raise ValueError("minimum must not exceed maximum")
        return self

    def describe(self) -> str:
        return f"integer in {self.minimum}..{self.maximum}"

    def violation(self, value: Any) -> Optional[str]:
        if not _is_number(value):
            return f"is a {json_type(value)}, not an integer"
        if isinstance(value, float) and not value.is_integer():
            return f"is not an integer ({json_repr(value)})"
        if not self.minimum <= value <= self.maximum:
            return f"is out of range {self.minimum}..{self.maximum}"
        return None


class FloatRangeCheck(_BaseCheck):
    """Status must be a finite number within an inclusive range."""

    kind: Literal["float_range"] = "float_range"
    minimum: float
    maximum: float

    @model_validator(mode="after")
    def check_bounds(self) -> "FloatRangeCheck":
        if self.minimum > self.maximum:
            raise ValueError("minimum must not exceed maximum")
        return self

    def describe(self) -> str:
        return f"number in {self.minimum:g}..{self.maximum:g}"

    def violation(self, value: Any) -> Optional[str]:
        if not _is_number(value):
            return f"is a {json_type(value)}, not a number"
        if not math.isfinite(value):
            return "is not a finite number"
        if not self.minimum <= value <= self.maximum:
            return f"is out of range {self.minimum:g}..{self.maximum:g}"
        return None


class EnumCheck(_BaseCheck):
    """Status must equal one of the allowed values, compared by JSON type and value."""

    kind: Literal["enum"] = "enum"
    allowed: Tuple[Any, ...] = Field(min_length=1)

    def describe(self) -> str:
        return "one of {" + ", ".join(json_repr(v) for v in self.allowed) + "}"

    def violation(self, value: Any) -> Optional[str]:
        kind = json_type(value)
        for candidate in self.allowed:
            if json_type(candidate) == kind and candidate == value:
                return None
        return f"value {json_repr(value)} not in allowed set"


StatusCheck = Annotated[
    Union[BooleanCheck, IntRangeCheck, FloatRangeCheck, EnumCheck],
    Field(discriminator="kind")
]


def is_boolean() -> BooleanCheck:
    return BooleanCheck()


def is_integer_in_range(minimum: int, maximum: int) -> IntRangeCheck:
    return IntRangeCheck(minimum=minimum, maximum=maximum)


def is_float_in_range(minimum: float, maximum: float) -> FloatRangeCheck:
    return FloatRangeCheck(minimum=minimum, maximum=maximum)


def is_one_of(*allowed: Any) -> EnumCheck:
    return EnumCheck(allowed=allowed)
