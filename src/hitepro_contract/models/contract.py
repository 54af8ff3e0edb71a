"""Declarative contract rows: expected status shape and command behavior per device type."""

from typing import Any, Dict, Optional, Tuple, Union

from pydantic import BaseModel, Field, StrictInt, StrictStr, field_validator, model_validator

from .checks import StatusCheck


COMMAND_ACKNOWLEDGEMENT = "Command send"


class CommandSpec(BaseModel):
    """A control command and the literal acknowledgement the hub must return."""

    model_config = {
        "frozen": True,
        "extra": "forbid"
    }

    value: Union[StrictInt, StrictStr] = Field(description="Value appended to the device URL")
    query: Optional[Dict[str, str]] = Field(
        default=None,
        description="Extra query parameters, e.g. {'color': 'ff5733'}"
    )
    expected_result: str = Field(
        default=COMMAND_ACKNOWLEDGEMENT,
        description="Literal expected in the response 'result' field"
    )

    def describe(self) -> str:
        """Command payload as it appears in the URL, e.g. ``100?color=ff5733``."""
        text = str(self.value)
        if self.query:
            text += "?" + "&".join(f"{k}={v}" for k, v in self.query.items())
        return text


class ContractRow(BaseModel):
    """Expected behavior of one device type (or a family of type aliases)."""

    model_config = {
        "frozen": True,
        "extra": "forbid"
    }

    name: str = Field(min_length=1, description="Unique row name used for selection and reporting")
    device_types: Tuple[str, ...] = Field(
        min_length=1,
        description="Acceptable device types, tried in order"
    )
    status_check: Optional[StatusCheck] = None
    command: Optional[CommandSpec] = None
    description: str = ""

    @field_validator('device_types', mode='before')
    @classmethod
    def normalize_types(cls, v: Any) -> Any:
        """Accept a single type string as shorthand for a one-element tuple."""
        if isinstance(v, str):
            return (v,)
        return v

    @model_validator(mode='after')
    def require_expectation(self) -> "ContractRow":
        if self.status_check is None and self.command is None:
            raise ValueError(f"row '{self.name}' declares neither a status check nor a command")
        return self

    @property
    def type_label(self) -> str:
        return " | ".join(self.device_types) if len(self.device_types) > 1 else self.device_types[0]

    def skip_reason(self) -> str:
        if len(self.device_types) == 1:
            return f'No device of type "{self.device_types[0]}" found'
        candidates = ", ".join(f'"{t}"' for t in self.device_types)
        return f"No device of any type [{candidates}] found"
