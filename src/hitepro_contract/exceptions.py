"""Error taxonomy for contract runs.

Fatal errors abort the whole run:

- ConfigurationError: required settings are missing or invalid (pre-run)
- SetupError: the device directory could not be fetched

Per-check errors are caught by the runner and reported as failed checks:

- TransportError: network failure or timeout on a single request
- ContractViolation: a response does not satisfy its contract
"""

from typing import Any, Optional, Sequence


class HubContractError(Exception):
    """Base class for all contract suite errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(HubContractError):
    """Missing or invalid configuration."""

    def __init__(self, message: str, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = tuple(missing)


class SetupError(HubContractError):
    """Device directory fetch failed."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class TransportError(HubContractError):
    """Network failure or timeout talking to the hub."""

    def __init__(self, message: str, endpoint: Optional[str] = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint


class ContractViolation(HubContractError):
    """A device response does not satisfy its contract."""

    def __init__(
        self,
        reason: str,
        device_type: str,
        device_id: str,
        field: str,
        expected: str,
        actual: Any,
        endpoint: Optional[str] = None
    ) -> None:
        self.reason = reason
        self.device_type = device_type
        self.device_id = device_id
        self.field = field
        self.expected = expected
        self.actual = actual
        self.endpoint = endpoint
        super().__init__(self._format())

    def _format(self) -> str:
        text = (
            f"{self.device_type} device {self.device_id}: field '{self.field}' {self.reason} "
            f"(expected {self.expected}, actual {self.actual})"
        )
        if self.endpoint:
            text += f" [{self.endpoint}]"
        return text
