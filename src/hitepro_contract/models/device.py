"""Device records and the read-only device directory."""

from typing import Any, Iterable, Iterator, List, Optional, Sequence

from pydantic import BaseModel, TypeAdapter, field_validator


class Device(BaseModel):
    """A hub-managed device as listed by ``GET /devices/``.

    Fields beyond ``id`` and ``type`` are kept as returned by the hub.
    """

    model_config = {
        "frozen": True,
        "extra": "allow"
    }

    id: str
    type: str

    @field_validator('id', mode='before')
    @classmethod
    def normalize_id(cls, v: Any) -> Any:
        """Hubs may report numeric ids; they are used verbatim in URLs."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    def __str__(self) -> str:
        return f"{self.type}#{self.id}"


_DEVICE_LIST = TypeAdapter(List[Device])


class DeviceDirectory:
    """Ordered, immutable snapshot of the hub's devices."""

    def __init__(self, devices: Iterable[Device] = ()):
        self._devices = tuple(devices)

    @classmethod
    def from_payload(cls, payload: Any) -> "DeviceDirectory":
        """Build a directory from a decoded ``GET /devices/`` body.

        Raises:
            ValueError: payload is not an array of device records
        """
        if not isinstance(payload, list):
            raise ValueError("device directory must be a JSON array")
        return cls(_DEVICE_LIST.validate_python(payload))

    def __len__(self) -> int:
        return len(self._devices)

    def __iter__(self) -> Iterator[Device]:
        return iter(self._devices)

    def __getitem__(self, index: int) -> Device:
        return self._devices[index]

    @property
    def devices(self) -> tuple:
        return self._devices

    def types(self) -> List[str]:
        """Distinct device types in first-seen order."""
        seen: List[str] = []
        for device in self._devices:
            if device.type not in seen:
                seen.append(device.type)
        return seen

    def find_by_type(self, device_type: str) -> Optional[Device]:
        """First device in directory order whose type matches exactly."""
        for device in self._devices:
            if device.type == device_type:
                return device
        return None

    def find_by_any_type(self, device_types: Sequence[str]) -> Optional[Device]:
        """Try each candidate type in order and return the first match."""
        for device_type in device_types:
            device = self.find_by_type(device_type)
            if device is not None:
                return device
        return None
