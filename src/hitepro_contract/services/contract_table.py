"""The HitePro device contract table."""

from typing import Iterable, List, Optional, Sequence, Tuple

from ..models import (
    CommandSpec,
    ContractRow,
    is_boolean,
    is_float_in_range,
    is_integer_in_range,
    is_one_of,
)


COLOR_DEVICE_TYPES = ("LED", "LED3S/M", "RGBW")

DEFAULT_CONTRACT_TABLE: Tuple[ContractRow, ...] = (
    ContractRow(
        name="switch",
        device_types="switch",
        status_check=is_boolean(),
        command=CommandSpec(value=1),
        description="Relay on/off; command 1 turns it on"
    ),
    ContractRow(
        name="motion",
        device_types="motion",
        status_check=is_boolean(),
        description="Motion sensor"
    ),
    ContractRow(
        name="dimmer",
        device_types="dimmer",
        status_check=is_integer_in_range(0, 100),
        command=CommandSpec(value=50),
        description="Brightness level in percent"
    ),
    ContractRow(
        name="drive",
        device_types="drive",
        status_check=is_one_of(0, 1, 2, 3),
        command=CommandSpec(value=2),
        description="Curtain/gate drive state; command 2 opens"
    ),
    ContractRow(
        name="illumination",
        device_types="illumination",
        status_check=is_integer_in_range(0, 100),
        description="Light level in percent"
    ),
    ContractRow(
        name="temperature",
        device_types="temperature",
        status_check=is_float_in_range(-40, 50),
        description="Degrees Celsius"
    ),
    ContractRow(
        name="humidity",
        device_types="humidity",
        status_check=is_integer_in_range(0, 100),
        description="Relative humidity in percent"
    ),
    ContractRow(
        name="checker",
        device_types="checker",
        status_check=is_one_of(0, 1),
        description="Door/window contact: 0 closed, 1 open"
    ),
    ContractRow(
        name="water",
        device_types="water",
        status_check=is_one_of(0, 1),
        description="Leak sensor: 0 ok, 1 flood"
    ),
    ContractRow(
        name="power",
        device_types="power",
        status_check=is_one_of(0, 1),
        description="Mains monitor: 0 no voltage, 1 voltage"
    ),
    ContractRow(
        name="color",
        device_types=COLOR_DEVICE_TYPES,
        command=CommandSpec(value=100, query={"color": "ff5733"}),
        description="Any color-capable fixture accepts a level plus RGB color"
    ),
)


def row_names(rows: Iterable[ContractRow] = DEFAULT_CONTRACT_TABLE) -> List[str]:
    return [row.name for row in rows]


def select_rows(
    names: Optional[Sequence[str]] = None,
    rows: Sequence[ContractRow] = DEFAULT_CONTRACT_TABLE
) -> List[ContractRow]:
    """Restrict the table to the named rows, keeping table order.

    Raises:
        ValueError: a name matches no row
    """
    if not names:
        return list(rows)

    known = {row.name for row in rows}
    unknown = [name for name in names if name not in known]
    if unknown:
        raise ValueError(
            f"Unknown contract row(s): {', '.join(unknown)}. "
            f"Known rows: {', '.join(row.name for row in rows)}"
        )

    wanted = set(names)
    return [row for row in rows if row.name in wanted]
