"""Unit tests for contract rows and the default table."""

import pytest
from pydantic import ValidationError

from hitepro_contract.models import (
    COMMAND_ACKNOWLEDGEMENT,
    BooleanCheck,
    CheckKind,
    CommandSpec,
    ContractRow,
    EnumCheck,
    FloatRangeCheck,
    IntRangeCheck,
    is_boolean,
)
from hitepro_contract.services import (
    COLOR_DEVICE_TYPES,
    DEFAULT_CONTRACT_TABLE,
    plan_checks,
    row_names,
    select_rows,
)


def _row(name):
    return next(row for row in DEFAULT_CONTRACT_TABLE if row.name == name)


class TestContractRow:

    def test_single_type_string_normalized(self):
        row = ContractRow(name="switch", device_types="switch", status_check=is_boolean())

        assert row.device_types == ("switch",)
        assert row.type_label == "switch"

    def test_aliases_kept_in_order(self):
        row = ContractRow(name="color", device_types=["LED", "RGBW"], command=CommandSpec(value=100))

        assert row.device_types == ("LED", "RGBW")
        assert row.type_label == "LED | RGBW"

    def test_row_needs_status_or_command(self):
        with pytest.raises(ValidationError):
            ContractRow(name="empty", device_types="switch")

    def test_row_needs_a_type(self):
        with pytest.raises(ValidationError):
            ContractRow(name="none", device_types=[], status_check=is_boolean())

    def test_skip_reason_single_type(self):
        assert _row("water").skip_reason() == 'No device of type "water" found'

    def test_skip_reason_aliases(self):
        assert _row("color").skip_reason() == 'No device of any type ["LED", "LED3S/M", "RGBW"] found'

    def test_row_from_plain_data(self):
        row = ContractRow.model_validate({
            "name": "valve",
            "device_types": "valve",
            "status_check": {"kind": "enum", "allowed": [0, 1]},
            "command": {"value": "1"},
        })

        assert isinstance(row.status_check, EnumCheck)
        assert row.command.value == "1"


class TestCommandSpec:

    def test_default_acknowledgement_literal(self):
        assert CommandSpec(value=1).expected_result == "Command send"
        assert COMMAND_ACKNOWLEDGEMENT == "Command send"

    def test_describe_with_query(self):
        assert CommandSpec(value=100, query={"color": "ff5733"}).describe() == "100?color=ff5733"

    def test_describe_plain(self):
        assert CommandSpec(value=50).describe() == "50"

    def test_boolean_value_rejected(self):
        with pytest.raises(ValidationError):
            CommandSpec(value=True)


class TestDefaultTable:
    """The table mirrors the hub's documented device contracts."""

    def test_row_order(self):
        assert row_names() == [
            "switch", "motion", "dimmer", "drive", "illumination",
            "temperature", "humidity", "checker", "water", "power", "color",
        ]

    @pytest.mark.parametrize("name", ["switch", "motion"])
    def test_boolean_rows(self, name):
        assert isinstance(_row(name).status_check, BooleanCheck)

    @pytest.mark.parametrize("name", ["dimmer", "illumination", "humidity"])
    def test_percent_rows(self, name):
        check = _row(name).status_check

        assert isinstance(check, IntRangeCheck)
        assert (check.minimum, check.maximum) == (0, 100)

    def test_temperature_row(self):
        check = _row("temperature").status_check

        assert isinstance(check, FloatRangeCheck)
        assert (check.minimum, check.maximum) == (-40.0, 50.0)

    def test_drive_row(self):
        row = _row("drive")

        assert row.status_check.allowed == (0, 1, 2, 3)
        assert row.command.value == 2

    @pytest.mark.parametrize("name", ["checker", "water", "power"])
    def test_binary_enum_rows(self, name):
        assert _row(name).status_check.allowed == (0, 1)

    def test_commands(self):
        commands = {row.name: row.command.describe() for row in DEFAULT_CONTRACT_TABLE if row.command}

        assert commands == {
            "switch": "1",
            "dimmer": "50",
            "drive": "2",
            "color": "100?color=ff5733",
        }

    def test_color_row_has_no_status_check(self):
        row = _row("color")

        assert row.status_check is None
        assert row.device_types == COLOR_DEVICE_TYPES


class TestSelection:

    def test_no_names_selects_all(self):
        assert select_rows(None) == list(DEFAULT_CONTRACT_TABLE)

    def test_keeps_table_order(self):
        selected = select_rows(["power", "switch"])

        assert [row.name for row in selected] == ["switch", "power"]

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown contract row"):
            select_rows(["switch", "toaster"])


class TestPlanning:

    def test_plan_counts(self):
        checks = plan_checks(DEFAULT_CONTRACT_TABLE)

        status = [c for c in checks if c.kind == CheckKind.STATUS]
        command = [c for c in checks if c.kind == CheckKind.COMMAND]
        assert len(status) == 10
        assert len(command) == 4

    def test_status_before_command_per_row(self):
        labels = [c.label for c in plan_checks(select_rows(["switch"]))]

        assert labels == ["switch: status", "switch: command"]

    def test_skip_commands(self):
        checks = plan_checks(DEFAULT_CONTRACT_TABLE, include_commands=False)

        assert all(c.kind == CheckKind.STATUS for c in checks)
        assert "color" not in {c.row.name for c in checks}
