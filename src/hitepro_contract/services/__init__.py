"""Services that fetch the device directory and run contract checks."""

from .contract_table import DEFAULT_CONTRACT_TABLE, COLOR_DEVICE_TYPES, row_names, select_rows
from .directory_loader import DirectoryLoader
from .contract_runner import ContractRunner, PlannedCheck, RunContext, execute_check, plan_checks

__all__ = [
    "DEFAULT_CONTRACT_TABLE",
    "COLOR_DEVICE_TYPES",
    "row_names",
    "select_rows",
    "DirectoryLoader",
    "ContractRunner",
    "PlannedCheck",
    "RunContext",
    "execute_check",
    "plan_checks",
]
