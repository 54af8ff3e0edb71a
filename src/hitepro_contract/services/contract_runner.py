"""Runs contract checks against the hub and aggregates the results.

Run lifecycle:

1. Fetch the device directory once (SetupError aborts the run).
2. Plan one status check and/or one command check per contract row.
3. Execute all checks concurrently, bounded by a semaphore. Each check sees
   only the immutable RunContext; no check depends on another's outcome.
4. When the run timeout expires, in-flight checks fail with a timeout detail
   and checks still waiting for a slot are reported as not run.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Set, Tuple

import structlog

from ..exceptions import ContractViolation, SetupError, TransportError
from ..lib.hub_client import HubClient, HubResponse
from ..models import (
    CheckKind,
    CheckOutcome,
    CheckResult,
    ContractRow,
    Device,
    DeviceDirectory,
    RunReport,
    json_repr,
    json_type,
)
from .contract_table import DEFAULT_CONTRACT_TABLE
from .directory_loader import DirectoryLoader


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RunContext:
    """Read-only state shared by every check in a run."""

    client: HubClient
    directory: DeviceDirectory


@dataclass(frozen=True)
class PlannedCheck:
    """One check to execute: a contract row and which side of it to exercise."""

    row: ContractRow
    kind: CheckKind

    @property
    def label(self) -> str:
        return f"{self.row.name}: {self.kind.value}"


def plan_checks(rows: Sequence[ContractRow], include_commands: bool = True) -> List[PlannedCheck]:
    """Expand rows into checks: status first, then command, in table order."""
    checks: List[PlannedCheck] = []
    for row in rows:
        if row.status_check is not None:
            checks.append(PlannedCheck(row, CheckKind.STATUS))
        if row.command is not None and include_commands:
            checks.append(PlannedCheck(row, CheckKind.COMMAND))
    return checks


async def execute_check(check: PlannedCheck, context: RunContext) -> CheckResult:
    """Run one check in isolation and classify the outcome.

    Never raises for contract violations or transport errors; those become
    failed results.
    """
    row = check.row
    device = context.directory.find_by_any_type(row.device_types)

    if device is None:
        logger.info("Check skipped", check=check.label, reason=row.skip_reason())
        return CheckResult(
            row=row.name,
            kind=check.kind,
            outcome=CheckOutcome.SKIPPED,
            device_types=list(row.device_types),
            detail=row.skip_reason()
        )

    payload = row.command.describe() if check.kind == CheckKind.COMMAND else None
    started = time.perf_counter()
    outcome = CheckOutcome.PASSED
    detail: Optional[str] = None

    try:
        if check.kind == CheckKind.STATUS:
            endpoint = await _check_status(row, device, context.client)
        else:
            endpoint = await _check_command(row, device, context.client)
    except ContractViolation as e:
        outcome, detail, endpoint = CheckOutcome.FAILED, str(e), e.endpoint
    except TransportError as e:
        outcome, detail, endpoint = CheckOutcome.FAILED, str(e), e.endpoint

    duration_ms = (time.perf_counter() - started) * 1000

    if outcome == CheckOutcome.PASSED:
        logger.info("Check passed", check=check.label, device=str(device), duration_ms=round(duration_ms, 1))
    else:
        logger.warning("Check failed", check=check.label, device=str(device), detail=detail)

    return CheckResult(
        row=row.name,
        kind=check.kind,
        outcome=outcome,
        device_types=list(row.device_types),
        device_id=device.id,
        device_type=device.type,
        endpoint=endpoint,
        payload=payload,
        detail=detail,
        duration_ms=duration_ms
    )


def _require_ok(response: HubResponse, device: Device) -> None:
    if response.status_code != 200:
        raise ContractViolation(
            "is not a success code",
            device_type=device.type,
            device_id=device.id,
            field="http_status",
            expected="200",
            actual=str(response.status_code),
            endpoint=response.endpoint
        )


def _require_field(response: HubResponse, device: Device, field: str) -> None:
    body = response.body
    if not isinstance(body, dict) or field not in body:
        if isinstance(body, dict):
            actual = f"keys {sorted(body)}"
        elif body is None:
            actual = "non-JSON body"
        else:
            actual = f"JSON {json_type(body)}"
        raise ContractViolation(
            "is missing from the response",
            device_type=device.type,
            device_id=device.id,
            field=field,
            expected=f"object with '{field}'",
            actual=actual,
            endpoint=response.endpoint
        )


async def _check_status(row: ContractRow, device: Device, client: HubClient) -> str:
    response = await client.get_device(device.id)
    _require_ok(response, device)
    _require_field(response, device, "status")

    value = response.body["status"]
    problem = row.status_check.violation(value)
    if problem is not None:
        raise ContractViolation(
            problem,
            device_type=device.type,
            device_id=device.id,
            field="status",
            expected=row.status_check.describe(),
            actual=json_repr(value),
            endpoint=response.endpoint
        )
    return response.endpoint


async def _check_command(row: ContractRow, device: Device, client: HubClient) -> str:
    command = row.command
    response = await client.send_command(device.id, command.value, command.query)
    _require_ok(response, device)
    _require_field(response, device, "result")

    result = response.body["result"]
    if not isinstance(result, str) or result != command.expected_result:
        raise ContractViolation(
            "does not match the acknowledgement literal",
            device_type=device.type,
            device_id=device.id,
            field="result",
            expected=json_repr(command.expected_result),
            actual=json_repr(result),
            endpoint=response.endpoint
        )
    return response.endpoint


class ContractRunner:
    """Executes a contract table against one hub."""

    def __init__(self,
                 client: HubClient,
                 rows: Sequence[ContractRow] = DEFAULT_CONTRACT_TABLE,
                 concurrency: int = 4,
                 run_timeout: float = 60.0,
                 include_commands: bool = True,
                 loader: Optional[DirectoryLoader] = None):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if run_timeout <= 0:
            raise ValueError("run_timeout must be positive")

        self.client = client
        self.rows = tuple(rows)
        self.concurrency = concurrency
        self.run_timeout = run_timeout
        self.include_commands = include_commands
        self.loader = loader or DirectoryLoader(client)

    def plan(self) -> List[PlannedCheck]:
        return plan_checks(self.rows, self.include_commands)

    async def run(self) -> RunReport:
        """Fetch the directory, run every check and return the report.

        Raises:
            SetupError: the directory fetch failed or exceeded the run timeout
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.run_timeout
        started_at = datetime.now()

        logger.info("Starting contract run",
                    base_url=self.client.settings.base_url,
                    rows=len(self.rows),
                    concurrency=self.concurrency,
                    run_timeout=self.run_timeout)

        try:
            directory = await asyncio.wait_for(self.loader.load(), timeout=self.run_timeout)
        except asyncio.TimeoutError as e:
            raise SetupError(
                f"Device directory fetch did not finish within the {self.run_timeout:g}s run timeout"
            ) from e

        context = RunContext(client=self.client, directory=directory)
        checks = self.plan()
        results = await self._run_checks(checks, context, max(deadline - loop.time(), 0.0))

        report = RunReport(
            base_url=self.client.settings.base_url,
            started_at=started_at,
            finished_at=datetime.now(),
            device_count=len(directory),
            results=results
        )
        logger.info("Contract run finished", **report.summary())
        return report

    async def _run_checks(self,
                          checks: List[PlannedCheck],
                          context: RunContext,
                          remaining: float) -> List[CheckResult]:
        if not checks:
            return []

        semaphore = asyncio.Semaphore(self.concurrency)
        in_flight: Set[int] = set()

        async def guarded(index: int, check: PlannedCheck) -> CheckResult:
            async with semaphore:
                in_flight.add(index)
                return await execute_check(check, context)

        tasks = [asyncio.create_task(guarded(i, check)) for i, check in enumerate(checks)]
        done, pending = await asyncio.wait(tasks, timeout=remaining) if remaining > 0 else (set(), set(tasks))

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning("Run timeout expired", unfinished=len(pending), run_timeout=self.run_timeout)

        results: List[CheckResult] = []
        for index, (check, task) in enumerate(zip(checks, tasks)):
            if task in done:
                results.append(task.result())
            else:
                results.append(self._cut_off(check, context, started=index in in_flight))
        return results

    def _cut_off(self, check: PlannedCheck, context: RunContext, started: bool) -> CheckResult:
        """Result for a check the run timeout interrupted or never let start."""
        device = context.directory.find_by_any_type(check.row.device_types)
        if started:
            outcome = CheckOutcome.FAILED
            detail = f"Run timeout of {self.run_timeout:g}s expired while waiting for the hub"
        else:
            outcome = CheckOutcome.NOT_RUN
            detail = f"Not started before the {self.run_timeout:g}s run timeout expired"

        return CheckResult(
            row=check.row.name,
            kind=check.kind,
            outcome=outcome,
            device_types=list(check.row.device_types),
            device_id=device.id if device else None,
            device_type=device.type if device else None,
            payload=check.row.command.describe() if check.kind == CheckKind.COMMAND else None,
            detail=detail
        )
