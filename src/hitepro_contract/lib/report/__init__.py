"""Console and file reports for contract runs.

The console report is a rich table of every check followed by a summary and
the detail of each failure. The same rendering is recorded and saved as
``report.html``; ``report.json`` holds the machine-readable RunReport.
"""

import io
import json
from pathlib import Path
from typing import Dict, Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
import structlog

from ...models import CheckOutcome, ContractRow, RunReport

logger = structlog.get_logger(__name__)

HTML_REPORT_NAME = "report.html"
JSON_REPORT_NAME = "report.json"

OUTCOME_STYLES = {
    CheckOutcome.PASSED.value: ("✓ passed", "green"),
    CheckOutcome.FAILED.value: ("✗ failed", "bold red"),
    CheckOutcome.SKIPPED.value: ("- skipped", "yellow"),
    CheckOutcome.NOT_RUN.value: ("… not run", "magenta"),
}


def build_results_table(report: RunReport) -> Table:
    """One row per check, in contract-table order."""
    table = Table(title=f"HitePro device contracts @ {report.base_url}", expand=False)
    table.add_column("Check", style="bold")
    table.add_column("Device")
    table.add_column("Endpoint", overflow="fold")
    table.add_column("Outcome")
    table.add_column("ms", justify="right")

    for result in report.results:
        label, style = OUTCOME_STYLES[result.outcome]
        device = f"{result.device_type}#{result.device_id}" if result.device_id else "-"
        table.add_row(
            result.label,
            device,
            result.endpoint or "-",
            Text(label, style=style),
            f"{result.duration_ms:.0f}"
        )

    return table


def build_summary(report: RunReport) -> Panel:
    if report.setup_error:
        body = Text(f"Run aborted: {report.setup_error}", style="bold red")
        return Panel(body, title="Setup error", border_style="red")

    text = Text()
    text.append(f"{report.passed} passed", style="green")
    text.append(", ")
    text.append(f"{report.failed} failed", style="bold red" if report.failed else "")
    text.append(", ")
    text.append(f"{report.skipped} skipped", style="yellow" if report.skipped else "")
    text.append(", ")
    text.append(f"{report.not_run} not run", style="magenta" if report.not_run else "")
    text.append(f"  ({report.device_count} devices, {report.duration_seconds:.2f}s)")
    return Panel(text, title="Summary", border_style="green" if report.success else "red")


def render_report(report: RunReport, console: Optional[Console] = None) -> None:
    """Print the full report to the console."""
    console = console or Console()

    if report.results:
        console.print(build_results_table(report))

    skipped = [r for r in report.results if r.outcome == CheckOutcome.SKIPPED.value]
    for result in skipped:
        console.print(f"[yellow]- {result.label}[/yellow]: {escape(result.detail or '')}")

    failures = report.failures()
    if failures:
        console.print()
        console.print("[bold red]Failures[/bold red]")
        for result in failures:
            console.print(f"[red]✗ {escape(result.label)}[/red]")
            if result.payload:
                console.print(f"    payload: {escape(result.payload)}")
            console.print(f"    {result.detail}", markup=False)

    not_run = [r for r in report.results if r.outcome == CheckOutcome.NOT_RUN.value]
    for result in not_run:
        console.print(f"[magenta]… {result.label}[/magenta]: {escape(result.detail or '')}")

    console.print(build_summary(report))


def render_contract_table(rows: Iterable[ContractRow], console: Optional[Console] = None) -> None:
    """Print the contract table itself (``--list``)."""
    console = console or Console()

    table = Table(title="Device contracts")
    table.add_column("Row", style="bold")
    table.add_column("Device types")
    table.add_column("Status")
    table.add_column("Command")

    for row in rows:
        table.add_row(
            row.name,
            row.type_label,
            row.status_check.describe() if row.status_check else "-",
            f"PUT {row.command.describe()} -> \"{row.command.expected_result}\"" if row.command else "-"
        )

    console.print(table)


def write_report_artifacts(report: RunReport, report_dir: Path) -> Dict[str, Path]:
    """Write report.html and report.json, returning their paths."""
    report_dir = Path(report_dir)
    report_dir.mkdir(parents=True, exist_ok=True)

    recorder = Console(record=True, file=io.StringIO(), width=140)
    render_report(report, recorder)

    html_path = report_dir / HTML_REPORT_NAME
    recorder.save_html(str(html_path))

    json_path = report_dir / JSON_REPORT_NAME
    with open(json_path, 'w', encoding='utf-8') as f:
        json.dump(report.export_dict(), f, indent=2)

    logger.info("Report written", html=str(html_path), json=str(json_path))
    return {"html": html_path, "json": json_path}


__all__ = [
    "HTML_REPORT_NAME",
    "JSON_REPORT_NAME",
    "build_results_table",
    "build_summary",
    "render_report",
    "render_contract_table",
    "write_report_artifacts",
]
