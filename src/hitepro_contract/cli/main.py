"""Run the HitePro device contract table against a hub and report the results."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import httpx
import structlog
from rich.console import Console
from rich.markup import escape

from ..exceptions import ConfigurationError, SetupError
from ..lib.config import HubSettings, load_settings
from ..lib.hub_client import HubClient
from ..lib.report import render_contract_table, render_report, write_report_artifacts
from ..models import ContractRow, RunReport
from ..services import DEFAULT_CONTRACT_TABLE, ContractRunner, row_names, select_rows


logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_SETUP_ERROR = 3


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hitepro-contract",
        description="Check that a HitePro hub's device API honours its status and command contracts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Rows: {', '.join(row_names())}

Examples:
  hitepro-contract                              # settings from the environment / ./.env
  hitepro-contract --env-file .env.staging      # load a specific .env file
  hitepro-contract --only dimmer --only drive   # run a subset of rows
  hitepro-contract --skip-commands              # read-only run, no PUT requests
  hitepro-contract --timeout 10 --global-timeout 120
  hitepro-contract --list                       # print the contract table and exit

Exit codes: 0 all checks passed or skipped, 1 a check failed,
2 configuration error, 3 device directory could not be fetched.
        """
    )

    parser.add_argument("--env-file", type=Path, help="Load HITEPRO_* variables from this .env file")
    parser.add_argument("--config", type=Path, help="YAML settings file (overridden by the environment)")
    parser.add_argument("--base-url", help="Hub API root URL (overrides HITEPRO_BASE_URL)")
    parser.add_argument(
        "--timeout",
        type=float,
        dest="request_timeout",
        help="Seconds to wait for each HTTP response (default 30)"
    )
    parser.add_argument(
        "--global-timeout",
        type=float,
        dest="run_timeout",
        help="Seconds for the whole run; unfinished checks are reported as not run (default 60)"
    )
    parser.add_argument("--concurrency", type=int, help="Checks in flight at once (default 4)")
    parser.add_argument(
        "--only",
        action="append",
        metavar="ROW",
        help="Run only this contract row (repeatable)"
    )
    parser.add_argument("--skip-commands", action="store_true", help="Only read device status, send no commands")
    parser.add_argument("--report-dir", type=Path, help="Directory for report.html and report.json")
    parser.add_argument("--no-report", action="store_true", help="Do not write report files")
    parser.add_argument("--list", action="store_true", help="Print the contract table and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser


def configure_logging(debug: bool = False) -> None:
    log_level = "DEBUG" if debug else "INFO"
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


async def run_contracts(settings: HubSettings,
                        rows: Sequence[ContractRow] = DEFAULT_CONTRACT_TABLE,
                        include_commands: bool = True,
                        transport: Optional[httpx.AsyncBaseTransport] = None) -> RunReport:
    """Run the given rows against the hub described by ``settings``.

    Raises:
        SetupError: the device directory could not be fetched
    """
    async with HubClient(settings, transport=transport) as client:
        runner = ContractRunner(
            client,
            rows=rows,
            concurrency=settings.concurrency,
            run_timeout=settings.run_timeout,
            include_commands=include_commands
        )
        return await runner.run()


def main(argv: Optional[List[str]] = None,
         transport: Optional[httpx.AsyncBaseTransport] = None,
         console: Optional[Console] = None) -> int:
    """CLI entry point; returns the process exit code."""
    args = create_parser().parse_args(argv)
    configure_logging(args.debug)
    console = console or Console()

    try:
        rows = select_rows(args.only)
    except ValueError as e:
        logger.error("Invalid row selection", error=str(e))
        return EXIT_CONFIG_ERROR

    if args.list:
        render_contract_table(rows, console)
        return EXIT_OK

    try:
        settings = load_settings(
            env_file=args.env_file,
            config_path=args.config,
            overrides={
                "base_url": args.base_url,
                "request_timeout": args.request_timeout,
                "run_timeout": args.run_timeout,
                "concurrency": args.concurrency,
                "report_dir": args.report_dir
            }
        )
    except ConfigurationError as e:
        logger.error("Configuration error", error=str(e))
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}", highlight=False)
        return EXIT_CONFIG_ERROR

    logger.debug("Resolved settings", **settings.describe())

    try:
        report = asyncio.run(run_contracts(settings, rows, not args.skip_commands, transport))
        exit_code = EXIT_OK if report.success else EXIT_FAILED
    except SetupError as e:
        logger.error("Setup failed, run aborted", error=str(e), endpoint=e.endpoint)
        report = RunReport(base_url=settings.base_url, setup_error=str(e))
        exit_code = EXIT_SETUP_ERROR

    render_report(report, console)

    if not args.no_report:
        try:
            paths = write_report_artifacts(report, settings.report_dir)
            console.print(f"Report: {paths['html']}", highlight=False)
        except OSError as e:
            logger.error("Could not write report", report_dir=str(settings.report_dir), error=str(e))

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
