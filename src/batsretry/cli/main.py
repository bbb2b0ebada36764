"""CLI entry point for bats-retry."""
from __future__ import annotations

import sys
from typing import Optional

import click

from batsretry import __version__
from batsretry.config import Settings, load_settings
from batsretry.core import RetryExecutor
from batsretry.errors import ConfigError, ReportProcessingError
from batsretry.log import ContextLogger, configure_logging
from batsretry.plan import RetryPlan, build_plan, render_script, write_script
from batsretry.reporting import TerminalReporter

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _print_version(_: click.Context, __: click.Parameter, value: bool) -> None:
    if not value or click.get_current_context().resilient_parsing:
        return
    click.echo(f"bats-retry {__version__}")
    raise click.exceptions.Exit()


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("test_directory", required=False)
@click.argument("test_script", required=False)
@click.option("--execute", is_flag=True, help="Execute bats commands directly instead of writing a script.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML settings file.",
)
@click.option("--runner", type=str, help="Runner command used for re-runs (default: bats).")
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show the bats-retry version and exit.",
)
def cli(
    test_directory: Optional[str],
    test_script: Optional[str],
    execute: bool,
    config_path: Optional[str],
    runner: Optional[str],
    verbose: bool,
    no_color: bool,
) -> None:
    """Retry the failed and skipped cases recorded in TEST_DIRECTORY's JUnit reports.

    Writes the retry commands to TEST_SCRIPT, or runs them directly with
    --execute and marks every case that now passes in its report.
    """

    logger = configure_logging(verbose=verbose)
    if not test_directory:
        raise click.ClickException("No test directory specified")
    if not test_script and not execute:
        raise click.ClickException("No test script location specified")
    try:
        settings = load_settings(config_path).with_runner(runner)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    log = logger.bind(**{"test-directory": test_directory})
    try:
        plan = build_plan(test_directory, settings, logger=logger)
    except ReportProcessingError as exc:
        raise click.ClickException(str(exc)) from exc
    except OSError as exc:
        log.bind(error=str(exc)).error("Error reading test directory")
        raise click.ClickException(f"Error reading test directory: {exc}") from exc

    if not plan:
        log.info("No testsuites found")
        click.echo("No testsuites found")
        return

    if execute:
        _execute(plan, settings, log, use_color=not no_color)
        return

    assert test_script  # checked above
    try:
        write_script(test_script, render_script(plan, settings))
    except OSError as exc:
        raise click.ClickException(f"Error writing file: {exc}") from exc
    click.echo(f"Wrote retry script {test_script} ({plan.case_count} case(s))")


def _execute(plan: RetryPlan, settings: Settings, logger: ContextLogger, *, use_color: bool) -> None:
    reporter = TerminalReporter(use_color=use_color)
    executor = RetryExecutor(settings, logger=logger, on_result=reporter.on_result)
    error = executor.run(plan)
    reporter.on_complete(executor.results)
    if error is not None:
        logger.bind(error=str(error)).error("Error executing bats commands")
        raise click.ClickException(f"Error executing bats commands: {error}")


def main(argv: Optional[list[str]] = None) -> int:
    """Program entry point for console_scripts shim."""

    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=argv, prog_name="bats-retry", standalone_mode=True)
    except click.ClickException as err:  # pragma: no cover - click handles display
        err.show()
        return err.exit_code
    except SystemExit as exc:
        return int(exc.code or 0)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
