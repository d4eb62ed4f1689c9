"""CLI entry point for api-change-detector."""

import logging
import os
import sys
from pathlib import Path

import click

from api_change_detector.analyzer import GROUPED_REPORT_FILE, ChangeAnalyzer, write_report
from api_change_detector.config import DetectorSettings, get_settings
from api_change_detector.diff.comparator import compare
from api_change_detector.diff.groups import analyze_all_groups
from api_change_detector.diff.report import (
    build_change_report,
    build_grouped_report,
    build_legacy_report,
    format_change_report,
    format_grouped_report,
)
from api_change_detector.diff.risk import RiskLevel
from api_change_detector.exceptions import ApiDiffError, UsageError
from api_change_detector.parser.swagger import load_document

RISK_CHOICES = [r.value for r in RiskLevel if r is not RiskLevel.UNKNOWN]
FAIL_ON_EXIT_CODE = 2


def legacy_report_path(grouped_path: Path) -> Path:
    """changes-report-grouped.json -> changes-report.json; other names get a -legacy suffix."""
    if grouped_path.name.endswith("-grouped.json"):
        return grouped_path.with_name(grouped_path.name[: -len("-grouped.json")] + ".json")
    return grouped_path.with_name(f"{grouped_path.stem}-legacy.json")


def _write_github_output(breaking: int, new: int, risk: RiskLevel) -> None:
    output_file = os.getenv("GITHUB_OUTPUT")
    if not output_file:
        return
    with open(output_file, "a", encoding="utf-8") as f:
        f.write(f"breaking_changes={breaking}\n")
        f.write(f"new_endpoints={new}\n")
        f.write(f"risk_level={risk.value}\n")


def _check_fail_on(ctx: click.Context, risk: RiskLevel, fail_on: str | None) -> None:
    if fail_on and risk.at_least(RiskLevel(fail_on)):
        click.echo(f"Risk level {risk.value} is at or above --fail-on {fail_on}.", err=True)
        ctx.exit(FAIL_ON_EXIT_CODE)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """API Change Detector: diff OpenAPI documents and rate the risk of the changes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = get_settings()


@main.command(name="compare")
@click.argument("old_spec", type=click.Path(path_type=Path))
@click.argument("new_spec", type=click.Path(path_type=Path))
@click.argument("output", required=False, type=click.Path(path_type=Path))
@click.option("--fail-on", default=None, type=click.Choice(RISK_CHOICES), help="Exit with status 2 at this risk level or above.")
@click.pass_context
def compare_cmd(ctx: click.Context, old_spec: Path, new_spec: Path, output: Path | None, fail_on: str | None):
    """Compare two API documents."""
    try:
        old_doc = load_document(old_spec)
        new_doc = load_document(new_spec)
    except ApiDiffError as e:
        raise click.ClickException(str(e)) from e
    if old_doc is None or new_doc is None:
        click.echo("First version or no previous version - skipping change analysis.")

    changes = compare(old_doc, new_doc)
    report = build_change_report(changes)
    click.echo(format_change_report(report))

    if output:
        write_report(report, output)
        click.echo(f"Report saved to {output}")

    summary = changes.summary
    _write_github_output(summary.breaking_changes, summary.new_endpoints, summary.risk_level)
    _check_fail_on(ctx, summary.risk_level, fail_on)


@main.command()
@click.argument("new_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--old-dir", default=None, type=click.Path(file_okay=False, path_type=Path), help="Directory of the previous version.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help=f"Grouped report path (e.g. {GROUPED_REPORT_FILE}).")
@click.option("--fail-on", default=None, type=click.Choice(RISK_CHOICES), help="Exit with status 2 at this risk level or above.")
@click.pass_context
def groups(ctx: click.Context, new_dir: Path, old_dir: Path | None, output: Path | None, fail_on: str | None):
    """Diff every apiDocs-<group> document of NEW_DIR against OLD_DIR."""
    settings: DetectorSettings = ctx.obj
    grouped_changes = analyze_all_groups(new_dir, old_dir, settings=settings)
    if not grouped_changes:
        click.echo(f"No {settings.file_prefix}* documents found in {new_dir}.")

    report = build_grouped_report(grouped_changes)
    click.echo(format_grouped_report(report))

    if output:
        write_report(report, output)
        legacy_path = legacy_report_path(output)
        write_report(build_legacy_report(report, settings.main_group), legacy_path)
        click.echo(f"Grouped report saved to {output}")
        click.echo(f"Legacy report saved to {legacy_path}")

    summary = report.summary
    _write_github_output(summary.total_breaking_changes, summary.total_new_endpoints, summary.overall_risk_level)
    _check_fail_on(ctx, summary.overall_risk_level, fail_on)


@main.command()
@click.argument("service_name")
@click.argument("spec_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("target_dir", type=click.Path(path_type=Path))
@click.option("--services-root", default=None, type=click.Path(file_okay=False, path_type=Path), help="Root of the services/<name>/versions tree.")
@click.pass_context
def analyze(ctx: click.Context, service_name: str, spec_dir: Path, target_dir: Path, services_root: Path | None):
    """Detect changes of a service release against its latest previous version."""
    settings: DetectorSettings = ctx.obj
    if services_root is not None:
        settings = settings.model_copy(update={"services_root": str(services_root)})

    if spec_dir.resolve() == target_dir.resolve():
        raise UsageError("TARGET_DIR must differ from SPEC_DIR.", ctx=ctx)

    analyzer = ChangeAnalyzer(service_name, spec_dir, target_dir, settings=settings)
    try:
        result = analyzer.analyze()
    except (ApiDiffError, OSError) as e:
        raise click.ClickException(str(e)) from e

    if result.is_first_version:
        click.echo(f"First version of {service_name} - report saved to {result.report_path}")
    else:
        click.echo(f"Change analysis completed - report saved to {result.report_path}")


def run() -> None:
    """Console script entry point; usage errors exit with status 1."""
    try:
        code = main.main(standalone_mode=False)
    except click.UsageError as e:
        e.show()
        sys.exit(1)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(code if isinstance(code, int) else 0)
