"""Service-level change analysis.

Finds the new release's documents and the latest previous version of a
service, runs the grouped diff and writes the JSON reports into the target
version directory.
"""

import json
import logging
import re
from functools import cmp_to_key
from pathlib import Path

from pydantic import BaseModel

from api_change_detector.config import DetectorSettings, get_settings
from api_change_detector.diff.groups import analyze_all_groups
from api_change_detector.diff.models import ErrorReport, FirstVersionReport, GroupResult, ReportModel
from api_change_detector.diff.report import build_grouped_report, build_legacy_report
from api_change_detector.exceptions import SpecNotFoundError

logger = logging.getLogger(__name__)

REPORT_FILE = "changes-report.json"
GROUPED_REPORT_FILE = "changes-report-grouped.json"


def compare_versions(a: str, b: str) -> int:
    """Compare version directory names numerically: v1.10.0 > v1.9.2."""
    a_parts = _version_parts(a)
    b_parts = _version_parts(b)
    length = max(len(a_parts), len(b_parts))
    a_parts += [0] * (length - len(a_parts))
    b_parts += [0] * (length - len(b_parts))
    for x, y in zip(a_parts, b_parts):
        if x != y:
            return x - y
    return 0


def _version_parts(version: str) -> list[int]:
    parts = []
    for part in re.sub(r"^v", "", version).split("."):
        match = re.match(r"\d+", part)
        parts.append(int(match.group()) if match else 0)
    return parts


def write_report(report: ReportModel, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    return path


class AnalysisResult(BaseModel):
    """Outcome of one service-level run."""

    is_first_version: bool
    report_path: Path
    grouped_changes: dict[str, GroupResult] | None = None
    previous_version_dir: Path | None = None


class ChangeAnalyzer:
    """Runs change detection for one release of one service."""

    def __init__(
        self,
        service_name: str,
        spec_dir: Path | str,
        target_dir: Path | str,
        settings: DetectorSettings | None = None,
    ):
        self.service_name = service_name
        self.spec_dir = Path(spec_dir).resolve()
        self.target_dir = Path(target_dir).resolve()
        self.settings = settings or get_settings()
        self.versions_dir = Path(self.settings.services_root) / service_name / "versions"

    def find_new_spec(self) -> Path:
        """Locate the main document of the new release (YAML first)."""
        for name in self.settings.main_spec_names():
            spec_path = self.spec_dir / name
            if spec_path.exists():
                logger.info("Found new spec: %s", name)
                return spec_path

        available = sorted(p.name for p in self.spec_dir.iterdir()) if self.spec_dir.is_dir() else []
        raise SpecNotFoundError(
            f"No {' or '.join(self.settings.main_spec_names())} found in {self.spec_dir}"
            f" (available: {', '.join(available) or 'none'})"
        )

    def find_previous_version(self, current_version: str | None = None) -> Path | None:
        """Newest version directory, other than ``current_version``, that has a main document."""
        if not self.versions_dir.is_dir():
            logger.info("No previous versions found for %s", self.service_name)
            return None

        versions = [p.name for p in self.versions_dir.iterdir() if p.is_dir()]
        if current_version:
            versions = [v for v in versions if v != current_version]
        versions.sort(key=cmp_to_key(compare_versions), reverse=True)

        for version in versions:
            version_dir = self.versions_dir / version
            for name in self.settings.main_spec_names():
                if (version_dir / name).exists():
                    logger.info("Found previous spec: %s/%s", version, name)
                    return version_dir

        logger.info("No spec files found in previous versions of %s", self.service_name)
        return None

    def analyze(self) -> AnalysisResult:
        logger.info("Detecting changes for %s", self.service_name)
        self.find_new_spec()
        previous = self.find_previous_version(self.target_dir.name)

        self.target_dir.mkdir(parents=True, exist_ok=True)
        if previous is None:
            logger.info("First version for %s - no comparison possible", self.service_name)
            path = write_report(FirstVersionReport(), self.target_dir / REPORT_FILE)
            return AnalysisResult(is_first_version=True, report_path=path)

        logger.info("Comparing with previous version: %s", previous)
        return self.run_change_detection(previous)

    def run_change_detection(self, previous_dir: Path) -> AnalysisResult:
        try:
            grouped_changes = analyze_all_groups(self.spec_dir, previous_dir, settings=self.settings)
            grouped = build_grouped_report(grouped_changes)
            grouped_path = write_report(grouped, self.target_dir / GROUPED_REPORT_FILE)
            write_report(build_legacy_report(grouped, self.settings.main_group), self.target_dir / REPORT_FILE)
        except Exception as e:
            logger.exception("Error during change detection for %s", self.service_name)
            write_report(ErrorReport(error=str(e)), self.target_dir / REPORT_FILE)
            raise

        logger.info("Change detection completed for %s", self.service_name)
        return AnalysisResult(
            is_first_version=False,
            report_path=grouped_path,
            grouped_changes=grouped_changes,
            previous_version_dir=previous_dir,
        )
