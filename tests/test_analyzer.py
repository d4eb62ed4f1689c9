import json
from functools import cmp_to_key
from pathlib import Path
from unittest.mock import patch

import pytest

from api_change_detector.analyzer import (
    GROUPED_REPORT_FILE,
    REPORT_FILE,
    ChangeAnalyzer,
    compare_versions,
)
from api_change_detector.config import DetectorSettings
from api_change_detector.exceptions import SpecNotFoundError


def _write_spec(directory: Path, filename: str, paths: dict) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    f = directory / filename
    f.write_text(json.dumps({"openapi": "3.0.0", "paths": paths}), encoding="utf-8")
    return f


def _analyzer(tmp_path: Path, version: str = "v1.1.0") -> ChangeAnalyzer:
    settings = DetectorSettings(services_root=str(tmp_path / "services"))
    return ChangeAnalyzer(
        "petstore",
        tmp_path / "incoming",
        tmp_path / "services" / "petstore" / "versions" / version,
        settings=settings,
    )


class TestCompareVersions:
    def test_numeric_ordering(self):
        versions = ["v1.9.2", "v1.10.0", "v0.4.2", "1.2"]
        assert sorted(versions, key=cmp_to_key(compare_versions)) == ["v0.4.2", "1.2", "v1.9.2", "v1.10.0"]

    def test_missing_parts_count_as_zero(self):
        assert compare_versions("v1.2", "v1.2.0") == 0
        assert compare_versions("v1.2.1-beta", "v1.2.0") > 0


class TestFindNewSpec:
    def test_yaml_first(self, tmp_path):
        analyzer = _analyzer(tmp_path)
        _write_spec(analyzer.spec_dir, "apiDocs-all.json", {})
        (analyzer.spec_dir / "apiDocs-all.yaml").write_text("paths: {}\n")
        assert analyzer.find_new_spec().name == "apiDocs-all.yaml"

    def test_missing_main_spec(self, tmp_path):
        analyzer = _analyzer(tmp_path)
        _write_spec(analyzer.spec_dir, "apiDocs-api.json", {})
        with pytest.raises(SpecNotFoundError, match="apiDocs-api.json"):
            analyzer.find_new_spec()


class TestFindPreviousVersion:
    def test_no_versions_directory(self, tmp_path):
        assert _analyzer(tmp_path).find_previous_version() is None

    def test_newest_version_with_spec_excluding_current(self, tmp_path):
        analyzer = _analyzer(tmp_path)
        for version in ("v1.9.0", "v1.10.0"):
            _write_spec(analyzer.versions_dir / version, "apiDocs-all.json", {})
        (analyzer.versions_dir / "v1.11.0").mkdir()
        _write_spec(analyzer.versions_dir / "v2.0.0", "apiDocs-all.json", {})

        previous = analyzer.find_previous_version(current_version="v2.0.0")

        assert previous == analyzer.versions_dir / "v1.10.0"


class TestAnalyze:
    def test_first_version(self, tmp_path):
        analyzer = _analyzer(tmp_path)
        _write_spec(analyzer.spec_dir, "apiDocs-all.json", {"/items": {"get": {}}})

        result = analyzer.analyze()

        assert result.is_first_version is True
        report = json.loads((analyzer.target_dir / REPORT_FILE).read_text(encoding="utf-8"))
        assert report["summary"]["newEndpoints"] == "unknown"
        assert report["summary"]["riskLevel"] == "low"
        assert not (analyzer.target_dir / GROUPED_REPORT_FILE).exists()

    def test_grouped_run_writes_both_reports(self, tmp_path):
        analyzer = _analyzer(tmp_path)
        _write_spec(analyzer.spec_dir, "apiDocs-all.json", {"/items": {"get": {}, "post": {}}})
        _write_spec(analyzer.spec_dir, "apiDocs-api.json", {"/items": {"get": {}}})
        _write_spec(analyzer.versions_dir / "v1.0.0", "apiDocs-all.json", {"/items": {"get": {}}})

        result = analyzer.analyze()

        assert result.is_first_version is False
        assert result.previous_version_dir == analyzer.versions_dir / "v1.0.0"
        grouped = json.loads((analyzer.target_dir / GROUPED_REPORT_FILE).read_text(encoding="utf-8"))
        legacy = json.loads((analyzer.target_dir / REPORT_FILE).read_text(encoding="utf-8"))

        assert grouped["totalGroups"] == 2
        assert grouped["groups"]["api"]["groupInfo"]["hasOldVersion"] is False
        assert legacy["summary"] == grouped["groups"]["all"]["summary"]
        assert legacy["changes"]["newEndpoints"] == [{"path": "/items", "method": "POST", "summary": "No summary"}]

    def test_detection_failure_writes_error_report(self, tmp_path):
        analyzer = _analyzer(tmp_path)
        _write_spec(analyzer.spec_dir, "apiDocs-all.json", {})
        _write_spec(analyzer.versions_dir / "v1.0.0", "apiDocs-all.json", {})

        with patch("api_change_detector.analyzer.analyze_all_groups", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                analyzer.analyze()

        report = json.loads((analyzer.target_dir / REPORT_FILE).read_text(encoding="utf-8"))
        assert report["error"] == "boom"
        assert report["summary"]["riskLevel"] == "unknown"
