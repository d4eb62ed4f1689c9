"""Report assembly and plain-text rendering."""

from api_change_detector.config import MAIN_GROUP

from .models import (
    ChangeLists,
    ChangeSet,
    ChangeSummary,
    ChangeType,
    GroupedReport,
    GroupResult,
    LegacyReport,
    OverallSummary,
)
from .risk import RiskLevel, classify_overall

CHANGE_TYPE_LABELS = {
    ChangeType.ENDPOINT_REMOVED: "Endpoint removed",
    ChangeType.METHOD_REMOVED: "Method removed",
    ChangeType.REQUIRED_PARAMETER_ADDED: "Required parameter added",
    ChangeType.RESPONSE_SCHEMA_CHANGED: "Response schema changed",
}

RISK_LABELS = {
    RiskLevel.LOW: "LOW",
    RiskLevel.MEDIUM: "MEDIUM",
    RiskLevel.HIGH: "HIGH",
    RiskLevel.CRITICAL: "CRITICAL",
    RiskLevel.UNKNOWN: "UNKNOWN",
}


def overall_summary(groups: dict[str, GroupResult]) -> OverallSummary:
    """Sum the group summaries and classify the totals with the overall thresholds."""
    breaking = sum(g.summary.breaking_changes for g in groups.values())
    new = sum(g.summary.new_endpoints for g in groups.values())
    modified = sum(g.summary.modified_endpoints for g in groups.values())
    return OverallSummary(
        total_breaking_changes=breaking,
        total_new_endpoints=new,
        total_modified_endpoints=modified,
        overall_risk_level=classify_overall(breaking, modified),
    )


def build_grouped_report(grouped_changes: dict[str, GroupResult]) -> GroupedReport:
    return GroupedReport(
        total_groups=len(grouped_changes),
        groups=dict(grouped_changes),
        summary=overall_summary(grouped_changes),
    )


def build_legacy_report(grouped: GroupedReport, main_group: str = MAIN_GROUP) -> LegacyReport:
    """Collapse a grouped report into the single-document shape.

    The main group is used as-is when present; otherwise every group's lists
    are concatenated (duplicates kept) under the overall summary.
    """
    main = grouped.groups.get(main_group)
    if main is not None:
        return LegacyReport(generated_at=grouped.generated_at, summary=main.summary, changes=main.changes())

    changes = ChangeLists()
    for group in grouped.groups.values():
        changes.breaking.extend(group.breaking)
        changes.new_endpoints.extend(group.new_endpoints)
        changes.modified_endpoints.extend(group.modified_endpoints)

    return LegacyReport(generated_at=grouped.generated_at, summary=grouped.summary, changes=changes)


def build_change_report(changes: ChangeSet) -> LegacyReport:
    """Report for a single document pair."""
    return LegacyReport(
        summary=changes.summary,
        changes=ChangeLists(
            breaking=changes.breaking,
            new_endpoints=changes.new_endpoints,
            modified_endpoints=changes.modified_endpoints,
        ),
    )


def format_change_report(report: LegacyReport) -> str:
    summary = report.summary
    changes = report.changes
    if isinstance(summary, ChangeSummary):
        risk = summary.risk_level
    else:
        risk = summary.overall_risk_level

    lines = [
        "=== API Change Report ===",
        f"Breaking Changes: {len(changes.breaking)}",
        f"New Endpoints: {len(changes.new_endpoints)}",
        f"Modified Endpoints: {len(changes.modified_endpoints)}",
        f"Risk Level: {RISK_LABELS[risk]}",
    ]

    if changes.breaking:
        lines += ["", "Breaking Changes:"]
        for i, change in enumerate(changes.breaking, 1):
            lines.append(f"  {i}. [{CHANGE_TYPE_LABELS[change.type]}] {change.method} {change.path}")
            lines.append(f"     {change.description}")

    if changes.new_endpoints:
        lines += ["", "New Endpoints:"]
        for i, endpoint in enumerate(changes.new_endpoints, 1):
            lines.append(f"  {i}. {endpoint.method} {endpoint.path}")
            lines.append(f"     {endpoint.summary}")

    if changes.modified_endpoints:
        lines += ["", "Modified Endpoints:"]
        for i, endpoint in enumerate(changes.modified_endpoints, 1):
            lines.append(f"  {i}. {endpoint.method} {endpoint.path}")
            lines.append(f"     Changes: {', '.join(endpoint.changes)}")

    return "\n".join(lines)


def format_grouped_report(report: GroupedReport) -> str:
    summary = report.summary
    lines = [
        "=== Grouped API Change Report ===",
        f"Total Groups: {report.total_groups}",
        f"Overall Breaking Changes: {summary.total_breaking_changes}",
        f"Overall New Endpoints: {summary.total_new_endpoints}",
        f"Overall Modified Endpoints: {summary.total_modified_endpoints}",
        f"Overall Risk Level: {RISK_LABELS[summary.overall_risk_level]}",
    ]
    for group in report.groups.values():
        s = group.summary
        lines += [
            "",
            f"{group.group_info.display_name}:",
            f"   Breaking: {s.breaking_changes}, New: {s.new_endpoints}, "
            f"Modified: {s.modified_endpoints}, Risk: {s.risk_level.value}",
        ]
        if group.group_info.error:
            lines.append(f"   Error: {group.group_info.error}")
    return "\n".join(lines)
