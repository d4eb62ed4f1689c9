"""Change records, summaries and report models.

Field names are snake_case in Python and camelCase on the wire; dump with
``to_dict()`` to get the exact JSON report shape.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_serializer
from pydantic.alias_generators import to_camel

from .risk import RiskLevel, classify_group


class ChangeType(str, Enum):
    ENDPOINT_REMOVED = "ENDPOINT_REMOVED"
    METHOD_REMOVED = "METHOD_REMOVED"
    REQUIRED_PARAMETER_ADDED = "REQUIRED_PARAMETER_ADDED"
    RESPONSE_SCHEMA_CHANGED = "RESPONSE_SCHEMA_CHANGED"


def utc_timestamp() -> str:
    """ISO 8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ReportModel(BaseModel):
    """Base for everything that ends up in a JSON report."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Fields dropped from the output when they are None.
    omit_when_none: ClassVar[tuple[str, ...]] = ()

    @model_serializer(mode="wrap")
    def drop_unset_optionals(self, handler):
        data = handler(self)
        for name in self.omit_when_none:
            alias = type(self).model_fields[name].alias or name
            for key in (name, alias):
                if key in data and data[key] is None:
                    del data[key]
        return data

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ParameterRef(ReportModel):
    name: str
    location: str


class NewEndpoint(ReportModel):
    path: str
    method: str  # uppercase
    summary: str


class BreakingChange(ReportModel):
    omit_when_none: ClassVar[tuple[str, ...]] = ("parameter", "status_code")

    type: ChangeType
    path: str
    method: str
    description: str
    parameter: ParameterRef | None = None
    status_code: str | None = None


class ModifiedEndpoint(ReportModel):
    path: str
    method: str
    changes: list[str]


class ChangeSummary(ReportModel):
    breaking_changes: int = 0
    new_endpoints: int = 0
    modified_endpoints: int = 0
    risk_level: RiskLevel = RiskLevel.LOW


class ChangeSet(ReportModel):
    """The three change categories for one document pair."""

    breaking: list[BreakingChange] = Field(default_factory=list)
    new_endpoints: list[NewEndpoint] = Field(default_factory=list)
    modified_endpoints: list[ModifiedEndpoint] = Field(default_factory=list)

    @computed_field
    @property
    def summary(self) -> ChangeSummary:
        return ChangeSummary(
            breaking_changes=len(self.breaking),
            new_endpoints=len(self.new_endpoints),
            modified_endpoints=len(self.modified_endpoints),
            risk_level=classify_group(len(self.breaking), len(self.modified_endpoints)),
        )

    def is_empty(self) -> bool:
        return not (self.breaking or self.new_endpoints or self.modified_endpoints)


class ChangeLists(ReportModel):
    breaking: list[BreakingChange] = Field(default_factory=list)
    new_endpoints: list[NewEndpoint] = Field(default_factory=list)
    modified_endpoints: list[ModifiedEndpoint] = Field(default_factory=list)


class Group(ReportModel):
    """A named sub-document discovered by file name convention."""

    name: str
    display_name: str
    new_path: str
    old_path: str | None = None


class GroupInfo(ReportModel):
    omit_when_none: ClassVar[tuple[str, ...]] = ("error",)

    name: str
    display_name: str
    has_old_version: bool
    new_file_path: str
    old_file_path: str | None = None
    error: str | None = None

    @classmethod
    def for_group(cls, group: Group, error: str | None = None) -> "GroupInfo":
        return cls(
            name=group.name,
            display_name=group.display_name,
            has_old_version=group.old_path is not None,
            new_file_path=group.new_path,
            old_file_path=group.old_path,
            error=error,
        )


class GroupResult(ReportModel):
    breaking: list[BreakingChange] = Field(default_factory=list)
    new_endpoints: list[NewEndpoint] = Field(default_factory=list)
    modified_endpoints: list[ModifiedEndpoint] = Field(default_factory=list)
    summary: ChangeSummary
    group_info: GroupInfo

    @classmethod
    def from_change_set(cls, changes: ChangeSet, group: Group) -> "GroupResult":
        return cls(
            breaking=changes.breaking,
            new_endpoints=changes.new_endpoints,
            modified_endpoints=changes.modified_endpoints,
            summary=changes.summary,
            group_info=GroupInfo.for_group(group),
        )

    @classmethod
    def failed(cls, group: Group, error: str) -> "GroupResult":
        return cls(
            summary=ChangeSummary(risk_level=RiskLevel.UNKNOWN),
            group_info=GroupInfo.for_group(group, error=error),
        )

    def changes(self) -> ChangeLists:
        return ChangeLists(
            breaking=self.breaking,
            new_endpoints=self.new_endpoints,
            modified_endpoints=self.modified_endpoints,
        )


class OverallSummary(ReportModel):
    total_breaking_changes: int = 0
    total_new_endpoints: int = 0
    total_modified_endpoints: int = 0
    overall_risk_level: RiskLevel = RiskLevel.LOW


class GroupedReport(ReportModel):
    generated_at: str = Field(default_factory=utc_timestamp)
    total_groups: int
    groups: dict[str, GroupResult]
    summary: OverallSummary


class LegacyReport(ReportModel):
    """Single-document report consumed by the older tooling."""

    generated_at: str = Field(default_factory=utc_timestamp)
    summary: ChangeSummary | OverallSummary
    changes: ChangeLists


class FirstVersionSummary(ReportModel):
    breaking_changes: int = 0
    new_endpoints: str = "unknown"
    modified_endpoints: int = 0
    risk_level: RiskLevel = RiskLevel.LOW


class FirstVersionReport(ReportModel):
    """Written when a service has no previous version at all."""

    generated_at: str = Field(default_factory=utc_timestamp)
    summary: FirstVersionSummary = Field(default_factory=FirstVersionSummary)
    changes: ChangeLists = Field(default_factory=ChangeLists)
    note: str = "First version - no previous version to compare"


class ErrorReport(ReportModel):
    """Written when change detection fails before producing any group result."""

    generated_at: str = Field(default_factory=utc_timestamp)
    summary: ChangeSummary = Field(default_factory=lambda: ChangeSummary(risk_level=RiskLevel.UNKNOWN))
    changes: ChangeLists = Field(default_factory=ChangeLists)
    error: str
    note: str = "Change detection failed - see error field for details"
