"""Risk classification from change counts.

Group-level and overall thresholds differ on purpose: an aggregate over many
groups tolerates more changes before escalating.
"""

from enum import Enum


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    UNKNOWN = "unknown"  # analysis failed; outside the ordering

    @property
    def rank(self) -> int | None:
        return _RANK.get(self)

    def at_least(self, other: "RiskLevel") -> bool:
        if self.rank is None or other.rank is None:
            return False
        return self.rank >= other.rank


_RANK = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2, RiskLevel.CRITICAL: 3}

# (critical above, high above, medium above) for breaking; medium above for modified
GROUP_THRESHOLDS = (5, 2, 0, 10)
OVERALL_THRESHOLDS = (10, 5, 0, 20)


def _classify(breaking: int, modified: int, thresholds: tuple[int, int, int, int]) -> RiskLevel:
    critical, high, medium, modified_medium = thresholds
    if breaking > critical:
        return RiskLevel.CRITICAL
    if breaking > high:
        return RiskLevel.HIGH
    if breaking > medium or modified > modified_medium:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def classify_group(breaking: int, modified: int) -> RiskLevel:
    """Risk level of a single document pair."""
    return _classify(breaking, modified, GROUP_THRESHOLDS)


def classify_overall(total_breaking: int, total_modified: int) -> RiskLevel:
    """Risk level of a whole grouped run."""
    return _classify(total_breaking, total_modified, OVERALL_THRESHOLDS)
