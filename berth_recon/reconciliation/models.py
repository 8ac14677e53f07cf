"""
Result types produced by the reconciliation core.

All of them are derived values: rebuilt on every call, never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from berth_recon.reconciliation.records import SourceRecord, TargetRecord

NOT_AVAILABLE = "N/A"


class DiscrepancyKind(Enum):
    """Kinds of PRS/MDMS discrepancy."""
    TYPE_MISMATCH = "TYPE_MISMATCH"
    MISSING_IN_TARGET = "MISSING_IN_TARGET"
    MISSING_IN_SOURCE = "MISSING_IN_SOURCE"


class DuplicateOrigin(Enum):
    """Where a duplicate group was found."""
    SOURCE_ONLY = "SOURCE_ONLY"
    TARGET_ONLY = "TARGET_ONLY"
    CROSS_SOURCE = "CROSS_SOURCE"


@dataclass(frozen=True)
class MatchResult:
    """The three partitions produced by the matcher."""

    type_mismatch: List[Tuple[SourceRecord, TargetRecord]] = field(default_factory=list)
    missing_in_target: List[SourceRecord] = field(default_factory=list)
    missing_in_source: List[TargetRecord] = field(default_factory=list)


@dataclass(frozen=True)
class Discrepancy:
    """
    A classified disagreement between the PRS and MDMS relations.

    Attributes:
        serial_no: Serial number of the row the discrepancy was found on
        coach_identifier: Coach code / coach identifier
        class_code: Travel class
        berth_number: Berth number
        kind: Discrepancy kind
        source_value: PRS berth type, or "N/A" when the PRS row is missing
        target_value: MDMS berth qualifier, or "N/A" when the MDMS row is missing
        details: Human-readable explanation
    """

    serial_no: Any
    coach_identifier: Optional[str]
    class_code: Optional[str]
    berth_number: Any
    kind: DiscrepancyKind
    source_value: Any
    target_value: Any
    details: str


@dataclass(frozen=True)
class DuplicateGroup:
    """
    A set of two or more rows sharing a grouping key.

    Attributes:
        group_key: Grouping key (raw for within-source groups, normalized
            join key for cross-source groups)
        members: Member serial numbers, ascending
        count: Number of members
        origin: Where the duplication was found
        source_members: PRS serial numbers in a cross-source group
        target_members: MDMS serial numbers in a cross-source group
    """

    group_key: Tuple[Any, ...]
    members: List[Any]
    count: int
    origin: DuplicateOrigin
    source_members: List[Any] = field(default_factory=list)
    target_members: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class DuplicateResult:
    """Duplicate groups by origin."""

    within_source: List[DuplicateGroup] = field(default_factory=list)
    within_target: List[DuplicateGroup] = field(default_factory=list)
    cross_source: List[DuplicateGroup] = field(default_factory=list)

    def all_groups(self) -> List[DuplicateGroup]:
        return self.within_source + self.within_target + self.cross_source


@dataclass(frozen=True)
class SummaryStatistics:
    """Aggregate view of a discrepancy run."""

    total_discrepancies: int
    per_kind_counts: Dict[DiscrepancyKind, int]
    per_kind_percentages: Dict[DiscrepancyKind, float]
    total_records_per_side: Dict[str, int]
    data_quality_score: float
    recommendation: str = ""


@dataclass(frozen=True)
class DuplicateSummary:
    """Aggregate view of a duplicate run."""

    group_counts: Dict[DuplicateOrigin, int]
    record_counts: Dict[DuplicateOrigin, int]
    integrity_score: float
