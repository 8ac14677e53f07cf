"""
Summary Aggregator

Reduces classified discrepancies and duplicate groups to counts,
percentages and a 0-100 quality score.
"""

import logging
import math
from typing import Dict, Iterable, Union

from berth_recon.reconciliation.models import (
    Discrepancy,
    DiscrepancyKind,
    DuplicateGroup,
    DuplicateOrigin,
    DuplicateResult,
    DuplicateSummary,
    SummaryStatistics,
)

logger = logging.getLogger(__name__)


def percentage(count: int, total: int) -> float:
    """
    Percentage with two decimals, rounded half up.

    Scales by 10000, rounds to an integer and divides by 100. A zero total
    gives 0.0.
    """
    if total <= 0:
        return 0.0
    return math.floor(count * 10000 / total + 0.5) / 100


def score(clean: int, total: int) -> float:
    """Share of clean records as a 0-100 score; 100 for an empty base."""
    if total <= 0:
        return 100.0
    return min(100.0, max(0.0, percentage(clean, total)))


def recommendation(quality_score: float) -> str:
    """Get recommendation based on a quality score."""
    if quality_score >= 100:
        return "No action needed - PRS and MDMS are fully consistent"
    if quality_score >= 99:
        return "Minor discrepancies detected - review during the next data refresh"
    if quality_score >= 95:
        return "Moderate discrepancies detected - reconciliation recommended"
    return "Significant discrepancies detected - immediate reconciliation required"


def summarize(
    discrepancies: Iterable[Discrepancy],
    source_count: int,
    target_count: int
) -> SummaryStatistics:
    """
    Summarize a discrepancy run.

    Args:
        discrepancies: Classified discrepancies
        source_count: Number of PRS rows reconciled
        target_count: Number of MDMS rows reconciled

    Returns:
        SummaryStatistics with per-kind counts and percentages and the
        data quality score, (max(|PRS|, |MDMS|) - discrepancies) / max * 100
    """
    counts: Dict[DiscrepancyKind, int] = {kind: 0 for kind in DiscrepancyKind}
    for discrepancy in discrepancies:
        counts[discrepancy.kind] += 1

    total = sum(counts.values())
    percentages = {kind: percentage(count, total) for kind, count in counts.items()}

    possible_matches = max(source_count, target_count)
    quality = score(possible_matches - total, possible_matches)

    logger.info(
        f"Summary: {total} discrepancies over {source_count} PRS / "
        f"{target_count} MDMS rows, data quality score {quality}"
    )

    return SummaryStatistics(
        total_discrepancies=total,
        per_kind_counts=counts,
        per_kind_percentages=percentages,
        total_records_per_side={"source": source_count, "target": target_count},
        data_quality_score=quality,
        recommendation=recommendation(quality),
    )


def summarize_duplicates(
    groups: Union[DuplicateResult, Iterable[DuplicateGroup]],
    source_count: int = 0,
    target_count: int = 0
) -> DuplicateSummary:
    """
    Summarize duplicate groups.

    The integrity score counts every extra copy inside a within-PRS or
    within-MDMS group (count - 1 per group) as unclean, against the larger
    of the two relations. Cross-table groups re-describe the same rows and
    do not lower the score.

    Args:
        groups: DuplicateResult or any iterable of groups
        source_count: Number of PRS rows
        target_count: Number of MDMS rows

    Returns:
        DuplicateSummary with group and record counts per origin
    """
    if isinstance(groups, DuplicateResult):
        groups = groups.all_groups()

    group_counts: Dict[DuplicateOrigin, int] = {origin: 0 for origin in DuplicateOrigin}
    record_counts: Dict[DuplicateOrigin, int] = {origin: 0 for origin in DuplicateOrigin}
    redundant = 0

    for group in groups:
        group_counts[group.origin] += 1
        record_counts[group.origin] += group.count
        if group.origin is not DuplicateOrigin.CROSS_SOURCE:
            redundant += group.count - 1

    within_records = (
        record_counts[DuplicateOrigin.SOURCE_ONLY] + record_counts[DuplicateOrigin.TARGET_ONLY]
    )
    base = max(source_count, target_count, within_records)
    integrity = score(base - redundant, base)

    logger.info(
        f"Duplicate summary: {sum(group_counts.values())} groups, "
        f"{redundant} redundant rows, integrity score {integrity}"
    )

    return DuplicateSummary(
        group_counts=group_counts,
        record_counts=record_counts,
        integrity_score=integrity,
    )
