"""
End-to-end reconciliation runs.

Chains matcher, classifier, aggregator and report assembler (and the
duplicate path) for callers that just want the finished document.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from berth_recon.reconciliation.aggregator import summarize, summarize_duplicates
from berth_recon.reconciliation.classifier import classify
from berth_recon.reconciliation.duplicates import find_duplicates
from berth_recon.reconciliation.filters import (
    filter_discrepancies,
    filter_duplicate_groups,
    parse_kind,
    parse_origin,
)
from berth_recon.reconciliation.matcher import SourceRows, TargetRows, match
from berth_recon.reconciliation.models import (
    Discrepancy,
    DiscrepancyKind,
    DuplicateOrigin,
    DuplicateResult,
    DuplicateSummary,
    SummaryStatistics,
)
from berth_recon.reconciliation.records import as_source_records, as_target_records
from berth_recon.reconciliation.report import (
    build_detailed_summary,
    build_discrepancy_report,
    build_duplicate_report,
    summary_to_dict,
)

logger = logging.getLogger(__name__)


def analyze_discrepancies(
    source_rows: SourceRows,
    target_rows: TargetRows
) -> Tuple[List[Discrepancy], SummaryStatistics]:
    """
    Match, classify and summarize.

    Args:
        source_rows: PRS rows
        target_rows: MDMS rows

    Returns:
        (discrepancies, summary)
    """
    sources = as_source_records(source_rows)
    targets = as_target_records(target_rows)

    discrepancies = classify(match(sources, targets))
    return discrepancies, summarize(discrepancies, len(sources), len(targets))


def analyze_duplicates(
    source_rows: SourceRows,
    target_rows: TargetRows
) -> Tuple[DuplicateResult, DuplicateSummary]:
    """
    Group duplicates and summarize.

    Args:
        source_rows: PRS rows
        target_rows: MDMS rows

    Returns:
        (duplicate groups by origin, summary)
    """
    sources = as_source_records(source_rows)
    targets = as_target_records(target_rows)

    result = find_duplicates(sources, targets)
    return result, summarize_duplicates(result, len(sources), len(targets))


def render_discrepancies(
    discrepancies: List[Discrepancy],
    summary: SummaryStatistics,
    kind: Optional[Union[str, DiscrepancyKind]] = None,
    coach_identifier: Optional[str] = None
) -> Dict[str, Any]:
    """
    Filter discrepancies and assemble the report document.

    The summary always covers every discrepancy; the filters only narrow
    the returned rows.
    """
    if kind is not None:
        kind = parse_kind(kind)

    selected = filter_discrepancies(discrepancies, kind=kind, coach_identifier=coach_identifier)
    report = build_discrepancy_report(selected, summary)
    report["count"] = len(selected)
    report["filters"] = {
        "kind": kind.value if kind is not None else None,
        "coachIdentifier": coach_identifier,
    }
    return report


def render_duplicates(
    result: DuplicateResult,
    summary: DuplicateSummary,
    origin: Optional[Union[str, DuplicateOrigin]] = None,
    coach_identifier: Optional[str] = None
) -> Dict[str, Any]:
    """Filter duplicate groups and assemble the report document."""
    if origin is not None:
        origin = parse_origin(origin)

    selected = filter_duplicate_groups(
        result.all_groups(), origin=origin, coach_identifier=coach_identifier
    )
    report = build_duplicate_report(selected, summary)
    report["filters"] = {
        "origin": origin.value if origin is not None else None,
        "coachIdentifier": coach_identifier,
    }
    return report


def reconcile_discrepancies(
    source_rows: SourceRows,
    target_rows: TargetRows,
    kind: Optional[Union[str, DiscrepancyKind]] = None,
    coach_identifier: Optional[str] = None
) -> Dict[str, Any]:
    """
    Find, classify and summarize PRS/MDMS discrepancies.

    Args:
        source_rows: PRS rows
        target_rows: MDMS rows
        kind: Optional discrepancy kind filter
        coach_identifier: Optional coach filter

    Returns:
        Discrepancy report document

    Raises:
        InvalidFilterError: If ``kind`` is not recognized (checked before
            any matching is done)
    """
    if kind is not None:
        kind = parse_kind(kind)

    discrepancies, summary = analyze_discrepancies(source_rows, target_rows)
    return render_discrepancies(discrepancies, summary, kind=kind, coach_identifier=coach_identifier)


def discrepancy_summary(source_rows: SourceRows, target_rows: TargetRows) -> Dict[str, Any]:
    """Summary statistics only."""
    _, summary = analyze_discrepancies(source_rows, target_rows)
    return summary_to_dict(summary)


def detailed_summary(source_rows: SourceRows, target_rows: TargetRows) -> Dict[str, Any]:
    """Overview and per-kind breakdown."""
    _, summary = analyze_discrepancies(source_rows, target_rows)
    return build_detailed_summary(summary)


def reconcile_duplicates(
    source_rows: SourceRows,
    target_rows: TargetRows,
    origin: Optional[Union[str, DuplicateOrigin]] = None,
    coach_identifier: Optional[str] = None
) -> Dict[str, Any]:
    """
    Find and summarize duplicate groups.

    Args:
        source_rows: PRS rows
        target_rows: MDMS rows
        origin: Optional duplicate origin filter
        coach_identifier: Optional coach filter

    Returns:
        Duplicate report document

    Raises:
        InvalidFilterError: If ``origin`` is not recognized (checked before
            any grouping is done)
    """
    if origin is not None:
        origin = parse_origin(origin)

    result, summary = analyze_duplicates(source_rows, target_rows)
    return render_duplicates(result, summary, origin=origin, coach_identifier=coach_identifier)
