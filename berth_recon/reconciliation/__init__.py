"""
Reconciliation Module for PRS/MDMS Berth Data

This module compares the PRS berth relation with the MDMS coach layout
relation, classifies their disagreements and groups duplicated rows.

Main components:
- normalizer: Value canonicalization
- matcher: Join on (coach, class, berth number) and set operations
- classifier: Discrepancy labelling
- duplicates: Duplicate grouping within and across relations
- aggregator: Counts, percentages and quality scores
- report: Dictionary documents for JSON and workbook export

Usage:
    from berth_recon.reconciliation import match, classify, summarize

    partitions = match(prs_rows, mdms_rows)
    discrepancies = classify(partitions)
    summary = summarize(discrepancies, len(prs_rows), len(mdms_rows))
"""

from berth_recon.reconciliation.aggregator import summarize, summarize_duplicates
from berth_recon.reconciliation.classifier import classify
from berth_recon.reconciliation.duplicates import find_duplicates
from berth_recon.reconciliation.errors import InputShapeError, InvalidFilterError, ReconciliationError
from berth_recon.reconciliation.filters import filter_discrepancies, filter_duplicate_groups
from berth_recon.reconciliation.matcher import match
from berth_recon.reconciliation.models import (
    Discrepancy,
    DiscrepancyKind,
    DuplicateGroup,
    DuplicateOrigin,
    DuplicateResult,
    DuplicateSummary,
    MatchResult,
    SummaryStatistics,
)
from berth_recon.reconciliation.normalizer import normalize
from berth_recon.reconciliation.records import SourceRecord, TargetRecord, join_key
from berth_recon.reconciliation.runner import (
    analyze_discrepancies,
    analyze_duplicates,
    detailed_summary,
    discrepancy_summary,
    reconcile_discrepancies,
    reconcile_duplicates,
    render_discrepancies,
    render_duplicates,
)

__all__ = [
    "normalize",
    "SourceRecord",
    "TargetRecord",
    "join_key",
    "match",
    "classify",
    "find_duplicates",
    "summarize",
    "summarize_duplicates",
    "filter_discrepancies",
    "filter_duplicate_groups",
    "reconcile_discrepancies",
    "reconcile_duplicates",
    "discrepancy_summary",
    "detailed_summary",
    "analyze_discrepancies",
    "analyze_duplicates",
    "render_discrepancies",
    "render_duplicates",
    "Discrepancy",
    "DiscrepancyKind",
    "DuplicateGroup",
    "DuplicateOrigin",
    "DuplicateResult",
    "DuplicateSummary",
    "MatchResult",
    "SummaryStatistics",
    "ReconciliationError",
    "InvalidFilterError",
    "InputShapeError",
]
