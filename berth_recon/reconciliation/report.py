"""
Report Assembler

Shapes discrepancies, duplicate groups and summaries into plain nested
dictionaries (camelCase keys) for JSON serialization and for the external
workbook writer. No computation beyond renaming and reshaping.
"""

from typing import Any, Dict, Iterable, List, Union

from berth_recon.reconciliation.models import (
    Discrepancy,
    DiscrepancyKind,
    DuplicateGroup,
    DuplicateOrigin,
    DuplicateResult,
    DuplicateSummary,
    SummaryStatistics,
)

KIND_LABELS = {
    DiscrepancyKind.TYPE_MISMATCH: "Type Mismatches",
    DiscrepancyKind.MISSING_IN_TARGET: "Missing in MDMS",
    DiscrepancyKind.MISSING_IN_SOURCE: "Missing in PRS",
}

KIND_KEYS = {
    DiscrepancyKind.TYPE_MISMATCH: "typeMismatch",
    DiscrepancyKind.MISSING_IN_TARGET: "missingInTarget",
    DiscrepancyKind.MISSING_IN_SOURCE: "missingInSource",
}

ORIGIN_LABELS = {
    DuplicateOrigin.SOURCE_ONLY: "Within PRS",
    DuplicateOrigin.TARGET_ONLY: "Within MDMS",
    DuplicateOrigin.CROSS_SOURCE: "Cross Table",
}

ORIGIN_KEYS = {
    DuplicateOrigin.SOURCE_ONLY: "withinSource",
    DuplicateOrigin.TARGET_ONLY: "withinTarget",
    DuplicateOrigin.CROSS_SOURCE: "crossSource",
}

DISCREPANCY_COLUMNS = [
    ("Serial No", "serialNo"),
    ("Coach Code", "coachIdentifier"),
    ("Class", "classCode"),
    ("Berth Number", "berthNumber"),
    ("PRS Berth Type", "sourceValue"),
    ("MDMS Berth Qualifier", "targetValue"),
    ("Discrepancy Type", "kind"),
    ("Details", "details"),
]


def discrepancy_to_dict(discrepancy: Discrepancy) -> Dict[str, Any]:
    return {
        "serialNo": discrepancy.serial_no,
        "coachIdentifier": discrepancy.coach_identifier,
        "classCode": discrepancy.class_code,
        "berthNumber": discrepancy.berth_number,
        "kind": discrepancy.kind.value,
        "sourceValue": discrepancy.source_value,
        "targetValue": discrepancy.target_value,
        "details": discrepancy.details,
    }


def duplicate_group_to_dict(group: DuplicateGroup) -> Dict[str, Any]:
    result = {
        "groupKey": list(group.group_key),
        "members": list(group.members),
        "count": group.count,
        "origin": group.origin.value,
    }
    if group.origin is DuplicateOrigin.CROSS_SOURCE:
        result["sourceMembers"] = list(group.source_members)
        result["targetMembers"] = list(group.target_members)
    return result


def summary_to_dict(summary: SummaryStatistics) -> Dict[str, Any]:
    return {
        "totalDiscrepancies": summary.total_discrepancies,
        "perKindCounts": {kind.value: count for kind, count in summary.per_kind_counts.items()},
        "perKindPercentages": {
            kind.value: pct for kind, pct in summary.per_kind_percentages.items()
        },
        "totalRecordsPerSide": dict(summary.total_records_per_side),
        "dataQualityScore": summary.data_quality_score,
        "recommendation": summary.recommendation,
    }


def duplicate_summary_to_dict(summary: DuplicateSummary) -> Dict[str, Any]:
    return {
        "groupCounts": {origin.value: n for origin, n in summary.group_counts.items()},
        "recordCounts": {origin.value: n for origin, n in summary.record_counts.items()},
        "totalGroups": sum(summary.group_counts.values()),
        "integrityScore": summary.integrity_score,
    }


def build_discrepancy_report(
    discrepancies: Iterable[Discrepancy],
    summary: SummaryStatistics
) -> Dict[str, Any]:
    """
    Assemble the full discrepancy document.

    Returns:
        Dictionary with summary, the flat discrepancy list and the same
        rows grouped by kind
    """
    rows = [discrepancy_to_dict(d) for d in discrepancies]
    by_kind: Dict[str, List[Dict[str, Any]]] = {key: [] for key in KIND_KEYS.values()}
    for row in rows:
        by_kind[KIND_KEYS[DiscrepancyKind(row["kind"])]].append(row)

    return {
        "summary": summary_to_dict(summary),
        "totalDiscrepancies": summary.total_discrepancies,
        "discrepancies": rows,
        "byKind": by_kind,
    }


def build_detailed_summary(summary: SummaryStatistics) -> Dict[str, Any]:
    """Overview plus per-kind breakdown."""
    counts = summary.per_kind_counts
    percentages = summary.per_kind_percentages

    return {
        "overview": {
            "totalPrsRecords": summary.total_records_per_side.get("source", 0),
            "totalMdmsRecords": summary.total_records_per_side.get("target", 0),
            "totalDiscrepancies": summary.total_discrepancies,
            "dataQualityScore": summary.data_quality_score,
            "recommendation": summary.recommendation,
        },
        "discrepancyBreakdown": {
            "typeMismatchCount": counts[DiscrepancyKind.TYPE_MISMATCH],
            "missingInPrsCount": counts[DiscrepancyKind.MISSING_IN_SOURCE],
            "missingInMdmsCount": counts[DiscrepancyKind.MISSING_IN_TARGET],
            "typeMismatchPercentage": percentages[DiscrepancyKind.TYPE_MISMATCH],
            "missingInPrsPercentage": percentages[DiscrepancyKind.MISSING_IN_SOURCE],
            "missingInMdmsPercentage": percentages[DiscrepancyKind.MISSING_IN_TARGET],
        },
    }


def build_duplicate_report(
    groups: Union[DuplicateResult, Iterable[DuplicateGroup]],
    summary: DuplicateSummary
) -> Dict[str, Any]:
    """
    Assemble the duplicate document.

    Returns:
        Dictionary with summary, the flat group list and groups by origin
    """
    if isinstance(groups, DuplicateResult):
        groups = groups.all_groups()

    rows = [duplicate_group_to_dict(g) for g in groups]
    by_origin: Dict[str, List[Dict[str, Any]]] = {key: [] for key in ORIGIN_KEYS.values()}
    for row in rows:
        by_origin[ORIGIN_KEYS[DuplicateOrigin(row["origin"])]].append(row)

    return {
        "summary": duplicate_summary_to_dict(summary),
        "totalGroups": len(rows),
        "groups": rows,
        "byOrigin": by_origin,
    }


def _discrepancy_sheet_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {header: row[key] for header, key in DISCREPANCY_COLUMNS}


def discrepancy_sheets(
    discrepancies: Iterable[Discrepancy],
    summary: SummaryStatistics
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Tabular layout for a workbook writer.

    Returns:
        Sheet name mapped to a list of rows (column header -> cell value):
        "Summary", "All Discrepancies" and one sheet per kind
    """
    summary_rows = [{
        "Metric": "Total Discrepancies",
        "Value": summary.total_discrepancies,
        "Percentage": 100.0 if summary.total_discrepancies else 0.0,
    }]
    for kind, label in KIND_LABELS.items():
        summary_rows.append({
            "Metric": label,
            "Value": summary.per_kind_counts[kind],
            "Percentage": summary.per_kind_percentages[kind],
        })
    summary_rows.append({
        "Metric": "Data Quality Score",
        "Value": summary.data_quality_score,
        "Percentage": summary.data_quality_score,
    })

    rows = [discrepancy_to_dict(d) for d in discrepancies]
    sheets = {
        "Summary": summary_rows,
        "All Discrepancies": [_discrepancy_sheet_row(row) for row in rows],
    }
    for kind, label in KIND_LABELS.items():
        sheets[label] = [_discrepancy_sheet_row(row) for row in rows if row["kind"] == kind.value]

    return sheets


def duplicate_sheets(
    groups: Union[DuplicateResult, Iterable[DuplicateGroup]],
    summary: DuplicateSummary
) -> Dict[str, List[Dict[str, Any]]]:
    """Tabular layout of duplicate groups: "Summary" plus one sheet per origin."""
    if isinstance(groups, DuplicateResult):
        groups = groups.all_groups()
    groups = list(groups)

    sheets = {
        "Summary": [
            {
                "Origin": label,
                "Groups": summary.group_counts[origin],
                "Records": summary.record_counts[origin],
            }
            for origin, label in ORIGIN_LABELS.items()
        ],
    }
    sheets["Summary"].append({
        "Origin": "Integrity Score",
        "Groups": None,
        "Records": summary.integrity_score,
    })

    for origin, label in ORIGIN_LABELS.items():
        sheets[label] = [
            {
                "Group Key": " | ".join("" if part is None else str(part) for part in g.group_key),
                "Count": g.count,
                "Members": ", ".join(str(m) for m in g.members),
            }
            for g in groups
            if g.origin is origin
        ]

    return sheets
