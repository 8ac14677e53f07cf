"""
Berth Matcher for PRS/MDMS Reconciliation

Joins PRS (source) rows to MDMS (target) rows on the normalized join key
(coach identifier, class, berth number) and splits them into three
partitions: type mismatches, rows missing in MDMS and rows missing in PRS.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from berth_recon.reconciliation.models import MatchResult
from berth_recon.reconciliation.records import (
    JoinKey,
    Record,
    SourceRecord,
    TargetRecord,
    as_source_records,
    as_target_records,
    join_key,
    row_order,
)

logger = logging.getLogger(__name__)

SourceRows = Iterable[Union[SourceRecord, Mapping[str, Any]]]
TargetRows = Iterable[Union[TargetRecord, Mapping[str, Any]]]


def build_key_index(records: Iterable[Record]) -> Dict[JoinKey, Record]:
    """
    Build index for join key lookups.

    When several records share a key the first one seen is kept. Records
    without a usable key are left out of the index.

    Args:
        records: PRS or MDMS records

    Returns:
        Dictionary mapping join key to record
    """
    index: Dict[JoinKey, Record] = {}
    shared = 0

    for record in records:
        key = join_key(record)
        if key is None:
            continue
        if key in index:
            shared += 1
            continue
        index[key] = record

    if shared:
        logger.debug(f"{shared} rows share a join key with an earlier row")

    return index


def lookup(index: Dict[JoinKey, Record], record: Record) -> Optional[Record]:
    """Find the counterpart of ``record`` in ``index``."""
    key = join_key(record)
    if key is None:
        return None
    return index.get(key)


def find_type_mismatches(
    source_rows: SourceRows,
    target_rows: TargetRows
) -> List[Tuple[SourceRecord, TargetRecord]]:
    """
    Find matched pairs whose PRS berth type differs from the MDMS qualifier.

    The comparison is raw, case-sensitive string inequality.

    Args:
        source_rows: PRS rows
        target_rows: MDMS rows

    Returns:
        (source, target) pairs ordered by coach identifier and berth number
    """
    sources = as_source_records(source_rows)
    target_index = build_key_index(as_target_records(target_rows))

    mismatches = []

    for source in sources:
        target = lookup(target_index, source)
        if target is not None and source.berth_type != target.berth_qualifier:
            logger.debug(
                f"Berth type mismatch for {source.coach_code} berth {source.berth_number}: "
                f"PRS={source.berth_type!r}, MDMS={target.berth_qualifier!r}"
            )
            mismatches.append((source, target))

    mismatches.sort(key=lambda pair: row_order(pair[0]))

    logger.info(f"Found {len(mismatches)} type mismatches")
    return mismatches


def find_missing_in_target(source_rows: SourceRows, target_rows: TargetRows) -> List[SourceRecord]:
    """
    Find PRS rows with no MDMS counterpart.

    Args:
        source_rows: PRS rows
        target_rows: MDMS rows

    Returns:
        PRS records ordered by coach identifier and berth number
    """
    sources = as_source_records(source_rows)
    target_index = build_key_index(as_target_records(target_rows))

    missing = [source for source in sources if lookup(target_index, source) is None]
    missing.sort(key=row_order)

    logger.info(f"Found {len(missing)} records missing in MDMS")
    return missing


def find_missing_in_source(source_rows: SourceRows, target_rows: TargetRows) -> List[TargetRecord]:
    """
    Find MDMS rows with no PRS counterpart.

    Args:
        source_rows: PRS rows
        target_rows: MDMS rows

    Returns:
        MDMS records ordered by coach identifier and berth number
    """
    source_index = build_key_index(as_source_records(source_rows))
    targets = as_target_records(target_rows)

    missing = [target for target in targets if lookup(source_index, target) is None]
    missing.sort(key=row_order)

    logger.info(f"Found {len(missing)} records missing in PRS")
    return missing


def match(source_rows: SourceRows, target_rows: TargetRows) -> MatchResult:
    """
    Run all three set operations in one pass over each relation.

    Args:
        source_rows: PRS rows (records or mappings)
        target_rows: MDMS rows (records or mappings)

    Returns:
        MatchResult with type_mismatch, missing_in_target and
        missing_in_source partitions
    """
    sources = as_source_records(source_rows)
    targets = as_target_records(target_rows)

    logger.info(f"Matching {len(sources)} PRS rows against {len(targets)} MDMS rows")

    source_index = build_key_index(sources)
    target_index = build_key_index(targets)

    type_mismatch = []
    missing_in_target = []

    for source in sources:
        target = lookup(target_index, source)
        if target is None:
            missing_in_target.append(source)
        elif source.berth_type != target.berth_qualifier:
            type_mismatch.append((source, target))

    missing_in_source = [target for target in targets if lookup(source_index, target) is None]

    type_mismatch.sort(key=lambda pair: row_order(pair[0]))
    missing_in_target.sort(key=row_order)
    missing_in_source.sort(key=row_order)

    logger.info(
        f"Match summary: {len(type_mismatch)} type mismatches, "
        f"{len(missing_in_target)} missing in MDMS, "
        f"{len(missing_in_source)} missing in PRS"
    )

    return MatchResult(
        type_mismatch=type_mismatch,
        missing_in_target=missing_in_target,
        missing_in_source=missing_in_source,
    )
