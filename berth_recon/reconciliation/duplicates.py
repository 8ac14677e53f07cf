"""
Duplicate Grouper for PRS/MDMS Reconciliation

Partitions each relation by a grouping key and reports the groups holding
more than one row:

- within PRS: raw (coach code, class, berth number, berth type)
- within MDMS: raw (coach identifier, layout variant, berth number, berth qualifier)
- cross table: normalized join key present on both sides, where at least
  one side holds more than one row for that key

Within-table grouping compares raw values while the cross-table grouping
uses the matcher's normalized join key.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Tuple

from berth_recon.reconciliation.matcher import SourceRows, TargetRows
from berth_recon.reconciliation.models import DuplicateGroup, DuplicateOrigin, DuplicateResult
from berth_recon.reconciliation.records import (
    Record,
    SourceRecord,
    TargetRecord,
    as_source_records,
    as_target_records,
    join_key,
    sortable,
    sortable_key,
)

logger = logging.getLogger(__name__)


def source_group_key(record: SourceRecord) -> Tuple[Any, ...]:
    return (record.coach_code, record.class_code, record.berth_number, record.berth_type)


def target_group_key(record: TargetRecord) -> Tuple[Any, ...]:
    return (
        record.coach_identifier,
        record.layout_variant_no,
        record.berth_number,
        record.berth_qualifier,
    )


def _sorted_serials(records: Iterable[Record]) -> List[Any]:
    return sorted((record.serial_no for record in records), key=sortable)


def _order_groups(groups: List[DuplicateGroup]) -> List[DuplicateGroup]:
    """Descending member count, ties broken by key ascending."""
    return sorted(groups, key=lambda group: (-group.count, sortable_key(group.group_key)))


def group_within(
    records: Iterable[Record],
    key_func: Callable[[Record], Tuple[Any, ...]],
    origin: DuplicateOrigin
) -> List[DuplicateGroup]:
    """
    Group records of one relation by raw key and keep groups of two or more.

    Args:
        records: Records of a single relation
        key_func: Grouping key extractor
        origin: Origin to stamp on the groups

    Returns:
        Ordered duplicate groups
    """
    buckets: Dict[Tuple[Any, ...], List[Record]] = defaultdict(list)

    for record in records:
        buckets[key_func(record)].append(record)

    groups = [
        DuplicateGroup(
            group_key=key,
            members=_sorted_serials(members),
            count=len(members),
            origin=origin,
        )
        for key, members in buckets.items()
        if len(members) > 1
    ]

    return _order_groups(groups)


def find_duplicates_within_source(source_rows: SourceRows) -> List[DuplicateGroup]:
    """Find duplicate PRS rows."""
    groups = group_within(as_source_records(source_rows), source_group_key, DuplicateOrigin.SOURCE_ONLY)
    logger.info(f"Found {len(groups)} duplicate groups within PRS")
    return groups


def find_duplicates_within_target(target_rows: TargetRows) -> List[DuplicateGroup]:
    """Find duplicate MDMS rows."""
    groups = group_within(as_target_records(target_rows), target_group_key, DuplicateOrigin.TARGET_ONLY)
    logger.info(f"Found {len(groups)} duplicate groups within MDMS")
    return groups


def find_cross_source_duplicates(source_rows: SourceRows, target_rows: TargetRows) -> List[DuplicateGroup]:
    """
    Find join keys that are duplicated on at least one side of the join.

    A key that matches exactly one PRS row to exactly one MDMS row is not a
    duplicate, whatever the within-table groups say.

    Args:
        source_rows: PRS rows
        target_rows: MDMS rows

    Returns:
        Ordered cross-table duplicate groups
    """
    source_buckets: Dict[Tuple[Any, ...], List[Record]] = defaultdict(list)
    target_buckets: Dict[Tuple[Any, ...], List[Record]] = defaultdict(list)

    for record in as_source_records(source_rows):
        key = join_key(record)
        if key is not None:
            source_buckets[key].append(record)

    for record in as_target_records(target_rows):
        key = join_key(record)
        if key is not None:
            target_buckets[key].append(record)

    groups = []

    for key, sources in source_buckets.items():
        targets = target_buckets.get(key)
        if not targets:
            continue
        if len(sources) == 1 and len(targets) == 1:
            continue

        source_members = _sorted_serials(sources)
        target_members = _sorted_serials(targets)

        groups.append(DuplicateGroup(
            group_key=key,
            members=sorted(source_members + target_members, key=sortable),
            count=len(sources) + len(targets),
            origin=DuplicateOrigin.CROSS_SOURCE,
            source_members=source_members,
            target_members=target_members,
        ))

    logger.info(f"Found {len(groups)} cross-table duplicate groups")
    return _order_groups(groups)


def find_duplicates(source_rows: SourceRows, target_rows: TargetRows) -> DuplicateResult:
    """
    Run all three duplicate searches.

    Args:
        source_rows: PRS rows (records or mappings)
        target_rows: MDMS rows (records or mappings)

    Returns:
        DuplicateResult with within_source, within_target and cross_source
    """
    sources = as_source_records(source_rows)
    targets = as_target_records(target_rows)

    result = DuplicateResult(
        within_source=find_duplicates_within_source(sources),
        within_target=find_duplicates_within_target(targets),
        cross_source=find_cross_source_duplicates(sources, targets),
    )

    total = len(result.all_groups())
    if total:
        logger.warning(f"Found {total} duplicate groups across PRS and MDMS")

    return result
