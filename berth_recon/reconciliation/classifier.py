"""
Discrepancy Classifier

Turns matcher partitions into Discrepancy values with a readable
explanation. Pure mapping, no I/O.
"""

import logging
from typing import List

from berth_recon.reconciliation.models import (
    NOT_AVAILABLE,
    Discrepancy,
    DiscrepancyKind,
    MatchResult,
)
from berth_recon.reconciliation.records import SourceRecord, TargetRecord

logger = logging.getLogger(__name__)

SOURCE_NAME = "PRS"
TARGET_NAME = "MDMS"


def classify_type_mismatch(source: SourceRecord, target: TargetRecord) -> Discrepancy:
    return Discrepancy(
        serial_no=source.serial_no,
        coach_identifier=source.coach_code,
        class_code=source.class_code,
        berth_number=source.berth_number,
        kind=DiscrepancyKind.TYPE_MISMATCH,
        source_value=source.berth_type,
        target_value=target.berth_qualifier,
        details=(
            f"{SOURCE_NAME} berth type '{source.berth_type}' doesn't match "
            f"{TARGET_NAME} berth qualifier '{target.berth_qualifier}'"
        ),
    )


def classify_missing_in_target(source: SourceRecord) -> Discrepancy:
    return Discrepancy(
        serial_no=source.serial_no,
        coach_identifier=source.coach_code,
        class_code=source.class_code,
        berth_number=source.berth_number,
        kind=DiscrepancyKind.MISSING_IN_TARGET,
        source_value=source.berth_type,
        target_value=NOT_AVAILABLE,
        details=(
            f"{SOURCE_NAME} record ({source.coach_code}, berth {source.berth_number}) "
            f"not found in {TARGET_NAME} table"
        ),
    )


def classify_missing_in_source(target: TargetRecord) -> Discrepancy:
    return Discrepancy(
        serial_no=target.serial_no,
        coach_identifier=target.coach_identifier,
        class_code=target.class_code,
        berth_number=target.berth_number,
        kind=DiscrepancyKind.MISSING_IN_SOURCE,
        source_value=NOT_AVAILABLE,
        target_value=target.berth_qualifier,
        details=(
            f"{TARGET_NAME} record ({target.coach_identifier}, berth {target.berth_number}) "
            f"not found in {SOURCE_NAME} table"
        ),
    )


def classify(partitions: MatchResult) -> List[Discrepancy]:
    """
    Label every row of the matcher partitions.

    Args:
        partitions: Output of ``match``

    Returns:
        Type mismatches, then rows missing in MDMS, then rows missing in
        PRS, each block keeping the matcher's order
    """
    discrepancies = [
        classify_type_mismatch(source, target)
        for source, target in partitions.type_mismatch
    ]
    discrepancies.extend(classify_missing_in_target(source) for source in partitions.missing_in_target)
    discrepancies.extend(classify_missing_in_source(target) for target in partitions.missing_in_source)

    logger.debug(f"Classified {len(discrepancies)} discrepancies")
    return discrepancies
