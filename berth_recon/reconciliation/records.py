"""
PRS and MDMS Row Records

Typed, immutable views over the raw rows fetched from the PRS (source) and
MDMS (target) relations, and the normalized join key that decides whether a
PRS row and an MDMS row describe the same logical berth.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from berth_recon.reconciliation.normalizer import normalize, normalize_berth_number

logger = logging.getLogger(__name__)

JoinKey = Tuple[str, str, int]


def _pick(row: Mapping[str, Any], *names: str) -> Any:
    """Return the first present column among ``names`` (None if none is)."""
    for name in names:
        if name in row:
            return row[name]
    return None


@dataclass(frozen=True)
class SourceRecord:
    """
    Row of the PRS relation.

    Attributes:
        serial_no: Row identifier
        coach_code: Coach code (joined against MDMS coach identifier)
        composite_flag: Whether the coach is composite
        class_code: Travel class
        berth_number: Berth number as loaded (may be malformed)
        berth_type: Berth type, e.g. LB/MB/UB/SL/SU
    """

    serial_no: Any = None
    coach_code: Optional[str] = None
    composite_flag: Optional[bool] = None
    class_code: Optional[str] = None
    berth_number: Any = None
    berth_type: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SourceRecord":
        """Build a record from a PRS table row or a camelCase mapping."""
        return cls(
            serial_no=_pick(row, "serial_no", "serialNo"),
            coach_code=_pick(row, "coach_code", "coachCode"),
            composite_flag=_pick(row, "composite_flag", "compositeFlag"),
            class_code=_pick(row, "class", "class_code", "classCode"),
            berth_number=_pick(row, "berth_number", "berthNumber"),
            berth_type=_pick(row, "berth_type", "berthType"),
        )

    @property
    def coach_identifier(self) -> Optional[str]:
        return self.coach_code


@dataclass(frozen=True)
class TargetRecord:
    """
    Row of the MDMS relation.

    Attributes:
        serial_no: Row identifier
        layout_variant_no: Coach layout variant
        composite_flag: Whether the coach is composite
        coach_class_first: First class of a composite coach
        coach_class_second: Second class of a composite coach
        coach_identifier: PRS coach code this layout refers to
        class_code: Travel class
        berth_number: Berth number as loaded (may be malformed)
        berth_qualifier: Berth qualifier, compared to PRS berth type
    """

    serial_no: Any = None
    layout_variant_no: Optional[str] = None
    composite_flag: Optional[bool] = None
    coach_class_first: Optional[str] = None
    coach_class_second: Optional[str] = None
    coach_identifier: Optional[str] = None
    class_code: Optional[str] = None
    berth_number: Any = None
    berth_qualifier: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TargetRecord":
        """Build a record from an MDMS table row or a camelCase mapping."""
        return cls(
            serial_no=_pick(row, "serial_no", "serialNo"),
            layout_variant_no=_pick(row, "layout_variant_no", "layoutVariantNo"),
            composite_flag=_pick(row, "composite_flag", "compositeFlag"),
            coach_class_first=_pick(row, "coach_class_first", "coachClassFirst"),
            coach_class_second=_pick(row, "coach_class_second", "coachClassSecond"),
            coach_identifier=_pick(
                row, "prs_coach_code", "coach_identifier", "coachIdentifier", "coachCode"
            ),
            class_code=_pick(row, "coach_class", "class_code", "classCode", "class"),
            berth_number=_pick(row, "berth_no", "berth_number", "berthNumber"),
            berth_qualifier=_pick(row, "berth_qualifier", "berthQualifier"),
        )


Record = Union[SourceRecord, TargetRecord]


def as_source_records(rows: Iterable[Union[SourceRecord, Mapping[str, Any]]]) -> List[SourceRecord]:
    """Convert PRS rows (records or mappings) to SourceRecords."""
    return [row if isinstance(row, SourceRecord) else SourceRecord.from_row(row) for row in rows]


def as_target_records(rows: Iterable[Union[TargetRecord, Mapping[str, Any]]]) -> List[TargetRecord]:
    """Convert MDMS rows (records or mappings) to TargetRecords."""
    return [row if isinstance(row, TargetRecord) else TargetRecord.from_row(row) for row in rows]


def join_key(record: Record) -> Optional[JoinKey]:
    """
    Compute the normalized join key of a record.

    The key is (coach identifier, class, berth number) with the two strings
    stripped and case-folded and the berth number coerced to int. Both
    sides go through this same function.

    Args:
        record: PRS or MDMS record

    Returns:
        Join key, or None when a part is missing or the berth number is
        not an integer (such a row matches nothing)
    """
    coach = normalize(record.coach_identifier)
    class_code = normalize(record.class_code)
    berth = normalize_berth_number(record.berth_number)

    if not isinstance(coach, str) or not isinstance(class_code, str) or berth is None:
        logger.debug(f"Row {record.serial_no!r} has no usable join key")
        return None

    return (coach, class_code, berth)


def sortable(value: Any) -> Tuple[int, Any]:
    """
    Sort key for heterogeneous values.

    None sorts first, then numbers (bools excluded), then everything else
    by its string form.
    """
    if value is None:
        return (0, 0)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (1, value)
    return (2, str(value))


def sortable_key(key: Sequence[Any]) -> Tuple[Tuple[int, Any], ...]:
    """Sort key for a tuple of heterogeneous values."""
    return tuple(sortable(part) for part in key)


def row_order(record: Record) -> Tuple[Any, ...]:
    """Report order: coach identifier, then berth number, then serial number."""
    coach = normalize(record.coach_identifier, casefold=False)
    berth = normalize_berth_number(record.berth_number)
    return (
        sortable(coach),
        sortable(berth if berth is not None else record.berth_number),
        sortable(record.serial_no),
    )
