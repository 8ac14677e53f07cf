"""
Post-hoc filters over computed discrepancies and duplicate groups.
"""

import logging
from typing import Iterable, List, Optional, Union

from berth_recon.reconciliation.errors import InvalidFilterError
from berth_recon.reconciliation.models import (
    Discrepancy,
    DiscrepancyKind,
    DuplicateGroup,
    DuplicateOrigin,
)
from berth_recon.reconciliation.normalizer import normalize

logger = logging.getLogger(__name__)

# Names used by the PRS/MDMS web API
KIND_ALIASES = {
    "MISSING_IN_MDMS": DiscrepancyKind.MISSING_IN_TARGET,
    "MISSING_IN_PRS": DiscrepancyKind.MISSING_IN_SOURCE,
}

ORIGIN_ALIASES = {
    "WITHIN_PRS": DuplicateOrigin.SOURCE_ONLY,
    "WITHIN_MDMS": DuplicateOrigin.TARGET_ONLY,
    "CROSS_TABLE": DuplicateOrigin.CROSS_SOURCE,
}


def parse_kind(kind: Union[str, DiscrepancyKind]) -> DiscrepancyKind:
    """
    Resolve a discrepancy kind from its enum, value or legacy name.

    Raises:
        InvalidFilterError: If the kind is not recognized
    """
    if isinstance(kind, DiscrepancyKind):
        return kind

    name = normalize(kind, casefold=False)
    if isinstance(name, str):
        name = name.upper()
        if name in KIND_ALIASES:
            return KIND_ALIASES[name]
        try:
            return DiscrepancyKind(name)
        except ValueError:
            pass

    valid = ", ".join([k.value for k in DiscrepancyKind] + list(KIND_ALIASES))
    raise InvalidFilterError(f"Invalid discrepancy type {kind!r}. Type must be one of: {valid}")


def parse_origin(origin: Union[str, DuplicateOrigin]) -> DuplicateOrigin:
    """
    Resolve a duplicate origin from its enum, value or legacy name.

    Raises:
        InvalidFilterError: If the origin is not recognized
    """
    if isinstance(origin, DuplicateOrigin):
        return origin

    name = normalize(origin, casefold=False)
    if isinstance(name, str):
        name = name.upper()
        if name in ORIGIN_ALIASES:
            return ORIGIN_ALIASES[name]
        try:
            return DuplicateOrigin(name)
        except ValueError:
            pass

    valid = ", ".join([o.value for o in DuplicateOrigin] + list(ORIGIN_ALIASES))
    raise InvalidFilterError(f"Invalid duplicate type {origin!r}. Type must be one of: {valid}")


def _coach_matches(candidate, wanted) -> bool:
    return normalize(candidate) == wanted


def filter_discrepancies(
    discrepancies: Iterable[Discrepancy],
    kind: Optional[Union[str, DiscrepancyKind]] = None,
    coach_identifier: Optional[str] = None
) -> List[Discrepancy]:
    """
    Narrow discrepancies by kind and/or coach identifier.

    Filters are validated before anything is read from ``discrepancies``.

    Args:
        discrepancies: Classified discrepancies
        kind: Discrepancy kind to keep
        coach_identifier: Coach identifier to keep (case-insensitive)

    Returns:
        Matching discrepancies in their original order

    Raises:
        InvalidFilterError: If ``kind`` is not recognized
    """
    wanted_kind = parse_kind(kind) if kind is not None else None
    wanted_coach = normalize(coach_identifier) if coach_identifier is not None else None

    result = [
        d for d in discrepancies
        if (wanted_kind is None or d.kind is wanted_kind)
        and (wanted_coach is None or _coach_matches(d.coach_identifier, wanted_coach))
    ]

    logger.debug(f"Filter kind={kind} coach={coach_identifier} kept {len(result)} discrepancies")
    return result


def filter_duplicate_groups(
    groups: Iterable[DuplicateGroup],
    origin: Optional[Union[str, DuplicateOrigin]] = None,
    coach_identifier: Optional[str] = None
) -> List[DuplicateGroup]:
    """
    Narrow duplicate groups by origin and/or coach identifier.

    The coach identifier is the first element of every group key.

    Raises:
        InvalidFilterError: If ``origin`` is not recognized
    """
    wanted_origin = parse_origin(origin) if origin is not None else None
    wanted_coach = normalize(coach_identifier) if coach_identifier is not None else None

    return [
        g for g in groups
        if (wanted_origin is None or g.origin is wanted_origin)
        and (wanted_coach is None or _coach_matches(g.group_key[0], wanted_coach))
    ]
