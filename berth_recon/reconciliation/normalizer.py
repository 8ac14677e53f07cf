"""
Value Normalizer for PRS/MDMS Reconciliation

Canonicalizes field values so that matching is insensitive to formatting
noise (surrounding whitespace, letter case) and berth numbers compare as
integers regardless of how the loader typed them.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

logger = logging.getLogger(__name__)


def normalize(value: Any, casefold: bool = True) -> Any:
    """
    Normalize a single field value for comparison.

    Strings are stripped and, unless ``casefold`` is False, case-folded.
    Anything else (including None) is returned unchanged.

    Args:
        value: Value to normalize
        casefold: Whether to fold letter case

    Returns:
        Normalized value
    """
    if not isinstance(value, str):
        return value

    stripped = value.strip()
    if casefold:
        return stripped.casefold()
    return stripped


def normalize_berth_number(value: Any) -> Optional[int]:
    """
    Coerce a berth number to an integer.

    Accepts ints, integral floats/Decimals and digit strings with optional
    surrounding whitespace and sign. Returns None for anything else so the
    row fails the join instead of raising.

    Args:
        value: Raw berth number

    Returns:
        Integer berth number or None
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    if isinstance(value, (float, Decimal)):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        if value == int(value):
            return int(value)
        return None

    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text[:1] in ("+", "-") else text
        if digits.isdigit() and digits.isascii():
            return int(text)
        logger.debug(f"Berth number {value!r} is not numeric")
        return None

    return None
