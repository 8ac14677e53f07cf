"""
Pytest configuration and shared fixtures.

Fixtures are in-memory PRS/MDMS row lists shaped like the rows fetched
from the ``prs`` and ``mdms`` tables; no database is needed to test the
reconciliation core.
"""

import logging

import pytest


def prs_row(serial_no, coach_code, class_code, berth_number, berth_type, composite_flag=False):
    """Build a PRS table row."""
    return {
        "serial_no": serial_no,
        "coach_code": coach_code,
        "composite_flag": composite_flag,
        "class": class_code,
        "berth_number": berth_number,
        "berth_type": berth_type,
    }


def mdms_row(serial_no, coach_code, class_code, berth_no, berth_qualifier, layout_variant_no="LV1"):
    """Build an MDMS table row."""
    return {
        "serial_no": serial_no,
        "layout_variant_no": layout_variant_no,
        "composite_flag": False,
        "coach_class_first": class_code,
        "coach_class_second": None,
        "prs_coach_code": coach_code,
        "coach_class": class_code,
        "berth_no": berth_no,
        "berth_qualifier": berth_qualifier,
    }


@pytest.fixture
def sample_prs_rows():
    """PRS rows: one mismatch against MDMS, two rows MDMS lacks."""
    return [
        prs_row(1, "B1", "SL", 1, "LB"),
        prs_row(2, "B1", "SL", 2, "MB"),   # MDMS says UB
        prs_row(3, "B1", "SL", 3, "UB"),
        prs_row(4, "B2", "SL", 1, "LB"),   # Missing in MDMS
        prs_row(5, "X9", "3A", 7, "SU"),   # Missing in MDMS
    ]


@pytest.fixture
def sample_mdms_rows():
    """MDMS rows: formatting noise on B1/1, one row PRS lacks."""
    return [
        mdms_row(1, " b1 ", "sl", 1, "LB"),
        mdms_row(2, "B1", "SL", 2, "UB"),
        mdms_row(3, "B1", "SL", 3, "UB"),
        mdms_row(4, "B3", "SL", 1, "LB"),  # Missing in PRS
    ]


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handlers and propagation changed by the CLI's logging setup."""
    package_logger = logging.getLogger("berth_recon")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate

    yield

    package_logger.handlers = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate
