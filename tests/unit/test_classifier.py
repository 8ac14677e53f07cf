"""
Unit tests for the discrepancy classifier.
"""

from berth_recon.reconciliation.classifier import classify
from berth_recon.reconciliation.matcher import match
from berth_recon.reconciliation.models import NOT_AVAILABLE, DiscrepancyKind, MatchResult

from tests.conftest import mdms_row, prs_row


class TestClassifier:
    """Test discrepancy labelling."""

    def test_type_mismatch(self):
        """Test a mismatched pair carries both values."""
        discrepancies = classify(match(
            [prs_row(1, "B1", "SL", 1, "LB")],
            [mdms_row(7, "B1", "SL", 1, "UB")]
        ))

        assert len(discrepancies) == 1
        d = discrepancies[0]
        assert d.kind is DiscrepancyKind.TYPE_MISMATCH
        assert d.serial_no == 1
        assert d.coach_identifier == "B1"
        assert d.class_code == "SL"
        assert d.berth_number == 1
        assert d.source_value == "LB"
        assert d.target_value == "UB"
        assert d.details == "PRS berth type 'LB' doesn't match MDMS berth qualifier 'UB'"

    def test_missing_in_target(self):
        """Test a PRS-only row has no MDMS value."""
        discrepancies = classify(match([prs_row(1, "X9", "SL", 1, "LB")], []))

        d = discrepancies[0]
        assert d.kind is DiscrepancyKind.MISSING_IN_TARGET
        assert d.source_value == "LB"
        assert d.target_value == NOT_AVAILABLE
        assert d.details == "PRS record (X9, berth 1) not found in MDMS table"

    def test_missing_in_source(self):
        """Test an MDMS-only row has no PRS value."""
        discrepancies = classify(match([], [mdms_row(4, "B3", "SL", 1, "LB")]))

        d = discrepancies[0]
        assert d.kind is DiscrepancyKind.MISSING_IN_SOURCE
        assert d.serial_no == 4
        assert d.coach_identifier == "B3"
        assert d.source_value == NOT_AVAILABLE
        assert d.target_value == "LB"
        assert d.details == "MDMS record (B3, berth 1) not found in PRS table"

    def test_order_is_mismatch_then_target_then_source(self, sample_prs_rows, sample_mdms_rows):
        """Test blocks come out in a fixed kind order."""
        discrepancies = classify(match(sample_prs_rows, sample_mdms_rows))

        assert [d.kind for d in discrepancies] == [
            DiscrepancyKind.TYPE_MISMATCH,
            DiscrepancyKind.MISSING_IN_TARGET,
            DiscrepancyKind.MISSING_IN_TARGET,
            DiscrepancyKind.MISSING_IN_SOURCE,
        ]
        assert [d.coach_identifier for d in discrepancies] == ["B1", "B2", "X9", "B3"]

    def test_empty_partitions(self):
        """Test no partitions give no discrepancies."""
        assert classify(MatchResult()) == []
