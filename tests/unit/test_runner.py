"""
Unit tests for end-to-end reconciliation runs.
"""

import pytest

from berth_recon.reconciliation import (
    InvalidFilterError,
    detailed_summary,
    discrepancy_summary,
    reconcile_discrepancies,
    reconcile_duplicates,
)

from tests.conftest import mdms_row, prs_row


class TestReconcileDiscrepancies:
    """Test the discrepancy pipeline."""

    def test_unfiltered(self, sample_prs_rows, sample_mdms_rows):
        report = reconcile_discrepancies(sample_prs_rows, sample_mdms_rows)

        assert report["count"] == 4
        assert report["totalDiscrepancies"] == 4
        assert report["filters"] == {"kind": None, "coachIdentifier": None}

    def test_filtered_rows_keep_full_summary(self, sample_prs_rows, sample_mdms_rows):
        """Test filters narrow the rows but not the summary."""
        report = reconcile_discrepancies(sample_prs_rows, sample_mdms_rows, kind="missing_in_prs")

        assert report["count"] == 1
        assert report["discrepancies"][0]["coachIdentifier"] == "B3"
        assert report["summary"]["totalDiscrepancies"] == 4
        assert report["filters"]["kind"] == "MISSING_IN_SOURCE"

    def test_invalid_kind_fails_before_matching(self):
        """Test rows are never read for an invalid filter."""
        def exploding():
            raise AssertionError("rows were read")
            yield

        with pytest.raises(InvalidFilterError):
            reconcile_discrepancies(exploding(), exploding(), kind="WRONG")

    def test_generators_are_accepted(self, sample_prs_rows, sample_mdms_rows):
        """Test one-shot iterables are consumed once."""
        report = reconcile_discrepancies(iter(sample_prs_rows), iter(sample_mdms_rows))

        assert report["summary"]["totalRecordsPerSide"] == {"source": 5, "target": 4}


class TestSummaries:
    """Test summary-only runs."""

    def test_discrepancy_summary(self, sample_prs_rows, sample_mdms_rows):
        summary = discrepancy_summary(sample_prs_rows, sample_mdms_rows)

        assert summary["totalDiscrepancies"] == 4
        assert summary["dataQualityScore"] == 20.0
        assert summary["perKindPercentages"]["MISSING_IN_TARGET"] == 50.0

    def test_detailed_summary(self, sample_prs_rows, sample_mdms_rows):
        detailed = detailed_summary(sample_prs_rows, sample_mdms_rows)

        assert detailed["overview"]["dataQualityScore"] == 20.0
        assert detailed["discrepancyBreakdown"]["missingInMdmsCount"] == 2


class TestReconcileDuplicates:
    """Test the duplicate pipeline."""

    @pytest.fixture
    def rows(self):
        source = [prs_row(1, "B1", "SL", 1, "LB"), prs_row(2, "B1", "SL", 1, "LB")]
        target = [mdms_row(5, "B1", "SL", 1, "LB")]
        return source, target

    def test_unfiltered(self, rows):
        report = reconcile_duplicates(*rows)

        assert report["totalGroups"] == 2
        assert report["filters"] == {"origin": None, "coachIdentifier": None}

    def test_filtered_by_origin(self, rows):
        report = reconcile_duplicates(*rows, origin="WITHIN_PRS")

        assert report["totalGroups"] == 1
        assert report["groups"][0]["origin"] == "SOURCE_ONLY"
        assert report["summary"]["totalGroups"] == 2

    def test_invalid_origin(self, rows):
        with pytest.raises(InvalidFilterError):
            reconcile_duplicates(*rows, origin="SOMEWHERE")
