"""
Unit tests for discrepancy and duplicate filters.
"""

import pytest

from berth_recon.reconciliation.classifier import classify
from berth_recon.reconciliation.duplicates import find_duplicates
from berth_recon.reconciliation.errors import InvalidFilterError
from berth_recon.reconciliation.filters import (
    filter_discrepancies,
    filter_duplicate_groups,
    parse_kind,
    parse_origin,
)
from berth_recon.reconciliation.matcher import match
from berth_recon.reconciliation.models import DiscrepancyKind, DuplicateOrigin

from tests.conftest import mdms_row, prs_row


@pytest.fixture
def discrepancies(sample_prs_rows, sample_mdms_rows):
    return classify(match(sample_prs_rows, sample_mdms_rows))


class TestParseKind:
    """Test kind resolution."""

    @pytest.mark.parametrize("value,expected", [
        (DiscrepancyKind.TYPE_MISMATCH, DiscrepancyKind.TYPE_MISMATCH),
        ("TYPE_MISMATCH", DiscrepancyKind.TYPE_MISMATCH),
        ("type_mismatch", DiscrepancyKind.TYPE_MISMATCH),
        (" MISSING_IN_TARGET ", DiscrepancyKind.MISSING_IN_TARGET),
        ("MISSING_IN_MDMS", DiscrepancyKind.MISSING_IN_TARGET),
        ("missing_in_prs", DiscrepancyKind.MISSING_IN_SOURCE),
    ])
    def test_accepted_values(self, value, expected):
        """Test enum, value and legacy names."""
        assert parse_kind(value) is expected

    @pytest.mark.parametrize("value", ["MISSING", "", 3])
    def test_rejected_values(self, value):
        """Test unknown kinds raise."""
        with pytest.raises(InvalidFilterError, match="Invalid discrepancy type"):
            parse_kind(value)

    def test_invalid_filter_is_value_error(self):
        """Test callers catching ValueError also see invalid filters."""
        with pytest.raises(ValueError):
            parse_kind("NOPE")


class TestParseOrigin:
    """Test origin resolution."""

    @pytest.mark.parametrize("value,expected", [
        ("SOURCE_ONLY", DuplicateOrigin.SOURCE_ONLY),
        ("within_prs", DuplicateOrigin.SOURCE_ONLY),
        ("WITHIN_MDMS", DuplicateOrigin.TARGET_ONLY),
        ("CROSS_TABLE", DuplicateOrigin.CROSS_SOURCE),
        (DuplicateOrigin.CROSS_SOURCE, DuplicateOrigin.CROSS_SOURCE),
    ])
    def test_accepted_values(self, value, expected):
        assert parse_origin(value) is expected

    def test_rejected_value(self):
        with pytest.raises(InvalidFilterError, match="Invalid duplicate type"):
            parse_origin("EVERYWHERE")


class TestFilterDiscrepancies:
    """Test discrepancy filtering."""

    def test_no_filters_keeps_everything(self, discrepancies):
        assert filter_discrepancies(discrepancies) == discrepancies

    def test_by_kind(self, discrepancies):
        """Test only the requested kind is kept, in order."""
        result = filter_discrepancies(discrepancies, kind="MISSING_IN_TARGET")

        assert [d.coach_identifier for d in result] == ["B2", "X9"]

    def test_by_coach_is_case_insensitive(self, discrepancies):
        """Test coach filter ignores case and whitespace."""
        result = filter_discrepancies(discrepancies, coach_identifier=" b1")

        assert len(result) == 1
        assert result[0].kind is DiscrepancyKind.TYPE_MISMATCH

    def test_by_kind_and_coach(self, discrepancies):
        """Test both filters combine."""
        assert filter_discrepancies(discrepancies, kind="TYPE_MISMATCH", coach_identifier="X9") == []

    def test_invalid_kind_fails_before_iterating(self):
        """Test the filter is validated before the input is read."""
        def exploding():
            raise AssertionError("input was consumed")
            yield

        with pytest.raises(InvalidFilterError):
            filter_discrepancies(exploding(), kind="BOGUS")


class TestFilterDuplicateGroups:
    """Test duplicate group filtering."""

    @pytest.fixture
    def groups(self):
        source = [
            prs_row(1, "B1", "SL", 1, "LB"),
            prs_row(2, "B1", "SL", 1, "LB"),
            prs_row(3, "C2", "SL", 5, "UB"),
            prs_row(4, "C2", "SL", 5, "UB"),
        ]
        target = [mdms_row(9, "B1", "SL", 1, "LB")]
        return find_duplicates(source, target).all_groups()

    def test_by_origin(self, groups):
        result = filter_duplicate_groups(groups, origin="CROSS_TABLE")

        assert len(result) == 1
        assert result[0].origin is DuplicateOrigin.CROSS_SOURCE

    def test_by_coach(self, groups):
        """Test coach matches the first key part of raw and normalized keys."""
        result = filter_duplicate_groups(groups, coach_identifier="B1")

        assert {g.origin for g in result} == {DuplicateOrigin.SOURCE_ONLY, DuplicateOrigin.CROSS_SOURCE}

    def test_invalid_origin(self, groups):
        with pytest.raises(InvalidFilterError):
            filter_duplicate_groups(groups, origin="NOWHERE")
