"""
Unit tests for reconciliation metrics and alert rules.
"""

import pytest
import yaml
from prometheus_client import CollectorRegistry

from berth_recon.monitoring import AlertRuleGenerator, ReconciliationMetrics
from berth_recon.reconciliation import analyze_discrepancies, analyze_duplicates

from tests.conftest import prs_row


class TestReconciliationMetrics:
    """Test Prometheus metrics recording."""

    @pytest.fixture
    def registry(self):
        return CollectorRegistry()

    @pytest.fixture
    def metrics(self, registry):
        return ReconciliationMetrics(registry=registry)

    def test_record_reconciliation_run(self, metrics, registry, sample_prs_rows, sample_mdms_rows):
        """Test counts, gauges and score from a discrepancy summary."""
        _, summary = analyze_discrepancies(sample_prs_rows, sample_mdms_rows)

        metrics.record_reconciliation_run(summary, duration_seconds=0.2)

        assert registry.get_sample_value(
            'berth_recon_runs_total', {'run_type': 'discrepancies', 'status': 'success'}
        ) == 1.0
        assert registry.get_sample_value(
            'berth_recon_discrepancies_found_total', {'kind': 'MISSING_IN_TARGET'}
        ) == 2.0
        assert registry.get_sample_value(
            'berth_recon_current_discrepancies', {'kind': 'TYPE_MISMATCH'}
        ) == 1.0
        assert registry.get_sample_value('berth_recon_data_quality_score') == 20.0
        assert registry.get_sample_value('berth_recon_rows_processed_total', {'side': 'source'}) == 5.0
        assert registry.get_sample_value(
            'berth_recon_duration_seconds_count', {'run_type': 'discrepancies'}
        ) == 1.0

    def test_record_duplicate_run(self, metrics, registry):
        """Test group gauges and integrity score from a duplicate summary."""
        rows = [prs_row(i, "B1", "SL", 1, "LB") for i in (1, 2, 3)]
        _, summary = analyze_duplicates(rows, [])

        metrics.record_duplicate_run(summary, duration_seconds=0.1)

        assert registry.get_sample_value(
            'berth_recon_current_duplicate_groups', {'origin': 'SOURCE_ONLY'}
        ) == 1.0
        assert registry.get_sample_value('berth_recon_integrity_score') == 33.33

    def test_record_failure(self, metrics, registry):
        metrics.record_failure('duplicates')

        assert registry.get_sample_value(
            'berth_recon_runs_total', {'run_type': 'duplicates', 'status': 'failure'}
        ) == 1.0

    def test_instances_do_not_share_registry(self):
        """Test two instances can be created side by side."""
        first = ReconciliationMetrics()
        second = ReconciliationMetrics()

        assert first.registry is not second.registry


class TestAlertRuleGenerator:
    """Test alert rule generation."""

    @pytest.fixture
    def generator(self):
        return AlertRuleGenerator()

    def test_summary_counts(self, generator):
        summary = generator.get_alert_summary()

        assert summary == {
            "total_groups": 3,
            "total_alerts": 6,
            "critical": 1,
            "warning": 4,
            "info": 1,
        }

    def test_thresholds_in_expressions(self):
        """Test custom thresholds reach the rule expressions."""
        rules = AlertRuleGenerator(quality_warning=97.5).generate_alert_rules()
        quality_rules = {r["alert"]: r for r in rules["groups"][0]["rules"]}

        assert quality_rules["LowDataQualityScore"]["expr"] == "berth_recon_data_quality_score < 97.5"
        assert quality_rules["CriticalDataQualityScore"]["expr"] == "berth_recon_data_quality_score < 90"

    def test_yaml_round_trips(self, generator):
        """Test the YAML output parses back to the rules."""
        assert yaml.safe_load(generator.to_yaml()) == generator.generate_alert_rules()

    def test_export_to_yaml(self, generator, tmp_path):
        output = tmp_path / "alerts.yml"

        generator.export_to_yaml(str(output))

        loaded = yaml.safe_load(output.read_text())
        assert [g["name"] for g in loaded["groups"]] == [
            "berth_recon_data_quality",
            "berth_recon_duplicates",
            "berth_recon_runs",
        ]
