"""
Alert Rule Generator for Prometheus AlertManager

Builds alert rules over the ``berth_recon_*`` metrics exported by
``ReconciliationMetrics``: data quality, duplication and failing runs.
"""

import logging
from typing import Any, Dict, List

import yaml

logger = logging.getLogger(__name__)

EVALUATION_INTERVAL = "1m"


def _rule(
    alert: str,
    expr: str,
    duration: str,
    severity: str,
    component: str,
    summary: str,
    description: str
) -> Dict[str, Any]:
    return {
        "alert": alert,
        "expr": expr,
        "for": duration,
        "labels": {"severity": severity, "component": component},
        "annotations": {"summary": summary, "description": description},
    }


def _group(name: str, rules: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"name": name, "interval": EVALUATION_INTERVAL, "rules": rules}


class AlertRuleGenerator:
    """Generates Prometheus alert rule groups for reconciliation runs."""

    def __init__(
        self,
        quality_warning: float = 95.0,
        quality_critical: float = 90.0,
        integrity_warning: float = 99.0,
        missing_rows_warning: int = 100
    ):
        """
        Initialize alert rule generator.

        Args:
            quality_warning: Data quality score below which to warn
            quality_critical: Data quality score below which to page
            integrity_warning: Integrity score below which to warn
            missing_rows_warning: Missing-berth count above which to warn
        """
        self.quality_warning = quality_warning
        self.quality_critical = quality_critical
        self.integrity_warning = integrity_warning
        self.missing_rows_warning = missing_rows_warning

    def generate_alert_rules(self) -> Dict[str, Any]:
        """
        Generate complete alert rule configuration.

        Returns:
            Dict with alert rule groups in Prometheus format
        """
        groups = [
            _group("berth_recon_data_quality", self._quality_rules()),
            _group("berth_recon_duplicates", self._duplicate_rules()),
            _group("berth_recon_runs", self._run_rules()),
        ]

        logger.debug(f"Generated {len(groups)} alert rule groups")
        return {"groups": groups}

    def _quality_rules(self) -> List[Dict[str, Any]]:
        return [
            _rule(
                "LowDataQualityScore",
                f"berth_recon_data_quality_score < {self.quality_warning:g}",
                "10m", "warning", "reconciliation",
                "PRS/MDMS data quality below threshold",
                f"Data quality score is {{{{ $value }}}}% (below {self.quality_warning:g}%)",
            ),
            _rule(
                "CriticalDataQualityScore",
                f"berth_recon_data_quality_score < {self.quality_critical:g}",
                "5m", "critical", "reconciliation",
                "Critical PRS/MDMS data quality",
                f"Data quality score is {{{{ $value }}}}% (below {self.quality_critical:g}%). "
                "Reconcile PRS and MDMS now.",
            ),
            _rule(
                "HighMissingBerthCount",
                f"berth_recon_current_discrepancies{{kind=~\"MISSING_IN_.*\"}} > {self.missing_rows_warning}",
                "15m", "warning", "reconciliation",
                "Many berths present on one side only",
                "{{ $value }} berths of kind {{ $labels.kind }}",
            ),
        ]

    def _duplicate_rules(self) -> List[Dict[str, Any]]:
        return [
            _rule(
                "LowIntegrityScore",
                f"berth_recon_integrity_score < {self.integrity_warning:g}",
                "10m", "warning", "duplicates",
                "Duplicated berth rows detected",
                f"Integrity score is {{{{ $value }}}}% (below {self.integrity_warning:g}%)",
            ),
            _rule(
                "CrossTableDuplicates",
                "berth_recon_current_duplicate_groups{origin=\"CROSS_SOURCE\"} > 0",
                "30m", "info", "duplicates",
                "Ambiguous PRS/MDMS matches",
                "{{ $value }} join keys match more than one row on a side",
            ),
        ]

    def _run_rules(self) -> List[Dict[str, Any]]:
        return [
            _rule(
                "ReconciliationFailure",
                "increase(berth_recon_runs_total{status=\"failure\"}[1h]) > 0",
                "5m", "warning", "reconciliation",
                "Reconciliation runs failing",
                "{{ $labels.run_type }} runs failed in the last hour",
            ),
        ]

    def to_yaml(self) -> str:
        """Render the rules as a YAML document."""
        return yaml.safe_dump(self.generate_alert_rules(), default_flow_style=False, sort_keys=False)

    def export_to_yaml(self, output_file: str) -> None:
        """
        Export alert rules to YAML file.

        Args:
            output_file: Path to output YAML file
        """
        with open(output_file, 'w') as f:
            f.write(self.to_yaml())

        logger.info(f"Alert rules exported to {output_file}")

    def get_alert_summary(self) -> Dict[str, int]:
        """Rule counts: groups, alerts, and alerts per severity."""
        groups = self.generate_alert_rules()["groups"]
        rules = [rule for group in groups for rule in group["rules"]]

        summary = {"total_groups": len(groups), "total_alerts": len(rules)}
        for severity in ("critical", "warning", "info"):
            summary[severity] = sum(1 for rule in rules if rule["labels"]["severity"] == severity)

        return summary
