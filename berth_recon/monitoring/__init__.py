"""
Monitoring Module for PRS/MDMS Reconciliation

This module provides observability components for reconciliation runs:
- Prometheus metrics
- Alert rule definitions

Usage:
    from berth_recon.monitoring import ReconciliationMetrics, AlertRuleGenerator

    metrics = ReconciliationMetrics()
    metrics.record_reconciliation_run(summary, duration_seconds=0.4)

    alerts = AlertRuleGenerator()
    print(alerts.to_yaml())
"""

from berth_recon.monitoring.metrics import ReconciliationMetrics
from berth_recon.monitoring.alerts import AlertRuleGenerator

__all__ = [
    "ReconciliationMetrics",
    "AlertRuleGenerator",
]
