"""
Prometheus Metrics for PRS/MDMS Reconciliation

Custom metrics for tracking discrepancy and duplicate runs and the
resulting quality scores. Metrics can be exposed over HTTP for Prometheus
scraping.
"""

import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server

from berth_recon.reconciliation.models import DuplicateSummary, SummaryStatistics

logger = logging.getLogger(__name__)


class ReconciliationMetrics:
    """Prometheus metrics for reconciliation operations."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize reconciliation metrics.

        Args:
            registry: Prometheus registry (a fresh one if not provided)
        """
        self.registry = registry or CollectorRegistry()

        # Run counter
        self.reconciliation_runs_total = Counter(
            'berth_recon_runs_total',
            'Total number of reconciliation runs',
            ['run_type', 'status'],
            registry=self.registry
        )

        # Discrepancy counters
        self.discrepancies_found_total = Counter(
            'berth_recon_discrepancies_found_total',
            'Total discrepancies found by kind',
            ['kind'],
            registry=self.registry
        )

        self.duplicate_groups_found_total = Counter(
            'berth_recon_duplicate_groups_found_total',
            'Total duplicate groups found by origin',
            ['origin'],
            registry=self.registry
        )

        # Run duration
        self.reconciliation_duration_seconds = Histogram(
            'berth_recon_duration_seconds',
            'Duration of reconciliation runs in seconds',
            ['run_type'],
            buckets=[0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30, 60],
            registry=self.registry
        )

        # Current state gauges
        self.current_discrepancies = Gauge(
            'berth_recon_current_discrepancies',
            'Current number of discrepancies by kind',
            ['kind'],
            registry=self.registry
        )

        self.current_duplicate_groups = Gauge(
            'berth_recon_current_duplicate_groups',
            'Current number of duplicate groups by origin',
            ['origin'],
            registry=self.registry
        )

        self.data_quality_score = Gauge(
            'berth_recon_data_quality_score',
            'Data quality score (0-100)',
            registry=self.registry
        )

        self.integrity_score = Gauge(
            'berth_recon_integrity_score',
            'Duplicate integrity score (0-100)',
            registry=self.registry
        )

        # Rows processed
        self.rows_processed_total = Counter(
            'berth_recon_rows_processed_total',
            'Total rows processed during reconciliation',
            ['side'],
            registry=self.registry
        )

        logger.info("ReconciliationMetrics initialized")

    def record_reconciliation_run(
        self,
        summary: SummaryStatistics,
        duration_seconds: float,
        status: str = "success"
    ) -> None:
        """
        Record a discrepancy run.

        Args:
            summary: Summary of the run
            duration_seconds: Duration in seconds
            status: Run status (success/failure)
        """
        self.reconciliation_runs_total.labels(run_type='discrepancies', status=status).inc()
        self.reconciliation_duration_seconds.labels(run_type='discrepancies').observe(duration_seconds)

        for kind, count in summary.per_kind_counts.items():
            self.discrepancies_found_total.labels(kind=kind.value).inc(count)
            self.current_discrepancies.labels(kind=kind.value).set(count)

        self.data_quality_score.set(summary.data_quality_score)

        for side, count in summary.total_records_per_side.items():
            self.rows_processed_total.labels(side=side).inc(count)

        logger.debug(
            f"Recorded reconciliation metrics: status={status}, "
            f"duration={duration_seconds}s, discrepancies={summary.total_discrepancies}"
        )

    def record_duplicate_run(
        self,
        summary: DuplicateSummary,
        duration_seconds: float,
        status: str = "success"
    ) -> None:
        """
        Record a duplicate run.

        Args:
            summary: Duplicate summary of the run
            duration_seconds: Duration in seconds
            status: Run status (success/failure)
        """
        self.reconciliation_runs_total.labels(run_type='duplicates', status=status).inc()
        self.reconciliation_duration_seconds.labels(run_type='duplicates').observe(duration_seconds)

        for origin, count in summary.group_counts.items():
            self.duplicate_groups_found_total.labels(origin=origin.value).inc(count)
            self.current_duplicate_groups.labels(origin=origin.value).set(count)

        self.integrity_score.set(summary.integrity_score)

        logger.debug(f"Recorded duplicate metrics: status={status}, duration={duration_seconds}s")

    def record_failure(self, run_type: str) -> None:
        """Count a run that raised before producing a summary."""
        self.reconciliation_runs_total.labels(run_type=run_type, status='failure').inc()

    def start_server(self, port: int) -> None:
        """Start Prometheus metrics HTTP server."""
        try:
            start_http_server(port, registry=self.registry)
            logger.info(f"Metrics server started on port {port}")
        except OSError as e:
            if "Address already in use" in str(e):
                logger.warning(f"Metrics server already running on port {port}")
            else:
                raise
