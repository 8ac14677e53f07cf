"""
PRS/MDMS Berth Reconciliation Tool

Loads the PRS and MDMS relations (from PostgreSQL or from JSON/CSV
exports), runs the reconciliation core and prints the result as a
``{success, data, message}`` JSON envelope.

Usage:
    berth-recon discrepancies
    berth-recon discrepancies --kind TYPE_MISMATCH --coach B1
    berth-recon summary --prs-file prs.json --mdms-file mdms.json
    berth-recon detailed-summary
    berth-recon duplicates --origin WITHIN_PRS
    berth-recon duplicate-summary
    berth-recon alerts
"""

import argparse
import csv
import json
import logging
import os
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import psycopg2
from psycopg2 import sql
from psycopg2.extras import RealDictCursor

from berth_recon.monitoring import AlertRuleGenerator, ReconciliationMetrics
from berth_recon.reconciliation.errors import InputShapeError, InvalidFilterError
from berth_recon.reconciliation.filters import parse_kind, parse_origin
from berth_recon.reconciliation.normalizer import normalize_berth_number
from berth_recon.reconciliation.models import (
    Discrepancy,
    DuplicateResult,
    DuplicateSummary,
    SummaryStatistics,
)
from berth_recon.reconciliation.report import (
    build_detailed_summary,
    duplicate_summary_to_dict,
    summary_to_dict,
)
from berth_recon.reconciliation.runner import (
    analyze_discrepancies,
    analyze_duplicates,
    render_discrepancies,
    render_duplicates,
)
from berth_recon.utils.correlation import (
    CorrelationContext,
    attach_correlation_id_to_envelope,
    setup_correlation_logging,
)

logger = logging.getLogger("berth_recon")


class StructuredJSONFormatter(logging.Formatter):
    """JSON formatter with correlation ID support."""

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'correlation_id': getattr(record, 'correlation_id', None),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        # Add extra fields
        if hasattr(record, 'command'):
            log_data['command'] = record.command
        if hasattr(record, 'duration'):
            log_data['duration_seconds'] = record.duration

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_logging(verbose: bool = False, json_logging: Optional[bool] = None) -> None:
    """
    Attach a console handler to the package logger.

    Log lines go to stderr so stdout carries only the JSON envelope. JSON
    lines are used when ``json_logging`` is set or JSON_LOGGING=true.
    """
    if json_logging is None:
        json_logging = os.getenv('JSON_LOGGING', 'false').lower() == 'true'

    handler = logging.StreamHandler(sys.stderr)
    if json_logging:
        handler.setFormatter(StructuredJSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
    setup_correlation_logging(handler)

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


# CSV cells arrive as text; these columns are typed in the prs/mdms tables
INTEGER_COLUMNS = ("id", "serial_no", "serialNo", "berth_number", "berthNumber", "berth_no")
BOOLEAN_COLUMNS = ("composite_flag", "compositeFlag")
TRUE_VALUES = ("true", "t", "yes", "y", "1")
FALSE_VALUES = ("false", "f", "no", "n", "0")


def coerce_csv_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Give CSV cells the types the database columns have.

    Integer and boolean columns are converted; an empty cell becomes None.
    A value that does not convert is kept as text, so a malformed berth
    number still fails the join instead of aborting the load.
    """
    coerced = dict(row)

    for column in INTEGER_COLUMNS:
        value = coerced.get(column)
        if isinstance(value, str):
            if not value.strip():
                coerced[column] = None
            else:
                number = normalize_berth_number(value)
                if number is not None:
                    coerced[column] = number

    for column in BOOLEAN_COLUMNS:
        value = coerced.get(column)
        if isinstance(value, str):
            flag = value.strip().lower()
            if not flag:
                coerced[column] = None
            elif flag in TRUE_VALUES:
                coerced[column] = True
            elif flag in FALSE_VALUES:
                coerced[column] = False

    return coerced


def load_rows(path: str) -> List[Dict[str, Any]]:
    """
    Load rows from a JSON array of objects or a CSV file with a header.

    CSV rows go through ``coerce_csv_row``; JSON values are used as parsed.

    Args:
        path: File path (.json or .csv)

    Returns:
        List of row dictionaries

    Raises:
        InputShapeError: If the file does not hold a list of objects
    """
    file_path = Path(path)

    if file_path.suffix.lower() == '.csv':
        with open(file_path, newline='') as f:
            rows = [coerce_csv_row(row) for row in csv.DictReader(f)]
        logger.info(f"Loaded {len(rows)} rows from {file_path}")
        return rows

    with open(file_path, 'r') as f:
        payload = json.load(f)

    if isinstance(payload, dict) and isinstance(payload.get('rows'), list):
        payload = payload['rows']

    if not isinstance(payload, list) or not all(isinstance(row, dict) for row in payload):
        raise InputShapeError(f"{file_path} must contain a JSON array of objects")

    logger.info(f"Loaded {len(payload)} rows from {file_path}")
    return payload


def envelope(data: Any, message: str, success: bool = True) -> Dict[str, Any]:
    """Wrap a result the way the PRS/MDMS web API does."""
    return attach_correlation_id_to_envelope({
        "success": success,
        "data": data,
        "message": message,
    })


class ReconciliationTool:
    """Loads both relations and runs reconciliation commands."""

    def __init__(
        self,
        postgres_host: str = "localhost",
        postgres_port: int = 5432,
        postgres_db: str = "railway",
        postgres_user: str = "postgres",
        postgres_password: str = "postgres",
        prs_table: str = "prs",
        mdms_table: str = "mdms",
        prs_file: Optional[str] = None,
        mdms_file: Optional[str] = None,
        metrics: Optional[ReconciliationMetrics] = None
    ):
        """
        Initialize reconciliation tool.

        Args:
            postgres_host: PostgreSQL host
            postgres_port: PostgreSQL port
            postgres_db: PostgreSQL database
            postgres_user: PostgreSQL username
            postgres_password: PostgreSQL password
            prs_table: PRS relation name
            mdms_table: MDMS relation name
            prs_file: Read PRS rows from this file instead of PostgreSQL
            mdms_file: Read MDMS rows from this file instead of PostgreSQL
            metrics: Metrics sink (a private registry if not provided)
        """
        self.postgres_host = postgres_host
        self.postgres_port = postgres_port
        self.postgres_db = postgres_db
        self.postgres_user = postgres_user
        self.postgres_password = postgres_password
        self.prs_table = prs_table
        self.mdms_table = mdms_table
        self.prs_file = prs_file
        self.mdms_file = mdms_file
        self.metrics = metrics or ReconciliationMetrics()

        logger.debug("ReconciliationTool initialized")

    def connect_postgres(self):
        """Connect to PostgreSQL."""
        logger.info(f"Connecting to PostgreSQL at {self.postgres_host}:{self.postgres_port}")
        return psycopg2.connect(
            host=self.postgres_host,
            port=self.postgres_port,
            database=self.postgres_db,
            user=self.postgres_user,
            password=self.postgres_password
        )

    def fetch_rows(self, conn, table_name: str) -> List[Dict[str, Any]]:
        """
        Fetch every row of a relation, in insertion order.

        Args:
            conn: PostgreSQL connection
            table_name: Relation name

        Returns:
            List of rows
        """
        query = sql.SQL("SELECT * FROM {} ORDER BY id").format(sql.Identifier(table_name))

        with conn.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute(query)
            rows = [dict(row) for row in cursor.fetchall()]

        logger.info(f"Fetched {len(rows)} rows from PostgreSQL {table_name}")
        return rows

    def load(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """Load PRS and MDMS rows from files where given, PostgreSQL otherwise."""
        prs_rows = load_rows(self.prs_file) if self.prs_file else None
        mdms_rows = load_rows(self.mdms_file) if self.mdms_file else None

        if prs_rows is None or mdms_rows is None:
            conn = self.connect_postgres()
            try:
                if prs_rows is None:
                    prs_rows = self.fetch_rows(conn, self.prs_table)
                if mdms_rows is None:
                    mdms_rows = self.fetch_rows(conn, self.mdms_table)
            finally:
                conn.close()

        return prs_rows, mdms_rows

    def run_discrepancies(self) -> Tuple[List[Discrepancy], SummaryStatistics]:
        """Load both relations, match them and record run metrics."""
        prs_rows, mdms_rows = self.load()

        start = time.perf_counter()
        try:
            discrepancies, summary = analyze_discrepancies(prs_rows, mdms_rows)
        except Exception:
            self.metrics.record_failure('discrepancies')
            raise
        duration = time.perf_counter() - start

        self.metrics.record_reconciliation_run(summary, duration_seconds=duration)
        logger.info(
            f"Reconciliation completed in {duration:.3f}s",
            extra={'command': 'discrepancies', 'duration': duration}
        )
        return discrepancies, summary

    def run_duplicates(self) -> Tuple[DuplicateResult, DuplicateSummary]:
        """Load both relations, group duplicates and record run metrics."""
        prs_rows, mdms_rows = self.load()

        start = time.perf_counter()
        try:
            result, summary = analyze_duplicates(prs_rows, mdms_rows)
        except Exception:
            self.metrics.record_failure('duplicates')
            raise
        duration = time.perf_counter() - start

        self.metrics.record_duplicate_run(summary, duration_seconds=duration)
        logger.info(
            f"Duplicate analysis completed in {duration:.3f}s",
            extra={'command': 'duplicates', 'duration': duration}
        )
        return result, summary

    def discrepancies(self, kind: Optional[str] = None, coach: Optional[str] = None) -> Dict[str, Any]:
        """All discrepancies (optionally filtered) with their summary."""
        if kind is not None:
            kind = parse_kind(kind)

        discrepancies, summary = self.run_discrepancies()
        return render_discrepancies(discrepancies, summary, kind=kind, coach_identifier=coach)

    def summary(self) -> Dict[str, Any]:
        """Summary statistics only."""
        _, summary = self.run_discrepancies()
        return summary_to_dict(summary)

    def detailed_summary(self) -> Dict[str, Any]:
        """Overview and per-kind breakdown."""
        _, summary = self.run_discrepancies()
        return build_detailed_summary(summary)

    def duplicates(self, origin: Optional[str] = None, coach: Optional[str] = None) -> Dict[str, Any]:
        """Duplicate groups (optionally filtered) with their summary."""
        if origin is not None:
            origin = parse_origin(origin)

        result, summary = self.run_duplicates()
        return render_duplicates(result, summary, origin=origin, coach_identifier=coach)

    def duplicate_summary(self) -> Dict[str, Any]:
        """Duplicate group and record counts per origin with the integrity score."""
        _, summary = self.run_duplicates()
        return duplicate_summary_to_dict(summary)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="berth-recon",
        description="PRS vs MDMS berth reconciliation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Input options
    parser.add_argument("--prs-file", help="Read PRS rows from a JSON/CSV file")
    parser.add_argument("--mdms-file", help="Read MDMS rows from a JSON/CSV file")
    parser.add_argument("--postgres-host", default=os.getenv("POSTGRES_HOST", "localhost"))
    parser.add_argument("--postgres-port", type=int, default=int(os.getenv("POSTGRES_PORT", "5432")))
    parser.add_argument("--postgres-db", default=os.getenv("POSTGRES_DB", "railway"))
    parser.add_argument("--postgres-user", default=os.getenv("POSTGRES_USER", "postgres"))
    parser.add_argument("--postgres-password", default=os.getenv("POSTGRES_PASSWORD", "postgres"))
    parser.add_argument("--prs-table", default=os.getenv("PRS_TABLE", "prs"))
    parser.add_argument("--mdms-table", default=os.getenv("MDMS_TABLE", "mdms"))

    # Observability
    parser.add_argument("--metrics-port", type=int, help="Expose Prometheus metrics on this port")
    parser.add_argument("--json-logging", action="store_true", default=None, help="Emit JSON log lines")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    discrepancies_parser = subparsers.add_parser("discrepancies", help="List discrepancies")
    discrepancies_parser.add_argument("--kind", help="TYPE_MISMATCH, MISSING_IN_TARGET or MISSING_IN_SOURCE")
    discrepancies_parser.add_argument("--coach", help="Coach code (case-insensitive)")

    subparsers.add_parser("summary", help="Discrepancy summary statistics")
    subparsers.add_parser("detailed-summary", help="Discrepancy overview and breakdown")

    duplicates_parser = subparsers.add_parser("duplicates", help="List duplicate groups")
    duplicates_parser.add_argument("--origin", help="SOURCE_ONLY, TARGET_ONLY or CROSS_SOURCE")
    duplicates_parser.add_argument("--coach", help="Coach code (case-insensitive)")

    subparsers.add_parser("duplicate-summary", help="Duplicate counts per origin and integrity score")

    alerts_parser = subparsers.add_parser("alerts", help="Print Prometheus alert rules as YAML")
    alerts_parser.add_argument("--output", help="Write the rules to this file instead")

    return parser


def run_command(tool: ReconciliationTool, args: argparse.Namespace) -> Dict[str, Any]:
    """Dispatch a parsed command and return its response envelope."""
    if args.command == "discrepancies":
        report = tool.discrepancies(kind=args.kind, coach=args.coach)
        return envelope(report, f"Found {report['count']} discrepancies")

    if args.command == "summary":
        summary = tool.summary()
        return envelope(summary, f"Summary: {summary['totalDiscrepancies']} total discrepancies found")

    if args.command == "detailed-summary":
        detailed = tool.detailed_summary()
        score = detailed["overview"]["dataQualityScore"]
        return envelope(detailed, f"Detailed analysis complete. Data quality score: {score}%")

    if args.command == "duplicates":
        report = tool.duplicates(origin=args.origin, coach=args.coach)
        return envelope(report, f"Found {report['totalGroups']} duplicate groups")

    if args.command == "duplicate-summary":
        summary = tool.duplicate_summary()
        return envelope(
            summary,
            f"Duplicate summary: {summary['totalGroups']} groups, integrity score {summary['integrityScore']}%"
        )

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, json_logging=args.json_logging)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "alerts":
        generator = AlertRuleGenerator()
        if args.output:
            generator.export_to_yaml(args.output)
        else:
            print(generator.to_yaml())
        return 0

    tool = ReconciliationTool(
        postgres_host=args.postgres_host,
        postgres_port=args.postgres_port,
        postgres_db=args.postgres_db,
        postgres_user=args.postgres_user,
        postgres_password=args.postgres_password,
        prs_table=args.prs_table,
        mdms_table=args.mdms_table,
        prs_file=args.prs_file,
        mdms_file=args.mdms_file
    )

    if args.metrics_port:
        tool.metrics.start_server(args.metrics_port)

    with CorrelationContext():
        try:
            result = run_command(tool, args)
            print(json.dumps(result, indent=2, default=str))
            return 0

        except InvalidFilterError as e:
            logger.error(f"Invalid filter: {e}")
            print(json.dumps(envelope(None, str(e), success=False), indent=2))
            return 1

        except Exception as e:
            logger.error(f"Error: {e}", exc_info=args.verbose)
            print(json.dumps(envelope(None, str(e), success=False), indent=2))
            return 1


if __name__ == "__main__":
    sys.exit(main())
