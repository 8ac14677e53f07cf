"""
Correlation IDs for Reconciliation Runs

One ID per CLI run, carried in a context variable so every log line of the
run and the JSON envelope it prints share the same value.
"""

import contextvars
import logging
import uuid
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'berth_recon_correlation_id',
    default=None
)

MISSING_ID = "N/A"


def generate_correlation_id() -> str:
    """Return a fresh UUID4 string."""
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> contextvars.Token:
    """
    Make ``correlation_id`` current for this context.

    Args:
        correlation_id: ID to use

    Returns:
        Token that restores the previous value when passed to ``reset``

    Raises:
        ValueError: If correlation_id is not a non-empty string
    """
    if not isinstance(correlation_id, str) or not correlation_id:
        raise ValueError("Correlation ID must be a non-empty string")

    return _correlation_id.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id.set(None)


def get_or_create_correlation_id() -> str:
    """Current correlation ID, generating and storing one if none is set."""
    current = get_correlation_id()
    if current:
        return current

    current = generate_correlation_id()
    set_correlation_id(current)
    logger.debug(f"Created new correlation ID: {current}")
    return current


class CorrelationContext:
    """
    Scope a correlation ID to a ``with`` block.

    The ID in effect before the block is restored on exit, including when
    the block raises.

    Usage:
        with CorrelationContext() as correlation_id:
            run_command(tool, args)
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_correlation_id(self.correlation_id)
        logger.debug(f"Entered correlation context: {self.correlation_id}")
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        _correlation_id.reset(self._token)
        self._token = None


def correlation_id_filter(record: logging.LogRecord) -> bool:
    """Logging filter stamping ``record.correlation_id``; never drops a record."""
    record.correlation_id = get_correlation_id() or MISSING_ID
    return True


def setup_correlation_logging(handler: logging.Handler) -> None:
    """Install ``correlation_id_filter`` on a handler (or logger)."""
    handler.addFilter(correlation_id_filter)


def attach_correlation_id_to_envelope(envelope: Dict[str, Any]) -> Dict[str, Any]:
    """
    Stamp a ``{success, data, message}`` envelope with the run's ID.

    The ID goes under ``meta.correlation_id``; other ``meta`` keys are kept.

    Args:
        envelope: Response envelope, modified in place

    Returns:
        The same envelope

    Raises:
        ValueError: If envelope is not a dictionary
    """
    if not isinstance(envelope, dict):
        raise ValueError("Envelope must be a dictionary")

    meta = envelope.setdefault("meta", {})
    meta["correlation_id"] = get_or_create_correlation_id()
    return envelope
