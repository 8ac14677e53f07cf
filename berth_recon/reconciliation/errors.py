"""
Exceptions raised by the berth reconciliation core and its loaders.
"""


class ReconciliationError(Exception):
    """Base class for reconciliation errors."""
    pass


class InvalidFilterError(ReconciliationError, ValueError):
    """Raised when a filter names an unknown discrepancy kind or duplicate origin."""
    pass


class InputShapeError(ReconciliationError):
    """Raised when loaded input is not a list of row mappings."""
    pass
