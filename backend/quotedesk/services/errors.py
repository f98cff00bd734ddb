"""Exceptions raised by the quotation engine services."""


class QuotationEngineError(Exception):
    """Base class for engine errors surfaced to the API layer."""


class RecordNotFoundError(QuotationEngineError, LookupError):
    """Raised when an entry point is given an id that does not exist."""

    def __init__(self, kind: str, record_id: int):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class InvalidReorderError(QuotationEngineError, ValueError):
    """Raised when a room reorder list is not a permutation of the quotation's rooms."""


class ConflictError(QuotationEngineError):
    """Raised when an operation would duplicate a one-per-parent record."""
