"""Error taxonomy for ingestion, provider access and store writes."""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for failures raised by the reconciliation core."""


class FatalIngestionError(ReconciliationError):
    """Raised when a ledger input cannot be read at all; aborts the run."""


class ProviderError(ReconciliationError):
    """Raised when the payment provider cannot serve a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderUnavailableError(ProviderError):
    """Provider refuses an operation for capability or scope reasons."""


class RecordWriteError(ReconciliationError):
    """Raised when one store record cannot be inserted or updated."""

    def __init__(self, uid: str, message: str) -> None:
        super().__init__(f"{uid}: {message}")
        self.uid = uid
        self.reason = message


class UnknownStatusError(ValueError):
    """Raised when a status string cannot be mapped to a canonical status."""

    def __init__(self, raw_status: object, *, context: str | None = None) -> None:
        where = f" ({context})" if context else ""
        super().__init__(f"Unrecognised payment status{where}: {raw_status!r}")
        self.raw_status = raw_status
        self.context = context
