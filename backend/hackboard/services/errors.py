from __future__ import annotations


class DomainError(Exception):
    pass


class NotFoundError(DomainError):
    pass


class ConflictError(DomainError):
    pass


class ConsistencyViolation(DomainError):
    """Ledger totals diverged from the submissions they summarize. A defect, not a runtime condition."""
