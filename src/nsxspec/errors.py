"""Reconciliation outcomes and error taxonomy.

Outcomes that a caller is expected to act on (the object is simply not there)
are returned as markers. Everything else is raised, carrying the attempted
operation, the identifier and the status code so it can be logged or retried
by the caller. Nothing here is retried internally.
"""

from __future__ import annotations

from dataclasses import dataclass

# -- Returned markers --


@dataclass(frozen=True)
class NotFound:
    """Lookup key is absent on the manager."""

    key: str


@dataclass(frozen=True)
class Deleted:
    """Object vanished since the last read; local identity is void."""

    id: str


# -- Raised errors --


class ReconcileError(Exception):
    """Base class for every reconciliation failure."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        identifier: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.identifier = identifier
        self.status = status


class AmbiguousName(ReconcileError):
    """A display name matched more than one remote object."""

    def __init__(self, name: str, total: int, *, operation: str = "resolve") -> None:
        super().__init__(
            f"Found {total} objects with display name '{name}'",
            operation=operation,
            identifier=name,
        )
        self.name = name
        self.total = total


class StaleRevision(ReconcileError):
    """Update rejected because the remote revision moved on."""


class TransportError(ReconcileError):
    """The accessor could not reach the manager."""


class ContractViolation(ReconcileError):
    """The manager answered with a status it never documents for success."""
