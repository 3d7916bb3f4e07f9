"""Reconciler: drive one remote object's lifecycle from a desired state record.

Every operation issues one or two blocking calls through the accessor and
returns or raises the raw outcome. There is no retry and no caching; callers
serialize concurrent work on the same id.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any

from .accessor import ObjectAccessor
from .errors import (
    AmbiguousName,
    ContractViolation,
    Deleted,
    NotFound,
    ReconcileError,
    StaleRevision,
    TransportError,
)
from .models import RemoteObject
from .projection import DesiredState, Projection

logger = logging.getLogger(__name__)


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class Reconciler[S: DesiredState, R: RemoteObject]:
    """Map desired state for one resource kind onto accessor calls."""

    def __init__(self, accessor: ObjectAccessor[R], projection: Projection[S, R]) -> None:
        self.accessor = accessor
        self.projection = projection

    @property
    def kind(self) -> str:
        return self.projection.kind

    def _call[T](self, operation: str, identifier: str, fn: Callable[..., T], *args: Any) -> T:
        try:
            return fn(*args)
        except OSError as exc:
            raise TransportError(
                f"Error during {self.kind} {operation}: {exc}",
                operation=operation,
                identifier=identifier,
            ) from exc

    def _failure(self, operation: str, identifier: str, status: int) -> ReconcileError:
        if status == HTTPStatus.PRECONDITION_FAILED and operation == "update":
            cls: type[ReconcileError] = StaleRevision
            message = f"Stale revision for {self.kind} {identifier} during {operation}"
        elif _is_success(status):
            cls = ContractViolation
            message = f"Unexpected status returned during {self.kind} {operation}: {status}"
        else:
            cls = ReconcileError
            message = f"Error during {self.kind} {operation}: status {status}"
        return cls(message, operation=operation, identifier=identifier, status=status)

    def _require_id(self, operation: str, id: str) -> None:
        if not id:
            raise ReconcileError(f"Error obtaining {self.kind} id", operation=operation)

    def _read(self, operation: str, id: str) -> R | None:
        obj, status = self._call(operation, id, self.accessor.read_object, id)
        if status == HTTPStatus.NOT_FOUND:
            logger.debug("%s %s not found", self.kind, id)
            return None
        if not _is_success(status):
            raise self._failure(operation, id, status)
        if obj is None:
            raise ContractViolation(
                f"Empty body returned during {self.kind} {operation}",
                operation=operation,
                identifier=id,
                status=status,
            )
        return obj

    def resolve(self, desired: S) -> R | NotFound:
        """Find the remote object by id, or by exact display name.

        Raises ``AmbiguousName`` when several objects share the name; the
        caller has to disambiguate.
        """
        if desired.id:
            obj = self._read("read", desired.id)
            if obj is None:
                return NotFound(desired.id)
        elif desired.display_name:
            name = desired.display_name
            objects = self._call("list", name, self.accessor.list_objects)
            found = [o for o in objects if o.display_name == name]
            if not found:
                logger.debug("%s '%s' not found out of %d objects", self.kind, name, len(objects))
                return NotFound(name)
            if len(found) > 1:
                raise AmbiguousName(name, len(found))
            obj = found[0]
        else:
            raise ReconcileError(f"Error obtaining {self.kind} id or name", operation="resolve")

        self.projection.observe(desired, obj)
        return obj

    def apply(self, desired: S) -> R:
        """Create when ``desired.id`` is empty, otherwise update in place."""
        if not desired.id:
            return self._create(desired)
        return self._update(desired)

    def _create(self, desired: S) -> R:
        label = desired.display_name or self.kind
        payload = self.projection.payload(desired)
        obj, status = self._call("create", label, self.accessor.create_object, payload)
        if status != HTTPStatus.CREATED:
            raise self._failure("create", label, status)
        if obj is None or not obj.id:
            raise ContractViolation(
                f"No id returned during {self.kind} create",
                operation="create",
                identifier=label,
                status=status,
            )
        logger.info("Created %s %s", self.kind, obj.id)
        self.projection.observe(desired, obj)
        return obj

    def _update(self, desired: S) -> R:
        id = desired.id
        if desired.revision is None:
            raise ReconcileError(
                f"Error during {self.kind} update: no revision known for {id}",
                operation="update",
                identifier=id,
            )
        payload = self.projection.payload(desired, revision=desired.revision)
        obj, status = self._call("update", id, self.accessor.update_object, id, payload)
        if status == HTTPStatus.NOT_FOUND:
            raise ReconcileError(
                f"Error during {self.kind} update: {id} disappeared",
                operation="update",
                identifier=id,
                status=status,
            )
        if status != HTTPStatus.OK:
            raise self._failure("update", id, status)
        if obj is None:
            raise ContractViolation(
                f"Empty body returned during {self.kind} update",
                operation="update",
                identifier=id,
                status=status,
            )
        logger.info("Updated %s %s (revision %s)", self.kind, id, obj.revision)
        self.projection.observe(desired, obj)
        return obj

    def refresh(self, id: str, *, state: S | None = None) -> R | Deleted:
        """Re-read an object by id, projecting it into ``state`` when given."""
        self._require_id("refresh", id)
        obj = self._read("refresh", id)
        if obj is None:
            return Deleted(id)
        if state is not None:
            self.projection.observe(state, obj)
        return obj

    def destroy(self, id: str) -> None:
        """Delete an object; one that is already gone counts as converged."""
        self._require_id("delete", id)
        status = self._call("delete", id, self.accessor.delete_object, id)
        if status == HTTPStatus.NOT_FOUND:
            logger.debug("%s %s not found; already deleted", self.kind, id)
            return
        if not _is_success(status):
            raise self._failure("delete", id, status)
        logger.info("Deleted %s %s", self.kind, id)
