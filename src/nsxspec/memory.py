"""In memory accessor.

This accessor is used for tests and local simulations. It behaves like the
manager's object store for one resource kind: ids and revisions are assigned
here, updates with a stale revision get 412 and unknown ids get 404.

Faults can be injected per operation through ``statuses`` (answer with a
fixed status instead of doing the work) and ``failures`` (raise an
``OSError`` as a broken transport would).
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from http import HTTPStatus

from .models import RemoteObject

logger = logging.getLogger(__name__)


@dataclass
class InMemoryAccessor[R: RemoteObject]:
    """Dict-backed implementation of the object accessor protocol."""

    prefix: str = "obj"
    objects: dict[str, R] = field(default_factory=dict)
    statuses: dict[str, int] = field(default_factory=dict)
    failures: dict[str, OSError] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)

    def _enter(self, operation: str) -> int | None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]
        return self.statuses.get(operation)

    def seed(self, obj: R) -> R:
        """Place an object directly into the store, assigning id and revision."""
        stored = obj.model_copy(deep=True)
        if not stored.id:
            stored.id = f"{self.prefix}{next(self._ids)}"
        if stored.revision is None:
            stored.revision = 0
        self.objects[stored.id] = stored
        return stored.model_copy(deep=True)

    def create_object(self, payload: R) -> tuple[R | None, int]:
        if (status := self._enter("create")) is not None:
            return None, status
        stored = payload.model_copy(deep=True)
        stored.id = ""
        stored.revision = None
        created = self.seed(stored)
        logger.debug("Stored %s %s", type(created).__name__, created.id)
        return created, HTTPStatus.CREATED

    def read_object(self, id: str) -> tuple[R | None, int]:
        if (status := self._enter("read")) is not None:
            return None, status
        if id not in self.objects:
            return None, HTTPStatus.NOT_FOUND
        return self.objects[id].model_copy(deep=True), HTTPStatus.OK

    def list_objects(self) -> list[R]:
        self._enter("list")
        return [obj.model_copy(deep=True) for obj in self.objects.values()]

    def update_object(self, id: str, payload: R) -> tuple[R | None, int]:
        if (status := self._enter("update")) is not None:
            return None, status
        current = self.objects.get(id)
        if current is None:
            return None, HTTPStatus.NOT_FOUND
        if payload.revision != current.revision:
            return None, HTTPStatus.PRECONDITION_FAILED
        updated = payload.model_copy(deep=True)
        updated.id = id
        updated.revision = (current.revision or 0) + 1
        self.objects[id] = updated
        return updated.model_copy(deep=True), HTTPStatus.OK

    def delete_object(self, id: str) -> int:
        if (status := self._enter("delete")) is not None:
            return status
        if self.objects.pop(id, None) is None:
            return HTTPStatus.NOT_FOUND
        return HTTPStatus.OK


@dataclass
class InMemoryClient:
    """Hands out one in memory accessor per resource kind."""

    accessors: dict[str, InMemoryAccessor] = field(default_factory=dict)

    def accessor(self, kind: str) -> InMemoryAccessor:
        if kind not in self.accessors:
            self.accessors[kind] = InMemoryAccessor(prefix=f"{kind.lower()}-")
        return self.accessors[kind]
