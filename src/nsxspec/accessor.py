"""Capability interface the reconciler drives.

Implementations own transport, auth and deadlines. Statuses are HTTP codes;
a transport failure is raised as ``OSError`` (``requests`` errors qualify).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .models import RemoteObject


class ObjectAccessor[R: RemoteObject](Protocol):
    """Create, read, list, update and delete one kind of remote object."""

    def create_object(self, payload: R) -> tuple[R | None, int]:
        """Create an object; the manager answers 201 on success."""

    def read_object(self, id: str) -> tuple[R | None, int]:
        """Read an object by id; 404 means it does not exist."""

    def list_objects(self) -> Sequence[R]:
        """Return every object of this kind."""

    def update_object(self, id: str, payload: R) -> tuple[R | None, int]:
        """Replace an object; ``payload.revision`` must match the remote one."""

    def delete_object(self, id: str) -> int:
        """Delete an object; 404 means it was already gone."""
