"""Blueprint model: a named, ordered collection of resource operations."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, Field

from .context import Context
from .errors import ReconcileError
from .specop import SpecOp

logger = logging.getLogger(__name__)


class Blueprint(BaseModel):
    """A named collection of spec operations, run in declaration order."""

    model_config = {"arbitrary_types_allowed": True}

    name: str
    description: str = ""
    ops: list[SpecOp[Any]] = Field(default_factory=list)

    def __iter__(self) -> Iterator[SpecOp[Any]]:  # type: ignore[override]
        return iter(self.ops)

    def __len__(self) -> int:
        return len(self.ops)

    def build(self, ctx: Context) -> None:
        """Execute all operations; the first failure stops the blueprint."""
        logger.debug("Building blueprint '%s' (%d ops)", self.name, len(self.ops))
        for op in self.ops:
            try:
                op(ctx)
            except ReconcileError as exc:
                logger.error("Blueprint '%s' failed at %r: %s", self.name, op, exc)
                raise
