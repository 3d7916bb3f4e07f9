"""SpecOp strategies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .context import Context
from .spec import Specification

logger = logging.getLogger(__name__)


class SpecOp[P](ABC):
    """Wraps a Specification with conditional execution logic."""

    def __init__(self, spec: Specification[P]) -> None:
        self.spec = spec

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.spec!r})"

    @abstractmethod
    def __call__(self, ctx: Context[P]) -> None: ...


class Present[P](SpecOp[P]):
    """Create only if the object doesn't exist."""

    def __call__(self, ctx: Context[P]) -> None:
        if self.spec.exists(ctx):
            logger.debug("Skipping %r; already exists", self.spec)
        elif ctx.dry_run:
            logger.info("[DRY RUN] Would create %r", self.spec)
        else:
            logger.info("Creating %r", self.spec)
            self.spec.apply(ctx)


class Ensure[P](SpecOp[P]):
    """Create or update if the remote object doesn't match."""

    def __call__(self, ctx: Context[P]) -> None:
        if self.spec.equals(ctx):
            logger.debug("Skipping %r; up to date", self.spec)
        elif ctx.dry_run:
            logger.info("[DRY RUN] Would apply %r", self.spec)
        else:
            logger.info("Applying %r", self.spec)
            self.spec.apply(ctx)


class Absent[P](SpecOp[P]):
    """Delete if the object exists."""

    def __call__(self, ctx: Context[P]) -> None:
        if self.spec.exists(ctx):
            if ctx.dry_run:
                logger.info("[DRY RUN] Would remove %r", self.spec)
            else:
                logger.info("Removing %r", self.spec)
                self.spec.remove(ctx)
        else:
            logger.debug("Skipping removal of %r; not present", self.spec)


STRATEGIES: dict[str, type[SpecOp]] = {
    "present": Present,
    "ensure": Ensure,
    "absent": Absent,
}
