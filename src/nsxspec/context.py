"""Runtime execution context for the build pipeline."""

from __future__ import annotations

from typing import Any, Protocol


class AccessorProvider(Protocol):
    """Anything that can hand out an object accessor per resource kind."""

    def accessor(self, kind: str) -> Any: ...


class Context[P]:
    """Runtime state passed through the build chain."""

    def __init__(
        self,
        target: P,
        *,
        dry_run: bool = False,
        client: AccessorProvider | None = None,
    ) -> None:
        self.target = target
        self.dry_run = dry_run
        self.client = client

    def accessor(self, kind: str) -> Any:
        """Return the accessor for a resource kind from the bound client."""
        if self.client is None:
            raise ValueError(f"No manager client bound to context for '{kind}'")
        return self.client.accessor(kind)
