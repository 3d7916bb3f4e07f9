"""Specification ABC and spec registration."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .context import Context

_spec_registry: dict[str, type[Specification]] = {}


def spec(name: str):
    """Register a Specification class as an HCL block decoder."""

    def decorator(cls):
        _spec_registry[name] = cls
        return cls

    return decorator


def lookup(name: str) -> type[Specification]:
    """Return the Specification class registered under ``name``."""
    if name not in _spec_registry:
        raise ValueError(f"Unknown spec type: '{name}'")
    return _spec_registry[name]


class Specification[P](ABC):
    """Base class for all managed resource specs."""

    @abstractmethod
    def equals(self, ctx: Context[P]) -> bool:
        """Remote state matches desired state."""

    def exists(self, ctx: Context[P]) -> bool:
        """Remote object exists (defaults to equals)."""
        return self.equals(ctx)

    @abstractmethod
    def apply(self, ctx: Context[P]) -> None:
        """Create or update the remote object."""

    @abstractmethod
    def remove(self, ctx: Context[P]) -> None:
        """Delete the remote object."""
