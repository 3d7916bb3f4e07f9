"""Desired state models and the field tables that map them onto remote objects."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from .models import RemoteObject, Tag

logger = logging.getLogger(__name__)

type Getter = Callable[[Any], Any]
type Setter = Callable[[Any, Any], None]


class DesiredState(BaseModel):
    """User-declared configuration for one managed object.

    ``id`` and ``revision`` form the observed half: they are filled in from
    the manager and never declared by hand in the normal flow.
    """

    model_config = {"populate_by_name": True, "extra": "forbid"}

    id: str = ""
    display_name: str = ""
    revision: int | None = None
    description: str = ""
    tags: list[Tag] = Field(default_factory=list, alias="tag")


# -- Field helpers --


def attr(name: str, *, decode: Callable[[Any], Any] = list, encode: Callable[[Any], Any] = list):
    """Accessor pair copying ``name`` between state and remote object."""

    def get(remote: Any) -> Any:
        return decode(getattr(remote, name))

    def set_(remote: Any, value: Any) -> None:
        setattr(remote, name, encode(value))

    return get, set_


def scalar(name: str):
    """Accessor pair for a plain string field."""
    return attr(name, decode=lambda v: v, encode=lambda v: v)


def encode_flag(enabled: bool, token: str) -> list[str]:
    """Encode a boolean as membership of a sentinel token."""
    return [token] if enabled else []


def decode_flag(values: Iterable[str], token: str) -> bool:
    """Decode a sentinel list; anything but exactly ``[token]`` is False."""
    values = list(values)
    return len(values) == 1 and values[0] == token


def flag(name: str, token: str):
    """Accessor pair mapping a boolean onto a singleton sentinel list."""
    return attr(
        name,
        decode=lambda v: decode_flag(v, token),
        encode=lambda v: encode_flag(v, token),
    )


def string_set(name: str):
    """Accessor pair mapping an unordered set onto a remote list."""
    return attr(name, decode=set, encode=sorted)


# -- Projection --


class Projection[S: DesiredState, R: RemoteObject]:
    """Reflection-free field table for one resource kind.

    ``fields`` maps a desired-state field name to a ``(get, set)`` pair: ``get``
    reads the value for that field off a remote object and ``set`` writes a
    desired value into an outgoing payload. Fields listed in ``computed`` are
    filled by the manager when left empty and are only compared when declared.
    """

    def __init__(
        self,
        kind: str,
        state_type: type[S],
        remote_type: type[R],
        fields: Mapping[str, tuple[Getter, Setter]],
        *,
        computed: Iterable[str] = ("display_name",),
    ) -> None:
        self.kind = kind
        self.state_type = state_type
        self.remote_type = remote_type
        self.fields = dict(fields)
        self.computed = frozenset(computed)

    def __repr__(self) -> str:
        return f"Projection(kind={self.kind}, fields={sorted(self.fields)})"

    def payload(self, state: S, *, revision: int | None = None) -> R:
        """Build the request object for a create (no revision) or update."""
        remote = self.remote_type()
        for name, (_, set_) in self.fields.items():
            set_(remote, getattr(state, name))
        remote.revision = revision
        return remote

    def observe(self, state: S, remote: R) -> S:
        """Copy remote fields into ``state``; ``id`` is only set while empty."""
        for name, (get, _) in self.fields.items():
            setattr(state, name, get(remote))
        if not state.id:
            state.id = remote.id
        elif remote.id and remote.id != state.id:
            logger.warning("%s %s reported id %s; keeping the original", self.kind, state.id, remote.id)
        state.revision = remote.revision
        return state

    def differences(self, state: S, remote: R) -> list[str]:
        """Return the names of declared fields that differ from the remote object."""
        changed: list[str] = []
        for name, (get, _) in self.fields.items():
            wanted = getattr(state, name)
            if name in self.computed and not wanted:
                continue
            if wanted != get(remote):
                changed.append(name)
        return changed

    def matches(self, state: S, remote: R) -> bool:
        return not self.differences(state, remote)


def common_fields() -> dict[str, tuple[Getter, Setter]]:
    """Fields shared by every managed object."""
    return {
        "display_name": scalar("display_name"),
        "description": scalar("description"),
        "tags": attr("tags"),
    }
