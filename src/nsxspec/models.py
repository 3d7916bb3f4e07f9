"""Remote object models as the manager API represents them."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Tag(BaseModel):
    """A scope/tag pair attached to a managed object."""

    model_config = {"frozen": True}

    scope: str = ""
    tag: str = ""


class RemoteObject(BaseModel):
    """Base representation of an object owned by the manager.

    ``id`` is assigned by the manager on create and never changes. ``revision``
    travels on the wire as ``_revision`` and must be echoed back unmodified on
    every update.
    """

    model_config = {"populate_by_name": True, "extra": "ignore"}

    id: str = ""
    revision: int | None = Field(default=None, alias="_revision")
    resource_type: str = ""
    display_name: str = ""
    description: str = ""
    tags: list[Tag] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Serialize for a create or update request body."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        return {k: v for k, v in data.items() if v != ""}


class DhcpRelayProfile(RemoteObject):
    resource_type: str = "DhcpRelayProfile"
    server_addresses: list[str] = Field(default_factory=list)


class SpoofGuardSwitchingProfile(RemoteObject):
    resource_type: str = "SpoofGuardSwitchingProfile"
    white_list_providers: list[str] = Field(default_factory=list)


class NsGroup(RemoteObject):
    resource_type: str = "NSGroup"
