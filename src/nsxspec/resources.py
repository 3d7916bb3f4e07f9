"""Managed resource kinds: desired state models, field tables and specs."""

from __future__ import annotations

import ipaddress
import logging
from typing import Any, ClassVar

from pydantic import Field, field_validator

from .accessor import ObjectAccessor
from .context import Context
from .errors import NotFound, ReconcileError
from .models import DhcpRelayProfile, NsGroup, RemoteObject, SpoofGuardSwitchingProfile
from .projection import DesiredState, Projection, common_fields, flag, scalar, string_set
from .reconciler import Reconciler
from .spec import Specification, spec

logger = logging.getLogger(__name__)

LPORT_BINDINGS = "LPORT_BINDINGS"


# -- Desired state --


class DhcpRelayProfileState(DesiredState):
    server_addresses: set[str] = Field(default_factory=set)

    @field_validator("server_addresses")
    @classmethod
    def _check_addresses(cls, value: set[str]) -> set[str]:
        for address in value:
            try:
                ipaddress.ip_address(address)
            except ValueError:
                raise ValueError(f"'{address}' is not a valid IP address") from None
        return value


class SpoofGuardSwitchingProfileState(DesiredState):
    address_binding_whitelist_enabled: bool = False


class NsGroupState(DesiredState):
    pass


# -- Field tables --

DHCP_RELAY_PROFILE = Projection(
    "DhcpRelayProfile",
    DhcpRelayProfileState,
    DhcpRelayProfile,
    {**common_fields(), "server_addresses": string_set("server_addresses")},
)

SPOOFGUARD_SWITCHING_PROFILE = Projection(
    "SpoofGuardSwitchingProfile",
    SpoofGuardSwitchingProfileState,
    SpoofGuardSwitchingProfile,
    {
        **common_fields(),
        "address_binding_whitelist_enabled": flag("white_list_providers", LPORT_BINDINGS),
    },
)

NS_GROUP = Projection(
    "NSGroup",
    NsGroupState,
    NsGroup,
    {"display_name": scalar("display_name"), "description": scalar("description")},
)


# -- Specs --


class ResourceSpec[S: DesiredState](Specification[Any]):
    """Specification backed by a Reconciler for one resource kind.

    Each check resolves the object afresh; nothing read from the manager is
    kept between calls other than the identity assigned on create.
    """

    projection: ClassVar[Projection]
    required: ClassVar[tuple[str, ...]] = ()

    def __init__(self, **attrs: Any) -> None:
        self.desired: S = self.projection.state_type.model_validate(attrs)

    def __repr__(self) -> str:
        key = self.desired.display_name or self.desired.id or "?"
        return f"{type(self).__name__}({key!r})"

    def reconciler(self, ctx: Context[Any]) -> Reconciler[S, Any]:
        return Reconciler(ctx.accessor(self.projection.kind), self.projection)

    def _resolve(self, reconciler: Reconciler[S, Any]) -> tuple[S, RemoteObject | NotFound]:
        observed = self.desired.model_copy(deep=True)
        if not observed.id and not observed.display_name:
            # unnamed and unbound: nothing to look up, the manager assigns both
            return observed, NotFound("")
        return observed, reconciler.resolve(observed)

    def exists(self, ctx: Context[Any]) -> bool:
        _, current = self._resolve(self.reconciler(ctx))
        return not isinstance(current, NotFound)

    def equals(self, ctx: Context[Any]) -> bool:
        _, current = self._resolve(self.reconciler(ctx))
        if isinstance(current, NotFound):
            return False
        changed = self.projection.differences(self.desired, current)
        if changed:
            logger.debug("%r differs in %s", self, ", ".join(changed))
        return not changed

    def apply(self, ctx: Context[Any]) -> None:
        for name in self.required:
            if not getattr(self.desired, name):
                raise ValueError(f"{type(self).__name__} requires '{name}'")

        reconciler = self.reconciler(ctx)
        observed, current = self._resolve(reconciler)
        target = self.desired.model_copy(deep=True)
        if isinstance(current, NotFound):
            if target.id:
                logger.info("%r is gone from the manager; creating it again", self)
            target.id = ""
            target.revision = None
        else:
            target.id = observed.id
            target.revision = observed.revision

        reconciler.apply(target)
        self.desired.id = target.id
        self.desired.revision = target.revision

    def remove(self, ctx: Context[Any]) -> None:
        reconciler = self.reconciler(ctx)
        observed, current = self._resolve(reconciler)
        if isinstance(current, NotFound):
            logger.debug("%r not present; nothing to remove", self)
            return
        reconciler.destroy(observed.id)


@spec("dhcp_relay_profile")
class DhcpRelayProfileSpec(ResourceSpec[DhcpRelayProfileState]):
    """DHCP relay profile with its set of relay server addresses."""

    projection = DHCP_RELAY_PROFILE
    required = ("server_addresses",)


@spec("spoofguard_switching_profile")
class SpoofGuardSwitchingProfileSpec(ResourceSpec[SpoofGuardSwitchingProfileState]):
    """SpoofGuard switching profile; the whitelist flag maps to LPORT_BINDINGS."""

    projection = SPOOFGUARD_SWITCHING_PROFILE


# -- Data sources --


def read_ns_group(
    accessor: ObjectAccessor[NsGroup],
    *,
    id: str = "",
    display_name: str = "",
) -> NsGroupState:
    """Look up an NS group by id, or by exact display name."""
    state = NsGroupState(id=id, display_name=display_name)
    result = Reconciler(accessor, NS_GROUP).resolve(state)
    if isinstance(result, NotFound):
        raise ReconcileError(
            f"NS group '{result.key}' was not found",
            operation="read",
            identifier=result.key,
        )
    return state
