"""Tests for nsxspec.resources."""

from __future__ import annotations

import pytest

from nsxspec.context import Context
from nsxspec.errors import AmbiguousName, ReconcileError
from nsxspec.memory import InMemoryAccessor, InMemoryClient
from nsxspec.models import DhcpRelayProfile, NsGroup, SpoofGuardSwitchingProfile
from nsxspec.projects import Project
from nsxspec.resources import DhcpRelayProfileSpec, SpoofGuardSwitchingProfileSpec, read_ns_group
from nsxspec.spec import _spec_registry
from nsxspec.specop import Absent, Ensure, Present


@pytest.fixture
def client() -> InMemoryClient:
    return InMemoryClient()


@pytest.fixture
def ctx(client) -> Context[Project]:
    return Context(target=Project(name="test"), client=client)


def _relays(client: InMemoryClient) -> InMemoryAccessor:
    return client.accessor("DhcpRelayProfile")


class TestRegistration:
    def test_dhcp_relay_profile_registered(self):
        assert _spec_registry["dhcp_relay_profile"] is DhcpRelayProfileSpec

    def test_spoofguard_registered(self):
        assert _spec_registry["spoofguard_switching_profile"] is SpoofGuardSwitchingProfileSpec


class TestDhcpRelayProfileSpec:
    def test_repr(self):
        s = DhcpRelayProfileSpec(display_name="relay", server_addresses=["10.0.0.1"])
        assert repr(s) == "DhcpRelayProfileSpec('relay')"

    def test_not_exists(self, ctx):
        s = DhcpRelayProfileSpec(display_name="relay", server_addresses=["10.0.0.1"])
        assert s.exists(ctx) is False
        assert s.equals(ctx) is False

    def test_apply_creates(self, ctx, client):
        s = DhcpRelayProfileSpec(display_name="relay", server_addresses=["10.0.0.1"])
        s.apply(ctx)
        stored = _relays(client).objects[s.desired.id]
        assert stored.display_name == "relay"
        assert stored.server_addresses == ["10.0.0.1"]
        assert s.equals(ctx) is True

    def test_apply_updates_existing_by_name(self, ctx, client):
        existing = _relays(client).seed(DhcpRelayProfile(display_name="relay", server_addresses=["10.0.0.9"]))
        s = DhcpRelayProfileSpec(display_name="relay", server_addresses=["10.0.0.1"])
        assert s.exists(ctx) is True
        assert s.equals(ctx) is False
        s.apply(ctx)
        assert s.desired.id == existing.id
        assert _relays(client).objects[existing.id].server_addresses == ["10.0.0.1"]
        assert _relays(client).objects[existing.id].revision == 1
        assert len(_relays(client).objects) == 1

    def test_apply_recreates_when_id_is_gone(self, ctx, client):
        s = DhcpRelayProfileSpec(id="vanished", server_addresses=["10.0.0.1"])
        s.apply(ctx)
        assert s.desired.id != "vanished"
        assert s.desired.id in _relays(client).objects

    def test_ensure_creates_unnamed_profile(self, ctx, client):
        s = DhcpRelayProfileSpec(server_addresses=["10.0.0.1"])
        Ensure(s)(ctx)
        (stored,) = _relays(client).objects.values()
        assert stored.id == s.desired.id
        assert stored.server_addresses == ["10.0.0.1"]
        assert "list" not in _relays(client).calls

    def test_unnamed_profile_is_not_present(self, ctx, client):
        s = DhcpRelayProfileSpec(server_addresses=["10.0.0.1"])
        assert s.exists(ctx) is False
        s.remove(ctx)
        assert _relays(client).calls == []

    def test_apply_requires_server_addresses(self, ctx):
        s = DhcpRelayProfileSpec(display_name="relay")
        with pytest.raises(ValueError, match="server_addresses"):
            s.apply(ctx)

    def test_remove(self, ctx, client):
        _relays(client).seed(DhcpRelayProfile(display_name="relay"))
        s = DhcpRelayProfileSpec(display_name="relay")
        s.remove(ctx)
        assert _relays(client).objects == {}

    def test_remove_missing_is_noop(self, ctx, client):
        DhcpRelayProfileSpec(display_name="relay").remove(ctx)
        assert "delete" not in _relays(client).calls

    def test_ambiguous_name_surfaces(self, ctx, client):
        _relays(client).seed(DhcpRelayProfile(display_name="relay"))
        _relays(client).seed(DhcpRelayProfile(display_name="relay"))
        s = DhcpRelayProfileSpec(display_name="relay", server_addresses=["10.0.0.1"])
        with pytest.raises(AmbiguousName):
            Ensure(s)(ctx)

    def test_requires_client(self):
        s = DhcpRelayProfileSpec(display_name="relay")
        with pytest.raises(ValueError, match="No manager client"):
            s.exists(Context(target=Project(name="test")))


class TestSpoofGuardSwitchingProfileSpec:
    def test_ensure_enables_whitelist(self, ctx, client):
        s = SpoofGuardSwitchingProfileSpec(display_name="sg", address_binding_whitelist_enabled=True)
        Ensure(s)(ctx)
        accessor = client.accessor("SpoofGuardSwitchingProfile")
        (stored,) = accessor.objects.values()
        assert stored.white_list_providers == ["LPORT_BINDINGS"]

    def test_out_of_band_provider_is_drift(self, ctx, client):
        accessor = client.accessor("SpoofGuardSwitchingProfile")
        stored = accessor.seed(
            SpoofGuardSwitchingProfile(display_name="sg", white_list_providers=["LPORT_BINDINGS", "X"])
        )
        s = SpoofGuardSwitchingProfileSpec(display_name="sg", address_binding_whitelist_enabled=True)
        assert s.equals(ctx) is False
        Ensure(s)(ctx)
        assert accessor.objects[stored.id].white_list_providers == ["LPORT_BINDINGS"]

    def test_present_skips_existing(self, ctx, client):
        accessor = client.accessor("SpoofGuardSwitchingProfile")
        accessor.seed(SpoofGuardSwitchingProfile(display_name="sg"))
        Present(SpoofGuardSwitchingProfileSpec(display_name="sg", description="x"))(ctx)
        assert "update" not in accessor.calls

    def test_absent_deletes(self, ctx, client):
        accessor = client.accessor("SpoofGuardSwitchingProfile")
        accessor.seed(SpoofGuardSwitchingProfile(display_name="sg"))
        Absent(SpoofGuardSwitchingProfileSpec(display_name="sg"))(ctx)
        assert accessor.objects == {}


class TestReadNsGroup:
    def test_by_id(self):
        accessor = InMemoryAccessor(prefix="g")
        stored = accessor.seed(NsGroup(display_name="web", description="web tier"))
        state = read_ns_group(accessor, id=stored.id)
        assert state.display_name == "web"
        assert state.description == "web tier"

    def test_by_name(self):
        accessor = InMemoryAccessor(prefix="g")
        stored = accessor.seed(NsGroup(display_name="web"))
        assert read_ns_group(accessor, display_name="web").id == stored.id

    def test_not_found(self):
        accessor = InMemoryAccessor(prefix="g")
        accessor.seed(NsGroup(display_name="db"))
        with pytest.raises(ReconcileError, match="'web' was not found"):
            read_ns_group(accessor, display_name="web")

    def test_ambiguous(self):
        accessor = InMemoryAccessor(prefix="g")
        accessor.seed(NsGroup(display_name="web"))
        accessor.seed(NsGroup(display_name="web"))
        with pytest.raises(AmbiguousName, match="2 objects"):
            read_ns_group(accessor, display_name="web")

    def test_requires_key(self):
        with pytest.raises(ReconcileError, match="id or name"):
            read_ns_group(InMemoryAccessor())
