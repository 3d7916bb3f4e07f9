"""Tests for nsxspec.blueprints."""

from __future__ import annotations

import pytest

from nsxspec.blueprints import Blueprint
from nsxspec.context import Context
from nsxspec.errors import AmbiguousName
from nsxspec.memory import InMemoryClient
from nsxspec.models import DhcpRelayProfile
from nsxspec.projects import Project
from nsxspec.resources import DhcpRelayProfileSpec, SpoofGuardSwitchingProfileSpec
from nsxspec.specop import Absent, Ensure, Present


def _make_ctx(**kwargs) -> Context[Project]:
    return Context(target=Project(name="test"), client=InMemoryClient(), **kwargs)


def _relay(name: str, *addresses: str) -> DhcpRelayProfileSpec:
    return DhcpRelayProfileSpec(display_name=name, server_addresses=list(addresses))


class TestBlueprint:
    def test_create_with_name(self):
        bp = Blueprint(name="test-bp")
        assert bp.name == "test-bp"
        assert bp.description == ""

    def test_ops_default_empty(self):
        bp = Blueprint(name="test-bp")
        assert bp.ops == []
        assert len(bp) == 0

    def test_iterable(self):
        bp = Blueprint(name="test-bp", ops=[Present(_relay("a", "10.0.0.1")), Ensure(_relay("b", "10.0.0.2"))])
        assert len(list(bp)) == 2

    def test_build_executes_all_ops(self):
        ctx = _make_ctx()
        bp = Blueprint(
            name="test-bp",
            ops=[
                Ensure(_relay("a", "10.0.0.1")),
                Ensure(SpoofGuardSwitchingProfileSpec(display_name="sg")),
            ],
        )
        bp.build(ctx)
        assert len(ctx.client.accessor("DhcpRelayProfile").objects) == 1
        assert len(ctx.client.accessor("SpoofGuardSwitchingProfile").objects) == 1

    def test_build_runs_in_order(self):
        ctx = _make_ctx()
        bp = Blueprint(name="test-bp", ops=[Ensure(_relay("a", "10.0.0.1")), Absent(_relay("a"))])
        bp.build(ctx)
        assert ctx.client.accessor("DhcpRelayProfile").objects == {}

    def test_build_dry_run(self):
        ctx = _make_ctx(dry_run=True)
        Blueprint(name="test-bp", ops=[Ensure(_relay("a", "10.0.0.1"))]).build(ctx)
        assert ctx.client.accessor("DhcpRelayProfile").objects == {}

    def test_failure_stops_blueprint(self, caplog):
        ctx = _make_ctx()
        relays = ctx.client.accessor("DhcpRelayProfile")
        relays.seed(DhcpRelayProfile(display_name="dup"))
        relays.seed(DhcpRelayProfile(display_name="dup"))
        bp = Blueprint(name="test-bp", ops=[Ensure(_relay("dup", "10.0.0.1")), Ensure(_relay("after", "10.0.0.2"))])
        with pytest.raises(AmbiguousName):
            bp.build(ctx)
        assert "Blueprint 'test-bp' failed" in caplog.text
        assert all(o.display_name == "dup" for o in relays.objects.values())
