"""Workspace: a mutable, typed collection of parsed projects."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any, overload

from pydantic import ValidationError

from . import hcl
from .blueprints import Blueprint
from .projects import ManagerProject, Project
from .spec import lookup
from .specop import STRATEGIES, SpecOp

logger = logging.getLogger(__name__)

_STRUCTURAL_KEYS = {"use", "include"} | set(STRATEGIES)


def _decode_spec(spec_name: str, attrs: dict[str, Any]) -> Any:
    """Decode a spec block into a Specification instance using the registry."""
    spec_cls = lookup(spec_name)
    logger.debug("Decoding spec '%s' -> %s", spec_name, spec_cls.__name__)
    try:
        return spec_cls(**hcl.interpolate(attrs))
    except ValidationError as exc:
        raise ValueError(f"Invalid '{spec_name}' spec: {exc}") from exc


def _parse_ops(block_data: dict[str, Any]) -> list[SpecOp]:
    """Parse strategy blocks (present/ensure/absent) from a blueprint or project block.

    HCL2 structure for strategy blocks:
        {"ensure": [{"dhcp_relay_profile": {"display_name": "relay"}}, ...], ...}
    """
    ops: list[SpecOp] = []
    for strategy_name, strategy_cls in STRATEGIES.items():
        for spec_block in block_data.get(strategy_name, []):
            for spec_name, attrs in spec_block.items():
                ops.append(strategy_cls(_decode_spec(spec_name, dict(attrs))))
    return ops


def _resolve_blueprint(
    name: str,
    pending: dict[str, dict[str, Any]],
    resolved: dict[str, Blueprint],
    resolving: set[str],
) -> Blueprint:
    """Recursively resolve a single blueprint, handling includes."""
    if name in resolved:
        return resolved[name]
    if name in resolving:
        raise ValueError(f"Circular include detected: '{name}'")
    if name not in pending:
        raise ValueError(f"Unknown blueprint: '{name}'")
    logger.debug("Resolving blueprint '%s'", name)
    resolving.add(name)

    data = pending[name]
    ops: list[SpecOp] = []
    for include_name in data.get("include", []):
        logger.debug("Blueprint '%s' includes '%s'", name, include_name)
        ops.extend(_resolve_blueprint(include_name, pending, resolved, resolving).ops)
    ops.extend(_parse_ops(data))

    bp = Blueprint(name=name, description=data.get("description", ""), ops=ops)
    resolved[name] = bp
    resolving.discard(name)
    return bp


def _build_project[P: Project](
    name: str,
    data: dict[str, Any],
    blueprints: dict[str, Blueprint],
    *,
    project_type: type[P],
) -> P:
    """Build a single Project instance from parsed data."""
    logger.debug("Building project '%s' as %s", name, project_type.__name__)
    proj_blueprints: list[Blueprint] = []
    for bp_name in data.get("use", []):
        if bp_name not in blueprints:
            raise ValueError(f"Project '{name}' references unknown blueprint: '{bp_name}'")
        proj_blueprints.append(blueprints[bp_name])

    inline_ops = _parse_ops(data)
    if inline_ops:
        proj_blueprints.append(Blueprint(name=f"{name}:inline", ops=inline_ops))

    fields = {k: v for k, v in data.items() if k not in _STRUCTURAL_KEYS}
    try:
        return project_type(name=name, blueprints=proj_blueprints, **hcl.interpolate(fields))
    except ValidationError as exc:
        raise ValueError(f"Invalid project '{name}': {exc}") from exc


class Workspace[P: Project](Mapping[str, P]):
    """Accumulates parsed HCL data and resolves projects on access."""

    def __init__(
        self,
        project_type: type[P] = ManagerProject,  # type: ignore[assignment]
        *,
        context: dict[str, Any] | None = None,
    ) -> None:
        self._project_type = project_type
        self._context = context
        self._pending_blueprints: dict[str, dict[str, Any]] = {}
        self._pending_projects: dict[str, dict[str, Any]] = {}

    def load(self, path: str | Path) -> None:
        """Parse one HCL file and add its blocks to the workspace."""
        self.add(hcl.load(Path(path), context=self._context))

    def scan(self, path: str | Path, *, recurse: bool = True) -> None:
        """Load every .hcl file under ``path``; a missing directory loads nothing."""
        root = Path(path)
        if not root.is_dir():
            logger.debug("Skipping scan of '%s'; not a directory", root)
            return
        files = sorted(root.rglob("*.hcl") if recurse else root.glob("*.hcl"))
        logger.debug("Found %d HCL file(s) under '%s'", len(files), root)
        for file in files:
            self.load(file)

    def add(self, data: dict[str, Any]) -> None:
        """Extract blueprint and project blocks from a parsed data dict.

        Raises ValueError if any blueprint or project name is already loaded.
        """
        for bp_block in data.get("blueprint", []):
            for bp_name, bp_data in bp_block.items():
                if bp_name in self._pending_blueprints:
                    raise ValueError(f"Duplicate blueprint: '{bp_name}'")
                logger.debug("Found blueprint '%s'", bp_name)
                self._pending_blueprints[bp_name] = bp_data

        for proj_block in data.get("project", []):
            for proj_name, proj_data in proj_block.items():
                if proj_name in self._pending_projects:
                    raise ValueError(f"Duplicate project: '{proj_name}'")
                logger.debug("Found project '%s'", proj_name)
                self._pending_projects[proj_name] = proj_data

    def _resolve(self) -> dict[str, P]:
        """Resolve all pending blueprints and build typed project instances."""
        resolved_bps: dict[str, Blueprint] = {}
        for name in self._pending_blueprints:
            _resolve_blueprint(name, self._pending_blueprints, resolved_bps, set())

        return {
            proj_name: _build_project(
                proj_name,
                proj_data,
                resolved_bps,
                project_type=self._project_type,
            )
            for proj_name, proj_data in self._pending_projects.items()
        }

    def __getitem__(self, name: str) -> P:
        return self._resolve()[name]

    def __contains__(self, name: object) -> bool:
        return name in self._pending_projects

    def __iter__(self) -> Iterator[str]:
        return iter(self._pending_projects)

    def __len__(self) -> int:
        return len(self._pending_projects)

    @overload
    def get(self, name: str) -> P | None: ...
    @overload
    def get(self, name: str, default: P) -> P: ...
    def get(self, name: str, default: Any = None) -> P | None:
        return self._resolve().get(name, default)

    def filter(self, names: Iterable[str]) -> list[P]:
        """Return projects matching the given names, preserving input order."""
        resolved = self._resolve()
        return [p for n in names if (p := resolved.get(n)) is not None]

    def __repr__(self) -> str:
        type_name = self._project_type.__name__
        bp_count = len(self._pending_blueprints)
        proj_count = len(self._pending_projects)
        return f"Workspace(project_type={type_name}, blueprints={bp_count}, projects={proj_count})"
