"""Project models: the top-level build target and its manager connection."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from .blueprints import Blueprint
from .client import ManagerClient, ManagerSettings
from .context import AccessorProvider, Context

logger = logging.getLogger(__name__)


class Project(BaseModel):
    """Base model that apps subclass with domain-specific fields."""

    model_config = {"arbitrary_types_allowed": True}

    name: str
    description: str = ""
    blueprints: list[Blueprint] = Field(default_factory=list)

    def build(self, **kwargs: Any) -> None:
        """Build all blueprints. kwargs are passed to Context."""
        ctx = Context(target=self, **kwargs)
        logger.info("Building project '%s'", self.name)
        for blueprint in self.blueprints:
            blueprint.build(ctx)


class ManagerProject(Project):
    """Project bound to one manager; connection fields come from the HCL block."""

    host: str = ""
    username: str = ""
    password: str = Field(default="", repr=False)
    insecure: bool = False
    timeout: float = 30.0

    def settings(self) -> ManagerSettings:
        """Connection settings, falling back to NSXT_* environment variables."""
        return ManagerSettings.from_env(
            host=self.host,
            username=self.username,
            password=self.password,
            insecure=self.insecure or None,
            timeout=self.timeout,
        )

    def build(self, *, client: AccessorProvider | None = None, **kwargs: Any) -> None:
        """Build against ``client``, or a ManagerClient opened from settings."""
        if client is not None:
            super().build(client=client, **kwargs)
            return
        with ManagerClient(self.settings()) as manager:
            logger.debug("Connected %r for project '%s'", manager, self.name)
            super().build(client=manager, **kwargs)
