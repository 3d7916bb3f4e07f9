"""REST accessors for the manager API, built on a shared requests session."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

import requests
from pydantic import BaseModel, ValidationError

from .errors import ContractViolation, ReconcileError
from .models import DhcpRelayProfile, NsGroup, RemoteObject, SpoofGuardSwitchingProfile

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


class ManagerSettings(BaseModel):
    """Connection settings for one manager."""

    host: str
    username: str = ""
    password: str = ""
    insecure: bool = False
    timeout: float = 30.0

    @property
    def base_url(self) -> str:
        host = self.host.rstrip("/")
        if host.startswith(("http://", "https://")):
            return host
        return f"https://{host}"

    @classmethod
    def from_env(cls, **overrides: Any) -> ManagerSettings:
        """Build settings from NSXT_* environment variables; overrides win."""
        values: dict[str, Any] = {
            "host": os.environ.get("NSXT_MANAGER_HOST", ""),
            "username": os.environ.get("NSXT_USERNAME", ""),
            "password": os.environ.get("NSXT_PASSWORD", ""),
            "insecure": os.environ.get("NSXT_ALLOW_UNVERIFIED_SSL", "").lower() in _TRUTHY,
        }
        values.update({k: v for k, v in overrides.items() if v not in (None, "")})
        if not values["host"]:
            raise ValueError("Manager host is not set (NSXT_MANAGER_HOST)")
        return cls(**values)


@dataclass(frozen=True)
class Endpoint:
    """Where a resource kind lives in the API and how to decode it."""

    path: str
    model: type[RemoteObject]
    read_params: dict[str, str] = field(default_factory=dict)
    list_params: dict[str, str] = field(default_factory=dict)


ENDPOINTS: dict[str, Endpoint] = {
    "DhcpRelayProfile": Endpoint("/api/v1/dhcp/relay-profiles", DhcpRelayProfile),
    "SpoofGuardSwitchingProfile": Endpoint(
        "/api/v1/switching-profiles",
        SpoofGuardSwitchingProfile,
        list_params={"switching_profile_type": "SpoofGuardSwitchingProfile"},
    ),
    "NSGroup": Endpoint(
        "/api/v1/ns-groups",
        NsGroup,
        read_params={"populate_references": "true"},
    ),
}


class RestAccessor[R: RemoteObject]:
    """Object accessor for one endpoint of the manager API."""

    def __init__(
        self,
        session: requests.Session,
        base_url: str,
        endpoint: Endpoint,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._session = session
        self._base_url = base_url
        self._endpoint = endpoint
        self._timeout = timeout

    def _url(self, id: str | None = None) -> str:
        url = f"{self._base_url}{self._endpoint.path}"
        return f"{url}/{id}" if id else url

    def _kind(self) -> str:
        return self._endpoint.model.__name__

    def _validate(self, data: Any, response: requests.Response, operation: str, identifier: str) -> R:
        try:
            return self._endpoint.model.model_validate(data)  # type: ignore[return-value]
        except ValidationError as exc:
            raise ContractViolation(
                f"Malformed {self._kind()} returned during {operation}: {exc}",
                operation=operation,
                identifier=identifier,
                status=response.status_code,
            ) from exc

    def _decode(self, response: requests.Response, operation: str, identifier: str) -> R | None:
        if not response.ok or not response.content:
            return None
        return self._validate(response.json(), response, operation, identifier)

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    def create_object(self, payload: R) -> tuple[R | None, int]:
        response = self._send("POST", self._url(), json=payload.to_payload())
        label = payload.display_name or self._kind()
        return self._decode(response, "create", label), response.status_code

    def read_object(self, id: str) -> tuple[R | None, int]:
        response = self._send("GET", self._url(id), params=self._endpoint.read_params or None)
        return self._decode(response, "read", id), response.status_code

    def list_objects(self) -> list[R]:
        """List every object, following cursors until the listing is complete.

        The list contract carries no status, so a failed page raises a
        ``ReconcileError`` holding the status code.
        """
        params: dict[str, str] = dict(self._endpoint.list_params)
        results: list[R] = []
        while True:
            response = self._send("GET", self._url(), params=params)
            if not response.ok:
                raise ReconcileError(
                    f"Error during {self._kind()} list: status {response.status_code}",
                    operation="list",
                    identifier=self._endpoint.path,
                    status=response.status_code,
                )
            data = response.json()
            results.extend(self._validate(r, response, "list", self._endpoint.path) for r in data.get("results", []))
            cursor = data.get("cursor")
            if not cursor:
                return results
            params["cursor"] = cursor

    def update_object(self, id: str, payload: R) -> tuple[R | None, int]:
        response = self._send("PUT", self._url(id), json=payload.to_payload())
        return self._decode(response, "update", id), response.status_code

    def delete_object(self, id: str) -> int:
        return self._send("DELETE", self._url(id)).status_code


class ManagerClient:
    """Session holder that hands out a REST accessor per resource kind."""

    def __init__(self, settings: ManagerSettings, *, session: requests.Session | None = None) -> None:
        self.settings = settings
        self._session = session or requests.Session()
        if settings.username:
            self._session.auth = (settings.username, settings.password)
        self._session.verify = not settings.insecure
        self._session.headers.update({"Accept": "application/json"})

    def accessor(self, kind: str) -> RestAccessor:
        if kind not in ENDPOINTS:
            raise ValueError(f"Unknown resource kind: '{kind}'")
        return RestAccessor(
            self._session,
            self.settings.base_url,
            ENDPOINTS[kind],
            timeout=self.settings.timeout,
        )

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> ManagerClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ManagerClient(base_url={self.settings.base_url})"
