from __future__ import annotations

from dataclasses import dataclass, replace
from urllib.parse import quote


@dataclass(frozen=True)
class Session:
    """Authenticated, region-resolved context shared read-only by a run."""

    token: str
    endpoint: str
    region: str
    container: str = ""

    def __post_init__(self):
        if not self.endpoint or not self.endpoint.strip():
            raise ValueError("Session.endpoint must be a non-empty string.")
        if not self.token:
            raise ValueError("Session.token must be a non-empty string.")

    def with_container(self, container: str) -> "Session":
        if not container or not container.strip() or "/" in container:
            raise ValueError(f"Invalid container name: {container!r}")
        return replace(self, container=container)

    @property
    def account_url(self) -> str:
        return self.endpoint.rstrip("/")

    @property
    def container_url(self) -> str:
        if not self.container:
            raise ValueError("Session has no container bound.")
        return f"{self.account_url}/{quote(self.container, safe='')}"

    def object_url(self, key: str) -> str:
        return f"{self.container_url}/{quote(key, safe='/')}"

    def auth_headers(self) -> dict[str, str]:
        return {"X-Auth-Token": self.token}
