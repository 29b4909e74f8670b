from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_IDENTITY_URL = "https://identity.api.rackspacecloud.com/v2.0/tokens"
DEFAULT_CONCURRENCY = 10


@dataclass(frozen=True)
class TransferConfig:
    username: str
    api_key: str
    region: str
    concurrency: int = DEFAULT_CONCURRENCY
    identity_url: str = DEFAULT_IDENTITY_URL

    def __post_init__(self):
        for name in ("username", "api_key", "region", "identity_url"):
            value = getattr(self, name)
            if not value or not value.strip():
                raise ValueError(f"TransferConfig.{name} must be a non-empty string.")
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int):
            raise ValueError(f"TransferConfig.concurrency must be an integer, got: {self.concurrency!r}")
        if self.concurrency < 1:
            raise ValueError(f"TransferConfig.concurrency must be >= 1, got: {self.concurrency}")


def require_env(var_name: str) -> str:
    value = os.getenv(var_name)
    if not value:
        raise ValueError(f"Environment variable '{var_name}' is required but not set.")
    return value


def _get_concurrency(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_CONCURRENCY
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"HASTE_CONCURRENCY must be an integer, got: {raw!r}") from exc


def get_transfer_config(
    username: str | None = None,
    api_key: str | None = None,
    region: str | None = None,
    concurrency: int | None = None,
    identity_url: str | None = None,
) -> TransferConfig:
    """Explicit arguments win; anything left as None falls back to the environment."""
    return TransferConfig(
        username=username or require_env("OS_USERNAME"),
        api_key=api_key or require_env("OS_PASSWORD"),
        region=region or require_env("OS_REGION_NAME"),
        concurrency=concurrency if concurrency is not None else _get_concurrency(os.getenv("HASTE_CONCURRENCY")),
        identity_url=identity_url or os.getenv("HASTE_IDENTITY_URL") or DEFAULT_IDENTITY_URL,
    )
