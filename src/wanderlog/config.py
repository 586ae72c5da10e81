"""Client configuration for wanderlog."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from wanderlog._constants import API_BASE_URL
from wanderlog.exceptions import WanderConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class WanderConfig:
    """Client configuration.

    Parameters
    ----------
    api_base_url : str
        Base URL of the trip-record REST API (``/cities`` and ``/plans``
        live beneath it).
    storage_dir : Path or None
        Directory for guest-mode JSON files. ``None`` keeps guest data in
        memory only.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    seed_demo : bool
        Seed the visited store with a demo record when guest storage is empty.
    optimistic_deletes : bool
        In remote mode, remove a record from the collection before the
        backend acknowledges the delete, restoring it if the call fails.
    """

    api_base_url: str = API_BASE_URL
    storage_dir: Path | None = None
    request_timeout: float = 15.0
    seed_demo: bool = True
    optimistic_deletes: bool = False

    def __post_init__(self) -> None:
        if not self.api_base_url:
            raise WanderConfigError("api_base_url must be non-empty")
        if self.request_timeout <= 0:
            raise WanderConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        object.__setattr__(self, "api_base_url", self.api_base_url.rstrip("/"))
        if self.storage_dir is not None and not isinstance(self.storage_dir, Path):
            object.__setattr__(self, "storage_dir", Path(self.storage_dir))

    @classmethod
    def from_env(cls, **overrides: Any) -> WanderConfig:
        """Create configuration from environment variables.

        Reads ``WANDER_API_URL``, ``WANDER_STORAGE_DIR``,
        ``WANDER_REQUEST_TIMEOUT``, ``WANDER_SEED_DEMO`` and
        ``WANDER_OPTIMISTIC_DELETES``. Explicit keyword arguments override
        environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        url = env.get("WANDER_API_URL")
        if url is not None:
            config_kwargs["api_base_url"] = url

        storage = env.get("WANDER_STORAGE_DIR")
        if storage:
            config_kwargs["storage_dir"] = Path(storage).expanduser()

        timeout_env = env.get("WANDER_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise WanderConfigError(f"WANDER_REQUEST_TIMEOUT is not a number: {timeout_env!r}") from exc

        if "seed_demo" not in overrides:
            config_kwargs["seed_demo"] = _env_bool(env.get("WANDER_SEED_DEMO"), True)

        if "optimistic_deletes" not in overrides:
            config_kwargs["optimistic_deletes"] = _env_bool(env.get("WANDER_OPTIMISTIC_DELETES"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
