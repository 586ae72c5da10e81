"""High-level async client tying stores, persistence and the REST API together."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from wanderlog._api.records import RecordsApi
from wanderlog._transport import HttpTransport
from wanderlog.config import WanderConfig
from wanderlog.exceptions import WanderError
from wanderlog.geometry.scene import TripMap
from wanderlog.geometry.viewport import Viewport
from wanderlog.models.record import RecordKind
from wanderlog.persistence import JsonFilePersistence, LocalPersistence, MemoryPersistence
from wanderlog.session import AuthState
from wanderlog.state.store import RecordStore

_logger = logging.getLogger(__name__)


class TripLog:
    """Async client for the travel log.

    Usage::

        async with TripLog(config) as log:
            await log.set_auth(AuthState.guest())
            await log.visited.create(draft)
            trip_map = log.attach_map(WebMercatorViewport())
    """

    def __init__(
        self,
        config: WanderConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        persistence: LocalPersistence | None = None,
    ) -> None:
        self._config = config or WanderConfig()
        self._external_session = session is not None
        self._http_session = session
        if persistence is None:
            if self._config.storage_dir is not None:
                persistence = JsonFilePersistence(self._config.storage_dir)
            else:
                persistence = MemoryPersistence()
        self._persistence = persistence
        self._transport: HttpTransport | None = None
        self._stores: dict[RecordKind, RecordStore] = {}
        self._auth = AuthState.anonymous()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TripLog:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        for kind in RecordKind:
            self._stores[kind] = RecordStore(
                kind,
                persistence=self._persistence,
                backend=RecordsApi(self._transport, kind),
                seed=None if self._config.seed_demo else (),
                optimistic_deletes=self._config.optimistic_deletes,
            )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None
        self._stores.clear()

    # ------------------------------------------------------------------
    # Stores
    # ------------------------------------------------------------------

    def _require_store(self, kind: RecordKind) -> RecordStore:
        store = self._stores.get(kind)
        if store is None:
            raise WanderError("Client not initialized. Use 'async with TripLog(...) as log:'")
        return store

    @property
    def visited(self) -> RecordStore:
        return self._require_store(RecordKind.VISITED)

    @property
    def planned(self) -> RecordStore:
        return self._require_store(RecordKind.PLANNED)

    @property
    def auth(self) -> AuthState:
        return self._auth

    async def set_auth(self, auth: AuthState) -> None:
        """Switch user/mode; both stores reload for the new credential."""
        self._auth = auth
        _logger.debug("Auth changed: user=%s mode=%s", auth.user_id, auth.mode)
        await asyncio.gather(
            self.visited.reinitialize(auth),
            self.planned.reinitialize(auth),
        )

    def attach_map(self, viewport: Viewport) -> TripMap:
        """Render both stores' paths onto *viewport*; close the result to detach."""
        return TripMap(self.visited, self.planned, viewport)
