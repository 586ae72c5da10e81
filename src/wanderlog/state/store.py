"""Mode-aware record store.

This is the only component allowed to change a record kind's collection.
Every operation dispatches tagged actions through the pure reducer; failures
are converted into ``StoreState.error`` at this boundary and never escape.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from collections.abc import Callable, Sequence

from pydantic import ValidationError

from wanderlog._api.records import RecordBackend
from wanderlog._constants import PLANNED_STORAGE_KEY, VISITED_STORAGE_KEY
from wanderlog.exceptions import (
    CreateFailedError,
    DeleteFailedError,
    LoadFailedError,
    PersistenceWriteError,
    RecordNotFoundError,
    WanderError,
    WanderStoreError,
)
from wanderlog.models.record import DEMO_RECORDS, RecordDraft, RecordKind, TripRecord
from wanderlog.persistence import LocalPersistence
from wanderlog.session import AuthState, StoreMode
from wanderlog.state.actions import (
    Created,
    Deleted,
    Loaded,
    Loading,
    RecordLoaded,
    Rejected,
    StoreAction,
)
from wanderlog.state.reducer import StoreState, reduce

_logger = logging.getLogger(__name__)

StateListener = Callable[[StoreState], None]

# Expected failures; anything else reaching the store boundary is logged as a bug
# but still converted into ``StoreState.error``.
_OPERATION_ERRORS = (WanderError, ValidationError, OSError)


@dataclasses.dataclass(frozen=True)
class KindProfile:
    """Per-kind wiring: storage key, local id prefix, seed and user-facing messages."""

    kind: RecordKind
    storage_key: str
    id_prefix: str
    seed: tuple[TripRecord, ...]
    load_error: str
    get_error: str
    create_error: str
    delete_error: str


PROFILES: dict[RecordKind, KindProfile] = {
    RecordKind.VISITED: KindProfile(
        kind=RecordKind.VISITED,
        storage_key=VISITED_STORAGE_KEY,
        id_prefix="guest",
        seed=DEMO_RECORDS,
        load_error="There was an error loading cities...",
        get_error="There was an error loading the city...",
        create_error="There was an error creating the city...",
        delete_error="There was an error deleting the city...",
    ),
    RecordKind.PLANNED: KindProfile(
        kind=RecordKind.PLANNED,
        storage_key=PLANNED_STORAGE_KEY,
        id_prefix="plan",
        seed=(),
        load_error="There was an error loading plans...",
        get_error="There was an error loading the plan...",
        create_error="There was an error creating the plan...",
        delete_error="There was an error deleting the plan...",
    ),
}


class RecordStore:
    """Authoritative collection for one record kind.

    The store runs in the mode chosen by the :class:`AuthState` passed to
    :meth:`reinitialize`: ``local`` keeps the collection in
    ``persistence`` under the kind's key, ``remote`` goes through
    ``backend``. Operations are serialized per store; results of work that
    settles after a newer :meth:`reinitialize` are discarded.

    Usage::

        store = RecordStore(RecordKind.VISITED, persistence=MemoryPersistence())
        await store.reinitialize(AuthState.guest())
        await store.create(RecordDraft(city_name="Lisbon", position={"lat": 38.7, "lng": -9.1}))
    """

    def __init__(
        self,
        kind: RecordKind,
        *,
        persistence: LocalPersistence,
        backend: RecordBackend | None = None,
        seed: Sequence[TripRecord] | None = None,
        optimistic_deletes: bool = False,
        clock_ns: Callable[[], int] = time.time_ns,
    ) -> None:
        self._profile = PROFILES[kind]
        self._persistence = persistence
        self._backend = backend
        self._seed: tuple[TripRecord, ...] = self._profile.seed if seed is None else tuple(seed)
        self._optimistic_deletes = optimistic_deletes
        self._clock_ns = clock_ns
        self._last_id_ns = 0

        self._state = StoreState()
        self._auth = AuthState.anonymous()
        self._generation = 0
        self._lock = asyncio.Lock()
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def kind(self) -> RecordKind:
        return self._profile.kind

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def records(self) -> tuple[TripRecord, ...]:
        return self._state.records

    @property
    def mode(self) -> StoreMode:
        return self._auth.mode

    @property
    def storage_key(self) -> str:
        return self._profile.storage_key

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with the new state after every transition.

        Returns a callable that removes the listener.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _dispatch(self, action: StoreAction) -> None:
        self._state = reduce(self._state, action)
        _logger.debug(
            "%s store: %s -> records=%d loading=%s error=%r",
            self.kind,
            action.type,
            len(self._state.records),
            self._state.is_loading,
            self._state.error,
        )
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                _logger.warning("%s store listener failed", self.kind, exc_info=True)

    def _is_stale(self, generation: int) -> bool:
        if generation != self._generation:
            _logger.debug("%s store: discarding result from superseded generation %d", self.kind, generation)
            return True
        return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def reinitialize(self, auth: AuthState) -> None:
        """Adopt a new auth state (login, logout, guest start) and reload."""
        self._auth = auth
        self._generation += 1
        _logger.debug("%s store: reinitialized in %s mode (generation %d)", self.kind, auth.mode, self._generation)
        await self.load()

    async def load(self) -> None:
        """(Re)load the whole collection for the current mode and credential.

        A failed load leaves an *empty* collection with an error, never a
        stale or partial list.
        """
        generation = self._generation
        async with self._lock:
            if self._is_stale(generation):
                return
            self._dispatch(Loading())
            try:
                records = await self._fetch_all()
            except Exception as exc:
                if self._is_stale(generation):
                    return
                self._log_failure("load", exc)
                self._dispatch(Rejected(error=self._message(exc, self._profile.load_error), records=()))
                return
            if self._is_stale(generation):
                return
            self._dispatch(Loaded(records=tuple(records)))

    async def _fetch_all(self) -> list[TripRecord]:
        if self.mode is StoreMode.LOCAL:
            stored = self._persistence.read(self.storage_key)
            if stored is None:
                _logger.debug("%s store: no guest data under %r, using seed", self.kind, self.storage_key)
                return list(self._seed)
            return stored

        token = self._auth.credential
        if not token:
            # Logged out: nothing to show, and nothing has gone wrong.
            return []
        backend = self._require_backend(LoadFailedError, self._profile.load_error)
        try:
            return await backend.list_records(token)
        except _OPERATION_ERRORS as exc:
            raise LoadFailedError(self._profile.load_error) from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def get(self, record_id: str) -> None:
        """Make the record with *record_id* current.

        A no-op when it already is. Unknown ids and network failures are
        reported the same way, as a load error.
        """
        if not record_id:
            return
        if str(record_id) == self._state.current_id:
            return

        generation = self._generation
        async with self._lock:
            if self._is_stale(generation) or str(record_id) == self._state.current_id:
                return
            self._dispatch(Loading())
            try:
                record = await self._lookup(str(record_id))
            except Exception as exc:
                if self._is_stale(generation):
                    return
                self._log_failure(f"get {record_id!r}", exc)
                self._dispatch(Rejected(error=self._message(exc, self._profile.get_error)))
                return
            if self._is_stale(generation):
                return
            self._dispatch(RecordLoaded(record=record))

    async def _lookup(self, record_id: str) -> TripRecord:
        if self.mode is StoreMode.LOCAL or not self._auth.credential:
            found = self._state.find(record_id)
            if found is None:
                raise RecordNotFoundError(self._profile.get_error, record_id=record_id)
            return found

        backend = self._require_backend(LoadFailedError, self._profile.get_error)
        try:
            return await backend.get_record(self._auth.credential, record_id)
        except _OPERATION_ERRORS as exc:
            raise LoadFailedError(self._profile.get_error) from exc

    async def create(self, draft: RecordDraft) -> TripRecord | None:
        """Add a record and make it current.

        Returns the stored record (with its assigned id), or ``None`` when
        the create failed; the collection is then unchanged and
        ``state.error`` says why.
        """
        generation = self._generation
        async with self._lock:
            if self._is_stale(generation):
                return None
            self._dispatch(Loading())
            try:
                if self.mode is StoreMode.LOCAL:
                    record = self._create_local(draft)
                else:
                    record = await self._create_remote(draft)
            except Exception as exc:
                if self._is_stale(generation):
                    return None
                self._log_failure("create", exc)
                self._dispatch(Rejected(error=self._message(exc, self._profile.create_error)))
                return None
            if self._is_stale(generation):
                return None
            self._dispatch(Created(record=record))
            return record

    def _create_local(self, draft: RecordDraft) -> TripRecord:
        record = TripRecord.from_draft(draft, self._next_local_id())
        self._persist((*self._state.records, record))
        return record

    async def _create_remote(self, draft: RecordDraft) -> TripRecord:
        token = self._auth.credential
        if not token:
            raise CreateFailedError(self._profile.create_error)
        backend = self._require_backend(CreateFailedError, self._profile.create_error)
        try:
            return await backend.create_record(token, draft)
        except _OPERATION_ERRORS as exc:
            raise CreateFailedError(self._profile.create_error) from exc

    async def delete(self, record_id: str) -> bool:
        """Remove a record and clear the current selection.

        The selection is cleared even when *record_id* was not current.
        Returns ``False`` (with ``state.error`` set and the collection as it
        was before the call) when the delete failed.
        """
        record_id = str(record_id)
        generation = self._generation
        async with self._lock:
            if self._is_stale(generation):
                return False
            before = self._state
            self._dispatch(Loading())
            try:
                if self.mode is StoreMode.LOCAL:
                    self._persist(tuple(r for r in self._state.records if r.id != record_id))
                else:
                    await self._delete_remote(record_id)
            except Exception as exc:
                if self._is_stale(generation):
                    return False
                self._log_failure(f"delete {record_id!r}", exc)
                self._dispatch(
                    Rejected(
                        error=self._message(exc, self._profile.delete_error),
                        records=before.records,
                        current_record=before.current_record,
                    )
                )
                return False
            if self._is_stale(generation):
                return False
            self._dispatch(Deleted(record_id=record_id))
            return True

    async def _delete_remote(self, record_id: str) -> None:
        token = self._auth.credential
        if not token:
            raise DeleteFailedError(self._profile.delete_error)
        backend = self._require_backend(DeleteFailedError, self._profile.delete_error)
        if self._optimistic_deletes:
            # Shown as gone while the backend works; a failure restores it.
            self._dispatch(Deleted(record_id=record_id))
            self._dispatch(Loading())
        try:
            await backend.delete_record(token, record_id)
        except _OPERATION_ERRORS as exc:
            raise DeleteFailedError(self._profile.delete_error) from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_backend(self, error_cls: type[WanderStoreError], message: str) -> RecordBackend:
        if self._backend is None:
            raise error_cls(f"{message} (no remote backend configured)")
        return self._backend

    def _persist(self, records: Sequence[TripRecord]) -> None:
        """Write the whole collection; a failed write only costs durability."""
        try:
            self._persistence.write(self.storage_key, records)
        except (PersistenceWriteError, OSError):
            _logger.warning(
                "%s store: guest data could not be saved; changes will not survive a restart",
                self.kind,
                exc_info=True,
            )

    def _log_failure(self, operation: str, exc: Exception) -> None:
        if isinstance(exc, _OPERATION_ERRORS):
            _logger.debug("%s store: %s failed", self.kind, operation, exc_info=True)
        else:
            _logger.warning("%s store: unexpected error during %s", self.kind, operation, exc_info=True)

    def _next_local_id(self) -> str:
        """``<prefix>-<ns>``: strictly increasing within the process, never reused."""
        ns = max(self._clock_ns(), self._last_id_ns + 1)
        candidate = f"{self._profile.id_prefix}-{ns}"
        while self._state.find(candidate) is not None:
            ns += 1
            candidate = f"{self._profile.id_prefix}-{ns}"
        self._last_id_ns = ns
        return candidate

    @staticmethod
    def _message(exc: BaseException, fallback: str) -> str:
        if isinstance(exc, WanderStoreError) and str(exc):
            return str(exc)
        return fallback
