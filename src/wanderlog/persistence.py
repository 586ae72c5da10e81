"""Guest-mode local persistence.

Stores hold one key each (see ``wanderlog._constants``) and read/write the
*whole* collection under it. Reads never raise: missing or corrupt data reads
as ``None`` so the store can fall back to its seed. Writes raise
:class:`~wanderlog.exceptions.PersistenceWriteError`; callers treat that as
best-effort durability and keep going.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from wanderlog.exceptions import PersistenceWriteError
from wanderlog.models.record import TripRecord

_logger = logging.getLogger(__name__)


class LocalPersistence(Protocol):
    """Structural persistence interface consumed by record stores."""

    def read(self, key: str) -> list[TripRecord] | None: ...

    def write(self, key: str, records: Sequence[TripRecord]) -> None: ...


def decode_records(key: str, payload: Any) -> list[TripRecord] | None:
    """Validate a decoded JSON payload into records.

    A payload that is not a list is corrupt and reads as ``None``.
    Individual items that fail validation are skipped (and logged), so one
    bad entry does not cost the guest the rest of their log.
    """
    if not isinstance(payload, list):
        _logger.warning("Ignoring corrupt guest data under %r (expected a list, got %s)", key, type(payload).__name__)
        return None

    records: list[TripRecord] = []
    seen: set[str] = set()
    for index, item in enumerate(payload):
        try:
            record = TripRecord.model_validate(item)
        except ValidationError:
            _logger.warning("Skipping invalid guest record %d under %r", index, key, exc_info=True)
            continue
        if record.id in seen:
            _logger.warning("Skipping duplicate guest record id %r under %r", record.id, key)
            continue
        seen.add(record.id)
        records.append(record)
    return records


def encode_records(records: Sequence[TripRecord]) -> list[dict[str, Any]]:
    return [record.to_payload() for record in records]


class MemoryPersistence:
    """Non-durable persistence (tests, sandboxed sessions)."""

    def __init__(self, initial: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self._data: dict[str, list[dict[str, Any]]] = dict(initial or {})

    def read(self, key: str) -> list[TripRecord] | None:
        if key not in self._data:
            return None
        return decode_records(key, self._data[key])

    def write(self, key: str, records: Sequence[TripRecord]) -> None:
        self._data[key] = encode_records(records)

    def raw(self, key: str) -> list[dict[str, Any]] | None:
        """The stored payload for *key*, as it would be serialized."""
        return self._data.get(key)


class JsonFilePersistence:
    """Durable persistence: one ``<key>.json`` file per key in *directory*.

    Writes are atomic (temp file + rename). The first failed write flips the
    instance into in-memory mode for the rest of the session: later reads
    are served from the mirror so the guest still sees their changes, they
    just won't survive a restart.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)
        self._mirror = MemoryPersistence()
        self._durable = True

    @property
    def durable(self) -> bool:
        return self._durable

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def read(self, key: str) -> list[TripRecord] | None:
        if not self._durable and self._mirror.raw(key) is not None:
            return self._mirror.read(key)

        path = self._path(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            _logger.debug("Failed to read guest data from %s", path, exc_info=True)
            return None

        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Guest data in %s is not valid JSON; ignoring it", path)
            return None
        return decode_records(key, payload)

    def write(self, key: str, records: Sequence[TripRecord]) -> None:
        self._mirror.write(key, records)
        if not self._durable:
            return

        path = self._path(key)
        body = json.dumps(encode_records(records), ensure_ascii=False, separators=(",", ":"))
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self._directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(body)
                os.replace(tmp_name, path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            self._durable = False
            raise PersistenceWriteError(f"Failed to write guest data to {path}: {exc}", key=key) from exc
