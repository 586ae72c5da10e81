"""Trip-record REST endpoints.

Endpoints (per record kind, ``{base}`` is ``/cities`` or ``/plans``):
  - GET    {base}           list
  - GET    {base}/{id}      single record
  - POST   {base}           create (server assigns ``_id``)
  - DELETE {base}/{id}      delete
"""

from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import quote

from pydantic import ValidationError

from wanderlog._transport import Transport
from wanderlog.exceptions import WanderTransportError
from wanderlog.models.record import RecordDraft, RecordKind, TripRecord

_logger = logging.getLogger(__name__)

RESOURCE_PATHS: dict[RecordKind, str] = {
    RecordKind.VISITED: "/cities",
    RecordKind.PLANNED: "/plans",
}


class RecordBackend(Protocol):
    """Remote collaborator consumed by record stores in remote mode."""

    async def list_records(self, token: str | None) -> list[TripRecord]: ...

    async def get_record(self, token: str | None, record_id: str) -> TripRecord: ...

    async def create_record(self, token: str | None, draft: RecordDraft) -> TripRecord: ...

    async def delete_record(self, token: str | None, record_id: str) -> None: ...


def _parse_record(endpoint: str, data: Any) -> TripRecord:
    try:
        return TripRecord.model_validate(data)
    except ValidationError as exc:
        raise WanderTransportError(
            f"{endpoint} returned an invalid record: {exc.error_count()} validation error(s)",
            endpoint=endpoint,
        ) from exc


class RecordsApi:
    """REST client for one record kind."""

    def __init__(self, transport: Transport, kind: RecordKind) -> None:
        self._transport = transport
        self._kind = kind
        self._base = RESOURCE_PATHS[kind]

    @property
    def kind(self) -> RecordKind:
        return self._kind

    def _item_path(self, record_id: str) -> str:
        return f"{self._base}/{quote(str(record_id), safe='')}"

    async def list_records(self, token: str | None) -> list[TripRecord]:
        decoded = await self._transport.request("GET", self._base, token=token)
        items = decoded if isinstance(decoded, list) else []
        records: list[TripRecord] = []
        for index, item in enumerate(items):
            try:
                records.append(TripRecord.model_validate(item))
            except ValidationError:
                _logger.warning("Dropping invalid %s record %d from %s", self._kind, index, self._base, exc_info=True)
        return records

    async def get_record(self, token: str | None, record_id: str) -> TripRecord:
        endpoint = self._item_path(record_id)
        decoded = await self._transport.request("GET", endpoint, token=token)
        return _parse_record(endpoint, decoded)

    async def create_record(self, token: str | None, draft: RecordDraft) -> TripRecord:
        decoded = await self._transport.request("POST", self._base, token=token, payload=draft.to_payload())
        return _parse_record(self._base, decoded)

    async def delete_record(self, token: str | None, record_id: str) -> None:
        await self._transport.request("DELETE", self._item_path(record_id), token=token)
