"""Read-only queries against the Shotwell database."""
from types import MappingProxyType
from typing import Iterable, List, Optional

from loguru import logger
from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from database import StoreUnavailable
from models import EventRecord, PhotoRecord, TagRecord

EVENT_COLUMNS = "id, name, primary_photo_id, time_created, comment"
PHOTO_COLUMNS = "id, filename, width, height, filesize, timestamp, event_id, title"
TAG_COLUMNS = "id, name, photo_id_list, time_created"

QUERIES = MappingProxyType({
    "event_by_id": text(f"SELECT {EVENT_COLUMNS} FROM EventTable WHERE id = :id"),
    "events": text(
        f"SELECT {EVENT_COLUMNS} FROM EventTable"
        " WHERE name IS NOT NULL AND name != ''"
        " ORDER BY time_created DESC"
    ),
    "photos_by_event_id": text(
        f"SELECT {PHOTO_COLUMNS} FROM PhotoTable"
        " WHERE event_id = :event_id ORDER BY timestamp"
    ),
    "tags": text(f"SELECT {TAG_COLUMNS} FROM TagTable ORDER BY name"),
    "tag_by_name": text(f"SELECT {TAG_COLUMNS} FROM TagTable WHERE name = :name"),
    "photos_by_ids": text(
        f"SELECT {PHOTO_COLUMNS} FROM PhotoTable WHERE id IN :ids ORDER BY timestamp"
    ).bindparams(bindparam("ids", expanding=True)),
    "photo_by_id": text(f"SELECT {PHOTO_COLUMNS} FROM PhotoTable WHERE id = :id"),
})


class PhotoRecordStore:
    """Look up events, photos and tags over a single connection."""

    def __init__(self, conn: Connection):
        self.conn = conn

    def _fetch(self, query_name: str, **params) -> List[dict]:
        try:
            result = self.conn.execute(QUERIES[query_name], params)
            return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            logger.exception("Query {} failed", query_name)
            raise StoreUnavailable(str(exc)) from exc

    def find_photo_by_id(self, photo_id: int) -> Optional[PhotoRecord]:
        rows = self._fetch("photo_by_id", id=photo_id)
        return PhotoRecord.model_validate(rows[0]) if rows else None

    def find_event_by_id(self, event_id: int) -> Optional[EventRecord]:
        rows = self._fetch("event_by_id", id=event_id)
        return EventRecord.model_validate(rows[0]) if rows else None

    def list_events(self) -> List[EventRecord]:
        """Named events, newest first."""
        return [EventRecord.model_validate(r) for r in self._fetch("events")]

    def list_photos_by_event(self, event_id: int) -> List[PhotoRecord]:
        rows = self._fetch("photos_by_event_id", event_id=event_id)
        return [PhotoRecord.model_validate(r) for r in rows]

    def list_tags(self) -> List[TagRecord]:
        return [TagRecord.model_validate(r) for r in self._fetch("tags")]

    def find_tag_by_name(self, name: str) -> Optional[TagRecord]:
        rows = self._fetch("tag_by_name", name=name)
        return TagRecord.model_validate(rows[0]) if rows else None

    def list_photos_by_ids(self, ids: Iterable[int]) -> List[PhotoRecord]:
        """Photos for the given ids, oldest first. No query for an empty set."""
        ids = [int(i) for i in ids]
        if not ids:
            return []
        rows = self._fetch("photos_by_ids", ids=ids)
        return [PhotoRecord.model_validate(r) for r in rows]

