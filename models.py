"""Database models for the Shotwell photo library."""
import os
from enum import Enum
from typing import Iterable, List, Optional

from sqlmodel import Field, SQLModel

TAG_ID_MARKER = "thumb"


class RenditionKind(str, Enum):
    """Which file a photo request should be answered with."""
    RAW = "raw"
    INLINE = "inline"
    THUMB = "thumb"


class Endpoint(str, Enum):
    """Named endpoints served by the viewer."""
    EVENTS = "events"
    EVENT = "event"
    TAGS = "tags"
    TAG = "tag"
    RAW = "raw"
    SHOW = "show"
    THUMB = "thumb"


def decode_photo_id_list(value: Optional[str]) -> List[int]:
    """Decode Shotwell's ``thumb%016x,`` id list into photo ids."""
    ids = []
    for token in (value or "").split(","):
        token = token.strip()
        if not token.startswith(TAG_ID_MARKER):
            # empty tail or a video entry
            continue
        try:
            ids.append(int(token[len(TAG_ID_MARKER):], 16))
        except ValueError:
            continue
    return ids


def encode_photo_id_list(ids: Iterable[int]) -> str:
    """Encode photo ids the way Shotwell stores them in TagTable."""
    return "".join(f"{TAG_ID_MARKER}{i:016x}," for i in ids)


class EventBase(SQLModel):
    name: Optional[str] = None
    primary_photo_id: Optional[int] = None
    time_created: Optional[int] = None
    comment: Optional[str] = None


class Event(EventBase, table=True):
    """EventTable as created by Shotwell."""
    __tablename__ = "EventTable"

    id: Optional[int] = Field(default=None, primary_key=True)
    primary_source_id: Optional[str] = None


class EventRecord(EventBase):
    id: int


class PhotoBase(SQLModel):
    filename: str = Field(unique=True, description="Absolute path")
    width: Optional[int] = None
    height: Optional[int] = None
    filesize: Optional[int] = None
    timestamp: Optional[int] = None
    event_id: Optional[int] = Field(default=None, index=True)
    title: Optional[str] = None


class Photo(PhotoBase, table=True):
    """PhotoTable as created by Shotwell, trimmed to the columns we touch."""
    __tablename__ = "PhotoTable"

    id: Optional[int] = Field(default=None, primary_key=True)
    exposure_time: Optional[int] = None
    orientation: Optional[int] = None
    original_orientation: Optional[int] = None
    import_id: Optional[int] = None
    md5: Optional[str] = None
    time_created: Optional[int] = None
    rating: int = 0
    comment: Optional[str] = None


class PhotoRecord(PhotoBase):
    """A photo row as returned by the record store."""
    id: int

    @property
    def basename(self) -> str:
        return os.path.basename(self.filename)


class TagBase(SQLModel):
    name: str = Field(unique=True)
    photo_id_list: Optional[str] = None
    time_created: Optional[int] = None


class Tag(TagBase, table=True):
    """TagTable as created by Shotwell."""
    __tablename__ = "TagTable"

    id: Optional[int] = Field(default=None, primary_key=True)


class TagRecord(TagBase):
    id: int

    @property
    def photo_ids(self) -> List[int]:
        return decode_photo_id_list(self.photo_id_list)
