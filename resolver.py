"""Turn a photo id and basename into a file that can be served."""
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Union

from loguru import logger

from models import PhotoRecord, RenditionKind
from renditions import RenditionCache, RenditionSpec
from store import PhotoRecordStore
from utils import validate_basename


@dataclass(frozen=True)
class ResolvedResource:
    path: Path
    download_name: str
    media_type: str


@dataclass(frozen=True)
class NotFound:
    photo_id: int


@dataclass(frozen=True)
class BasenameMismatch:
    """The photo exists but under another basename than the one asked for."""
    photo_id: int
    asserted: str
    expected: str


Resolution = Union[ResolvedResource, NotFound, BasenameMismatch]


def guess_media_type(name: str) -> str:
    return mimetypes.guess_type(name)[0] or "application/octet-stream"


class ResourceResolver:
    """Lookup, basename check, then raw file or cached rendition."""

    def __init__(
        self,
        store: PhotoRecordStore,
        cache: RenditionCache,
        sizes: Mapping[RenditionKind, RenditionSpec],
    ):
        self.store = store
        self.cache = cache
        self.sizes = sizes

    def lookup(self, photo_id: int, asserted_basename: str) -> Union[PhotoRecord, NotFound, BasenameMismatch]:
        """Find the photo and check the basename the caller claims it has."""
        record = self.store.find_photo_by_id(photo_id)
        if record is None:
            logger.info("No photo with id {}", photo_id)
            return NotFound(photo_id)

        if not validate_basename(record, asserted_basename):
            logger.warning(
                "Basename mismatch for photo {}: asked {!r}, have {!r}",
                photo_id, asserted_basename, record.basename,
            )
            return BasenameMismatch(photo_id, asserted_basename, record.basename)
        return record

    def resolve(self, photo_id: int, asserted_basename: str, kind: RenditionKind) -> Resolution:
        record = self.lookup(photo_id, asserted_basename)
        if not isinstance(record, PhotoRecord):
            return record

        basename = record.basename
        original = Path(record.filename)
        if kind is RenditionKind.RAW:
            return ResolvedResource(original, basename, guess_media_type(basename))

        path = self.cache.get_or_create(record.filename, self.sizes[kind])
        if path == original:
            # rendering failed, serve the original as is
            return ResolvedResource(original, basename, guess_media_type(basename))
        return ResolvedResource(path, basename, "image/jpeg")
