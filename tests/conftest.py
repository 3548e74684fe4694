"""
Pytest configuration and fixtures for the Shotwell viewer tests.
"""
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image as PILImage
from sqlmodel import Session

from app import create_app
from config import Settings, sqlite_readonly_url
from database import create_schema, get_connection, make_engine
from models import Event, Photo, Tag, encode_photo_id_list
from renditions import EXIF_ORIENTATION, RenditionCache
from store import PhotoRecordStore


def write_jpeg(path: Path, size=(200, 100), color=(200, 30, 30), orientation=None) -> Path:
    """Write a solid JPEG, optionally tagged with an EXIF orientation."""
    im = PILImage.new("RGB", size, color)
    kwargs = {}
    if orientation is not None:
        exif = PILImage.Exif()
        exif[EXIF_ORIENTATION] = orientation
        kwargs["exif"] = exif.tobytes()
    im.save(path, format="JPEG", quality=95, **kwargs)
    return path


@pytest.fixture
def library(tmp_path):
    """A photo directory with a plain, a rotated and a corrupt file."""
    lib = tmp_path / "lib"
    lib.mkdir()
    write_jpeg(lib / "IMG_01.jpg")
    write_jpeg(lib / "IMG_02.jpg", orientation=6)
    (lib / "broken.jpg").write_bytes(b"this is not a jpeg")
    return lib


@pytest.fixture
def db_path(tmp_path, library):
    """A Shotwell database describing the library."""
    path = tmp_path / "photo.db"
    engine = make_engine(f"sqlite:///{path}")
    create_schema(engine)
    with Session(engine) as s:
        s.add_all([
            Event(id=1, name="Summer", time_created=2000),
            Event(id=2, name="", time_created=3000),
            Event(id=3, name="Winter", time_created=1000, comment="cold"),
            Photo(id=3, filename=str(library / "IMG_01.jpg"), filesize=123,
                  title="Yay!", width=200, height=100, timestamp=200, event_id=1),
            Photo(id=4, filename=str(library / "IMG_02.jpg"), filesize=456,
                  width=100, height=200, timestamp=100, event_id=1),
            Photo(id=5, filename=str(library / "broken.jpg"), filesize=18,
                  timestamp=300, event_id=3),
            Photo(id=6, filename="/missing/IMG_06.jpg", filesize=1,
                  timestamp=50, event_id=3),
            Tag(id=1, name="Nature", photo_id_list=encode_photo_id_list([3, 4])),
            Tag(id=2, name="Empty"),
            Tag(id=3, name="Broken",
                photo_id_list=encode_photo_id_list([5]) + "video-0000000000000001,"),
        ])
        s.commit()
    engine.dispose()
    return path


@pytest.fixture
def store(db_path):
    engine = make_engine(sqlite_readonly_url(str(db_path)))
    with get_connection(engine) as conn:
        yield PhotoRecordStore(conn)
    engine.dispose()


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def cache(cache_dir):
    return RenditionCache(cache_dir)


@pytest.fixture
def settings(tmp_path, db_path, cache_dir):
    return Settings(
        dbname=str(db_path),
        cache_dir=cache_dir,
        templates_dir=tmp_path / "templates",
    )


@pytest.fixture
def client(settings):
    """Test client for an app over the temporary library."""
    app = create_app(settings)
    yield TestClient(app)
    app.state.engine.dispose()
