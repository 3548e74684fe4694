"""Tests for the on-disk rendition cache."""
import hashlib
from concurrent.futures import ThreadPoolExecutor

import pytest
from PIL import Image as PILImage

from renditions import (
    Orientation,
    RenditionSpec,
    cache_key,
    orientation_of,
    scaled_size,
)
from conftest import write_jpeg


def open_size(path):
    with PILImage.open(path) as im:
        return im.format, im.size


class TestScaledSize:
    @pytest.mark.parametrize(
        "spec, expected",
        [
            (RenditionSpec(100, 100), (100, 50)),
            (RenditionSpec(50, 0), (50, 25)),
            (RenditionSpec(0, 50), (100, 50)),
            (RenditionSpec(1024, 0), (200, 100)),
            (RenditionSpec(0, 0), (200, 100)),
            (RenditionSpec(1, 1), (1, 1)),
        ],
    )
    def test_fits_without_upscaling(self, spec, expected):
        assert scaled_size((200, 100), spec) == expected


class TestCacheKey:
    def test_key_is_hash_and_dimensions(self):
        digest = hashlib.md5(b"/lib/IMG_01.jpg").hexdigest()
        assert cache_key("/lib/IMG_01.jpg", RenditionSpec(100, 100)) == f"{digest}-100x100"

    def test_dimensions_make_distinct_keys(self):
        assert cache_key("/a.jpg", RenditionSpec(100, 0)) != cache_key("/a.jpg", RenditionSpec(0, 100))


class TestGetOrCreate:
    def test_creates_scaled_jpeg(self, cache, cache_dir, library):
        source = library / "IMG_01.jpg"
        path = cache.get_or_create(source, RenditionSpec(100, 100))
        assert path == cache_dir / cache_key(source, RenditionSpec(100, 100))
        assert open_size(path) == ("JPEG", (100, 50))

    def test_second_call_reuses_file(self, cache, library, monkeypatch):
        source = library / "IMG_01.jpg"
        first = cache.get_or_create(source, RenditionSpec(100, 100))
        mtime = first.stat().st_mtime_ns

        def boom(*args):
            raise AssertionError("rendered twice")

        monkeypatch.setattr(cache, "_render", boom)
        second = cache.get_or_create(source, RenditionSpec(100, 100))
        assert second == first
        assert second.stat().st_mtime_ns == mtime

    def test_no_temp_files_left(self, cache, cache_dir, library):
        cache.get_or_create(library / "IMG_01.jpg", RenditionSpec(50, 0))
        assert [p.name for p in cache_dir.iterdir()] == [
            cache_key(library / "IMG_01.jpg", RenditionSpec(50, 0))
        ]

    def test_concurrent_misses_converge(self, cache, cache_dir, library):
        source = library / "IMG_01.jpg"
        with ThreadPoolExecutor(max_workers=8) as pool:
            paths = list(pool.map(lambda _: cache.get_or_create(source, RenditionSpec(100, 100)), range(16)))
        assert len(set(paths)) == 1
        assert open_size(paths[0]) == ("JPEG", (100, 50))
        assert len(list(cache_dir.iterdir())) == 1

    def test_file_mode_follows_umask(self, cache, tmp_path, library):
        reference = tmp_path / "reference"
        with open(reference, "wb"):
            pass
        path = cache.get_or_create(library / "IMG_01.jpg", RenditionSpec(100, 100))
        assert path.stat().st_mode & 0o777 == reference.stat().st_mode & 0o777

    def test_png_source_is_reencoded_as_jpeg(self, cache, tmp_path):
        source = tmp_path / "drawing.png"
        PILImage.new("RGBA", (40, 20), (0, 0, 255, 128)).save(source)
        path = cache.get_or_create(source, RenditionSpec(20, 0))
        assert open_size(path) == ("JPEG", (20, 10))


class TestOrientation:
    def test_no_metadata_means_no_rotation(self, cache, library):
        with PILImage.open(library / "IMG_01.jpg") as im:
            assert orientation_of(im) is Orientation.NONE
        path = cache.get_or_create(library / "IMG_01.jpg", RenditionSpec(1024, 0))
        assert open_size(path) == ("JPEG", (200, 100))

    def test_rotated_90(self, cache, library):
        with PILImage.open(library / "IMG_02.jpg") as im:
            assert orientation_of(im) is Orientation.CW_90
        path = cache.get_or_create(library / "IMG_02.jpg", RenditionSpec(1024, 0))
        assert open_size(path) == ("JPEG", (100, 200))

    def test_rotated_180(self, cache, tmp_path):
        source = tmp_path / "upside_down.jpg"
        im = PILImage.new("RGB", (200, 100), (255, 0, 0))
        im.paste((0, 0, 255), (100, 0, 200, 100))
        exif = PILImage.Exif()
        exif[0x0112] = 3
        im.save(source, format="JPEG", quality=95, exif=exif.tobytes())

        path = cache.get_or_create(source, RenditionSpec(0, 0))
        with PILImage.open(path) as out:
            r, g, b = out.getpixel((10, 50))
        assert b > r

    def test_unknown_value_means_no_rotation(self, tmp_path):
        source = write_jpeg(tmp_path / "odd.jpg", orientation=42)
        with PILImage.open(source) as im:
            assert orientation_of(im) is Orientation.NONE

    def test_non_jpeg_is_not_rotated(self):
        im = PILImage.new("RGB", (10, 10))
        assert orientation_of(im) is Orientation.NONE


class TestDegraded:
    def test_corrupt_source_falls_back_to_original(self, cache, cache_dir, library):
        source = library / "broken.jpg"
        assert cache.get_or_create(source, RenditionSpec(100, 100)) == source
        assert not cache.path_for(source, RenditionSpec(100, 100)).exists()
        assert not cache_dir.exists() or not any(cache_dir.iterdir())

    def test_missing_source_falls_back_to_original(self, cache, tmp_path):
        source = tmp_path / "gone.jpg"
        assert cache.get_or_create(source, RenditionSpec(100, 100)) == source

    def test_encode_failure_cleans_temp_file(self, cache, cache_dir, library, monkeypatch):
        def broken_save(self, fp, *args, **kwargs):
            fp.write(b"partial")
            raise OSError("disk full")

        monkeypatch.setattr(PILImage.Image, "save", broken_save)
        source = library / "IMG_01.jpg"
        assert cache.get_or_create(source, RenditionSpec(100, 100)) == source
        assert list(cache_dir.iterdir()) == []
