"""Scaled and oriented JPEG renditions, cached on disk."""
import hashlib
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Tuple, Union

from loguru import logger
from PIL import Image as PILImage

JPEG_FORMATS = {"JPEG", "MPO"}
EXIF_ORIENTATION = 0x0112
JPEG_QUALITY = 88

# mode open() gives a new file under the process umask; mkstemp uses 0600
_UMASK = os.umask(0)
os.umask(_UMASK)
FILE_MODE = 0o666 & ~_UMASK


class RenditionSpec(NamedTuple):
    """Target box; 0 on an axis means "follow the other axis"."""
    width: int
    height: int


class Orientation(Enum):
    """Clockwise correction needed to show the image upright."""
    NONE = 0
    CW_90 = 90
    CW_180 = 180
    CW_270 = 270


# Mirrored EXIF values collapse to their rotation component.
EXIF_TO_ORIENTATION = {
    1: Orientation.NONE,
    2: Orientation.NONE,
    3: Orientation.CW_180,
    4: Orientation.CW_180,
    5: Orientation.CW_270,
    6: Orientation.CW_90,
    7: Orientation.CW_90,
    8: Orientation.CW_270,
}

_TRANSPOSE = {
    Orientation.CW_90: PILImage.Transpose.ROTATE_270,
    Orientation.CW_180: PILImage.Transpose.ROTATE_180,
    Orientation.CW_270: PILImage.Transpose.ROTATE_90,
}


def cache_key(source: Union[str, Path], spec: RenditionSpec) -> str:
    digest = hashlib.md5(str(source).encode("utf-8")).hexdigest()
    return f"{digest}-{spec.width}x{spec.height}"


def orientation_of(im: PILImage.Image) -> Orientation:
    """Read the EXIF orientation of a JPEG; anything else is left alone."""
    if im.format not in JPEG_FORMATS:
        return Orientation.NONE
    value = im.getexif().get(EXIF_ORIENTATION)
    return EXIF_TO_ORIENTATION.get(value, Orientation.NONE)


def apply_orientation(im: PILImage.Image, orientation: Orientation) -> PILImage.Image:
    if orientation is Orientation.NONE:
        return im
    return im.transpose(_TRANSPOSE[orientation])


def scaled_size(size: Tuple[int, int], spec: RenditionSpec) -> Tuple[int, int]:
    """Fit ``size`` into ``spec`` keeping the aspect ratio, never upscaling."""
    w, h = size
    if spec.width and spec.height:
        ratio = min(spec.width / w, spec.height / h)
    elif spec.width:
        ratio = spec.width / w
    elif spec.height:
        ratio = spec.height / h
    else:
        return w, h
    ratio = min(ratio, 1.0)
    return max(1, round(w * ratio)), max(1, round(h * ratio))


class RenditionCache:
    """Content-addressed directory of renditions.

    Entries are never invalidated: originals are assumed not to change.
    Two concurrent misses on the same key may both render; each writes to
    its own temp file and renames it into place, so readers only ever see
    complete files.
    """

    def __init__(self, cache_dir: Union[str, Path], quality: int = JPEG_QUALITY):
        self.cache_dir = Path(cache_dir)
        self.quality = quality

    def path_for(self, source: Union[str, Path], spec: RenditionSpec) -> Path:
        return self.cache_dir / cache_key(source, spec)

    def get_or_create(self, source: Union[str, Path], spec: RenditionSpec) -> Path:
        """Return the rendition path, or the source itself if rendering fails."""
        target = self.path_for(source, spec)
        if target.exists():
            return target
        try:
            self._render(Path(source), spec, target)
        except Exception:
            logger.exception("Could not scale {} to {}x{}", source, spec.width, spec.height)
            return Path(source)
        logger.debug("Cached {} as {}", source, target.name)
        return target

    def _render(self, source: Path, spec: RenditionSpec, target: Path) -> None:
        with PILImage.open(source) as im:
            oriented = apply_orientation(im, orientation_of(im))
            size = scaled_size(oriented.size, spec)
            if size != oriented.size:
                oriented = oriented.resize(size, PILImage.Resampling.LANCZOS)
            rgb = oriented.convert("RGB")

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                rgb.save(fh, format="JPEG", quality=self.quality)
            os.chmod(tmp_name, FILE_MODE)
            os.replace(tmp_name, target)
        except BaseException:
            os.unlink(tmp_name)
            raise
