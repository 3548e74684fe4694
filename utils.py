"""Utility functions."""
import os
import re

from models import PhotoRecord

_PLACEHOLDER = re.compile(r":(\w+)")
_WILDCARD = re.compile(r"\*(\w+)")


def validate_basename(record: PhotoRecord, asserted: str) -> bool:
    """Check that a requested basename is exactly the basename on record."""
    return os.path.basename(record.filename) == asserted


def to_route_path(pattern: str) -> str:
    """Turn ``/raw/:id/*basename`` into ``/raw/{id}/{basename:path}``."""
    pattern = _PLACEHOLDER.sub(r"{\1}", pattern)
    return _WILDCARD.sub(r"{\1:path}", pattern)
