"""Environment-driven configuration."""
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from models import Endpoint, RenditionKind
from renditions import RenditionSpec

APP_DIR = Path(__file__).resolve().parent

DEFAULT_RENDITIONS = {
    RenditionKind.INLINE: RenditionSpec(1024, 0),
    RenditionKind.THUMB: RenditionSpec(100, 100),
}


def sqlite_readonly_url(path: str) -> str:
    return f"sqlite:///file:{path}?mode=ro&uri=true"


class Settings(BaseSettings):
    """Viewer settings, read from ``SHOTWELL_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="SHOTWELL_")

    # Photo database
    home: Optional[str] = None
    dbname: Optional[str] = None
    dsn: Optional[str] = None

    # Renditions
    cache_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()) / "shotwell")
    renditions: Dict[RenditionKind, RenditionSpec] = Field(
        default_factory=lambda: dict(DEFAULT_RENDITIONS)
    )

    # Routing. Overrides must keep the default placeholder names
    # (:event_id, :tag_name/*tag_name, :id, *basename); handlers bind by name.
    paths: Dict[Endpoint, str] = Field(default_factory=dict)
    prefix: str = ""
    templates_dir: Path = APP_DIR / "templates"

    # Server and logging
    host: str = "127.0.0.1"
    port: int = Field(default=8001, ge=1, le=65535)
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    @field_validator("renditions")
    @classmethod
    def merge_default_renditions(cls, value):
        merged = dict(DEFAULT_RENDITIONS)
        merged.update(value)
        for kind, spec in merged.items():
            if spec.width < 0 or spec.height < 0:
                raise ValueError(f"negative size for {kind.value}: {spec}")
        return merged

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL for the photo database; opened read-only by default."""
        if self.dbname:
            return sqlite_readonly_url(self.dbname)
        if self.dsn:
            return self.dsn
        home = self.home or os.environ.get("HOME", "")
        return sqlite_readonly_url(f"{home}/.local/share/shotwell/data/photo.db")
