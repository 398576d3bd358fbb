"""Settings for imagekit-web.

Settings are read once (defaults, then an optional YAML file, then
``IMAGEKIT_*`` environment variables) into an immutable snapshot. Changing
them swaps in a new snapshot; callers holding the old one are unaffected.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Mapping

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from imagekit_web.errors import ConfigurationError
from imagekit_web.responsive.models import (
    DEFAULT_DEVICE_BREAKPOINTS,
    DEFAULT_IMAGE_BREAKPOINTS,
    normalize_breakpoints,
)
from imagekit_web.url.models import TransformationPosition

logger = logging.getLogger(__name__)

ENV_VARS = {
    "IMAGEKIT_PRIVATE_KEY": "private_key",
    "IMAGEKIT_PUBLIC_KEY": "public_key",
    "IMAGEKIT_URL_ENDPOINT": "url_endpoint",
    "IMAGEKIT_TRANSFORMATION_POSITION": "transformation_position",
    "IMAGEKIT_RESPONSIVE": "responsive",
    "IMAGEKIT_DEVICE_BREAKPOINTS": "device_breakpoints",
    "IMAGEKIT_IMAGE_BREAKPOINTS": "image_breakpoints",
}
CONFIG_PATH_ENV = "IMAGEKIT_CONFIG"


class Settings(BaseModel):
    """Account credentials and rendering defaults."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    private_key: str | None = None
    public_key: str | None = None
    url_endpoint: str | None = None
    transformation_position: TransformationPosition = TransformationPosition.QUERY
    responsive: bool = True
    device_breakpoints: tuple[int, ...] = DEFAULT_DEVICE_BREAKPOINTS
    image_breakpoints: tuple[int, ...] = DEFAULT_IMAGE_BREAKPOINTS

    @field_validator("transformation_position", mode="before")
    @classmethod
    def _lower_position(cls, value):
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("device_breakpoints", "image_breakpoints", mode="before")
    @classmethod
    def _normalize(cls, value):
        return normalize_breakpoints(value)

    def masked(self) -> dict:
        """Dump settings with keys hidden, for display."""
        data = self.model_dump(mode="json")
        for key in ("private_key", "public_key"):
            if data[key]:
                data[key] = data[key][:4] + "****"
        return data


def _read_config_file(path: Path) -> dict:
    try:
        doc = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    if "imagekit" in doc:
        doc = doc["imagekit"] or {}
        if not isinstance(doc, dict):
            raise ConfigurationError(f"'imagekit' section in {path} must be a mapping")
    return doc


def _read_environ(environ: Mapping[str, str]) -> dict:
    return {field: environ[var] for var, field in ENV_VARS.items() if environ.get(var)}


def load_settings(
    config_path: Path | None = None, environ: Mapping[str, str] | None = None
) -> Settings:
    """Build a Settings snapshot from defaults, a YAML file and the environment."""
    if environ is None:
        environ = os.environ
    if config_path is None and environ.get(CONFIG_PATH_ENV):
        config_path = Path(environ[CONFIG_PATH_ENV])

    data = {}
    if config_path is not None:
        data.update(_read_config_file(Path(config_path)))
        logger.debug("Loaded settings file %s", config_path)
    data.update(_read_environ(environ))

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid ImageKit settings: {exc}") from exc


_lock = threading.Lock()
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    current = _settings
    if current is None:
        with _lock:
            if _settings is None:
                _settings = load_settings()
            current = _settings
    return current


def configure(settings: Settings | None = None, **changes) -> Settings:
    """Replace the process-wide settings.

    Pass a full Settings object, or keyword changes applied on top of the
    current snapshot.
    """
    global _settings
    with _lock:
        base = settings or _settings or load_settings()
        try:
            updated = Settings(**{**base.model_dump(), **changes})
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid ImageKit settings: {exc}") from exc
        _settings = updated
    return updated


def reset_settings() -> None:
    """Drop the snapshot so the next get_settings() reloads from the environment."""
    global _settings
    with _lock:
        _settings = None
