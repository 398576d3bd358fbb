"""Request/result models for responsive image attributes."""

from pydantic import ConfigDict, BaseModel, field_validator

from imagekit_web.url.models import SrcOptions

DEFAULT_DEVICE_BREAKPOINTS = (640, 750, 828, 1080, 1200, 1920, 2048, 3840)
DEFAULT_IMAGE_BREAKPOINTS = (16, 32, 48, 64, 96, 128, 256, 384)


def normalize_breakpoints(value) -> tuple[int, ...]:
    """Sort and de-duplicate breakpoints. Accepts a list or a comma-separated string."""
    if value is None:
        return ()
    if isinstance(value, str):
        value = [part for part in value.replace(" ", "").split(",") if part]
    widths = set()
    for item in value:
        width = int(item)
        if width <= 0:
            raise ValueError(f"breakpoints must be positive integers, got {item!r}")
        widths.add(width)
    return tuple(sorted(widths))


class ResponsiveRequest(SrcOptions):
    """SrcOptions plus the inputs that drive srcset generation."""

    width: int | None = None
    sizes: str | None = None
    device_breakpoints: tuple[int, ...] = DEFAULT_DEVICE_BREAKPOINTS
    image_breakpoints: tuple[int, ...] = DEFAULT_IMAGE_BREAKPOINTS

    @field_validator("device_breakpoints", "image_breakpoints", mode="before")
    @classmethod
    def _normalize(cls, value):
        return normalize_breakpoints(value)


class ResponsiveResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    src: str
    src_set: str | None = None
    sizes: str | None = None
