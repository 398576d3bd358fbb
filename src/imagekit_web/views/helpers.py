"""View helpers: translate an <img>/<video> option bag into attribute dicts.

ImageKit options are pulled out of the bag and turned into typed requests;
whatever is left is passed through untouched as extra HTML attributes.
Rendering the attributes as markup is left to the template layer.
"""

import posixpath
import re

from imagekit_web.config import Settings, get_settings
from imagekit_web.errors import InvalidInputError
from imagekit_web.responsive.generator import ResponsiveImageGenerator
from imagekit_web.responsive.models import ResponsiveRequest
from imagekit_web.url.builder import UrlBuilder
from imagekit_web.url.models import SrcOptions

VIDEO_FLAGS = ("controls", "autoplay", "loop", "muted")

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


def _pixel_width(width) -> int | None:
    """Read a display width such as ``400``, ``"400"`` or ``"400px"``."""
    if not width:
        return None
    if isinstance(width, int):
        return width
    match = _LEADING_DIGITS.match(str(width))
    if not match:
        raise InvalidInputError(f"width must start with a number of pixels, got {width!r}")
    return int(match.group(1)) or None


def _pop_src_fields(options: dict, settings: Settings) -> dict:
    return {
        "url_endpoint": options.pop("url_endpoint", None) or settings.url_endpoint,
        "transformation": options.pop("transformation", None) or [],
        "query_parameters": options.pop("query_parameters", None),
        "position": options.pop("transformation_position", None)
        or settings.transformation_position,
        "signed": bool(options.pop("signed", False)),
        "expires_in": options.pop("expires_in", None),
    }


def _add_common(attributes: dict, options: dict) -> None:
    css_class = options.pop("class_", None)
    css_class = options.pop("class", None) or css_class
    if css_class:
        attributes["class"] = css_class
    for key, value in (options.pop("data", None) or {}).items():
        attributes[f"data-{key}"] = value
    attributes.update(options)


def image_attributes(src: str | None, settings: Settings | None = None, **options) -> dict:
    """Return the attributes of an ImageKit <img> tag, in render order."""
    if not src:
        raise InvalidInputError("src is required")
    settings = settings or get_settings()
    src_fields = _pop_src_fields(options, settings)
    responsive = options.pop("responsive", settings.responsive)
    width = options.pop("width", None)
    height = options.pop("height", None)
    sizes = options.pop("sizes", None)
    device_breakpoints = options.pop("device_breakpoints", None) or settings.device_breakpoints
    image_breakpoints = options.pop("image_breakpoints", None) or settings.image_breakpoints

    attributes = {
        "alt": options.pop("alt", None) or "",
        "loading": options.pop("loading", None) or "lazy",
    }
    if width:
        attributes["width"] = width
    if height:
        attributes["height"] = height
    _add_common(attributes, options)

    builder = UrlBuilder(settings=settings)
    if responsive and src_fields["url_endpoint"]:
        request = ResponsiveRequest.create(
            path=src,
            width=_pixel_width(width),
            sizes=sizes,
            device_breakpoints=device_breakpoints,
            image_breakpoints=image_breakpoints,
            **src_fields,
        )
        result = ResponsiveImageGenerator(builder).generate(request)
        attributes["src"] = result.src
        if result.src_set:
            attributes["srcset"] = result.src_set
        if result.sizes:
            attributes["sizes"] = result.sizes
    else:
        attributes["src"] = builder.build(SrcOptions.create(path=src, **src_fields))
    return attributes


def video_attributes(
    src: str | None, settings: Settings | None = None, **options
) -> tuple[dict, dict]:
    """Return ``(video_attributes, source_attributes)`` for an ImageKit <video> tag."""
    if not src:
        raise InvalidInputError("src is required")
    settings = settings or get_settings()
    src_fields = _pop_src_fields(options, settings)
    filename = options.pop("filename", None) or src

    attributes = {}
    for key in ("width", "height", "poster", "preload"):
        value = options.pop(key, None)
        if value:
            attributes[key] = value
    for flag in VIDEO_FLAGS:
        if options.pop(flag, False):
            attributes[flag] = flag
    _add_common(attributes, options)

    url = UrlBuilder(settings=settings).build(SrcOptions.create(path=src, **src_fields))
    extension = posixpath.splitext(filename)[1].lstrip(".")
    return attributes, {"src": url, "type": f"video/{extension}"}
