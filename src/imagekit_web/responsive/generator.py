"""Responsive image attributes: picks candidate widths and builds src/srcset/sizes."""

import logging
import re
from bisect import bisect_right

from imagekit_web.config import Settings
from imagekit_web.errors import InvalidInputError
from imagekit_web.responsive.models import ResponsiveRequest, ResponsiveResult
from imagekit_web.url.builder import UrlBuilder
from imagekit_web.url.models import SrcOptions, TransformationStep

logger = logging.getLogger(__name__)

DEFAULT_SIZES = "100vw"
WIDTH_DESCRIPTOR = "w"
DENSITY_DESCRIPTOR = "x"

_VW_TOKEN = re.compile(r"\d+(?:\.\d+)?vw\b")


def select_candidates(request: ResponsiveRequest) -> tuple[list[int], str, str | None]:
    """Return (candidate widths, descriptor kind, sizes attribute).

    Strategies:
      * sizes with a ``vw`` token, or no width: device breakpoints, ``w``
        descriptors, sizes defaulting to ``100vw``.
      * sizes without a ``vw`` token: union of image and device breakpoints,
        ``w`` descriptors, sizes passed through.
      * width and no sizes: 1x/2x device breakpoints around the width, ``x``
        descriptors, no sizes.
    """
    device = list(request.device_breakpoints)
    image = list(request.image_breakpoints)
    if not device and not image:
        raise InvalidInputError("at least one of device_breakpoints or image_breakpoints is required")
    combined = sorted(set(device) | set(image))
    pool = device or combined
    sizes = request.sizes

    if sizes and not _VW_TOKEN.search(sizes):
        return combined, WIDTH_DESCRIPTOR, sizes

    if sizes or request.width is None:
        return pool, WIDTH_DESCRIPTOR, sizes or DEFAULT_SIZES

    return density_candidates(pool, request.width), DENSITY_DESCRIPTOR, None


def density_candidates(breakpoints: list[int], width: int) -> list[int]:
    """Pick the 1x and 2x breakpoints for an explicit display width.

    1x is the greatest breakpoint not exceeding ``width`` (the smallest one if
    none does); 2x is the next breakpoint up, capped at the largest.
    """
    index = max(bisect_right(breakpoints, width) - 1, 0)
    one_x = breakpoints[index]
    two_x = breakpoints[min(index + 1, len(breakpoints) - 1)]
    if one_x == two_x:
        return [one_x]
    return [one_x, two_x]


class ResponsiveImageGenerator:
    """Builds src, srcset and sizes for a single image request."""

    def __init__(self, builder: UrlBuilder | None = None):
        self.builder = builder or UrlBuilder()

    def _url_for(self, request: ResponsiveRequest, width: int) -> str:
        step = TransformationStep.of(("width", width), ("crop", "at_max"))
        options = SrcOptions(
            path=request.path,
            url_endpoint=request.url_endpoint,
            transformation=request.transformation + (step,),
            position=request.position,
            query_parameters=request.query_parameters,
            signed=request.signed,
            expires_in=request.expires_in,
        )
        return self.builder.build(options)

    def generate(self, request: ResponsiveRequest) -> ResponsiveResult:
        candidates, descriptor, sizes = select_candidates(request)
        logger.debug(
            "Responsive candidates for %s: %s (%s descriptors)",
            request.path, candidates, descriptor,
        )

        src = self._url_for(request, candidates[-1])
        src_set = None
        if len(candidates) > 1:
            entries = []
            for index, width in enumerate(candidates, start=1):
                value = width if descriptor == WIDTH_DESCRIPTOR else index
                entries.append(f"{self._url_for(request, width)} {value}{descriptor}")
            src_set = ", ".join(entries)

        return ResponsiveResult(src=src, src_set=src_set, sizes=sizes)


def get_responsive_image_attributes(
    request: ResponsiveRequest, settings: Settings | None = None
) -> ResponsiveResult:
    """Generate responsive attributes with a one-off generator."""
    return ResponsiveImageGenerator(UrlBuilder(settings=settings)).generate(request)
