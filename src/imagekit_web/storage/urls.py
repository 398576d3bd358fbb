"""Displayable URLs for files kept in ImageKit storage.

The storage key is the complete file path in the media library, so a stored
file's URL is the endpoint plus the key, with optional transformations and
signing. Responsive attributes for a key go through the responsive generator.
"""

from imagekit_web.config import Settings
from imagekit_web.responsive.generator import ResponsiveImageGenerator
from imagekit_web.responsive.models import ResponsiveRequest
from imagekit_web.url.builder import UrlBuilder
from imagekit_web.url.models import SrcOptions


class StorageUrlResolver:
    def __init__(self, settings: Settings | None = None, url_endpoint: str | None = None):
        self.builder = UrlBuilder(settings=settings)
        self.url_endpoint = url_endpoint

    @property
    def endpoint(self) -> str | None:
        return self.url_endpoint or self.builder.settings.url_endpoint

    def url(self, key: str, transformation=None, signed: bool = False, expires_in: int | None = None) -> str:
        """Return the delivery URL for ``key``."""
        options = SrcOptions.create(
            path=key,
            url_endpoint=self.endpoint,
            transformation=transformation,
            signed=signed,
            expires_in=expires_in,
        )
        return self.builder.build(options)

    def responsive_attributes(
        self,
        key: str,
        width: int | None = None,
        sizes: str | None = None,
        transformation=None,
        device_breakpoints=None,
        image_breakpoints=None,
        signed: bool = False,
        expires_in: int | None = None,
    ) -> dict[str, str]:
        """Return ``src``, ``srcset`` and ``sizes`` for ``key``, leaving out empty ones."""
        settings = self.builder.settings
        request = ResponsiveRequest.create(
            path=key,
            url_endpoint=self.endpoint,
            transformation=transformation,
            width=width,
            sizes=sizes,
            device_breakpoints=device_breakpoints or settings.device_breakpoints,
            image_breakpoints=image_breakpoints or settings.image_breakpoints,
            signed=signed,
            expires_in=expires_in,
        )
        result = ResponsiveImageGenerator(self.builder).generate(request)
        attributes = {"src": result.src, "srcset": result.src_set, "sizes": result.sizes}
        return {name: value for name, value in attributes.items() if value}
