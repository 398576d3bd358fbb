"""URL builder: turns SrcOptions into a delivery URL."""

import logging
import time
from typing import Callable
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from imagekitio import ImageKit

from imagekit_web.config import Settings, get_settings
from imagekit_web.errors import InvalidInputError
from imagekit_web.url.models import SrcOptions, TransformationPosition
from imagekit_web.url.signing import UrlSigner
from imagekit_web.url.transformation import (
    CHAIN_DELIMITER,
    TRANSFORMATION_PARAMETER,
    build_transformation_string,
    imagekit_client,
)

logger = logging.getLogger(__name__)

# Characters left untouched by a browser's encodeURI(), minus the query and
# fragment delimiters, which are split off before encoding.
_PATH_SAFE = "/;,:@&=+$!~*'()"


def _encode_path(path: str) -> str:
    return quote(path, safe=_PATH_SAFE)


def _split_relative(path: str) -> tuple[str, str, str]:
    """Split ``path?query#fragment`` without treating ``a:b.jpg`` as a scheme."""
    path, _, fragment = path.partition("#")
    path, _, query = path.partition("?")
    return path, query, fragment


def _join_query(query: str, extra: str) -> str:
    if not extra:
        return query
    return f"{query}&{extra}" if query else extra


class UrlBuilder:
    """Builds ImageKit URLs.

    Falls back to the process-wide settings for the endpoint and private key
    when none are injected. The transformation string is produced by the
    imagekitio SDK client.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        signer: UrlSigner | None = None,
        clock: Callable[[], float] = time.time,
        client: ImageKit | None = None,
    ):
        self._settings = settings
        self._signer = signer
        self._clock = clock
        self._client = client

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @property
    def client(self) -> ImageKit:
        return self._client or imagekit_client(self.settings.private_key or "")

    def build(self, options: SrcOptions) -> str:
        """Serialize one SrcOptions into an absolute URL."""
        if not options.path:
            raise InvalidInputError("path is required")

        settings = self.settings
        endpoint = options.url_endpoint or settings.url_endpoint
        tr = build_transformation_string(options.transformation, client=self.client)
        position = options.effective_position

        if options.is_absolute:
            scheme, netloc, path, query, fragment = urlsplit(options.path)
        else:
            if not endpoint:
                raise InvalidInputError("url_endpoint is required for relative paths")
            scheme, netloc, endpoint_path, _, _ = urlsplit(endpoint)
            source_path, query, fragment = _split_relative(options.path)
            segments = [endpoint_path.rstrip("/")]
            if tr and position is TransformationPosition.PATH:
                segments.append(f"{TRANSFORMATION_PARAMETER}{CHAIN_DELIMITER}{tr}")
            segments.append(_encode_path(source_path.lstrip("/")))
            path = "/".join(segments)

        # A query already on the source is kept byte for byte.
        query = _join_query(query, urlencode(options.query_parameters, quote_via=quote))
        if tr and position is TransformationPosition.QUERY:
            query = _join_query(query, f"{TRANSFORMATION_PARAMETER}={tr}")

        url = urlunsplit((scheme, netloc, path, query, ""))
        if options.needs_signature:
            signer = self._signer or UrlSigner(settings.private_key, clock=self._clock)
            signature_params = signer.sign_params(url, endpoint, options.expires_in)
            query = _join_query(query, urlencode(signature_params))
            url = urlunsplit((scheme, netloc, path, query, ""))
            logger.debug("Signed URL for %s (expires_in=%s)", options.path, options.expires_in)

        if fragment:
            url = f"{url}#{fragment}"
        return url


def build_url(options: SrcOptions, settings: Settings | None = None) -> str:
    """Build a URL with a one-off UrlBuilder."""
    return UrlBuilder(settings=settings).build(options)
