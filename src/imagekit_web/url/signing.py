"""Signed URL parameters.

The signature itself comes from the imagekitio SDK (HMAC-SHA1 over the URL
without its endpoint prefix, followed by the expiry). This module works out
the expiry from an injectable clock and orders the ``ik-t``/``ik-s`` pair.
"""

import time
from typing import Callable

from imagekitio.lib.helper import (
    DEFAULT_TIMESTAMP,
    SIGNATURE_PARAMETER,
    TIMESTAMP_PARAMETER,
    _get_signature,
)

from imagekit_web.errors import InvalidInputError

EXPIRY_PARAMETER = TIMESTAMP_PARAMETER


class UrlSigner:
    """Signs ImageKit URLs with the account's private key."""

    def __init__(self, private_key: str | None, clock: Callable[[], float] = time.time):
        if not private_key:
            raise InvalidInputError("private_key is required to sign URLs")
        self._private_key = private_key
        self._clock = clock

    def expiry_timestamp(self, expires_in: int | None) -> int:
        if expires_in and expires_in > 0:
            return int(self._clock() + expires_in)
        return DEFAULT_TIMESTAMP

    def signature(self, url: str, url_endpoint: str | None, expiry_timestamp: int) -> str:
        if not url_endpoint:
            raise InvalidInputError("url_endpoint is required to sign URLs")
        return _get_signature(
            private_key=self._private_key,
            url=url,
            url_endpoint=url_endpoint,
            expiry_timestamp=expiry_timestamp,
        )

    def sign_params(
        self, url: str, url_endpoint: str | None, expires_in: int | None
    ) -> list[tuple[str, str]]:
        """Return the query parameters to append to ``url``, in order."""
        expiry = self.expiry_timestamp(expires_in)
        params = []
        if expiry != DEFAULT_TIMESTAMP:
            params.append((EXPIRY_PARAMETER, str(expiry)))
        params.append((SIGNATURE_PARAMETER, self.signature(url, url_endpoint, expiry)))
        return params
