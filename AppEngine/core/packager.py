"""Resource packager: wraps rendered content into a uniquely addressed envelope.

Wire shape::

    {"uri": "<scheme>://<kind>/<identifier>",
     "content": {"type": "rawHtml", "htmlString": "..."}   # or {"type": "externalUrl", "iframeUrl": "..."}
     "encoding": "text"}

The packager never inspects the content it carries."""

from __future__ import annotations

import itertools
import random
import string
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from loguru import logger

from ..utils.config import settings

_BASE36_ALPHABET = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class ResourceContent:
    type: str  # "rawHtml" | "externalUrl"
    html_string: Optional[str] = None
    iframe_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type}
        if self.html_string is not None:
            result["htmlString"] = self.html_string
        if self.iframe_url is not None:
            result["iframeUrl"] = self.iframe_url
        return result


@dataclass(frozen=True)
class PackagedResource:
    uri: str
    content: ResourceContent
    encoding: str = "text"

    @property
    def html(self) -> Optional[str]:
        return self.content.html_string

    @property
    def kind(self) -> str:
        return self.uri.split("://", 1)[-1].split("/", 1)[0]

    def to_dict(self) -> Dict[str, Any]:
        return {"uri": self.uri, "content": self.content.to_dict(), "encoding": self.encoding}


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


class ResourcePackager:
    """Builds PackagedResource envelopes.

    Instance ids are "<epoch-ms>-<9 base36 chars>"; the random part is salted with a
    process-local sequence so two ids produced back-to-back within one millisecond differ."""

    def __init__(self, scheme: Optional[str] = None):
        self.scheme = scheme or settings.RESOURCE_URI_SCHEME
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()
        self._rng = random.SystemRandom()

    def new_instance_id(self) -> str:
        with self._lock:
            seq = next(self._sequence)
        millis = int(time.time() * 1000)
        # low digits carry the sequence, the rest is random
        suffix = "".join(self._rng.choice(_BASE36_ALPHABET) for _ in range(5)) + _to_base36(seq % 36**4).rjust(4, "0")
        return f"{millis}-{suffix}"

    def build_uri(self, kind: str, identifier: str) -> str:
        return f"{self.scheme}://{kind}/{identifier}"

    def package_resource(self, kind: str, html: str, contextual_id: Optional[str] = None) -> PackagedResource:
        identifier = contextual_id or self.new_instance_id()
        uri = self.build_uri(kind, identifier)
        logger.debug(f"Packaged {kind} resource: {uri}")
        return PackagedResource(uri=uri, content=ResourceContent(type="rawHtml", html_string=html))

    def package_external_url(self, kind: str, resource_id: str, page_url: str) -> PackagedResource:
        """Reference a hosted page instead of inlining the markup."""
        uri = self.build_uri(kind, resource_id)
        logger.debug(f"Packaged external {kind} resource: {uri} -> {page_url}")
        return PackagedResource(uri=uri, content=ResourceContent(type="externalUrl", iframe_url=page_url))


__all__ = ["ResourceContent", "PackagedResource", "ResourcePackager"]
