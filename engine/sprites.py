"""Fetch and sanitise the SVG sprite sheet before it is mounted.

The sprite URL is configured and normally same-origin, but the markup is
still treated as untrusted: only a parsed ``<svg>`` tree with active content
removed is ever handed out, and any failure yields no markup at all.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET

import httpx
from defusedxml import ElementTree as SafeET
from defusedxml.common import DefusedXmlException

logger = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"
SVG_CONTENT_TYPE = "image/svg+xml"

BLOCKED_ELEMENTS = {"script", "foreignobject", "iframe", "object", "embed"}
_JAVASCRIPT_URL = re.compile(r"^\s*javascript:", re.IGNORECASE)

ET.register_namespace("", SVG_NAMESPACE)
ET.register_namespace("xlink", XLINK_NAMESPACE)


class SpriteLoadError(Exception):
    """Raised when sprite markup cannot be fetched or trusted."""


def _local_name(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix from a tag or attribute."""
    return tag.rsplit("}", 1)[-1]


def _is_blocked_attribute(name: str, value: str) -> bool:
    local = _local_name(name).lower()
    if local.startswith("on") or local == "style":
        return True
    if _JAVASCRIPT_URL.match(value):
        return True
    if local == "href" and not value.startswith("#"):
        return True
    return False


def _scrub(element: ET.Element) -> None:
    """Remove blocked children and attributes, recursing depth-first."""
    for child in list(element):
        if not isinstance(child.tag, str):
            # Comments and processing instructions
            element.remove(child)
        elif _local_name(child.tag).lower() in BLOCKED_ELEMENTS:
            element.remove(child)
        else:
            _scrub(child)
    for name, value in list(element.attrib.items()):
        if _is_blocked_attribute(name, value):
            del element.attrib[name]


def sanitize_svg(markup: str) -> str:
    """Parse SVG markup and return it with active content removed.

    Raises:
        SpriteLoadError: If the markup does not parse or its root is not
            an ``<svg>`` element.
    """
    try:
        root = SafeET.fromstring(markup)
    except (ET.ParseError, DefusedXmlException) as e:
        raise SpriteLoadError(f"Invalid sprite markup: {e}") from e

    if _local_name(root.tag) != "svg":
        raise SpriteLoadError(f"Unexpected sprite root element: <{_local_name(root.tag)}>")

    _scrub(root)
    return ET.tostring(root, encoding="unicode")


async def fetch_sprites(url: str, client: httpx.AsyncClient | None = None) -> str:
    """Fetch the sprite sheet and return sanitised markup.

    Raises:
        SpriteLoadError: On transport failure, a non-2xx status, a non-SVG
            content type, or untrusted markup.
    """
    owns_client = client is None
    client = client or httpx.AsyncClient()
    try:
        try:
            resp = await client.get(url)
        except httpx.HTTPError as e:
            raise SpriteLoadError(str(e) or type(e).__name__) from e
    finally:
        if owns_client:
            await client.aclose()

    if not resp.is_success:
        raise SpriteLoadError(f"Unexpected sprites response: {resp.status_code} {resp.reason_phrase}")
    content_type = resp.headers.get("content-type", "")
    if SVG_CONTENT_TYPE not in content_type:
        raise SpriteLoadError(f"Unexpected sprites content-type: {content_type or '(none)'}")
    return sanitize_svg(resp.text)


class SpriteLayer:
    """Holds either mounted sprite markup or the reason it failed to load."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.markup: str | None = None
        self.error: str | None = None

    async def load(self, client: httpx.AsyncClient | None = None) -> bool:
        """Load the sprites; returns True if markup was mounted."""
        self.markup = None
        self.error = None
        try:
            self.markup = await fetch_sprites(self.url, client)
        except SpriteLoadError as e:
            logger.error("Failed to load sprite definitions from %s", self.url, exc_info=e)
            self.error = str(e)
            return False
        return True
