"""Map source locators to stream URIs (public://, private://).

Archive records keep whatever the catalog reported: a managed-file id,
a stream URI, an absolute URL or a site-relative path. Everything is
normalised to a stream URI before touching storage.

URL forms understood:
- public://... and private://... pass through unchanged
- //host/path is treated as https://host/path
- /sites/<site>/files/private/<rel> -> private://<rel>
- /sites/<site>/files/<rel> -> public://<rel>
- <public base path>/private/<rel> -> private://<rel>
- <public base path>/<rel> -> public://<rel>
- /system/files/<rel> -> private://<rel>

Query strings and fragments are dropped and the relative part is
percent-decoded.
"""

from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

from asset_archive.application.ports.managed_file_registry import (
    ManagedFileRegistryProtocol,
)
from asset_archive.domain.models.archive_record import SourceLocator

STREAM_SCHEMES: tuple[str, ...] = ("public://", "private://")

DEFAULT_PUBLIC_BASE_PATH = "/sites/default/files"

_LEGACY_PRIVATE_PATTERN = re.compile(r"/?sites/[^/]+/files/private/(.+)$")
_PUBLIC_PATTERN = re.compile(r"/?sites/[^/]+/files/(.+)$")
_PRIVATE_PATTERN = re.compile(r"/?system/files/(.+)$")
_QUERY_OR_FRAGMENT = re.compile(r"[?#].*$")

_STRIP_CHARS = " \t\n\r\0\x0b\"'"


def is_stream_uri(value: str) -> bool:
    return value.startswith(STREAM_SCHEMES)


def url_path_to_stream_uri(
    url_or_path: str,
    public_base_path: str = DEFAULT_PUBLIC_BASE_PATH,
) -> str | None:
    """Convert a URL or path to a stream URI.

    Args:
        url_or_path: Absolute URL, scheme-relative URL, path or stream URI.
        public_base_path: URL path under which public files are served.

    Returns:
        The stream URI, or None if the value does not point at a local file.
    """
    value = url_or_path.strip(_STRIP_CHARS)
    if is_stream_uri(value):
        return value

    if value.startswith("//"):
        value = "https:" + value

    path = value
    if value.startswith(("http://", "https://")):
        path = urlsplit(value).path

    path = _QUERY_OR_FRAGMENT.sub("", path)

    # Checked before the public pattern so it does not become public://private/...
    match = _LEGACY_PRIVATE_PATTERN.search(path)
    if match:
        return "private://" + unquote(match.group(1))

    match = _PUBLIC_PATTERN.search(path)
    if match:
        return "public://" + unquote(match.group(1))

    base = "/" + public_base_path.strip("/")
    if path.startswith(base + "/private/"):
        return "private://" + unquote(path[len(base) + len("/private/") :])
    if path.startswith(base + "/"):
        return "public://" + unquote(path[len(base) + 1 :])

    match = _PRIVATE_PATTERN.search(path)
    if match:
        return "private://" + unquote(match.group(1))

    return None


def resolve_source_uri(
    locator: SourceLocator,
    registry: ManagedFileRegistryProtocol | None = None,
    public_base_path: str = DEFAULT_PUBLIC_BASE_PATH,
) -> str | None:
    """Resolve a locator to a stream URI.

    A managed-file id wins when the registry still knows it; otherwise
    the locator path is converted.
    """
    if locator.managed_file_id is not None and registry is not None:
        uri = registry.uri_for(locator.managed_file_id)
        if uri:
            return uri
    return url_path_to_stream_uri(locator.path, public_base_path)
