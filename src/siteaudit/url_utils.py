"""URL identity, classification and scoping helpers.

Page identity and asset identity are the keys used for deduplication:

- page identity: origin plus path with trailing slashes removed,
  query string and fragment dropped
- asset identity: origin plus path with query string (usually a cache
  buster) and fragment dropped

Both functions are pure. A URL that cannot be parsed is returned unchanged so
that a single bad href never aborts a crawl.
"""

import re
from typing import Iterable, Optional
from urllib.parse import SplitResult, urljoin, urlsplit

from siteaudit.constants import (
    CRAWLABLE_SCHEMES,
    DEFAULT_ASSET_EXTENSIONS,
    DEFAULT_DOCUMENT_TYPE,
    DEFAULT_PORTS,
)


def _origin(parsed: SplitResult) -> Optional[str]:
    """``scheme://host[:port]`` of a split URL, without user info or a
    default port. Raises ValueError for an invalid port."""
    scheme = parsed.scheme.lower()
    host = parsed.hostname
    if not scheme or not host:
        return None
    if ":" in host:
        host = f"[{host}]"
    port = parsed.port
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"
    return f"{scheme}://{host}"


def _origin_and_path(url: str) -> Optional[str]:
    try:
        parsed = urlsplit(url)
        origin = _origin(parsed)
    except ValueError:
        return None
    if origin is None:
        return None
    return f"{origin}{parsed.path}"


def normalize_page(url: str) -> str:
    """Return the page identity of a URL.

    Args:
        url: Absolute URL

    Returns:
        Origin plus path with trailing slashes stripped, or the input
        unchanged when it cannot be parsed
    """
    base = _origin_and_path(url)
    if base is None:
        return url
    return base.rstrip("/")


def normalize_asset(url: str) -> str:
    """Return the asset identity of a URL (origin plus path)."""
    base = _origin_and_path(url)
    if base is None:
        return url
    return base


def is_asset(url: str, extensions: Optional[Iterable[str]] = None) -> bool:
    """Check whether a URL points to a non-HTML document or asset.

    Matching is a case-insensitive suffix test on the path only.

    Args:
        url: URL to classify
        extensions: Extensions to match (defaults to DEFAULT_ASSET_EXTENSIONS)

    Returns:
        True for documents, media and archives; False for pages and for
        URLs that cannot be parsed
    """
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return False
    suffixes = tuple(extensions) if extensions is not None else DEFAULT_ASSET_EXTENSIONS
    return path.endswith(suffixes)


def document_type(url: str) -> str:
    """Upper-case file extension of a URL path, e.g. 'PDF'."""
    try:
        path = urlsplit(url).path
    except ValueError:
        path = url
    filename = path.rsplit("/", 1)[-1]
    if "." not in filename:
        return DEFAULT_DOCUMENT_TYPE
    return filename.rsplit(".", 1)[-1].upper() or DEFAULT_DOCUMENT_TYPE


def document_filename(url: str) -> str:
    """Last path segment of a URL."""
    try:
        path = urlsplit(url).path
    except ValueError:
        path = url
    return path.rstrip("/").rsplit("/", 1)[-1]


def resolve_link(href: str, base_url: str) -> Optional[str]:
    """Resolve an href against the page it was found on.

    Args:
        href: Link as read from the page (``a.href`` is already absolute)
        base_url: URL of the page containing the link

    Returns:
        Absolute http(s) URL without its fragment, or None when the href
        cannot be parsed or uses another scheme (mailto:, javascript:, ...)
    """
    if href is None:
        return None
    href = href.strip()
    if not href:
        return None
    try:
        absolute = urljoin(base_url, href)
        parsed = urlsplit(absolute)
        parsed.port
    except ValueError:
        return None
    if parsed.scheme.lower() not in CRAWLABLE_SCHEMES or not parsed.netloc:
        return None
    return parsed._replace(fragment="").geturl()


def is_in_scope(url: str, root_url: str) -> bool:
    """Check whether a URL lies under the crawl root.

    The URL must share the root's origin (scheme, host and effective port),
    and its path must start with the root path.
    """
    try:
        target = urlsplit(url)
        root = urlsplit(root_url)
        target_origin = _origin(target)
        root_origin = _origin(root)
    except ValueError:
        return False
    if target_origin is None or target_origin != root_origin:
        return False
    return target.path.startswith(root.path.rstrip("/"))


def screenshot_name(identity: str) -> str:
    """Filesystem-safe PNG filename for a page identity."""
    return re.sub(r"[^a-zA-Z0-9]", "_", identity) + ".png"
