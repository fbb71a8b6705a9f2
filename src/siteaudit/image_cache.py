"""Memoized image existence checks shared by every page of a crawl."""

import asyncio
import logging
from typing import Dict, Optional

from siteaudit.models import ImageCacheEntry, ProbeResult
from siteaudit.probes import Probe
from siteaudit.url_utils import normalize_asset

logger = logging.getLogger(__name__)


class ImageVerificationCache:
    """Write-once cache of image existence keyed by asset identity.

    The first reference to an image probes the literal URL; every later
    reference with the same asset identity (including ones that differ only
    by query string) is answered from the cache. Failed probes are cached
    too, so a permanently broken image is probed once per crawl.

    Concurrent callers for the same identity await a single in-flight probe.
    """

    def __init__(self):
        self._entries: Dict[str, ImageCacheEntry] = {}
        self._inflight: Dict[str, asyncio.Future] = {}
        self.probes_issued = 0
        self.hits = 0

    def __contains__(self, url: str) -> bool:
        return normalize_asset(url) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def size(self) -> int:
        """Number of unique images verified."""
        return len(self._entries)

    def get(self, url: str) -> Optional[ImageCacheEntry]:
        return self._entries.get(normalize_asset(url))

    def entries(self) -> Dict[str, ImageCacheEntry]:
        return dict(self._entries)

    async def verify(self, url: str, probe: Probe) -> bool:
        """Return whether an image exists, probing at most once per identity.

        Args:
            url: Literal image URL as found on the page
            probe: Async callable issuing the existence check

        Returns:
            True if the image answered with HTTP 200
        """
        identity = normalize_asset(url)

        entry = self._entries.get(identity)
        if entry is not None:
            self.hits += 1
            logger.debug(
                f"   🖼️  Using cached check for: {url} -> {'EXISTS' if entry.exists else 'BROKEN'}"
            )
            return entry.exists

        pending = self._inflight.get(identity)
        if pending is not None:
            self.hits += 1
            entry = await asyncio.shield(pending)
            return entry.exists

        future = asyncio.get_running_loop().create_future()
        self._inflight[identity] = future
        try:
            entry = await self._probe(url, probe)
            self._entries[identity] = entry
            future.set_result(entry)
        except BaseException:
            # Cancelled mid-probe: no entry is written
            future.cancel()
            raise
        finally:
            del self._inflight[identity]

        return entry.exists

    async def _probe(self, url: str, probe: Probe) -> ImageCacheEntry:
        self.probes_issued += 1
        logger.debug(f"   🖼️  Checking image: {url}")
        try:
            result: ProbeResult = await probe(url)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"   🖼️  Probe failed for {url}: {e}")
            return ImageCacheEntry(exists=False, original_url=url, status_code=0)

        exists = result.ok and result.status == 200
        if not exists:
            logger.info(f"   ❌ Broken image: {url} (status: {result.status})")
        return ImageCacheEntry(exists=exists, original_url=url, status_code=result.status)
