"""Breadth-first crawl of a site with one browser page.

A CrawlSession holds all state of one run: the FIFO queue, the visited set,
the image verification cache and the results collected so far. SiteAuditor
owns the browser and drives the session until its queue is empty.

    async with SiteAuditor(config) as auditor:
        results = await auditor.run("https://example.com/")

Because the session is a plain object, a caller that passes its own session
keeps access to the partial results if the run is cancelled.
"""

import asyncio
import logging
from collections import deque
from pathlib import Path
from typing import Deque, List, Optional, Set

from siteaudit.config import AuditConfig, default_config
from siteaudit.constants import SCREENSHOTS_DIRNAME
from siteaudit.exceptions import BrowserLaunchError
from siteaudit.image_cache import ImageVerificationCache
from siteaudit.models import PageResult
from siteaudit.page_inspector import PageInspector
from siteaudit.probes import HttpxHeadProbe, Probe
from siteaudit.url_utils import normalize_page, screenshot_name

logger = logging.getLogger(__name__)


class CrawlSession:
    """Queue, visited set, image cache and results of a single crawl."""

    def __init__(self, root_url: str):
        self.root_url = root_url
        self.queue: Deque[str] = deque()
        self.visited: Set[str] = set()
        self.image_cache = ImageVerificationCache()
        self.results: List[PageResult] = []
        self.interrupted = False

        # Identities of the entries in self.queue
        self._queued: Set[str] = set()

        self.enqueue(root_url)

    def __len__(self) -> int:
        return len(self.results)

    def is_known(self, url: str) -> bool:
        """True if the URL's page identity is already visited or queued."""
        identity = normalize_page(url)
        return identity in self.visited or identity in self._queued

    def enqueue(self, url: str) -> bool:
        """Add a URL to the back of the queue unless its identity is known.

        Returns:
            True if the URL was queued
        """
        identity = normalize_page(url)
        if identity in self.visited or identity in self._queued:
            return False
        self.queue.append(url)
        self._queued.add(identity)
        return True

    def next_target(self) -> Optional[str]:
        """Pop queued URLs until one that has not been visited is found.

        The returned URL is marked visited before it is processed.
        """
        while self.queue:
            url = self.queue.popleft()
            identity = normalize_page(url)
            self._queued.discard(identity)
            if identity in self.visited:
                logger.info(f"⏭️  Skipping already checked: {url}")
                continue
            self.visited.add(identity)
            return url
        return None

    def add_result(self, result: PageResult) -> None:
        self.results.append(result)


class SiteAuditor:
    """
    Playwright-driven site audit.

    Used as an async context manager, the auditor launches a browser and a
    single page on entry and closes them on exit. A page can also be passed
    in directly, in which case no browser is launched.

    Targets are processed strictly one at a time in FIFO order, so pages are
    audited level by level: the root, then everything linked from the root,
    then everything first linked from those pages, and so on.
    """

    def __init__(
        self,
        config: Optional[AuditConfig] = None,
        page=None,
        inspector: Optional[PageInspector] = None,
        probe: Optional[Probe] = None,
    ):
        """
        Initialize the auditor.

        Args:
            config: AuditConfig with crawl settings
            page: Existing Playwright page to crawl with (skips browser launch)
            inspector: PageInspector to use (built from config by default)
            probe: Image existence probe (defaults to config.probe_backend)
        """
        self.config = config or default_config
        self.inspector = inspector or PageInspector(self.config)
        self._page = page
        self._probe = probe
        self._owned_probe: Optional[HttpxHeadProbe] = None
        self._playwright = None
        self._browser = None
        self._context = None
        self.session: Optional[CrawlSession] = None

    async def __aenter__(self) -> "SiteAuditor":
        if self._page is None:
            await self._launch_browser()

        if self._probe is None and self.config.probe_backend == "http":
            self._owned_probe = HttpxHeadProbe(
                timeout_ms=self.config.probe_timeout_ms,
                user_agent=self.config.user_agent,
            )
            self._probe = self._owned_probe

        return self

    async def _launch_browser(self) -> None:
        """Start Playwright and open the page used for the whole crawl."""
        try:
            from playwright.async_api import async_playwright
        except ImportError:
            raise BrowserLaunchError(
                "Playwright is required for site audits. "
                "Install with: pip install playwright && playwright install chromium",
                browser_type=self.config.browser_type,
            )

        logger.info(
            f"Launching {self.config.browser_type} browser (headless={self.config.headless})"
        )

        try:
            self._playwright = await async_playwright().start()
            browser_launcher = getattr(self._playwright, self.config.browser_type)
            self._browser = await browser_launcher.launch(headless=self.config.headless)
            self._context = await self._browser.new_context(user_agent=self.config.user_agent)
            self._page = await self._context.new_page()
        except Exception as e:
            await self._close_browser()
            raise BrowserLaunchError(
                f"Could not launch {self.config.browser_type}: {e}",
                browser_type=self.config.browser_type,
            ) from e

        self._page.set_default_timeout(self.config.page_timeout_ms)
        self._page.set_default_navigation_timeout(self.config.page_timeout_ms)

        logger.info("Browser launched successfully")

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._owned_probe is not None:
            await self._owned_probe.aclose()
            self._owned_probe = None
            self._probe = None
        await self._close_browser()

    async def _close_browser(self) -> None:
        if self._browser:
            logger.info("Closing browser")
            await self._browser.close()
            self._browser = None
            self._context = None
            self._page = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def run(self, root_url: str, session: Optional[CrawlSession] = None) -> List[PageResult]:
        """Crawl every page reachable from root_url within its scope.

        Args:
            root_url: Absolute URL where the crawl starts; also the scope prefix
            session: Session to fill (a new one is created if omitted)

        Returns:
            Results in processing (breadth-first) order

        Raises:
            RuntimeError: If no page is available (not used as a context manager)
        """
        if self._page is None:
            raise RuntimeError(
                "Browser is not running. Use SiteAuditor as an async context manager: "
                "async with SiteAuditor(config) as auditor:"
            )

        session = session or CrawlSession(root_url)
        self.session = session

        logger.info(f"Starting site audit from: {session.root_url}")
        if self.config.max_pages:
            logger.info(f"Max pages: {self.config.max_pages}")

        try:
            while True:
                if self.config.max_pages and len(session.results) >= self.config.max_pages:
                    logger.info(f"Reached max pages ({self.config.max_pages}), stopping")
                    break

                url = session.next_target()
                if url is None:
                    break

                await self._process(url, session)
        except asyncio.CancelledError:
            session.interrupted = True
            logger.warning(f"Audit interrupted after {len(session.results)} pages")
            raise

        logger.info(f"\n{'=' * 60}")
        logger.info(f"Audit complete! Processed {len(session.results)} URLs")
        logger.info(f"Unique images checked: {session.image_cache.size}")
        logger.info(f"{'=' * 60}\n")

        return session.results

    async def _process(self, url: str, session: CrawlSession) -> None:
        logger.info(f"\n🌐 Checking ({len(session.results) + 1}): {url}")

        try:
            result = await self.inspector.inspect(self._page, url, session, probe=self._probe)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # inspect() records navigation failures itself; this is anything else
            logger.error(f"  ⚠️  Unexpected error inspecting {url}: {e}")
            result = PageResult(url=url, status_code=0)
            result.js_errors.append(f"Inspection failed: {e}")

        if not result.is_document:
            await self._capture_screenshot(url, result)

        session.add_result(result)

        if not result.is_document and self.config.page_delay_seconds > 0:
            await asyncio.sleep(self.config.page_delay_seconds)

    async def _capture_screenshot(self, url: str, result: PageResult) -> None:
        if not self.config.capture_screenshots or not result.loaded:
            return

        filename = screenshot_name(normalize_page(url))
        screenshots_dir = Path(self.config.output_dir) / SCREENSHOTS_DIRNAME
        try:
            screenshots_dir.mkdir(parents=True, exist_ok=True)
            await self._page.screenshot(path=str(screenshots_dir / filename), full_page=True)
            result.screenshot = f"{SCREENSHOTS_DIRNAME}/{filename}"
        except Exception as e:
            logger.warning(f"⚠ Could not take screenshot for {url}: {e}")
