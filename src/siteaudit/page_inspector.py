"""
Per-page inspection using a Playwright page.

The PageInspector navigates to one URL and turns what it finds into a
PageResult. Documents (PDFs, images, archives...) are only checked for
reachability; HTML pages additionally have their title, meta tags, images,
links and script errors extracted.

No failure on a single target escapes inspect(): navigation errors, timeouts
and extraction problems are recorded on the result instead.
"""
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Iterator, List, NamedTuple, Optional, Sequence

from siteaudit.config import AuditConfig, default_config
from siteaudit.constants import (
    CATEGORY_BENIGN,
    DATA_URI_PREFIX,
    DEFAULT_STATUS_CODE,
    DOCUMENT_ACCESSIBLE,
    DOCUMENT_BROKEN,
    DOCUMENT_WAIT_UNTIL,
    HTML_WAIT_UNTIL,
    MISSING_TITLE,
    NETWORK_ERROR_STATUS,
)
from siteaudit.error_classifier import ErrorClassifier
from siteaudit.models import ImageDetail, ImagesAnalysis, PageResult
from siteaudit.probes import PageHeadProbe, Probe
from siteaudit.url_utils import (
    document_filename,
    document_type,
    is_asset,
    is_in_scope,
    resolve_link,
)

if TYPE_CHECKING:
    from siteaudit.scheduler import CrawlSession

logger = logging.getLogger(__name__)


META_DESCRIPTION_SCRIPT = """
() => {
    const el = document.querySelector('meta[name="description"]');
    return el ? (el.getAttribute('content') || '') : '';
}
"""

META_TAGS_SCRIPT = """
(allowed) => {
    const tags = {};
    document.querySelectorAll('meta').forEach(meta => {
        const name = meta.getAttribute('name') || meta.getAttribute('property');
        if (name && allowed.includes(name)) {
            tags[name] = meta.getAttribute('content') || '';
        }
    });
    return tags;
}
"""

IMAGES_SCRIPT = """
() => Array.from(document.querySelectorAll('img'), img => ({
    src: img.src,
    alt: img.alt || '',
    naturalWidth: img.naturalWidth,
    naturalHeight: img.naturalHeight,
    complete: img.complete,
}))
"""

ANCHORS_SCRIPT = """
() => Array.from(document.querySelectorAll('a[href]'), a => a.href)
"""


@dataclass
class ErrorCollector:
    """Accumulates script, console and network errors for one target.

    Handlers are registered on the page only while the collector is
    attached:

        collector = ErrorCollector(page_errors, console_errors)
        with collector.attach(page):
            await page.goto(url)
        collector.apply_to(result)
    """

    page_error_classifier: ErrorClassifier
    console_classifier: ErrorClassifier
    js_errors: List[str] = field(default_factory=list)
    console_errors: List[str] = field(default_factory=list)
    benign_errors: List[str] = field(default_factory=list)
    network_errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def on_page_error(self, error) -> None:
        message = getattr(error, "message", None) or str(error)
        if self.page_error_classifier.classify(message) == CATEGORY_BENIGN:
            self.benign_errors.append(message)
        else:
            self.js_errors.append(message)

    def on_console(self, msg) -> None:
        if msg.type == "error":
            if self.console_classifier.classify(msg.text) == CATEGORY_BENIGN:
                self.benign_errors.append(msg.text)
            else:
                self.console_errors.append(msg.text)
        elif msg.type == "warning":
            self.warnings.append(msg.text)

    def on_response(self, response) -> None:
        if response.status >= NETWORK_ERROR_STATUS:
            self.network_errors.append(f"{response.status} - {response.url}")

    @contextmanager
    def attach(self, page) -> Iterator["ErrorCollector"]:
        page.on("pageerror", self.on_page_error)
        page.on("console", self.on_console)
        page.on("response", self.on_response)
        try:
            yield self
        finally:
            try:
                page.remove_listener("pageerror", self.on_page_error)
                page.remove_listener("console", self.on_console)
                page.remove_listener("response", self.on_response)
            except Exception as e:
                logger.debug(f"Could not remove page listeners: {e}")

    def apply_to(self, result: PageResult) -> None:
        """Copy the collected messages onto a result."""
        result.js_errors.extend(self.js_errors)
        result.console_errors.extend(self.console_errors)
        result.benign_errors.extend(self.benign_errors)
        result.network_errors.extend(self.network_errors)
        result.warnings.extend(self.warnings)


class ImageCheck(NamedTuple):
    """Verification outcome for one image occurrence."""

    exists: bool
    cached: bool


def image_from_signals(signals: dict) -> ImageDetail:
    """Build an ImageDetail from the raw values reported by the browser."""
    width = int(signals.get("naturalWidth") or 0)
    height = int(signals.get("naturalHeight") or 0)
    complete = bool(signals.get("complete"))
    return ImageDetail(
        src=signals.get("src") or "",
        alt=signals.get("alt") or "",
        natural_width=width,
        natural_height=height,
        complete=complete,
        browser_working=complete and width > 0 and height > 0,
    )


def reconcile_images(
    images: Sequence[ImageDetail],
    checks: Sequence[Optional[ImageCheck]],
) -> ImagesAnalysis:
    """Merge browser signals with verification results and count once.

    An image is working only if the browser rendered it and verification
    did not report it missing. A failed verification always overrides the
    browser; a successful one never revives an image the browser could not
    render.

    Args:
        images: Images in DOM order with their browser signals
        checks: Verification outcome per image, None where no check applies

    Returns:
        ImagesAnalysis with details and counts derived from the same list
    """
    details = []
    for image, check in zip(images, checks):
        verified_exists = check.exists if check is not None else None
        details.append(replace(
            image,
            verified_exists=verified_exists,
            cached_check=check.cached if check is not None else False,
            is_working=image.browser_working and verified_exists is not False,
        ))

    working = sum(1 for image in details if image.is_working)
    with_alt = sum(1 for image in details if image.has_alt)
    return ImagesAnalysis(
        total=len(details),
        working=working,
        broken=len(details) - working,
        with_alt=with_alt,
        without_alt=len(details) - with_alt,
        details=details,
    )


class PageInspector:
    """Inspects one URL at a time on a shared Playwright page."""

    def __init__(self, config: Optional[AuditConfig] = None):
        self.config = config or default_config
        self.page_error_classifier = ErrorClassifier.for_page_errors(
            self.config.benign_page_error_patterns
        )
        self.console_classifier = ErrorClassifier.for_console(
            self.config.benign_console_patterns
        )

    async def inspect(
        self,
        page,
        url: str,
        session: "CrawlSession",
        probe: Optional[Probe] = None,
    ) -> PageResult:
        """Inspect a URL and return its result.

        Newly discovered in-scope links are handed to the session's queue;
        the ones it accepts are recorded in the result's ``links``.

        Args:
            page: Playwright page to navigate with
            url: URL to inspect
            session: Crawl session owning the queue and image cache
            probe: Image existence probe (defaults to a HEAD fetch in the page)

        Returns:
            PageResult for the URL
        """
        result = PageResult(url=url)

        if is_asset(url, self.config.asset_extensions):
            await self._check_document(page, url, result)
            return result

        await self._inspect_html(page, url, result, session, probe)
        return result

    async def _check_document(self, page, url: str, result: PageResult) -> None:
        logger.info(f"📄 Checking document: {url}")

        result.is_document = True
        result.document_type = document_type(url)

        start_time = time.time()
        try:
            response = await page.goto(
                url,
                wait_until=DOCUMENT_WAIT_UNTIL,
                timeout=self.config.document_timeout_ms,
            )
        except Exception as e:
            result.load_time_ms = self._elapsed_ms(start_time)
            result.status_code = 0
            result.document_status = DOCUMENT_BROKEN
            result.js_errors.append(f"Failed to load document: {e}")
            logger.warning(f"  ⚠️  Document failed to load: {url}: {e}")
            return

        result.load_time_ms = self._elapsed_ms(start_time)
        result.status_code = response.status if response else DEFAULT_STATUS_CODE
        result.loaded = True

        if result.status_code >= NETWORK_ERROR_STATUS:
            result.document_status = DOCUMENT_BROKEN
            result.js_errors.append(f"Document returned status: {result.status_code}")
            logger.warning(f"  ⚠️  Broken document ({result.status_code}): {url}")
        else:
            result.document_status = DOCUMENT_ACCESSIBLE
            result.title = f"{result.document_type} Document: {document_filename(url)}"

    async def _inspect_html(
        self,
        page,
        url: str,
        result: PageResult,
        session: "CrawlSession",
        probe: Optional[Probe],
    ) -> None:
        collector = ErrorCollector(self.page_error_classifier, self.console_classifier)

        with collector.attach(page):
            start_time = time.time()
            try:
                response = await page.goto(
                    url,
                    wait_until=HTML_WAIT_UNTIL,
                    timeout=self.config.page_timeout_ms,
                )
            except Exception as e:
                result.load_time_ms = self._elapsed_ms(start_time)
                result.status_code = 0
                collector.apply_to(result)
                result.js_errors.append(f"Page failed to load: {e}")
                logger.warning(f"  ⚠️  Page failed to load: {url}: {e}")
                return

            result.load_time_ms = self._elapsed_ms(start_time)
            result.status_code = response.status if response else DEFAULT_STATUS_CODE
            result.loaded = True

            await self._extract_title(page, result)
            await self._extract_meta(page, result)
            await self._analyze_images(page, result, session, probe or PageHeadProbe(
                page, timeout_ms=self.config.probe_timeout_ms
            ))
            await self._extract_links(page, result, session)

        collector.apply_to(result)

    async def _extract_title(self, page, result: PageResult) -> None:
        try:
            result.title = (await page.title()) or ""
        except Exception as e:
            logger.warning(f"⚠ Could not read title for {result.url}: {e}")
        if not result.title.strip():
            result.title = MISSING_TITLE

    async def _extract_meta(self, page, result: PageResult) -> None:
        try:
            result.meta_description = await page.evaluate(META_DESCRIPTION_SCRIPT) or ""
        except Exception as e:
            logger.warning(f"⚠ Could not read meta description for {result.url}: {e}")

        try:
            tags = await page.evaluate(META_TAGS_SCRIPT, list(self.config.meta_tags))
            result.meta_tags = {
                name: content for name, content in (tags or {}).items()
                if name in self.config.meta_tags
            }
        except Exception as e:
            logger.warning(f"⚠ Could not extract meta tags for {result.url}: {e}")

    async def _analyze_images(
        self,
        page,
        result: PageResult,
        session: "CrawlSession",
        probe: Probe,
    ) -> None:
        try:
            raw = await page.evaluate(IMAGES_SCRIPT)
        except Exception as e:
            logger.warning(f"⚠ Could not analyze images for {result.url}: {e}")
            return

        images = [image_from_signals(signals) for signals in raw or []]
        logger.info(f"   📸 Found {len(images)} images, verifying...")

        cache = session.image_cache
        checks: List[Optional[ImageCheck]] = []
        for image in images:
            if not image.src or image.src.startswith(DATA_URI_PREFIX):
                checks.append(None)
                continue
            cached = image.src in cache
            exists = await cache.verify(image.src, probe)
            checks.append(ImageCheck(exists=exists, cached=cached))

        new_checks = sum(1 for check in checks if check is not None and not check.cached)
        cached_checks = sum(1 for check in checks if check is not None and check.cached)
        logger.info(f"   🖼️  Image checks: {new_checks} new, {cached_checks} cached")

        result.images = reconcile_images(images, checks)

    async def _extract_links(self, page, result: PageResult, session: "CrawlSession") -> None:
        try:
            hrefs = await page.evaluate(ANCHORS_SCRIPT)
        except Exception as e:
            logger.warning(f"⚠ Could not extract links for {result.url}: {e}")
            return

        # a.href is already resolved against the document base URL
        base_url = page.url or result.url
        for href in hrefs or []:
            link = resolve_link(href, base_url)
            if link is None:
                continue

            if is_asset(link, self.config.asset_extensions):
                if link not in result.document_links:
                    result.document_links.append(link)
            elif is_in_scope(link, session.root_url):
                if session.enqueue(link):
                    result.links.append(link)
                    logger.info(f"   ➕ Added to queue: {link}")
                else:
                    logger.debug(f"   ⏭️  Already in queue/visited: {link}")

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.time() - start_time) * 1000)
