"""Tests for the crawl session and breadth-first auditor."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from conftest import FakePage, img
from siteaudit.config import AuditConfig
from siteaudit.exceptions import BrowserLaunchError
from siteaudit.scheduler import CrawlSession, SiteAuditor

ROOT = "https://ex.com/"


async def _crawl(page, config, root=ROOT, session=None):
    async with SiteAuditor(config, page=page) as auditor:
        return await auditor.run(root, session=session)


class TestCrawlSession:
    """Test cases for CrawlSession."""

    def test_root_is_queued(self):
        session = CrawlSession(ROOT)
        assert list(session.queue) == [ROOT]
        assert session.is_known("https://ex.com")
        assert session.visited == set()

    def test_enqueue_deduplicates_by_identity(self):
        session = CrawlSession(ROOT)
        assert session.enqueue("https://ex.com/about") is True
        assert session.enqueue("https://ex.com/about/") is False
        assert session.enqueue("https://ex.com/about?ref=nav#top") is False
        assert list(session.queue) == [ROOT, "https://ex.com/about"]

    def test_next_target_marks_visited(self):
        session = CrawlSession(ROOT)
        assert session.next_target() == ROOT
        assert "https://ex.com" in session.visited
        assert session.enqueue(ROOT) is False
        assert session.next_target() is None

    def test_visited_entries_are_skipped(self):
        session = CrawlSession(ROOT)
        session.queue.append("https://ex.com/")
        assert session.next_target() == ROOT
        assert session.next_target() is None

    def test_independent_sessions(self):
        """Sessions share no state."""
        first = CrawlSession(ROOT)
        second = CrawlSession(ROOT)
        first.next_target()
        assert second.is_known(ROOT)
        assert second.visited == set()
        assert first.image_cache is not second.image_cache


class TestSiteAuditor:
    """Test cases for SiteAuditor runs against a fake page."""

    @pytest.mark.asyncio
    async def test_breadth_first_order(self, fast_config):
        """Children of the root are processed before grandchildren."""
        page = FakePage({
            ROOT: {"title": "Root", "hrefs": ["/a", "/b"]},
            "https://ex.com/a": {"title": "A", "hrefs": ["/c", "/"]},
            "https://ex.com/b": {"title": "B", "hrefs": ["/a"]},
            "https://ex.com/c": {"title": "C"},
        })

        results = await _crawl(page, fast_config)

        assert [r.url for r in results] == [
            ROOT,
            "https://ex.com/a",
            "https://ex.com/b",
            "https://ex.com/c",
        ]
        assert results[0].links == ["https://ex.com/a", "https://ex.com/b"]
        assert results[1].links == ["https://ex.com/c"]
        assert results[2].links == []

    @pytest.mark.asyncio
    async def test_cycles_terminate(self, fast_config):
        page = FakePage({
            ROOT: {"hrefs": ["/a"]},
            "https://ex.com/a": {"hrefs": ["/b", "/"]},
            "https://ex.com/b": {"hrefs": ["/a/", "/#top", "/b"]},
        })

        results = await _crawl(page, fast_config)

        assert len(results) == 3
        assert len(page.visits) == 3
        assert len({r.url for r in results}) == 3

    @pytest.mark.asyncio
    async def test_duplicate_links_and_shared_image(self, fast_config):
        """One queue entry for a page linked twice; one probe for a shared image."""
        page = FakePage({
            ROOT: {
                "hrefs": ["https://ex.com/about", "https://ex.com/about/"],
                "images": [img("https://ex.com/logo.png", alt="Logo")],
            },
            "https://ex.com/about": {
                "images": [img("https://ex.com/logo.png", alt="Logo")],
            },
        })
        session = CrawlSession(ROOT)

        results = await _crawl(page, fast_config, session=session)

        assert len(results) == 2
        assert results[0].links == ["https://ex.com/about"]
        assert page.head_requests == ["https://ex.com/logo.png"]
        assert results[1].images.details[0].cached_check is True
        assert session.image_cache.size == 1

    @pytest.mark.asyncio
    async def test_other_origins_not_followed(self, fast_config):
        page = FakePage({
            ROOT: {"hrefs": ["https://other.com/page", "https://other.com/file.pdf"]},
            "https://other.com/page": {"title": "Other"},
        })

        results = await _crawl(page, fast_config)

        assert [r.url for r in results] == [ROOT]
        assert results[0].links == []
        assert results[0].document_links == ["https://other.com/file.pdf"]
        assert page.visits == [ROOT]

    @pytest.mark.asyncio
    async def test_document_links_not_followed(self, fast_config):
        page = FakePage({
            ROOT: {"hrefs": ["/guide.pdf"]},
            "https://ex.com/guide.pdf": {"status": 200},
        })

        results = await _crawl(page, fast_config)

        assert len(results) == 1
        assert results[0].document_links == ["https://ex.com/guide.pdf"]

    @pytest.mark.asyncio
    async def test_document_root_is_checked(self, fast_config):
        url = "https://ex.com/catalog.pdf"
        page = FakePage({url: {"status": 404}})

        results = await _crawl(page, fast_config, root=url)

        assert len(results) == 1
        assert results[0].is_document
        assert results[0].is_broken_document

    @pytest.mark.asyncio
    async def test_failed_pages_do_not_stop_crawl(self, fast_config):
        page = FakePage({
            ROOT: {"hrefs": ["/broken", "/ok"]},
            "https://ex.com/broken": {"error": Exception("net::ERR_TIMED_OUT")},
            "https://ex.com/ok": {"title": "OK"},
        })

        results = await _crawl(page, fast_config)

        assert [r.url for r in results] == [ROOT, "https://ex.com/broken", "https://ex.com/ok"]
        assert results[1].js_errors == ["Page failed to load: net::ERR_TIMED_OUT"]
        assert results[1].status_code == 0
        assert results[2].title == "OK"

    @pytest.mark.asyncio
    async def test_inspector_crash_is_recorded(self, fast_config):
        inspector = AsyncMock()
        inspector.inspect.side_effect = RuntimeError("boom")
        page = FakePage()

        async with SiteAuditor(fast_config, page=page, inspector=inspector) as auditor:
            results = await auditor.run(ROOT)

        assert len(results) == 1
        assert results[0].js_errors == ["Inspection failed: boom"]
        assert results[0].status_code == 0

    @pytest.mark.asyncio
    async def test_max_pages(self, fast_config):
        config = AuditConfig(**{**fast_config.to_dict(), "max_pages": 2})
        page = FakePage({
            ROOT: {"hrefs": ["/a", "/b", "/c"]},
            "https://ex.com/a": {},
            "https://ex.com/b": {},
            "https://ex.com/c": {},
        })

        results = await _crawl(page, config)

        assert [r.url for r in results] == [ROOT, "https://ex.com/a"]

    @pytest.mark.asyncio
    async def test_cancellation_keeps_partial_results(self, fast_config):
        page = FakePage({
            ROOT: {"hrefs": ["/a", "/slow"]},
            "https://ex.com/a": {"title": "A"},
            "https://ex.com/slow": {"hang": True},
        })
        session = CrawlSession(ROOT)

        task = asyncio.create_task(_crawl(page, fast_config, session=session))
        while "https://ex.com/slow" not in page.visits:
            await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert session.interrupted is True
        assert [r.url for r in session.results] == [ROOT, "https://ex.com/a"]
        assert all(not handlers for handlers in page.listeners.values())

    @pytest.mark.asyncio
    async def test_screenshots(self, tmp_path):
        config = AuditConfig(page_delay_seconds=0, output_dir=str(tmp_path))
        page = FakePage({
            ROOT: {"hrefs": ["/down", "/doc.pdf"]},
            "https://ex.com/down": {"error": Exception("net::ERR_FAILED")},
        })

        results = await _crawl(page, config)

        assert results[0].screenshot == "screenshots/https___ex_com.png"
        assert (tmp_path / "screenshots" / "https___ex_com.png").exists()
        assert results[1].screenshot is None
        assert page.screenshots == [str(Path(tmp_path) / "screenshots" / "https___ex_com.png")]

    @pytest.mark.asyncio
    async def test_politeness_delay_after_html_pages(self):
        config = AuditConfig(page_delay_seconds=0.5, capture_screenshots=False)
        page = FakePage({ROOT: {"hrefs": ["/doc.pdf"]}})

        with patch("siteaudit.scheduler.asyncio.sleep", new=AsyncMock()) as sleep:
            await _crawl(page, config)

        sleep.assert_awaited_once_with(0.5)

    @pytest.mark.asyncio
    async def test_run_requires_page(self):
        auditor = SiteAuditor(AuditConfig())
        with pytest.raises(RuntimeError):
            await auditor.run(ROOT)

    @pytest.mark.asyncio
    async def test_launch_failure(self):
        config = AuditConfig(browser_type="chromium")
        with patch.object(
            SiteAuditor, "_launch_browser",
            AsyncMock(side_effect=BrowserLaunchError("no browser", browser_type="chromium")),
        ):
            with pytest.raises(BrowserLaunchError):
                async with SiteAuditor(config):
                    pass

    @pytest.mark.asyncio
    async def test_http_probe_backend(self, fast_config):
        config = AuditConfig(**{**fast_config.to_dict(), "probe_backend": "http"})
        page = FakePage({ROOT: {}})

        async with SiteAuditor(config, page=page) as auditor:
            assert auditor._probe is not None
            owned = auditor._owned_probe

        assert auditor._probe is None
        assert owned._client.is_closed
