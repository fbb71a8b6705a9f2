"""Shared fixtures: a fake Playwright page serving an in-memory site."""

import asyncio
from collections import defaultdict
from pathlib import Path
from urllib.parse import urljoin

import pytest

from siteaudit.config import AuditConfig
from siteaudit.page_inspector import (
    ANCHORS_SCRIPT,
    IMAGES_SCRIPT,
    META_DESCRIPTION_SCRIPT,
    META_TAGS_SCRIPT,
)
from siteaudit.probes import HEAD_REQUEST_SCRIPT
from siteaudit.url_utils import normalize_page


class FakeResponse:
    def __init__(self, status, url):
        self.status = status
        self.url = url


class FakeConsoleMessage:
    def __init__(self, type, text):
        self.type = type
        self.text = text


class FakePageError:
    def __init__(self, message):
        self.message = message


def img(src, alt="", width=100, height=80, complete=True):
    """Image signals as reported by the browser."""
    return {
        "src": src,
        "alt": alt,
        "naturalWidth": width,
        "naturalHeight": height,
        "complete": complete,
    }


class FakePage:
    """Minimal stand-in for playwright.async_api.Page.

    ``site`` maps URLs to page descriptions:

        {
            "status": 200,
            "title": "Home",
            "description": "...",
            "meta": {"og:title": "Home"},
            "images": [img("https://ex.com/logo.png")],
            "hrefs": ["/about"],
            "base": "https://ex.com/docs/",
            "page_errors": ["x is not defined"],
            "console": [("error", "Uncaught boom")],
            "responses": [(404, "https://ex.com/missing.js")],
            "error": Exception("net::ERR_CONNECTION_REFUSED"),
            "hang": True,
            "fail": {"images"},
        }

    Hrefs come back resolved the way ``a.href`` does, against ``base``
    (a <base href>) or the page URL.
    Pages are looked up by page identity; unknown URLs fail to navigate.
    ``head_statuses`` gives the HEAD status per literal URL (default 200).
    """

    def __init__(self, site=None, head_statuses=None):
        self.site = {normalize_page(url): entry for url, entry in (site or {}).items()}
        self.head_statuses = head_statuses or {}
        self.url = "about:blank"
        self.visits = []
        self.goto_kwargs = []
        self.head_requests = []
        self.screenshots = []
        self.listeners = defaultdict(list)
        self._current = {}

    def on(self, event, handler):
        self.listeners[event].append(handler)

    def remove_listener(self, event, handler):
        self.listeners[event].remove(handler)

    def _emit(self, event, payload):
        for handler in list(self.listeners[event]):
            handler(payload)

    async def goto(self, url, wait_until=None, timeout=None):
        self.visits.append(url)
        self.goto_kwargs.append({"wait_until": wait_until, "timeout": timeout})

        entry = self.site.get(normalize_page(url))
        if entry is None:
            raise Exception(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        if entry.get("hang"):
            await asyncio.sleep(3600)
        if entry.get("error"):
            raise entry["error"]

        self.url = entry.get("final_url", url)
        self._current = entry

        for message in entry.get("page_errors", []):
            self._emit("pageerror", FakePageError(message))
        for type_, text in entry.get("console", []):
            self._emit("console", FakeConsoleMessage(type_, text))
        for status, resource in entry.get("responses", []):
            self._emit("response", FakeResponse(status, resource))

        status = entry.get("status", 200)
        self._emit("response", FakeResponse(status, url))
        return FakeResponse(status, url)

    async def title(self):
        if "title" in self._current.get("fail", ()):
            raise Exception("Execution context was destroyed")
        return self._current.get("title", "")

    async def evaluate(self, script, arg=None):
        fail = self._current.get("fail", ())
        if script == HEAD_REQUEST_SCRIPT:
            url = arg[0]
            self.head_requests.append(url)
            status = self.head_statuses.get(url, 200)
            return {"status": status, "ok": 200 <= status < 300}
        if script == META_DESCRIPTION_SCRIPT:
            if "description" in fail:
                raise Exception("Execution context was destroyed")
            return self._current.get("description", "")
        if script == META_TAGS_SCRIPT:
            if "meta" in fail:
                raise Exception("Execution context was destroyed")
            meta = self._current.get("meta", {})
            return {name: value for name, value in meta.items() if name in arg}
        if script == IMAGES_SCRIPT:
            if "images" in fail:
                raise Exception("Execution context was destroyed")
            return list(self._current.get("images", []))
        if script == ANCHORS_SCRIPT:
            if "links" in fail:
                raise Exception("Execution context was destroyed")
            base = self._current.get("base", self.url)
            return [self._resolve_href(href, base) for href in self._current.get("hrefs", [])]
        raise AssertionError(f"Unexpected script: {script!r}")

    @staticmethod
    def _resolve_href(href, base):
        try:
            return urljoin(base, href)
        except ValueError:
            # browsers hand back the attribute unchanged when it cannot be parsed
            return href

    async def screenshot(self, path, full_page=False):
        Path(path).write_bytes(b"\x89PNG")
        self.screenshots.append(path)


@pytest.fixture
def fast_config(tmp_path):
    """Config without delays or screenshots, writing into tmp_path."""
    return AuditConfig(
        page_delay_seconds=0,
        capture_screenshots=False,
        output_dir=str(tmp_path / "report"),
    )
