"""Existence probes used to verify images.

A probe is an async callable taking a URL and returning a ProbeResult. The
default probe issues ``fetch(url, {method: 'HEAD'})`` inside the page being
inspected, so the request carries the page's cookies and origin. The httpx
probe checks the URL from outside the browser.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import httpx

from siteaudit.constants import DEFAULT_PROBE_TIMEOUT_MS
from siteaudit.models import ProbeResult

Probe = Callable[[str], Awaitable[ProbeResult]]

HEAD_REQUEST_SCRIPT = """
async ([url, timeoutMs]) => {
    const controller = new AbortController();
    const timer = setTimeout(() => controller.abort(), timeoutMs);
    try {
        const response = await fetch(url, { method: 'HEAD', signal: controller.signal });
        return { status: response.status, ok: response.ok };
    } catch (error) {
        return { status: 0, ok: false, error: error.message };
    } finally {
        clearTimeout(timer);
    }
}
"""


class PageHeadProbe:
    """HEAD request issued from within a Playwright page."""

    def __init__(self, page, timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS):
        self._page = page
        self.timeout_ms = timeout_ms

    async def __call__(self, url: str) -> ProbeResult:
        # The in-page AbortController bounds the fetch; wait_for bounds the
        # round trip to the browser itself.
        response = await asyncio.wait_for(
            self._page.evaluate(HEAD_REQUEST_SCRIPT, [url, self.timeout_ms]),
            timeout=self.timeout_ms / 1000 + 5,
        )
        return ProbeResult(
            status=int(response.get("status") or 0),
            ok=bool(response.get("ok")),
            error=response.get("error"),
        )


class HttpxHeadProbe:
    """HEAD request issued with a shared httpx.AsyncClient.

    Use as an async context manager so the connection pool is closed:

        async with HttpxHeadProbe() as probe:
            result = await probe("https://example.com/logo.png")
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout_ms = timeout_ms
        self._owns_client = client is None
        headers = {"User-Agent": user_agent} if user_agent else None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_ms / 1000,
            follow_redirects=True,
            headers=headers,
        )

    async def __aenter__(self) -> "HttpxHeadProbe":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __call__(self, url: str) -> ProbeResult:
        try:
            response = await self._client.head(url)
        except httpx.TimeoutException:
            return ProbeResult(status=0, ok=False, error=f"Timeout after {self.timeout_ms}ms")
        except httpx.HTTPError as e:
            return ProbeResult(status=0, ok=False, error=str(e) or type(e).__name__)
        return ProbeResult(status=response.status_code, ok=response.is_success)
