"""Crawl-wide statistics over a sequence of page results."""

from typing import Sequence

from siteaudit.models import ImageTotals, PageResult, SummaryStats


def summarize(results: Sequence[PageResult], unique_images_checked: int = 0) -> SummaryStats:
    """Reduce page results to summary statistics.

    Image totals are taken from HTML pages only; documents carry no image
    analysis.

    Args:
        results: Page results in crawl order
        unique_images_checked: Size of the image verification cache

    Returns:
        SummaryStats for the crawl
    """
    html_pages = [r for r in results if not r.is_document]
    document_pages = [r for r in results if r.is_document]

    images = ImageTotals(
        total=sum(r.images.total for r in html_pages),
        working=sum(r.images.working for r in html_pages),
        broken=sum(r.images.broken for r in html_pages),
        with_alt=sum(r.images.with_alt for r in html_pages),
        without_alt=sum(r.images.without_alt for r in html_pages),
        unique_images_checked=unique_images_checked,
    )

    return SummaryStats(
        total_pages=len(results),
        html_pages=len(html_pages),
        document_pages=len(document_pages),
        pages_with_critical_errors=sum(1 for r in results if r.has_critical_errors),
        broken_documents=sum(1 for r in document_pages if r.is_broken_document),
        pages_missing_titles=sum(1 for r in html_pages if r.missing_title),
        pages_missing_descriptions=sum(
            1 for r in html_pages if not r.meta_description.strip()
        ),
        pages_with_broken_images=sum(1 for r in results if r.broken_images),
        total_critical_errors=sum(len(r.js_errors) + len(r.console_errors) for r in results),
        total_benign_errors=sum(len(r.benign_errors) for r in results),
        total_broken_images=sum(len(r.broken_images) for r in results),
        images=images,
    )
