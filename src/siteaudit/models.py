"""Data models for site audit results."""

from dataclasses import dataclass, field, asdict
from typing import Optional

from siteaudit.constants import DOCUMENT_BROKEN, MISSING_TITLE


@dataclass
class ProbeResult:
    """Outcome of a single existence probe (HEAD request)."""

    status: int = 0
    ok: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class ImageCacheEntry:
    """Verified existence of one image, keyed by its asset identity."""

    exists: bool
    original_url: str
    status_code: int = 0
    verified: bool = True


@dataclass
class ImageDetail:
    """Signals gathered for a single <img> element."""

    src: str
    alt: str = ""
    natural_width: int = 0
    natural_height: int = 0
    complete: bool = False
    browser_working: bool = False  # complete with nonzero natural dimensions
    verified_exists: Optional[bool] = None  # None when no probe applies (data: URIs)
    cached_check: bool = False
    is_working: bool = False

    @property
    def has_alt(self) -> bool:
        return bool(self.alt and self.alt.strip())


@dataclass
class ImagesAnalysis:
    """Per-page image counts and details."""

    total: int = 0
    working: int = 0
    broken: int = 0
    with_alt: int = 0
    without_alt: int = 0
    details: list[ImageDetail] = field(default_factory=list)


@dataclass
class PageResult:
    """Audit result for one processed URL (HTML page or document)."""

    url: str
    title: str = ""
    meta_description: str = ""
    meta_tags: dict[str, str] = field(default_factory=dict)
    js_errors: list[str] = field(default_factory=list)
    console_errors: list[str] = field(default_factory=list)
    benign_errors: list[str] = field(default_factory=list)
    network_errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    images: ImagesAnalysis = field(default_factory=ImagesAnalysis)
    links: list[str] = field(default_factory=list)
    document_links: list[str] = field(default_factory=list)
    status_code: int = 200
    load_time_ms: int = 0
    is_document: bool = False
    document_type: str = ""
    document_status: str = ""
    loaded: bool = False  # navigation completed
    screenshot: Optional[str] = None  # Path relative to the report directory

    @property
    def broken_images(self) -> list[str]:
        """Sources of images that ended up broken after verification."""
        return [img.src for img in self.images.details if not img.is_working]

    @property
    def has_critical_errors(self) -> bool:
        return bool(self.js_errors or self.console_errors)

    @property
    def missing_title(self) -> bool:
        return not self.title or self.title == MISSING_TITLE

    @property
    def is_broken_document(self) -> bool:
        return self.is_document and self.document_status == DOCUMENT_BROKEN

    def to_dict(self) -> dict:
        data = asdict(self)
        data["broken_images"] = self.broken_images
        return data


@dataclass
class ImageTotals:
    """Image counts aggregated over all HTML pages."""

    total: int = 0
    working: int = 0
    broken: int = 0
    with_alt: int = 0
    without_alt: int = 0
    unique_images_checked: int = 0

    @property
    def duplicate_checks_avoided(self) -> int:
        return max(0, self.total - self.unique_images_checked)


@dataclass
class SummaryStats:
    """Crawl-wide statistics computed from the result sequence."""

    total_pages: int = 0
    html_pages: int = 0
    document_pages: int = 0
    pages_with_critical_errors: int = 0
    broken_documents: int = 0
    pages_missing_titles: int = 0
    pages_missing_descriptions: int = 0
    pages_with_broken_images: int = 0
    total_critical_errors: int = 0
    total_benign_errors: int = 0
    total_broken_images: int = 0
    images: ImageTotals = field(default_factory=ImageTotals)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["images"]["duplicate_checks_avoided"] = self.images.duplicate_checks_avoided
        return data
