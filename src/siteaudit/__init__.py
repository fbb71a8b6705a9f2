"""Browser-driven website auditor: broken pages, documents, images and script errors."""

__version__ = "0.1.0"

from siteaudit.config import AuditConfig, settings
from siteaudit.scheduler import CrawlSession, SiteAuditor
from siteaudit.page_inspector import PageInspector, reconcile_images
from siteaudit.image_cache import ImageVerificationCache
from siteaudit.error_classifier import ErrorClassifier
from siteaudit.aggregator import summarize
from siteaudit.output_manager import ReportWriter
from siteaudit.url_export import export_clean_urls, extract_clean_urls
from siteaudit.url_utils import is_asset, normalize_asset, normalize_page
from siteaudit.models import (
    ImageCacheEntry,
    ImageDetail,
    ImagesAnalysis,
    PageResult,
    ProbeResult,
    SummaryStats,
)
from siteaudit.exceptions import BrowserLaunchError, ReportError, SiteAuditError

__all__ = [
    # Core
    "SiteAuditor",
    "CrawlSession",
    "PageInspector",
    "ImageVerificationCache",
    "ErrorClassifier",
    "reconcile_images",
    "summarize",
    "ReportWriter",
    "export_clean_urls",
    "extract_clean_urls",
    "is_asset",
    "normalize_asset",
    "normalize_page",
    # Models
    "PageResult",
    "ImageDetail",
    "ImagesAnalysis",
    "ImageCacheEntry",
    "ProbeResult",
    "SummaryStats",
    # Config
    "AuditConfig",
    "settings",
    # Errors
    "SiteAuditError",
    "BrowserLaunchError",
    "ReportError",
]
