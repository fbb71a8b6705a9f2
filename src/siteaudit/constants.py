# src/siteaudit/constants.py
"""Centralized constants for the site auditor.

This module contains default values and fixed strings that are used across
multiple modules. For user-configurable settings, see config.py and
AuditConfig.
"""

# =============================================================================
# Crawler Constants
# =============================================================================

# Navigation timeout for HTML pages (milliseconds, Playwright units)
DEFAULT_PAGE_TIMEOUT_MS = 30000

# Navigation timeout for documents and other non-HTML assets (milliseconds)
DEFAULT_DOCUMENT_TIMEOUT_MS = 15000

# Timeout for a single image existence probe (milliseconds)
DEFAULT_PROBE_TIMEOUT_MS = 10000

# Politeness pause after each HTML page (seconds)
DEFAULT_PAGE_DELAY_SECONDS = 1.0

# Wait conditions passed to page.goto()
HTML_WAIT_UNTIL = "networkidle"
DOCUMENT_WAIT_UNTIL = "domcontentloaded"

# Status code recorded when navigation yields no response object
DEFAULT_STATUS_CODE = 200

# Responses at or above this status are recorded as network errors
NETWORK_ERROR_STATUS = 400


# =============================================================================
# URL Classification
# =============================================================================

# Non-HTML extensions that are checked as documents and never followed
DEFAULT_ASSET_EXTENSIONS = (
    # Documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    # Media
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg", ".webp",
    ".mp4", ".avi", ".mov", ".wmv",
    # Archives
    ".zip", ".rar", ".7z",
    # Text
    ".txt", ".rtf",
)

# Schemes that can be navigated by the crawler
CRAWLABLE_SCHEMES = ("http", "https")

# Ports dropped from a URL origin
DEFAULT_PORTS = {"http": 80, "https": 443}


# =============================================================================
# Page Inspection
# =============================================================================

# Title recorded when a page has no <title>
MISSING_TITLE = "⚠ Missing <title>"

# Meta tags (by name or property) captured from each page
DEFAULT_META_TAGS = (
    "description",
    "keywords",
    "viewport",
    "robots",
    "og:title",
    "og:description",
    "og:image",
    "twitter:title",
    "twitter:description",
    "twitter:image",
)

# Uncaught page errors matching these patterns are reported as benign
DEFAULT_BENIGN_PAGE_ERROR_PATTERNS = (
    r"Syntax error, unrecognized expression:",
    r"jQuery\.expr",
    r"Script error\.",
    r"Unable to preventDefault",
    r"Cannot read property",
    r"is not defined",
    r"null is not an object",
    r"undefined is not an object",
)

# Console errors matching these patterns are reported as benign
DEFAULT_BENIGN_CONSOLE_PATTERNS = (
    r"Syntax error, unrecognized expression:",
    r"Failed to load resource",
    r"Blocked a frame with origin",
    r"Content Security Policy",
    r"Loading failed for the",
)

# Error categories
CATEGORY_BENIGN = "benign"
CATEGORY_CRITICAL = "critical"

# Image sources with this prefix are inline and never probed
DATA_URI_PREFIX = "data:"


# =============================================================================
# Documents
# =============================================================================

DOCUMENT_ACCESSIBLE = "accessible"
DOCUMENT_BROKEN = "broken"

# Document type recorded when the URL has no usable extension
DEFAULT_DOCUMENT_TYPE = "DOCUMENT"


# =============================================================================
# Reporting
# =============================================================================

DEFAULT_OUTPUT_DIR = "site-report"
SCREENSHOTS_DIRNAME = "screenshots"
JSON_REPORT_FILENAME = "report.json"
HTML_REPORT_FILENAME = "index.html"
HTML_REPORT_TEMPLATE = "report.html.j2"
CLEAN_URLS_FILENAME = "all_urls.txt"

# Recommended meta description length (characters)
META_DESCRIPTION_MIN_LENGTH = 50
META_DESCRIPTION_MAX_LENGTH = 160

# Report run status
REPORT_STATUS_COMPLETED = "completed"
REPORT_STATUS_INTERRUPTED = "interrupted"

# URLs that look like images or PDFs are excluded from the clean URL export
IMAGE_OR_PDF_PATTERN = r"\.(png|jpe?g|gif|webp|svg|bmp|tiff?|ico|pdf)(\?.*)?$"

# =============================================================================
# Logging
# =============================================================================

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Parent logger of every siteaudit module
PACKAGE_LOGGER = "siteaudit"

# Third-party loggers held at WARNING unless DEBUG is requested
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "playwright")
