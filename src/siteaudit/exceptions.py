"""Exceptions raised by the site auditor."""

from typing import Optional


class SiteAuditError(Exception):
    """Base class for site auditor errors."""


class BrowserLaunchError(SiteAuditError):
    """Raised when the browser cannot be started, before any page is crawled."""

    def __init__(self, message: str, browser_type: Optional[str] = None):
        self.message = message
        self.browser_type = browser_type
        super().__init__(message)


class ReportError(SiteAuditError):
    """Raised when a saved report cannot be read."""
