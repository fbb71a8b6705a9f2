"""Report output: JSON data, HTML report and plain-text summary."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from siteaudit.constants import (
    DEFAULT_OUTPUT_DIR,
    HTML_REPORT_FILENAME,
    HTML_REPORT_TEMPLATE,
    JSON_REPORT_FILENAME,
    META_DESCRIPTION_MAX_LENGTH,
    META_DESCRIPTION_MIN_LENGTH,
    REPORT_STATUS_COMPLETED,
    REPORT_STATUS_INTERRUPTED,
    SCREENSHOTS_DIRNAME,
)
from siteaudit.models import PageResult, SummaryStats

logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "summary.txt"


class DateTimeEncoder(json.JSONEncoder):
    """JSON encoder that handles datetime objects."""

    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def description_status(description: str) -> str:
    """Classify a meta description as missing, too-short, too-long or good."""
    length = len(description.strip()) if description else 0
    if length == 0:
        return "missing"
    if length < META_DESCRIPTION_MIN_LENGTH:
        return "too-short"
    if length > META_DESCRIPTION_MAX_LENGTH:
        return "too-long"
    return "good"


class ReportWriter:
    """Writes the audit report into a single output directory.

    Example structure:
        site-report/
        ├── index.html
        ├── report.json
        ├── summary.txt
        └── screenshots/
            ├── https___example_com.png
            └── https___example_com_about.png
    """

    def __init__(self, output_dir: str = DEFAULT_OUTPUT_DIR, template_dir: Optional[str] = None):
        """Initialize report writer.

        Args:
            output_dir: Directory to write reports to
            template_dir: Directory containing Jinja2 templates
                (defaults to the packaged templates)
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        (self.output_dir / SCREENSHOTS_DIRNAME).mkdir(exist_ok=True)

        template_path = Path(template_dir) if template_dir else Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(template_path)),
            autoescape=select_autoescape(["html", "j2"]),
        )
        self.env.filters['description_status'] = description_status

    def write(
        self,
        root_url: str,
        results: Sequence[PageResult],
        summary: SummaryStats,
        interrupted: bool = False,
    ) -> List[Path]:
        """Write JSON, HTML and text reports.

        Args:
            root_url: Root URL of the crawl
            results: Page results in crawl order
            summary: Summary statistics for the results
            interrupted: Whether the crawl stopped before its queue was empty

        Returns:
            Paths of the files written
        """
        status = REPORT_STATUS_INTERRUPTED if interrupted else REPORT_STATUS_COMPLETED
        generated_at = datetime.now()

        json_path = self.write_json(root_url, results, summary, status, generated_at)
        html_path = self.write_html(root_url, results, summary, status, generated_at)
        summary_path = self.write_summary(root_url, summary, status)

        logger.info(f"📄 Report generated: {html_path}")
        logger.info(f"📊 JSON data: {json_path}")
        logger.info(f"📸 Screenshots: {self.output_dir / SCREENSHOTS_DIRNAME}")
        return [json_path, html_path, summary_path]

    def write_json(
        self,
        root_url: str,
        results: Sequence[PageResult],
        summary: SummaryStats,
        status: str = REPORT_STATUS_COMPLETED,
        generated_at: Optional[datetime] = None,
    ) -> Path:
        report = {
            "status": status,
            "root_url": root_url,
            "generated_at": generated_at or datetime.now(),
            "summary": summary.to_dict(),
            "pages": [result.to_dict() for result in results],
        }
        path = self.output_dir / JSON_REPORT_FILENAME
        self._save_json(path, report)
        return path

    def write_html(
        self,
        root_url: str,
        results: Sequence[PageResult],
        summary: SummaryStats,
        status: str = REPORT_STATUS_COMPLETED,
        generated_at: Optional[datetime] = None,
    ) -> Path:
        template = self.env.get_template(HTML_REPORT_TEMPLATE)
        html = template.render(
            root_url=root_url,
            results=results,
            summary=summary,
            status=status,
            interrupted=status == REPORT_STATUS_INTERRUPTED,
            generated_at=(generated_at or datetime.now()).strftime('%Y-%m-%d %H:%M:%S'),
            description_min=META_DESCRIPTION_MIN_LENGTH,
            description_max=META_DESCRIPTION_MAX_LENGTH,
        )
        path = self.output_dir / HTML_REPORT_FILENAME
        with open(path, "w", encoding="utf-8") as f:
            f.write(html)
        return path

    def write_summary(self, root_url: str, summary: SummaryStats, status: str) -> Path:
        """Save human-readable summary."""
        path = self.output_dir / SUMMARY_FILENAME
        with open(path, "w", encoding="utf-8") as f:
            f.write(format_summary(root_url, summary, status))
        return path

    def _save_json(self, filepath: Path, data: dict) -> None:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, cls=DateTimeEncoder)


def format_summary(root_url: str, summary: SummaryStats, status: str = REPORT_STATUS_COMPLETED) -> str:
    """Render summary statistics as plain text."""
    images = summary.images
    lines = [
        "=" * 60,
        "SITE AUDIT SUMMARY",
        "=" * 60,
        "",
        f"Root URL: {root_url}",
        f"Status: {status}",
        "",
        f"Total URLs checked: {summary.total_pages}",
        f"HTML pages: {summary.html_pages}",
        f"Documents: {summary.document_pages}",
        f"Pages with critical errors: {summary.pages_with_critical_errors}",
        f"Broken documents: {summary.broken_documents}",
        f"Pages missing titles: {summary.pages_missing_titles}",
        f"Pages missing descriptions: {summary.pages_missing_descriptions}",
        f"Total critical errors: {summary.total_critical_errors}",
        f"Total benign errors: {summary.total_benign_errors}",
        f"Total broken images: {summary.total_broken_images}",
        "",
        "Image Analysis:",
        f"  Total images: {images.total}",
        f"  Working images: {images.working}",
        f"  Broken images: {images.broken}",
        f"  Images with alt text: {images.with_alt}",
        f"  Images without alt text: {images.without_alt}",
        f"  Unique images checked: {images.unique_images_checked}",
        f"  Duplicate checks avoided: {images.duplicate_checks_avoided}",
        "",
    ]
    return "\n".join(lines)
