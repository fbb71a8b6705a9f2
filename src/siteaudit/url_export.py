"""Export the page URLs of a saved report as a plain list."""

import json
import logging
import re
from pathlib import Path
from typing import List

from siteaudit.constants import IMAGE_OR_PDF_PATTERN
from siteaudit.exceptions import ReportError

logger = logging.getLogger(__name__)

_IMAGE_OR_PDF = re.compile(IMAGE_OR_PDF_PATTERN, re.IGNORECASE)


def is_image_or_pdf(url: str) -> bool:
    return bool(_IMAGE_OR_PDF.search(url))


def extract_clean_urls(report: dict) -> List[str]:
    """Return the report's page URLs, skipping images and PDFs.

    Args:
        report: Parsed report.json contents

    Returns:
        URLs in report order
    """
    clean_urls = []
    for page in report.get("pages") or []:
        url = (page.get("url") or "").strip()
        if not url:
            continue
        if is_image_or_pdf(url):
            logger.debug(f"Skipped (image/pdf): {url}")
            continue
        clean_urls.append(url)
    return clean_urls


def export_clean_urls(report_path: str, output_path: str) -> List[str]:
    """Read a report.json and write its clean URLs one per line.

    Args:
        report_path: Path to report.json
        output_path: Path of the text file to write

    Returns:
        The URLs written

    Raises:
        ReportError: If the report is missing or not valid JSON
    """
    path = Path(report_path)
    if not path.exists():
        raise ReportError(f'"{report_path}" not found')

    try:
        with open(path, "r", encoding="utf-8") as f:
            report = json.load(f)
    except json.JSONDecodeError as e:
        raise ReportError(f"Could not parse {report_path}: {e}") from e

    logger.info(f"Found {len(report.get('pages') or [])} total entries")
    clean_urls = extract_clean_urls(report)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        f.write("\n".join(clean_urls) + "\n")

    logger.info(f"{len(clean_urls)} clean URLs (no images, no PDFs) saved to {output}")
    return clean_urls
