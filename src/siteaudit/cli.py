"""Command-line interface for the site auditor."""

import asyncio
import dataclasses
import sys
from pathlib import Path

from siteaudit.aggregator import summarize
from siteaudit.browser_setup import install_browser
from siteaudit.config import AuditConfig, settings
from siteaudit.constants import (
    CLEAN_URLS_FILENAME,
    JSON_REPORT_FILENAME,
    REPORT_STATUS_COMPLETED,
    REPORT_STATUS_INTERRUPTED,
)
from siteaudit.exceptions import BrowserLaunchError, ReportError
from siteaudit.logging_config import setup_logging
from siteaudit.output_manager import ReportWriter, format_summary
from siteaudit.scheduler import CrawlSession, SiteAuditor
from siteaudit.url_export import export_clean_urls


async def _async_audit(root_url: str, config: AuditConfig, session: CrawlSession):
    """Run a site audit, filling the given session."""
    async with SiteAuditor(config) as auditor:
        return await auditor.run(root_url, session=session)


def build_config(args) -> AuditConfig:
    """Build the audit configuration from a config file or the environment,
    then apply command-line overrides."""
    config = AuditConfig.from_file(args.config) if args.config else AuditConfig.from_env()

    overrides = {}
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    if args.max_pages is not None:
        overrides["max_pages"] = args.max_pages
    if args.delay is not None:
        overrides["page_delay_seconds"] = args.delay
    if args.no_screenshots:
        overrides["capture_screenshots"] = False
    if args.headful:
        overrides["headless"] = False
    if args.browser_type:
        overrides["browser_type"] = args.browser_type
    if args.probe:
        overrides["probe_backend"] = args.probe
    if config.user_agent is None and settings.USER_AGENT:
        overrides["user_agent"] = settings.USER_AGENT

    return dataclasses.replace(config, **overrides) if overrides else config


def crawl_command(args):
    """Crawl a site and write its report."""
    config = build_config(args)
    session = CrawlSession(args.url)

    try:
        asyncio.run(_async_audit(args.url, config, session))
    except KeyboardInterrupt:
        print("\n\n⚠️  Crawl interrupted by user. Saving partial report...")
        session.interrupted = True
    except BrowserLaunchError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    summary = summarize(session.results, unique_images_checked=session.image_cache.size)
    writer = ReportWriter(config.output_dir)
    writer.write(args.url, session.results, summary, interrupted=session.interrupted)

    status = REPORT_STATUS_INTERRUPTED if session.interrupted else REPORT_STATUS_COMPLETED
    print()
    print(format_summary(args.url, summary, status))
    print(f"Report written to {Path(config.output_dir).resolve()}")


def urls_command(args):
    """Export the page URLs of a saved report, without images or PDFs."""
    report_path = args.report or str(Path(settings.OUTPUT_DIR) / JSON_REPORT_FILENAME)
    try:
        urls = export_clean_urls(report_path, args.output)
    except ReportError as e:
        print(f"❌ {e}")
        sys.exit(1)
    print(f"✅ {len(urls)} clean URLs saved to {args.output}")


def install_browser_command(args):
    """Download the browser binaries used for audits."""
    if not install_browser(args.browser_type):
        sys.exit(1)


def main():
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Site Auditor - Crawl a website with a real browser and report broken pages, documents and images"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.LOG_LEVEL.upper(),
        help="Set logging verbosity (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-file",
        default=settings.LOG_FILE,
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Crawl command parser
    crawl_parser = subparsers.add_parser(
        "crawl", help="Crawl a site breadth-first and write an audit report."
    )
    crawl_parser.add_argument("url", help="Root URL; only pages under it are followed")
    crawl_parser.add_argument(
        "--output-dir",
        "-o",
        help=f"Directory for the report and screenshots (default: {settings.OUTPUT_DIR})",
    )
    crawl_parser.add_argument(
        "--max-pages",
        type=int,
        help="Stop after this many URLs (default: no limit)",
    )
    crawl_parser.add_argument(
        "--delay",
        type=float,
        help="Seconds to wait after each HTML page (default: 1.0)",
    )
    crawl_parser.add_argument(
        "--no-screenshots",
        action="store_true",
        help="Do not capture full-page screenshots",
    )
    crawl_parser.add_argument(
        "--headful",
        action="store_true",
        help="Show the browser window",
    )
    crawl_parser.add_argument(
        "--browser-type",
        choices=["chromium", "firefox", "webkit"],
        help="Browser engine to use (default: chromium)",
    )
    crawl_parser.add_argument(
        "--probe",
        choices=["page", "http"],
        help="Image check backend: fetch inside the page or plain HTTP (default: page)",
    )
    crawl_parser.add_argument(
        "--config",
        help="JSON configuration file",
    )
    crawl_parser.set_defaults(func=crawl_command)

    # URL export command parser
    urls_parser = subparsers.add_parser(
        "urls", help="Export page URLs from a report, skipping images and PDFs."
    )
    urls_parser.add_argument(
        "--report",
        "-r",
        help=f"Path to {JSON_REPORT_FILENAME} (default: {settings.OUTPUT_DIR}/{JSON_REPORT_FILENAME})",
    )
    urls_parser.add_argument(
        "--output",
        "-o",
        default=CLEAN_URLS_FILENAME,
        help=f"Output text file (default: {CLEAN_URLS_FILENAME})",
    )
    urls_parser.set_defaults(func=urls_command)

    # Browser install command parser
    install_parser = subparsers.add_parser(
        "install-browser", help="Download the Playwright browser used for audits."
    )
    install_parser.add_argument(
        "--browser-type",
        choices=["chromium", "firefox", "webkit"],
        default="chromium",
        help="Browser engine to install (default: chromium)",
    )
    install_parser.set_defaults(func=install_browser_command)

    args = parser.parse_args()

    # Configure logging based on flags
    setup_logging(
        level=args.log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
