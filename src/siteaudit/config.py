from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional, Tuple
from pathlib import Path
import json
import os

from siteaudit.constants import (
    DEFAULT_ASSET_EXTENSIONS,
    DEFAULT_BENIGN_CONSOLE_PATTERNS,
    DEFAULT_BENIGN_PAGE_ERROR_PATTERNS,
    DEFAULT_DOCUMENT_TIMEOUT_MS,
    DEFAULT_META_TAGS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PAGE_DELAY_SECONDS,
    DEFAULT_PAGE_TIMEOUT_MS,
    DEFAULT_PROBE_TIMEOUT_MS,
)

load_dotenv()  # Loads variables from .env file


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    OUTPUT_DIR = os.getenv("SITEAUDIT_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE")
    USER_AGENT = os.getenv("USER_AGENT")


settings = Settings()


@dataclass
class AuditConfig:
    """Configuration for a site audit run."""

    # Timeouts (milliseconds)
    page_timeout_ms: int = DEFAULT_PAGE_TIMEOUT_MS
    document_timeout_ms: int = DEFAULT_DOCUMENT_TIMEOUT_MS
    probe_timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS

    # Politeness pause after each HTML page (seconds)
    page_delay_seconds: float = DEFAULT_PAGE_DELAY_SECONDS

    # Stop after this many processed targets (None = crawl everything reachable)
    max_pages: Optional[int] = None

    # Classification lists
    asset_extensions: Tuple[str, ...] = DEFAULT_ASSET_EXTENSIONS
    benign_page_error_patterns: Tuple[str, ...] = DEFAULT_BENIGN_PAGE_ERROR_PATTERNS
    benign_console_patterns: Tuple[str, ...] = DEFAULT_BENIGN_CONSOLE_PATTERNS
    meta_tags: Tuple[str, ...] = DEFAULT_META_TAGS

    # Output
    capture_screenshots: bool = True
    output_dir: str = DEFAULT_OUTPUT_DIR

    # Browser
    headless: bool = True
    browser_type: str = "chromium"  # chromium, firefox or webkit
    user_agent: Optional[str] = None

    # Image existence probe: 'page' (fetch inside the page) or 'http' (httpx)
    probe_backend: str = "page"

    _INT_FIELDS = ("page_timeout_ms", "document_timeout_ms", "probe_timeout_ms")
    _LIST_FIELDS = (
        "asset_extensions",
        "benign_page_error_patterns",
        "benign_console_patterns",
        "meta_tags",
    )

    def __post_init__(self):
        for name in self._LIST_FIELDS:
            setattr(self, name, tuple(getattr(self, name)))
        self.asset_extensions = tuple(
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in self.asset_extensions
        )
        if self.probe_backend not in ("page", "http"):
            raise ValueError(f"Unknown probe backend: {self.probe_backend}")

    @classmethod
    def from_env(cls) -> "AuditConfig":
        """Load configuration from environment variables.

        Environment variables are prefixed with SITEAUDIT_,
        e.g. SITEAUDIT_PAGE_DELAY_SECONDS=0.5. List settings are
        comma-separated.

        Returns:
            AuditConfig with values from environment
        """
        values = {}
        prefix = "SITEAUDIT_"

        for field_name in cls.__dataclass_fields__:
            env_value = os.getenv(f"{prefix}{field_name.upper()}")
            if env_value is None:
                continue
            try:
                values[field_name] = cls._coerce(field_name, env_value)
            except ValueError:
                pass  # Keep default if conversion fails

        return cls(**values)

    @classmethod
    def _coerce(cls, field_name: str, raw: str):
        if field_name in cls._INT_FIELDS:
            return int(raw)
        if field_name == "max_pages":
            return int(raw) if raw.strip() else None
        if field_name == "page_delay_seconds":
            return float(raw)
        if field_name in ("capture_screenshots", "headless"):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        if field_name in cls._LIST_FIELDS:
            return tuple(item.strip() for item in raw.split(",") if item.strip())
        return raw

    @classmethod
    def from_file(cls, path: str) -> "AuditConfig":
        """Load configuration from a JSON file.

        The file may hold the settings at the top level or under an
        "audit" key. Unknown keys are ignored.

        Args:
            path: Path to JSON configuration file

        Returns:
            AuditConfig with values from file
        """
        file_path = Path(path)

        if not file_path.exists():
            return cls()

        with open(file_path, 'r') as f:
            config = json.load(f)

        audit_config = config.get('audit', config)

        values = {
            field_name: audit_config[field_name]
            for field_name in cls.__dataclass_fields__
            if field_name in audit_config
        }
        return cls(**values)

    def to_dict(self) -> dict:
        """Convert configuration to a JSON-friendly dictionary."""
        result = {}
        for field_name in self.__dataclass_fields__:
            value = getattr(self, field_name)
            result[field_name] = list(value) if isinstance(value, tuple) else value
        return result

    def save_to_file(self, path: str) -> None:
        """Save current configuration to a JSON file.

        Args:
            path: Path to save configuration
        """
        with open(path, 'w') as f:
            json.dump({'audit': self.to_dict()}, f, indent=2)


# Global default configuration instance
default_config = AuditConfig()
