"""Tests for audit configuration."""

import json

import pytest

from siteaudit.config import AuditConfig
from siteaudit.constants import DEFAULT_ASSET_EXTENSIONS, DEFAULT_META_TAGS


class TestAuditConfig:
    """Test cases for AuditConfig."""

    def test_defaults(self):
        config = AuditConfig()

        assert config.page_timeout_ms == 30000
        assert config.document_timeout_ms == 15000
        assert config.page_delay_seconds == 1.0
        assert config.max_pages is None
        assert config.asset_extensions == DEFAULT_ASSET_EXTENSIONS
        assert config.meta_tags == DEFAULT_META_TAGS
        assert config.probe_backend == "page"
        assert config.headless is True

    def test_extensions_normalized(self):
        config = AuditConfig(asset_extensions=["PDF", ".Docx"])
        assert config.asset_extensions == (".pdf", ".docx")

    def test_unknown_probe_backend(self):
        with pytest.raises(ValueError):
            AuditConfig(probe_backend="curl")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SITEAUDIT_PAGE_DELAY_SECONDS", "0.25")
        monkeypatch.setenv("SITEAUDIT_MAX_PAGES", "20")
        monkeypatch.setenv("SITEAUDIT_CAPTURE_SCREENSHOTS", "false")
        monkeypatch.setenv("SITEAUDIT_ASSET_EXTENSIONS", "pdf, zip")
        monkeypatch.setenv("SITEAUDIT_PAGE_TIMEOUT_MS", "not-a-number")

        config = AuditConfig.from_env()

        assert config.page_delay_seconds == 0.25
        assert config.max_pages == 20
        assert config.capture_screenshots is False
        assert config.asset_extensions == (".pdf", ".zip")
        assert config.page_timeout_ms == 30000

    def test_from_missing_file(self, tmp_path):
        config = AuditConfig.from_file(str(tmp_path / "missing.json"))
        assert config == AuditConfig()

    def test_from_file_top_level(self, tmp_path):
        path = tmp_path / "audit.json"
        path.write_text(json.dumps({"max_pages": 5, "browser_type": "firefox", "unknown": 1}))

        config = AuditConfig.from_file(str(path))

        assert config.max_pages == 5
        assert config.browser_type == "firefox"

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "audit.json"
        original = AuditConfig(
            page_delay_seconds=0,
            benign_console_patterns=[r"analytics"],
            output_dir="out",
        )

        original.save_to_file(str(path))

        assert "audit" in json.loads(path.read_text())
        assert AuditConfig.from_file(str(path)) == original
