"""Tests for benign/critical error classification."""

from siteaudit.constants import CATEGORY_BENIGN, CATEGORY_CRITICAL
from siteaudit.error_classifier import ErrorClassifier


class TestErrorClassifier:
    """Test cases for ErrorClassifier."""

    def test_unmatched_is_critical(self):
        classifier = ErrorClassifier.from_patterns([r"is not defined"])
        assert classifier.classify("TypeError: cannot read x") == CATEGORY_CRITICAL

    def test_bare_patterns_are_benign(self):
        classifier = ErrorClassifier([r"Script error\."])
        assert classifier.classify("Script error.") == CATEGORY_BENIGN
        assert classifier.is_benign("Script error.")

    def test_first_match_wins(self):
        """Rules are evaluated in order."""
        classifier = ErrorClassifier([
            (CATEGORY_CRITICAL, r"payment"),
            (CATEGORY_BENIGN, r"is not defined"),
        ])
        assert classifier.classify("paymentWidget is not defined") == CATEGORY_CRITICAL
        assert classifier.classify("ga is not defined") == CATEGORY_BENIGN

    def test_custom_default_category(self):
        classifier = ErrorClassifier([], default_category=CATEGORY_BENIGN)
        assert classifier.classify("anything") == CATEGORY_BENIGN

    def test_default_page_error_patterns(self):
        classifier = ErrorClassifier.for_page_errors()
        assert classifier.is_benign("ReferenceError: jQuery is not defined")
        assert classifier.is_benign("Syntax error, unrecognized expression: a[href=#]")
        assert not classifier.is_benign("TypeError: checkout.submit is not a function")

    def test_default_console_patterns(self):
        classifier = ErrorClassifier.for_console()
        assert classifier.is_benign(
            "Failed to load resource: the server responded with a status of 404 ()"
        )
        assert classifier.is_benign(
            "Blocked a frame with origin \"https://x.com\" from accessing a cross-origin frame."
        )
        assert not classifier.is_benign("Uncaught (in promise) Error: boom")

    def test_overridden_patterns(self):
        """An explicit pattern list replaces the defaults."""
        classifier = ErrorClassifier.for_console([r"analytics"])
        assert classifier.is_benign("analytics blocked")
        assert not classifier.is_benign("Failed to load resource")
