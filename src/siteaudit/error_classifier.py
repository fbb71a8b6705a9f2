"""Benign/critical classification of page and console error messages."""

import re
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple, Union

from siteaudit.constants import (
    CATEGORY_BENIGN,
    CATEGORY_CRITICAL,
    DEFAULT_BENIGN_CONSOLE_PATTERNS,
    DEFAULT_BENIGN_PAGE_ERROR_PATTERNS,
)

Rule = Tuple[str, str]


class ErrorClassifier:
    """Classifies error messages with an ordered list of (category, regex) rules.

    Rules are evaluated in order and the first match wins. Messages that match
    no rule fall into the default category ("critical").
    """

    def __init__(
        self,
        rules: Sequence[Union[Rule, str]],
        default_category: str = CATEGORY_CRITICAL,
    ):
        """Initialize classifier.

        Args:
            rules: (category, pattern) pairs, or bare patterns which are
                treated as benign
            default_category: Category for messages no rule matches
        """
        self.default_category = default_category
        self._compiled_rules: List[Tuple[str, Pattern]] = []
        for rule in rules:
            if isinstance(rule, str):
                category, pattern = CATEGORY_BENIGN, rule
            else:
                category, pattern = rule
            self._compiled_rules.append((category, re.compile(pattern)))

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> "ErrorClassifier":
        """Build a classifier where every pattern marks a message benign."""
        return cls([(CATEGORY_BENIGN, pattern) for pattern in patterns])

    @classmethod
    def for_page_errors(cls, patterns: Optional[Iterable[str]] = None) -> "ErrorClassifier":
        return cls.from_patterns(
            DEFAULT_BENIGN_PAGE_ERROR_PATTERNS if patterns is None else patterns
        )

    @classmethod
    def for_console(cls, patterns: Optional[Iterable[str]] = None) -> "ErrorClassifier":
        return cls.from_patterns(
            DEFAULT_BENIGN_CONSOLE_PATTERNS if patterns is None else patterns
        )

    def classify(self, message: str) -> str:
        """Return the category of the first rule matching the message."""
        for category, pattern in self._compiled_rules:
            if pattern.search(message):
                return category
        return self.default_category

    def is_benign(self, message: str) -> bool:
        return self.classify(message) == CATEGORY_BENIGN
