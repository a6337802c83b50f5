"""Error matchers for converting foreign exceptions to TemplateErrors."""

import json
import re

from .errors import ErrorMatcher, MatchResult


class RegexErrorMatcher(ErrorMatcher):
    """Matches invalid regular expression errors."""

    def matches(self, error: Exception) -> bool:
        """Check if error is a regex compilation error.

        Args:
            error: Exception to check

        Returns:
            True if error came from the re module
        """
        return isinstance(error, re.error)

    def extract(self, error: Exception) -> MatchResult:
        """Extract regex error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with REGEX_ERROR code
        """
        return MatchResult(
            code="REGEX_ERROR",
            context={"detail": str(error), "source_type": "re.error"},
        )


class JsonErrorMatcher(ErrorMatcher):
    """Matches JSON decoding errors."""

    def matches(self, error: Exception) -> bool:
        """Check if error is a JSON decoding error.

        Args:
            error: Exception to check

        Returns:
            True if error is a JSONDecodeError
        """
        return isinstance(error, json.JSONDecodeError)

    def extract(self, error: Exception) -> MatchResult:
        """Extract JSON error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with JSON_ERROR code
        """
        return MatchResult(
            code="JSON_ERROR",
            context={"detail": str(error), "source_type": "json.JSONDecodeError"},
        )


class IOErrorMatcher(ErrorMatcher):
    """Matches operating system and file errors."""

    def matches(self, error: Exception) -> bool:
        """Check if error is an OSError.

        Args:
            error: Exception to check

        Returns:
            True if error is an OSError
        """
        return isinstance(error, OSError)

    def extract(self, error: Exception) -> MatchResult:
        """Extract I/O error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with IO_ERROR code
        """
        return MatchResult(
            code="IO_ERROR",
            context={"detail": str(error), "source_type": type(error).__name__},
        )


class GenericErrorMatcher(ErrorMatcher):
    """Fallback matcher for any exception raised inside a template function."""

    def matches(self, error: Exception) -> bool:
        """Always matches.

        Args:
            error: Exception to check

        Returns:
            Always True (fallback matcher)
        """
        return True

    def extract(self, error: Exception) -> MatchResult:
        """Extract generic error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with FUNCTION_ERROR code
        """
        return MatchResult(
            code="FUNCTION_ERROR",
            context={"detail": str(error) or type(error).__name__},
        )


class ErrorMatcherChain:
    """Ordered chain of matchers. First match wins."""

    def __init__(self) -> None:
        """Initialize matcher chain with built-in matchers."""
        self.matchers: list[ErrorMatcher] = []
        self._load_builtin_matchers()

    def match(self, error: Exception) -> MatchResult:
        """Find first matching matcher and extract result.

        Args:
            error: Exception to match

        Returns:
            MatchResult from first matching matcher
        """
        for matcher in self.matchers:
            if matcher.matches(error):
                return matcher.extract(error)

        # Should never reach here due to GenericErrorMatcher
        return MatchResult(code="FUNCTION_ERROR", context={"detail": str(error)})

    def _load_builtin_matchers(self) -> None:
        """Load built-in matchers in priority order."""
        # Order matters - JSONDecodeError is a ValueError, OSError subclasses are many
        self.matchers = [
            RegexErrorMatcher(),
            JsonErrorMatcher(),
            IOErrorMatcher(),
            GenericErrorMatcher(),  # Fallback - must be last
        ]
