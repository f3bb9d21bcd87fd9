"""Tests for candidate sanitization."""

import pytest

from changelog_tracker.adapters.base import ProviderConfig
from changelog_tracker.core.models import Candidate, TITLE_MAX_LENGTH
from changelog_tracker.core.sanitizer import (
    is_informative,
    normalize_text,
    resolve_url,
    sanitize,
    truncate,
)


@pytest.fixture
def provider():
    return ProviderConfig(
        id="example",
        name="Example",
        adapter="generic",
        url="https://example.com/changelog",
        base_url="https://example.com",
        description_cap=40,
        min_title_length=5,
        min_description_words=4,
    )


class TestNormalizeText:
    """Tests for normalize_text function."""

    def test_collapses_whitespace(self):
        assert normalize_text("  New \n\t feature  ") == "New feature"

    def test_none_input(self):
        assert normalize_text(None) == ""


class TestTruncate:
    """Tests for truncate function."""

    def test_short_text_untouched(self):
        assert truncate("short", 10) == "short"

    def test_long_text_cut(self):
        assert truncate("a" * 20, 10) == "a" * 10

    def test_no_trailing_space_after_cut(self):
        assert truncate("word word word", 10) == "word word"


class TestIsInformative:
    """Tests for is_informative function."""

    def test_enough_words(self):
        assert is_informative("one two three four", 4)

    def test_too_few_words(self):
        assert not is_informative("one two three", 4)


class TestResolveUrl:
    """Tests for resolve_url function."""

    def test_absolute_url_passes(self, provider):
        assert resolve_url("https://other.com/x", provider) == "https://other.com/x"

    def test_relative_url_joined(self, provider):
        assert resolve_url("/changelog/v2", provider) == "https://example.com/changelog/v2"

    def test_missing_url_is_provider_page(self, provider):
        assert resolve_url(None, provider) == "https://example.com/changelog"
        assert resolve_url("  ", provider) == "https://example.com/changelog"


class TestSanitize:
    """Tests for sanitize function."""

    def test_rejects_short_title(self, provider):
        """Test that titles under the minimum length are dropped."""
        assert sanitize(Candidate(title="Hi"), provider) is None

    def test_rejects_blank_title(self, provider):
        assert sanitize(Candidate(title="   \n "), provider) is None

    def test_fallback_description(self, provider):
        """Test that uninformative descriptions are replaced."""
        cleaned = sanitize(Candidate(title="New dashboard", description="See more"), provider)

        assert cleaned.description == "Example update"

    def test_custom_fallback_description(self, provider):
        provider.fallback_description = "Example news and updates"
        cleaned = sanitize(Candidate(title="New dashboard"), provider)

        assert cleaned.description == "Example news and updates"

    def test_description_capped(self, provider):
        """Test that descriptions are cut to the provider cap."""
        description = "This release brings a lot of improvements " * 5
        cleaned = sanitize(Candidate(title="Big release", description=description), provider)

        assert len(cleaned.description) <= 40

    def test_title_capped(self, provider):
        cleaned = sanitize(Candidate(title="T" * 300), provider)

        assert len(cleaned.title) == TITLE_MAX_LENGTH

    def test_url_resolved(self, provider):
        cleaned = sanitize(Candidate(title="New dashboard", url="/releases/1"), provider)

        assert cleaned.url == "https://example.com/releases/1"

    def test_date_untouched(self, provider):
        """Test that raw dates are left for the date normalizer."""
        cleaned = sanitize(Candidate(title="New dashboard", date="Jan 5"), provider)

        assert cleaned.date == "Jan 5"

    def test_input_not_modified(self, provider):
        candidate = Candidate(title="  New   dashboard ", description="x")
        sanitize(candidate, provider)

        assert candidate.title == "  New   dashboard "

    def test_default_rejects_five_character_titles(self):
        """Test that titles must be longer than five characters by default."""
        config = ProviderConfig(
            id="example",
            name="Example",
            adapter="generic",
            url="https://example.com/changelog",
            base_url="https://example.com",
        )

        assert sanitize(Candidate(title="Fixes"), config) is None
        assert sanitize(Candidate(title="Fixes!"), config) is not None
