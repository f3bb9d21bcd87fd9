"""Tests for deduplicator functionality."""

from changelog_tracker.core.deduplicator import (
    DedupPolicy,
    HistoryIndex,
    dedup_key,
    exists,
    normalize_title_key,
)
from changelog_tracker.core.models import Candidate, Update


def make_update(title="Matomo 5.1 Release", date="2025-10-28", url="https://matomo.org/changelog/matomo-5-1/"):
    return Update(title=title, description="New version 5.1 of Matomo has been released", date=date, url=url)


class TestNormalizeTitleKey:
    """Tests for normalize_title_key function."""

    def test_case_insensitive(self):
        assert normalize_title_key("Matomo 5.1 RELEASE") == normalize_title_key("matomo 5.1 release")

    def test_whitespace_insensitive(self):
        assert normalize_title_key("  Matomo  5.1\nRelease ") == "matomo 5.1 release"


class TestDedupKey:
    """Tests for dedup_key function."""

    def test_title_and_date(self):
        assert dedup_key(make_update(), DedupPolicy.TITLE_AND_DATE) == ("matomo 5.1 release", "2025-10-28")

    def test_title_only(self):
        assert dedup_key(make_update(), DedupPolicy.TITLE) == "matomo 5.1 release"

    def test_url_and_description_ignored(self):
        a = make_update(url="https://a.example")
        b = Update(title="Matomo 5.1 Release", description="other", date="2025-10-28", url="https://b.example")

        assert dedup_key(a, DedupPolicy.TITLE_AND_DATE) == dedup_key(b, DedupPolicy.TITLE_AND_DATE)


class TestExists:
    """Tests for exists function."""

    def test_same_title_and_date(self):
        """Test that an identical release is found."""
        history = [make_update()]

        assert exists(history, make_update())

    def test_case_differences_match(self):
        history = [make_update()]

        assert exists(history, make_update(title="matomo 5.1 release"))

    def test_different_date_is_new_under_default_policy(self):
        history = [make_update()]

        assert not exists(history, make_update(date="2025-10-29"))

    def test_different_date_matches_under_title_policy(self):
        history = [make_update()]

        assert exists(history, make_update(date="2025-10-29"), DedupPolicy.TITLE)

    def test_empty_history(self):
        assert not exists([], make_update())

    def test_candidate_lookup(self):
        """Test that candidates with normalized dates can be looked up."""
        history = [make_update()]
        candidate = Candidate(title="Matomo 5.1 Release", date="2025-10-28")

        assert exists(history, candidate)


class TestHistoryIndex:
    """Tests for HistoryIndex class."""

    def test_agrees_with_exists(self):
        history = [make_update(), make_update(title="Matomo 5.0 Release", date="2025-06-01")]
        index = HistoryIndex(history)

        for record in [make_update(), make_update(date="2020-01-01"), make_update(title="Other thing")]:
            assert (record in index) == exists(history, record)

    def test_add(self):
        index = HistoryIndex([])
        index.add(make_update())

        assert make_update() in index
        assert len(index) == 1

    def test_policy(self):
        index = HistoryIndex([make_update()], DedupPolicy.TITLE)

        assert make_update(date="1999-01-01") in index
