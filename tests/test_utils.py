"""
tests/test_utils.py — Unit tests for utils.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime, timedelta, timezone

import pytest
from utils.utils import (
    days_since,
    ensure_utc,
    normalize_username,
    parse_github_date,
    validate_github_username,
)


class TestNormalizeUsername:
    def test_trims_and_case_folds(self):
        assert normalize_username("  Octocat \n") == "octocat"

    def test_variants_share_a_key(self):
        assert normalize_username("OCTOCAT") == normalize_username(" octocat")

    def test_already_normal(self):
        assert normalize_username("torvalds") == "torvalds"


class TestValidateUsername:
    @pytest.mark.parametrize("name", ["octocat", "a", "my-user-1", "x" * 39])
    def test_valid(self, name):
        assert validate_github_username(name) == (True, "")

    def test_empty(self):
        is_valid, msg = validate_github_username("   ")
        assert not is_valid
        assert "empty" in msg

    @pytest.mark.parametrize("name", ["bad name", "user!", "x" * 40, "a_b"])
    def test_invalid_characters_or_length(self, name):
        is_valid, _ = validate_github_username(name)
        assert not is_valid

    @pytest.mark.parametrize("name", ["-octocat", "octocat-"])
    def test_hyphen_edges(self, name):
        is_valid, msg = validate_github_username(name)
        assert not is_valid
        assert "hyphen" in msg


class TestDates:
    def test_ensure_utc_naive(self):
        naive = datetime(2026, 1, 15, 12, 0, 0)
        assert ensure_utc(naive).tzinfo == timezone.utc
        assert ensure_utc(naive).hour == 12

    def test_ensure_utc_converts_offset(self):
        plus_two = datetime(2026, 1, 15, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert ensure_utc(plus_two) == datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def test_parse_github_date(self):
        dt = parse_github_date("2026-02-10T12:00:00Z")
        assert dt == datetime(2026, 2, 10, 12, 0, 0, tzinfo=timezone.utc)

    def test_parse_bad_or_missing_date(self):
        assert parse_github_date(None) is None
        assert parse_github_date("not a date") is None

    def test_days_since(self):
        ten_days_ago = (datetime.now(timezone.utc) - timedelta(days=10)).isoformat()
        assert 9.9 < days_since(ten_days_ago) < 10.1
        assert days_since(None) == 0.0
