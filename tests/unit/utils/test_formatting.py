"""Unit tests for formatting helpers."""

import pytest
from heft.utils.formatting import format_age, format_bytes, format_delta


class TestFormatBytes:
    """Tests for format_bytes()."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0 B"),
            (512, "512 B"),
            (1536, "1.5 KB"),
            (5 * 1024**2, "5.0 MB"),
            (int(3.2 * 1024**3), "3.2 GB"),
            (2 * 1024**4, "2.0 TB"),
            (2048 * 1024**4, "2048.0 TB"),
        ],
    )
    def test_units(self, size: int, expected: str) -> None:
        """Sizes use binary units up to TB."""
        assert format_bytes(size) == expected


class TestFormatDelta:
    """Tests for format_delta()."""

    def test_signs(self) -> None:
        """Deltas carry an explicit sign."""
        assert format_delta(1536) == "+1.5 KB"
        assert format_delta(-200) == "-200 B"
        assert format_delta(0) == "+0 B"


class TestFormatAge:
    """Tests for format_age()."""

    NOW = 1_700_000_000

    @pytest.mark.parametrize(
        ("days", "expected"),
        [
            (0, "today"),
            (1, "1 day"),
            (45, "45 days"),
            (90, "3 months"),
            (800, "2 years"),
        ],
    )
    def test_ages(self, days: int, expected: str) -> None:
        """Ages are rounded down to a readable unit."""
        assert format_age(self.NOW - days * 86400, now=self.NOW) == expected

    def test_unknown(self) -> None:
        """A missing timestamp shows a dash."""
        assert format_age(None) == "-"

    def test_future_is_today(self) -> None:
        """Clock skew never produces negative ages."""
        assert format_age(self.NOW + 3600, now=self.NOW) == "today"
