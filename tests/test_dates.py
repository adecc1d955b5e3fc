"""
Tests for front matter date parsing.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from mdsync.core.errors import ConfigurationError, InvalidDocument
from mdsync.core.sync.dates import get_timezone, parse_date

PARIS = ZoneInfo("Europe/Paris")


class TestParseDate:
    """Test local/UTC date pairs."""

    def test_naive_string_in_zone(self):
        """Values without an offset are read in the configured zone."""
        assert parse_date("2024-03-01 09:30", PARIS) == ("2024-03-01 09:30:00", "2024-03-01 08:30:00")

    def test_utc_suffix(self):
        """A trailing UTC marks the value as UTC."""
        assert parse_date("2024-07-01 10:00:00 UTC", PARIS) == (
            "2024-07-01 12:00:00",
            "2024-07-01 10:00:00",
        )

    def test_z_suffix(self):
        """ISO 'Z' suffixes are accepted."""
        assert parse_date("2024-07-01T10:00:00Z", timezone.utc)[1] == "2024-07-01 10:00:00"

    def test_explicit_offset(self):
        """Explicit offsets are honored."""
        local, utc = parse_date("2024-01-01T12:00:00+02:00", timezone.utc)
        assert (local, utc) == ("2024-01-01 10:00:00", "2024-01-01 10:00:00")

    def test_date_object(self):
        """YAML dates are midnight local time."""
        assert parse_date(date(2024, 1, 2), timezone.utc) == (
            "2024-01-02 00:00:00",
            "2024-01-02 00:00:00",
        )

    def test_datetime_object(self):
        """YAML timestamps are accepted as-is."""
        value = datetime(2024, 1, 2, 3, 4, 5)
        assert parse_date(value, PARIS)[1] == "2024-01-02 02:04:05"

    def test_invalid(self):
        """Unparseable values make the document invalid."""
        with pytest.raises(InvalidDocument, match="invalid date"):
            parse_date("next tuesday", timezone.utc)


class TestGetTimezone:
    """Test zone lookup."""

    def test_known(self):
        assert get_timezone("Europe/Paris") == PARIS

    def test_blank_means_system_zone(self):
        assert get_timezone(None) is None
        assert get_timezone("") is None

    def test_unknown(self):
        """An unknown zone name is a configuration error."""
        with pytest.raises(ConfigurationError, match="Unknown timezone"):
            get_timezone("Mars/Olympus")
