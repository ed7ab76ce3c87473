"""Tests for netvisio/discovery/oui.py"""

from unittest.mock import Mock, patch

import requests

from netvisio.discovery.oui import OUI_URL, _abbreviate_vendor, load_oui_db, lookup_vendor

OUI_TEXT = (
    "AA-BB-CC   (hex)\t\tNETGEAR\n"
    "AABBCC     (base 16)\t\tNETGEAR\n"
    "11-22-33   (hex)\t\tAnotherVendor\n"
    "Random line without hex\n"
)


class TestAbbreviateVendor:
    """Tests for _abbreviate_vendor function."""

    def test_abbreviates_known_vendor(self):
        """Test abbreviation of known vendor."""
        assert _abbreviate_vendor("NETGEAR") == "Netgear"

    def test_returns_unknown_vendor_as_is(self):
        """Test unknown vendor is returned unchanged."""
        assert _abbreviate_vendor("Unknown Vendor Corp") == "Unknown Vendor Corp"


class TestLookupVendor:
    """Tests for lookup_vendor function."""

    def test_lookup_vendor_with_matching_prefix(self):
        """Test lookup with matching OUI prefix."""
        oui_db = {"AA:BB:CC": "TestVendor"}
        assert lookup_vendor("aa:bb:cc:dd:ee:ff", oui_db) == "TestVendor"

    def test_lookup_vendor_dash_notation(self):
        """Windows-style MACs resolve the same way."""
        oui_db = {"AA:BB:CC": "Dell Inc."}
        assert lookup_vendor("aa-bb-cc-dd-ee-ff", oui_db) == "Dell"

    def test_lookup_vendor_missing_prefix_returns_empty(self):
        """Test missing prefix returns empty string."""
        oui_db = {"AA:BB:CC": "TestVendor"}
        assert lookup_vendor("11:22:33:44:55:66", oui_db) == ""


class TestLoadOuiDb:
    """Tests for load_oui_db function."""

    def test_cache_exists_reads_and_parses_file(self, tmp_path):
        """Test loading OUI database from cache file."""
        cache = tmp_path / "oui.txt"
        cache.write_text(OUI_TEXT)

        with patch("netvisio.discovery.oui.requests.get") as mock_get:
            result = load_oui_db(cache)

        mock_get.assert_not_called()
        assert result == {"AA:BB:CC": "NETGEAR", "11:22:33": "AnotherVendor"}

    @patch("netvisio.discovery.oui.requests.get")
    def test_cache_missing_downloads_and_parses(self, mock_get, tmp_path):
        """Test downloading and parsing OUI database when cache missing."""
        mock_get.return_value = Mock(content=b"AA-BB-CC   (hex)\t\tTestVendor\n")
        cache = tmp_path / "oui.txt"

        result = load_oui_db(cache)

        mock_get.assert_called_once()
        assert mock_get.call_args.args[0] == OUI_URL
        assert cache.exists()
        assert result == {"AA:BB:CC": "TestVendor"}

    @patch("netvisio.discovery.oui.requests.get")
    def test_http_error_returns_empty_dict(self, mock_get, tmp_path):
        """Test HTTP failure returns empty dictionary."""
        mock_get.return_value.raise_for_status.side_effect = requests.HTTPError("503")

        assert load_oui_db(tmp_path / "oui.txt") == {}

    @patch("netvisio.discovery.oui.requests.get")
    def test_timeout_returns_empty_dict(self, mock_get, tmp_path):
        """Test timeout during download returns empty dictionary."""
        mock_get.side_effect = requests.Timeout()

        assert load_oui_db(tmp_path / "oui.txt") == {}
