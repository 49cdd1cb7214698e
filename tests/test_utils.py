"""
==============================================================================
Validator and View Cache Tests
==============================================================================
"""

import json

import pytest

from scanlist.barcodes import ViewState
from scanlist.services.view_cache import ViewStateCache
from scanlist.utils import CodeValidator


class TestCodeValidator:
    """Tests for the decoded code filter."""

    @pytest.mark.parametrize("code", ["FM1", "1234567890", "AB-12"])
    def test_valid_codes(self, code):
        """Test codes of three or more characters pass."""
        assert CodeValidator().validate(code) == (True, None)

    @pytest.mark.parametrize("code, message", [
        ("", "Code is required"),
        (None, "Code is required"),
        ("AB", "Code must be at least 3 characters"),
        ("1.50", 'Code must not contain "."'),
        ("http://x.y", 'Code must not contain "."'),
    ])
    def test_invalid_codes(self, code, message):
        """Test short and dotted codes are rejected with a reason."""
        assert CodeValidator().validate(code) == (False, message)


class TestViewStateCache:
    """Tests for the view state file."""

    def test_round_trip(self, tmp_path):
        """Test a saved state loads back."""
        cache = ViewStateCache(tmp_path / "view.json")
        cache.save(ViewState(active_tab="list", current_group="Amazon", search_term="36"))

        state = cache.load()
        assert state == ViewState(active_tab="list", current_group="Amazon", search_term="36")

    def test_file_keys(self, tmp_path):
        """Test the file uses the documented keys and omits empty ones."""
        path = tmp_path / "view.json"
        ViewStateCache(path).save(ViewState(active_tab="list"))
        assert json.loads(path.read_text()) == {"activeTab": "list"}

    def test_missing_file_gives_defaults(self, tmp_path):
        """Test a missing cache is not an error."""
        assert ViewStateCache(tmp_path / "absent.json").load() == ViewState()

    def test_corrupt_file_gives_defaults(self, tmp_path):
        """Test unreadable content falls back to defaults."""
        path = tmp_path / "view.json"
        path.write_text("{not json")
        assert ViewStateCache(path).load() == ViewState()

    def test_unknown_tab_ignored(self, tmp_path):
        """Test an unknown tab falls back to scan."""
        path = tmp_path / "view.json"
        path.write_text(json.dumps({"activeTab": "settings"}))
        assert ViewStateCache(path).load().active_tab == "scan"

    def test_disabled_cache(self):
        """Test a cache without a path does nothing."""
        cache = ViewStateCache(None)
        cache.save(ViewState(active_tab="list"))
        assert cache.load() == ViewState()
