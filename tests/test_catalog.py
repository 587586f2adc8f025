"""
Tests for the remote release catalog (nvm_upgrade/catalog.py).
"""

import pytest
from unittest.mock import MagicMock

from nvm_upgrade.catalog import (
    CatalogUnavailable,
    filter_even_lts,
    fetch_lts_listing,
    query_catalog,
)
from nvm_upgrade.command import CommandError, CommandResult
from nvm_upgrade.versions import Version


SAMPLE_LISTING = """\
        v18.19.0   (LTS: Hydrogen)
        v19.0.0
        v20.10.0   (LTS: Iron)
->      v20.11.0   (Latest LTS: Iron)
        v21.6.1
        v22.9.0    (LTS: Jod)
"""


def _runner_with_output(stdout):
    runner = MagicMock()
    runner.nvm.return_value = CommandResult(args=("nvm",), stdout=stdout, stderr="", exit_code=0)
    return runner


class TestFilterEvenLts:
    """Tests for filter_even_lts()."""

    def test_keeps_even_majors_in_order(self):
        """Test odd majors are dropped and order is preserved."""
        catalog = filter_even_lts(SAMPLE_LISTING.splitlines())
        assert catalog == (
            Version(18, 19, 0),
            Version(20, 10, 0),
            Version(20, 11, 0),
            Version(22, 9, 0),
        )

    def test_returns_tuple(self):
        """Test the catalog is immutable."""
        assert isinstance(filter_even_lts(["v20.0.0"]), tuple)

    def test_current_marker_is_skipped(self):
        """Test the '->' active marker does not hide the version."""
        assert filter_even_lts(["->     v22.1.0   (LTS: Jod)"]) == (Version(22, 1, 0),)

    def test_lines_without_marker_ignored(self):
        """Test lines without a 'v' are skipped."""
        assert filter_even_lts(["20.11.0", "", "   "]) == ()

    def test_unparsable_tokens_ignored(self):
        """Test junk lines do not raise."""
        assert filter_even_lts(["iojs-v3.3.1", "N/A", "very broken", "v20.x"]) == ()

    def test_empty_input(self):
        """Test empty listing gives empty catalog."""
        assert filter_even_lts([]) == ()

    def test_only_odd_majors(self):
        """Test a listing of odd majors gives an empty catalog."""
        assert filter_even_lts(["v19.0.0", "v21.6.1   (Current)", "v23.1.0"]) == ()

    def test_colored_listing(self):
        """Test color codes around installed and current versions are ignored."""
        lines = [
            "        v20.19.4   (LTS: Iron)",
            "\x1b[0;32m->     v20.19.5   (Latest LTS: Iron)\x1b[0m",
            "        v22.19.0   (LTS: Jod)",
            "\x1b[0;34m       v22.20.0   (Latest LTS: Jod)\x1b[0m",
        ]
        assert filter_even_lts(lines) == (
            Version(20, 19, 4),
            Version(20, 19, 5),
            Version(22, 19, 0),
            Version(22, 20, 0),
        )

    def test_all_entries_even(self):
        """Test every returned version has an even major."""
        catalog = filter_even_lts(SAMPLE_LISTING.splitlines())
        assert all(v.major % 2 == 0 for v in catalog)


class TestFetchLtsListing:
    """Tests for fetch_lts_listing()."""

    def test_fetch_runs_nvm(self):
        """Test nvm ls-remote --lts is invoked."""
        runner = _runner_with_output(SAMPLE_LISTING)
        lines = fetch_lts_listing(runner)

        runner.nvm.assert_called_once_with("ls-remote", "--lts", "--no-colors")
        assert len(lines) == 6

    def test_fetch_command_failure(self):
        """Test nvm failures become CatalogUnavailable."""
        runner = MagicMock()
        runner.nvm.side_effect = CommandError(["nvm"], 3, "network unreachable")

        with pytest.raises(CatalogUnavailable, match="network unreachable"):
            fetch_lts_listing(runner)

    def test_fetch_empty_output(self):
        """Test empty output is treated as unavailable."""
        with pytest.raises(CatalogUnavailable):
            fetch_lts_listing(_runner_with_output(""))

    def test_fetch_na_output(self):
        """Test nvm's N/A answer is treated as unavailable."""
        with pytest.raises(CatalogUnavailable):
            fetch_lts_listing(_runner_with_output("            N/A"))


class TestQueryCatalog:
    """Tests for query_catalog()."""

    def test_query_catalog(self):
        """Test listing is fetched and filtered."""
        catalog = query_catalog(_runner_with_output(SAMPLE_LISTING))
        assert Version(22, 9, 0) in catalog
        assert Version(21, 6, 1) not in catalog
