"""
Tests for version parsing and rendering (nvm_upgrade/versions.py).
"""

import pytest

from nvm_upgrade.versions import (
    Version,
    InvalidFormat,
    is_valid_version,
    parse_version,
    render_version,
    extract_from_filename,
    compare_major,
)


class TestVersion:
    """Tests for the Version dataclass."""

    def test_version_creation(self):
        """Test Version object creation."""
        v = Version(20, 11, 0)
        assert v.major == 20
        assert v.minor == 11
        assert v.patch == 0

    def test_version_str_has_marker(self):
        """Test str() renders with the leading v."""
        assert str(Version(18, 16, 0)) == "v18.16.0"

    def test_version_immutable(self):
        """Test Version is frozen."""
        v = Version(20, 0, 0)
        with pytest.raises(AttributeError):
            v.major = 22

    def test_version_rejects_negative(self):
        """Test negative components are rejected."""
        with pytest.raises(ValueError, match="non-negative"):
            Version(-1, 0, 0)

    def test_version_ordering(self):
        """Test versions order by numeric components."""
        assert Version(20, 1, 0) < Version(20, 10, 0)
        assert Version(18, 99, 99) < Version(20, 0, 0)
        assert max([Version(22, 2, 0), Version(22, 11, 1), Version(22, 9, 0)]) == Version(22, 11, 1)

    def test_is_even_major(self):
        """Test even major detection."""
        assert Version(20, 0, 0).is_even_major is True
        assert Version(21, 0, 0).is_even_major is False


class TestParseVersion:
    """Tests for parse_version()."""

    @pytest.mark.parametrize("text", ["v20.11.0", "20.11.0", "V20.11.0"])
    def test_parse_accepted_forms(self, text):
        """Test the marker is optional and case-insensitive."""
        assert parse_version(text) == Version(20, 11, 0)

    def test_parse_strips_whitespace_and_quotes(self):
        """Test surrounding whitespace and quotes are trimmed."""
        assert parse_version("  'v18.16.0'\n") == Version(18, 16, 0)
        assert parse_version('"22.9.0"') == Version(22, 9, 0)

    def test_marker_does_not_affect_equality(self):
        """Test v-prefixed and bare versions are equal."""
        assert parse_version("v20.1.0") == parse_version("20.1.0")

    def test_parse_large_components(self):
        """Test multi-digit components."""
        assert parse_version("v100.200.300") == Version(100, 200, 300)

    @pytest.mark.parametrize("text", [
        "",
        "20",
        "20.11",
        "v20.11.0.1",
        "vv20.11.0",
        "20.11.x",
        "lts/iron",
        "node v20.11.0",
        "v20.11.0-rc.1",
    ])
    def test_parse_invalid(self, text):
        """Test malformed text raises InvalidFormat."""
        with pytest.raises(InvalidFormat):
            parse_version(text)

    def test_invalid_format_is_value_error(self):
        """Test InvalidFormat can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_version("abc")

    def test_invalid_format_keeps_text(self):
        """Test the offending text is kept on the exception."""
        with pytest.raises(InvalidFormat) as exc_info:
            parse_version("1.2")
        assert exc_info.value.text == "1.2"

    def test_is_valid_version(self):
        """Test the boolean validity check."""
        assert is_valid_version("v20.11.0")
        assert is_valid_version(" 20.11.0 ")
        assert not is_valid_version("20.11")


class TestRenderVersion:
    """Tests for render_version()."""

    def test_render(self):
        """Test rendering adds the marker."""
        assert render_version(Version(22, 9, 0)) == "v22.9.0"

    def test_render_parse_identity(self):
        """Test rendering a parsed version gives the canonical form."""
        assert render_version(parse_version("18.0.1")) == "v18.0.1"


class TestExtractFromFilename:
    """Tests for extract_from_filename()."""

    def test_extract_linux_archive(self):
        """Test version is found in an official archive name."""
        assert extract_from_filename("node-v18.16.0-linux-x64.tar.xz") == Version(18, 16, 0)

    def test_extract_pkg(self):
        """Test version is found in a macOS installer name."""
        assert extract_from_filename("node-v20.11.0.pkg") == Version(20, 11, 0)

    def test_extract_without_marker(self):
        """Test bare versions in file names."""
        assert extract_from_filename("node-22.9.0.tar.gz") == Version(22, 9, 0)

    def test_extract_first_match(self):
        """Test the first embedded version wins."""
        assert extract_from_filename("node-v20.1.0-from-v18.0.0.tar.gz") == Version(20, 1, 0)

    def test_extract_none(self):
        """Test names without a version."""
        assert extract_from_filename("node-latest.tar.xz") is None
        assert extract_from_filename("archive.zip") is None
        assert extract_from_filename("") is None


class TestCompareMajor:
    """Tests for compare_major()."""

    def test_compare_major(self):
        """Test only major components are compared."""
        assert compare_major(Version(18, 9, 9), Version(20, 0, 0)) == -1
        assert compare_major(Version(22, 0, 0), Version(20, 9, 9)) == 1
        assert compare_major(Version(20, 0, 0), Version(20, 11, 1)) == 0
