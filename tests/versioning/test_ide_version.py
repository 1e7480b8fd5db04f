"""
Unit tests for product-qualified IDE versions.
"""

import pytest

from idekit.core.exceptions import ParseError
from idekit.versioning.ide_version import IDE_TYPES, IdeVersion, get_ide_type


class TestIdeVersion:
    """Test IdeVersion parsing."""

    def test_typed(self):
        """Test a type prefix is recognized."""
        assert IdeVersion.parse("IU-2021.3.2") == IdeVersion("IU", "2021.3.2")

    def test_lower_case_type(self):
        """Test type prefixes are case-insensitive."""
        assert IdeVersion.parse("ps-213.6777.52").type == "PS"

    def test_default_type(self):
        """Test versions without a type default to IC."""
        assert IdeVersion.parse("2021.3.2") == IdeVersion("IC", "2021.3.2")

    def test_suffix_stays_in_version(self):
        """Test only the first '-' separates the type."""
        assert IdeVersion.parse("IC-213.5744-EAP-SNAPSHOT").version == "213.5744-EAP-SNAPSHOT"

    def test_unknown_prefix_kept(self):
        """Test an unknown prefix is part of the version."""
        assert IdeVersion.parse("LATEST-EAP-SNAPSHOT") == IdeVersion("IC", "LATEST-EAP-SNAPSHOT")

    def test_empty(self):
        """Test an empty version raises ParseError."""
        with pytest.raises(ParseError):
            IdeVersion.parse("  ")

    def test_is_build_number(self):
        """Test build number detection."""
        assert IdeVersion.parse("213.6777.52").is_build_number
        assert not IdeVersion.parse("2021.3.2").is_build_number

    def test_str(self):
        """Test string form."""
        assert str(IdeVersion.parse("2021.3.2")) == "IC-2021.3.2"


class TestIdeTypes:
    """Test the IDE type table."""

    def test_get_ide_type(self):
        """Test lookup by code."""
        assert get_ide_type("ic").maven_artifact == "ideaIC"

    def test_unknown(self):
        """Test unknown codes raise ParseError."""
        with pytest.raises(ParseError, match="unknown IDE type"):
            get_ide_type("XX")

    def test_android_studio_not_on_maven(self):
        """Test Android Studio has no Maven artifact."""
        assert IDE_TYPES["AI"].maven_artifact is None
