"""
Unit tests for product-info.json reading.
"""

import json

import pytest

from idekit.core.exceptions import NotFoundError
from idekit.ide.product_info import (
    ProductInfo,
    find_product_info,
    load_product_info,
    read_dependencies_txt,
)


class TestProductInfo:
    """Test ProductInfo."""

    def test_load(self, fake_ide):
        """Test loading product info from an IDE directory."""
        info = load_product_info(fake_ide)

        assert info.name == "IntelliJ IDEA"
        assert info.version == "2021.3.2"
        assert info.build_number == "213.6777.52"
        assert info.product_code == "IC"
        assert "org.intellij.plugins.markdown" in info.bundled_plugins
        assert info.version_suffix is None

    def test_full_build_number(self):
        """Test the product code qualifies the build number."""
        assert ProductInfo(build_number="213.1", product_code="IU").full_build_number == "IU-213.1"
        assert ProductInfo(build_number="213.1").full_build_number == "213.1"
        assert ProductInfo().full_build_number is None

    def test_from_dict_eap(self):
        """Test versionSuffix is read."""
        info = ProductInfo.from_dict({"buildNumber": "221.4", "versionSuffix": "EAP"})
        assert info.version_suffix == "EAP"
        assert info.bundled_plugins == []

    def test_macos_resources(self, temp_dir):
        """Test product-info.json under Resources/ is found."""
        resources = temp_dir / "Contents" / "Resources"
        resources.mkdir(parents=True)
        (resources / "product-info.json").write_text(json.dumps({"buildNumber": "213.1"}))

        assert find_product_info(temp_dir / "Contents") == resources / "product-info.json"
        assert load_product_info(temp_dir / "Contents").build_number == "213.1"

    def test_file_path(self, fake_ide):
        """Test the file itself can be given."""
        path = fake_ide / "product-info.json"
        assert find_product_info(path) == path

    def test_missing(self, temp_dir):
        """Test NotFoundError when there is no product-info.json."""
        with pytest.raises(NotFoundError):
            load_product_info(temp_dir)

    def test_dependencies_txt(self, fake_ide):
        """Test reading dependencies.txt."""
        assert read_dependencies_txt(fake_ide)["runtimeBuild"] == "17.0.2b469.1"
