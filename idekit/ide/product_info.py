"""
product-info.json metadata of an IDE installation.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from idekit.core.exceptions import NotFoundError
from idekit.core.properties import load_properties

logger = logging.getLogger(__name__)

PRODUCT_INFO_FILE = "product-info.json"


@dataclass
class ProductInfo:
    """
    Product metadata shipped with an IDE.

    Attributes:
        name: Product name, e.g. 'IntelliJ IDEA'
        version: Marketing version, e.g. '2021.3.2'
        version_suffix: 'EAP' for EAP builds, otherwise None
        build_number: Build number without product code, e.g. '213.6777.52'
        product_code: Product code, e.g. 'IC'
        bundled_plugins: Ids of plugins bundled with the IDE
        modules: Module ids the IDE provides
    """

    name: Optional[str] = None
    version: Optional[str] = None
    version_suffix: Optional[str] = None
    build_number: Optional[str] = None
    product_code: Optional[str] = None
    bundled_plugins: List[str] = field(default_factory=list)
    modules: List[str] = field(default_factory=list)

    @property
    def full_build_number(self) -> Optional[str]:
        """Build number qualified with the product code ('IC-213.6777.52')."""
        if not self.build_number:
            return None
        if self.product_code:
            return f"{self.product_code}-{self.build_number}"
        return self.build_number

    @classmethod
    def from_dict(cls, data: Dict) -> "ProductInfo":
        return cls(
            name=data.get("name"),
            version=data.get("version"),
            version_suffix=data.get("versionSuffix"),
            build_number=data.get("buildNumber"),
            product_code=data.get("productCode"),
            bundled_plugins=list(data.get("bundledPlugins") or []),
            modules=list(data.get("modules") or []),
        )


def find_product_info(path: Union[str, Path]) -> Optional[Path]:
    """
    Locate product-info.json for an IDE.

    Looks at the path itself, then ``path/product-info.json``, then
    ``path/Resources/product-info.json`` (macOS bundles).
    """
    path = Path(path)
    if path.is_file() and path.name == PRODUCT_INFO_FILE:
        return path
    for candidate in (path / PRODUCT_INFO_FILE, path / "Resources" / PRODUCT_INFO_FILE):
        if candidate.is_file():
            return candidate
    return None


def load_product_info(path: Union[str, Path]) -> ProductInfo:
    """
    Load product-info.json of an IDE.

    Args:
        path: IDE directory or the product-info.json file itself

    Raises:
        NotFoundError: If no product-info.json exists
        json.JSONDecodeError: If the file is not valid JSON
    """
    info_file = find_product_info(path)
    if info_file is None:
        raise NotFoundError(f"{PRODUCT_INFO_FILE} not found in {path}")

    logger.debug(f"Reading product info from {info_file}")
    with open(info_file, "r", encoding="utf-8") as f:
        return ProductInfo.from_dict(json.load(f))


def read_dependencies_txt(ide_dir: Union[str, Path]) -> Dict[str, str]:
    """Properties from the IDE's dependencies.txt (empty if absent)."""
    return load_properties(Path(ide_dir) / "dependencies.txt")


__all__ = [
    "PRODUCT_INFO_FILE",
    "ProductInfo",
    "find_product_info",
    "load_product_info",
    "read_dependencies_txt",
]
