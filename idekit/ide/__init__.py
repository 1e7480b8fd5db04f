"""
IDE distributions.

- product_info: product-info.json metadata
- resolver: local, Maven and download-service IDE resolution
- releases: catalog of published IDE releases
"""

from .product_info import ProductInfo, load_product_info, read_dependencies_txt
from .resolver import IdeResolver
from .releases import (
    AndroidStudioReleaseFeed,
    Channel,
    JetBrainsReleaseFeed,
    ReleaseCatalog,
    ReleaseRecord,
)

__all__ = [
    "ProductInfo",
    "load_product_info",
    "read_dependencies_txt",
    "IdeResolver",
    "AndroidStudioReleaseFeed",
    "Channel",
    "JetBrainsReleaseFeed",
    "ReleaseCatalog",
    "ReleaseRecord",
]
