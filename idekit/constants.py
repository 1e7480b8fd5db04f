"""
Well-known locations and defaults.

URLs point at the JetBrains cache redirector wherever one exists so that
downloads are served from the closest mirror.
"""

CACHE_REDIRECTOR = "https://cache-redirector.jetbrains.com"

INTELLIJ_DEPENDENCIES = f"{CACHE_REDIRECTOR}/intellij-dependencies"
DEFAULT_INTELLIJ_REPOSITORY = f"{CACHE_REDIRECTOR}/www.jetbrains.com/intellij-repository"
DEFAULT_INTELLIJ_PLUGINS_REPOSITORY = f"{CACHE_REDIRECTOR}/plugins.jetbrains.com/maven"
DEFAULT_JBR_REPOSITORY = f"{CACHE_REDIRECTOR}/intellij-jbr"

MARKETPLACE_HOST = "https://plugins.jetbrains.com"

IDEA_PRODUCTS_RELEASES_URL = "https://www.jetbrains.com/updates/updates.xml"
ANDROID_STUDIO_PRODUCTS_RELEASES_URL = (
    "https://jb.gg/android-studio-releases-list.xml"
)
IDEA_DOWNLOAD_URL = "https://data.services.jetbrains.com/products/download"
ANDROID_STUDIO_DOWNLOAD_URL = "https://redirector.gvt1.com/edgedl/android/studio/ide-zips"

VERSION_LATEST = "latest"
DEFAULT_IDEA_VERSION = "LATEST-EAP-SNAPSHOT"
DEFAULT_PRODUCT_CODE = "IC"
ANDROID_STUDIO_TYPE = "AI"

JBR_VENDOR = "JetBrains"
MINIMAL_COMPILER_BUILD = "183.3795.13"
