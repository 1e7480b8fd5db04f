"""
Product-qualified IDE versions such as ``IC-2021.3.2`` or ``PS-213.6777.52``.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

from idekit.constants import ANDROID_STUDIO_TYPE, DEFAULT_PRODUCT_CODE
from idekit.core.exceptions import ParseError

BUILD_NUMBER_PATTERN = re.compile(r"^\d{3}(\.\d+)+$")


@dataclass(frozen=True)
class IdeType:
    """
    IDE product known to the resolvers.

    Attributes:
        code: Product code used in version strings
        name: Human readable name
        maven_group: Group of the distribution in the IntelliJ repository
        maven_artifact: Artifact name of the distribution, or None when the
            product is not published there
        compiler_prefix: Prefix of java-compiler-ant-tasks versions built for
            this product
    """

    code: str
    name: str
    maven_group: Optional[str] = None
    maven_artifact: Optional[str] = None
    compiler_prefix: str = ""


IDE_TYPES: Dict[str, IdeType] = {
    t.code: t
    for t in (
        IdeType("IC", "IntelliJ IDEA Community", "com.jetbrains.intellij.idea", "ideaIC"),
        IdeType("IU", "IntelliJ IDEA Ultimate", "com.jetbrains.intellij.idea", "ideaIU"),
        IdeType("CL", "CLion", "com.jetbrains.intellij.clion", "clion", "CLION-"),
        IdeType("PY", "PyCharm Professional", "com.jetbrains.intellij.pycharm", "pycharmPY", "PYCHARM-"),
        IdeType("PC", "PyCharm Community", "com.jetbrains.intellij.pycharm", "pycharmPC"),
        IdeType("PS", "PhpStorm", "com.jetbrains.intellij.phpstorm", "phpstorm", "PHPSTORM-"),
        IdeType("RD", "Rider", "com.jetbrains.intellij.rider", "riderRD", "RIDER-"),
        IdeType("GO", "GoLand", "com.jetbrains.intellij.goland", "goland"),
        IdeType("GW", "Gateway", "com.jetbrains.gateway", "JetBrainsGateway"),
        IdeType(ANDROID_STUDIO_TYPE, "Android Studio"),
    )
}


def get_ide_type(code: str) -> IdeType:
    """
    Look up an IDE type by product code.

    Raises:
        ParseError: If the code is unknown
    """
    try:
        return IDE_TYPES[code.upper()]
    except KeyError:
        raise ParseError(code, f"unknown IDE type, expected one of {sorted(IDE_TYPES)}")


@dataclass(frozen=True)
class IdeVersion:
    """IDE type code plus a version or build number."""

    type: str
    version: str

    @classmethod
    def parse(cls, value: str, default_type: str = DEFAULT_PRODUCT_CODE) -> "IdeVersion":
        """
        Parse ``[TYPE-]version``.

        Only the first '-' separates the type, so suffixes such as
        ``-EAP-SNAPSHOT`` stay in the version.

        Example:
            >>> IdeVersion.parse("IC-2021.3.2")
            IdeVersion(type='IC', version='2021.3.2')
            >>> IdeVersion.parse("2021.3.2").type
            'IC'
        """
        if not value or not value.strip():
            raise ParseError(value or "", "empty IDE version")

        head, sep, tail = value.strip().partition("-")
        if sep and head.isalpha() and head.upper() in IDE_TYPES:
            return cls(type=head.upper(), version=tail)
        return cls(type=default_type, version=value.strip())

    @property
    def ide_type(self) -> IdeType:
        return get_ide_type(self.type)

    @property
    def is_build_number(self) -> bool:
        """True when the version is a build number like 213.6777.52."""
        return bool(BUILD_NUMBER_PATTERN.match(self.version))

    def __str__(self) -> str:
        return f"{self.type}-{self.version}"


__all__ = [
    "BUILD_NUMBER_PATTERN",
    "IdeType",
    "IDE_TYPES",
    "get_ide_type",
    "IdeVersion",
]
