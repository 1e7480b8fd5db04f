"""
Java runtime resolution.

- artifact: canonical JetBrains Runtime artifact names
- chain: ordered fallback strategies
- toolchains: installed JDK discovery
- resolver: the runtime resolution chain
"""

from .artifact import JbrArtifact, jbr_arch
from .chain import Outcome, Strategy, StrategyResult, first_success
from .toolchains import (
    JavaInstallation,
    LocalToolchainService,
    ToolchainService,
    ToolchainSpec,
)
from .resolver import (
    Jbr,
    RuntimeOptions,
    RuntimeResolver,
    find_java_executable,
    jbr_root,
)

__all__ = [
    "JbrArtifact",
    "jbr_arch",
    "Outcome",
    "Strategy",
    "StrategyResult",
    "first_success",
    "JavaInstallation",
    "LocalToolchainService",
    "ToolchainService",
    "ToolchainSpec",
    "Jbr",
    "RuntimeOptions",
    "RuntimeResolver",
    "find_java_executable",
    "jbr_root",
]
