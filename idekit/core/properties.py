"""Reader for Java-style ``key=value`` properties files."""

import logging
from pathlib import Path
from typing import Dict, Union

logger = logging.getLogger(__name__)


def parse_properties(text: str) -> Dict[str, str]:
    """
    Parse properties text.

    Lines starting with '#' or '!' are comments. Keys and values are split on
    the first '=' or ':' and stripped. Lines without a separator map the key
    to an empty string.

    Example:
        >>> parse_properties("# comment\\nruntimeBuild=17.0.2b469.1\\n")
        {'runtimeBuild': '17.0.2b469.1'}
    """
    properties = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith(("#", "!")):
            continue

        separators = [i for i in (line.find("="), line.find(":")) if i != -1]
        if separators:
            index = min(separators)
            key, value = line[:index], line[index + 1 :]
        else:
            key, value = line, ""

        properties[key.strip()] = value.strip()

    return properties


def load_properties(path: Union[str, Path]) -> Dict[str, str]:
    """
    Load a properties file.

    Args:
        path: File to read

    Returns:
        Parsed properties (empty if the file does not exist)
    """
    path = Path(path)
    if not path.is_file():
        logger.debug(f"Properties file not found: {path}")
        return {}

    return parse_properties(path.read_text(encoding="utf-8", errors="replace"))


__all__ = ["parse_properties", "load_properties"]
