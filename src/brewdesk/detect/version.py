"""Version string extraction from command output."""

import logging
import re

logger = logging.getLogger(__name__)

# Dotted triple, optionally prefixed with "v" ("v20.11.0", "2.43.0")
DEFAULT_VERSION_PATTERN = r"v?(\d+\.\d+\.\d+)"


def extract_version(
    output: str, pattern: str | re.Pattern[str] | None = None
) -> str | None:
    """Extract a version token from command output.

    Args:
        output: Text printed by a version command
        pattern: Regex to search with; DEFAULT_VERSION_PATTERN if None

    Returns:
        The first capture group when the pattern has one and it matched
        non-empty text, otherwise the whole match. None if nothing matches.
        A pattern that does not compile also yields None.
    """
    try:
        regex = re.compile(pattern if pattern is not None else DEFAULT_VERSION_PATTERN)
    except re.error as e:
        logger.debug(f"Invalid version pattern {pattern!r}: {e}")
        return None

    match = regex.search(output)
    if match is None:
        return None

    if regex.groups and match.group(1):
        return match.group(1)
    return match.group(0)
