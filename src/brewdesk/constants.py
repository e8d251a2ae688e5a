"""Shared constants for brewdesk."""

# Homebrew executable locations, checked in order.
# A GUI or launchd process often lacks the interactive shell PATH, so brew is
# always resolved from these fixed locations instead of via PATH lookup.
BREW_PATHS: tuple[str, ...] = (
    "/opt/homebrew/bin/brew",  # Apple Silicon
    "/usr/local/bin/brew",  # Intel
)

# Timeout in seconds for every detection subprocess
COMMAND_TIMEOUT = 5

# Default detection cache time-to-live in seconds
DEFAULT_CACHE_TTL = 60

# Catalog categories and their display names
CATEGORY_LABELS: dict[str, str] = {
    "tool": "Tools",
    "language": "Languages",
    "ide": "Editors & IDEs",
    "database": "Databases",
    "app": "Applications",
}


def status_marker(installed: bool, version: str | None = None) -> str:
    """Return display marker for a detection outcome.

    Args:
        installed: Whether the package was detected as installed
        version: Detected version, if any

    Returns:
        "✓ <version>" or "✓" when installed, "✗ missing" otherwise.
    """
    if not installed:
        return "✗ missing"
    elif version:
        return f"✓ {version}"
    else:
        return "✓"
