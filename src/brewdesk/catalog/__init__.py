"""Package catalog loading.

The catalog ships as packages.yml next to this module. Loading is cached with
functools.lru_cache; callers must treat the returned data as read-only.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from ..constants import CATEGORY_LABELS


class CatalogError(Exception):
    """Raised for unknown packages or a malformed catalog."""

    pass


@dataclass(frozen=True)
class CatalogPackage:
    """A package offered for install/uninstall."""

    name: str
    description: str
    category: str
    is_cask: bool = False
    detection: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def category_label(self) -> str:
        """Display name of the package's category."""
        return CATEGORY_LABELS.get(self.category, self.category.title())


@lru_cache(maxsize=1)
def load_packages() -> dict[str, Any]:
    """Load packages.yml as a raw mapping of package id to entry."""
    catalog_path = Path(__file__).parent / "packages.yml"
    with open(catalog_path) as f:
        return yaml.safe_load(f) or {}


def _to_package(name: str, entry: dict[str, Any]) -> CatalogPackage:
    category = entry.get("category", "tool")
    if category not in CATEGORY_LABELS:
        raise CatalogError(f"Package '{name}' has unknown category '{category}'")

    return CatalogPackage(
        name=name,
        description=entry.get("description", ""),
        category=category,
        is_cask=bool(entry.get("cask", False)),
        detection=dict(entry.get("detection") or {}),
    )


def get_catalog() -> list[CatalogPackage]:
    """Return all catalog packages in file order."""
    return [_to_package(name, entry) for name, entry in load_packages().items()]


def get_package(name: str) -> CatalogPackage:
    """Look up a catalog package by id.

    Raises:
        CatalogError: If the package is not in the catalog
    """
    entry = load_packages().get(name)
    if entry is None:
        raise CatalogError(f"Unknown package '{name}'")
    return _to_package(name, entry)


__all__ = [
    "CatalogError",
    "CatalogPackage",
    "get_catalog",
    "get_package",
    "load_packages",
]
