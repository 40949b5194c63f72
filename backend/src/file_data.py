"""
Data models for served files and catalogs.
"""
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple


def normalize(value: str) -> str:
    """Case-fold an extension or name for lookups."""
    return value.lower()


def split_name(name: str) -> Tuple[str, str]:
    """Split a base name into (stem, extension). Dotfiles have no extension."""
    return os.path.splitext(name)


@dataclass(frozen=True)
class File:
    """One servable file, either on disk or hosted remotely."""
    name: str  # Base filename with extension
    location: str  # Absolute local path or remote URL

    @property
    def stem(self) -> str:
        return split_name(self.name)[0]

    @property
    def extension(self) -> str:
        return normalize(split_name(self.name)[1])

    @property
    def is_remote(self) -> bool:
        return self.location.startswith(("http://", "https://"))


@dataclass(frozen=True)
class Catalog:
    """Point-in-time snapshot of files from one source, indexed by extension."""
    files: Tuple[File, ...] = ()
    by_extension: Dict[str, Tuple[File, ...]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.files)

    def bucket(self, extension: str) -> Tuple[File, ...]:
        """Files sharing an extension (leading dot, any case)."""
        return self.by_extension.get(normalize(extension), ())

    def find_by_name(self, name: str) -> Optional[File]:
        """First file whose base name matches exactly."""
        for item in self.files:
            if item.name == name:
                return item
        return None


@dataclass(frozen=True)
class CatalogStore:
    """Both catalogs the server answers from."""
    public: Catalog
    assets: Catalog

    def all_catalogs(self) -> Iterable[Catalog]:
        # Assets are checked before local files on literal lookups
        return (self.assets, self.public)
