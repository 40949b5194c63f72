"""
Request-time substitution: swaps a requested file for another of the same type.
"""
import logging
import posixpath
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional
from urllib.parse import unquote

from .config import SingletonPolicy
from .file_data import Catalog, File, normalize, split_name

logger = logging.getLogger(__name__)

MAX_SELECTION_ATTEMPTS = 10


class Outcome(str, Enum):
    LITERAL = "literal"  # Serve exactly what was asked for
    SUBSTITUTE = "substitute"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a request path against a catalog."""
    outcome: Outcome
    path: str  # Decoded request path
    file: Optional[File] = None  # Set for substitutes

    @property
    def base_name(self) -> str:
        return posixpath.basename(self.path)


def find_literal(name: str, catalogs: Iterable[Catalog]) -> Optional[File]:
    """Exact base-name match across catalogs, checked in order."""
    for catalog in catalogs:
        found = catalog.find_by_name(name)
        if found:
            return found
    return None


class Resolver:
    """
    Picks a same-extension, different-name replacement for a request.

    The catalog is never mutated; the only state is the random source, so
    one resolver can serve every request.
    """

    def __init__(self, protected_names: Iterable[str],
                 singleton_policy: SingletonPolicy = SingletonPolicy.SUBSTITUTE,
                 max_attempts: int = MAX_SELECTION_ATTEMPTS,
                 rng: Optional[random.Random] = None):
        self.protected_names = frozenset(protected_names)
        self.singleton_policy = SingletonPolicy(singleton_policy)
        self.max_attempts = max_attempts
        self.rng = rng or random.Random()

    def is_protected(self, path: str) -> bool:
        return path == "/" or posixpath.basename(path) in self.protected_names

    def pick(self, requested_stem: str, bucket) -> File:
        """
        Draw up to max_attempts entries, stopping at the first whose stem differs.
        Falls back to the last draw when every draw matched the requested stem.
        """
        selected = None
        for _ in range(self.max_attempts):
            selected = bucket[self.rng.randint(0, len(bucket) - 1)]
            if selected.stem != requested_stem:
                break
        return selected

    def resolve(self, request_path: str, catalog: Catalog) -> Resolution:
        path = unquote(request_path)
        if self.is_protected(path):
            return Resolution(Outcome.LITERAL, path)

        stem, ext = split_name(posixpath.basename(path))
        bucket = catalog.bucket(normalize(ext)) if ext else ()
        if not bucket:
            logger.warning(f"request for {path} > sorry not found")
            return Resolution(Outcome.NOT_FOUND, path)

        if len(bucket) < 2 and self.singleton_policy == SingletonPolicy.PASSTHROUGH:
            return Resolution(Outcome.LITERAL, path)

        selected = self.pick(stem, bucket)
        substitute = File(name=f"{selected.stem}{ext}", location=selected.location)
        logger.info(f"request for {path} > sending {substitute.name}")
        return Resolution(Outcome.SUBSTITUTE, path, substitute)
