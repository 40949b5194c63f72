"""
Server settings loaded from environment variables.
"""
import os
from enum import Enum
from typing import List

from pydantic import BaseModel

DEFAULT_PORT = 9060
DEFAULT_BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
PUBLIC_DIR = "public"
# Newline-delimited JSON listing externally hosted assets
ASSETS_MANIFEST = ".glitch-assets"
# Files that are always served as requested
PROTECTED_FILENAMES = ["index.html"]
INDEX_FILENAME = "index.html"


class SingletonPolicy(str, Enum):
    """What to do when an extension bucket holds fewer than two files."""
    SUBSTITUTE = "substitute"  # Draw from the bucket anyway
    PASSTHROUGH = "passthrough"  # Serve the requested file as-is


class Settings(BaseModel):
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    base_dir: str = DEFAULT_BASE_DIR
    public_dir: str = PUBLIC_DIR
    assets_manifest: str = ASSETS_MANIFEST
    protected_filenames: List[str] = PROTECTED_FILENAMES
    singleton_policy: SingletonPolicy = SingletonPolicy.SUBSTITUTE
    log_level: str = "info"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment, falling back to defaults."""
        protected = os.getenv("PROTECTED_FILENAMES")
        return cls(
            port=os.getenv("PORT", str(DEFAULT_PORT)),
            host=os.getenv("HOST", "0.0.0.0"),
            base_dir=os.getenv("BASE_DIR", DEFAULT_BASE_DIR),
            public_dir=os.getenv("PUBLIC_DIR", PUBLIC_DIR),
            assets_manifest=os.getenv("ASSETS_MANIFEST", ASSETS_MANIFEST),
            protected_filenames=(
                [name.strip() for name in protected.split(",") if name.strip()]
                if protected is not None
                else PROTECTED_FILENAMES
            ),
            singleton_policy=os.getenv("SINGLETON_POLICY", SingletonPolicy.SUBSTITUTE.value),
            log_level=os.getenv("LOG_LEVEL", "info"),
        )

    @property
    def public_path(self) -> str:
        return os.path.join(self.base_dir, self.public_dir)

    @property
    def index_path(self) -> str:
        return os.path.join(self.public_path, INDEX_FILENAME)

    @property
    def manifest_location(self) -> str:
        """Manifest URL as-is, or the manifest path resolved against base_dir."""
        if self.assets_manifest.startswith(("http://", "https://")):
            return self.assets_manifest
        return os.path.join(self.base_dir, self.assets_manifest)
