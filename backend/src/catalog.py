"""
Catalog building - scans the public directory and the asset manifest once at startup.
"""
import json
import logging
import os
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from .assets_client import AssetsClient
from .config import Settings
from .file_data import Catalog, CatalogStore, File, normalize, split_name

logger = logging.getLogger(__name__)

# Manifest fields that may hold the remote location, in order of preference
LOCATION_FIELDS = ("url", "location")


def has_extension(name: str) -> bool:
    return bool(split_name(name)[1])


def list_public_files(root_dir: str) -> List[File]:
    """
    Recursively list servable files under root_dir.

    Entries without an extension are skipped. An unreadable root logs and
    returns an empty list rather than failing startup.
    """
    if not os.path.isdir(root_dir):
        logger.error(f"failed to list files from {root_dir}: not a readable directory")
        return []

    def on_error(err: OSError):
        logger.error(f"failed to list files from {err.filename}: {err}")

    files = []
    for dirpath, dirnames, filenames in os.walk(root_dir, onerror=on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            if not has_extension(filename):
                continue
            location = os.path.abspath(os.path.join(dirpath, filename))
            files.append(File(name=filename, location=location))

    logger.info(f"Found {len(files)} public files in {root_dir}")
    return files


def parse_asset_line(line: str) -> Optional[File]:
    """Parse one manifest line into a File, or None if it can't be used."""
    line = line.strip()
    if not line:
        return None

    try:
        asset = json.loads(line)
    except json.JSONDecodeError as e:
        logger.warning(f'failed to parse asset string "{line}" to json: {e}')
        return None

    if not isinstance(asset, dict):
        logger.warning(f'skipping asset string "{line}": not a json object')
        return None

    name = asset.get("name")
    location = next(
        (asset[key] for key in LOCATION_FIELDS if isinstance(asset.get(key), str)),
        None,
    )
    if not isinstance(name, str) or not name or not location:
        logger.warning(f'skipping asset string "{line}": missing name or url')
        return None

    if not has_extension(name):
        logger.warning(f'skipping asset "{name}": no file extension')
        return None

    return File(name=name, location=location)


def parse_asset_manifest(text: str) -> List[File]:
    """Parse every line of a manifest, skipping lines that don't yield a file."""
    files = []
    for line in text.splitlines():
        asset = parse_asset_line(line)
        if asset:
            files.append(asset)
    return files


def read_manifest(manifest: str, client: Optional[AssetsClient] = None) -> Optional[str]:
    """Read manifest text from a local path or an http(s) URL."""
    if manifest.startswith(("http://", "https://")):
        client = client or AssetsClient()
        return client.fetch_manifest(manifest)

    try:
        with open(manifest, encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        logger.error(f"failed to list assets from {manifest}: {e}")
        return None


def list_remote_assets(manifest: str, client: Optional[AssetsClient] = None) -> List[File]:
    """List externally hosted assets from the manifest, or [] if it's unreadable."""
    text = read_manifest(manifest, client=client)
    if text is None:
        return []

    files = parse_asset_manifest(text)
    logger.info(f"Found {len(files)} remote assets in {manifest}")
    return files


def index_by_extension(files: Iterable[File]) -> Dict[str, Tuple[File, ...]]:
    """Group files by lower-cased extension, keeping input order in each bucket."""
    ext_map = defaultdict(list)
    for item in files:
        ext_map[normalize(split_name(item.name)[1])].append(item)
    return {ext: tuple(items) for ext, items in ext_map.items()}


def build_catalog(files: Iterable[File]) -> Catalog:
    files = tuple(files)
    return Catalog(files=files, by_extension=index_by_extension(files))


def build_catalog_store(settings: Settings, client: Optional[AssetsClient] = None) -> CatalogStore:
    """Scan both sources. Each is independent; either may come back empty."""
    public = build_catalog(list_public_files(settings.public_path))
    assets = build_catalog(list_remote_assets(settings.manifest_location, client=client))
    return CatalogStore(public=public, assets=assets)
