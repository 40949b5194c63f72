"""
HTTP client for fetching a remotely hosted asset manifest.
"""
import requests
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class AssetsClient:
    """Client for downloading newline-delimited JSON asset manifests."""

    TIMEOUT = 10

    def __init__(self):
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/x-ndjson',
            'User-Agent': 'RandomizerFileServer/1.0'
        })

    def fetch_manifest(self, url: str) -> Optional[str]:
        """Fetch the raw manifest body, or None if it can't be retrieved."""
        try:
            response = self.session.get(url, timeout=self.TIMEOUT)
            response.raise_for_status()
            return response.text
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                logger.warning(f"Asset manifest not found: {url}")
                return None
            logger.error(f"HTTP error fetching asset manifest {url}: {str(e)}")
            return None
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error fetching asset manifest {url}: {str(e)}")
            return None
