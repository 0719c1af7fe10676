"""
Asset Catalog Repository
========================

Holds the list of remote assets as last fetched from the catalog endpoint and
answers search queries against it.

The catalog is an immutable snapshot. A refresh parses the whole payload
first and only then swaps the stored snapshot, so a malformed payload can
never leave a half-updated list behind, and readers on other threads always
see one complete catalog or the other.

Payload shape::

    {"assets": [{"name": "rock.png", "url": "https://.../rock.png"}, ...]}

Author: Quantum Asset Toolbox Project
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from src.core.errors import ParseError

logger = logging.getLogger(__name__)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass(frozen=True)
class AssetInfo:
    """A single downloadable asset advertised by the catalog."""
    name: str
    url: str


@dataclass(frozen=True)
class AssetCatalog:
    """Ordered, immutable sequence of AssetInfo entries."""
    assets: Tuple[AssetInfo, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[AssetInfo]:
        return iter(self.assets)

    def __len__(self) -> int:
        return len(self.assets)

    def __getitem__(self, index: int) -> AssetInfo:
        return self.assets[index]

    def find(self, name: str) -> Optional[AssetInfo]:
        """Return the asset called ``name``, or None."""
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None

    @property
    def names(self) -> List[str]:
        return [asset.name for asset in self.assets]


EMPTY_CATALOG = AssetCatalog()


# ============================================================================
# NAME VALIDATION
# ============================================================================

def is_safe_asset_name(name: str) -> bool:
    """
    Check that an asset name can be used as a plain local file name.

    Asset names come from the server and end up joined onto local paths, so
    anything that could escape the target folder is rejected: path
    separators, '.' / '..', drive prefixes and NUL bytes.
    """
    if not isinstance(name, str) or not name.strip():
        return False
    if name in (".", ".."):
        return False
    if "/" in name or "\\" in name or "\x00" in name:
        return False
    if ":" in name:
        # Windows drive letters and alternate data streams
        return False
    return True


# ============================================================================
# PARSING AND SEARCH
# ============================================================================

def parse_catalog(raw: bytes) -> AssetCatalog:
    """
    Parse a catalog payload into an AssetCatalog.

    Entries with names that are unsafe as local file names are dropped with a
    warning. When a name appears more than once, the last entry in listing
    order wins and earlier duplicates are removed.

    Args:
        raw: Response body of the catalog endpoint.

    Returns:
        AssetCatalog: The parsed catalog, in listing order.

    Raises:
        ParseError: If the payload is not valid JSON of the expected shape.
    """
    try:
        text = raw.decode("utf-8-sig") if isinstance(raw, (bytes, bytearray)) else raw
        payload = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(f"Catalog payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ParseError(f"Catalog payload must be an object, got {type(payload).__name__}")

    entries = payload.get("assets")
    if not isinstance(entries, list):
        raise ParseError("Catalog payload is missing the 'assets' list")

    parsed: List[AssetInfo] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ParseError(f"Asset entry {index} is not an object")

        name = entry.get("name")
        url = entry.get("url")
        if not isinstance(name, str) or not name:
            raise ParseError(f"Asset entry {index} has no valid 'name'")
        if not isinstance(url, str) or not url:
            raise ParseError(f"Asset entry {index} ('{name}') has no valid 'url'")

        if not is_safe_asset_name(name):
            logger.warning(f"Skipping asset with unsafe name: {name!r}")
            continue

        parsed.append(AssetInfo(name=name, url=url))

    # Last-wins on duplicate names
    last_index = {asset.name: i for i, asset in enumerate(parsed)}
    deduplicated = tuple(asset for i, asset in enumerate(parsed) if last_index[asset.name] == i)
    if len(deduplicated) != len(parsed):
        logger.debug(f"Dropped {len(parsed) - len(deduplicated)} duplicate asset name(s)")

    return AssetCatalog(assets=deduplicated)


def search_catalog(catalog: AssetCatalog, query: str) -> List[AssetInfo]:
    """
    Return the assets whose name contains ``query``, ignoring case.

    Catalog order is preserved; an empty query matches everything.
    """
    needle = (query or "").lower()
    return [asset for asset in catalog if needle in asset.name.lower()]


# ============================================================================
# REPOSITORY
# ============================================================================

class CatalogRepository:
    """
    Owner of the current catalog snapshot.

    ``refresh`` is the only way to change the stored catalog and it replaces
    it wholesale. Replacement is serialized by a lock; reads take the current
    snapshot reference, which is never mutated.
    """

    def __init__(self, catalog: AssetCatalog = EMPTY_CATALOG):
        self._catalog = catalog
        self._write_lock = threading.Lock()

    @property
    def current(self) -> AssetCatalog:
        return self._catalog

    def refresh(self, raw: bytes) -> AssetCatalog:
        """
        Parse ``raw`` and, on success, replace the stored catalog.

        Raises:
            ParseError: The stored catalog is left untouched.
        """
        catalog = parse_catalog(raw)
        with self._write_lock:
            previous = self._catalog
            self._catalog = catalog
        logger.info(f"Catalog replaced: {len(previous)} -> {len(catalog)} assets")
        return catalog

    def search(self, query: str) -> List[AssetInfo]:
        return search_catalog(self._catalog, query)

    def find(self, name: str) -> Optional[AssetInfo]:
        return self._catalog.find(name)
