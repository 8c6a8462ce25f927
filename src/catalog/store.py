"""
In-memory catalog store with a TTL snapshot.

The store owns a single snapshot (products + id index + expiry). get()
rebuilds it when stale. There is no lock: building is idempotent, so two
requests racing on an expired snapshot at worst build it twice.
"""

import json
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from catalog.generator import generate_catalog
from catalog.models import Product
from config.constants import AUDIENCE_CATEGORIES
from config.settings import get_settings
from core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    products: List[Product]
    by_id: Dict[str, Product]
    expires_at: float


class CatalogStore:
    """TTL-cached product catalog.

    Args:
        ttl_seconds: Snapshot lifetime.
        catalog_path: Optional JSON file (list of camelCase product rows).
            The generated catalog is used when unset, missing or unreadable.
        clock: Time source in seconds; injectable for tests.
        loader: Overrides how products are produced (tests, fixtures).
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        catalog_path: Optional[Path] = None,
        clock: Callable[[], float] = time.monotonic,
        loader: Optional[Callable[[], List[Product]]] = None,
    ):
        self._ttl = ttl_seconds
        self._path = catalog_path
        self._clock = clock
        self._loader = loader
        self._snapshot: Optional[CatalogSnapshot] = None
        self.build_count = 0

    def get(self) -> List[Product]:
        """Return the current product list, rebuilding it if stale."""
        return self._current().products

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._current().by_id.get(product_id)

    def invalidate(self) -> None:
        self._snapshot = None

    def _current(self) -> CatalogSnapshot:
        snapshot = self._snapshot
        now = self._clock()
        if snapshot is None or now >= snapshot.expires_at:
            products = self._load()
            snapshot = CatalogSnapshot(
                products=products,
                by_id={p.id: p for p in products},
                expires_at=now + self._ttl,
            )
            self._snapshot = snapshot
            self.build_count += 1
        return snapshot

    def _load(self) -> List[Product]:
        if self._loader is not None:
            return self._loader()
        if self._path is not None and self._path.exists():
            try:
                return _read_catalog_file(self._path)
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning(
                    "Could not read catalog file, generating catalog",
                    path=str(self._path),
                    error=str(e),
                )
        return generate_catalog()


def _read_catalog_file(path: Path) -> List[Product]:
    rows = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(rows, list):
        raise ValueError("catalog file must contain a JSON list")

    products = []
    skipped = 0
    for row in rows:
        product = Product.from_dict(row)
        # Rows outside their audience whitelist are never served
        if product.category not in AUDIENCE_CATEGORIES.get(product.audience, ()):
            skipped += 1
            continue
        products.append(product)

    logger.info("Loaded catalog file", path=str(path), products=len(products), skipped=skipped)
    return products


_store: Optional[CatalogStore] = None
_store_lock = threading.Lock()


def get_catalog_store() -> CatalogStore:
    """Get or create the CatalogStore singleton (thread-safe)."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                settings = get_settings()
                _store = CatalogStore(
                    ttl_seconds=settings.catalog_ttl_seconds,
                    catalog_path=settings.catalog_path,
                )
    return _store
