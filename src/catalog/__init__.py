"""
Product catalog: records, scenario data, deterministic generation and the
TTL-cached store.
"""

from catalog.models import Product
from catalog.store import CatalogStore, get_catalog_store

__all__ = ["Product", "CatalogStore", "get_catalog_store"]
