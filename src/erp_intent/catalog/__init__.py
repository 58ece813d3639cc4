"""Endpoint catalogs: read-only (module, action) -> endpoints lookup."""
from .endpoint_catalog import CatalogRegistry, EndpointCatalog
from .catalog_loader import DEFAULT_CATALOG_DIR, load_catalog, load_catalog_dir, parse_catalog

__all__ = [
    "CatalogRegistry",
    "EndpointCatalog",
    "DEFAULT_CATALOG_DIR",
    "load_catalog",
    "load_catalog_dir",
    "parse_catalog",
]
