"""Product catalog and alias index."""
from .index import (
    CatalogError,
    DuplicateAliasError,
    ProductCatalog,
    get_catalog,
    load_catalog,
)

__all__ = [
    "CatalogError",
    "DuplicateAliasError",
    "ProductCatalog",
    "get_catalog",
    "load_catalog",
]
