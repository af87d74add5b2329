"""
Product catalog and alias index.

The catalog is loaded once from YAML and never changes afterwards. Every
alias (including each product's English and Malayalam names) is stored in
normalized form and must belong to exactly one product.
"""
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import yaml

from ..config import config
from ..data_types import ProductDefinition
from ..extraction.normalization import normalize

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "store" / "catalog.yaml"


class CatalogError(ValueError):
    """Catalog data is malformed."""


class DuplicateAliasError(CatalogError):
    """One alias was claimed by two different products."""

    def __init__(self, alias: str, owner: str, claimant: str):
        self.alias = alias
        self.owner = owner
        self.claimant = claimant
        super().__init__(
            f"Alias {alias!r} of {claimant!r} already belongs to {owner!r}")


class ProductCatalog:
    """
    Read-only product catalog with an alias index.

    Args:
        products: Product definitions, in display order
        strict: Raise DuplicateAliasError when two products share an alias.
            When False the first product keeps the alias and a warning is
            logged.

    Raises:
        CatalogError: Two products share a canonical name
        DuplicateAliasError: Two products share an alias (strict mode)
    """

    def __init__(self, products: Iterable[ProductDefinition], strict: bool = True):
        by_name: Dict[str, ProductDefinition] = {}
        aliases: Dict[str, str] = {}

        for product in products:
            if product.name_en in by_name:
                raise CatalogError(f"Duplicate product name {product.name_en!r}")
            by_name[product.name_en] = product

            for raw in (product.name_en, product.name_ml, *product.aliases):
                key = normalize(raw)
                if not key:
                    continue
                owner = aliases.get(key)
                if owner is None:
                    aliases[key] = product.name_en
                elif owner != product.name_en:
                    if strict:
                        raise DuplicateAliasError(key, owner, product.name_en)
                    logger.warning(
                        f"Alias {key!r} claimed by {product.name_en!r} kept for {owner!r}",
                        extra={"alias": key, "owner": owner, "claimant": product.name_en},
                    )

        self._products: Mapping[str, ProductDefinition] = MappingProxyType(by_name)
        self._aliases: Mapping[str, str] = MappingProxyType(aliases)
        # 🔑 Longest first: "ചുവന്ന അരി" must win over the "അരി" inside it
        self._alias_keys: Tuple[str, ...] = tuple(sorted(aliases, key=len, reverse=True))

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]], strict: bool = True) -> "ProductCatalog":
        """Build a catalog from raw dicts (as loaded from YAML)."""
        products: List[ProductDefinition] = []
        for position, record in enumerate(records):
            if not isinstance(record, dict):
                raise CatalogError(f"Product record #{position} is not a mapping: {record!r}")
            try:
                products.append(ProductDefinition.from_dict(record))
            except (TypeError, ValueError, ArithmeticError) as e:
                raise CatalogError(f"Invalid product record #{position}: {e}") from e
        return cls(products, strict=strict)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self) -> Iterator[ProductDefinition]:
        return iter(self._products.values())

    def __contains__(self, name_en: object) -> bool:
        return name_en in self._products

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def alias_index(self) -> Mapping[str, str]:
        """Normalized alias -> canonical English name."""
        return self._aliases

    @property
    def alias_keys(self) -> Tuple[str, ...]:
        """Alias keys, longest first."""
        return self._alias_keys

    def get_product(self, name_en: str) -> Optional[ProductDefinition]:
        return self._products.get(name_en)

    def lookup(self, text: str) -> Optional[ProductDefinition]:
        """Product whose alias equals ``text`` after normalization."""
        name_en = self._aliases.get(normalize(text))
        return self._products[name_en] if name_en else None

    def get_malayalam_name(self, name_en: str) -> str:
        """Malayalam display name, or the English name for unknown products."""
        product = self._products.get(name_en)
        return product.name_ml if product else name_en

    @property
    def categories(self) -> List[str]:
        """Distinct categories in catalog order."""
        return list(dict.fromkeys(p.category for p in self._products.values() if p.category))

    def __repr__(self):
        return f"<ProductCatalog products={len(self._products)} aliases={len(self._aliases)}>"


def load_catalog(path: Optional[Union[str, Path]] = None,
                 strict: Optional[bool] = None) -> ProductCatalog:
    """
    Load a catalog YAML file.

    The file holds a top-level ``products`` list (a bare list is accepted
    too).

    Args:
        path: Catalog file; defaults to the bundled store/catalog.yaml
        strict: Duplicate-alias policy; defaults to config.STRICT_CATALOG

    Raises:
        FileNotFoundError: If the file does not exist
        CatalogError: If the data is malformed
    """
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    if strict is None:
        strict = config.STRICT_CATALOG

    with catalog_path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    records = raw.get("products") if isinstance(raw, dict) else raw
    if not isinstance(records, list):
        raise CatalogError(f"{catalog_path} has no product list")

    catalog = ProductCatalog.from_records(records, strict=strict)
    logger.info(
        f"Loaded catalog with {len(catalog)} products",
        extra={"path": str(catalog_path), "aliases": len(catalog.alias_index)},
    )
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> ProductCatalog:
    """Process-wide catalog (config.CATALOG_PATH or the bundled file)."""
    return load_catalog(config.CATALOG_PATH)
