from omeq.catalog.index import (
    CatalogIndex,
    CatalogOption,
    CodeEntry,
    build_index,
    default_index,
)
from omeq.catalog.validation import CatalogIssue, validate_catalog

__all__ = [
    "CatalogIndex",
    "CatalogIssue",
    "CatalogOption",
    "CodeEntry",
    "build_index",
    "default_index",
    "validate_catalog",
]
