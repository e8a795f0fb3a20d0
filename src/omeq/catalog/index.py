"""
Immutable lookup structures built once from the product catalog: a product
code map and the flattened, pre-tokenized option list used for resolution
and suggestions.
"""

from __future__ import annotations

import functools
import logging
import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, TypeAlias

from omeq.catalog.validation import (
    CatalogIssue,
    code_claims,
    find_duplicate_codes,
    validate_catalog,
)
from omeq.csv_read.catalog import load_catalog
from omeq.model import Product, StrengthVariant
from omeq.text.normalizer import normalize, tokenize
from omeq.utils.constants import CATALOG_PATH_ENV, DEFAULT_CATALOG_PATH
from omeq.utils.enums import IssueKind
from omeq.utils.exceptions import CatalogRecordError
from omeq.utils.logger import LOGGER
from omeq.utils.utils import norwegian_sort_key, strip_leading_zeros

CatalogInput: TypeAlias = Mapping[str, Sequence[Mapping[str, Any]]] | Iterable[Product]


@dataclass(frozen=True, slots=True)
class CodeEntry:
    product: Product
    variant: StrengthVariant | None


@dataclass(frozen=True, slots=True)
class CatalogOption:
    """
    One selectable (product, strength variant, product code) combination.

    `normalized` and `tokens` are computed once from the label and the
    manufacturer; the manufacturer is searchable but not displayed.
    """

    product: Product
    variant: StrengthVariant | None
    code: str | None
    label: str
    normalized: str
    tokens: tuple[str, ...]
    # Position in catalog input order, used as a stable tie-breaker
    position: int


@dataclass(frozen=True, slots=True)
class CatalogIndex:
    products: tuple[Product, ...]
    options: tuple[CatalogOption, ...]
    by_code: Mapping[str, CodeEntry]
    conflicting_codes: frozenset[str]
    issues: tuple[CatalogIssue, ...]

    def lookup(self, code: str) -> CodeEntry | None:
        """Exact code lookup; zero padding is ignored."""
        return self.by_code.get(strip_leading_zeros(code))

    def options_with_code(self, code: str) -> list[CatalogOption]:
        code = strip_leading_zeros(code)
        return [option for option in self.options if option.code == code]

    def canonical_label(self, code: str) -> str | None:
        """`name [form] [strength] (code)` for a known, unambiguous code."""
        entry = self.lookup(code)
        if entry is None:
            return None
        return entry.product.describe(entry.variant, strip_leading_zeros(code))


def _option(
    product: Product,
    variant: StrengthVariant | None,
    code: str | None,
    position: int,
) -> CatalogOption:
    label = product.describe(variant, code)
    searchable = f"{label} {product.manufacturer or ''}"
    return CatalogOption(
        product=product,
        variant=variant,
        code=code,
        label=label,
        normalized=normalize(searchable),
        tokens=tuple(tokenize(searchable)),
        position=position,
    )


def _product_options(
    product: Product, start: int
) -> Iterable[CatalogOption]:
    position = start
    for variant in product.variants:
        for code in variant.product_codes or (None,):
            yield _option(product, variant, code, position)
            position += 1
    for code in product.legacy_codes:
        yield _option(product, None, code, position)
        position += 1
    if not product.variants and not product.legacy_codes:
        yield _option(product, None, None, position)


def _read_products(
    catalog: CatalogInput, logger: logging.Logger
) -> tuple[list[Product], list[CatalogIssue]]:
    if not isinstance(catalog, Mapping):
        return list(catalog), []

    products: list[Product] = []
    issues: list[CatalogIssue] = []

    def skip(classification_code: str, raw: Any, message: str):
        logger.warning(f"Skipping malformed record: {message}")
        issues.append(
            CatalogIssue(
                kind=IssueKind.MALFORMED_RECORD,
                message=message,
                records=(f"{classification_code} {raw!r}",),
            )
        )

    for classification_code, records in catalog.items():
        if records is None:
            continue
        if not isinstance(records, (list, tuple)):
            skip(
                classification_code,
                records,
                f"{classification_code}: products must be given as a list, "
                f"not {type(records).__name__}.",
            )
            continue
        for record in records:
            try:
                products.append(
                    Product.from_record(classification_code, record)
                )
            except CatalogRecordError as e:
                skip(classification_code, record, str(e))
    return products, issues


def build_index(catalog: CatalogInput) -> CatalogIndex:
    """
    Build the catalog index. Pure and deterministic for a given catalog.

    Malformed records are skipped and reported in `CatalogIndex.issues`
    together with the validation pass results; nothing is raised.
    """
    logger = LOGGER.getChild("CatalogIndex")

    products, issues = _read_products(catalog, logger)
    issues += validate_catalog(products)
    for issue in issues:
        logger.warning(f"{issue.kind.value}: {issue.message} {issue.records}")

    conflicting = frozenset(find_duplicate_codes(products))
    by_code: dict[str, CodeEntry] = {}
    for product in products:
        for code, (owner, variant) in code_claims(product):
            if code not in conflicting:
                by_code.setdefault(code, CodeEntry(owner, variant))

    options: list[CatalogOption] = []
    seen_labels: set[str] = set()
    position = 0
    for product in products:
        if not product.name:
            # Still reachable through the code map
            continue
        for option in _product_options(product, position):
            position = option.position + 1
            if option.label in seen_labels:
                continue
            seen_labels.add(option.label)
            options.append(option)

    options.sort(key=lambda o: (norwegian_sort_key(o.label), o.position))

    logger.info(
        f"Indexed {len(products):,} products, {len(options):,} options and "
        f"{len(by_code):,} product codes"
    )

    return CatalogIndex(
        products=tuple(products),
        options=tuple(options),
        by_code=MappingProxyType(by_code),
        conflicting_codes=conflicting,
        issues=tuple(issues),
    )


def catalog_path() -> Path:
    """Catalog file, overridable through the environment."""
    override = os.environ.get(CATALOG_PATH_ENV)
    return Path(override) if override else DEFAULT_CATALOG_PATH


@functools.cache
def default_index() -> CatalogIndex:
    """Process-wide index over the configured catalog, built on first use."""
    return build_index(load_catalog(catalog_path()))
