"""
Integrity checks over the whole catalog.

Single records validate themselves on construction; the checks here need
the full product list, e.g. a product code claimed by two products. Issues
are reported, never raised: picking one of two claimants silently would
produce clinically wrong results, so callers exclude the affected codes
instead.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TypeAlias

from omeq.model import Product, ResolvedStrength, StrengthVariant
from omeq.utils.enums import IssueKind
from omeq.utils.exceptions import StrengthParseError
from omeq.utils.utils import group_pairs, keep_repeated_keys

CodeOwner: TypeAlias = tuple[Product, StrengthVariant | None]


@dataclass(frozen=True, slots=True)
class CatalogIssue:
    kind: IssueKind
    message: str
    records: tuple[str, ...] = ()


def code_claims(product: Product) -> Iterator[tuple[str, CodeOwner]]:
    """Yield every (code, owner) pair claimed by a product."""
    for variant in product.variants:
        for code in variant.product_codes:
            yield code, (product, variant)
    for code in product.legacy_codes:
        yield code, (product, None)


def find_duplicate_codes(
    products: Iterable[Product],
) -> dict[str, list[CodeOwner]]:
    """Codes claimed by more than one (product, variant) pair."""
    claims = group_pairs(
        claim for product in products for claim in code_claims(product)
    )
    return keep_repeated_keys(claims)


def _describe_owner(owner: CodeOwner) -> str:
    product, variant = owner
    return f"{product.classification_code} {product.describe(variant)}"


def validate_catalog(products: Iterable[Product]) -> list[CatalogIssue]:
    """
    Run the integrity pass and return every offending record.
    """
    products = list(products)
    issues: list[CatalogIssue] = []

    for code, owners in find_duplicate_codes(products).items():
        described = tuple(dict.fromkeys(_describe_owner(o) for o in owners))
        issues.append(
            CatalogIssue(
                kind=IssueKind.DUPLICATE_CODE,
                message=(
                    f"Product code {code} is claimed by {len(described)} "
                    f"records"
                ),
                records=described,
            )
        )

    for product in products:
        if not product.name:
            issues.append(
                CatalogIssue(
                    kind=IssueKind.MISSING_NAME,
                    message=(
                        f"Product under {product.classification_code} has no "
                        f"name and is left out of suggestions"
                    ),
                    records=(product.describe(),),
                )
            )

        for variant in product.variants:
            try:
                _ = ResolvedStrength.from_text(variant.strength)
            except StrengthParseError as e:
                issues.append(
                    CatalogIssue(
                        kind=IssueKind.UNPARSABLE_STRENGTH,
                        message=str(e),
                        records=(_describe_owner((product, variant)),),
                    )
                )

    return issues
