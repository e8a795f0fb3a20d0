"""
Resolution of one free-form input field into a catalog product and a
resolved strength.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from omeq.catalog.index import CatalogIndex, CatalogOption, default_index
from omeq.model import Product, ResolvedStrength, StrengthVariant
from omeq.model import parse_strength
from omeq.process.ranking import PRODUCT_CODE_QUERY, score_options
from omeq.utils.logger import LOGGER
from omeq.utils.utils import strip_leading_zeros

_LOGGER = LOGGER.getChild("Resolver")


@dataclass(frozen=True, slots=True)
class Resolution:
    """
    Outcome of resolving one input. Missing fields mean insufficient input,
    not an error.

    `canonical_text` is set for product code input: callers may replace the
    raw input with it, and resolving it again gives the same product and
    strength.
    """

    product: Product | None = None
    strength: ResolvedStrength | None = None
    variant: StrengthVariant | None = None
    code: str | None = None
    canonical_text: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.product is not None


_UNRESOLVED = Resolution()


def _variant_strength(variant: StrengthVariant | None) -> ResolvedStrength | None:
    return parse_strength(variant.strength) if variant is not None else None


def _from_option(option: CatalogOption) -> Resolution:
    return Resolution(
        product=option.product,
        strength=_variant_strength(option.variant),
        variant=option.variant,
        code=option.code,
        canonical_text=option.label,
    )


def _resolve_code(code: str, index: CatalogIndex) -> Resolution:
    code = strip_leading_zeros(code)

    if code in index.conflicting_codes:
        # Claimed by several products, which may share one label
        _LOGGER.debug(f"Product code {code} is claimed by several products")
        return _UNRESOLVED

    entry = index.lookup(code)
    if entry is not None:
        return Resolution(
            product=entry.product,
            strength=_variant_strength(entry.variant),
            variant=entry.variant,
            code=code,
            canonical_text=entry.product.describe(entry.variant, code),
        )

    options = index.options_with_code(code)
    if len(options) == 1:
        return _from_option(options[0])

    _LOGGER.debug(f"Product code {code} matched {len(options)} options")
    return _UNRESOLVED


def _interchangeable(options: Sequence[CatalogOption]) -> bool:
    """
    Whether all options are packs of the same product, or of products that
    share ATC code, form and strength.
    """
    first = options[0]
    return all(
        option.product == first.product
        or (
            option.product.classification_code
            == first.product.classification_code
            and option.product.form_text == first.product.form_text
            and _strength_text(option) == _strength_text(first)
        )
        for option in options[1:]
    )


def _strength_text(option: CatalogOption) -> str | None:
    return option.variant.strength.strip() if option.variant else None


def _resolve_text(text: str, index: CatalogIndex) -> Resolution:
    scored = score_options(text, index.options)
    if not scored or scored[0][1] <= 0:
        return Resolution(strength=parse_strength(text))

    best = scored[0][1]
    group = [option for option, score in scored if score == best]

    if any(option.code in index.conflicting_codes for option in group):
        _LOGGER.debug(f"{text!r} matches a product code with several owners")
        return Resolution(strength=parse_strength(text))

    if not _interchangeable(group):
        _LOGGER.debug(
            f"{text!r} is ambiguous between {len(group)} options scoring {best}"
        )
        return Resolution(strength=parse_strength(text))

    first = group[0]
    variant = None
    if len({_strength_text(option) for option in group}) == 1:
        # One strength for the whole group: prefer the catalog value
        variant = first.variant

    return Resolution(
        product=first.product,
        strength=_variant_strength(variant) or parse_strength(text),
        variant=variant,
        code=first.code if len(group) == 1 else None,
    )


def resolve(raw_text: str | None, index: CatalogIndex | None = None) -> Resolution:
    """
    Resolve one input field against the catalog.

    Digits only (optionally zero padded) is a product code; anything else is
    matched as free text. Never raises on user input.

    Args:
        raw_text: Text as typed or pasted.

        index: Catalog index to resolve against. Defaults to the index over
            the configured catalog.
    """
    text = (raw_text or "").strip()
    if not text:
        return _UNRESOLVED

    index = index or default_index()

    if code := PRODUCT_CODE_QUERY.fullmatch(text):
        resolution = _resolve_code(code[0], index)
    else:
        resolution = _resolve_text(text, index)

    if resolution.product is not None:
        _LOGGER.debug(
            f"Resolved {text!r} to "
            f"{resolution.product.describe(resolution.variant, resolution.code)}"
        )
    return resolution
