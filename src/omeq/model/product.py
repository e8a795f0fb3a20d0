"""
Catalog records: marketed products and their strength variants.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from omeq.utils.enums import PharmaceuticalForm
from omeq.utils.exceptions import CatalogRecordError
from omeq.utils.utils import strip_leading_zeros


def _read_code(raw: object) -> str:
    text = str(raw).strip()
    if not text.isdigit():
        raise CatalogRecordError(
            f"Product code must be numeric, not {raw!r}."
        )
    return strip_leading_zeros(text)


def read_codes(raw: object) -> tuple[str, ...]:
    """
    Read one or more product codes from a record field. Accepts a single
    value or a list of ints or strings.
    """
    if raw is None:
        return ()
    if isinstance(raw, (str, int)):
        return (_read_code(raw),)
    if isinstance(raw, Iterable):
        return tuple(_read_code(code) for code in raw)
    raise CatalogRecordError(f"Can not read product codes from {raw!r}.")


def _list_field(record: Mapping[str, Any], key: str, where: str) -> list[Any]:
    raw = record.get(key)
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise CatalogRecordError(
            f"{where}: '{key}' must be a list, not {type(raw).__name__}."
        )
    return list(raw)


def _optional_text(raw: object) -> str | None:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


@dataclass(frozen=True, eq=True, slots=True)
class StrengthVariant:
    """
    A strength given as free text, shared by one or more product codes
    (different packs of the same strength).
    """

    strength: str
    product_codes: tuple[str, ...] = ()

    def __post_init__(self):
        if not self.strength or not self.strength.strip():
            raise CatalogRecordError("Strength variant must have a strength.")


@dataclass(frozen=True, eq=True, slots=True)
class Product:
    """
    Marketed drug item under a single ATC classification code.

    `legacy_codes` holds flat product numbers that can not be tied to one
    strength variant.
    """

    classification_code: str
    name: str | None
    manufacturer: str | None = None
    form_text: str | None = None
    variants: tuple[StrengthVariant, ...] = ()
    legacy_codes: tuple[str, ...] = ()

    def __post_init__(self):
        if not self.classification_code or not self.classification_code.strip():
            raise CatalogRecordError(
                f"Product {self.name!r}: classification code must not be "
                f"empty."
            )

    @property
    def form(self) -> PharmaceuticalForm | None:
        return PharmaceuticalForm.from_text(self.form_text)

    @property
    def form_lower(self) -> str:
        return (self.form_text or "").strip().lower()

    def describe(
        self,
        variant: StrengthVariant | None = None,
        code: str | None = None,
    ) -> str:
        """Human readable label: `name [form] [strength] (code)`."""
        parts = [self.name or "", self.form_text or ""]
        if variant is not None:
            parts.append(variant.strength.strip())
        if code:
            parts.append(f"({code})")
        return " ".join(part for part in parts if part).strip()

    @classmethod
    def from_record(
        cls, classification_code: str, record: Mapping[str, Any]
    ) -> Product:
        """
        Build a product from a catalog record.

        Records either list `variants` ({strength, productCodes}) or use the
        legacy flat `strengths` and `productNumbers` lists. Variants win when
        both are present.
        """
        if not isinstance(record, Mapping):
            raise CatalogRecordError(
                f"{classification_code}: product record must be a mapping, "
                f"not {type(record).__name__}."
            )

        variants: list[StrengthVariant] = []
        legacy_codes: tuple[str, ...] = ()

        where = f"{classification_code}/{record.get('name')}"
        raw_variants = _list_field(record, "variants", where)
        if raw_variants:
            for raw in raw_variants:
                if not isinstance(raw, Mapping):
                    raise CatalogRecordError(
                        f"{where}: variant must be a mapping."
                    )
                codes = raw.get("productCodes", raw.get("productNumbers"))
                variants.append(
                    StrengthVariant(
                        strength=str(raw.get("strength") or ""),
                        product_codes=read_codes(codes),
                    )
                )
        else:
            strengths = [
                str(s)
                for s in _list_field(record, "strengths", where)
                if str(s).strip()
            ]
            codes = read_codes(
                record.get("productNumbers", record.get("productNumber"))
            )
            if len(strengths) == 1:
                # Flat numbers can only be tied to a single strength
                variants.append(StrengthVariant(strengths[0], codes))
            else:
                variants.extend(StrengthVariant(s) for s in strengths)
                legacy_codes = codes

        return cls(
            classification_code=str(classification_code).strip(),
            name=_optional_text(record.get("name")),
            manufacturer=_optional_text(record.get("manufacturer")),
            form_text=_optional_text(record.get("form")),
            variants=tuple(variants),
            legacy_codes=legacy_codes,
        )
