"""
Contains the catalog and calculation records.

Records implement the integrity checks that can operate on their own
attributes, e.g. `ResolvedStrength` rejects negative and NaN values.
Cross-record checks (duplicate product codes) live in
`omeq.catalog.validation`.
"""

from omeq.model.product import Product, StrengthVariant, read_codes
from omeq.model.reference import OpioidReference
from omeq.model.result import CalculationResult
from omeq.model.strength import (
    GRAM,
    MICROGRAM,
    MILLIGRAM,
    ResolvedStrength,
    UnitParts,
    parse_strength,
    split_unit,
)

__all__ = [
    "CalculationResult",
    "GRAM",
    "MICROGRAM",
    "MILLIGRAM",
    "OpioidReference",
    "Product",
    "ResolvedStrength",
    "StrengthVariant",
    "UnitParts",
    "parse_strength",
    "read_codes",
    "split_unit",
]
