"""
Clinical reference records mapping a substance and route to its OMEQ
conversion factor.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from omeq.utils.enums import AdministrationRoute
from omeq.utils.exceptions import CatalogRecordError


@dataclass(frozen=True, eq=True, slots=True)
class OpioidReference:
    """
    Substance record covering one or more ATC codes and routes. Several
    codes (e.g. combination products) may share one reference.
    """

    substance: str
    classification_codes: frozenset[str]
    routes: frozenset[AdministrationRoute]
    omeq_factor: float
    help_text: str | None = None

    def __post_init__(self):
        if not self.substance:
            raise CatalogRecordError("Opioid reference must name a substance.")
        if not self.classification_codes:
            raise CatalogRecordError(
                f"{self.substance}: at least one classification code is "
                f"required."
            )
        if not self.routes:
            raise CatalogRecordError(
                f"{self.substance}: at least one route is required."
            )
        if math.isnan(self.omeq_factor) or self.omeq_factor <= 0:
            raise CatalogRecordError(
                f"{self.substance}: OMEQ factor must be a positive number, "
                f"not {self.omeq_factor}."
            )

    def covers(self, classification_code: str, route: AdministrationRoute) -> bool:
        return (
            classification_code in self.classification_codes
            and route in self.routes
        )
