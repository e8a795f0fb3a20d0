"""
Resolved strength of a product variant and the parser that reads it from
free text such as "10 mg", "0,4 mg", "50 µg/ml" or "25 µg/time".
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Final, NamedTuple

from omeq.utils.exceptions import CatalogRecordError, StrengthParseError

MILLIGRAM: Final[str] = "mg"
GRAM: Final[str] = "g"
MICROGRAM: Final[str] = "µg"

# Alternation order matters: longer spellings first
_MASS = r"mg|g|µg|μg|ug|mcg|mikrogram|mikrog"
_PER = r"ml|time|t|h|dose"
_NOT_LETTER = r"(?![^\W\d_])"

_STRENGTH_PATTERN = re.compile(
    rf"(?P<value>\d+(?:[.,]\d+)?)\s*"
    rf"(?P<mass>{_MASS}){_NOT_LETTER}"
    rf"(?:\s*(?:/|per\s+)\s*(?P<per>{_PER}){_NOT_LETTER})?"
    rf"(?:\s+(?P<hour>time){_NOT_LETTER})?",
    re.IGNORECASE,
)
_UNIT_PATTERN = re.compile(
    rf"\s*(?P<mass>{_MASS})\s*(?:(?:/|per\s+)\s*(?P<per>{_PER}))?\s*",
    re.IGNORECASE,
)

_MASS_ALIASES: Final[dict[str, str]] = {
    "mg": MILLIGRAM,
    "g": GRAM,
    "µg": MICROGRAM,
    "μg": MICROGRAM,
    "ug": MICROGRAM,
    "mcg": MICROGRAM,
    "mikrog": MICROGRAM,
    "mikrogram": MICROGRAM,
}
_HOUR_DENOMINATORS: Final[frozenset[str]] = frozenset({"time", "t", "h"})
_MG_FACTORS: Final[dict[str, float]] = {
    MILLIGRAM: 1.0,
    GRAM: 1000.0,
    MICROGRAM: 0.001,
}


class UnitParts(NamedTuple):
    """Canonical mass unit and optional denominator of a unit string."""

    mass: str
    per: str | None


def split_unit(unit: str) -> UnitParts | None:
    """
    Split a unit string into its mass and denominator parts. Returns None
    for units that are not mass based (e.g. "%", "IE").
    """
    match = _UNIT_PATTERN.fullmatch(unit.lower())
    if match is None:
        return None
    per = match["per"]
    return UnitParts(_MASS_ALIASES[match["mass"]], per.lower() if per else None)


@dataclass(frozen=True, eq=True, slots=True)
class ResolvedStrength:
    """
    Strength of a single dose unit, concentration or release rate.

    `per_hour` marks a rate. A microgram rate (as on a patch) is never read
    as an amount per dose.
    """

    value: float
    unit: str
    per_hour: bool = False

    def __post_init__(self):
        if math.isnan(self.value) or math.isinf(self.value):
            raise CatalogRecordError(
                f"Strength must have a finite value, not {self.value}."
            )
        if self.value < 0:
            raise CatalogRecordError(
                f"Strength must have a non-negative value, not {self.value}."
            )
        if not self.unit:
            raise CatalogRecordError("Strength must have a unit.")

    @classmethod
    def from_text(cls, text: str) -> ResolvedStrength:
        """
        Strict parser for catalog strings. Raises StrengthParseError if no
        number-unit pair can be found.
        """
        strength = parse_strength(text)
        if strength is None:
            raise StrengthParseError(
                f"Strength {text!r} has no recognizable number and unit."
            )
        return strength

    @property
    def unit_parts(self) -> UnitParts | None:
        return split_unit(self.unit)

    @property
    def is_rate(self) -> bool:
        parts = self.unit_parts
        return self.per_hour or (
            parts is not None and parts.per in _HOUR_DENOMINATORS
        )

    @property
    def is_concentration(self) -> bool:
        parts = self.unit_parts
        return parts is not None and parts.per == "ml"

    def to_mg(self) -> float | None:
        """
        Milligrams per dose unit, or per ml for concentrations. Microgram
        rates are patch strengths and have no milligram equivalent; a rate
        written in mg or g is read as milligrams.
        """
        parts = self.unit_parts
        if parts is None or (self.is_rate and parts.mass == MICROGRAM):
            return None
        return self.value * _MG_FACTORS[parts.mass]

    def to_mcg_per_hour(self) -> float | None:
        """Micrograms per hour for patch strengths, None otherwise."""
        parts = self.unit_parts
        if parts is None or parts.mass != MICROGRAM or not self.is_rate:
            return None
        return self.value


def parse_strength(text: str | None) -> ResolvedStrength | None:
    """
    Find the first number-unit pair in text and read it as a strength.

    "10 µg/time" gives a per-hour microgram rate, "50 mg/ml" a concentration,
    "500 mg/30 mg" the first component. Returns None when nothing is found.
    """
    if not text:
        return None

    match = _STRENGTH_PATTERN.search(text)
    if match is None:
        return None

    value = float(match["value"].replace(",", "."))
    mass = _MASS_ALIASES[match["mass"].lower()]
    per = (match["per"] or "").lower()

    if per in _HOUR_DENOMINATORS or match["hour"]:
        return ResolvedStrength(value=value, unit=mass, per_hour=True)
    if per == "ml":
        return ResolvedStrength(value=value, unit=f"{mass}/ml")
    return ResolvedStrength(value=value, unit=mass)
