"""
Evaluation of one medication row: the medication text and the daily dose as
typed, resolved and computed together.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from omeq.catalog.index import CatalogIndex
from omeq.model import CalculationResult, OpioidReference
from omeq.process.equivalence import (
    OmeqCalculator,
    default_calculator,
    infer_route,
)
from omeq.process.resolution import Resolution, resolve
from omeq.utils.constants import (
    DISPLAY_DECIMALS,
    LIQUID_FORM_MARKERS,
    MAX_UNITS_PER_DAY,
)
from omeq.utils.enums import AdministrationRoute, PharmaceuticalForm, Reason
from omeq.utils.utils import format_number

ML_PER_DAY = "ml"
UNITS_PER_DAY = "stk"


def parse_dose(text: str | None) -> float | None:
    """Daily dose as typed, with a comma or a period as decimal mark."""
    raw = (text or "").strip()
    if not raw:
        return None
    try:
        value = float(raw.replace(",", "."))
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def format_omeq(value: float | None, places: int = DISPLAY_DECIMALS) -> str:
    """Display text for an OMEQ value, rounded half-up. Empty for None."""
    if value is None:
        return ""
    return format_number(value, places)


@dataclass(frozen=True, slots=True)
class RowEvaluation:
    resolution: Resolution
    route: AdministrationRoute | None
    reference: OpioidReference | None
    daily_dose: float | None
    dose_over_limit: bool
    # "ml" for liquids, "stk" for unit doses, None for patches
    dose_unit: str | None
    result: CalculationResult
    implied_daily_mg: float | None
    help_text: str | None

    @property
    def is_patch(self) -> bool:
        product = self.resolution.product
        return (
            product is not None
            and product.form is PharmaceuticalForm.TRANSDERMAL_PATCH
        )

    @property
    def omeq_text(self) -> str:
        return format_omeq(self.result.omeq)


def _dose_unit(resolution: Resolution) -> str | None:
    product = resolution.product
    if product is None:
        return UNITS_PER_DAY
    if product.form is PharmaceuticalForm.TRANSDERMAL_PATCH:
        return None
    if any(marker in product.form_lower for marker in LIQUID_FORM_MARKERS):
        return ML_PER_DAY
    return UNITS_PER_DAY


def evaluate_row(
    medication_text: str | None,
    dose_text: str | None,
    index: CatalogIndex | None = None,
    calculator: OmeqCalculator | None = None,
) -> RowEvaluation:
    """
    Resolve the medication and compute its OMEQ for the typed daily dose.

    A dose above `MAX_UNITS_PER_DAY` is most likely given in mg rather than
    in units: it is flagged and withheld from the calculation. Patches
    ignore the dose entirely.
    """
    calculator = calculator or default_calculator()
    resolution = resolve(medication_text, index)
    product = resolution.product
    dose_unit = _dose_unit(resolution)
    is_patch = product is not None and dose_unit is None

    daily_dose = parse_dose(dose_text)
    over_limit = (
        not is_patch and daily_dose is not None and daily_dose > MAX_UNITS_PER_DAY
    )
    effective_dose = None if over_limit or is_patch else daily_dose

    result = calculator.compute(product, effective_dose, resolution.strength)

    route = infer_route(product) if product is not None else None
    reference = None
    if product is not None and not result.reason.is_exclusion:
        reference = calculator.find_reference(product, route)

    strength_mg = (
        resolution.strength.to_mg() if resolution.strength is not None else None
    )
    implied_daily_mg = None
    if not is_patch and daily_dose is not None and strength_mg is not None:
        implied_daily_mg = daily_dose * strength_mg

    help_text = None
    if reference is not None and (
        is_patch or result.reason in (Reason.OK, Reason.MISSING_INPUT)
    ):
        help_text = reference.help_text

    return RowEvaluation(
        resolution=resolution,
        route=route,
        reference=reference,
        daily_dose=daily_dose,
        dose_over_limit=over_limit,
        dose_unit=dose_unit,
        result=result,
        implied_daily_mg=implied_daily_mg,
        help_text=help_text,
    )
