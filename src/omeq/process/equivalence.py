"""
Contains OmeqCalculator, which converts a resolved product, a daily dose
and a resolved strength into an oral morphine equivalent (OMEQ) or a reason
why no value can be given.
"""

from __future__ import annotations

import functools
import logging
import math
import os
from collections.abc import Iterable
from pathlib import Path

from omeq.csv_read.catalog import load_opioid_references
from omeq.model import CalculationResult, OpioidReference, Product
from omeq.model import ResolvedStrength
from omeq.utils.constants import (
    CODEINE_CODES,
    DEFAULT_REFERENCES_PATH,
    FORM_ROUTES,
    HYDROMORPHONE_CODE,
    KETOBEMIDONE_CODES,
    METHADONE_CODES,
    MORPHINE_CODE,
    MORPHINE_DROPS_MARKER,
    ORAL_FORM_MARKERS,
    OXYCODONE_CODES,
    PARENTERAL_FORM_MARKERS,
    REFERENCES_PATH_ENV,
)
from omeq.utils.enums import AdministrationRoute, PharmaceuticalForm, Reason
from omeq.utils.logger import LOGGER

# Reasons for substances that have a reference, but not for this route
_MISSING_ROUTE_REASONS: tuple[tuple[frozenset[str], Reason], ...] = (
    (CODEINE_CODES, Reason.UNSUPPORTED_CODEINE),
    (METHADONE_CODES, Reason.UNSUPPORTED_METHADONE),
    (OXYCODONE_CODES, Reason.UNSUPPORTED_OXYCODONE),
)


def infer_route(product: Product) -> AdministrationRoute | None:
    """
    Administration route of a product: the form table, overridden by
    markers in the form text. Mixtures and oral solutions are oral even
    with mg/ml strengths.
    """
    form_text = product.form_lower

    if any(marker in form_text for marker in ORAL_FORM_MARKERS):
        return AdministrationRoute.ORAL
    if any(marker in form_text for marker in PARENTERAL_FORM_MARKERS):
        return AdministrationRoute.PARENTERAL

    form = product.form
    if form is None:
        return None
    return FORM_ROUTES.get(form)


def _excluded(product: Product, route: AdministrationRoute) -> Reason | None:
    code = product.classification_code
    if code == HYDROMORPHONE_CODE and route is AdministrationRoute.PARENTERAL:
        return Reason.UNSUPPORTED_HYDROMORPHONE_PARENTERAL
    if code in KETOBEMIDONE_CODES:
        return Reason.UNSUPPORTED_KETOBEMIDONE
    if code == MORPHINE_CODE and (
        route is AdministrationRoute.PARENTERAL
        or MORPHINE_DROPS_MARKER in product.form_lower
    ):
        return Reason.UNSUPPORTED_MORPHINE_DROPS_OR_PARENTERAL
    if product.form is PharmaceuticalForm.SUBLINGUAL_FILM:
        return Reason.UNSUPPORTED_FORM
    return None


class OmeqCalculator:
    """
    Rule engine over a fixed opioid reference table.

    `compute` is a pure function of its arguments: the same product, dose
    and strength always give the same result.
    """

    def __init__(
        self,
        references: Iterable[OpioidReference],
        logger: logging.Logger | None = None,
    ):
        self.references: tuple[OpioidReference, ...] = tuple(references)
        self.logger: logging.Logger = (logger or LOGGER).getChild(
            self.__class__.__name__
        )

    def find_reference(
        self, product: Product, route: AdministrationRoute | None = None
    ) -> OpioidReference | None:
        """
        First reference covering the product's classification code and the
        route (inferred from the product when not given).
        """
        route = route or infer_route(product)
        if route is None:
            return None
        for reference in self.references:
            if reference.covers(product.classification_code, route):
                return reference
        return None

    def compute(
        self,
        product: Product | None,
        daily_dose: float | None,
        strength: ResolvedStrength | None,
    ) -> CalculationResult:
        """
        Compute the OMEQ value, short-circuiting on the first condition that
        prevents it.

        Args:
            product: Resolved product, or None if nothing was recognized.

            daily_dose: Dose units per day (tablets, capsules, doses), or ml
                per day for concentrations. Ignored for patches.

            strength: Resolved strength of the product variant.
        """
        if product is None:
            return CalculationResult.failed(Reason.MISSING_INPUT)

        route = infer_route(product)
        if route is None:
            return CalculationResult.failed(Reason.NO_ROUTE)

        if (reason := _excluded(product, route)) is not None:
            self.logger.debug(
                f"{product.describe()} excluded from calculation: "
                f"{reason.value}"
            )
            return CalculationResult.failed(reason)

        reference = self.find_reference(product, route)
        if reference is None:
            for codes, reason in _MISSING_ROUTE_REASONS:
                if product.classification_code in codes:
                    return CalculationResult.failed(reason)
            return CalculationResult.failed(Reason.NO_OMEQ_FACTOR)

        if route is AdministrationRoute.TRANSDERMAL:
            # Patches are not dosed in discrete units
            mcg_per_hour = strength.to_mcg_per_hour() if strength else None
            if mcg_per_hour is None:
                return CalculationResult.failed(Reason.MISSING_STRENGTH)
            return CalculationResult.ok(mcg_per_hour * reference.omeq_factor)

        mg = strength.to_mg() if strength else None
        if mg is None:
            return CalculationResult.failed(Reason.MISSING_STRENGTH)

        if (
            daily_dose is None
            or math.isnan(daily_dose)
            or math.isinf(daily_dose)
            or daily_dose <= 0
        ):
            return CalculationResult.failed(Reason.MISSING_INPUT)

        return CalculationResult.ok(daily_dose * mg * reference.omeq_factor)


def references_path() -> Path:
    """Reference table file, overridable through the environment."""
    override = os.environ.get(REFERENCES_PATH_ENV)
    return Path(override) if override else DEFAULT_REFERENCES_PATH


@functools.cache
def default_calculator() -> OmeqCalculator:
    return OmeqCalculator(load_opioid_references(references_path()))


def compute_omeq(
    product: Product | None,
    daily_dose: float | None,
    strength: ResolvedStrength | None,
    calculator: OmeqCalculator | None = None,
) -> CalculationResult:
    """Compute with the given calculator or the packaged reference table."""
    return (calculator or default_calculator()).compute(
        product, daily_dose, strength
    )
