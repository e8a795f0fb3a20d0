import math

import pytest
import omeq.process.equivalence as e
from omeq.model import OpioidReference, Product, ResolvedStrength
from omeq.utils.enums import AdministrationRoute as Route
from omeq.utils.enums import Reason

BUPRENORPHINE_PATCH_FACTOR = 2.2


@pytest.fixture
def calculator():
    return e.OmeqCalculator([
        OpioidReference(
            "Morfin", frozenset({"N02AA01"}), frozenset({Route.ORAL}), 1.0
        ),
        OpioidReference(
            "Oksykodon",
            frozenset({"N02AA05", "N02AA55"}),
            frozenset({Route.ORAL}),
            1.5,
        ),
        OpioidReference(
            "Hydromorfon",
            frozenset({"N02AA03"}),
            frozenset({Route.ORAL, Route.PARENTERAL}),
            5.0,
        ),
        OpioidReference(
            "Buprenorfin",
            frozenset({"N02AE01"}),
            frozenset({Route.TRANSDERMAL}),
            BUPRENORPHINE_PATCH_FACTOR,
        ),
        OpioidReference(
            "Metadon", frozenset({"N07BC02"}), frozenset({Route.ORAL}), 6.0
        ),
    ])


def product(code, form, name="Test"):
    return Product(code, name, form_text=form)


TEN_MG = ResolvedStrength(10, "mg")
PATCH_10 = ResolvedStrength(10, "µg", per_hour=True)


@pytest.mark.parametrize(
    "form, route",
    [
        ("depotplaster", Route.TRANSDERMAL),
        ("injeksjon", Route.PARENTERAL),
        ("infusjons-/injeksjonsvæske", Route.PARENTERAL),
        ("nesespray", Route.INTRANASAL),
        ("sublingvaltablett", Route.SUBLINGUAL),
        ("lyofilisattablett", Route.SUBLINGUAL),
        ("stikkpille", Route.RECTAL),
        ("depottablett", Route.ORAL),
        ("brusetablett", Route.ORAL),
        ("mikstur", Route.ORAL),
        ("dråper", Route.ORAL),
        # Free text overrides
        ("mikstur, oppløsning", Route.ORAL),
        ("orale dråper, løsning", Route.ORAL),
        ("pulver til injeksjonsvæske", Route.PARENTERAL),
        ("konsentrat til infusjonsvæske", Route.PARENTERAL),
        ("annet", None),
        (None, None),
    ],
)
def test_infer_route(form, route):
    assert e.infer_route(product("N02AA01", form)) is route


def test_oral_tablet(calculator):
    result = calculator.compute(product("N02AA05", "depottablett"), 4, TEN_MG)
    assert result.reason is Reason.OK
    assert result.omeq == 60


def test_patch_ignores_dose(calculator):
    patch = product("N02AE01", "depotplaster")
    expected = 10 * BUPRENORPHINE_PATCH_FACTOR
    assert calculator.compute(patch, None, PATCH_10).omeq == expected
    assert calculator.compute(patch, 3, PATCH_10).omeq == expected
    assert calculator.compute(patch, -1, PATCH_10).reason is Reason.OK


def test_patch_needs_rate(calculator):
    patch = product("N02AE01", "depotplaster")
    result = calculator.compute(patch, 1, ResolvedStrength(10, "µg"))
    assert result.reason is Reason.MISSING_STRENGTH
    assert calculator.compute(patch, 1, None).reason is Reason.MISSING_STRENGTH
    rate_unit = ResolvedStrength(5, "µg/time")
    assert calculator.compute(patch, None, rate_unit).omeq == pytest.approx(11)


def test_units(calculator):
    tablet = product("N02AA01", "tablett")
    assert calculator.compute(tablet, 2, ResolvedStrength(1, "g")).omeq == 2000
    micrograms = calculator.compute(tablet, 2, ResolvedStrength(500, "µg"))
    assert micrograms.omeq == pytest.approx(1)


def test_mixture_dose_is_ml(calculator):
    mixture = product("N07BC02", "mikstur")
    result = calculator.compute(mixture, 3, ResolvedStrength(2, "mg/ml"))
    assert result.omeq == 36


def test_missing_strength(calculator):
    tablet = product("N02AA05", "tablett")
    for dose in (None, 0, 4):
        result = calculator.compute(tablet, dose, None)
        assert result.reason is Reason.MISSING_STRENGTH
        assert result.omeq is None
    # A rate has no mg equivalent
    assert calculator.compute(tablet, 4, PATCH_10).reason is (
        Reason.MISSING_STRENGTH
    )


@pytest.mark.parametrize("dose", [None, 0, -2, math.nan, math.inf])
def test_missing_dose(calculator, dose):
    result = calculator.compute(product("N02AA05", "tablett"), dose, TEN_MG)
    assert result.reason is Reason.MISSING_INPUT
    assert result.omeq is None


def test_missing_product(calculator):
    assert calculator.compute(None, 4, TEN_MG).reason is Reason.MISSING_INPUT


def test_no_route(calculator):
    assert calculator.compute(product("N02AA01", None), 4, TEN_MG).reason is (
        Reason.NO_ROUTE
    )
    assert calculator.compute(product("N02AA01", "annet"), 4, TEN_MG).reason is (
        Reason.NO_ROUTE
    )


def test_exclusions_before_reference_lookup(calculator):
    # A hydromorphone reference exists for parenteral use, but is not used
    for dose, strength in ((4, TEN_MG), (None, None), (-1, PATCH_10)):
        result = calculator.compute(
            product("N02AA03", "injeksjon"), dose, strength
        )
        assert result.reason is Reason.UNSUPPORTED_HYDROMORPHONE_PARENTERAL
    oral = calculator.compute(product("N02AA03", "kapsel"), 4, TEN_MG)
    assert oral.omeq == 200


@pytest.mark.parametrize(
    "code, form, reason",
    [
        ("N02AB01", "tablett", Reason.UNSUPPORTED_KETOBEMIDONE),
        ("N02AG02", "stikkpille", Reason.UNSUPPORTED_KETOBEMIDONE),
        ("N02AA01", "injeksjon", Reason.UNSUPPORTED_MORPHINE_DROPS_OR_PARENTERAL),
        ("N02AA01", "dråper", Reason.UNSUPPORTED_MORPHINE_DROPS_OR_PARENTERAL),
        ("N02AE01", "sublingvalfilm", Reason.UNSUPPORTED_FORM),
        ("N02AJ06", "tablett", Reason.UNSUPPORTED_CODEINE),
        ("R05DA04", "stikkpille", Reason.UNSUPPORTED_CODEINE),
        ("N07BC02", "injeksjon", Reason.UNSUPPORTED_METHADONE),
        ("N02AA05", "injeksjon", Reason.UNSUPPORTED_OXYCODONE),
        ("N02AB02", "tablett", Reason.NO_OMEQ_FACTOR),
        ("N02AE01", "sublingvaltablett", Reason.NO_OMEQ_FACTOR),
    ],
)
def test_reasons(calculator, code, form, reason):
    result = calculator.compute(product(code, form), 4, TEN_MG)
    assert result.reason is reason
    assert result.omeq is None


def test_find_reference(calculator):
    reference = calculator.find_reference(product("N02AA55", "depottablett"))
    assert reference.substance == "Oksykodon"
    assert calculator.find_reference(product("N02AA55", "injeksjon")) is None


def test_idempotent(calculator):
    args = (product("N02AA05", "depottablett"), 3, ResolvedStrength(0.1, "mg"))
    first = calculator.compute(*args)
    second = calculator.compute(*args)
    assert first == second
    assert first.omeq.hex() == second.omeq.hex()


def test_shipped_references():
    patch = Product("N02AE01", "Norspan", form_text="depotplaster")
    result = e.compute_omeq(patch, None, PATCH_10)
    assert result.reason is Reason.OK
    assert result.omeq == pytest.approx(22)

    tablet = Product("N02AA05", "OxyContin", form_text="depottablett")
    assert e.compute_omeq(tablet, 4, TEN_MG).omeq == 60
