import pytest
import omeq.process.row as row
from omeq.utils.enums import AdministrationRoute, Reason


@pytest.mark.parametrize(
    "text, dose",
    [
        ("4", 4.0),
        (" 2,5 ", 2.5),
        ("0.5", 0.5),
        ("", None),
        (None, None),
        ("to", None),
        ("1,5,2", None),
        ("inf", None),
        ("nan", None),
    ],
)
def test_parse_dose(text, dose):
    assert row.parse_dose(text) == dose


@pytest.mark.parametrize(
    "value, text",
    [
        (60.0, "60"),
        (22.000000000000004, "22"),
        (0.125, "0.13"),
        (12.5, "12.5"),
        (1.005, "1.01"),
        (None, ""),
    ],
)
def test_format_omeq(value, text):
    assert row.format_omeq(value) == text


def test_tablet_row():
    evaluation = row.evaluate_row("OxyContin 10 mg", "4")
    assert evaluation.resolution.product.name == "OxyContin"
    assert evaluation.route is AdministrationRoute.ORAL
    assert evaluation.result.reason is Reason.OK
    assert evaluation.omeq_text == "60"
    assert evaluation.dose_unit == row.UNITS_PER_DAY
    assert evaluation.implied_daily_mg == 40
    assert evaluation.help_text == "Oksykodon/nalokson regnes som oksykodon."


def test_dose_over_limit_is_withheld():
    evaluation = row.evaluate_row("OxyContin 10 mg", "40")
    assert evaluation.dose_over_limit
    assert evaluation.daily_dose == 40
    assert evaluation.result.reason is Reason.MISSING_INPUT
    assert evaluation.result.omeq is None
    assert evaluation.implied_daily_mg == 400


def test_patch_row_ignores_dose():
    evaluation = row.evaluate_row("24773", "60")
    assert evaluation.is_patch
    assert evaluation.dose_unit is None
    assert not evaluation.dose_over_limit
    assert evaluation.implied_daily_mg is None
    assert evaluation.result.reason is Reason.OK
    assert evaluation.result.omeq == pytest.approx(22)
    assert evaluation.help_text.startswith("Plasterstyrke")


def test_mixture_row():
    evaluation = row.evaluate_row("OxyNorm mikstur 10 mg/ml", "3")
    assert evaluation.dose_unit == row.ML_PER_DAY
    assert evaluation.result.omeq == 45


def test_excluded_row_hides_reference():
    evaluation = row.evaluate_row("585764", "2")
    assert evaluation.result.reason is Reason.UNSUPPORTED_HYDROMORPHONE_PARENTERAL
    assert evaluation.reference is None
    assert evaluation.help_text is None


def test_help_text_only_for_usable_rows():
    evaluation = row.evaluate_row("Metadon Abcur 5 mg", "")
    assert evaluation.result.reason is Reason.MISSING_INPUT
    assert evaluation.help_text.startswith("Metadon")

    injection = row.evaluate_row("OxyNorm infusjons 10 mg/ml", "1")
    assert injection.result.reason is Reason.UNSUPPORTED_OXYCODONE
    assert injection.help_text is None


def test_unresolved_row():
    evaluation = row.evaluate_row("", "4")
    assert evaluation.resolution.product is None
    assert evaluation.route is None
    assert evaluation.result.reason is Reason.MISSING_INPUT
    assert evaluation.omeq_text == ""
