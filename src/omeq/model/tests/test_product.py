import pytest
import omeq.model.product as p
from omeq.utils.enums import PharmaceuticalForm
from omeq.utils.exceptions import CatalogRecordError


def test_variants_record():
    product = p.Product.from_record(
        "N02AA01",
        {
            "name": "Dolcontin",
            "manufacturer": "Mundipharma",
            "form": "depottablett",
            "variants": [
                {"strength": "10 mg", "productCodes": ["478685", 461400]},
                {"strength": "30 mg", "productNumbers": ["0478743"]},
                {"strength": "60 mg"},
            ],
        },
    )
    assert product.form is PharmaceuticalForm.EXTENDED_RELEASE_TABLET
    assert [v.strength for v in product.variants] == ["10 mg", "30 mg", "60 mg"]
    assert product.variants[0].product_codes == ("478685", "461400")
    # Zero padding is stripped
    assert product.variants[1].product_codes == ("478743",)
    assert product.variants[2].product_codes == ()
    assert product.legacy_codes == ()


def test_legacy_record_single_strength():
    product = p.Product.from_record(
        "N02AB02",
        {"name": "Petidin", "strengths": ["50 mg/ml"], "productNumbers": [1, 2]},
    )
    assert product.variants == (p.StrengthVariant("50 mg/ml", ("1", "2")),)
    assert product.legacy_codes == ()


def test_legacy_record_several_strengths():
    product = p.Product.from_record(
        "N02AB02",
        {"name": "Petidin", "strengths": ["10 mg", "50 mg"], "productNumbers": 7},
    )
    assert [v.product_codes for v in product.variants] == [(), ()]
    assert product.legacy_codes == ("7",)


def test_variants_preferred_over_legacy_lists():
    product = p.Product.from_record(
        "N02AA01",
        {
            "name": "Morfin",
            "variants": [{"strength": "10 mg", "productCodes": ["11"]}],
            "strengths": ["30 mg"],
            "productNumbers": ["22"],
        },
    )
    assert product.variants == (p.StrengthVariant("10 mg", ("11",)),)
    assert product.legacy_codes == ()


def test_describe():
    variant = p.StrengthVariant("10 mg", ("478685",))
    product = p.Product("N02AA01", "Dolcontin", "Mundipharma", "depottablett")
    assert product.describe(variant, "478685") == (
        "Dolcontin depottablett 10 mg (478685)"
    )
    assert p.Product("N02AA01", "Morfin").describe() == "Morfin"


def test_unknown_and_missing_form():
    assert p.Product("N02AA01", "X", form_text="pulver").form is (
        PharmaceuticalForm.OTHER
    )
    assert p.Product("N02AA01", "X").form is None
    assert p.Product("N02AA01", "X", form_text="Depotplaster").form is (
        PharmaceuticalForm.TRANSDERMAL_PATCH
    )


@pytest.mark.parametrize(
    "record",
    [
        {"name": "X", "variants": [{"strength": "10 mg", "productCodes": ["A1"]}]},
        {"name": "X", "variants": [{"strength": ""}]},
        {"name": "X", "variants": ["10 mg"]},
        {"name": "X", "productNumbers": {"a": 1}},
        "X",
    ],
)
def test_malformed_records(record):
    with pytest.raises(CatalogRecordError):
        p.Product.from_record("N02AA01", record)


def test_classification_code_required():
    with pytest.raises(CatalogRecordError):
        p.Product(" ", "Morfin")
