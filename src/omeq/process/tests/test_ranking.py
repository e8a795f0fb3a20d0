import pytest
import omeq.process.ranking as r
from omeq.catalog import build_index


@pytest.fixture
def index():
    return build_index({
        "N02AA05": [
            {
                "name": "OxyContin",
                "manufacturer": "Mundipharma",
                "form": "depottablett",
                "variants": [
                    {"strength": "4 mg", "productCodes": ["9001"]},
                    {"strength": "40 mg", "productCodes": ["5715"]},
                    {"strength": "400 mg", "productCodes": ["9002"]},
                ],
            },
            {
                "name": "Oxycodone",
                "manufacturer": "Xiromed",
                "form": "kapsel",
                "variants": [
                    {"strength": "10 mg", "productCodes": ["40"]},
                    {"strength": "5 mg", "productCodes": ["4001"]},
                ],
            },
        ],
        "N02AA01": [
            {
                "name": "Dolcontin",
                "manufacturer": "Mundipharma",
                "form": "depottablett",
                "variants": [
                    {"strength": "10 mg", "productCodes": ["478685", "461400"]},
                    {"strength": "100 mg", "productCodes": ["478875"]},
                ],
            },
        ],
        "N02AE01": [
            {
                "name": "Temgesic",
                "form": "sublingvaltablett",
                "variants": [
                    {"strength": "0,2 mg", "productCodes": ["485473"]},
                    {"strength": "0,4 mg", "productCodes": ["424959"]},
                ],
            },
        ],
    })


def codes(options):
    return [option.code for option in options]


def test_numeric_strength_is_exact(index):
    assert codes(r.rank("oxycontin 40 mg", index)) == ["5715"]
    assert codes(r.rank("oxycontin 4 mg", index)) == ["9001"]


def test_decimal_strength_required(index):
    assert codes(r.rank("temg 0,4", index)) == ["424959"]


def test_text_prefix_matching(index):
    # Manufacturer names are searchable
    assert codes(r.rank("xirom", index)) == ["40", "4001"]
    assert r.rank("medx", index) == []


def test_required_text_is_prefix_only(index):
    # Inner parts of words do not satisfy a required token
    assert r.rank("romed", index) == []
    assert r.rank("codone", index) == []
    assert codes(r.rank("oxycod", index)) == ["40", "4001"]


def test_numbers_score_containment_and_exact_match(index):
    five_mg = index.options_with_code("4001")[0]
    ten_mg = index.options_with_code("40")[0]
    # "oxy" is too short to be required, "5" has no unit
    terms = r.QueryTerms.from_query("oxy 5")
    assert terms.required_text == []
    assert terms.required_strength == []
    # Contained (+1) and an exact token (+2) on top of "oxy" (+1)
    assert r.score_option(terms, five_mg) == 4
    assert r.score_option(terms, ten_mg) == 1

    fifteen = build_index({
        "N02AA05": [{"name": "Oxy", "form": "tablett", "strengths": ["15 mg"]}]
    }).options[0]
    # Contained in "15" but not an exact token
    assert r.score_option(terms, fifteen) == 2


def test_ties_keep_catalog_order(index):
    assert codes(r.rank("dolcontin", index)) == ["478685", "461400", "478875"]


def test_whole_line_bonus(index):
    assert codes(r.rank("Dolcontin depottablett 100 mg", index)) == ["478875"]
    top = r.rank("Dolcontin depottablett 10 mg (461400)", index)[0]
    assert top.code == "461400"


def test_options_reference_products(index):
    option = r.rank("dolcontin", index)[0]
    assert option.product.classification_code == "N02AA01"


def test_adding_required_token_never_lowers_rank(index):
    target = index.options_with_code("478685")[0]
    before = r.QueryTerms.from_query("dolcontin")
    after = r.QueryTerms.from_query("dolcontin depottablett")
    assert r.score_option(after, target) > r.score_option(before, target)

    position_before = r.rank("dolcontin", index).index(target)
    position_after = r.rank("dolcontin depottablett", index).index(target)
    assert position_after <= position_before


def test_failing_required_token_excluded(index):
    terms = r.QueryTerms.from_query("dolcontin 100 mg")
    assert terms.required_text == ["dolcontin"]
    assert terms.required_strength == ["100"]
    assert r.score_option(terms, index.options_with_code("478685")[0]) is None


def test_code_prefix(index):
    assert codes(r.rank("4", index)) == [
        "40",
        "4001",
        "461400",
        "478685",
        "478875",
        "485473",
        "424959",
    ]
    assert codes(r.rank("40", index)) == ["40", "4001"]
    assert codes(r.rank("0040", index)) == ["40", "4001"]
    assert codes(r.rank("4788", index)) == ["478875"]
    assert r.rank("7", index) == []


def test_max_results(index):
    assert len(r.rank("4", index, max_results=2)) == 2
    assert r.rank("4", index, max_results=0) == []
    assert r.rank("", index) == []


def test_rank_simple(index):
    assert codes(r.rank_simple("dolc", index)) == ["461400", "478685", "478875"]
    # Starts with before contains
    labels = [option.label for option in r.rank_simple("oxy", index)]
    assert all(label.startswith("Oxy") for label in labels)
    contains = r.rank_simple("contin", index)
    assert {option.product.name for option in contains} == {
        "Dolcontin",
        "OxyContin",
    }
    assert len(r.rank_simple("", index, max_results=3)) == 3
