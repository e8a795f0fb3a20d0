"""Constants for the project."""

from pathlib import Path
from typing import Final

from omeq.utils.enums import AdministrationRoute, PharmaceuticalForm

DATA_DIR: Final[Path] = Path(__file__).parent.parent / "data"
DEFAULT_CATALOG_PATH: Final[Path] = DATA_DIR / "products.tsv"
DEFAULT_REFERENCES_PATH: Final[Path] = DATA_DIR / "opioid_references.tsv"

# Environment variables that override the packaged data files
CATALOG_PATH_ENV: Final[str] = "OMEQ_CATALOG"
REFERENCES_PATH_ENV: Final[str] = "OMEQ_REFERENCES"

# Packaging, form and filler words frequently present in pasted product lines
NOISE_TOKENS: Final[frozenset[str]] = frozenset({
    "stk",
    "stk.",
    "blister",
    "blisterpakning",
    "pakning",
    "blist",
    "modi",
    "modif",
    "modif.",
    "modifisert",
    "kap",
    "kaps",
    "kapsel",
    "tab",
    "tablett",
    "mikstur",
    "susp",
    "inj",
    "inf",
    "oppl",
    "pulv",
    "pulver",
    "væske",
    "aerosol",
    "inh",
    "spray",
    "dråper",
    "dr",
    "depot",
    "retard",
    "sr",
    "cr",
    "xr",
    "frisett",
    "fri",
})

UNIT_TOKENS: Final[frozenset[str]] = frozenset({
    "mg",
    "g",
    "mcg",
    "ug",
    "µg",
    "mikrog",
    "mikrogram",
    "ml",
    "dose",
    "t",
    "time",
})

# Ranking weights
TEXT_TOKEN_SCORE: Final[int] = 1
NUMERIC_TOKEN_SCORE: Final[int] = 2
REQUIRED_TOKEN_SCORE: Final[int] = 3
WHOLE_QUERY_SCORE: Final[int] = 6
WHOLE_QUERY_MIN_LENGTH: Final[int] = 8
MEANINGFUL_TOKEN_MIN_LENGTH: Final[int] = 4
MAX_REQUIRED_TEXT_TOKENS: Final[int] = 2
DEFAULT_MAX_RESULTS: Final[int] = 25

# Anything above this many units per day is most likely a dose in mg
MAX_UNITS_PER_DAY: Final[float] = 20
DISPLAY_DECIMALS: Final[int] = 2

FORM_ROUTES: Final[dict[PharmaceuticalForm, AdministrationRoute]] = {
    PharmaceuticalForm.TRANSDERMAL_PATCH: AdministrationRoute.TRANSDERMAL,
    PharmaceuticalForm.INJECTION: AdministrationRoute.PARENTERAL,
    PharmaceuticalForm.INFUSION_INJECTION_SOLUTION: (
        AdministrationRoute.PARENTERAL
    ),
    PharmaceuticalForm.DEPOT_INJECTION_SOLUTION: AdministrationRoute.PARENTERAL,
    PharmaceuticalForm.NASAL_SPRAY: AdministrationRoute.INTRANASAL,
    PharmaceuticalForm.SUBLINGUAL_TABLET: AdministrationRoute.SUBLINGUAL,
    PharmaceuticalForm.SUBLINGUAL_FILM: AdministrationRoute.SUBLINGUAL,
    PharmaceuticalForm.LYOPHILISATE_TABLET: AdministrationRoute.SUBLINGUAL,
    PharmaceuticalForm.SUPPOSITORY: AdministrationRoute.RECTAL,
    PharmaceuticalForm.ORAL_DROPS: AdministrationRoute.ORAL,
    PharmaceuticalForm.TABLET: AdministrationRoute.ORAL,
    PharmaceuticalForm.EFFERVESCENT_TABLET: AdministrationRoute.ORAL,
    PharmaceuticalForm.EXTENDED_RELEASE_TABLET: AdministrationRoute.ORAL,
    PharmaceuticalForm.CAPSULE: AdministrationRoute.ORAL,
    PharmaceuticalForm.ORAL_MIXTURE: AdministrationRoute.ORAL,
}

# Form text fragments that force a route regardless of the form table.
# Oral solutions may carry mg/ml strengths but are still taken by mouth.
ORAL_FORM_MARKERS: Final[tuple[str, ...]] = (
    "mikstur",
    "dråpe",
    "dråper",
    "oral",
    "oppløsning",
    "løsning",
    "suspensjon",
)
PARENTERAL_FORM_MARKERS: Final[tuple[str, ...]] = ("injeks", "infus")
# Liquids dosed in ml per day
LIQUID_FORM_MARKERS: Final[tuple[str, ...]] = ("mikstur", "oral", "dråpe")

# ATC codes with fixed clinical rules
HYDROMORPHONE_CODE: Final[str] = "N02AA03"
KETOBEMIDONE_CODES: Final[frozenset[str]] = frozenset({"N02AB01", "N02AG02"})
MORPHINE_CODE: Final[str] = "N02AA01"
MORPHINE_DROPS_MARKER: Final[str] = "dråpe"
CODEINE_CODES: Final[frozenset[str]] = frozenset({
    "R05DA04",
    "N02AJ06",
    "N02AA59",
})
METHADONE_CODES: Final[frozenset[str]] = frozenset({"N07BC02"})
OXYCODONE_CODES: Final[frozenset[str]] = frozenset({"N02AA05", "N02AA55"})
