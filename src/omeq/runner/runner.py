import argparse  # for Typing
import functools  # for lazily loaded data
import logging  # for logging
import sys  # To read command line arguments
from collections.abc import Sequence  # for Typing

import polars as pl  # for tabular output
from omeq.catalog import CatalogIndex, build_index, default_index
from omeq.csv_read.catalog import load_catalog, load_opioid_references
from omeq.process import (
    OmeqCalculator,
    default_calculator,
    evaluate_row,
    rank,
    rank_simple,
    resolve,
)
from omeq.process.row import ML_PER_DAY, RowEvaluation
from omeq.runner.cli_args import OmeqArgsParser
from omeq.utils.enums import Reason
from omeq.utils.exceptions import CatalogError, CSVReaderError
from omeq.utils.logger import LOGGER, attach_file_handler, set_console_level
from omeq.utils.utils import format_number

_UNSUPPORTED = "Ikke støttet i enkel beregning enda."

# Short Norwegian status line per reason; OK carries no status
REASON_MESSAGES: dict[Reason, str] = {
    Reason.OK: "",
    Reason.MISSING_INPUT: "Mangler døgndose.",
    Reason.MISSING_STRENGTH: "Fant ikke styrke (mg) for preparatet.",
    Reason.NO_ROUTE: "Fant ikke administrasjonsvei for preparatet.",
    Reason.NO_OMEQ_FACTOR: (
        "Fant ikke OMEQ-faktor for valgt administrasjonsvei."
    ),
    Reason.UNSUPPORTED_FORM: _UNSUPPORTED,
    Reason.UNSUPPORTED_CODEINE: _UNSUPPORTED,
    Reason.UNSUPPORTED_METHADONE: _UNSUPPORTED,
    Reason.UNSUPPORTED_OXYCODONE: _UNSUPPORTED,
    Reason.UNSUPPORTED_HYDROMORPHONE_PARENTERAL: _UNSUPPORTED,
    Reason.UNSUPPORTED_KETOBEMIDONE: _UNSUPPORTED,
    Reason.UNSUPPORTED_MORPHINE_DROPS_OR_PARENTERAL: _UNSUPPORTED,
}
PATCH_MISSING_STRENGTH = "Fant ikke plasterstyrke (µg/time) for preparatet."
UNRESOLVED = "Fant ikke preparatet."


def status_text(row: RowEvaluation) -> str:
    """Status line for an evaluated row, empty when there is nothing to say."""
    if not row.resolution.is_resolved:
        return UNRESOLVED
    if row.result.reason is Reason.MISSING_STRENGTH and row.is_patch:
        return PATCH_MISSING_STRENGTH
    return REASON_MESSAGES[row.result.reason]


def dose_hint(row: RowEvaluation) -> str:
    """Guidance for the daily dose field."""
    if row.is_patch:
        return ""

    liquid = row.dose_unit == ML_PER_DAY
    plain = (
        "Skriv antall ml per døgn."
        if liquid
        else "Skriv antall tablett/kapsel/dose per døgn (ikke mg)."
    )
    if row.dose_over_limit:
        return "Det ser ut som du har skrevet mg. " + (
            "Skriv antall ml per døgn."
            if liquid
            else "Skriv antall tablett/kapsel/dose per døgn."
        )
    if row.implied_daily_mg is None:
        return plain

    substance = row.reference.substance.lower() if row.reference else "virkestoff"
    return (
        f"Tilsvarer {format_number(row.implied_daily_mg)} mg {substance} "
        f"per døgn."
    )


class OmeqRunner:
    def __init__(self, argv: Sequence[str] | None = None):
        parser = OmeqArgsParser()
        self._args: argparse.Namespace = parser.parse_args(
            sys.argv[1:] if argv is None else argv
        )
        self.logger: logging.Logger = LOGGER.getChild(self.__class__.__name__)

    @functools.cached_property
    def index(self) -> CatalogIndex:
        if self._args.catalog is None:
            return default_index()
        return build_index(load_catalog(self._args.catalog))

    @functools.cached_property
    def calculator(self) -> OmeqCalculator:
        if self._args.references is None:
            return default_calculator()
        return OmeqCalculator(
            load_opioid_references(self._args.references), logger=self.logger
        )

    def run(self) -> int:
        """Run the selected command and return the process exit code."""
        self._configure_logging()

        commands = {
            "resolve": self._resolve,
            "suggest": self._suggest,
            "calc": self._calc,
            "validate": self._validate,
        }

        try:
            return commands[self._args.command]()
        except (CatalogError, CSVReaderError, OSError) as e:
            self.logger.error(f"Could not load data: {e}")
            return 2

    def _configure_logging(self):
        # If argument -d is passed, enable debug logging to stderr
        if self._args.debug:
            set_console_level(logging.DEBUG)
            LOGGER.debug("Debug logging to stderr enabled")

        if self._args.log_file is not None:
            attach_file_handler(self._args.log_file)

    def _resolve(self) -> int:
        resolution = resolve(self._args.text, self.index)
        if resolution.product is None:
            print(UNRESOLVED)
            if resolution.strength is not None:
                print(
                    f"Styrke: {format_number(resolution.strength.value)} "
                    f"{resolution.strength.unit}"
                )
            return 1

        product = resolution.product
        print(
            resolution.canonical_text
            or product.describe(resolution.variant, resolution.code)
        )
        print(f"ATC: {product.classification_code}")
        if product.manufacturer:
            print(f"Produsent: {product.manufacturer}")
        if (strength := resolution.strength) is not None:
            rate = "/time" if strength.per_hour else ""
            print(f"Styrke: {format_number(strength.value)} {strength.unit}{rate}")
        return 0

    def _suggest(self) -> int:
        ranker = rank_simple if self._args.simple else rank
        options = ranker(self._args.query, self.index, self._args.max_results)
        if not options:
            print(UNRESOLVED)
            return 1

        print(
            pl.DataFrame(
                {
                    "product_code": [o.code for o in options],
                    "label": [o.label for o in options],
                    "classification_code": [
                        o.product.classification_code for o in options
                    ],
                },
                schema={
                    "product_code": pl.Utf8,
                    "label": pl.Utf8,
                    "classification_code": pl.Utf8,
                },
            )
        )
        return 0

    def _calc(self) -> int:
        row = evaluate_row(
            self._args.medication,
            self._args.dose,
            index=self.index,
            calculator=self.calculator,
        )

        resolution = row.resolution
        if resolution.product is not None:
            print(
                resolution.canonical_text
                or resolution.product.describe(resolution.variant, resolution.code)
            )
        if row.result.is_ok:
            print(f"OMEQ: {row.omeq_text} mg per døgn")
        if status := status_text(row):
            print(status)
        if resolution.is_resolved and (hint := dose_hint(row)):
            print(hint)
        if row.help_text:
            print(row.help_text)

        return 0 if row.result.is_ok else 1

    def _validate(self) -> int:
        issues = self.index.issues
        frame = pl.DataFrame(
            {
                "kind": [issue.kind.value for issue in issues],
                "message": [issue.message for issue in issues],
                "records": ["; ".join(issue.records) for issue in issues],
            },
            schema={"kind": pl.Utf8, "message": pl.Utf8, "records": pl.Utf8},
        )

        if self._args.output is not None:
            frame.write_csv(self._args.output)
            self.logger.info(
                f"Wrote {len(frame):,} issues to {self._args.output}"
            )

        if frame.is_empty():
            print("Ingen feil funnet i katalogen.")
            return 0
        print(frame)
        return 1
