import argparse
import pathlib

from omeq.utils.constants import DEFAULT_MAX_RESULTS

_DESCRIPTION = """\
Identify opioid medications from product codes or pasted product lines and
compute the oral morphine equivalent (OMEQ) daily dose.
"""


def _get_version() -> str:
    """Get the version of the package."""
    # Kept in a plain file next to the package, shipped as package data
    with open(pathlib.Path(__file__).parent.parent / "__version__") as f:
        return f.read().strip()


class OmeqArgsParser(argparse.ArgumentParser):
    """Parser for command line arguments for main entry point of OMEQ CLI."""

    def __init__(self):
        super().__init__(
            prog="omeq",
            description=_DESCRIPTION,
            formatter_class=argparse.RawTextHelpFormatter,
        )

        self.add_argument(
            "--version",
            action="version",
            version="OMEQ " + _get_version(),
        )

        # Data sources
        self.add_argument(
            "--catalog",
            type=pathlib.Path,
            help=(
                "Path to the product catalog: a TSV/CSV product table or a "
                "JSON file in the nested catalog format. Defaults to "
                "$OMEQ_CATALOG or the catalog shipped with the package."
            ),
            dest="catalog",
            default=None,
        )
        self.add_argument(
            "--references",
            type=pathlib.Path,
            help=(
                "Path to the opioid reference table with OMEQ factors. "
                "Defaults to $OMEQ_REFERENCES or the table shipped with the "
                "package."
            ),
            dest="references",
            default=None,
        )
        self.add_argument(
            "-d",
            "--debug",
            action="store_true",
            help="Enable debug logging to stderr.",
            default=False,
            dest="debug",
        )
        self.add_argument(
            "--log-file",
            type=pathlib.Path,
            help="Also write the full debug log to this file.",
            dest="log_file",
            default=None,
        )

        # Sub-parsers are plain parsers; this class takes no arguments
        commands = self.add_subparsers(
            title="commands",
            dest="command",
            required=True,
            parser_class=argparse.ArgumentParser,
        )

        resolve = commands.add_parser(
            "resolve",
            help="Resolve a product code or product line to a product.",
        )
        resolve.add_argument(
            "text",
            type=str,
            help='Product code or text, e.g. "478685" or "Dolcontin 10 mg".',
        )

        suggest = commands.add_parser(
            "suggest",
            help="List catalog options matching a partial input.",
        )
        suggest.add_argument("query", type=str, help="Partial input.")
        suggest.add_argument(
            "-n",
            "--max-results",
            type=int,
            help=f"Maximum number of options. Default is {DEFAULT_MAX_RESULTS}.",
            default=DEFAULT_MAX_RESULTS,
            dest="max_results",
        )
        suggest.add_argument(
            "--simple",
            action="store_true",
            help="Use plain label matching instead of token scoring.",
            default=False,
            dest="simple",
        )

        calc = commands.add_parser(
            "calc",
            help="Compute OMEQ for a medication and a daily dose.",
        )
        calc.add_argument("medication", type=str, help="Product code or text.")
        calc.add_argument(
            "dose",
            type=str,
            nargs="?",
            default="",
            help=(
                "Number of units (tablets, capsules, doses) or ml per day. "
                "Ignored for patches."
            ),
        )

        validate = commands.add_parser(
            "validate",
            help="Check the catalog for duplicate codes and bad strengths.",
        )
        validate.add_argument(
            "-o",
            "--output",
            type=pathlib.Path,
            help="Write the found issues to this CSV file.",
            default=None,
            dest="output",
        )
