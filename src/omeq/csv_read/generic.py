"""
Generic CSV reader, able to read the TSV data tables shipped with the
package or supplied by the user.
"""

import logging
from abc import ABC
from collections.abc import Mapping
from os.path import expandvars
from pathlib import Path
from typing import TypeAlias

import polars as pl

from omeq.utils.exceptions import SchemaError
from omeq.utils.logger import LOGGER

Schema: TypeAlias = Mapping[str, type[pl.DataType] | pl.DataType]


class CSVReader(ABC):
    """
    Generic CSV reader, able to read CSV or TSV files lazily and cache their
    contents.
    """

    TABLE_SCHEMA: Schema
    TABLE_COLUMNS: list[str]

    def table_filter(self, frame: pl.LazyFrame) -> pl.LazyFrame:
        """
        Filter function to apply to the table.

        Modifications to polars.LazyFrame to optionally discard or otherwise
        modify rows. Defaults to noop.

        Read more at https://docs.pola.rs/user-guide/concepts/lazy-api/
        """
        return frame

    def __init__(
        self,
        path: Path,
        delimiter: str = "\t",
        quote_char: str | None = None,
    ):
        """
        Args:
            path: Path to the CSV file. Environment variables in the path
                are expanded.

            delimiter: Delimiter used in the CSV file. Defaults to "\\t".

            quote_char: Optional character used to quote fields. Defaults to
                `None` to disable all quote processing.
        """
        self.delimiter: str = delimiter
        self.path: Path = Path(expandvars(path))

        # Associate a logger with the pathname
        self.logger: logging.Logger = LOGGER.getChild(
            self.__class__.__name__
        ).getChild(self.path.name)

        self._lazy_frame: pl.LazyFrame = pl.scan_csv(
            source=self.path,
            separator=delimiter,
            quote_char=quote_char,
            has_header=True,
            # NOTE: supplying a `schema` parameter causes Polars to expect a
            # certain column ordering. We use implicitly unordered
            # `schema_overrides` instead.
            schema_overrides=self.TABLE_SCHEMA,
            infer_schema_length=0,  # We don't really need to infer anything
        )

        self._lazy_frame = self.table_filter(
            self._lazy_frame.select(self.TABLE_COLUMNS)
        )

        self.data: pl.DataFrame | None = None

        self.logger.debug(f"Preparing to read from {self.path}")

    def materialize(self):
        """
        Materialize the LazyFrame into a DataFrame. All filters from the
        lazy frame are applied on read.
        """
        if self.data is not None:
            return
        try:
            self.data = self._lazy_frame.collect()
        except pl.exceptions.ColumnNotFoundError as e:
            raise SchemaError(
                f"{self.path.name} does not match the expected columns "
                f"{self.TABLE_COLUMNS}: {e}"
            ) from e
        self.logger.info(f"{len(self.data):,} rows collected and cached")

    def collect(self) -> pl.DataFrame:
        """
        Collect the entire CSV file into a DataFrame.
        """
        if self.data is None:
            self.materialize()
            assert self.data is not None
        return self.data
