"""
Readers for the product catalog and the opioid reference table.

The catalog TSV is flat, one row per product code (an empty code for
strengths without packs, an empty strength for products without
strengths), and is folded back into the nested catalog input format:
`{classification_code: [{name, manufacturer, form, variants: [...]}]}`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TypeAlias

import polars as pl
from typing_extensions import override

from omeq.csv_read.generic import CSVReader, Schema
from omeq.model import OpioidReference
from omeq.utils.classes import PlRealNumber, PlString
from omeq.utils.enums import AdministrationRoute
from omeq.utils.exceptions import CatalogRecordError
from omeq.utils.logger import LOGGER

CatalogMapping: TypeAlias = dict[str, list[dict[str, Any]]]

_LIST_SEPARATOR = ";"


def _strip_all(frame: pl.LazyFrame, columns: list[str]) -> pl.LazyFrame:
    return frame.with_columns(pl.col(columns).str.strip_chars())


class ProductTable(CSVReader):
    TABLE_SCHEMA: Schema = {
        "classification_code": PlString,
        "name": PlString,
        "manufacturer": PlString,
        "form": PlString,
        "strength": PlString,
        "product_code": PlString,
    }

    TABLE_COLUMNS: list[str] = list(TABLE_SCHEMA.keys())

    _PRODUCT_KEY: list[str] = [
        "classification_code",
        "name",
        "manufacturer",
        "form",
    ]

    @override
    def table_filter(self, frame: pl.LazyFrame) -> pl.LazyFrame:
        return _strip_all(frame, self.TABLE_COLUMNS).filter(
            pl.col("classification_code").is_not_null()
        )

    def to_catalog(self) -> CatalogMapping:
        """
        Fold the flat rows into the nested catalog input format, keeping the
        file order of products and strengths.
        """
        variants = (
            self.collect()
            .group_by([*self._PRODUCT_KEY, "strength"], maintain_order=True)
            .agg(pl.col("product_code").drop_nulls())
        )

        records: dict[tuple[str | None, ...], dict[str, Any]] = {}
        catalog: CatalogMapping = {}
        for row in variants.iter_rows(named=True):
            key = tuple(row[column] for column in self._PRODUCT_KEY)
            record = records.get(key)
            if record is None:
                record = {
                    "name": row["name"],
                    "manufacturer": row["manufacturer"],
                    "form": row["form"],
                    "variants": [],
                }
                records[key] = record
                catalog.setdefault(row["classification_code"], []).append(
                    record
                )

            if row["strength"] is None:
                # Codes without a strength can not be tied to a variant
                record.setdefault("productNumbers", []).extend(
                    row["product_code"]
                )
                continue

            record["variants"].append({
                "strength": row["strength"],
                "productCodes": row["product_code"],
            })

        self.logger.info(
            f"Folded {len(variants):,} strength rows into {len(records):,} "
            f"products"
        )
        return catalog


class OpioidReferenceTable(CSVReader):
    TABLE_SCHEMA: Schema = {
        "substance": PlString,
        "classification_codes": PlString,
        "routes": PlString,
        "omeq_factor": PlRealNumber,
        "help_text": PlString,
    }

    TABLE_COLUMNS: list[str] = list(TABLE_SCHEMA.keys())

    @override
    def table_filter(self, frame: pl.LazyFrame) -> pl.LazyFrame:
        frame = _strip_all(frame, ["substance", "help_text"])
        return frame.with_columns(
            pl.col("classification_codes", "routes")
            .str.split(_LIST_SEPARATOR)
            .list.eval(pl.element().str.strip_chars())
            .list.eval(pl.element().filter(pl.element() != ""))
        )

    def to_references(self) -> tuple[OpioidReference, ...]:
        references: list[OpioidReference] = []
        for row in self.collect().iter_rows(named=True):
            try:
                routes = frozenset(
                    AdministrationRoute(route.lower())
                    for route in row["routes"] or []
                )
            except ValueError as e:
                raise CatalogRecordError(
                    f"{row['substance']}: unknown administration route: {e}"
                ) from e

            references.append(
                OpioidReference(
                    substance=row["substance"] or "",
                    classification_codes=frozenset(
                        row["classification_codes"] or []
                    ),
                    routes=routes,
                    omeq_factor=(
                        row["omeq_factor"]
                        if row["omeq_factor"] is not None
                        else float("nan")
                    ),
                    help_text=row["help_text"],
                )
            )
        return tuple(references)


def load_catalog(path: Path) -> CatalogMapping:
    """
    Read a catalog file: `.json` in the nested input format, anything else
    as a flat product table (`.csv` comma separated, otherwise TSV).
    """
    path = Path(path)
    if path.suffix.lower() == ".json":
        LOGGER.getChild("load_catalog").info(f"Reading JSON catalog {path}")
        with open(path, encoding="utf-8") as f:
            catalog = json.load(f)
        if not isinstance(catalog, dict):
            raise CatalogRecordError(
                f"{path.name}: catalog must map classification codes to "
                f"product lists."
            )
        return catalog

    delimiter = "," if path.suffix.lower() == ".csv" else "\t"
    return ProductTable(path, delimiter=delimiter).to_catalog()


def load_opioid_references(path: Path) -> tuple[OpioidReference, ...]:
    delimiter = "," if Path(path).suffix.lower() == ".csv" else "\t"
    return OpioidReferenceTable(path, delimiter=delimiter).to_references()
