"""Exceptions used elsewhere in the project."""


class CSVReaderError(Exception):
    """
    Base exception for CSVReader errors.
    """


class SchemaError(CSVReaderError):
    """
    Raised when the provided schema does not match the CSV file.
    """


class CatalogError(Exception):
    """
    Base exception for catalog data errors.
    """


class CatalogRecordError(CatalogError):
    """
    Occurs when a catalog or reference record cannot be created due to
    integrity constraints.
    """


class StrengthParseError(CatalogError):
    """
    Occurs when a strength string can not be parsed into a number and a unit.
    """
