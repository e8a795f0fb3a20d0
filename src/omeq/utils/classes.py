"""Helper type aliases"""

import polars as pl

# Polars types
PlString = pl.Utf8
PlRealNumber = pl.Float64
