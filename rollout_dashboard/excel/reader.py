from __future__ import annotations

import io
from typing import Any

import pandas as pd

from rollout_dashboard.errors import WorkbookReadError

"""Workbook reader: bytes -> per-sheet raw matrices.

Sheets are read without a header (header rows are located later by the
header locator) and without pandas' default NA conversion, so department
acronyms like ``NA`` or ``NULL`` survive as text. Blank cells become ``""``.
The returned dict preserves workbook sheet order.
"""

RawMatrix = list[list[Any]]


def _cell_value(value: Any) -> Any:
    if value is None:
        return ""
    # pd.isna on a str/datetime is a scalar bool; guard lists just in case
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        return value
    return value


def frame_to_matrix(df: pd.DataFrame) -> RawMatrix:
    """Convert a header-less DataFrame into a list of row lists."""
    return [[_cell_value(v) for v in row] for row in df.itertuples(index=False, name=None)]


def read_workbook_bytes(data: bytes) -> dict[str, RawMatrix]:
    """Parse workbook bytes into raw matrices keyed by sheet name.

    Args:
        data: Raw ``.xlsx`` bytes

    Raises:
        WorkbookReadError: If no Excel engine is installed or the bytes are
            not a readable workbook
    """
    try:
        xls = pd.ExcelFile(io.BytesIO(data))
    except ImportError as e:
        raise WorkbookReadError("Workbook parser failed to load") from e
    except Exception as e:
        raise WorkbookReadError(f"Unable to read workbook: {e}") from e

    matrices: dict[str, RawMatrix] = {}
    with xls:
        for name in xls.sheet_names:
            try:
                df = xls.parse(name, header=None, keep_default_na=False, na_values=[])
            except Exception as e:
                raise WorkbookReadError(f"Unable to read sheet '{name}': {e}") from e
            matrices[str(name)] = frame_to_matrix(df)
    return matrices
