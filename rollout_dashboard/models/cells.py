from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union

"""Tagged cell variants for raw workbook values.

A worksheet cell can hold text, a number, a date or nothing at all. pandas
hands these back as whatever Python object it decoded, so the reader layer
wraps every value in exactly one of the variants below before any
normalisation happens.
"""

__all__ = [
    "Cell",
    "DateCell",
    "EmptyCell",
    "NumberCell",
    "TextCell",
]


@dataclass(frozen=True)
class TextCell:
    value: str


@dataclass(frozen=True)
class NumberCell:
    value: float


@dataclass(frozen=True)
class DateCell:
    value: datetime


@dataclass(frozen=True)
class EmptyCell:
    pass


Cell = Union[TextCell, NumberCell, DateCell, EmptyCell]
