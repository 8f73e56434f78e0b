"""Per-column semantic type inference.

The checks run in a fixed priority order. Date serials are numbers, so the
date test has to run first; the cardinality test runs before the plain
number test so low-cardinality numeric codes still get multi-select
filtering.

The date ratio is measured over the numeric cells only, so a few stray
labels in a date column do not demote it. Numeric cells still have to be
the majority of the sample; a text column holding one serial-like number
stays text.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from cell_coercion import cell_text, is_empty_cell, to_number

logger = logging.getLogger(__name__)

SERIAL_MIN = 1
SERIAL_MAX = 70000
SERIAL_MIN_INTEGER = 500
DATE_SERIAL_RATIO = 0.9
CATEGORY_MAX_DISTINCT = 50


class ColumnType(str, Enum):
    NUMBER = "number"
    DATE_SERIAL = "date"
    CATEGORY = "category"
    TEXT = "text"


@dataclass(frozen=True)
class Classification:
    column_type: ColumnType
    options: tuple[str, ...] = ()

    @property
    def is_date(self) -> bool:
        return self.column_type is ColumnType.DATE_SERIAL


def is_plausible_serial(value) -> bool:
    number = to_number(value)
    if number is None:
        return False
    if not SERIAL_MIN <= number <= SERIAL_MAX:
        return False
    if number.is_integer():
        return number >= SERIAL_MIN_INTEGER
    return True


def _looks_like_dates(sample) -> bool:
    numbers = [v for v in sample if to_number(v) is not None]
    # text cells are left out of the ratio, but they must stay a minority
    if not numbers or len(numbers) * 2 <= len(sample):
        return False
    qualifying = sum(1 for v in numbers if is_plausible_serial(v))
    return qualifying / len(numbers) > DATE_SERIAL_RATIO


def _distinct_texts(sample) -> list[str]:
    seen = {}
    for value in sample:
        seen.setdefault(cell_text(value), None)
    return list(seen)


def classify_values(values, max_distinct: int = CATEGORY_MAX_DISTINCT) -> Classification:
    sample = [v for v in values if not is_empty_cell(v)]
    if not sample:
        return Classification(ColumnType.TEXT)

    if _looks_like_dates(sample):
        return Classification(ColumnType.DATE_SERIAL)

    distinct = _distinct_texts(sample)
    if 1 < len(distinct) <= max_distinct:
        return Classification(ColumnType.CATEGORY, tuple(distinct))

    if all(to_number(v) is not None for v in sample):
        return Classification(ColumnType.NUMBER)

    return Classification(ColumnType.TEXT)


class ColumnClassifier:
    """Lazily classifies the columns of one cleaned body.

    Results are cached per column index. Build a new classifier when the
    cleaned body itself changes; filtering and sorting never do that.
    """

    def __init__(self, body, column_count: int, max_distinct: int = CATEGORY_MAX_DISTINCT):
        self.body = body
        self.column_count = column_count
        self.max_distinct = max_distinct
        self._cache: dict[int, Classification] = {}

    def classify(self, column_index: int) -> Classification:
        if not 0 <= column_index < self.column_count:
            raise IndexError(f"column index {column_index} out of range")
        cached = self._cache.get(column_index)
        if cached is not None:
            return cached
        result = classify_values(
            (row[column_index] for row in self.body), self.max_distinct
        )
        logger.debug("Column %d classified as %s", column_index, result.column_type.value)
        self._cache[column_index] = result
        return result

    def classify_all(self) -> list[Classification]:
        return [self.classify(i) for i in range(self.column_count)]

    def invalidate(self):
        self._cache.clear()
