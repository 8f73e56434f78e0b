import locale
import logging
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key

from cell_coercion import cell_text, is_empty_cell, to_number

logger = logging.getLogger(__name__)

_DIGIT_RUN = re.compile(r"(\d+)")


class SortMode(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"
    NONE = "none"

    @classmethod
    def parse(cls, value) -> "SortMode":
        if isinstance(value, SortMode):
            return value
        key = str(value or "").strip().lower()
        aliases = {
            "asc": cls.ASCENDING,
            "ascending": cls.ASCENDING,
            "desc": cls.DESCENDING,
            "descending": cls.DESCENDING,
            "none": cls.NONE,
            "original": cls.NONE,
            "reset": cls.NONE,
            "": cls.NONE,
        }
        if key not in aliases:
            raise ValueError(f"Unknown sort mode '{value}'")
        return aliases[key]


def _fold(text: str) -> str:
    # base-letter comparison: drop case and accents
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def natural_key(value) -> tuple:
    parts = _DIGIT_RUN.split(_fold(cell_text(value)))
    key = []
    for idx, part in enumerate(parts):
        if idx % 2:
            key.append((0, int(part), ""))
        elif part:
            key.append((1, 0, locale.strxfrm(part)))
    return tuple(key)


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_cells(a, b, mode: SortMode = SortMode.ASCENDING) -> int:
    a_empty = a is None or (is_empty_cell(a) and not isinstance(a, str))
    b_empty = b is None or (is_empty_cell(b) and not isinstance(b, str))
    descending = mode is SortMode.DESCENDING
    if a_empty and b_empty:
        return 0
    if a_empty:
        return 1 if descending else -1
    if b_empty:
        return -1 if descending else 1

    a_num = to_number(a)
    b_num = to_number(b)
    if a_num is not None and b_num is not None:
        result = _cmp(a_num, b_num)
    else:
        result = _cmp(natural_key(a), natural_key(b))
    return -result if descending else result


def sort_rows(rows, column_index: int, mode: SortMode) -> list:
    """Return a reordered copy of ``rows``; the rows themselves are not touched."""
    mode = SortMode.parse(mode)
    if mode is SortMode.NONE:
        return list(rows)
    key = cmp_to_key(lambda a, b: compare_cells(a[column_index], b[column_index], mode))
    return sorted(rows, key=key)


@dataclass(frozen=True)
class SortState:
    column_index: int | None = None
    mode: SortMode = SortMode.NONE

    @property
    def is_active(self) -> bool:
        return self.column_index is not None and self.mode is not SortMode.NONE

    def next_for(self, column_index: int) -> "SortState":
        """Header click: none -> ascending -> descending -> none.

        Clicking a column other than the active one starts it at ascending.
        """
        if column_index != self.column_index or self.mode is SortMode.NONE:
            new_state = SortState(column_index, SortMode.ASCENDING)
        elif self.mode is SortMode.ASCENDING:
            new_state = SortState(column_index, SortMode.DESCENDING)
        else:
            new_state = SortState()
        logger.debug("Sort state %s -> %s", self, new_state)
        return new_state
