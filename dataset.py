import copy
from dataclasses import dataclass

import pandas as pd

from cell_coercion import cell_text, is_empty_cell


def is_blank_row(row) -> bool:
    return all(is_empty_cell(cell) for cell in row)


def _fit(row, width: int) -> tuple:
    row = tuple(row)
    if len(row) < width:
        return row + (None,) * (width - len(row))
    return row[:width]


@dataclass(frozen=True)
class Dataset:
    """Header row plus body rows, every row exactly as wide as the header.

    Instances are never changed; operations that reorder or clean rows
    return a new ``Dataset``.
    """

    header: tuple
    body: tuple

    def __post_init__(self):
        header = tuple(self.header)
        width = len(header)
        object.__setattr__(self, "header", header)
        object.__setattr__(self, "body", tuple(_fit(row, width) for row in self.body))

    @classmethod
    def from_rows(cls, array) -> "Dataset":
        rows = list(array or [])
        if not rows:
            return cls((), ())
        return cls(tuple(rows[0]), tuple(rows[1:]))

    @property
    def column_count(self) -> int:
        return len(self.header)

    def __len__(self):
        return len(self.body)

    def column_names(self) -> list[str]:
        return [cell_text(name) or f"column_{i}" for i, name in enumerate(self.header)]

    def column_index(self, name) -> int:
        """Resolve a header name (case-insensitive) or a 0-based index string."""
        names = [n.lower() for n in self.column_names()]
        key = str(name).strip()
        if key.lower() in names:
            return names.index(key.lower())
        if key.isdigit() and int(key) < self.column_count:
            return int(key)
        raise KeyError(f"Unknown column '{name}'")

    def cleaned_body(self) -> tuple:
        return tuple(row for row in self.body if not is_blank_row(row))

    def with_body(self, rows) -> "Dataset":
        return Dataset(self.header, tuple(rows))

    def deep_copy(self) -> "Dataset":
        return Dataset(copy.deepcopy(self.header), copy.deepcopy(self.body))

    def to_rows(self) -> list[list]:
        return [list(self.header)] + [list(row) for row in self.body]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([list(row) for row in self.body], columns=self.column_names())

    def records(self) -> list[dict]:
        names = self.column_names()
        return [dict(zip(names, row)) for row in self.body]
