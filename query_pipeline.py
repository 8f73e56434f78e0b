"""Search, filter, sort and paging over one loaded dataset.

``QueryPipeline`` keeps two datasets. The original is a private deep copy
of what was loaded and is never replaced. The working dataset starts as a
copy of the original and is swapped wholesale whenever the sort changes;
rows and cells are never edited in place. Every view handed out is
derived from the working dataset on request.
"""

import logging
from dataclasses import dataclass

from cell_coercion import cell_text, is_empty_cell
from column_classifier import CATEGORY_MAX_DISTINCT, Classification, ColumnClassifier, ColumnType
from dataset import Dataset
from filter_predicates import FilterCriterion, matches
from pagination import page_count, page_slice
from sort_engine import SortMode, SortState, sort_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryResult:
    page_rows: list
    total_rows: int
    total_pages: int
    page_index: int = 1
    page_size: int = 0

    @property
    def display_pages(self) -> int:
        return max(1, self.total_pages)

    @property
    def first_row_number(self) -> int:
        return (self.page_index - 1) * self.page_size + 1


def row_contains(row, term: str) -> bool:
    needle = term.lower()
    return any(
        not is_empty_cell(cell) and needle in cell_text(cell).lower() for cell in row
    )


class QueryPipeline:
    def __init__(self, dataset: Dataset, max_distinct: int = CATEGORY_MAX_DISTINCT):
        self._original = dataset.deep_copy()
        self._working = self._original.deep_copy()
        self.sort_state = SortState()
        self._cleaned = None
        self.classifier = ColumnClassifier(
            self._original.cleaned_body(), self._original.column_count, max_distinct
        )
        logger.debug(
            "Loaded dataset with %d columns and %d rows",
            self._original.column_count,
            len(self._original),
        )

    @property
    def original(self) -> Dataset:
        return self._original

    @property
    def working(self) -> Dataset:
        return self._working

    @property
    def header(self) -> tuple:
        return self._working.header

    def cleaned_body(self) -> tuple:
        if self._cleaned is None:
            self._cleaned = self._working.cleaned_body()
        return self._cleaned

    def _replace_working(self, dataset: Dataset):
        self._working = dataset
        self._cleaned = None

    # ----- classification -----
    def classify(self, column_index: int) -> Classification:
        return self.classifier.classify(column_index)

    def classify_all(self) -> list[Classification]:
        return self.classifier.classify_all()

    def _column_type(self, column_index: int) -> ColumnType:
        # criteria keyed past the header see only empty cells
        if not 0 <= column_index < self._original.column_count:
            return ColumnType.TEXT
        return self.classify(column_index).column_type

    def evaluate_filter(self, row, column_index: int, criterion: FilterCriterion) -> bool:
        return matches(row, column_index, criterion, self._column_type(column_index))

    # ----- sorting -----
    def apply_sort(self, column_index: int, mode=None) -> Dataset:
        """Sort the working dataset by one column.

        With ``mode=None`` the column's header-click cycle advances
        (none, ascending, descending, back to none). ``SortMode.NONE``
        restores the original row order.
        """
        if not 0 <= column_index < self._original.column_count:
            raise IndexError(f"column index {column_index} out of range")
        if mode is None:
            state = self.sort_state.next_for(column_index)
        else:
            mode = SortMode.parse(mode)
            state = SortState(column_index, mode) if mode is not SortMode.NONE else SortState()

        if not state.is_active:
            logger.debug("Cleared sort on column %d", column_index)
            return self.reset_sort()

        working = self._original.with_body(sort_rows(self._original.body, column_index, state.mode))
        self.sort_state = state
        self._replace_working(working)
        logger.debug("Sorted column %d %s", column_index, state.mode.value)
        return working

    def reset_sort(self) -> Dataset:
        """Drop any sort and restore the as-loaded row order."""
        self.sort_state = SortState()
        self._replace_working(self._original.deep_copy())
        return self._working

    # ----- querying -----
    @staticmethod
    def active_criteria(criteria_by_column) -> dict[int, FilterCriterion]:
        return {
            column: criterion
            for column, criterion in (criteria_by_column or {}).items()
            if criterion is not None and criterion.is_active
        }

    def filtered_rows(self, search_term: str = "", criteria_by_column=None) -> list:
        rows = list(self.cleaned_body())
        if search_term:
            rows = [row for row in rows if row_contains(row, search_term)]

        active = self.active_criteria(criteria_by_column)
        if active:
            typed = [
                (column, criterion, self._column_type(column))
                for column, criterion in active.items()
            ]
            rows = [
                row
                for row in rows
                if all(matches(row, col, crit, col_type) for col, crit, col_type in typed)
            ]
        return rows

    def query(self, search_term: str = "", criteria_by_column=None, page_index: int = 1, page_size: int = 10) -> QueryResult:
        rows = self.filtered_rows(search_term, criteria_by_column)
        total = len(rows)
        result = QueryResult(
            page_rows=page_slice(rows, page_index, page_size),
            total_rows=total,
            total_pages=page_count(total, page_size),
            page_index=page_index,
            page_size=page_size,
        )
        logger.debug(
            "Query search=%r filters=%d -> %d rows, page %d/%d",
            search_term,
            len(self.active_criteria(criteria_by_column)),
            total,
            page_index,
            result.total_pages,
        )
        return result

    def records(self) -> list[dict]:
        return self._working.records()
