import logging
import time

from debounce import Debouncer
from filter_predicates import FilterCriterion
from pagination import Paginator
from query_pipeline import QueryPipeline, QueryResult
from sort_engine import SortState

logger = logging.getLogger(__name__)


class AppState:
    """User-editable exploration state for one dataset.

    The presentation layer changes search text, filters, sort, page and
    page size through this object; each change that affects what is shown
    recomputes the view and notifies subscribers. Datasets are only ever
    touched through the pipeline.
    """

    def __init__(self, pipeline: QueryPipeline, page_size: int = 10, debounce_delay: float = 0.5, clock=time.monotonic):
        self.pipeline = pipeline
        self.search = Debouncer("", delay=debounce_delay, clock=clock)
        self.raw_search_text = ""
        self.criteria: dict[int, FilterCriterion] = {}
        self.paginator = Paginator(0, page_size)
        self._listeners = []
        self.view: QueryResult | None = None
        self.refresh()

    # ----- subscriptions -----
    def subscribe(self, callback):
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self):
        for callback in list(self._listeners):
            callback(self.view)

    # ----- derived view -----
    @property
    def search_term(self) -> str:
        return self.search.value

    @property
    def sort_state(self) -> SortState:
        return self.pipeline.sort_state

    @property
    def page_index(self) -> int:
        return self.paginator.page_index

    @property
    def page_size(self) -> int:
        return self.paginator.page_size

    def refresh(self) -> QueryResult:
        requested = self.paginator.page_index
        view = self.pipeline.query(self.search_term, self.criteria, requested, self.page_size)
        self.paginator.update_total_rows(view.total_rows)
        if self.paginator.page_index != requested:
            view = self.pipeline.query(
                self.search_term, self.criteria, self.paginator.page_index, self.page_size
            )
        self.view = view
        self._notify()
        return self.view

    def current_view(self) -> QueryResult:
        if self.view is None:
            return self.refresh()
        return self.view

    # ----- search -----
    def set_search_text(self, text: str):
        self.raw_search_text = text or ""
        self.search.push(self.raw_search_text)

    def tick(self) -> bool:
        """Settle the search text once it has been stable long enough."""
        changed, term = self.search.poll()
        if not changed:
            return False
        logger.debug("Search term settled on %r", term)
        self.paginator.reset()
        self.refresh()
        return True

    def flush_search(self) -> bool:
        changed, _ = self.search.flush()
        if changed:
            self.paginator.reset()
            self.refresh()
        return changed

    # ----- filters -----
    def set_filter(self, column_index: int, criterion: FilterCriterion | None):
        previous = dict(self.criteria)
        if criterion is None or not criterion.is_active:
            self.criteria.pop(column_index, None)
        else:
            self.criteria[column_index] = criterion
        if self.criteria != previous:
            self.paginator.reset()
            self.refresh()

    def clear_filter(self, column_index: int):
        self.set_filter(column_index, None)

    def clear_filters(self):
        if self.criteria:
            self.criteria = {}
            self.paginator.reset()
            self.refresh()

    def is_filtered(self, column_index: int) -> bool:
        return column_index in self.criteria

    # ----- sort -----
    def toggle_sort(self, column_index: int, mode=None) -> SortState:
        self.pipeline.apply_sort(column_index, mode)
        self.paginator.reset()
        self.refresh()
        return self.pipeline.sort_state

    # ----- paging -----
    def set_page_size(self, page_size: int):
        if page_size == self.paginator.page_size:
            return
        self.paginator.set_page_size(page_size)
        self.refresh()

    def set_page(self, page_index: int):
        self.paginator.set_page(page_index)
        self.refresh()

    def next_page(self):
        self.paginator.next_page()
        self.refresh()

    def prev_page(self):
        self.paginator.prev_page()
        self.refresh()
