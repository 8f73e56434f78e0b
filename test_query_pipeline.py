import unittest

from column_classifier import ColumnType
from dataset import Dataset
from filter_predicates import FilterCriterion
from query_pipeline import QueryPipeline, row_contains
from sort_engine import SortMode, SortState

ROWS = [
    ["Name", "Status", "Amount", "When"],
    ["Alice", "open", 120, 45514.5],
    ["bob", "closed", 80, 45515.25],
    [None, None, None, None],
    ["Carol", "open", None, 45516.0],
    ["dave", "pending", 300, 45517.75],
    ["Eve", "closed", 45, ""],
]


def _names(rows):
    return [row[0] for row in rows]


class QueryPipelineTests(unittest.TestCase):
    def setUp(self):
        self.dataset = Dataset.from_rows(ROWS)
        self.pipeline = QueryPipeline(self.dataset)

    def test_blank_rows_are_dropped(self):
        result = self.pipeline.query(page_size=10)
        self.assertEqual(result.total_rows, 5)
        self.assertEqual(_names(result.page_rows), ["Alice", "bob", "Carol", "dave", "Eve"])

    def test_classification(self):
        self.assertEqual(self.pipeline.classify(1).column_type, ColumnType.CATEGORY)
        self.assertEqual(self.pipeline.classify(1).options, ("open", "closed", "pending"))
        self.assertEqual(self.pipeline.classify(3).column_type, ColumnType.DATE_SERIAL)

    def test_search_is_case_insensitive_substring(self):
        self.assertEqual(_names(self.pipeline.filtered_rows("CLOSED")), ["bob", "Eve"])
        self.assertEqual(_names(self.pipeline.filtered_rows("45514")), ["Alice"])
        self.assertEqual(len(self.pipeline.filtered_rows("")), 5)
        self.assertEqual(self.pipeline.filtered_rows("zzz"), [])

    def test_filters_combine_with_and(self):
        criteria = {
            1: FilterCriterion("in", ["open"]),
            2: FilterCriterion("greater-than", "100"),
        }
        both = self.pipeline.filtered_rows("", criteria)
        self.assertEqual(_names(both), ["Alice"])

        only_status = self.pipeline.filtered_rows("", {1: criteria[1]})
        self.assertEqual(_names(only_status), ["Alice", "Carol"])
        self.assertTrue(all(row in only_status for row in both))

    def test_inactive_criteria_are_ignored(self):
        criteria = {0: FilterCriterion("contains", ""), 1: FilterCriterion("in", [])}
        self.assertEqual(self.pipeline.active_criteria(criteria), {})
        self.assertEqual(len(self.pipeline.filtered_rows("", criteria)), 5)

    def test_empty_filters_on_date_column(self):
        rows = self.pipeline.filtered_rows("", {3: FilterCriterion("empty")})
        self.assertEqual(_names(rows), ["Eve"])

    def test_date_filter_uses_calendar_operand(self):
        rows = self.pipeline.filtered_rows("", {3: FilterCriterion("after", "2024-08-11")})
        self.assertEqual(_names(rows), ["bob", "Carol", "dave"])

    def test_evaluate_filter_uses_column_type(self):
        row = self.dataset.body[0]
        self.assertTrue(self.pipeline.evaluate_filter(row, 3, FilterCriterion("before", "2024-08-11")))
        self.assertFalse(self.pipeline.evaluate_filter(row, 1, FilterCriterion("in", ["closed"])))

    def test_sort_cycle_restores_original_order(self):
        self.pipeline.apply_sort(2)
        self.assertEqual(self.pipeline.sort_state, SortState(2, SortMode.ASCENDING))
        self.pipeline.apply_sort(2)
        self.assertEqual(self.pipeline.sort_state, SortState(2, SortMode.DESCENDING))
        restored = self.pipeline.apply_sort(2)
        self.assertEqual(self.pipeline.sort_state, SortState())
        self.assertEqual(restored.body, self.dataset.body)
        self.assertEqual(self.pipeline.working, self.pipeline.original)

    def test_reset_sort_restores_loaded_order(self):
        self.pipeline.apply_sort(0, SortMode.DESCENDING)
        restored = self.pipeline.reset_sort()
        self.assertEqual(self.pipeline.sort_state, SortState())
        self.assertEqual(restored, self.dataset)
        self.assertEqual(_names(self.pipeline.query().page_rows), ["Alice", "bob", "Carol", "dave", "Eve"])

    def test_filter_on_column_past_header_matches_like_empty_cells(self):
        result = self.pipeline.query("", {9: FilterCriterion("contains", "x")})
        self.assertEqual(result.total_rows, 0)
        result = self.pipeline.query("", {9: FilterCriterion("empty")})
        self.assertEqual(result.total_rows, 5)
        self.assertFalse(self.pipeline.evaluate_filter(self.dataset.body[0], -1, FilterCriterion("equals", "1")))

    def test_sorted_view_feeds_query(self):
        self.pipeline.apply_sort(2, SortMode.ASCENDING)
        self.assertEqual(_names(self.pipeline.query().page_rows), ["Carol", "Eve", "bob", "Alice", "dave"])
        self.pipeline.apply_sort(2, SortMode.DESCENDING)
        self.assertEqual(_names(self.pipeline.query().page_rows), ["dave", "Alice", "bob", "Eve", "Carol"])

    def test_sort_always_starts_from_original(self):
        self.pipeline.apply_sort(0, SortMode.DESCENDING)
        working = self.pipeline.apply_sort(2, SortMode.ASCENDING)
        expected = QueryPipeline(self.dataset).apply_sort(2, SortMode.ASCENDING)
        self.assertEqual(working, expected)

    def test_sort_keeps_header_and_original(self):
        working = self.pipeline.apply_sort(0)
        self.assertEqual(working.header, self.dataset.header)
        self.assertEqual(self.pipeline.original, self.dataset)
        self.assertEqual(_names(working.body), [None, "Alice", "bob", "Carol", "dave", "Eve"])

    def test_search_and_filter_keep_sorted_order(self):
        self.pipeline.apply_sort(0, SortMode.DESCENDING)
        rows = self.pipeline.filtered_rows("o", {1: FilterCriterion("in", ["open", "closed"])})
        self.assertEqual(_names(rows), ["Eve", "Carol", "bob", "Alice"])

    def test_classification_is_unaffected_by_sort(self):
        before = self.pipeline.classify_all()
        self.pipeline.apply_sort(1, SortMode.DESCENDING)
        self.assertEqual(self.pipeline.classify_all(), before)

    def test_records_follow_working_order(self):
        self.pipeline.apply_sort(2, SortMode.DESCENDING)
        records = self.pipeline.records()
        self.assertEqual(records[0], {"Name": "dave", "Status": "pending", "Amount": 300, "When": 45517.75})

    def test_bad_sort_column_raises(self):
        with self.assertRaises(IndexError):
            self.pipeline.apply_sort(9)

    def test_pages_cover_filtered_rows_exactly(self):
        criteria = {1: FilterCriterion("in", ["open", "closed", "pending"])}
        for size in (1, 2, 3, 5, 7):
            first = self.pipeline.query("", criteria, 1, size)
            collected = []
            for page in range(1, first.total_pages + 1):
                collected.extend(self.pipeline.query("", criteria, page, size).page_rows)
            self.assertEqual(collected, self.pipeline.filtered_rows("", criteria))

    def test_page_counts(self):
        result = self.pipeline.query(page_index=3, page_size=2)
        self.assertEqual(result.total_rows, 5)
        self.assertEqual(result.total_pages, 3)
        self.assertEqual(_names(result.page_rows), ["Eve"])
        self.assertEqual(result.first_row_number, 5)

    def test_out_of_range_page_is_empty(self):
        result = self.pipeline.query(page_index=9, page_size=2)
        self.assertEqual(result.page_rows, [])
        self.assertEqual(result.total_pages, 3)

    def test_zero_page_size_gives_empty_page(self):
        result = self.pipeline.query(page_size=0)
        self.assertEqual(result.page_rows, [])
        self.assertEqual(result.total_pages, 0)


class EmptyDatasetTests(unittest.TestCase):
    def test_header_only(self):
        pipeline = QueryPipeline(Dataset.from_rows([["a", "b"]]))
        result = pipeline.query("x", {0: FilterCriterion("empty")}, 1, 10)
        self.assertEqual(result.page_rows, [])
        self.assertEqual(result.total_rows, 0)
        self.assertEqual(result.total_pages, 0)
        self.assertEqual(result.display_pages, 1)
        self.assertEqual(pipeline.classify(0).column_type, ColumnType.TEXT)

    def test_nothing_loaded(self):
        pipeline = QueryPipeline(Dataset.from_rows([]))
        self.assertEqual(pipeline.query().total_rows, 0)
        self.assertEqual(pipeline.classify_all(), [])


def test_end_to_end_serial_scenario():
    pipeline = QueryPipeline(
        Dataset.from_rows([["Name", "Amount"], ["A", 45514.5], ["B", 45515.25], ["C", "not-a-date"]])
    )
    assert pipeline.classify(1).column_type is ColumnType.DATE_SERIAL


def test_row_contains_skips_empty_cells():
    assert row_contains(["Alpha", None, 3], "ALP")
    assert row_contains(["Alpha", None, 3], "3")
    assert not row_contains([None, ""], "")  # nothing to match against
