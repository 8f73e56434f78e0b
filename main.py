import logging
import shutil
import sys

import pandas as pd

import serial_date
from _version import __version__
from app_state import AppState
from column_classifier import SERIAL_MAX, SERIAL_MIN, ColumnType
from config_paths import load_config
from file_type_handler import FileTypeHandler, MissingEngineError, UnsupportedFileType
from filter_predicates import FilterCriterion, default_operator
from query_pipeline import QueryPipeline
from sort_engine import SortMode
from status_bar import render_status

USAGE = """gridlens - explore spreadsheet data from the terminal

Usage:
  gridlens PATH [options]
  gridlens -v

Options:
  -s TEXT            global search (case-insensitive)
  -f COL:OP[:VALUE]  column filter, repeatable; COL is a header name or index
  -o COL[:asc|desc]  sort by a column
  -p PAGE            page number (1-based)
  -n SIZE            rows per page (one of the configured page sizes)
  -t                 print the detected column types
  --debug            log engine activity to stderr
"""


class UsageError(Exception):
    pass


def parse_args(args):
    opts = {
        "path": None,
        "search": "",
        "filters": [],
        "sort": None,
        "page": 1,
        "page_size": None,
        "types": False,
        "debug": False,
    }
    it = iter(args)
    for arg in it:
        if arg in {"-s", "-f", "-o", "-p", "-n"}:
            value = next(it, None)
            if value is None:
                raise UsageError(f"{arg} needs a value")
            if arg == "-s":
                opts["search"] = value
            elif arg == "-f":
                opts["filters"].append(value)
            elif arg == "-o":
                opts["sort"] = value
            else:
                try:
                    number = int(value)
                except ValueError:
                    raise UsageError(f"{arg} expects a number, got '{value}'") from None
                opts["page" if arg == "-p" else "page_size"] = number
        elif arg == "-t":
            opts["types"] = True
        elif arg == "--debug":
            opts["debug"] = True
        elif arg.startswith("-"):
            raise UsageError(f"Unknown option {arg}")
        elif opts["path"] is None:
            opts["path"] = arg
        else:
            raise UsageError("Only one file can be opened at a time")
    if opts["path"] is None:
        raise UsageError("Missing file path")
    return opts


def _split_column_spec(spec: str):
    # only the first two ':' split; date/time values keep theirs
    head, sep, tail = spec.partition(":")
    if not sep:
        raise UsageError(f"Bad filter '{spec}' (expected COL:OP[:VALUE])")
    op, _, value = tail.partition(":")
    return head, op, value


def parse_filter(spec: str, pipeline: QueryPipeline):
    name, op, value = _split_column_spec(spec)
    try:
        column = pipeline.original.column_index(name)
    except KeyError as exc:
        raise UsageError(str(exc.args[0])) from None
    classification = pipeline.classify(column)
    op = op or default_operator(classification.column_type)
    if classification.column_type is ColumnType.CATEGORY and op.strip().lower() == "in":
        operand = [v for v in value.split(",") if v]
    else:
        operand = value or None
    return column, FilterCriterion(op, operand)


def parse_sort(spec: str, pipeline: QueryPipeline):
    name, _, mode = spec.rpartition(":")
    if not name or mode.strip().lower() not in {"asc", "desc", "ascending", "descending"}:
        name, mode = spec, "asc"
    try:
        column = pipeline.original.column_index(name)
    except KeyError as exc:
        raise UsageError(str(exc.args[0])) from None
    return column, SortMode.parse(mode)


def display_cell(value, is_date: bool):
    if value is None:
        return "NULL"
    if is_date and isinstance(value, (int, float)) and not isinstance(value, bool):
        if SERIAL_MIN <= value <= SERIAL_MAX:
            decoded = serial_date.decode(value)
            if decoded is not None:
                return decoded
    return value


def render_page(state: AppState, file_path=None, width=None) -> str:
    pipeline = state.pipeline
    view = state.current_view()
    names = pipeline.working.column_names()
    date_columns = [c.is_date for c in pipeline.classify_all()]
    width = width or shutil.get_terminal_size((120, 24)).columns

    if view.page_rows:
        frame = pd.DataFrame(
            [
                [display_cell(v, date_columns[i]) for i, v in enumerate(row)]
                for row in view.page_rows
            ],
            columns=names,
        )
        start = view.first_row_number
        frame.index = pd.RangeIndex(start, start + len(frame))
        table = frame.to_string(max_colwidth=40)
    else:
        table = "No data to display on this page."

    sort = state.sort_state
    sort_label = ""
    if sort.is_active:
        sort_label = f"{names[sort.column_index]} {sort.mode.value}"
    page_start = (view.page_index - 1) * view.page_size
    status = render_status(
        {
            "file_path": file_path,
            "page_index": view.page_index,
            "page_total": view.display_pages,
            "page_start": page_start,
            "page_end": page_start + len(view.page_rows),
            "total_rows": view.total_rows,
            "loaded_rows": len(pipeline.cleaned_body()),
            "search": state.search_term,
            "filter_count": len(state.criteria),
            "sort_label": sort_label,
        },
        width,
    )
    return f"{table}\n{status.rstrip()}"


def render_types(pipeline: QueryPipeline) -> str:
    lines = []
    for name, classification in zip(pipeline.original.column_names(), pipeline.classify_all()):
        line = f"{name}: {classification.column_type.value}"
        if classification.options:
            line += f" ({', '.join(classification.options)})"
        lines.append(line)
    return "\n".join(lines)


def run(opts, width=None) -> str:
    cfg = load_config()
    dataset = FileTypeHandler(opts["path"]).load()
    pipeline = QueryPipeline(dataset, max_distinct=cfg["CATEGORY_MAX_DISTINCT"])
    if opts["types"]:
        return render_types(pipeline)

    page_size = cfg["PAGE_SIZE"] if opts["page_size"] is None else opts["page_size"]
    if opts["page_size"] is not None and page_size not in cfg["PAGE_SIZE_OPTIONS"]:
        choices = ", ".join(str(n) for n in cfg["PAGE_SIZE_OPTIONS"])
        raise UsageError(f"Page size must be one of {choices}")

    state = AppState(
        pipeline,
        page_size=page_size,
        debounce_delay=cfg["SEARCH_DEBOUNCE_MS"] / 1000,
    )
    if opts["sort"]:
        column, mode = parse_sort(opts["sort"], pipeline)
        state.toggle_sort(column, mode)
    for spec in opts["filters"]:
        column, criterion = parse_filter(spec, pipeline)
        state.set_filter(column, criterion)
    if opts["search"]:
        state.set_search_text(opts["search"])
        state.flush_search()
    state.set_page(opts["page"])
    return render_page(state, opts["path"], width)


def main():
    args = sys.argv[1:]

    if "-v" in args or "-V" in args:
        print(__version__)
        return

    if "-h" in args or "--help" in args or not args:
        print(USAGE)
        return

    try:
        opts = parse_args(args)
    except UsageError as exc:
        print(f"{exc}\n\n{USAGE}", file=sys.stderr)
        sys.exit(1)

    if opts["debug"]:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        print(run(opts))
    except (UsageError, UnsupportedFileType, MissingEngineError) as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)
    except (OSError, ValueError) as exc:
        print(f"Load failed: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
