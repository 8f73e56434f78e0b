import os


def render_status(context, width):
    """
    context keys: file_path, page_index, page_total, page_start, page_end,
                  total_rows, loaded_rows, sort_label, filter_count, search
    """
    fname = context.get('file_path') or ''
    if fname:
        fname = os.path.basename(fname)
    page_total = context.get('page_total', 1)
    page_index = context.get('page_index', 1)
    page_start = context.get('page_start', 0)
    page_end = context.get('page_end', page_start)
    total_rows = context.get('total_rows', 0)
    if total_rows:
        rows = f"rows {page_start + 1}-{max(page_start + 1, page_end)} of {total_rows}"
    else:
        rows = "no rows"
    parts = [fname or 'Untitled', f"Page {page_index}/{page_total} {rows}"]

    loaded = context.get('loaded_rows')
    if loaded is not None and loaded != total_rows:
        parts.append(f"filtered from {loaded}")
    if context.get('search'):
        parts.append(f"search '{context['search']}'")
    filter_count = context.get('filter_count', 0)
    if filter_count:
        parts.append(f"{filter_count} filter{'s' if filter_count != 1 else ''}")
    if context.get('sort_label'):
        parts.append(f"sort {context['sort_label']}")

    text = " " + " | ".join(parts)
    return text.ljust(width)[:width]
