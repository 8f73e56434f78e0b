def page_count(total_rows: int, page_size: int) -> int:
    if total_rows <= 0 or page_size <= 0:
        return 0
    return (total_rows - 1) // page_size + 1


def page_slice(rows, page_index: int, page_size: int) -> list:
    """1-based slice; no clamping, so an out-of-range page is empty."""
    if page_size <= 0 or page_index < 1:
        return []
    start = (page_index - 1) * page_size
    return list(rows[start : start + page_size])


class Paginator:
    def __init__(self, total_rows: int = 0, page_size: int = 10):
        self.page_size = max(1, page_size)
        self.page_index = 1
        self.total_rows = max(0, total_rows)
        self._clamp()

    def _clamp(self):
        self.page_index = max(1, min(self.page_index, self.page_count))

    def update_total_rows(self, total_rows: int):
        self.total_rows = max(0, total_rows)
        self._clamp()

    def set_page_size(self, page_size: int):
        self.page_size = max(1, page_size)
        self.reset()

    def set_page(self, page_index: int):
        self.page_index = page_index
        self._clamp()

    def reset(self):
        self.page_index = 1

    def next_page(self):
        if self.page_end < self.total_rows:
            self.page_index += 1
            self._clamp()

    def prev_page(self):
        if self.page_index > 1:
            self.page_index -= 1
            self._clamp()

    @property
    def page_start(self) -> int:
        return (self.page_index - 1) * self.page_size

    @property
    def page_end(self) -> int:
        return min(self.total_rows, self.page_start + self.page_size)

    @property
    def page_count(self) -> int:
        return max(1, page_count(self.total_rows, self.page_size))
