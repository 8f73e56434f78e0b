import time


class Debouncer:
    """Holds back a value until it has stopped changing for ``delay`` seconds.

    Nothing runs in the background: the owning event loop calls ``poll()``
    between events. A new ``push()`` replaces whatever was pending, so at
    most one value is ever waiting.
    """

    def __init__(self, initial="", delay: float = 0.5, clock=time.monotonic):
        self.delay = delay
        self.clock = clock
        self.value = initial
        self._pending = None
        self._has_pending = False
        self._deadline = 0.0

    @property
    def has_pending(self) -> bool:
        return self._has_pending

    def push(self, value):
        self._pending = value
        self._has_pending = True
        self._deadline = self.clock() + self.delay

    def cancel(self):
        self._pending = None
        self._has_pending = False

    def poll(self):
        """Return ``(changed, value)``, settling the pending value if it is due."""
        if not self._has_pending or self.clock() < self._deadline:
            return False, self.value
        return self.flush()

    def flush(self):
        if not self._has_pending:
            return False, self.value
        value = self._pending
        self.cancel()
        changed = value != self.value
        self.value = value
        return changed, self.value
