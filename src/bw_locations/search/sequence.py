from __future__ import annotations

import threading
from typing import Any, Optional


class SearchSequencer:
    """Issue request ids for typeahead searches and drop stale responses.

    A response is stale once a newer request id has been issued or
    accepted. The search core only echoes ``request_id``; ordering is the
    caller's business, and this helper is the caller side of that
    contract.
    """

    def __init__(self, start: int = 0):
        self._lock = threading.Lock()
        self._latest = start

    @property
    def latest(self) -> int:
        with self._lock:
            return self._latest

    def next_id(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def accept(self, result_or_id: Any) -> bool:
        request_id: Optional[int]
        if isinstance(result_or_id, int):
            request_id = result_or_id
        else:
            request_id = getattr(result_or_id, "request_id", None)
        if request_id is None:
            return False
        with self._lock:
            if request_id < self._latest:
                return False
            self._latest = request_id
            return True
