from __future__ import annotations

import threading
from typing import Dict


class _InMemoryCrawlCancellationManager:
    """Stop events for running jobs, keyed by job id.

    Events are dropped once a job finishes; a finished job cannot be cancelled.
    """

    def __init__(self):
        self._events: Dict[str, threading.Event] = {}

    def create(self, job_id: str) -> threading.Event:
        return self._events.setdefault(job_id, threading.Event())

    def request_cancel(self, job_id: str) -> bool:
        event = self._events.get(job_id)
        if event is None:
            return False
        event.set()
        return True

    def cleanup(self, job_id: str) -> None:
        self._events.pop(job_id, None)
