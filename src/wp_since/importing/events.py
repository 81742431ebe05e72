"""Callback registry for import pipeline events."""

from typing import Callable, Dict, List

EVENTS = ("entry_imported", "import_finished")


class ImportEvents:
    """Named events with callbacks invoked in registration order."""

    def __init__(self):
        self._callbacks: Dict[str, List[Callable]] = {name: [] for name in EVENTS}

    def on(self, event: str, callback: Callable):
        if event not in self._callbacks:
            raise ValueError(f"Unknown import event: {event}")
        self._callbacks[event].append(callback)

    def emit(self, event: str, *args):
        if event not in self._callbacks:
            raise ValueError(f"Unknown import event: {event}")
        for callback in self._callbacks[event]:
            callback(*args)
