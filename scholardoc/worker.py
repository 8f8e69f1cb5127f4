"""Background task runner for the GUI.

The worker thread never touches widgets. It posts events to a queue and the
UI thread drains the queue and owns all display state.
"""

import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from loguru import logger


@dataclass
class LogEvent:
    message: str
    style: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class StatusEvent:
    status: str


@dataclass
class DoneEvent:
    task: str
    success: bool
    error: Optional[str] = None


class TaskRunner:
    # Runs one task at a time on a daemon thread

    def __init__(self):
        self.events: "queue.Queue" = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    @property
    def busy(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sink(self, message: str, style: Optional[str] = None):
        self.events.put(LogEvent(message, style))

    def submit(self, name: str, task: Callable[[Callable], bool]) -> threading.Thread:
        """Start ``task(sink)`` in the background.

        The task's boolean result (or exception) is reported as a DoneEvent.
        """
        if self.busy:
            raise RuntimeError("A task is already running")

        self.events.put(StatusEvent(f"Running: {name}"))
        self._thread = threading.Thread(target=self._run, args=(name, task), daemon=True)
        self._thread.start()
        return self._thread

    def _run(self, name: str, task: Callable[[Callable], bool]):
        try:
            ok = bool(task(self.sink))
        except (FileNotFoundError, ValueError, RuntimeError, OSError) as e:
            self._fail(name, str(e))
            return
        except Exception as e:
            # Unexpected errors still end the task so the window unlocks
            logger.exception(f"Unexpected error in task {name}")
            self._fail(name, f"{type(e).__name__}: {e}")
            return

        self.events.put(StatusEvent("✓ Done" if ok else "✗ Finished with failures"))
        self.events.put(DoneEvent(name, ok))

    def _fail(self, name: str, error: str):
        self.events.put(LogEvent(f"✗ {name} failed: {error}", "red"))
        self.events.put(StatusEvent(f"✗ Error: {error}"))
        self.events.put(DoneEvent(name, False, error))

    def drain(self) -> List[object]:
        events = []
        while True:
            try:
                events.append(self.events.get_nowait())
            except queue.Empty:
                return events

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)
