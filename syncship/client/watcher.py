"""
SyncShip Client - Directory Watcher

Watches the client file directory with watchdog and runs a sync pass once the
directory has been quiet for the debounce interval. Events that arrive while
the watcher is paused (during a sync pass) are dropped.

Author: SyncShip Project
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

# Configure logging
logger = logging.getLogger(__name__)


DEFAULT_DEBOUNCE_SECONDS = 1.0


class DebounceHandler(FileSystemEventHandler):
    """Restarts a timer on every file event; the timer fires the callback once"""

    def __init__(self, callback: Callable[[], None], debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS):
        super().__init__()
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self.paused = False
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def _start_timer(self):
        with self._lock:
            if self._timer:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self):
        with self._lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None

    def _fire(self):
        with self._lock:
            self._timer = None
        try:
            self.callback()
        except Exception as e:
            logger.exception(f"Watcher-triggered sync failed: {e}")

    def on_any_event(self, event):
        if event.is_directory or self.paused:
            return
        logger.debug(f"File event: {event.event_type} {event.src_path}")
        self._start_timer()


class DirectoryWatcher:
    """
    Triggers sync passes on directory changes.

    Responsibilities:
    - Observe the file directory (top level only)
    - Debounce bursts of events into a single sync pass
    - Ignore events while paused
    """

    def __init__(self, directory: Union[str, Path], on_change: Callable[[], None],
                 debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS):
        """
        Initialize directory watcher.

        Args:
            directory: Directory to watch
            on_change: Called on a timer thread after the directory settles
            debounce_seconds: Quiet period before on_change runs
        """
        self.directory = Path(directory)
        self.handler = DebounceHandler(on_change, debounce_seconds)
        self.observer: Optional[Observer] = None

    @property
    def is_running(self) -> bool:
        return self.observer is not None

    def start(self):
        if self.observer:
            return
        self.observer = Observer()
        self.observer.schedule(self.handler, path=str(self.directory), recursive=False)
        self.observer.daemon = True
        self.observer.start()
        logger.info(f"Watching {self.directory} for changes")

    def stop(self):
        self.handler.cancel()
        if self.observer:
            self.observer.stop()
            self.observer.join(timeout=1.0)
            self.observer = None
            logger.info("Stopped watching for changes")

    def pause(self):
        """Drop events until resume() is called"""
        self.handler.paused = True
        self.handler.cancel()

    def resume(self):
        self.handler.paused = False
