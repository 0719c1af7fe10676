"""
Background Worker Utility
=========================

This module provides a single-thread task queue used to deliver notifications
to the presentation shell. Transfers finish on several pool threads at once;
routing their notifications through one worker gives the shell a single,
ordered stream of events and keeps slow listeners off the transfer threads.

Key Features:
-------------
- Single Persistent Thread: One worker thread handles all submitted tasks
- FIFO Ordering: Tasks run in submission order
- Failure Isolation: A task that raises is logged; the worker keeps going
- Flush: Callers (tests, the CLI) can wait until everything queued has run
- Graceful Shutdown: Drains the queue and joins the thread on exit

Usage:
------
    >>> worker = BackgroundWorker(name="Notifier")
    >>> worker.submit(listener, event)
    >>> worker.flush()
    >>> worker.shutdown()

Author: Quantum Asset Toolbox Project
"""

import threading
import queue
import logging
from typing import Callable, Optional


class BackgroundWorker:
    """
    Single-thread task executor with queue management.

    Attributes:
        name: Identifier for logging purposes
        _queue: Thread-safe task queue
        _thread: The persistent worker thread
        _running: Flag to signal shutdown
    """

    def __init__(self, name: str = "BackgroundWorker"):
        """
        Initialize the background worker.

        Args:
            name: Identifier for logging (e.g., "Notifier")
        """
        self.name = name
        self.logger = logging.getLogger(__name__)

        self._queue: queue.Queue = queue.Queue()
        self._running = True

        self._thread = threading.Thread(
            target=self._process_queue,
            name=f"{name}-Thread",
            daemon=True
        )
        self._thread.start()
        self.logger.debug(f"BackgroundWorker '{name}' started")

    def submit(self, task: Callable, *args, **kwargs) -> None:
        """
        Submit a task to the work queue.

        Args:
            task: The callable to execute
            *args: Positional arguments to pass to the task
            **kwargs: Keyword arguments to pass to the task
        """
        if not self._running:
            self.logger.warning(f"Worker '{self.name}' is shut down, ignoring task submission")
            return

        self._queue.put((task, args, kwargs))

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every task submitted so far has run.

        Args:
            timeout: Maximum seconds to wait (None waits indefinitely)

        Returns:
            bool: True if the queue drained, False on timeout
        """
        if not self._running:
            return True
        if threading.current_thread() is self._thread:
            # Called from a task; waiting here would deadlock
            return False

        done = threading.Event()
        self.submit(done.set)
        return done.wait(timeout)

    def shutdown(self, timeout: float = 2.0) -> None:
        """
        Gracefully shut down the worker.

        Tasks already queued still run before the thread exits.

        Args:
            timeout: Maximum seconds to wait for the thread to join
        """
        if not self._running:
            return

        self.logger.debug(f"Worker '{self.name}' shutting down...")
        self._running = False

        # Sentinel unblocks queue.get() once the pending tasks are done
        self._queue.put(None)

        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                self.logger.warning(f"Worker '{self.name}' thread did not terminate within {timeout}s")

        self.logger.debug(f"Worker '{self.name}' shutdown complete")

    def _process_queue(self) -> None:
        """Main loop for the worker thread."""
        while True:
            item = self._queue.get()
            if item is None:
                break

            task, args, kwargs = item
            try:
                task(*args, **kwargs)
            except Exception as e:
                self.logger.error(
                    f"Worker '{self.name}' task failed: {type(e).__name__}: {e}",
                    exc_info=True
                )

    def is_alive(self) -> bool:
        """Check if the worker thread is still running."""
        return self._thread.is_alive()
