import logging
import queue
import threading
from concurrent.futures import Executor, Future


class DaemonThreadPoolExecutor(Executor):
    """
    A ThreadPoolExecutor-like class whose worker threads are daemons.

    Transfers that are still running when the shell exits (a stalled download,
    for instance) must not keep the process alive, which the stdlib pool would
    do. Workers are started on demand, up to ``max_workers``.
    """
    def __init__(self, max_workers=None, thread_name_prefix='TransferWorker'):
        if max_workers is None:
            max_workers = 4

        if max_workers <= 0:
            raise ValueError("max_workers must be greater than 0")

        self._max_workers = max_workers
        self._thread_name_prefix = thread_name_prefix
        self._work_queue = queue.Queue()
        self._threads = []
        self._shutdown = False
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def submit(self, fn, *args, **kwargs):
        """Schedule ``fn(*args, **kwargs)`` and return its Future."""
        with self._lock:
            if self._shutdown:
                raise RuntimeError('cannot schedule new futures after shutdown')

            future = Future()
            self._work_queue.put((fn, args, kwargs, future))
            self._adjust_thread_count()

        return future

    def _adjust_thread_count(self):
        # Caller holds self._lock. Eager start: one new thread per submission
        # until the pool is full.
        if len(self._threads) < self._max_workers:
            t = threading.Thread(
                target=self._worker_loop,
                daemon=True,
                name=f"{self._thread_name_prefix}-{len(self._threads)}"
            )
            t.start()
            self._threads.append(t)

    def _worker_loop(self):
        while True:
            item = self._work_queue.get()
            if item is None:
                break

            fn, args, kwargs, future = item
            try:
                if future.set_running_or_notify_cancel():
                    try:
                        future.set_result(fn(*args, **kwargs))
                    except BaseException as e:
                        future.set_exception(e)
            finally:
                self._work_queue.task_done()

    def shutdown(self, wait=True, cancel_futures=False):
        with self._lock:
            self._shutdown = True
            threads = list(self._threads)

        if cancel_futures:
            while True:
                try:
                    item = self._work_queue.get_nowait()
                except queue.Empty:
                    break
                if item is not None:
                    item[3].cancel()
                self._work_queue.task_done()

        for _ in threads:
            self._work_queue.put(None)

        if wait:
            for t in threads:
                t.join()
        self.logger.debug(f"{self._thread_name_prefix} pool shut down ({len(threads)} threads)")

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown(wait=True)
        return False
