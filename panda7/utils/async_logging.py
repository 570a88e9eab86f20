"""Queue-backed logging for the demo run so handler I/O stays off the tick loop."""

import logging
import queue
from collections.abc import Sequence
from logging.handlers import QueueHandler, QueueListener


class AsyncLogHandler:
    """Serve a logger's output handlers from a background thread.

    While started, ``logger`` carries a single QueueHandler and the listener
    thread feeds ``handlers`` (by default whatever the logger had, e.g. the
    stream handler ``logging.basicConfig`` installs on root). ``stop`` drains
    the queue, flushes the handlers and puts the logger's own handlers back,
    also when the run is unwound by an exception.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        handlers: Sequence[logging.Handler] | None = None,
    ):
        self._logger = logger if logger is not None else logging.getLogger()
        self._handlers = list(self._logger.handlers if handlers is None else handlers)
        self._queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
        self._listener: QueueListener | None = None
        self._saved: list[logging.Handler] = []

    @property
    def started(self) -> bool:
        return self._listener is not None

    def start(self) -> None:
        """No-op when already started or when there is nothing to write to."""
        if self._listener is not None or not self._handlers:
            return
        self._saved = self._logger.handlers[:]
        self._logger.handlers = [QueueHandler(self._queue)]
        self._listener = QueueListener(self._queue, *self._handlers, respect_handler_level=True)
        self._listener.start()

    def stop(self) -> None:
        if self._listener is None:
            return
        try:
            # Blocks until every queued record went through the handlers
            self._listener.stop()
        finally:
            self._listener = None
            self._logger.handlers = self._saved
            self._saved = []
            for handler in self._handlers:
                handler.flush()

    def __enter__(self) -> "AsyncLogHandler":
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
