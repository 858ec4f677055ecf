"""Background execution of store and relay calls.

Results come back through Qt signals, so the ``on_done`` and ``on_error``
slots run on the thread that owns the receiving widget.
"""
from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from assistia.errors import AssistiaError


class WorkerSignals(QObject):
    finished = Signal(object)
    failed = Signal(object)


class Worker(QRunnable):
    def __init__(self, fn: Callable, args: tuple, errors: tuple[type[BaseException], ...]):
        super().__init__()
        self.fn = fn
        self.args = args
        self.errors = errors
        self.signals = WorkerSignals()

    def run(self) -> None:
        try:
            result = self.fn(*self.args)
        except self.errors as exc:
            self.signals.failed.emit(exc)
        else:
            self.signals.finished.emit(result)


class TaskRunner:
    def __init__(self, pool: QThreadPool | None = None) -> None:
        self._pool = pool or QThreadPool.globalInstance()

    def submit(
        self,
        fn: Callable,
        *args,
        on_done: Callable,
        on_error: Callable,
        errors: tuple[type[BaseException], ...] = (AssistiaError,),
    ) -> None:
        worker = Worker(fn, args, errors)
        worker.signals.finished.connect(on_done)
        worker.signals.failed.connect(on_error)
        self._pool.start(worker)
