from typing import Any, Callable

from loguru import logger
from PySide6.QtCore import QObject, QRunnable, Signal, Slot


class TaskSignals(QObject):
    finished = Signal(object)
    failed = Signal(object)


class TaskRunnable(QRunnable):
    """
    Runs one blocking call on the global thread pool and reports back
    through Qt signals, which are delivered on the receiver's thread.
    """

    def __init__(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self.func = func
        self.args = args
        self.kwargs = kwargs
        self.signals = TaskSignals()

    @Slot()
    def run(self) -> None:
        try:
            result = self.func(*self.args, **self.kwargs)
        except Exception as e:
            name = getattr(self.func, "__name__", repr(self.func))
            logger.debug(f"Background task {name} failed: {e}")
            self.signals.failed.emit(e)
            return
        self.signals.finished.emit(result)
