"""
analyzer/tasks.py — Detached background tasks bound to the Flask app.

A spawned task runs inside an application context of the app that spawned it. If it raises, the
exception is handed to the task's error callback rather than being lost in
the executor; there is no cancellation and no retry.
"""
import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from contextlib import nullcontext
from typing import Any, Callable

from flask import current_app, has_app_context

logger = logging.getLogger(__name__)


class InlineExecutor(Executor):
    """Runs submitted work immediately in the caller's thread."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:
            future.set_exception(exc)
        return future


def make_executor(kind: str, workers: int) -> Executor:
    if kind == "inline":
        return InlineExecutor()
    return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dpr-analysis")


class TaskRunner:
    """Spawns fire-and-forget tasks with an explicit error channel."""

    def __init__(self, app, executor: Executor):
        self.app = app
        self.executor = executor

    def spawn(self, name: str, fn: Callable[..., Any],
              on_error: Callable[[BaseException], Any], *args: Any) -> Future:
        return self.executor.submit(self._run, name, fn, on_error, *args)

    def _context(self):
        # Inline execution inside a request reuses that request's context.
        if has_app_context() and current_app._get_current_object() is self.app:
            return nullcontext()
        return self.app.app_context()

    def _run(self, name: str, fn, on_error, *args) -> None:
        with self._context():
            try:
                fn(*args)
                logger.info("Task %s finished", name)
            except Exception as exc:
                logger.error("Task %s failed: %s", name, exc, exc_info=True)
                try:
                    on_error(exc)
                except Exception as handler_exc:
                    # Nothing further up the stack can record this.
                    logger.critical("Error handler for task %s failed: %s",
                                    name, handler_exc, exc_info=True)
