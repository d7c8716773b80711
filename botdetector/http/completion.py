"""Single-assignment completion handles for API calls.

Every client operation returns a ``CompletionHandle`` right away. The
handle moves ``IDLE -> DISPATCHED`` when its request task is scheduled and
then to exactly one terminal state. Callers can ``await`` it, attach
callbacks, poll ``done()`` or cancel the call.

Usage:
    handle = client.fetch_prediction("Zezima")
    handle.add_done_callback(lambda h: print(h.state))
    prediction = await handle
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Generator, Generic, List, Optional, TypeVar

from botdetector.exceptions import (
    ApiError,
    HandleAlreadyResolvedError,
    ParseError,
    TransportError,
    UnauthorizedTokenError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CallState(str, Enum):
    IDLE = "idle"
    DISPATCHED = "dispatched"
    SUCCEEDED = "succeeded"
    FAILED_TRANSPORT = "failed_transport"
    FAILED_STATUS = "failed_status"
    FAILED_PARSE = "failed_parse"

    @property
    def terminal(self) -> bool:
        return self not in (CallState.IDLE, CallState.DISPATCHED)


def state_for_error(error: BaseException) -> CallState:
    if isinstance(error, (ApiError, UnauthorizedTokenError)):
        return CallState.FAILED_STATUS
    if isinstance(error, ParseError):
        return CallState.FAILED_PARSE
    return CallState.FAILED_TRANSPORT


def _mark_retrieved(future: asyncio.Future) -> None:
    # Failures reach callers through the handle and are logged by the client;
    # keeps asyncio from reporting unawaited ones again at garbage collection.
    if not future.cancelled():
        future.exception()


class CompletionHandle(Generic[T]):
    """Awaitable result of one API call, resolved exactly once."""

    def __init__(self, operation: str, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.operation = operation
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future = self._loop.create_future()
        self._future.add_done_callback(_mark_retrieved)
        self._state = CallState.IDLE
        self._task: Optional[asyncio.Task] = None
        self._callbacks: List[Callable[["CompletionHandle[T]"], Any]] = []

    @property
    def state(self) -> CallState:
        return self._state

    def attach(self, task: asyncio.Task) -> None:
        """Bind the request task; the handle is failed if the task ends without resolving it."""
        if self._state is not CallState.IDLE:
            raise RuntimeError(f"{self.operation} already dispatched")
        self._task = task
        self._state = CallState.DISPATCHED
        task.add_done_callback(self._on_task_done)

    def resolve(self, value: T) -> None:
        self._settle(CallState.SUCCEEDED)
        self._future.set_result(value)
        self._run_callbacks()

    def fail(self, error: BaseException) -> None:
        self._settle(state_for_error(error))
        self._future.set_exception(error)
        self._run_callbacks()

    def _settle(self, state: CallState) -> None:
        if self._state.terminal:
            raise HandleAlreadyResolvedError(self.operation, self._state.value)
        self._state = state

    def _on_task_done(self, task: asyncio.Task) -> None:
        if self._state.terminal:
            return
        if task.cancelled():
            self.fail(TransportError(f"{self.operation} cancelled", asyncio.CancelledError()))
            return
        error = task.exception()
        if error is None:
            error = RuntimeError("request task finished without a result")
        self.fail(TransportError(f"{self.operation} failed unexpectedly", error))

    def _run_callbacks(self) -> None:
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            self._loop.call_soon(callback, self)

    def add_done_callback(self, callback: Callable[["CompletionHandle[T]"], Any]) -> None:
        if self._state.terminal:
            self._loop.call_soon(callback, self)
        else:
            self._callbacks.append(callback)

    def done(self) -> bool:
        return self._state.terminal

    def result(self) -> T:
        """Value of a resolved handle; raises the failure for a failed one."""
        return self._future.result()

    def exception(self) -> Optional[BaseException]:
        return self._future.exception()

    def cancel(self) -> bool:
        """Cancel the in-flight request. The handle then fails with ``TransportError``."""
        if self._state.terminal or self._task is None:
            return False
        return self._task.cancel()

    def __await__(self) -> Generator[Any, None, T]:
        return asyncio.shield(self._future).__await__()

    def __repr__(self) -> str:
        return f"<CompletionHandle {self.operation} {self._state.value}>"
