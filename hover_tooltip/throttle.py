from __future__ import annotations

import time
from typing import Any, Callable, Optional

AfterFn = Callable[[int, Callable[[], None]], object]
AfterCancelFn = Callable[[object], None]
LoggerFn = Callable[..., None]


def _noop_log(message: str, *args: object) -> None:
    return None


class Throttler:
    """Runs ``func`` at most once per ``wait_ms`` window, on the leading and trailing edge.

    Calls made while a window is open are coalesced; when the window closes the
    latest arguments are replayed once and a fresh window opens behind them.
    Timers come from the injected ``after``/``after_cancel`` pair so the wrapper
    can be driven by Qt, Tk or a test harness.
    """

    def __init__(
        self,
        func: Callable[..., None],
        wait_ms: int,
        *,
        after: AfterFn,
        after_cancel: AfterCancelFn,
        leading: bool = True,
        trailing: bool = True,
        time_source: Callable[[], float] = time.monotonic,
        logger: Optional[LoggerFn] = None,
    ) -> None:
        self._func = func
        self.wait_ms = max(1, int(wait_ms))
        self._after = after
        self._after_cancel = after_cancel
        self._leading = leading
        self._trailing = trailing
        self._time = time_source
        self._logger = logger or _noop_log

        self._window_handle: object | None = None
        self._pending: Optional[tuple[tuple[Any, ...], dict[str, Any]]] = None
        self.last_invoked_at: Optional[float] = None
        self.invocations = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def window_open(self) -> bool:
        return self._window_handle is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        if self._window_handle is None:
            self._open_window()
            if self._leading:
                self._invoke(args, kwargs)
            else:
                self._pending = (args, kwargs)
            return
        self._pending = (args, kwargs)

    def flush(self) -> None:
        pending = self._pending
        self._close_window()
        if pending is not None:
            self._invoke(*pending)

    def cancel(self) -> None:
        self._close_window()

    def _open_window(self) -> None:
        self._window_handle = self._after(self.wait_ms, self._on_window_end)

    def _close_window(self) -> None:
        handle = self._window_handle
        self._window_handle = None
        self._pending = None
        if handle is not None:
            try:
                self._after_cancel(handle)
            except Exception:
                pass

    def _on_window_end(self) -> None:
        self._window_handle = None
        pending = self._pending
        self._pending = None
        if pending is None or not self._trailing:
            return
        self._open_window()
        self._invoke(*pending)

    def _invoke(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        now = self._time()
        if self.last_invoked_at is not None:
            self._logger("Throttled call after %.1fms", (now - self.last_invoked_at) * 1000.0)
        self.last_invoked_at = now
        self.invocations += 1
        self._func(*args, **kwargs)
