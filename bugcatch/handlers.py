"""
Process-wide uncaught-exception hooks as a push/pop chain.

``install_crash_handler`` records the current ``sys.excepthook`` and
``threading.excepthook``, installs wrappers in their place and returns a
token.  The wrappers report the exception to a callback and then always
call the hook they replaced, so existing handlers keep running.
``CrashHandlerToken.restore`` puts the recorded hooks back.
"""

import sys
import threading
from types import TracebackType
from typing import Callable, Optional, Type

from .diagnostics.logging import get_sdk_logger

CrashCallback = Callable[[BaseException, str], None]


class CrashHandlerToken:
    """Handle for one installed pair of hooks."""

    def __init__(self, callback: CrashCallback) -> None:
        self._callback = callback
        self._previous_sys_hook = sys.excepthook
        self._previous_thread_hook = threading.excepthook
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    # ── hooks ────────────────────────────────────────────────────

    def _sys_hook(
        self,
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_tb: Optional[TracebackType],
    ) -> None:
        previous = self._previous_sys_hook or sys.__excepthook__
        if exc_value is not None:
            self._report(exc_value, threading.current_thread().name)
        previous(exc_type, exc_value, exc_tb)

    def _thread_hook(self, args: "threading.ExceptHookArgs") -> None:
        previous = self._previous_thread_hook or threading.__excepthook__
        if args.exc_value is not None:
            name = args.thread.name if args.thread is not None else "unknown"
            self._report(args.exc_value, name)
        previous(args)

    def _report(self, exc: BaseException, thread_name: str) -> None:
        try:
            self._callback(exc, thread_name)
        except Exception:
            get_sdk_logger().exception("Crash handler failed to capture exception")

    # ── install / restore ────────────────────────────────────────

    def _install(self) -> None:
        sys.excepthook = self._sys_hook
        threading.excepthook = self._thread_hook
        self._installed = True

    def restore(self) -> None:
        """Put back the hooks that were active before installation.

        Idempotent.  A hook that someone else replaced after us is left in
        place.
        """
        if not self._installed:
            return
        logger = get_sdk_logger()
        if sys.excepthook == self._sys_hook:
            sys.excepthook = self._previous_sys_hook
        else:
            logger.warning("sys.excepthook was replaced after install; leaving it in place")
        if threading.excepthook == self._thread_hook:
            threading.excepthook = self._previous_thread_hook
        else:
            logger.warning("threading.excepthook was replaced after install; leaving it in place")
        self._installed = False
        self._previous_sys_hook = None
        self._previous_thread_hook = None


def install_crash_handler(callback: CrashCallback) -> CrashHandlerToken:
    """Install hooks that report uncaught exceptions to *callback*.

    Args:
        callback: Called with ``(exception, thread_name)``.  Errors it raises
            are logged and never stop the previous hook from running.

    Returns:
        A token whose ``restore()`` uninstalls the hooks.
    """
    token = CrashHandlerToken(callback)
    token._install()
    get_sdk_logger().debug("Auto-capture: installed uncaught exception hooks")
    return token
