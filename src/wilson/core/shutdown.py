"""
=============================================================================
SHUTDOWN CONTROLLER
=============================================================================

Turns Ctrl+C (SIGINT) into an orderly stop.

=============================================================================
WHAT THE SIGNAL HANDLER MAY DO
=============================================================================

A Python signal handler runs on the main thread between two bytecodes of
whatever that thread was doing. It can interrupt the accept loop halfway
through a lock acquisition or a logging call. So the handler does ONE thing:

    def _handle(signum, frame):
        run_flag.clear()          # plain attribute store

Everything else (closing the listening socket, draining the worker pool)
happens in normal code after the accept loop notices the flag:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        SHUTDOWN SEQUENCE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Ctrl+C ──► handler: run_flag.clear()                               │
    │                                                                      │
    │   accept loop (wakes within accept_poll_interval)                    │
    │       └──► while run_flag  → False, loop exits                       │
    │                                                                      │
    │   HTTPServer.run() cleanup                                           │
    │       ├──► listener.close()        stop accepting                    │
    │       ├──► pool.shutdown()         queued + in-flight tasks finish   │
    │       └──► controller.uninstall()  previous handlers restored        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

signal.signal() only works on the main thread. When the server runs on a
worker thread (tests, embedding in another app) install() does nothing and
the embedder stops the server with HTTPServer.stop() instead.
=============================================================================
"""

import logging
import signal
import threading
from typing import Dict, Iterable

logger = logging.getLogger(__name__)


class RunFlag:
    """
    The "keep serving" flag.

    Starts set. Cleared once, by the signal handler or HTTPServer.stop().
    Reads and writes are single attribute accesses, which the interpreter
    performs atomically.
    """

    def __init__(self):
        self._running = True

    def is_set(self) -> bool:
        return self._running

    def clear(self) -> None:
        self._running = False

    def __bool__(self) -> bool:
        return self._running

    def __repr__(self) -> str:
        return f"RunFlag({'set' if self._running else 'cleared'})"


class ShutdownController:
    """
    Installs signal handlers that clear a RunFlag.

    Usage:
        flag = RunFlag()
        with ShutdownController(flag):
            while flag.is_set():
                ...
    """

    def __init__(self, run_flag: RunFlag, signals: Iterable[int] = (signal.SIGINT,)):
        self.run_flag = run_flag
        self.signals = tuple(signals)
        self._previous: Dict[int, object] = {}

    @property
    def installed(self) -> bool:
        return bool(self._previous)

    def _handle(self, signum, frame) -> None:
        self.run_flag.clear()

    def install(self) -> bool:
        """
        Register the handlers.

        Returns:
            True if installed, False when not on the main thread.
        """
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread; signal handlers not installed")
            return False

        for sig in self.signals:
            self._previous[sig] = signal.signal(sig, self._handle)

        names = ", ".join(signal.Signals(sig).name for sig in self.signals)
        logger.debug(f"Shutdown handlers installed for {names}")
        return True

    def uninstall(self) -> None:
        """Restore whatever handlers were there before install()."""
        for sig, previous in self._previous.items():
            signal.signal(sig, previous)
        self._previous.clear()

    def __enter__(self) -> "ShutdownController":
        self.install()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.uninstall()
        return False
