"""
=============================================================================
CORE NETWORKING MODULE
=============================================================================

Sockets, threads and signals: the parts of the server that do not know
what HTTP is.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CORE MODULE COMPONENTS                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Listener            bind (with retries), listen, accept loop       │
    │   Connection          one client socket: recv, send, close           │
    │   WorkerPool          fixed threads draining a FIFO of tasks         │
    │   RunFlag             "keep accepting" boolean                       │
    │   ShutdownController  SIGINT → RunFlag.clear()                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
=============================================================================
"""

from .shutdown import RunFlag, ShutdownController
from .connection import Connection, ConnectionState
from .thread_pool import WorkerPool, Worker, WorkerState, Task
from .socket_server import Listener

__all__ = [
    "Listener",            # Listening socket + accept loop
    "Connection",          # Wrapper for a client socket
    "ConnectionState",     # Connection lifecycle states
    "WorkerPool",          # Fixed pool of worker threads
    "Worker",              # One worker thread
    "WorkerState",         # Worker monitoring states
    "Task",                # Queued unit of work
    "RunFlag",             # Accept loop keep-going flag
    "ShutdownController",  # Signal handler installation
]
