# src/request_publisher/core/session_manager.py
"""
Per-worker requests.Session registry for RequestsTransport.

A requests.Session must not be shared between threads, so each transport
worker opens its own and keeps it for the life of the transport. The registry
holds the open sessions in a WeakSet so close() can reach the ones created on
other threads.
"""

import logging
import threading
import weakref
from typing import Callable

import requests

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], requests.Session]


class WorkerSessions:
    """
    One pooled session per worker thread.

    close() bumps a generation counter, so a worker that still holds a
    session from before the close opens a fresh one instead of reusing it.

    Example:
        >>> sessions = WorkerSessions(create_session)
        >>> sessions.current().request("GET", url)  # on a worker thread
        >>> len(sessions)
        1
        >>> sessions.close()
    """

    def __init__(self, factory: SessionFactory):
        self._factory = factory
        self._local = threading.local()
        self._open: "weakref.WeakSet[requests.Session]" = weakref.WeakSet()
        self._lock = threading.Lock()
        self._generation = 0

    def current(self) -> requests.Session:
        """Session of the calling thread, opened on first use."""
        generation = self._generation
        if getattr(self._local, "generation", None) != generation:
            session = self._factory()
            with self._lock:
                self._open.add(session)
            self._local.session = session
            self._local.generation = generation
            logger.debug("Opened session for %s", threading.current_thread().name)
        return self._local.session

    def close(self) -> None:
        """Close every open session. Idempotent."""
        with self._lock:
            self._generation += 1
            sessions = list(self._open)
            self._open.clear()

        for session in sessions:
            try:
                session.close()
            except Exception as e:
                logger.warning("Error closing session: %s", e)

        if sessions:
            logger.debug("Closed %d session(s)", len(sessions))

    def __len__(self) -> int:
        with self._lock:
            return len(self._open)
