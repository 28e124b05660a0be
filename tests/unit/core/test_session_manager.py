"""Tests for WorkerSessions."""

import threading
from unittest.mock import Mock

import requests

from request_publisher.core.session_manager import WorkerSessions


def mock_session_factory(created):
    def factory():
        session = Mock(spec=requests.Session)
        created.append(session)
        return session
    return factory


def test_same_session_within_thread():
    sessions = WorkerSessions(requests.Session)

    assert sessions.current() is sessions.current()
    assert len(sessions) == 1

    sessions.close()


def test_one_session_per_thread():
    sessions = WorkerSessions(requests.Session)
    seen = []

    def worker():
        seen.append(sessions.current())

    threads = [threading.Thread(target=worker) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len({id(session) for session in seen}) == 3
    assert len(sessions) == 3

    sessions.close()


def test_close_reaches_sessions_of_other_threads():
    created = []
    sessions = WorkerSessions(mock_session_factory(created))
    sessions.current()
    thread = threading.Thread(target=sessions.current)
    thread.start()
    thread.join()

    sessions.close()
    sessions.close()

    assert len(created) == 2
    for session in created:
        session.close.assert_called_once_with()
    assert len(sessions) == 0


def test_worker_opens_fresh_session_after_close():
    """A thread that outlives close() doesn't keep using its closed session."""
    created = []
    sessions = WorkerSessions(mock_session_factory(created))
    opened = []
    closed = threading.Event()
    reopen = threading.Event()

    def worker():
        opened.append(sessions.current())
        closed.set()
        reopen.wait(5)
        opened.append(sessions.current())

    thread = threading.Thread(target=worker)
    thread.start()
    closed.wait(5)
    sessions.close()
    reopen.set()
    thread.join()

    assert opened[0] is not opened[1]
    opened[0].close.assert_called_once_with()
    opened[1].close.assert_not_called()
    assert len(sessions) == 1


def test_close_errors_are_logged(caplog):
    session = Mock(spec=requests.Session)
    session.close.side_effect = OSError("socket gone")
    sessions = WorkerSessions(lambda: session)
    sessions.current()

    sessions.close()

    assert "Error closing session" in caplog.text
