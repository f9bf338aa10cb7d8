import psycopg
import pytest

from pgmq_client.core.db.health import verify_connection


class StubPgConn:
    def __init__(self, owner, reset_error=None, recovers=True):
        self.owner = owner
        self.reset_error = reset_error
        self.recovers = recovers
        self.reset_calls = 0
        self.error_message = b"FATAL:  the database system is shutting down\n"

    def reset(self):
        self.reset_calls += 1
        if self.reset_error is not None:
            raise self.reset_error
        if self.recovers:
            self.owner.closed = False


class StubConnection:
    def __init__(self, closed=False, **pgconn_kwargs):
        self.closed = closed
        self.pgconn = StubPgConn(self, **pgconn_kwargs)


def test_open_connection_is_left_alone():
    conn = StubConnection(closed=False)
    verify_connection(conn)
    assert conn.pgconn.reset_calls == 0


def test_closed_connection_is_reset_in_place():
    conn = StubConnection(closed=True)
    verify_connection(conn)
    assert conn.pgconn.reset_calls == 1
    assert conn.closed is False


def test_reset_that_leaves_connection_closed_raises():
    conn = StubConnection(closed=True, recovers=False)

    with pytest.raises(psycopg.OperationalError) as exc_info:
        verify_connection(conn)

    message = str(exc_info.value)
    assert "the connection is closed" in message
    assert "shutting down" in message


def test_reset_error_propagates():
    conn = StubConnection(closed=True, reset_error=psycopg.OperationalError("the connection is closed"))

    with pytest.raises(psycopg.OperationalError, match="the connection is closed"):
        verify_connection(conn)
