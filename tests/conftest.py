from contextlib import contextmanager

import pytest
from psycopg.pq import TransactionStatus

from pgmq_client import Client


class FakePgConn:
    def __init__(self, conn):
        self.conn = conn
        self.reset_calls = 0
        self.error_message = b""

    @property
    def transaction_status(self):
        if self.conn.closed:
            return TransactionStatus.UNKNOWN
        return TransactionStatus.INTRANS if self.conn._depth else TransactionStatus.IDLE

    def reset(self):
        self.reset_calls += 1
        if self.conn.reset_succeeds:
            self.conn.closed = False
        else:
            self.error_message = b"could not connect to server: Connection refused\n"


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def execute(self, query, params=()):
        text = query if isinstance(query, str) else query.as_string(None)
        self.conn.executed.append((text, tuple(params)))
        self._rows = self.conn.respond(text, tuple(params))

    def fetchall(self):
        return list(self._rows)

    def fetchone(self):
        return self._rows[0] if self._rows else None


class FakeConnection:
    """
    Records executed SQL and transaction boundaries.

    `results` maps a SQL substring to the rows returned (or a callable
    producing them, which may raise).
    """

    def __init__(self, results=None):
        self.results = dict(results or {})
        self.executed = []
        self.events = []
        self.closed = False
        self.close_calls = 0
        self.reset_succeeds = True
        self.pgconn = FakePgConn(self)
        self._depth = 0

    def respond(self, text, params):
        for key, rows in self.results.items():
            if key in text:
                return rows(text, params) if callable(rows) else rows
        return []

    def cursor(self, row_factory=None):
        return FakeCursor(self)

    @contextmanager
    def transaction(self):
        depth = self._depth
        self.events.append("BEGIN" if depth == 0 else f"SAVEPOINT {depth}")
        self._depth += 1
        try:
            yield
        except BaseException:
            self.events.append("ROLLBACK" if depth == 0 else f"ROLLBACK TO {depth}")
            raise
        else:
            self.events.append("COMMIT" if depth == 0 else f"RELEASE {depth}")
        finally:
            self._depth -= 1

    def close(self):
        self.close_calls += 1
        self.closed = True


@pytest.fixture
def fake_connection_cls():
    return FakeConnection


@pytest.fixture
def fake_conn():
    return FakeConnection()


@pytest.fixture
def make_client():
    """Build a Client whose pool opens FakeConnections; the opened ones are on client.opened."""
    clients = []

    def _make(results=None, pool_size=1, pool_timeout=1.0, **kwargs):
        opened = []

        def factory():
            conn = FakeConnection(results)
            opened.append(conn)
            return conn

        client = Client(factory, pool_size=pool_size, pool_timeout=pool_timeout, **kwargs)
        client.opened = opened
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()
