"""Test helpers and utilities for the test suite."""

import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

import jwt
from dotenv import load_dotenv

load_dotenv()

TEST_USER_ID = "11111111-1111-1111-1111-111111111111"
TEST_EMAIL = "test_user@example.com"
TEST_JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"


def print_test_status(message: str):
    """Print test status messages with timestamp."""
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    print(f"[{timestamp}] {message}")


# ==============================================================================
# TOKENS
# ==============================================================================
def create_test_jwt_token(
    user_id: str = TEST_USER_ID,
    email: str = TEST_EMAIL,
    issuer: str = "test_issuer",
    audience: str = "authenticated",
    expires_in: int = 3600,
    secret: str = TEST_JWT_SECRET,
):
    """Create a Supabase-shaped access token.

    With the default issuer the token is a test token, which the API only
    accepts when USE_TEST_TOKENS=1.
    """
    now = int(time.time())
    payload = {
        "sub": user_id,
        "email": email,
        "aud": audience,
        "iat": now,
        "exp": now + expires_in,
        "iss": issuer,
        "role": "authenticated",
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def make_user_claims(user_id: str = TEST_USER_ID, email: str = TEST_EMAIL):
    return {"sub": user_id, "email": email, "aud": "authenticated"}


# ==============================================================================
# DATABASE FAKES
# ==============================================================================
class FakeCursor:
    """Scripted stand-in for a psycopg async cursor.

    ``results`` is consumed in order by fetchone/fetchall. ``errors`` maps a
    SQL fragment to the exception raised when a statement containing it runs.
    ``rowcounts`` maps a SQL fragment to the rowcount reported after it.
    """

    def __init__(
        self,
        results: Optional[List[Any]] = None,
        errors: Optional[Dict[str, Exception]] = None,
        rowcounts: Optional[Dict[str, int]] = None,
    ):
        self.results = list(results or [])
        self.errors = dict(errors or {})
        self.rowcounts = dict(rowcounts or {})
        self.executed: List[tuple] = []
        self.executemany_calls: List[tuple] = []
        self.rowcount = -1

    def _check(self, sql):
        for fragment, error in self.errors.items():
            if fragment in sql:
                raise error
        self.rowcount = -1
        for fragment, count in self.rowcounts.items():
            if fragment in sql:
                self.rowcount = count

    async def execute(self, sql, params=None):
        self.executed.append((sql, params))
        self._check(sql)

    async def executemany(self, sql, params_seq):
        params_seq = list(params_seq)
        self.executemany_calls.append((sql, params_seq))
        self._check(sql)

    async def fetchone(self):
        result = self.results.pop(0) if self.results else None
        if isinstance(result, list):
            return result[0] if result else None
        return result

    async def fetchall(self):
        result = self.results.pop(0) if self.results else []
        if result is None:
            return []
        return result if isinstance(result, list) else [result]

    def statements(self):
        return [sql for sql, _ in self.executed]

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeConnection:
    """Stand-in for a psycopg AsyncConnection sharing one FakeCursor.

    Statements run outside ``transaction()`` count as committed at once, like
    an autocommit connection. Inside a transaction block they are committed
    when the block exits cleanly and dropped when it raises.
    """

    def __init__(self, cursor: Optional[FakeCursor] = None, errors=None):
        self.cursor_obj = cursor or FakeCursor()
        self.errors = dict(errors or {})
        self.executed: List[tuple] = []
        self.committed: List[str] = []
        self.row_factories: List[Any] = []
        self.transactions = 0
        self.rollbacks = 0
        self._pending: List[List[str]] = []

    def cursor(self, row_factory=None):
        self.row_factories.append(row_factory)
        return self.cursor_obj

    async def execute(self, sql, params=None):
        self.executed.append((sql, params))
        for fragment, error in self.errors.items():
            if fragment not in sql:
                continue
            # a callable decides per statement, e.g. to fail only one row
            if callable(error) and not isinstance(error, Exception):
                error = error(params)
            if error is not None:
                raise error
        if self._pending:
            self._pending[-1].append(sql)
        else:
            self.committed.append(sql)
        return self.cursor_obj

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        self._pending.append([])
        try:
            yield self
        except BaseException:
            self._pending.pop()
            self.rollbacks += 1
            raise
        done = self._pending.pop()
        if self._pending:
            self._pending[-1].extend(done)
        else:
            self.committed.extend(done)


def fake_db_connection(conn: FakeConnection):
    """Replacement for ``get_db_connection`` yielding ``conn``."""

    @asynccontextmanager
    async def _get_db_connection():
        yield conn

    return _get_db_connection

