import os
from datetime import datetime, timezone

# Ensure secrets are set before the blueprints are imported
os.environ["JWT_SECRET"] = "test_secret"
os.environ.setdefault("DATABASE_URL", "postgresql://localhost/calendar_test")

import pytest
from flask import Flask

from backend.auth_service.routes import auth_bp
from backend.auth_service.utils import create_token
from backend.events_service.routes import events_bp


@pytest.fixture
def app():
    app = Flask(__name__)
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(events_bp, url_prefix="/api/events")

    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    """Bearer header for account 1."""
    token = create_token(1, "test@example.com")
    return {"Authorization": f"Bearer {token}"}


def _mock_connection(mocker):
    mock_conn = mocker.MagicMock()
    mock_cursor = mocker.MagicMock()

    # Setup the context manager for cursor
    mock_cursor.__enter__.return_value = mock_cursor
    mock_cursor.__exit__.return_value = None

    # Connect cursor to connection
    mock_conn.cursor.return_value = mock_cursor
    return mock_conn, mock_cursor


@pytest.fixture
def mock_db(mocker):
    """
    Mocks the database connection and cursor used by the auth routes.
    """
    mock_conn, mock_cursor = _mock_connection(mocker)
    mocker.patch("backend.auth_service.routes.get_db", return_value=mock_conn)
    return mock_conn, mock_cursor


@pytest.fixture
def mock_events_db(mocker):
    """
    Mocks the database connection and cursor used by the events routes.
    """
    mock_conn, mock_cursor = _mock_connection(mocker)
    mocker.patch("backend.events_service.routes.get_db", return_value=mock_conn)
    return mock_conn, mock_cursor


# --- IN-MEMORY STORE ---
class FakeStore:
    """Just enough of the `users`/`events` tables for the events routes."""

    def __init__(self, users=(1,)):
        self.users = set(users)
        self.events = []
        self.next_id = 100
        self.created_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeCursor:
    def __init__(self, store):
        self.store = store
        self.rowcount = -1
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None

    def execute(self, sql, params=()):
        sql = " ".join(sql.split())
        if sql.startswith("SELECT 1 FROM users"):
            self._rows = [(1,)] if params[0] in self.store.users else []
        elif sql.startswith("INSERT INTO events"):
            owner, title, description, event_date, reminder_time = params
            self.store.next_id += 1
            row = {
                "event_id": self.store.next_id,
                "owner_id": owner,
                "title": title,
                "description": description,
                "event_date": event_date,
                "reminder_time": reminder_time,
                "created_at": self.store.created_at,
            }
            self.store.events.append(row)
            self._rows = [row]
        elif sql.startswith("SELECT") and "FROM events" in sql:
            owned = [r for r in self.store.events if r["owner_id"] == params[0]]
            self._rows = sorted(owned, key=lambda r: (r["event_date"], r["event_id"]))
        elif sql.startswith("DELETE FROM events"):
            event_id, owner = params
            kept = [r for r in self.store.events if not (r["event_id"] == event_id and r["owner_id"] == owner)]
            self.rowcount = len(self.store.events) - len(kept)
            self.store.events = kept
        else:
            raise AssertionError(f"Unexpected SQL: {sql}")

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)


class FakeConnection:
    def __init__(self, store):
        self.store = store

    def cursor(self):
        return FakeCursor(self.store)

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


@pytest.fixture
def fake_store(mocker):
    store = FakeStore()
    mocker.patch("backend.events_service.routes.get_db", side_effect=lambda: FakeConnection(store))
    return store
