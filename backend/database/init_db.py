"""
Schema setup for the calendar store.

Creates the `users` and `events` tables (and their indexes) if they do not
exist yet, then runs a quick sanity check that both tables are reachable.

Run once before starting the gateway:
    python -m backend.database.init_db
"""

import logging
from contextlib import closing

from backend.database.db_connection import get_db

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    user_id       SERIAL PRIMARY KEY,
    email         VARCHAR(255) NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS events (
    event_id      SERIAL PRIMARY KEY,
    owner_id      INTEGER NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
    title         VARCHAR(200) NOT NULL,
    description   TEXT NOT NULL DEFAULT '',
    event_date    TIMESTAMPTZ NOT NULL,
    reminder_time INTEGER NOT NULL DEFAULT 0 CHECK (reminder_time BETWEEN 0 AND 525600),
    created_at    TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_events_owner_id ON events (owner_id);
CREATE INDEX IF NOT EXISTS idx_events_event_date ON events (event_date);
"""

TABLES = ("users", "events")


def init_db() -> None:
    """
    Apply the schema and verify that every table exists.

    Raises:
        RuntimeError: If a table is still missing after the schema ran.
    """
    with closing(get_db()) as conn:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
            conn.commit()

            for table in TABLES:
                cur.execute("SELECT to_regclass(%s);", (table,))
                if not cur.fetchone()[0]:
                    raise RuntimeError(f"Table '{table}' is missing after schema setup")
                logging.info(f" - {table}: Found")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")
    init_db()
    logging.info("Database schema is ready.")
