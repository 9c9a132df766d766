"""
Connection factory for the calendar store.

Both blueprints open one short-lived connection per request and close it
with `contextlib.closing`; nothing is pooled.
"""

import os
import logging

import psycopg2
from psycopg2.extras import DictCursor
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")


def get_db():
    """
    Open a connection to the database holding the `users` and `events` tables.

    Rows are returned by key, so handlers read `row["event_date"]` rather
    than positional tuples. The caller commits and closes:

        with closing(get_db()) as conn:
            with conn.cursor() as cur:
                cur.execute(...)
            conn.commit()

    Raises:
        RuntimeError: If DATABASE_URL is empty.
        psycopg2.Error: If the server cannot be reached.
    """
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not set; point it at the calendar database.")

    try:
        conn = psycopg2.connect(DATABASE_URL)
    except psycopg2.Error as e:
        logging.error(f"[DB] Could not connect to the calendar database: {e}")
        raise

    conn.cursor_factory = DictCursor
    return conn
