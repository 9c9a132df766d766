"""
Events service routes: create, list, and delete calendar events.

Every route requires a bearer token. Events belong to exactly one account
(the owner) and can only be read or removed by that account. Events are
read-only after creation; there is no update route.
"""

import logging
from contextlib import closing
from datetime import datetime, timezone
from typing import Tuple, Dict, Any, Optional

from flask import Blueprint, request, jsonify, Response

from backend.database.db_connection import get_db
from backend.auth_service.utils import verify_token_from_request
from backend.calendar_service.reminders import MAX_REMINDER_MINUTES

events_bp = Blueprint("events", __name__)

# --- CONSTANTS FOR VALIDATION ---
TITLE_MAX_LENGTH = 200

EVENT_COLUMNS = """
    event_id, owner_id, title, description,
    event_date, reminder_time, created_at
"""


# --- REQUEST LOGGING ---
@events_bp.before_request
def before_request() -> None:
    """
    Log the method and path of every request reaching the events service.
    """
    logging.info(f"[Events] Incoming {request.method} {request.path}")


@events_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.

    Args:
        response (Response): The Flask response object.

    Returns:
        Response: The passed-through response object.
    """
    logging.info(f"[Events] Response {response.status}")
    return response


def parse_dt(val: Any) -> Optional[datetime]:
    """
    Safely parse an ISO-8601 string to a timezone-aware datetime.

    Strings without an offset are taken to be UTC.

    Args:
        val (str): The date string to parse.

    Returns:
        datetime: The parsed datetime, or None if invalid.
    """
    if not val or not isinstance(val, str):
        return None
    try:
        # Handles 'YYYY-MM-DDTHH:MM' and '...Z' or '...+00:00'
        if val.endswith('Z'):
            val = val[:-1] + '+00:00'
        parsed = datetime.fromisoformat(val)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_dt(val: Optional[datetime]) -> Optional[str]:
    """
    Render a stored timestamp as an ISO-8601 UTC string ending in 'Z'.
    """
    if val is None:
        return None
    if val.tzinfo is None:
        val = val.replace(tzinfo=timezone.utc)
    return val.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def serialize_event(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert an `events` row into the JSON shape returned to clients.
    """
    return {
        "id": row["event_id"],
        "owner": row["owner_id"],
        "title": row["title"],
        "description": row["description"] or "",
        "date": format_dt(row["event_date"]),
        "reminderTime": row["reminder_time"],
        "createdAt": format_dt(row["created_at"]),
    }


def _owner_exists(cur, owner_id: int) -> bool:
    cur.execute("SELECT 1 FROM users WHERE user_id = %s;", (owner_id,))
    return cur.fetchone() is not None


@events_bp.route("", methods=["POST"])
def create_event() -> Tuple[Response, int]:
    """
    Create an event for the authenticated owner.

    Expects a JSON body with:
    - owner (int): Account id; must match the bearer token.
    - title (str): Non-empty, at most 200 characters.
    - description (str, optional): Defaults to "".
    - date (str): ISO-8601 timestamp.
    - reminderTime (int, optional): Minutes before the event, 0 to 525600 (one year).
      Defaults to 0.

    Returns:
        201: The created event.
        400: Validation error.
        401: Missing/invalid token, or owner not found.
        403: Token belongs to a different account.
        500: Server error.
    """
    user_id, err, code = verify_token_from_request()
    if err:
        return err, code

    data: Dict[str, Any] = request.get_json(silent=True) or {}

    owner = data.get("owner")
    title = data.get("title")
    date_str = data.get("date")

    # --- START VALIDATION ---
    if not isinstance(owner, int) or isinstance(owner, bool):
        return jsonify({"error": "Missing required fields"}), 400
    if not isinstance(title, str) or not title.strip() or not date_str:
        return jsonify({"error": "Missing required fields"}), 400

    title = title.strip()
    if len(title) > TITLE_MAX_LENGTH:
        return jsonify({"error": f"Title must be {TITLE_MAX_LENGTH} characters or less."}), 400

    event_dt = parse_dt(date_str)
    if not event_dt:
        return jsonify({"error": "Invalid date format. Use ISO-8601."}), 400

    description = data.get("description") or ""
    if not isinstance(description, str):
        return jsonify({"error": "description must be a string"}), 400
    description = description.strip()

    reminder_time = data.get("reminderTime", 0)
    if reminder_time is None:
        reminder_time = 0
    if not isinstance(reminder_time, int) or isinstance(reminder_time, bool):
        return jsonify({"error": "reminderTime must be an integer"}), 400
    if not 0 <= reminder_time <= MAX_REMINDER_MINUTES:
        return jsonify({"error": f"reminderTime must be between 0 and {MAX_REMINDER_MINUTES} minutes"}), 400
    # --- END VALIDATION ---

    if owner != user_id:
        return jsonify({"error": "permission denied"}), 403

    sql = f"""
        INSERT INTO events (owner_id, title, description, event_date, reminder_time)
        VALUES (%s, %s, %s, %s, %s)
        RETURNING {EVENT_COLUMNS};
    """

    try:
        with closing(get_db()) as conn:
            with conn.cursor() as cur:
                if not _owner_exists(cur, owner):
                    return jsonify({"error": "User not found"}), 401

                cur.execute(sql, (owner, title, description, event_dt, reminder_time))
                new_event = cur.fetchone()
                conn.commit()
    except Exception:
        logging.exception("[Events] Database error creating event")
        return jsonify({"error": "Server error while creating event"}), 500

    return jsonify(serialize_event(new_event)), 201


@events_bp.route("/<int:owner_id>", methods=["GET"])
def list_events(owner_id: int) -> Tuple[Response, int]:
    """
    Return every event of an owner, sorted ascending by date.

    Returns:
        200: List of event objects.
        401: Missing/invalid token, or owner not found.
        403: Token belongs to a different account.
        500: Database error.
    """
    _, err, code = verify_token_from_request(owner_id=owner_id)
    if err:
        return err, code

    sql = f"""
        SELECT {EVENT_COLUMNS}
        FROM events
        WHERE owner_id = %s
        ORDER BY event_date ASC, event_id ASC;
    """

    try:
        with closing(get_db()) as conn:
            with conn.cursor() as cur:
                if not _owner_exists(cur, owner_id):
                    return jsonify({"error": "User not found"}), 401

                cur.execute(sql, (owner_id,))
                rows = [serialize_event(r) for r in cur.fetchall()]
    except Exception:
        logging.exception("[Events] Database error listing events")
        return jsonify({"error": "Server error while fetching events"}), 500

    return jsonify(rows), 200


@events_bp.route("/<int:event_id>", methods=["DELETE"])
def delete_event(event_id: int) -> Tuple[Response, int]:
    """
    Delete one of the caller's events by id.

    Returns:
        200: { "status": "deleted" }
        401: Missing/invalid token.
        404: No event with this id belongs to the caller.
        500: Database error.
    """
    user_id, err, code = verify_token_from_request()
    if err:
        return err, code

    try:
        with closing(get_db()) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM events WHERE event_id = %s AND owner_id = %s;",
                    (event_id, user_id),
                )
                if cur.rowcount == 0:
                    conn.rollback()
                    return jsonify({"error": "Event not found"}), 404
                conn.commit()
    except Exception:
        logging.exception(f"[Events] Database error deleting event {event_id}")
        return jsonify({"error": "Server error while deleting event"}), 500

    return jsonify({"status": "deleted"}), 200
