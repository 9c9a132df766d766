"""
HTTP client for the calendar REST gateway.

Wraps register/login and the events routes. Every failing call raises
ApiError carrying the server's error message, or a generic connectivity
message when the server cannot be reached.
"""

import os
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

from backend.calendar_service.models import CalendarEvent

load_dotenv()

API_URL = os.getenv("CALENDAR_API_URL", "http://localhost:5000/api")
REQUEST_TIMEOUT_SECONDS = 10

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error response from the gateway, or a failed connection (status None)."""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message


def _iso_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.astimezone()  # naive input is local time
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class CalendarApi:
    """
    Session-bound client. `login` or `register` stores the account id and
    token used by the event calls.
    """

    def __init__(self, base_url: str = API_URL, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.user_id: Optional[int] = None
        self.email: Optional[str] = None
        self.token: Optional[str] = None

    # --- TRANSPORT ---
    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                timeout=REQUEST_TIMEOUT_SECONDS,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(None, "Unable to reach the server") from e

        if not response.ok:
            try:
                message = response.json().get("error") or response.reason
            except ValueError:
                message = response.reason
            raise ApiError(response.status_code, message)

        return response.json()

    def _require_login(self) -> int:
        if self.user_id is None:
            raise ApiError(401, "Not logged in")
        return self.user_id

    def _remember(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self.user_id = data["user_id"]
        self.email = data["email"]
        self.token = data["token"]
        return data

    # --- ACCOUNTS ---
    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def register(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/register", json={"email": email, "password": password})
        return self._remember(data)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/login", json={"email": email, "password": password})
        return self._remember(data)

    def logout(self) -> None:
        self.user_id = None
        self.email = None
        self.token = None

    # --- EVENTS ---
    def fetch_events(self) -> List[CalendarEvent]:
        """The logged-in account's events, ascending by date."""
        owner = self._require_login()
        return [CalendarEvent.from_api(e) for e in self._request("GET", f"/events/{owner}")]

    def create_event(
        self,
        title: str,
        date: datetime,
        description: str = "",
        reminder_time: int = 0,
    ) -> CalendarEvent:
        owner = self._require_login()
        payload = {
            "owner": owner,
            "title": title,
            "description": description,
            "date": _iso_utc(date),
            "reminderTime": reminder_time,
        }
        return CalendarEvent.from_api(self._request("POST", "/events", json=payload))

    def delete_event(self, event_id: int) -> None:
        self._require_login()
        self._request("DELETE", f"/events/{event_id}")
