"""
Terminal client: log in, show a month, today's events, and keep reminders
running.

Credentials come from CALENDAR_EMAIL / CALENDAR_PASSWORD, or are prompted for.
CALENDAR_MONTH_OFFSET moves the shown month (-1 for the previous one).
Stop with Ctrl+C.
"""

import os
import sys
import time
import logging
from datetime import date
from getpass import getpass

from dotenv import load_dotenv

from backend.calendar_service.grid import parse_week_start, shift_month
from backend.client.api import ApiError, CalendarApi
from backend.client.month_view import render_agenda, render_day, render_month
from backend.client.notifications import ConsoleNotifier, DesktopNotifier
from backend.client.poller import ReminderPoller

load_dotenv()

WEEK_START = os.getenv("WEEK_START", "sunday")
MONTH_OFFSET = int(os.getenv("CALENDAR_MONTH_OFFSET", "0"))


def run(api: CalendarApi, email: str, password: str, month_offset: int = 0) -> ReminderPoller:
    """
    Log in, print the month view, today's events and the agenda, and start
    the reminder poller.

    Args:
        month_offset (int): Months away from the current one to display.

    Returns:
        ReminderPoller: The running poller; the caller stops it.
    """
    api.login(email, password)
    events = api.fetch_events()

    today = date.today()
    shown = shift_month(today, month_offset)
    print(render_month(shown, events, parse_week_start(WEEK_START), today=today))
    print()
    print(render_day(today, events))
    print()
    print(render_agenda(events))

    poller = ReminderPoller(ConsoleNotifier(), DesktopNotifier())
    poller.set_events(events)
    poller.start()
    return poller


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

    email = os.getenv("CALENDAR_EMAIL") or input("Email: ")
    password = os.getenv("CALENDAR_PASSWORD") or getpass("Password: ")

    try:
        poller = run(CalendarApi(), email, password, MONTH_OFFSET)
    except ApiError as e:
        logging.error(f"Calendar client failed: {e.message}")
        return 1

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        poller.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
