import pytest

from backend.calendar_service.reminders import (
    PERMISSION_DEFAULT,
    PERMISSION_DENIED,
    PERMISSION_GRANTED,
    NotificationError,
)
from backend.client.notifications import ConsoleNotifier, DesktopNotifier


def test_desktop_permission_starts_undetermined():
    assert DesktopNotifier().permission == PERMISSION_DEFAULT


def test_desktop_permission_granted_when_command_exists(mocker):
    mocker.patch("backend.client.notifications.shutil.which", return_value="/usr/bin/notify-send")
    run = mocker.patch("backend.client.notifications.subprocess.run")
    notifier = DesktopNotifier()

    notifier.request_permission()
    notifier.show("Event Reminder", "Upcoming event: Standup at 10:15 AM")

    assert notifier.permission == PERMISSION_GRANTED
    args = run.call_args[0][0]
    assert args[0] == "/usr/bin/notify-send"
    assert args[-2:] == ["Event Reminder", "Upcoming event: Standup at 10:15 AM"]


def test_desktop_permission_denied_without_command(mocker):
    mocker.patch("backend.client.notifications.shutil.which", return_value=None)
    notifier = DesktopNotifier()

    notifier.request_permission()

    assert notifier.permission == PERMISSION_DENIED
    with pytest.raises(NotificationError):
        notifier.show("Event Reminder", "body")


def test_console_notifier_keeps_recent_messages(caplog):
    notifier = ConsoleNotifier(history=2)

    with caplog.at_level("INFO"):
        for body in ["one", "two", "three"]:
            notifier.show(body)

    assert notifier.messages == ["two", "three"]
    assert "three" in caplog.text


def test_desktop_show_failure_raises_notification_error(mocker):
    import subprocess

    mocker.patch("backend.client.notifications.shutil.which", return_value="/usr/bin/notify-send")
    mocker.patch(
        "backend.client.notifications.subprocess.run",
        side_effect=subprocess.CalledProcessError(1, "notify-send"),
    )
    notifier = DesktopNotifier()
    notifier.request_permission()

    with pytest.raises(NotificationError):
        notifier.show("Event Reminder", "body")
