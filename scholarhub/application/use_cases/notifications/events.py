"""Utility helpers to generate and dispatch domain notifications."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy.orm import Session

from scholarhub.domain.entities import Notification, NotificationMessage
from scholarhub.infrastructure.notifications import (
    NOTIFICATION_BROADCAST_EVENT,
    broadcast_publisher,
    dispatch_notification,
)

_STATUS_LABELS = {
    "rejected_insufficient_hours": "rejected - insufficient hours",
    "rejected_incomplete_documentation": "rejected - incomplete documentation",
    "rejected_invalid": "rejected - invalid",
    "rejected_incomplete": "rejected - incomplete",
    "rejected_incorrect_format": "rejected - incorrect format",
    "rejected_unreadable": "rejected - unreadable",
    "rejected_other": "rejected - other",
}


def status_label(status: str) -> str:
    """Return the human readable label of a workflow status code."""

    return _STATUS_LABELS.get(status, status.replace("_", " "))


def _type_for_status(status: str) -> str:
    if status.startswith("rejected"):
        return "error"
    if status in {"approved", "completed", "enrolled", "documents_approved"}:
        return "success"
    return "info"


def send_notification(
    session: Session,
    recipients: Iterable[int | None],
    *,
    title: str,
    message: str,
    type: str = "info",
    action_url: str | None = None,
) -> list[Notification]:
    """Dispatch a notification through every configured channel."""

    return dispatch_notification(
        session,
        recipients,
        NotificationMessage(title=title, message=message, type=type, action_url=action_url),
    )


def notify_application_status_changed(
    session: Session,
    *,
    student_id: int,
    application_id: int,
    previous_status: str,
    new_status: str,
) -> list[Notification]:
    """Tell a student their scholarship application moved to ``new_status``."""

    if previous_status == new_status:
        return []

    return send_notification(
        session,
        [student_id],
        title="Application Status Update",
        message=f"Your scholarship application status has been updated to: {status_label(new_status)}.",
        type=_type_for_status(new_status),
        action_url=f"/student/applications/{application_id}",
    )


def notify_community_service_report_status_changed(
    session: Session,
    *,
    student_id: int,
    report_id: int,
    previous_status: str,
    new_status: str,
    rejection_reason: str | None = None,
) -> list[Notification]:
    """Tell a student their community service report was reviewed."""

    if previous_status == new_status:
        return []

    message = (
        f"Your community service report status has been updated to: {status_label(new_status)}."
    )
    if rejection_reason:
        message += f" Reason: {rejection_reason}"
    return send_notification(
        session,
        [student_id],
        title="Community Service Report Update",
        message=message,
        type=_type_for_status(new_status),
        action_url=f"/student/community-service/reports/{report_id}",
    )


def notify_community_service_entry_status_changed(
    session: Session,
    *,
    student_id: int,
    entry_id: int,
    previous_status: str,
    new_status: str,
    admin_notes: str | None = None,
) -> list[Notification]:
    """Tell a student one of their logged service entries was reviewed."""

    if previous_status == new_status:
        return []

    message = (
        f"Your community service entry status has been updated to: {status_label(new_status)}."
    )
    if admin_notes:
        message += f" Notes: {admin_notes}"
    return send_notification(
        session,
        [student_id],
        title="Community Service Entry Update",
        message=message,
        type=_type_for_status(new_status),
        action_url=f"/student/community-service/entries/{entry_id}",
    )


def broadcast_notification_event(
    recipients: Iterable[int | None],
    *,
    title: str,
    message: str,
    type: str = "info",
    action_url: str | None = None,
) -> None:
    """Publish a realtime-only notification; nothing is persisted."""

    payload = NotificationMessage(
        title=title, message=message, type=type, action_url=action_url
    ).to_payload()
    broadcast_publisher.publish_to_users(recipients, NOTIFICATION_BROADCAST_EVENT, payload)


__all__ = [
    "broadcast_notification_event",
    "notify_application_status_changed",
    "notify_community_service_entry_status_changed",
    "notify_community_service_report_status_changed",
    "send_notification",
    "status_label",
]
