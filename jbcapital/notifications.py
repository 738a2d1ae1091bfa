"""
Notification center for the admin dashboard.

Notifications are kept newest-first in memory. Application events
(submission, status changes) post here; the admin page lists, filters and
acknowledges them.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from jbcapital.application_wizard import generate_random_id

logger = logging.getLogger(__name__)


NOTIFICATION_TYPES = ("application", "status", "document", "system")
IMPORTANCE_LEVELS = ("high", "medium", "low")

DEFAULT_SETTINGS = {
    "sound_enabled": True,
    "browser_notifications_enabled": True,
    "email_notifications_enabled": True,
    "sound_volume": 0.5,
}


class NotificationCenter:
    """In-memory notification list plus delivery settings."""

    def __init__(self):
        self.notifications: List[Dict] = []
        self.settings = dict(DEFAULT_SETTINGS)

    def add_notification(self, title: str, message: str, type: str = "system",
                         importance: str = "medium", user_id: Optional[str] = None,
                         link: Optional[str] = None, data: Optional[Dict] = None) -> Dict:
        if importance not in IMPORTANCE_LEVELS:
            raise ValueError(f"Unknown importance '{importance}'")
        notification = {
            "id": generate_random_id("NTF"),
            "user_id": user_id,
            "title": title,
            "message": message,
            "type": type,
            "date": datetime.now().isoformat(timespec="seconds"),
            "read": False,
            "link": link,
            "data": data or {},
            "importance": importance,
        }
        self.notifications.insert(0, notification)
        logger.info(f"Notification [{type}/{importance}]: {title}")
        return notification

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n["read"])

    def mark_as_read(self, notification_id: str) -> bool:
        for n in self.notifications:
            if n["id"] == notification_id:
                n["read"] = True
                return True
        return False

    def mark_all_as_read(self):
        for n in self.notifications:
            n["read"] = True

    def clear(self):
        self.notifications = []

    def get_by_user(self, user_id: str) -> List[Dict]:
        """Notifications addressed to user_id plus global ones."""
        return [n for n in self.notifications
                if not n["user_id"] or n["user_id"] == user_id]

    def filter(self, type: Optional[str] = None, unread_only: bool = False) -> List[Dict]:
        items = self.notifications
        if type:
            items = [n for n in items if n["type"] == type]
        if unread_only:
            items = [n for n in items if not n["read"]]
        return items

    def update_settings(self, **changes):
        unknown = set(changes) - set(DEFAULT_SETTINGS)
        if unknown:
            raise ValueError(f"Unknown notification settings: {', '.join(sorted(unknown))}")
        if "sound_volume" in changes:
            changes["sound_volume"] = min(max(float(changes["sound_volume"]), 0.0), 1.0)
        self.settings.update(changes)


def notify_application_submitted(center: NotificationCenter, application: Dict) -> Dict:
    return center.add_notification(
        title="New loan application",
        message=f"{application['applicant_name']} applied for "
                f"R{application['loan_amount']:,.0f} over {application['loan_term']} months",
        type="application",
        importance="high",
        link=application["id"],
        data={"application_id": application["id"]},
    )


def notify_status_change(center: NotificationCenter, application: Dict) -> Dict:
    importance = "high" if application["status"] in ("Approved", "Rejected") else "medium"
    return center.add_notification(
        title=f"Application {application['status'].lower()}",
        message=f"{application['id']} ({application['applicant_name']}) is now "
                f"{application['status']}",
        type="status",
        importance=importance,
        user_id=application.get("user_id"),
        link=application["id"],
        data={"application_id": application["id"], "status": application["status"]},
    )
