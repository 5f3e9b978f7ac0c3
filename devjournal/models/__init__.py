"""SQLAlchemy ORM models — one file per table."""

from devjournal.models.activity import Activity
from devjournal.models.integration import Integration
from devjournal.models.summary import Summary
from devjournal.models.user import User
from devjournal.models.user_settings import UserSettings

__all__ = [
    "Activity",
    "Integration",
    "Summary",
    "User",
    "UserSettings",
]
