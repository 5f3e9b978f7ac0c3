"""activities table."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Text,
    UniqueConstraint,
    desc,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from devjournal.core.database import Base, TimestampMixin

ACTIVITY_KINDS = ("commit", "pull_request", "issue", "star", "comment")

activity_kind_enum = Enum(
    *ACTIVITY_KINDS,
    name="activity_kind",
    create_type=False,
)


class Activity(TimestampMixin, Base):
    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    kind: Mapped[str] = mapped_column(activity_kind_enum, nullable=False)
    repository: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    sha: Mapped[Optional[str]] = mapped_column(Text)
    branch: Mapped[Optional[str]] = mapped_column(Text)
    occurred_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        # one record per source URL per user, whatever the kind
        UniqueConstraint("user_id", "url", name="uq_activities_user_url"),
        Index("idx_activities_user_cursor", "user_id", desc("created_at"), desc("id")),
        Index("idx_activities_user_repository", "user_id", "repository"),
    )
