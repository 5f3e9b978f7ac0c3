"""summaries table — generated journal entries."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Text,
    desc,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from devjournal.core.database import Base, TimestampMixin

SUMMARY_PERIODS = ("daily", "weekly")

summary_period_enum = Enum(
    *SUMMARY_PERIODS,
    name="summary_period",
    create_type=False,
)


class Summary(TimestampMixin, Base):
    __tablename__ = "summaries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    period: Mapped[str] = mapped_column(summary_period_enum, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    ai_generated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint(
            "(published AND published_at IS NOT NULL) "
            "OR (NOT published AND published_at IS NULL)",
            name="published_consistency",
        ),
        Index("idx_summaries_user_cursor", "user_id", desc("created_at"), desc("id")),
    )
