"""user_settings table — tracked repositories and journal preferences."""

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, Text, func, text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from devjournal.core.database import Base, TimestampMixin


class UserSettings(TimestampMixin, Base):
    __tablename__ = "user_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    tracked_repositories: Mapped[list[str]] = mapped_column(
        ARRAY(Text), nullable=False, server_default=text("'{}'")
    )

    auto_post_to_twitter: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    auto_post_to_linkedin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    auto_post_to_notion: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    summary_frequency: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'weekly'")
    )
    email_digest_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    email_digest_frequency: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'weekly'")
    )
    ai_prompt_style: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'developer'")
    )

    __table_args__ = (
        Index(
            "idx_user_settings_tracked",
            "tracked_repositories",
            postgresql_using="gin",
        ),
    )
