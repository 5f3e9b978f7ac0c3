"""integrations table — connected publishing providers per user."""

import uuid

from sqlalchemy import Boolean, Enum, ForeignKey, UniqueConstraint, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from devjournal.core.database import Base, TimestampMixin

INTEGRATION_PROVIDERS = ("twitter", "linkedin", "notion", "medium")

integration_provider_enum = Enum(
    *INTEGRATION_PROVIDERS,
    name="integration_provider",
    create_type=False,
)


class Integration(TimestampMixin, Base):
    __tablename__ = "integrations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    provider: Mapped[str] = mapped_column(integration_provider_enum, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )

    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_integrations_user_provider"),
    )
