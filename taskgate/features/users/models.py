"""
User model.
"""
from sqlalchemy import String, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from taskgate.core.database.base import Base, TimestampMixin, generate_id
from taskgate.features.permissions.rbac import Role


class User(Base, TimestampMixin):
    """
    User model representing registered users.

    A user holds exactly one role and belongs to at most one organization.
    organization_id is only changed when the user's organization is created
    or deleted.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    # Stored as given, compared case-sensitively
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[Role] = mapped_column(SQLEnum(Role), nullable=False, default=Role.VIEWER)

    organization_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, role={self.role})>"
