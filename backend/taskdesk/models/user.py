import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, CheckConstraint, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from .base import Base, utcnow

ROLE_VALUES = ("user", "admin", "super-admin")


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN ('user', 'admin', 'super-admin')",
            name="ck_users_role",
        ),
        # admin_permissions is stored for admins only
        CheckConstraint(
            "(role = 'admin') OR (admin_permissions IS NULL)",
            name="ck_users_admin_permissions_role",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(60), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="user", server_default="user"
    )
    # none_as_null: assigning None removes the value (SQL NULL) instead of
    # storing a JSON 'null' document.
    admin_permissions: Mapped[dict[str, Any] | None] = mapped_column(
        JSON(none_as_null=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    @validates("role")
    def validate_role(self, key: str, value: str) -> str:
        if value not in ROLE_VALUES:
            raise ValueError(
                f"Invalid role '{value}'. Must be one of: {', '.join(ROLE_VALUES)}"
            )
        return value

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role}>"
