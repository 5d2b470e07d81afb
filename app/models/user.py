import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
        CheckConstraint("status IN ('active', 'blocked')", name="ck_users_status"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(32), nullable=False, unique=True, index=True)
    # hex(iv):hex(tag):hex(ciphertext), see app.core.field_cipher
    national_id_encrypted = Column(Text, nullable=True)
    tax_id_encrypted = Column(Text, nullable=True)
    occupation = Column(String(255), nullable=True)
    organization = Column(String(255), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user", server_default="user")
    status = Column(String(20), nullable=False, default="active", server_default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    applications = relationship(
        "LoanApplication", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    tickets = relationship(
        "SupportTicket", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_blocked(self) -> bool:
        return self.status == "blocked"
