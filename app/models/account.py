"""ORM model for directory accounts (identity verification and role lifecycle)."""

import uuid

from sqlalchemy import Column, DateTime, Integer, String, func

from app.models.base import Base


def _new_account_id() -> str:
    return uuid.uuid4().hex


class Account(Base):
    """
    One directory account. kyc_status and role are the two independent lifecycles.

    kyc_status: 'pending', 'verified' or 'rejected'
    role: 'user', 'admin' or 'super_admin'
    role_assigned_by / role_assigned_at are written together with role, never alone.
    """

    __tablename__ = "accounts"

    id = Column(String(64), primary_key=True, default=_new_account_id)
    name = Column(String(255), nullable=False, default="")
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(64), nullable=False, default="")
    password_hash = Column(String(255), nullable=True)
    kyc_status = Column(String(32), nullable=False, default="pending", index=True)
    role = Column(String(32), nullable=False, default="user", index=True)
    role_assigned_by = Column(String(64), nullable=True)
    role_assigned_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    portfolio_count = Column(Integer, nullable=False, default=0)
