"""SQLAlchemy ORM models."""

from app.models.account import Account
from app.models.base import Base
from app.models.kyc_document import KycDocument

__all__ = ["Account", "Base", "KycDocument"]
