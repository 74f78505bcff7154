"""ORM model for uploaded KYC document references (read-only to this service)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from app.models.base import Base


class KycDocument(Base):
    """
    Pointer to a document held by the external storage pipeline.

    document_type: 'id_proof', 'address_proof' or 'selfie'
    """

    __tablename__ = "kyc_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        String(64),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    document_type = Column(String(32), nullable=False)
    url = Column(Text, nullable=False)
    uploaded_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
