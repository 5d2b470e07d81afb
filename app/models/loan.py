import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Loan(Base):
    """A loan product offered in the catalog."""

    __tablename__ = "loans"
    __table_args__ = (
        CheckConstraint("interest_rate > 0", name="ck_loans_rate_positive"),
        CheckConstraint("processing_fee_percent >= 0", name="ck_loans_fee_nonneg"),
        CheckConstraint("min_amount > 0", name="ck_loans_min_positive"),
        CheckConstraint("max_amount >= min_amount", name="ck_loans_amount_range"),
        CheckConstraint("tenure_months >= 1", name="ck_loans_tenure_positive"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    interest_rate = Column(Numeric(6, 3), nullable=False)
    processing_fee_percent = Column(Numeric(6, 3), nullable=False, default=0, server_default="0")
    min_amount = Column(Numeric(14, 2), nullable=False)
    max_amount = Column(Numeric(14, 2), nullable=False)
    tenure_months = Column(Integer, nullable=False)
    required_docs = Column(Text, nullable=True)
    eligibility_info = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
