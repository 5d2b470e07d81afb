from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LoanApplicationStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    ACCEPTED_NOT_DISBURSED = "accepted-not-disbursed"
    ACCEPTED_DISBURSED = "accepted-disbursed"
    REJECTED = "rejected"


class LoanProductBase(BaseModel):
    loan_name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    interest_rate: Decimal = Field(gt=0, le=100)
    processing_fee_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    min_amount: Decimal = Field(gt=0)
    max_amount: Decimal = Field(gt=0)
    tenure_months: int = Field(ge=1, le=600)
    required_docs: str | None = None
    eligibility_info: str | None = None

    @model_validator(mode="after")
    def _check_amount_range(self):
        if self.min_amount > self.max_amount:
            raise ValueError("min_amount must not exceed max_amount")
        return self


class LoanProductCreate(LoanProductBase):
    pass


class LoanProductUpdate(LoanProductBase):
    pass


class LoanProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    loan_name: str
    description: str | None = None
    interest_rate: Decimal
    processing_fee_percent: Decimal
    min_amount: Decimal
    max_amount: Decimal
    tenure_months: int
    required_docs: str | None = None
    eligibility_info: str | None = None
    created_at: datetime | None = None


class LoanApplicationCreate(BaseModel):
    loan_id: UUID
    amount_required: Decimal = Field(gt=0, decimal_places=2)
    account_holder_name: str = Field(min_length=1, max_length=255)
    account_number: str = Field(min_length=1, max_length=64)
    routing_code: str = Field(min_length=1, max_length=64)


class MyLoanApplicationOut(BaseModel):
    id: UUID
    loan_name: str
    amount_required: Decimal
    status: LoanApplicationStatus
    note: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LoanApplicationSummary(BaseModel):
    id: UUID
    amount_required: Decimal
    status: LoanApplicationStatus
    note: str | None = None
    created_at: datetime | None = None
    user_name: str
    user_email: str
    loan_name: str


class LoanApplicationDetail(BaseModel):
    id: UUID
    user_id: UUID
    loan_id: UUID
    loan_name: str
    amount_required: Decimal
    status: LoanApplicationStatus
    note: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    name: str
    email: str
    phone: str
    national_id: str | None = None
    tax_id: str | None = None
    account_holder_name: str
    account_number: str | None = None
    routing_code: str | None = None
    unreadable_fields: list[str] = Field(default_factory=list)


class LoanApplicationStatusUpdate(BaseModel):
    status: LoanApplicationStatus
    note: str | None = None


class RepaymentScheduleEntry(BaseModel):
    month: int
    principal_payment: Decimal
    interest_payment: Decimal
    installment: Decimal
    balance: Decimal


class RepaymentScheduleResponse(BaseModel):
    application_id: UUID
    principal: Decimal
    annual_rate_percent: Decimal
    tenure_months: int
    emi: Decimal
    total_payment: Decimal
    total_interest: Decimal
    schedule: list[RepaymentScheduleEntry]
