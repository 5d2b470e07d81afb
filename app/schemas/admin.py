from decimal import Decimal

from pydantic import BaseModel


class AdminStats(BaseModel):
    total_users: int
    total_loan_types: int
    total_applications: int
    total_amount_requested: Decimal = Decimal("0")
    pending: int = 0
    processing: int = 0
    accepted: int = 0
    disbursed: int = 0
    rejected: int = 0


class AppSettingsPayload(BaseModel):
    settings: dict[str, str | None]
