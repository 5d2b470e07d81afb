from app.models.app_setting import AppSetting
from app.models.audit_log import AuditLog
from app.models.loan import Loan
from app.models.loan_application import LoanApplication
from app.models.support_ticket import SupportTicket, TicketReply
from app.models.user import User

__all__ = [
    "AppSetting",
    "AuditLog",
    "Loan",
    "LoanApplication",
    "SupportTicket",
    "TicketReply",
    "User",
]
