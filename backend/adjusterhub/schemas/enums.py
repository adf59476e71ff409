"""Enumerations shared by models, schemas, and domain rules.

Values are stored in the database as plain strings.
"""

from enum import Enum


class Role(str, Enum):
    ADJUSTER = "ADJUSTER"
    FIRM_ADMIN = "FIRM_ADMIN"
    ADMIN = "ADMIN"


class ClaimStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ClaimType(str, Enum):
    AUTO_COLLISION = "AUTO_COLLISION"
    PROPERTY_DAMAGE = "PROPERTY_DAMAGE"
    FIRE_DAMAGE = "FIRE_DAMAGE"
    WATER_DAMAGE = "WATER_DAMAGE"
    THEFT = "THEFT"
    VANDALISM = "VANDALISM"
    NATURAL_DISASTER = "NATURAL_DISASTER"
    LIABILITY = "LIABILITY"
    WORKERS_COMP = "WORKERS_COMP"
    OTHER = "OTHER"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


PRIORITY_RANK = {Priority.LOW: 0, Priority.MEDIUM: 1, Priority.HIGH: 2, Priority.URGENT: 3}


class EarningType(str, Enum):
    CLAIM_FEE = "CLAIM_FEE"
    BONUS = "BONUS"
    MILEAGE = "MILEAGE"
    EXPENSE_REIMBURSEMENT = "EXPENSE_REIMBURSEMENT"
    OTHER = "OTHER"


class EarningStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    DISPUTED = "DISPUTED"


class NotificationType(str, Enum):
    CLAIM_ASSIGNED = "CLAIM_ASSIGNED"
    CLAIM_UPDATE = "CLAIM_UPDATE"
    MESSAGE_RECEIVED = "MESSAGE_RECEIVED"
    EARNING_ADDED = "EARNING_ADDED"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    SYSTEM_UPDATE = "SYSTEM_UPDATE"
    SECURITY_ALERT = "SECURITY_ALERT"
    CALENDAR_EVENT = "CALENDAR_EVENT"
    SUPPORT_TICKET = "SUPPORT_TICKET"


class ConnectionStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TokenType(str, Enum):
    VERIFY_EMAIL = "VERIFY_EMAIL"
    RESET_PASSWORD = "RESET_PASSWORD"


class DocumentType(str, Enum):
    PHOTO = "PHOTO"
    REPORT = "REPORT"
    ESTIMATE = "ESTIMATE"
    INVOICE = "INVOICE"
    CONTRACT = "CONTRACT"
    LICENSE = "LICENSE"
    OTHER = "OTHER"


class SecurityEventType(str, Enum):
    AUTH_ATTEMPT = "auth_attempt"
    AUTH_SUCCESS = "auth_success"
    AUTH_FAILURE = "auth_failure"
    SUSPICIOUS_ACTIVITY = "suspicious_activity"
    HONEYPOT_TRIGGERED = "honeypot_triggered"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    FILE_UPLOAD = "file_upload"
    API_ACCESS = "api_access"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class CalendarEventType(str, Enum):
    INSPECTION = "INSPECTION"
    MEETING = "MEETING"
    DEADLINE = "DEADLINE"
    OTHER = "OTHER"


class CalendarEventStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TicketStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class AnalyticsPeriod(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
