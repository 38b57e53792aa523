"""Centralized Enum Definitions"""

import enum


def enum_values(enum_cls) -> list:
    """Persist enum values (not member names) in PostgreSQL enum types"""
    return [member.value for member in enum_cls]


# Accounts & sessions
class UserRole(str, enum.Enum):
    """Account roles for RBAC"""
    GUARDIAN = "guardian"
    PLATFORM_OWNER = "platform_owner"
    SCHOOL_ADMINISTRATOR = "school_administrator"
    STUDENT = "student"


# Installment plans
class FeeType(str, enum.Enum):
    """Fee period being funded: one academic term or a full session"""
    TERM = "Term"
    FULL_PERIOD = "FullPeriod"


class PlanFrequency(str, enum.Enum):
    """Installment frequency"""
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"


# Ledger
class EnrollmentStatus(str, enum.Enum):
    """Canonical enrollment lifecycle status"""
    PENDING = "Pending"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    DEFAULTED = "Defaulted"
    FAILED = "Failed"


class TransactionStatus(str, enum.Enum):
    """Payment transaction status. Successful and Failed are terminal."""
    PENDING = "Pending"
    SUCCESSFUL = "Successful"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TransactionStatus.PENDING


class TransactionKind(str, enum.Enum):
    """Activation (deposit + platform fee) or a regular installment"""
    ACTIVATION = "activation"
    INSTALLMENT = "installment"


# Notifications
class NotificationCategory(str, enum.Enum):
    PAYMENT = "payment"
    ALERT = "alert"
    ANNOUNCEMENT = "announcement"


class NotificationSeverity(str, enum.Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


# Access scoping
class CollectionKind(str, enum.Enum):
    """Collections the access scope resolver filters"""
    ENROLLMENTS = "enrollments"
    TRANSACTIONS = "transactions"
    NOTIFICATIONS = "notifications"
