"""Models Package - Export all models for easy imports"""

from schoolpay.models.base import BaseModel, SchoolScopedMixin
from schoolpay.models.enums import *
from schoolpay.models.school import School
from schoolpay.models.user import User
from schoolpay.models.enrollment import Enrollment
from schoolpay.models.transaction import Transaction
from schoolpay.models.notification import Notification, notification_reads


__all__ = [
    # Base classes
    "BaseModel",
    "SchoolScopedMixin",

    # Enums
    "UserRole",
    "FeeType",
    "PlanFrequency",
    "EnrollmentStatus",
    "TransactionStatus",
    "TransactionKind",
    "NotificationCategory",
    "NotificationSeverity",
    "CollectionKind",

    # Accounts & institutions
    "User",
    "School",

    # Ledger
    "Enrollment",
    "Transaction",

    # Communication
    "Notification",
    "notification_reads",
]
