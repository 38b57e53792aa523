"""Payment Transaction Model"""

from decimal import Decimal

from sqlalchemy import Column, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID, ENUM

from schoolpay.models.base import BaseModel
from schoolpay.models.enums import TransactionKind, TransactionStatus, enum_values


class Transaction(BaseModel):
    """
    One payment towards an enrollment.

    amount is what gets credited to the enrollment on approval; platform_fee
    is charged on top of it (activation payments) and never credited.
    student_name and school_name are display copies, not references.
    Pending transactions resolve exactly once to Successful or Failed.
    """
    __tablename__ = "transactions"

    payer_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Legacy aggregate payments are not tied to one enrollment
    enrollment_id = Column(
        UUID(as_uuid=True),
        ForeignKey("enrollments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    school_id = Column(
        UUID(as_uuid=True),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    kind = Column(ENUM(TransactionKind, name="transaction_kind", values_callable=enum_values), nullable=False, default=TransactionKind.INSTALLMENT)
    student_name = Column(String(255), nullable=False, default="")
    school_name = Column(String(255), nullable=False, default="")

    amount = Column(Numeric(12, 2), nullable=False)
    platform_fee = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    status = Column(
        ENUM(TransactionStatus, name="transaction_status", values_callable=enum_values),
        nullable=False,
        default=TransactionStatus.PENDING,
        index=True,
    )
    receipt_url = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Transaction {self.amount} - {self.status}>"
