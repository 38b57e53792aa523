"""Enrollment Model"""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import relationship

from schoolpay.models.base import BaseModel, SchoolScopedMixin
from schoolpay.models.enums import EnrollmentStatus, FeeType, PlanFrequency, enum_values


class Enrollment(BaseModel, SchoolScopedMixin):
    """
    A funded tuition plan binding one payer account to one school and grade.

    total_fee is locked when the enrollment is created; paid_amount only
    moves through ledger transitions and always stays within [0, total_fee].
    raw_status holds the last upstream status string; status is the
    canonical value derived from it and the balance.
    """
    __tablename__ = "enrollments"
    __table_args__ = (
        CheckConstraint("paid_amount >= 0 AND paid_amount <= total_fee", name="ck_enrollments_paid_within_fee"),
    )

    owner_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    student_name = Column(String(255), nullable=False)
    grade = Column(String(100), nullable=False)
    fee_type = Column(ENUM(FeeType, name="fee_type", values_callable=enum_values), nullable=False, default=FeeType.TERM)
    installment_frequency = Column(
        ENUM(PlanFrequency, name="plan_frequency", values_callable=enum_values), nullable=False, default=PlanFrequency.MONTHLY
    )

    # Ledger
    total_fee = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    next_installment_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    next_due_date = Column(Date, nullable=True)
    term_start_date = Column(Date, nullable=True)
    term_end_date = Column(Date, nullable=True)

    raw_status = Column(String(64), nullable=True)
    status = Column(
        ENUM(EnrollmentStatus, name="enrollment_status", values_callable=enum_values),
        nullable=False,
        default=EnrollmentStatus.PENDING,
        index=True,
    )

    avatar_url = Column(Text, nullable=True)

    # Relationships
    owner = relationship("User", back_populates="enrollments")
    school = relationship("School", back_populates="enrollments")

    @property
    def remaining_balance(self) -> Decimal:
        return (self.total_fee or Decimal("0")) - (self.paid_amount or Decimal("0"))

    def __repr__(self) -> str:
        return f"<Enrollment {self.student_name} {self.paid_amount}/{self.total_fee} ({self.status})>"
