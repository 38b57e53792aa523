"""Account Model"""

from sqlalchemy import Column, String, Boolean, Integer, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import relationship

from schoolpay.models.base import BaseModel
from schoolpay.models.enums import UserRole, enum_values


class User(BaseModel):
    """
    Account for every actor: guardians, students, school administrators and
    the platform owner. School administrators carry a school affiliation;
    any account may carry settlement bank details.
    """
    __tablename__ = "users"

    # Authentication
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    # Bumped on logout; tokens carrying an older value are rejected
    session_version = Column(Integer, default=0, nullable=False)

    # Profile
    name = Column(String(255), nullable=False)
    phone_number = Column(String(32), nullable=True)

    # Role & affiliation
    role = Column(ENUM(UserRole, name="user_role", values_callable=enum_values), nullable=False, index=True)
    school_id = Column(
        UUID(as_uuid=True),
        ForeignKey("schools.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Settlement bank details
    bank_name = Column(String(255), nullable=True)
    account_name = Column(String(255), nullable=True)
    account_number = Column(String(32), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    school = relationship("School", back_populates="administrators")
    enrollments = relationship("Enrollment", back_populates="owner", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
