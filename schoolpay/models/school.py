"""Institution Model"""

from sqlalchemy import Column, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import relationship

from schoolpay.models.base import BaseModel


class School(BaseModel):
    """
    Institution onboarded by the platform owner.

    fee_schedule maps a grade label to the published fee for that grade,
    e.g. {"Basic 1": "120000.00", "JSS1": "180000.00"}. Amounts are stored
    as strings so JSON round-trips keep exact decimals.
    """
    __tablename__ = "schools"

    name = Column(String(255), nullable=False, unique=True)
    address = Column(Text, nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(32), nullable=True)

    fee_schedule = Column(MutableDict.as_mutable(JSONB), nullable=False, default=dict)

    # Relationships
    administrators = relationship("User", back_populates="school", passive_deletes=True)
    enrollments = relationship("Enrollment", back_populates="school", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<School {self.name}>"
