from sqlalchemy import Column, String, DateTime, Integer, Enum, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from smartleave.core.database import Base


class ProfileRole(str, enum.Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"


class Profile(Base):
    """User profile and leave balance. Rows are provisioned by the external user service."""
    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=True)
    role = Column(Enum(ProfileRole, values_callable=lambda x: [e.value for e in x]), nullable=False, default=ProfileRole.EMPLOYEE)
    leave_balance = Column(Integer, nullable=False, default=0)  # Remaining days, debited only on approval
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    leave_requests = relationship("LeaveRequest", back_populates="owner", foreign_keys="LeaveRequest.user_id")

    __table_args__ = (
        CheckConstraint("leave_balance >= 0", name="ck_profiles_leave_balance_non_negative"),
        Index("idx_profiles_role", "role"),
    )
