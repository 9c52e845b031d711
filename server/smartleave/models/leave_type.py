from sqlalchemy import Column, String, Integer, Uuid
import uuid
from smartleave.core.database import Base


class LeaveType(Base):
    __tablename__ = "leave_types"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    # Shown to the requester only; the engine checks the single aggregate balance
    max_days = Column(Integer, nullable=False, default=0)
