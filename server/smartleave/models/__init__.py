from smartleave.models.profile import Profile
from smartleave.models.leave_type import LeaveType
from smartleave.models.leave_request import LeaveRequest
from smartleave.models.audit_log import AuditLog

__all__ = [
    "Profile",
    "LeaveType",
    "LeaveRequest",
    "AuditLog",
]
