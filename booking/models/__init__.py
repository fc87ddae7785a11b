from .user import User
from .appointment import Appointment
from .audit_log import AuditLog

__all__ = ["User", "Appointment", "AuditLog"]
