from .decorators import require_role, get_current_user, get_json_body, get_pagination_args

from .audit import log_audit, audit_appointment, audit_user

from .responses import success_response, pagination_meta

__all__ = [
    # Decorators
    "require_role",
    "get_current_user",
    "get_json_body",
    "get_pagination_args",
    # Audit
    "log_audit",
    "audit_appointment",
    "audit_user",
    # Responses
    "success_response",
    "pagination_meta",
]
