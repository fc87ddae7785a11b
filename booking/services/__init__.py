from .appointment_service import (
    assert_slot_free,
    create_appointment,
    reschedule_appointment,
    change_status,
    cancel_appointment,
    get_appointment,
    list_appointments,
    list_active_doctors,
    appointment_payload,
)

from .lifecycle import check_transition, apply_transition, ALLOWED_TRANSITIONS

from .user_service import (
    issue_token,
    register_user,
    authenticate,
    get_user,
    update_profile,
    change_password,
    set_active,
    list_users,
)

__all__ = [
    # Appointment Services
    "assert_slot_free",
    "create_appointment",
    "reschedule_appointment",
    "change_status",
    "cancel_appointment",
    "get_appointment",
    "list_appointments",
    "list_active_doctors",
    "appointment_payload",
    # Lifecycle
    "check_transition",
    "apply_transition",
    "ALLOWED_TRANSITIONS",
    # User Services
    "issue_token",
    "register_user",
    "authenticate",
    "get_user",
    "update_profile",
    "change_password",
    "set_active",
    "list_users",
]
