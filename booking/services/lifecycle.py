"""
Appointment status lifecycle.

    pending -> confirmed -> completed
    pending | confirmed -> cancelled

completed and cancelled are terminal. Cancelling is only possible more than
the cutoff ahead of the start, except for admins.
"""
from datetime import datetime
from typing import Optional

from booking.errors import ValidationError
from booking.models import Appointment, User
from booking.models.appointment import (
    STATUSES,
    STATUS_PENDING,
    STATUS_CONFIRMED,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
)

ALLOWED_TRANSITIONS = {
    STATUS_PENDING: {STATUS_CONFIRMED, STATUS_CANCELLED},
    STATUS_CONFIRMED: {STATUS_COMPLETED, STATUS_CANCELLED},
    STATUS_COMPLETED: set(),
    STATUS_CANCELLED: set(),
}


def check_transition(
    appointment: Appointment,
    target: str,
    actor: User,
    now: Optional[datetime] = None,
    cutoff_hours: int = 2,
) -> bool:
    """
    Validate moving appointment to target on behalf of actor.

    Returns False for a no-op (target equals the current status), True for a
    legal change, and raises ValidationError otherwise.
    """
    if target not in STATUSES:
        raise ValidationError('Invalid status value')

    current = appointment.status
    if target == current:
        return False

    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValidationError(f'Cannot change appointment status from {current} to {target}')

    if target == STATUS_CANCELLED and not actor.is_admin():
        if not appointment.can_be_cancelled(now=now, cutoff_hours=cutoff_hours):
            raise ValidationError(
                f'Appointment cannot be cancelled (less than {cutoff_hours} hours away)'
            )

    return True


def apply_transition(
    appointment: Appointment,
    target: str,
    actor: User,
    now: Optional[datetime] = None,
    cutoff_hours: int = 2,
) -> bool:
    """Set the new status when the transition is legal; caller commits"""
    if not check_transition(appointment, target, actor, now=now, cutoff_hours=cutoff_hours):
        return False
    appointment.status = target
    return True
