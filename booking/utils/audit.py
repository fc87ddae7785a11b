"""
Audit trail for bookings and account changes.

Writing the trail must never fail the request that triggered it, so
errors are logged and the entry dropped.
"""
import json
import logging
from typing import Optional

from booking.extensions import db
from booking.models import AuditLog

logger = logging.getLogger(__name__)

ENTITY_APPOINTMENT = 'appointment'
ENTITY_USER = 'user'


def log_audit(
    entity_type: str,
    action: str,
    user_id: Optional[int] = None,
    entity_id: Optional[int] = None,
    details: Optional[dict] = None,
) -> Optional[AuditLog]:
    """Persist one audit entry; returns it, or None if it could not be stored"""
    entry = AuditLog(
        entity_type=entity_type,
        entity_id=None if entity_id is None else str(entity_id),
        action=action,
        user_id=user_id,
        details=json.dumps(details, default=str) if details else None,
    )
    try:
        db.session.add(entry)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.warning("Dropped audit entry %s/%s for %s: %s", entity_type, action, entity_id, e)
        return None
    return entry


def audit_appointment(action, actor, appointment, **details):
    """Record an appointment change with the actor's role and the slot it touched"""
    details.setdefault('role', actor.role)
    details.setdefault('status', appointment.status)
    details.setdefault('slot', f'{appointment.date} {appointment.time}')
    return log_audit(ENTITY_APPOINTMENT, action, user_id=actor.id,
                     entity_id=appointment.id, details=details)


def audit_user(action, actor, user):
    return log_audit(ENTITY_USER, action, user_id=actor.id, entity_id=user.id,
                     details={'email': user.email, 'role': user.role})
