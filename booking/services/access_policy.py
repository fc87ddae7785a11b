"""
Access Policy
Role-scoped visibility and mutation rights over appointments and users.

Reads of a single appointment are scoped, so a record outside the caller's
scope is reported exactly like a missing one (404). Mutations look the record
up unscoped and answer 403 for callers who do not own it.
"""
from booking.errors import AuthorizationError, NotFoundError
from booking.models import Appointment, User
from booking.utils.validators import is_valid_id


def scope_appointments(query, user: User):
    """Restrict an Appointment query to what the user may see"""
    if user.is_patient():
        return query.filter(Appointment.patient_id == user.id)
    if user.is_doctor():
        return query.filter(Appointment.doctor_id == user.id)
    # admin: everything
    return query


def can_act_on_appointment(user: User, appointment: Appointment) -> bool:
    if user.is_admin():
        return True
    if user.is_patient():
        return appointment.patient_id == user.id
    if user.is_doctor():
        return appointment.doctor_id == user.id
    return False


def ensure_can_create_appointment(user: User) -> None:
    if not user.is_patient():
        raise AuthorizationError('Insufficient permissions')


def get_visible_appointment(user: User, appointment_id: int) -> Appointment:
    if not is_valid_id(appointment_id):
        raise NotFoundError('Appointment not found')
    appointment = scope_appointments(
        Appointment.query.filter(Appointment.id == appointment_id), user
    ).first()
    if not appointment:
        raise NotFoundError('Appointment not found')
    return appointment


def get_mutable_appointment(user: User, appointment_id: int) -> Appointment:
    appointment = Appointment.query.get(appointment_id) if is_valid_id(appointment_id) else None
    if not appointment:
        raise NotFoundError('Appointment not found')
    if not can_act_on_appointment(user, appointment):
        raise AuthorizationError('Access denied')
    return appointment


def ensure_can_manage_user(actor: User, target_id: int) -> None:
    """Self-service is always allowed; acting on someone else needs admin"""
    if actor.id != target_id and not actor.is_admin():
        raise AuthorizationError('Access denied')
