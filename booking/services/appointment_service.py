"""
Appointment Service
Booking, conflict checking, rescheduling and status changes.
"""
import logging
from datetime import datetime, date
from typing import Any, Dict, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from booking.errors import ConflictError, NotFoundError, ValidationError
from booking.extensions import db
from booking.models import Appointment, User
from booking.models.appointment import (
    SLOT_INDEX_NAME,
    STATUSES,
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
)
from booking.models.user import ROLE_DOCTOR
from booking.services.access_policy import (
    ensure_can_create_appointment,
    get_mutable_appointment,
    get_visible_appointment,
    scope_appointments,
)
from booking.services.lifecycle import apply_transition
from booking.utils.validators import ensure_future, validate_appointment_fields

logger = logging.getLogger(__name__)

SQLITE_SLOT_VIOLATION = (
    'UNIQUE constraint failed: '
    'appointments.doctor_id, appointments.date, appointments.time'
)


def _cutoff_hours() -> int:
    return current_app.config.get('CANCELLATION_CUTOFF_HOURS', 2)


def _is_slot_violation(error: IntegrityError) -> bool:
    # PostgreSQL names the index; SQLite lists the indexed columns instead
    message = str(error.orig)
    return SLOT_INDEX_NAME in message or SQLITE_SLOT_VIOLATION in message


def _commit_slot_change(appointment: Appointment) -> None:
    """Commit, turning a slot uniqueness violation into ConflictError"""
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if _is_slot_violation(e):
            logger.warning(
                "Slot race lost for doctor %s on %s %s",
                appointment.doctor_id, appointment.date, appointment.time
            )
            raise ConflictError() from e
        raise


def get_active_doctor(doctor_id: int) -> User:
    doctor = User.query.filter_by(id=doctor_id, role=ROLE_DOCTOR, is_active=True).first()
    if not doctor:
        raise NotFoundError('Doctor not found or inactive')
    return doctor


def assert_slot_free(
    doctor_id: int,
    appointment_date: date,
    appointment_time: str,
    exclude_appointment_id: Optional[int] = None,
) -> None:
    """Raise ConflictError if a non-cancelled appointment holds the slot"""
    query = Appointment.query.filter(
        Appointment.doctor_id == doctor_id,
        Appointment.date == appointment_date,
        Appointment.time == appointment_time,
        Appointment.status != STATUS_CANCELLED,
    )
    if exclude_appointment_id is not None:
        query = query.filter(Appointment.id != exclude_appointment_id)

    if query.first() is not None:
        logger.warning(
            "Slot already booked: doctor %s on %s %s", doctor_id, appointment_date, appointment_time
        )
        raise ConflictError()


def create_appointment(patient: User, data: Dict[str, Any], now: Optional[datetime] = None) -> Appointment:
    """
    Book an appointment for patient.

    Args:
        patient: the booking user; must have the patient role
        data: raw request payload (doctor_id, date, time, duration, notes, symptoms, is_urgent)
        now: reference instant for the past-date check (defaults to datetime.now())

    Returns:
        Appointment: the persisted appointment with status pending
    """
    ensure_can_create_appointment(patient)

    fields = validate_appointment_fields(data)
    doctor = get_active_doctor(fields['doctor_id'])
    ensure_future(fields['date'], fields['time'], now=now)
    assert_slot_free(doctor.id, fields['date'], fields['time'])

    appointment = Appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        date=fields['date'],
        time=fields['time'],
        duration=fields['duration'],
        notes=fields.get('notes'),
        symptoms=fields.get('symptoms'),
        is_urgent=fields['is_urgent'],
        status=STATUS_PENDING,
    )
    db.session.add(appointment)
    _commit_slot_change(appointment)

    logger.info(
        "Appointment %s booked: patient %s with doctor %s on %s %s",
        appointment.id, patient.id, doctor.id, appointment.date, appointment.time
    )
    return appointment


def reschedule_appointment(
    actor: User,
    appointment_id: int,
    data: Dict[str, Any],
    now: Optional[datetime] = None,
) -> Appointment:
    """Edit date/time/duration/notes of a live appointment"""
    appointment = get_mutable_appointment(actor, appointment_id)

    if appointment.status not in (STATUS_PENDING, STATUS_CONFIRMED):
        raise ValidationError(f'Cannot modify a {appointment.status} appointment')

    fields = validate_appointment_fields(data, partial=True)
    if not fields:
        raise ValidationError('No updatable fields provided')

    new_date = fields.get('date', appointment.date)
    new_time = fields.get('time', appointment.time)
    slot_changed = new_date != appointment.date or new_time != appointment.time

    if slot_changed:
        ensure_future(new_date, new_time, now=now)
        assert_slot_free(appointment.doctor_id, new_date, new_time, exclude_appointment_id=appointment.id)

    for field, value in fields.items():
        setattr(appointment, field, value)

    _commit_slot_change(appointment)
    logger.info("Appointment %s updated by user %s", appointment.id, actor.id)
    return appointment


def change_status(
    actor: User,
    appointment_id: int,
    new_status: Any,
    now: Optional[datetime] = None,
) -> Tuple[Appointment, bool]:
    """
    Apply a lifecycle transition.

    Returns the appointment and whether its status actually changed; a
    same-status request is accepted as a no-op and writes nothing.
    """
    if new_status not in STATUSES:
        raise ValidationError('Invalid status value')

    appointment = get_mutable_appointment(actor, appointment_id)
    previous = appointment.status

    changed = apply_transition(appointment, new_status, actor, now=now, cutoff_hours=_cutoff_hours())
    if changed:
        db.session.commit()
        logger.info(
            "Appointment %s status %s -> %s by user %s",
            appointment.id, previous, new_status, actor.id
        )
    return appointment, changed


def cancel_appointment(
    actor: User, appointment_id: int, now: Optional[datetime] = None
) -> Tuple[Appointment, bool]:
    return change_status(actor, appointment_id, STATUS_CANCELLED, now=now)


def get_appointment(user: User, appointment_id: int) -> Appointment:
    return get_visible_appointment(user, appointment_id)


def list_appointments(
    user: User,
    status: Optional[str] = None,
    filter_date: Optional[date] = None,
    page: int = 1,
    limit: int = 20,
):
    """Role-filtered, paginated listing ordered by date then time"""
    query = scope_appointments(Appointment.query, user).options(
        joinedload(Appointment.patient),
        joinedload(Appointment.doctor),
    )

    if status and status in STATUSES:
        query = query.filter(Appointment.status == status)
    if filter_date:
        query = query.filter(Appointment.date == filter_date)

    return query.order_by(
        Appointment.date.asc(),
        Appointment.time.asc()
    ).paginate(page=page, per_page=limit, error_out=False)


def list_active_doctors(specialization: Optional[str] = None):
    query = User.query.filter_by(role=ROLE_DOCTOR, is_active=True)
    if specialization:
        query = query.filter(User.specialization.ilike(f'%{specialization}%'))
    return query.order_by(User.name.asc()).all()


def appointment_payload(appointment: Appointment, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Appointment details with embedded patient and doctor summaries"""
    data = appointment.to_dict(now=now, cutoff_hours=_cutoff_hours())
    data['patient'] = appointment.patient.to_summary() if appointment.patient else None
    data['doctor'] = appointment.doctor.to_summary() if appointment.doctor else None
    return data
