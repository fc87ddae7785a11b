from flask import Blueprint, request, current_app

from booking.errors import ValidationError
from booking.models.user import ROLE_PATIENT
from booking.services import (
    appointment_payload,
    cancel_appointment,
    change_status,
    create_appointment,
    get_appointment,
    list_active_doctors,
    list_appointments,
    reschedule_appointment,
)
from booking.utils import (
    audit_appointment,
    get_current_user,
    get_json_body,
    get_pagination_args,
    pagination_meta,
    require_role,
    success_response,
)
from booking.utils.validators import parse_date

appointment_bp = Blueprint('appointment', __name__, url_prefix='/api/appointments')


@appointment_bp.route('', methods=['POST'])
@require_role(ROLE_PATIENT)
def create():
    """
    Book an appointment for the calling patient
    Access: patient
    Body: { doctor_id, date (YYYY-MM-DD), time (HH:MM), duration?, notes?, symptoms?, is_urgent? }
    """
    patient = get_current_user()
    appointment = create_appointment(patient, get_json_body())

    audit_appointment('create', patient, appointment, doctor_id=appointment.doctor_id)

    return success_response(
        data={
            'appointment': appointment_payload(appointment),
            'patient': appointment.patient.to_summary(),
            'doctor': appointment.doctor.to_summary(),
        },
        message='Appointment created successfully',
        status_code=201,
    )


@appointment_bp.route('', methods=['GET'])
@require_role()
def list_all():
    """
    List appointments visible to the caller.
    Query params:
        status: pending | confirmed | cancelled | completed (optional)
        date: YYYY-MM-DD (optional)
        page, limit: Pagination
    """
    user = get_current_user()
    page, limit = get_pagination_args(current_app.config)

    filter_date = None
    raw_date = request.args.get('date', type=str)
    if raw_date:
        filter_date = parse_date(raw_date)
        if filter_date is None:
            raise ValidationError('Invalid date format. Use YYYY-MM-DD')

    result = list_appointments(
        user,
        status=request.args.get('status', type=str),
        filter_date=filter_date,
        page=page,
        limit=limit,
    )

    return success_response(data={
        'appointments': [appointment_payload(a) for a in result.items],
        'pagination': pagination_meta(result, 'appointments'),
    })


@appointment_bp.route('/doctors/list', methods=['GET'])
@require_role()
def doctors():
    """Active doctors available for booking"""
    return success_response(data={
        'doctors': [d.to_summary() for d in list_active_doctors()],
    })


@appointment_bp.route('/<int:appointment_id>', methods=['GET'])
@require_role()
def get_one(appointment_id):
    """Single appointment; anything outside the caller's scope is a 404"""
    appointment = get_appointment(get_current_user(), appointment_id)
    return success_response(data={'appointment': appointment_payload(appointment)})


@appointment_bp.route('/<int:appointment_id>', methods=['PUT'])
@require_role()
def update(appointment_id):
    """
    Reschedule or edit a pending/confirmed appointment
    Access: owning patient, owning doctor, admin
    Body: any of { date, time, duration, notes, symptoms, is_urgent }
    """
    user = get_current_user()
    data = get_json_body()
    appointment = reschedule_appointment(user, appointment_id, data)

    changed = sorted(k for k in ('date', 'time', 'duration') if k in data)
    audit_appointment('reschedule', user, appointment, changed=changed)

    return success_response(
        data={'appointment': appointment_payload(appointment)},
        message='Appointment updated successfully',
    )


@appointment_bp.route('/<int:appointment_id>/status', methods=['PATCH'])
@require_role()
def update_status(appointment_id):
    """
    Move an appointment through its lifecycle
    Access: owning patient, owning doctor, admin
    Body: { status }
    """
    user = get_current_user()
    new_status = get_json_body().get('status')
    appointment, changed = change_status(user, appointment_id, new_status)
    if changed:
        audit_appointment('status', user, appointment)

    return success_response(
        data={'appointment': appointment_payload(appointment)},
        message='Appointment status updated successfully',
    )


@appointment_bp.route('/<int:appointment_id>/cancel', methods=['POST'])
@require_role()
def cancel(appointment_id):
    """
    Cancel an appointment (not within the cutoff, unless admin)
    Access: owning patient, owning doctor, admin
    """
    user = get_current_user()
    appointment, changed = cancel_appointment(user, appointment_id)
    if changed:
        audit_appointment('cancel', user, appointment)

    return success_response(
        data={'appointment': appointment_payload(appointment)},
        message='Appointment cancelled successfully',
    )
