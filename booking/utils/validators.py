"""
Field validation for incoming payloads.

Each validate_* function returns a cleaned dict or raises ValidationError
carrying one message per offending field.
"""
import re
from datetime import datetime, date as date_cls
from typing import Any, Dict, List, Optional

from booking.errors import ValidationError
from booking.models.appointment import (
    DEFAULT_DURATION,
    MIN_DURATION,
    MAX_DURATION,
    NOTES_MAX_LENGTH,
    SYMPTOMS_MAX_LENGTH,
)
from booking.models.user import ROLES

EMAIL_PATTERN = re.compile(r"^\w+([.+-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,})+$")
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

NAME_MAX_LENGTH = 50
PHONE_MAX_LENGTH = 15
SPECIALIZATION_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6
# Largest primary key the database column can hold (signed 64-bit)
MAX_DB_ID = 2 ** 63 - 1


def parse_date(value: Any) -> Optional[date_cls]:
    """Parse YYYY-MM-DD; returns None when unparseable"""
    if isinstance(value, date_cls) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except ValueError:
        return None


def parse_time(value: Any) -> Optional[str]:
    """Parse H:MM / HH:MM (24h) into zero-padded HH:MM"""
    if not isinstance(value, str):
        return None
    match = TIME_PATTERN.match(value.strip())
    if not match:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def normalize_email(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    email = value.strip().lower()
    if not EMAIL_PATTERN.match(email):
        return None
    return email


def _clean_text(value, field, max_length, errors, label=None):
    if value is None:
        return None
    if not isinstance(value, str):
        errors.append(f'{label or field} must be a string')
        return None
    value = value.strip()
    if len(value) > max_length:
        errors.append(f'{label or field} cannot exceed {max_length} characters')
        return None
    return value or None


def _parse_duration(value, errors):
    if isinstance(value, bool):
        errors.append('Duration must be a whole number of minutes')
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        errors.append('Duration must be a whole number of minutes')
        return None
    if value < MIN_DURATION:
        errors.append(f'Appointment duration must be at least {MIN_DURATION} minutes')
        return None
    if value > MAX_DURATION:
        errors.append(f'Appointment duration cannot exceed {MAX_DURATION} minutes')
        return None
    return value


def is_valid_id(value: Any) -> bool:
    """True for an int the id columns can actually store"""
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= MAX_DB_ID


def _parse_id(value):
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    return value if is_valid_id(value) else None


def ensure_future(appointment_date: date_cls, appointment_time: str, now: Optional[datetime] = None) -> None:
    """Reject a slot whose start is not strictly after now"""
    now = now or datetime.now()
    starts_at = datetime.combine(appointment_date, datetime.strptime(appointment_time, '%H:%M').time())
    if starts_at <= now:
        raise ValidationError('Appointment date cannot be in the past')


def validate_appointment_fields(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Validate an appointment payload.

    With partial=False (creation) doctor_id, date and time are required and
    duration/is_urgent receive their defaults. With partial=True only the keys
    present are validated and returned; doctor_id is not accepted.
    """
    errors: List[str] = []
    cleaned: Dict[str, Any] = {}

    if not partial:
        missing = [f for f in ('doctor_id', 'date', 'time') if data.get(f) in (None, '')]
        if missing:
            raise ValidationError('Doctor ID, date, and time are required')

        doctor_id = _parse_id(data.get('doctor_id'))
        if doctor_id is None:
            errors.append('Doctor ID must be an integer')
        cleaned['doctor_id'] = doctor_id

    if not partial or 'date' in data:
        parsed_date = parse_date(data.get('date'))
        if parsed_date is None:
            errors.append('Invalid date format. Use YYYY-MM-DD')
        cleaned['date'] = parsed_date

    if not partial or 'time' in data:
        parsed_time = parse_time(data.get('time'))
        if parsed_time is None:
            errors.append('Please enter a valid time in HH:MM format')
        cleaned['time'] = parsed_time

    if 'duration' in data and data['duration'] is not None:
        cleaned['duration'] = _parse_duration(data['duration'], errors)
    elif not partial:
        cleaned['duration'] = DEFAULT_DURATION

    if 'notes' in data:
        cleaned['notes'] = _clean_text(data['notes'], 'notes', NOTES_MAX_LENGTH, errors, 'Notes')
    if 'symptoms' in data:
        cleaned['symptoms'] = _clean_text(
            data['symptoms'], 'symptoms', SYMPTOMS_MAX_LENGTH, errors, 'Symptoms description'
        )

    if 'is_urgent' in data and data['is_urgent'] is not None:
        if not isinstance(data['is_urgent'], bool):
            errors.append('is_urgent must be a boolean')
        cleaned['is_urgent'] = bool(data['is_urgent'])
    elif not partial:
        cleaned['is_urgent'] = False

    if errors:
        raise ValidationError('Validation failed', errors)
    return cleaned


def validate_password(password: Any, label: str = 'Password') -> str:
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f'{label} must be at least {PASSWORD_MIN_LENGTH} characters long')
    return password


def validate_registration(data: Dict[str, Any], allowed_roles=ROLES) -> Dict[str, Any]:
    """Validate a registration payload; role defaults to patient"""
    errors: List[str] = []
    cleaned: Dict[str, Any] = {}

    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        errors.append('Name is required')
    elif len(name.strip()) > NAME_MAX_LENGTH:
        errors.append(f'Name cannot exceed {NAME_MAX_LENGTH} characters')
    else:
        cleaned['name'] = name.strip()

    if not data.get('email'):
        errors.append('Email is required')
    else:
        email = normalize_email(data.get('email'))
        if email is None:
            errors.append('Please enter a valid email address')
        cleaned['email'] = email

    password = data.get('password')
    if not password:
        errors.append('Password is required')
    elif not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f'Password must be at least {PASSWORD_MIN_LENGTH} characters long')
    else:
        cleaned['password'] = password

    role = data.get('role') or 'patient'
    if role not in ROLES:
        errors.append('Role must be one of: ' + ', '.join(ROLES))
    elif role not in allowed_roles:
        errors.append(f'Registration with role "{role}" is not allowed')
    cleaned['role'] = role

    cleaned['phone'] = _clean_text(data.get('phone'), 'phone', PHONE_MAX_LENGTH, errors, 'Phone number')
    specialization = _clean_text(
        data.get('specialization'), 'specialization', SPECIALIZATION_MAX_LENGTH, errors, 'Specialization'
    )
    cleaned['specialization'] = specialization if role == 'doctor' else None

    if errors:
        raise ValidationError('Validation failed', errors)
    return cleaned


def validate_profile_update(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate the updatable profile fields; empty values are ignored"""
    errors: List[str] = []
    cleaned: Dict[str, Any] = {}

    name = data.get('name')
    if name:
        if not isinstance(name, str) or not name.strip():
            errors.append('Name must be a non-empty string')
        elif len(name.strip()) > NAME_MAX_LENGTH:
            errors.append(f'Name cannot exceed {NAME_MAX_LENGTH} characters')
        else:
            cleaned['name'] = name.strip()

    if data.get('phone'):
        cleaned['phone'] = _clean_text(data['phone'], 'phone', PHONE_MAX_LENGTH, errors, 'Phone number')
    if data.get('specialization'):
        cleaned['specialization'] = _clean_text(
            data['specialization'], 'specialization', SPECIALIZATION_MAX_LENGTH, errors, 'Specialization'
        )

    if errors:
        raise ValidationError('Validation failed', errors)
    return {k: v for k, v in cleaned.items() if v is not None}
