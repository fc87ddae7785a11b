"""
Pytest configuration: an app bound to an in-memory SQLite database that is
created and dropped around every test, plus user and token factories.
"""
import itertools
from datetime import date, datetime, timedelta

import pytest

from booking import create_app
from booking.extensions import db
from booking.models import Appointment, User
from booking.services import issue_token

FAR_FUTURE = date(2099, 1, 1)

_email_counter = itertools.count(1)


@pytest.fixture(scope="function")
def app():
    """Fresh application and schema for each test"""
    app = create_app('testing')
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Factory: make_user('doctor', name='Dr. A') -> persisted User"""
    def _make_user(role='patient', name=None, email=None, password='secret123',
                   specialization=None, is_active=True):
        n = next(_email_counter)
        user = User(
            name=name or f"{role.title()} {n}",
            email=(email or f"{role}{n}@example.com").lower(),
            role=role,
            specialization=specialization,
            is_active=is_active,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def make_appointment(app):
    """Factory that writes straight to the table, bypassing booking checks"""
    def _make_appointment(patient, doctor, on=FAR_FUTURE, at='10:00', status='pending', duration=30):
        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            date=on,
            time=at,
            duration=duration,
            status=status,
        )
        db.session.add(appointment)
        db.session.commit()
        return appointment
    return _make_appointment


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        return {'Authorization': f'Bearer {issue_token(user)}'}
    return _auth_headers


@pytest.fixture
def doctor(make_user):
    return make_user('doctor', name='Dr. A', specialization='Cardiology')


@pytest.fixture
def patient(make_user):
    return make_user('patient', name='P1')


@pytest.fixture
def other_patient(make_user):
    return make_user('patient', name='P2')


@pytest.fixture
def admin(make_user):
    return make_user('admin', name='Admin')


@pytest.fixture
def soon():
    """soon(hours) -> (date, 'HH:MM') for a start that many hours from now"""
    def _soon(hours=1):
        starts_at = datetime.now() + timedelta(hours=hours)
        return starts_at.date(), starts_at.strftime('%H:%M')
    return _soon
