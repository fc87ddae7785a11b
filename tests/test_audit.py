"""
Audit trail helpers.
"""
import json
from unittest.mock import patch

from booking.extensions import db
from booking.models import AuditLog
from booking.utils import audit_appointment, audit_user, log_audit


def test_appointment_entry_records_actor_role_and_slot(patient, doctor, make_appointment):
    appointment = make_appointment(patient, doctor, at='09:15')
    entry = audit_appointment('cancel', doctor, appointment)

    assert entry.entity_type == 'appointment'
    assert entry.user_id == doctor.id
    assert json.loads(entry.details) == {'role': 'doctor', 'status': 'pending', 'slot': '2099-01-01 09:15'}


def test_user_entry(admin, patient):
    entry = audit_user('deactivate', admin, patient)
    assert entry.entity_id == str(patient.id)
    assert json.loads(entry.details)['email'] == patient.email


def test_storage_failure_is_swallowed(app):
    with patch.object(db.session, 'commit', side_effect=RuntimeError('disk full')):
        assert log_audit('user', 'activate', entity_id=1) is None
    assert AuditLog.query.count() == 0
