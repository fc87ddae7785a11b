from datetime import datetime, timedelta

from booking.extensions import db
from .base import TimestampMixin

STATUS_PENDING = 'pending'
STATUS_CONFIRMED = 'confirmed'
STATUS_CANCELLED = 'cancelled'
STATUS_COMPLETED = 'completed'
STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_CANCELLED, STATUS_COMPLETED)

DEFAULT_DURATION = 30
MIN_DURATION = 15
MAX_DURATION = 120
NOTES_MAX_LENGTH = 500
SYMPTOMS_MAX_LENGTH = 300

SLOT_INDEX_NAME = 'uq_appointments_doctor_slot_active'


class Appointment(db.Model, TimestampMixin):
    __tablename__ = 'appointments'
    __table_args__ = (
        # One live appointment per (doctor, date, time); cancelled rows free the slot
        db.Index(
            SLOT_INDEX_NAME,
            'doctor_id', 'date', 'time',
            unique=True,
            sqlite_where=db.text("status != 'cancelled'"),
            postgresql_where=db.text("status != 'cancelled'"),
        ),
        db.Index('ix_appointments_patient_date', 'patient_id', 'date'),
        db.Index('ix_appointments_doctor_date', 'doctor_id', 'date'),
        db.Index('ix_appointments_date_time', 'date', 'time'),
    )

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    doctor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.String(5), nullable=False)  # "HH:MM", zero-padded
    duration = db.Column(db.Integer, nullable=False, default=DEFAULT_DURATION)

    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING, index=True)

    notes = db.Column(db.String(NOTES_MAX_LENGTH))
    symptoms = db.Column(db.String(SYMPTOMS_MAX_LENGTH))
    is_urgent = db.Column(db.Boolean, nullable=False, default=False)

    patient = db.relationship('User', foreign_keys=[patient_id], backref='patient_appointments')
    doctor = db.relationship('User', foreign_keys=[doctor_id], backref='doctor_appointments')

    @property
    def starts_at(self):
        """Naive datetime of the appointment start"""
        return datetime.combine(self.date, datetime.strptime(self.time, '%H:%M').time())

    def can_be_cancelled(self, now=None, cutoff_hours=2):
        """True when the start is more than cutoff_hours away"""
        now = now or datetime.now()
        return self.starts_at > now + timedelta(hours=cutoff_hours)

    def to_dict(self, now=None, cutoff_hours=2):
        return {
            'id': self.id,
            'patient_id': self.patient_id,
            'doctor_id': self.doctor_id,
            'date': self.date.isoformat() if self.date else None,
            'time': self.time,
            'duration': self.duration,
            'status': self.status,
            'notes': self.notes,
            'symptoms': self.symptoms,
            'is_urgent': self.is_urgent,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'can_be_cancelled': self.can_be_cancelled(now=now, cutoff_hours=cutoff_hours),
        }

    def __repr__(self):
        return f"<Appointment patient={self.patient_id} doctor={self.doctor_id} on {self.date} {self.time} ({self.status})>"
