from booking.extensions import db, bcrypt
from .base import TimestampMixin

ROLE_PATIENT = 'patient'
ROLE_DOCTOR = 'doctor'
ROLE_ADMIN = 'admin'
ROLES = (ROLE_PATIENT, ROLE_DOCTOR, ROLE_ADMIN)


class User(db.Model, TimestampMixin):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    # Stored lowercased, so uniqueness is case-insensitive
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Role: 'patient', 'doctor' or 'admin'
    role = db.Column(db.String(20), nullable=False, default=ROLE_PATIENT, index=True)

    phone = db.Column(db.String(15))
    specialization = db.Column(db.String(100))  # doctors only

    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if provided password matches hash"""
        return bcrypt.check_password_hash(self.password_hash, password)

    def is_patient(self):
        return self.role == ROLE_PATIENT

    def is_doctor(self):
        return self.role == ROLE_DOCTOR

    def is_admin(self):
        return self.role == ROLE_ADMIN

    def to_profile(self):
        """Public profile; never includes the password hash"""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'phone': self.phone,
            'specialization': self.specialization,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def to_summary(self):
        """Compact form embedded in appointment payloads"""
        data = {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
        }
        if self.role == ROLE_DOCTOR:
            data['specialization'] = self.specialization
        return data

    def __repr__(self):
        return f"<User {self.email} - {self.role}>"
