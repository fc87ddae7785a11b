#!/usr/bin/env python3
"""
Initialize default accounts for the booking system.
Public registration cannot create admins, so the first admin comes from here.
Run with: python init_admin.py
"""
import os

from booking import create_app
from booking.extensions import db
from booking.models import User

# Default users to create
DEFAULT_USERS = [
    {
        'name': 'System Admin',
        'email': os.getenv('ADMIN_EMAIL', 'admin@booking.local'),
        'password': os.getenv('ADMIN_PASSWORD', 'admin123'),
        'role': 'admin',
        'phone': '',
    },
    {
        'name': 'Dr. Demo',
        'email': 'doctor1@booking.local',
        'password': 'doctor123',
        'role': 'doctor',
        'phone': '',
        'specialization': 'General Practice',
    },
]


def create_users(app=None):
    """Create default users; existing emails are skipped"""
    app = app or create_app()
    created_count = 0

    with app.app_context():
        db.create_all()

        print("=" * 60)
        print("Initializing Default Users")
        print("=" * 60)
        print()

        for user_data in DEFAULT_USERS:
            email = user_data['email'].strip().lower()

            existing = User.query.filter_by(email=email).first()
            if existing:
                print(f"  - User '{email}' already exists (skipping)")
                continue

            user = User(
                name=user_data['name'],
                email=email,
                role=user_data['role'],
                phone=user_data.get('phone') or None,
                specialization=user_data.get('specialization'),
                is_active=True
            )
            user.set_password(user_data['password'])

            db.session.add(user)
            created_count += 1
            print(f"  ✓ Created: {email} ({user_data['role']})")

        db.session.commit()

        print()
        print("=" * 60)
        print(f"✅ Created {created_count} new user(s)")
        print("=" * 60)
        print("\n⚠️  IMPORTANT: Change passwords after first login!")

    return created_count


if __name__ == '__main__':
    create_users()
