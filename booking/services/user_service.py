"""
User Service
Registration, credential checks, tokens and profile management.
"""
import logging
from typing import Any, Dict, Optional

from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError

from booking.errors import AuthenticationError, NotFoundError, ValidationError
from booking.extensions import db
from booking.models import User
from booking.models.user import ROLES, ROLE_ADMIN, ROLE_DOCTOR
from booking.services.access_policy import ensure_can_manage_user
from booking.utils.validators import (
    is_valid_id,
    normalize_email,
    validate_password,
    validate_profile_update,
    validate_registration,
)

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = 'User with this email already exists'


def issue_token(user: User) -> str:
    """Bearer token carrying the user id as identity plus email and role claims"""
    return create_access_token(
        identity=str(user.id),
        additional_claims={
            'email': user.email,
            'role': user.role,
        },
    )


def register_user(data: Dict[str, Any], allow_admin: bool = False) -> User:
    allowed_roles = ROLES if allow_admin else tuple(r for r in ROLES if r != ROLE_ADMIN)
    fields = validate_registration(data, allowed_roles=allowed_roles)

    if User.query.filter_by(email=fields['email']).first():
        raise ValidationError(DUPLICATE_EMAIL_MESSAGE)

    user = User(
        name=fields['name'],
        email=fields['email'],
        role=fields['role'],
        phone=fields['phone'],
        specialization=fields['specialization'],
        is_active=True,
    )
    user.set_password(fields['password'])
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as e:
        # Lost a race against a concurrent registration with the same email
        db.session.rollback()
        raise ValidationError(DUPLICATE_EMAIL_MESSAGE) from e

    logger.info("Registered %s %s (id=%s)", user.role, user.email, user.id)
    return user


def authenticate(email: Any, password: Any) -> User:
    if not email or not password:
        raise ValidationError('Email and password are required')

    normalized = normalize_email(email) if isinstance(email, str) else None
    user = User.query.filter_by(email=normalized).first() if normalized else None

    if not user:
        raise AuthenticationError('Invalid email or password')
    if not user.is_active:
        raise AuthenticationError('Account is deactivated')
    if not isinstance(password, str) or not user.check_password(password):
        raise AuthenticationError('Invalid email or password')

    return user


def get_user(actor: User, user_id: int) -> User:
    ensure_can_manage_user(actor, user_id)
    user = User.query.get(user_id) if is_valid_id(user_id) else None
    if not user:
        raise NotFoundError('User not found')
    return user


def update_profile(actor: User, user_id: int, data: Dict[str, Any]) -> User:
    """Update name/phone/specialization of actor or, for admins, anyone"""
    user = get_user(actor, user_id)
    fields = validate_profile_update(data)

    if 'specialization' in fields and user.role != ROLE_DOCTOR:
        fields.pop('specialization')

    for field, value in fields.items():
        setattr(user, field, value)
    db.session.commit()

    logger.info("Profile of user %s updated by user %s", user.id, actor.id)
    return user


def change_password(user: User, current_password: Any, new_password: Any) -> None:
    if not current_password or not new_password:
        raise ValidationError('Current password and new password are required')
    validate_password(new_password, label='New password')

    if not isinstance(current_password, str) or not user.check_password(current_password):
        raise ValidationError('Current password is incorrect')

    user.set_password(new_password)
    db.session.commit()
    logger.info("Password changed for user %s", user.id)


def set_active(actor: User, user_id: int, is_active: Any) -> User:
    """Admin-only activation toggle; admins cannot change their own flag"""
    if not isinstance(is_active, bool):
        raise ValidationError('Field "is_active" must be a boolean')

    user = User.query.get(user_id) if is_valid_id(user_id) else None
    if not user:
        raise NotFoundError('User not found')
    if user.id == actor.id:
        raise ValidationError('Cannot deactivate your own account')

    user.is_active = is_active
    db.session.commit()

    logger.info(
        "User %s %s by admin %s", user.id, 'activated' if is_active else 'deactivated', actor.id
    )
    return user


def list_users(role: Optional[str] = None, page: int = 1, limit: int = 20):
    """Newest first, optionally filtered by role"""
    query = User.query
    if role and role in ROLES:
        query = query.filter(User.role == role)
    return query.order_by(User.created_at.desc(), User.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )
