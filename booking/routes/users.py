from flask import Blueprint, request, current_app

from booking.models.user import ROLE_ADMIN
from booking.services import (
    change_password,
    get_user,
    list_active_doctors,
    list_users,
    set_active,
    update_profile,
)
from booking.utils import (
    audit_user,
    get_current_user,
    get_json_body,
    get_pagination_args,
    pagination_meta,
    require_role,
    success_response,
)

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


@users_bp.route('', methods=['GET'])
@require_role(ROLE_ADMIN)
def list_all():
    """
    List all users, newest first
    Access: admin
    Query params: role, page, limit
    """
    page, limit = get_pagination_args(current_app.config)
    result = list_users(role=request.args.get('role', type=str), page=page, limit=limit)

    return success_response(data={
        'users': [u.to_profile() for u in result.items],
        'pagination': pagination_meta(result, 'users'),
    })


@users_bp.route('/doctors', methods=['GET'])
@require_role()
def doctors():
    """Active doctors, optionally filtered by specialization substring"""
    specialization = request.args.get('specialization', type=str)
    return success_response(data={
        'doctors': [d.to_summary() for d in list_active_doctors(specialization)],
    })


@users_bp.route('/profile', methods=['GET'])
@require_role()
def get_own_profile():
    return success_response(data={'user': get_current_user().to_profile()})


@users_bp.route('/profile', methods=['PATCH'])
@require_role()
def update_own_profile():
    """Body: any of { name, phone, specialization }"""
    user = get_current_user()
    updated = update_profile(user, user.id, get_json_body())
    return success_response(data={'user': updated.to_profile()}, message='Profile updated successfully')


@users_bp.route('/change-password', methods=['POST'])
@require_role()
def change_own_password():
    """Body: { current_password, new_password }"""
    data = get_json_body()
    change_password(get_current_user(), data.get('current_password'), data.get('new_password'))
    return success_response(message='Password changed successfully')


@users_bp.route('/<int:user_id>', methods=['GET'])
@require_role()
def get_profile(user_id):
    """Access: the user themself or an admin"""
    user = get_user(get_current_user(), user_id)
    return success_response(data={'user': user.to_profile()})


@users_bp.route('/<int:user_id>', methods=['PATCH'])
@require_role()
def update_user_profile(user_id):
    """Access: the user themself or an admin"""
    updated = update_profile(get_current_user(), user_id, get_json_body())
    return success_response(data={'user': updated.to_profile()}, message='Profile updated successfully')


@users_bp.route('/<int:user_id>/status', methods=['PATCH'])
@require_role(ROLE_ADMIN)
def update_status(user_id):
    """
    Activate or deactivate a user
    Access: admin (never on their own account)
    Body: { is_active: bool }
    """
    admin = get_current_user()
    is_active = get_json_body().get('is_active')
    user = set_active(admin, user_id, is_active)

    audit_user('activate' if user.is_active else 'deactivate', admin, user)

    return success_response(
        data={'user': user.to_profile()},
        message=f"User {'activated' if user.is_active else 'deactivated'} successfully",
    )
