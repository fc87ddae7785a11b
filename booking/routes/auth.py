from flask import Blueprint, current_app
from flask_jwt_extended import jwt_required

from booking.services import authenticate, issue_token, register_user
from booking.utils import get_current_user, get_json_body, require_role, success_response

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Register a new user and return a token.
    Body: { name, email, password, role?, phone?, specialization? }
    """
    data = get_json_body()
    user = register_user(data, allow_admin=current_app.config.get('ALLOW_ADMIN_REGISTRATION', False))

    return success_response(
        data={'user': user.to_profile(), 'token': issue_token(user)},
        message='User registered successfully',
        status_code=201,
    )


@auth_bp.route('/login', methods=['POST'])
def login():
    """Login endpoint - authenticates by email/password and returns a JWT"""
    data = get_json_body()
    user = authenticate(data.get('email'), data.get('password'))

    return success_response(
        data={'user': user.to_profile(), 'token': issue_token(user)},
        message='Login successful',
    )


@auth_bp.route('/me', methods=['GET'])
@require_role()
def me():
    """Profile of the user behind the bearer token"""
    user = get_current_user()
    return success_response(data={'user': user.to_profile()})


@auth_bp.route('/refresh', methods=['POST'])
@require_role()
def refresh():
    """Issue a fresh token for an active user"""
    user = get_current_user()
    return success_response(
        data={'token': issue_token(user)},
        message='Token refreshed successfully',
    )


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    """Stateless JWT: the client just discards its token"""
    return success_response(message='Logout successful')
