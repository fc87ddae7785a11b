from functools import wraps

from flask import request
from flask_jwt_extended import current_user, verify_jwt_in_request

from booking.errors import AuthenticationError, AuthorizationError, ValidationError


def get_current_user():
    """Return the active user bound to the verified JWT"""
    user = current_user
    if user is None:
        raise AuthenticationError('User not found or inactive')
    return user


def require_role(*roles):
    """
    Decorator to require specific roles
    Usage: @require_role('admin') or @require_role('patient', 'doctor')
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            """
            Verify the bearer token, then require that its user has one of the
            given roles. Without roles any authenticated active user passes.
            """
            verify_jwt_in_request()
            user = get_current_user()

            if roles and user.role not in roles:
                raise AuthorizationError('Insufficient permissions')

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def get_json_body():
    """Return the parsed JSON object of the request or raise a 400"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be JSON')
    return data


def get_pagination_args(app_config):
    """Read page/limit query params, clamped like the listing endpoints expect"""
    default_limit = app_config.get('DEFAULT_PAGE_SIZE', 20)
    max_limit = app_config.get('MAX_PAGE_SIZE', 100)

    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', default_limit, type=int)

    if page is None or page < 1:
        page = 1
    if limit is None or limit < 1 or limit > max_limit:
        limit = default_limit
    return page, limit
