"""
API error taxonomy and the Flask handlers that render it.

Domain code raises these; routes never build error responses by hand.
"""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map to a client-visible response"""
    status_code = 400
    default_message = 'Bad request'

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors or []

    def to_dict(self):
        body = {'status': 'error', 'message': self.message}
        if self.errors:
            body['errors'] = list(self.errors)
        return body


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Validation failed'


class ConflictError(ApiError):
    status_code = 400
    default_message = 'Appointment slot is already booked'


class AuthenticationError(ApiError):
    status_code = 401
    default_message = 'Authentication required'


class AuthorizationError(ApiError):
    status_code = 403
    default_message = 'Access denied'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Resource not found'


def error_response(message, status_code, errors=None):
    body = {'status': 'error', 'message': message}
    if errors:
        body['errors'] = errors
    return jsonify(body), status_code


def register_error_handlers(app):
    """Attach JSON error handlers for the taxonomy and for unexpected failures"""
    from booking.extensions import db

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        if error.status_code >= 500:
            logger.error("API error: %s", error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Endpoint not found', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', 405)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return error_response(error.description or error.name, error.code)

    @app.errorhandler(Exception)
    def handle_exception(error):
        logger.error("Unhandled exception: %s", error, exc_info=True)
        db.session.rollback()
        return error_response('Internal server error', 500)
