"""
Health endpoints for load balancers and container probes.
None of them require a token.
"""
import logging
from datetime import datetime

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from booking.extensions import db

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__, url_prefix='/health')

SERVICE_NAME = 'appointment-booking'
REQUIRED_TABLES = ('users', 'appointments')


def _probe(status, **extra):
    body = {'status': status, 'timestamp': datetime.utcnow().isoformat()}
    body.update(extra)
    return body


@health_bp.route('', methods=['GET'])
@health_bp.route('/ping', methods=['GET'])
def health_check():
    """Process is up; does not touch the database"""
    return jsonify(_probe('healthy', service=SERVICE_NAME)), 200


@health_bp.route('/ready', methods=['GET'])
def readiness_check():
    """Database reachable and booking tables present"""
    missing = []
    try:
        db.session.execute(db.text('SELECT 1'))
        existing = set(db.inspect(db.engine).get_table_names())
        missing = [t for t in REQUIRED_TABLES if t not in existing]
        db_status = 'connected'
    except (SQLAlchemyError, RuntimeError) as e:
        logger.error("Database readiness check failed: %s", e)
        db.session.rollback()
        db_status = 'unreachable'

    ready = db_status == 'connected' and not missing
    body = _probe('ready' if ready else 'not_ready', database=db_status)
    if missing:
        body['missing_tables'] = missing
    return jsonify(body), 200 if ready else 503


@health_bp.route('/live', methods=['GET'])
def liveness_check():
    return jsonify(_probe('alive')), 200
