from flask import Flask
from .extensions import db, migrate, bcrypt, jwt
import logging
import os

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s: %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Create Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    from booking.config import config, get_config
    config_class = config.get(config_name, config['default']) if config_name else get_config()
    if hasattr(config_class, 'validate'):
        config_class.validate()
    app.config.from_object(config_class)

    logging.getLogger().setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    jwt.init_app(app)
    _register_jwt_callbacks()

    # Initialize CORS
    from booking.utils.cors import init_cors
    init_cors(app)

    # Error handlers for the API error taxonomy
    from booking.errors import register_error_handlers
    register_error_handlers(app)

    from booking.middleware import setup_middleware
    setup_middleware(app)

    # Setup file logging
    if not app.debug and not app.testing:
        from logging.handlers import RotatingFileHandler

        log_dir = app.config.get('LOG_DIR', 'logs')
        os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'app.log'),
            maxBytes=10240000,
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('Application startup')

    with app.app_context():
        # Import models to register them with SQLAlchemy
        from .models import User, Appointment, AuditLog  # noqa: F401

        # Register blueprints
        from .routes import auth_bp, appointment_bp, users_bp, health_bp
        app.register_blueprint(health_bp)  # Register health check first
        app.register_blueprint(auth_bp)
        app.register_blueprint(appointment_bp)
        app.register_blueprint(users_bp)

        if app.config.get('AUTO_CREATE_TABLES'):
            db.create_all()
            logger.info("Database tables ensured")

    return app


def _register_jwt_callbacks():
    """Map token failures onto the 401 error envelope"""
    from booking.errors import error_response

    @jwt.user_lookup_loader
    def load_user(_jwt_header, jwt_data):
        # Only active users resolve; anything else fails the lookup
        from booking.models import User
        from booking.utils.validators import is_valid_id
        try:
            user_id = int(jwt_data['sub'])
        except (KeyError, TypeError, ValueError):
            return None
        if not is_valid_id(user_id):
            return None
        user = db.session.get(User, user_id)
        if user is None or not user.is_active:
            return None
        return user

    @jwt.user_lookup_error_loader
    def user_lookup_error(_jwt_header, _jwt_data):
        return error_response('User not found or inactive', 401)

    @jwt.expired_token_loader
    def expired_token(_jwt_header, _jwt_data):
        return error_response('Token has expired', 401)

    @jwt.invalid_token_loader
    def invalid_token(_reason):
        return error_response('Invalid token', 401)

    @jwt.unauthorized_loader
    def missing_token(_reason):
        return error_response('Access token is required', 401)
