"""
Development server entry point
Run the Flask application with: python run.py
"""
from booking import create_app
import os

# Create Flask app instance
app = create_app()

if __name__ == '__main__':
    host = os.getenv('FLASK_HOST', '0.0.0.0')
    port = int(os.getenv('FLASK_PORT', 5000))

    print(f"""
    ========================================
    Appointment Booking API
    ========================================
    Listening on: http://{host}:{port}
    Database:     {app.config['SQLALCHEMY_DATABASE_URI']}
    Cancel cutoff: {app.config['CANCELLATION_CUTOFF_HOURS']}h
    Admin self-registration: {'on' if app.config['ALLOW_ADMIN_REGISTRATION'] else 'off'}
    ========================================
    """)

    app.run(host=host, port=port, debug=app.debug, threaded=True)
