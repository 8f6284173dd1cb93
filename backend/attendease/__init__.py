"""AttendEase - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from attendease.config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    setup_logging(app)
    register_blueprints(app)
    register_error_handlers(app)
    setup_database(app)
    register_commands(app)

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'AttendEase',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from attendease.api.courses import courses_bp
    from attendease.api.sessions import sessions_bp
    from attendease.api.attendance import attendance_bp

    # Teacher: courses and sessions
    app.register_blueprint(courses_bp, url_prefix='/api/courses')
    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')

    # Student: check-in
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')

    # Swagger UI
    from flask_swagger_ui import get_swaggerui_blueprint
    from attendease.utils.swagger import SWAGGER_URL, API_URL, generate_swagger_spec

    @app.route(API_URL)
    def swagger_spec():
        """Serve Swagger/OpenAPI specification."""
        return jsonify(generate_swagger_spec())

    swaggerui_bp = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={'app_name': "AttendEase API"}
    )
    app.register_blueprint(swaggerui_bp, url_prefix=SWAGGER_URL)

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from attendease.errors import AttendEaseError
    from attendease.utils.helpers import handle_error
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(AttendEaseError)
    def domain_error(error):
        if error.status_code >= 500:
            app.logger.warning('Transient failure: %s', error.message)
        return handle_error(error.message, error.status_code, reason=error.reason)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e.description, e.code)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error('Internal server error', 500)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return handle_error('Token has expired', 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return handle_error('Invalid token', 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return handle_error('Authorization token required', 401)

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    if not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/app.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger('attendease').addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        logging.getLogger('attendease').setLevel(logging.INFO)
        app.logger.info('AttendEase startup')

def setup_database(app: Flask) -> None:
    """Import models so metadata knows every table."""
    with app.app_context():
        from attendease.models import (  # noqa: F401
            Course, ClassSession, Enrollment,
            AttendanceRecord, ScanAttemptLog
        )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('issue-token')
    @click.option('--uid', required=True, help='Stable user id from the identity provider')
    @click.option('--role', type=click.Choice(['teacher', 'student']), required=True)
    @click.option('--name', default='Dev User')
    @click.option('--student-id-number', default=None)
    def issue_token(uid, role, name, student_id_number):
        """Mint an access token for local development."""
        from attendease.utils.identity import issue_access_token

        click.echo(issue_access_token(uid, role, name, student_id_number))
