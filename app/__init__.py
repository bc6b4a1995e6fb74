"""
Vantripper Back Office Application Factory.
Creates and configures the Flask application instance.
"""
import os
import json
import logging
import time
import uuid
from datetime import datetime, timezone

import click
from flask import Flask, request, g, jsonify

from app.config import config
from app.extensions import init_extensions, db


def _init_sentry(app):
    """Initialize Sentry error tracking for production."""
    dsn = app.config.get('SENTRY_DSN') or os.environ.get('SENTRY_DSN')
    if not dsn:
        app.logger.info('SENTRY_DSN not set — error tracking disabled.')
        return

    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=float(os.environ.get('SENTRY_TRACES_RATE', '0.1')),
        environment=os.environ.get('FLASK_ENV', 'production'),
        send_default_pii=False,
    )
    app.logger.info('Sentry error tracking initialized.')


def create_app(config_name=None):
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration to use (development, testing, production)

    Returns:
        Configured Flask application instance
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)

    # Load configuration
    config_class = config[config_name]
    app.config.from_object(config_class)

    # Initialize Sentry (production only)
    if config_name == 'production':
        _init_sentry(app)

    # Call init_app if available (production validation happens here)
    if hasattr(config_class, 'init_app'):
        config_class.init_app(app)

    # Initialize extensions
    init_extensions(app)

    # Enable response compression (gzip)
    from flask_compress import Compress
    Compress(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Configure logging
    configure_logging(app)

    # Add security headers
    register_security_headers(app)

    # Create database tables (development only)
    if config_name == 'development':
        with app.app_context():
            db.create_all()

    return app


def register_blueprints(app):
    """Register all application blueprints."""
    from app.blueprints.main import main_bp
    from app.blueprints.storage import storage_bp
    from app.blueprints.api import api_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(storage_bp)
    app.register_blueprint(api_bp, url_prefix='/api/v1')


def register_error_handlers(app):
    """Every error leaves the API as a JSON error envelope."""

    def _error(code, message, status, **extra):
        body = {'error': {'code': code, 'message': message}}
        body['error'].update(extra)
        return jsonify(body), status

    @app.errorhandler(403)
    def forbidden(error):
        return _error('forbidden', 'Access denied.', 403)

    @app.errorhandler(404)
    def not_found(error):
        return _error('not_found', 'Resource not found.', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error('method_not_allowed', 'Method not allowed.', 405)

    @app.errorhandler(413)
    def file_too_large(error):
        max_mb = app.config.get('MAX_CONTENT_LENGTH', 0) // (1024 * 1024)
        return _error('file_too_large', f'The upload may not be greater than {max_mb} MB.', 413)

    @app.errorhandler(429)
    def ratelimit_error(error):
        return _error('rate_limit_exceeded', 'Too many requests. Try again later.', 429)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        request_id = g.get('request_id', '-')
        original = getattr(error, 'original_exception', None) or error
        app.logger.error(
            '500 Internal Server Error: %s (request_id=%s)', type(original).__name__, request_id,
            exc_info=original if isinstance(original, BaseException) else True,
        )
        return _error('internal_error', 'Internal server error.', 500, request_id=request_id)


def register_cli_commands(app):
    """Register custom CLI commands."""

    @app.cli.command('create-admin')
    @click.option('--name', prompt='Admin name', help='Admin display name', envvar='ADMIN_NAME')
    @click.option('--email', prompt='Admin email', help='Admin email', envvar='ADMIN_EMAIL')
    @click.option('--password', prompt='Admin password', hide_input=True, confirmation_prompt=True,
                  help='Admin password', envvar='ADMIN_PASSWORD')
    def create_admin(name, email, password):
        """Create (or promote) a verified, approved administrator.

        Use this command to bootstrap a fresh deployment; new accounts
        otherwise need an existing admin to approve them.
        """
        from app.models.user import User
        from app.utils.formatting import utcnow

        email = email.strip().lower()
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(name=name, email=email)
            db.session.add(user)
            action = 'Created'
        else:
            action = 'Updated'

        user.set_password(password)
        user.is_admin = True
        user.is_approved = True
        user.user_delete = False
        if user.email_verified_at is None:
            user.email_verified_at = utcnow()
        user.verification_token = None
        db.session.commit()

        click.echo(f'[OK] {action} admin: {email}')

    @app.cli.command('approve-user')
    @click.argument('email')
    def approve_user(email):
        """Approve a pending account and mark its email as verified."""
        from app.models.user import User

        user = User.query.filter_by(email=email.strip().lower()).first()
        if user is None:
            raise click.ClickException(f'No user with email {email}.')

        if not user.has_verified_email:
            user.mark_email_as_verified()
        user.is_approved = True
        db.session.commit()

        click.echo(f'[OK] Approved: {user.email}')


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production (cloud log aggregation)."""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'module': record.module,
            'line': record.lineno,
        }
        # Add request_id if available
        try:
            log_entry['request_id'] = g.get('request_id', '-')
        except RuntimeError:
            pass  # Outside request context
        if record.exc_info and record.exc_info[0]:
            log_entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def configure_logging(app):
    """Configure application logging.

    Production: JSON to stdout.
    Development: plain text.
    Every response carries the X-Request-ID it was logged under.
    """

    @app.before_request
    def assign_request_id():
        g.request_id = request.headers.get('X-Request-ID', str(uuid.uuid4())[:8])
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        response.headers['X-Request-ID'] = g.get('request_id', '-')
        if app.testing:
            return response
        elapsed_ms = int((time.perf_counter() - g.get('request_started', time.perf_counter())) * 1000)
        app.logger.info('%s %s %s %dms', request.method, request.path, response.status_code, elapsed_ms)
        return response

    if app.testing:
        return

    if not app.debug:
        # Production: JSON to stdout
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(JSONFormatter())
        stream_handler.setLevel(logging.INFO)

        # Clear existing handlers to avoid duplicates
        app.logger.handlers.clear()
        app.logger.addHandler(stream_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('Vantripper back office startup (JSON logging)')
    else:
        app.logger.setLevel(logging.DEBUG)
        app.logger.info('Vantripper back office startup (development)')


def register_security_headers(app):
    """Register security headers for all responses."""

    @app.after_request
    def add_security_headers(response):
        # Prevent MIME type sniffing
        response.headers['X-Content-Type-Options'] = 'nosniff'

        # Clickjacking protection
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'

        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['X-Permitted-Cross-Domain-Policies'] = 'none'

        # HSTS - Force HTTPS (1 year, include subdomains)
        if not app.debug and not app.testing:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response
