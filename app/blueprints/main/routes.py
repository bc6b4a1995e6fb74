"""
Main blueprint routes - health check.
"""
from flask import jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from app.blueprints.main import main_bp
from app.extensions import db

DATABASE_BINDS = (None, 'invoice', 'tnc')


@main_bp.route('/health')
def health_check():
    """Health check endpoint for Docker/load balancer; pings every database."""
    databases = {}
    for bind in DATABASE_BINDS:
        name = bind or 'website'
        try:
            with db.engines[bind].connect() as connection:
                connection.execute(db.text('SELECT 1'))
            databases[name] = 'healthy'
        except SQLAlchemyError as e:
            current_app.logger.error('Health check failed for %s database: %s', name, e)
            databases[name] = 'unhealthy'

    healthy = all(status == 'healthy' for status in databases.values())
    return jsonify({
        'status': 'ok' if healthy else 'degraded',
        'databases': databases,
        'service': 'vantripper-backoffice',
    }), 200 if healthy else 503
