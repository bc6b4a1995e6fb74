"""
API v1 Blueprint — REST API with bearer token authentication.
Provides the JSON endpoints used by the Vantripper back office front end.
"""
import os
from flask import Blueprint
from flask_cors import CORS
from marshmallow import ValidationError

api_bp = Blueprint('api', __name__)

# Enable CORS for API endpoints (back office SPA)
# Configure allowed origins via APP_CORS_ORIGINS env var (comma-separated)
_cors_origins = os.environ.get('APP_CORS_ORIGINS', 'http://localhost:5000,http://localhost:3000')
_allowed_origins = [o.strip() for o in _cors_origins.split(',') if o.strip()]

CORS(api_bp, resources={r"/*": {
    "origins": _allowed_origins,
    "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    "allow_headers": ["Authorization", "Content-Type"],
    "expose_headers": ["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    "max_age": 600,
}})


@api_bp.errorhandler(ValidationError)
def handle_validation_error(error):
    """Marshmallow validation failures become 422 responses."""
    from app.blueprints.api.helpers import api_error, validation_details
    messages = error.messages if isinstance(error.messages, dict) else {'_schema': error.messages}
    return api_error('validation_error', 'The given data was invalid.', 422, validation_details(messages))


from app.blueprints.api import (  # noqa: E402, F401
    auth, admin, packages, invoices, itineraries, terms,
    terms_questions, submissions, tour_operations,
)
