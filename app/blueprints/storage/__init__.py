"""Storage blueprint - public access to uploaded files."""
from flask import Blueprint

storage_bp = Blueprint('storage', __name__)

from app.blueprints.storage import routes  # noqa: F401, E402
