"""
Storage routes - serve package images, terms PDFs and payment receipts
from the upload folder.
"""
from flask import send_from_directory

from app.blueprints.storage import storage_bp
from app.utils.storage import get_upload_folder


@storage_bp.route('/storage/<path:filename>')
def serve_file(filename):
    # send_from_directory rejects paths escaping the folder with a 404
    return send_from_directory(get_upload_folder(), filename)
