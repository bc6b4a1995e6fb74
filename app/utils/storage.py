"""
Public file storage for uploads (package images, terms PDFs, payment receipts).

Files live under UPLOAD_FOLDER and are addressed by a relative path such as
``tours/1767225600_boracay-escape.jpg``; that path is what the models store.
"""
import os
import re
import time
import logging

from flask import current_app, url_for
from marshmallow import ValidationError
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

KB = 1024
MB = 1024 * KB


def get_upload_folder():
    """Get the upload folder path, creating it if necessary."""
    upload_folder = current_app.config.get(
        'UPLOAD_FOLDER',
        os.path.join(current_app.root_path, '..', 'storage')
    )
    os.makedirs(upload_folder, exist_ok=True)
    return upload_folder


def file_extension(filename):
    return filename.rsplit('.', 1)[1].lower() if filename and '.' in filename else ''


def file_size(file):
    """Size in bytes of an uploaded FileStorage without consuming it."""
    stream = file.stream
    position = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(position)
    return size


def validate_upload(file, field, allowed_extensions, max_bytes):
    """Raise ValidationError when the upload has the wrong type or is too big."""
    if file is None or not file.filename:
        raise ValidationError({field: ['No file provided.']})
    ext = file_extension(file.filename)
    if ext not in allowed_extensions:
        raise ValidationError({
            field: [f"The {field} must be a file of type: {', '.join(sorted(allowed_extensions))}."]
        })
    if file_size(file) > max_bytes:
        raise ValidationError({field: [f'The {field} may not be greater than {max_bytes // KB} kilobytes.']})


def sanitize_filename(filename):
    """Keep only letters, digits, dots, underscores and dashes."""
    return re.sub(r'[^a-zA-Z0-9._-]', '', filename or '')


def save_upload(file, directory, filename):
    """Save an upload as ``<directory>/<timestamp>_<filename>``; returns the relative path."""
    stored_name = f'{int(time.time())}_{filename}'
    relative_path = f'{directory}/{stored_name}'
    target_dir = os.path.join(get_upload_folder(), directory)
    os.makedirs(target_dir, exist_ok=True)
    file.save(os.path.join(target_dir, stored_name))
    logger.info('Stored upload %s', relative_path)
    return relative_path


def save_receipt(file):
    return save_upload(file, 'payment_receipts', secure_filename(file.filename))


def absolute_path(relative_path):
    return os.path.join(get_upload_folder(), relative_path)


def file_exists(relative_path):
    return bool(relative_path) and os.path.isfile(absolute_path(relative_path))


def delete_file(relative_path):
    """Delete a stored file if it exists. Returns True when something was removed."""
    if not file_exists(relative_path):
        return False
    os.remove(absolute_path(relative_path))
    logger.info('Deleted upload %s', relative_path)
    return True


def storage_url(relative_path):
    """Public URL of a stored file, or None."""
    if not relative_path:
        return None
    return url_for('storage.serve_file', filename=relative_path, _external=True)
