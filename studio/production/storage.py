"""
Object storage for production files.

Files are written through Django's default storage under keys of the form
``job-<id>/<media_type>/<timestamp>_<name>``. Clients never see storage
paths directly: uploads and downloads go through signed, expiring tokens.
"""
import logging
import os
import time

from django.conf import settings
from django.core import signing
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.urls import reverse
from django.utils.text import get_valid_filename

from .thumbnails import thumbnail_name, try_generate_thumbnail

logger = logging.getLogger(__name__)

UPLOAD_SALT = 'studio.production.upload'
DOWNLOAD_SALT = 'studio.production.download'

ALLOWED_CONTENT_TYPE_PREFIXES = ('image/', 'video/')
ALLOWED_CONTENT_TYPES = ('application/pdf', 'application/zip', 'application/octet-stream')

MAX_UPLOAD_SIZE = getattr(settings, 'PRODUCTION_MAX_UPLOAD_SIZE', int(os.getenv('PRODUCTION_MAX_UPLOAD_SIZE', 50 * 1024 * 1024)))
UPLOAD_URL_MAX_AGE = getattr(settings, 'SIGNED_UPLOAD_URL_MAX_AGE', int(os.getenv('SIGNED_UPLOAD_URL_MAX_AGE', 3600)))
DOWNLOAD_URL_MAX_AGE = getattr(settings, 'SIGNED_DOWNLOAD_URL_MAX_AGE', int(os.getenv('SIGNED_DOWNLOAD_URL_MAX_AGE', 3600)))


def is_allowed_content_type(content_type):
    if not content_type:
        return False
    return content_type.startswith(ALLOWED_CONTENT_TYPE_PREFIXES) or content_type in ALLOWED_CONTENT_TYPES


def build_object_key(job_card_id, media_type, file_name):
    safe_name = get_valid_filename(os.path.basename(file_name)) or 'file'
    return f'job-{job_card_id}/{media_type}/{int(time.time() * 1000)}_{safe_name}'


def build_thumbnail_key(job_card_id, media_type, file_name):
    return f'job-{job_card_id}/{media_type}/thumbs/{thumbnail_name(get_valid_filename(file_name))}'


def save_object(key, content):
    """Store bytes or a Django File under key; returns the key actually used"""
    if isinstance(content, bytes):
        content = ContentFile(content)
    saved_key = default_storage.save(key, content)
    logger.debug(f"Stored object {saved_key}")
    return saved_key


def read_object(key):
    with default_storage.open(key, 'rb') as handle:
        return handle.read()


def open_object(key):
    return default_storage.open(key, 'rb')


def object_exists(key):
    return bool(key) and default_storage.exists(key)


def delete_object(key):
    if not key:
        return
    try:
        default_storage.delete(key)
    except OSError as e:
        logger.warning(f"Could not delete stored object {key}: {e}")


def store_thumbnail(job_card_id, media_type, file_name, image_bytes):
    """Generate and store a thumbnail; returns its key or None"""
    thumb_bytes = try_generate_thumbnail(image_bytes, file_name)
    if thumb_bytes is None:
        return None
    return save_object(build_thumbnail_key(job_card_id, media_type, file_name), thumb_bytes)


# ==================== SIGNED TOKENS ====================

def make_upload_token(job_card_id, key, content_type, user_id):
    return signing.dumps(
        {'job_card': job_card_id, 'key': key, 'content_type': content_type, 'user': user_id},
        salt=UPLOAD_SALT,
    )


def read_upload_token(token):
    """Payload of a valid upload token; raises signing.BadSignature otherwise"""
    return signing.loads(token, salt=UPLOAD_SALT, max_age=UPLOAD_URL_MAX_AGE)


def make_download_token(key, file_name=None):
    return signing.dumps({'key': key, 'name': file_name}, salt=DOWNLOAD_SALT)


def read_download_token(token):
    return signing.loads(token, salt=DOWNLOAD_SALT, max_age=DOWNLOAD_URL_MAX_AGE)


def signed_upload_url(request, token):
    path = reverse('signed-upload', args=[token])
    return request.build_absolute_uri(path) if request else path


def signed_download_url(request, key, file_name=None):
    if not key:
        return None
    path = reverse('signed-file-download', args=[make_download_token(key, file_name)])
    return request.build_absolute_uri(path) if request else path
