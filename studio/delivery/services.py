import logging
import time

from django.db import transaction
from django.utils import timezone

from studio.production import storage
from studio.production.services import log_activity
from studio.core.utils import get_client_ip
from .models import DeliverySettings, DeliveryTracking, DEFAULT_SECTION_ORDER, SECTION_FOR_CATEGORY

logger = logging.getLogger(__name__)


def default_delivery_url(job_card):
    return f'job-{job_card.pk}-{int(time.time() * 1000)}'


def settings_for(job_card):
    """Saved settings, or unsaved defaults for jobs that were never configured"""
    delivery_settings = DeliverySettings.objects.filter(job_card=job_card).first()
    if delivery_settings is None:
        delivery_settings = DeliverySettings(job_card=job_card, delivery_url=f'job-{job_card.pk}')
    return delivery_settings


def track(job_card, request, action_type, file_name=None, **extra):
    """Record a page view or download; never fails the visitor's request"""
    client_info = {
        'ip': get_client_ip(request),
        'user_agent': request.META.get('HTTP_USER_AGENT', ''),
        'timestamp': timezone.now().isoformat(),
    }
    client_info.update(extra)
    try:
        with transaction.atomic():
            return DeliveryTracking.objects.create(
                job_card=job_card, action_type=action_type, file_name=file_name, client_info=client_info
            )
    except Exception as e:
        logger.error(f"Failed to track {action_type} for job card {job_card.pk}: {e}")
        return None


def save_header_image(delivery_settings, uploaded_file):
    key = storage.build_object_key(delivery_settings.job_card_id, 'delivery', uploaded_file.name)
    old_key = delivery_settings.header_image
    delivery_settings.header_image = storage.save_object(key, uploaded_file)
    if old_key and old_key != delivery_settings.header_image:
        storage.delete_object(old_key)
    return delivery_settings.header_image


def _file_entry(production_file, request, with_download):
    return {
        'id': production_file.id,
        'name': production_file.original_name,
        'file_size': production_file.file_size,
        'mime_type': production_file.mime_type,
        'service_category': production_file.service_category,
        'thumbnail_url': storage.signed_download_url(request, production_file.thumbnail_path),
        'url': storage.signed_download_url(
            request, production_file.file_path, production_file.original_name
        ) if with_download else None,
    }


def build_delivery_page(job_card, request):
    """
    Public view of a job: summary, page settings and final files grouped
    into sections in the configured order.

    Download URLs are withheld when downloads are disabled; thumbnails
    are always signed so the gallery still renders.
    """
    delivery_settings = settings_for(job_card)
    final_files = job_card.files.filter(media_type='final', is_active=True).order_by('uploaded_at', 'id')

    files = [_file_entry(f, request, delivery_settings.enable_downloads) for f in final_files]
    grouped = {}
    for entry in files:
        section = SECTION_FOR_CATEGORY.get(entry['service_category'], 'other_files')
        grouped.setdefault(section, []).append(entry)

    section_order = list(delivery_settings.section_order or DEFAULT_SECTION_ORDER)
    # Sections missing from a customised order still appear, at the end
    section_order += [s for s in DEFAULT_SECTION_ORDER if s not in section_order]
    sections = [{'section': s, 'files': grouped[s]} for s in section_order if grouped.get(s)]

    client = job_card.client
    return {
        'job_card': {
            'id': job_card.id,
            'job_id': job_card.job_id,
            'property_address': job_card.property_address,
            'client_name': client.name,
            'status': job_card.status,
            'delivered_at': job_card.delivered_at,
        },
        'settings': {
            'delivery_url': delivery_settings.delivery_url,
            'enable_comments': delivery_settings.enable_comments,
            'enable_downloads': delivery_settings.enable_downloads,
            'section_order': section_order,
            'header_image_url': storage.signed_download_url(request, delivery_settings.header_image),
        },
        'sections': sections,
        'files': files,
    }


def record_comment(job_card, comment):
    description = f"Client comment from {comment.client_name}"
    if comment.request_revision:
        description += ' (revision requested)'
    log_activity(job_card, None, 'client_comment', description, {'comment_id': comment.id})
