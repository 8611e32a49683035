"""
Job card workflow: creation from bookings, status changes, lifecycle actions,
editor hand-off, file intake and delivery email.

Only role rules are enforced here. Any status can follow any other; the
timestamps and history record what happened.
"""
import io
import logging
import os
import zipfile

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.utils import timezone

from studio.core.exceptions import ActionNotAllowed, ExternalServiceError, ServiceError
from .job_ids import assign_job_id
from .models import (
    JobCard, ProductionFile, ContentItem, JobActivityLog, OrderStatusAudit,
    ProductionNotification, EmailDeliveryLog,
)
from .status import (
    ACTION_UPLOAD, ACTION_ACCEPT, ACTION_READY_FOR_QC, ACTION_REVISION, ACTION_DELIVERED,
    create_history_entry, get_status_label, status_timestamps,
)
from . import storage

logger = logging.getLogger(__name__)

FRONTEND_URL = getattr(settings, 'FRONTEND_URL', os.getenv('FRONTEND_URL', 'http://localhost:5173'))


# ==================== ACTIVITY & NOTIFICATIONS ====================

def log_activity(job_card, user, action, description, metadata=None):
    """Append to the job timeline; never fails the caller"""
    try:
        # Own savepoint so a failed insert leaves the caller's transaction usable
        with transaction.atomic():
            return JobActivityLog.objects.create(
                job_card=job_card,
                user=user if user and user.is_authenticated else None,
                action=action,
                description=description,
                metadata=metadata or {},
            )
    except Exception as e:
        logger.error(f"Failed to log activity for job card {job_card.pk}: {e}")
        return None


def notify(job_card, recipient, notification_type, message):
    if recipient is None:
        return None
    return ProductionNotification.objects.create(
        job_card=job_card,
        recipient=recipient,
        type=notification_type,
        message=message,
    )


def job_label(job_card):
    return job_card.job_id or f'#{job_card.pk}'


# ==================== CREATION ====================

def create_job_card_for_booking(booking):
    """Every booking gets exactly one job card, seeded from the client's preferences"""
    job_card = JobCard.objects.create(
        licensee_id=booking.licensee_id,
        booking=booking,
        client=booking.client,
        photographer=booking.photographer,
        status='unassigned',
        requested_services=list(booking.services or []),
        editing_notes=booking.client.editing_notes() or None,
    )
    log_activity(
        job_card, None, 'created',
        f"Job card created for {booking.property_address}",
        {'booking_id': booking.id},
    )
    return job_card


def sync_job_card_with_booking(booking):
    """Carry booking edits that the job card mirrors"""
    job_card = getattr(booking, 'job_card', None)
    if job_card is None:
        return None
    job_card.client = booking.client
    job_card.photographer = booking.photographer
    job_card.requested_services = list(booking.services or [])
    job_card.save(update_fields=['client', 'photographer', 'requested_services', 'updated_at'])
    return job_card


# ==================== PERMISSIONS ====================

def ensure_can_work_on(job_card, user):
    """Editors may only touch job cards assigned to them"""
    if user.is_editor and job_card.editor_id != user.id:
        raise ActionNotAllowed('Cannot update job not assigned to you')


def ensure_admin_or_va(user):
    if not user.is_admin_or_va:
        raise ActionNotAllowed('Admin or VA access required')


# ==================== STATUS CHANGES ====================

EDITOR_ALLOWED_STATUSES = ('editing', 'ready_for_qa')


@transaction.atomic
def update_job_card(job_card, user, data):
    """General job card update with automatic status timestamps"""
    new_status = data.get('status')
    if user.is_editor:
        if new_status and new_status not in EDITOR_ALLOWED_STATUSES:
            raise ActionNotAllowed('Editors cannot set this status')
        ensure_can_work_on(job_card, user)
        data = {key: value for key, value in data.items() if key in ('status', 'editing_notes')}

    previous_status = job_card.status
    previous_editor_id = job_card.editor_id
    for field, value in data.items():
        setattr(job_card, field, value)

    if new_status:
        for field, value in status_timestamps(job_card, new_status).items():
            setattr(job_card, field, value)
    job_card.save()

    if new_status and new_status != previous_status:
        log_activity(
            job_card, user, 'status_updated',
            f"Job status changed from {previous_status} to {new_status}",
            {'previous_status': previous_status, 'new_status': new_status},
        )
    if new_status and 'editor' in data and job_card.editor_id:
        notify(
            job_card, job_card.editor, 'assignment',
            f"Job card {job_label(job_card)} has been assigned to you",
        )
    elif 'editor' in data and job_card.editor_id and job_card.editor_id != previous_editor_id:
        log_activity(
            job_card, user, 'editor_assigned',
            f"Assigned to editor {job_card.editor.display_name}",
            {'editor_id': job_card.editor_id},
        )
    return job_card


@transaction.atomic
def change_status(job_card, new_status, user, reason=None, changed_by=None):
    """Admin status override, recorded in the status audit trail"""
    previous_status = job_card.status
    job_card.status = new_status
    for field, value in status_timestamps(job_card, new_status).items():
        setattr(job_card, field, value)
    job_card.save()
    OrderStatusAudit.objects.create(
        job_card=job_card,
        previous_status=previous_status,
        new_status=new_status,
        reason=reason,
        changed_by=changed_by or user,
    )
    log_activity(
        job_card, user, 'status_change',
        f"Status changed from {get_status_label(previous_status)} to {get_status_label(new_status)}"
        + (f": {reason}" if reason else ''),
        {'previous_status': previous_status, 'new_status': new_status, 'reason': reason},
    )
    return job_card


def quick_status_update(job_card, new_status, user, notes=None):
    """Status panel update: status plus free-text notes in the activity log"""
    previous_status = job_card.status
    job_card.status = new_status
    for field, value in status_timestamps(job_card, new_status).items():
        setattr(job_card, field, value)
    job_card.save()
    log_activity(
        job_card, user, 'status_updated',
        f"Job status changed from {previous_status} to {new_status}" + (f" - {notes}" if notes else ''),
        {'previous_status': previous_status, 'new_status': new_status, 'notes': notes, 'updated_by': user.id},
    )
    return job_card


# ==================== LIFECYCLE ACTIONS ====================

@transaction.atomic
def perform_action(job_card, action, user, notes=None):
    """Apply one of upload / accept / readyForQC / revision / delivered"""
    now = timezone.now()

    if action == ACTION_UPLOAD:
        if user.is_editor:
            ensure_can_work_on(job_card, user)
        job_card.uploaded_at = now
        if job_card.status == 'unassigned':
            job_card.status = 'in_progress'
            job_card.assigned_at = job_card.assigned_at or now
        description = 'Files uploaded'

    elif action == ACTION_ACCEPT:
        if user.is_editor:
            if job_card.editor_id and job_card.editor_id != user.id:
                raise ActionNotAllowed('Cannot accept a job assigned to another editor')
            job_card.editor = user
        elif not user.is_admin_or_va:
            raise ActionNotAllowed('Only editors can accept jobs')
        job_card.accepted_at = now
        job_card.assigned_at = job_card.assigned_at or now
        job_card.status = 'editing'
        description = 'Job accepted'

    elif action == ACTION_READY_FOR_QC:
        if user.is_editor:
            ensure_can_work_on(job_card, user)
        elif not user.is_admin_or_va:
            raise ActionNotAllowed('Only the assigned editor can mark this job ready for QC')
        job_card.ready_for_qc_at = now
        job_card.completed_at = now
        job_card.status = 'ready_for_qa'
        job_card.content_items.filter(status='draft').update(status='ready_for_qc', updated_at=now)
        description = 'Marked ready for QC'

    elif action == ACTION_REVISION:
        ensure_admin_or_va(user)
        job_card.revision_requested_at = now
        job_card.revision_notes = notes or job_card.revision_notes
        job_card.status = 'in_revision'
        job_card.content_items.filter(status__in=['ready_for_qc', 'approved']).update(status='in_revision', updated_at=now)
        if job_card.editor_id:
            notify(
                job_card, job_card.editor, 'revision_requested',
                f"Revision requested for job {job_label(job_card)}" + (f": {notes}" if notes else ''),
            )
        description = 'Revision requested'

    elif action == ACTION_DELIVERED:
        ensure_admin_or_va(user)
        job_card.delivered_at = now
        job_card.status = 'delivered'
        job_card.content_items.exclude(status='delivered').update(status='delivered', updated_at=now)
        description = 'Delivered to client'

    else:
        raise ServiceError(f'Unknown action: {action}')

    job_card.history = list(job_card.history or []) + [create_history_entry(action, user.id, notes)]
    job_card.save()
    log_activity(
        job_card, user, action,
        description + (f" - {notes}" if notes else ''),
        {'notes': notes} if notes else {},
    )
    return job_card


@transaction.atomic
def submit_to_editor(job_card, user, editor, service_blocks, instructions=None):
    """Hand the job to an editor with the chosen editing services"""
    if not (user.is_admin_or_va or user.role == 'photographer'):
        raise ActionNotAllowed('Only production staff can submit jobs to editors')
    if editor.role != 'editor':
        raise ServiceError('Selected user is not an editor')

    job_card.editor = editor
    job_card.service_blocks = service_blocks
    job_card.editor_instructions = instructions
    job_card.status = 'in_progress'
    job_card.assigned_at = job_card.assigned_at or timezone.now()
    job_card.save()

    assign_job_id(job_card)
    notify(
        job_card, editor, 'assignment',
        f"Job card {job_label(job_card)} has been assigned to you",
    )
    log_activity(
        job_card, user, 'submitted_to_editor',
        f"Submitted to editor {editor.display_name} with {len(service_blocks)} service block(s)",
        {'editor_id': editor.id, 'service_blocks': service_blocks},
    )
    return job_card


@transaction.atomic
def complete_with_content(job_card, user, notes=None):
    """Editor finished: content goes to QC and the job to ready_for_qa"""
    ensure_can_work_on(job_card, user)
    if not job_card.content_items.exists() and not job_card.files.filter(is_active=True).exclude(media_type='raw').exists():
        raise ServiceError('Upload edited content before completing the job')
    return perform_action(job_card, ACTION_READY_FOR_QC, user, notes)


@transaction.atomic
def revision_reply(job_card, user, reply, new_status='editing'):
    """Editor response to a revision request"""
    ensure_can_work_on(job_card, user)
    previous_status = job_card.status
    job_card.status = new_status
    for field, value in status_timestamps(job_card, new_status).items():
        setattr(job_card, field, value)
    job_card.save()
    log_activity(
        job_card, user, 'revision_reply',
        f"Editor replied to revision: {reply}",
        {'reply': reply, 'previous_status': previous_status, 'new_status': new_status},
    )
    return job_card


# ==================== FILES ====================

def _record_file(job_card, user, key, original_name, content_type, file_size, media_type,
                 service_category, thumbnail_key=None, instructions=None, export_type=None,
                 custom_description=None):
    return ProductionFile.objects.create(
        job_card=job_card,
        file_name=os.path.basename(key),
        original_name=original_name,
        file_path=key,
        thumbnail_path=thumbnail_key,
        file_size=file_size,
        mime_type=content_type,
        media_type=media_type,
        service_category=service_category,
        instructions=instructions,
        export_type=export_type,
        custom_description=custom_description,
        uploaded_by=user,
    )


def _after_upload(job_card, user, production_file):
    """Status and content side effects of a stored upload"""
    if production_file.media_type == 'raw':
        if job_card.status == 'unassigned':
            job_card.status = 'in_progress'
            job_card.assigned_at = job_card.assigned_at or timezone.now()
        job_card.uploaded_at = job_card.uploaded_at or timezone.now()
        job_card.history = list(job_card.history or []) + [create_history_entry(ACTION_UPLOAD, user.id)]
        job_card.save()
    elif production_file.media_type == 'final':
        ContentItem.objects.create(
            job_card=job_card,
            content_id=f"{job_card.pk}-{production_file.pk}-{int(timezone.now().timestamp() * 1000)}",
            name=os.path.splitext(production_file.original_name)[0],
            category=production_file.service_category,
            media_type='final',
            status='ready_for_qc',
            file=production_file,
            file_key=production_file.file_path,
            thumb_key=production_file.thumbnail_path,
            file_size=production_file.file_size,
            uploader_role=user.role,
        )
        if job_card.status != 'ready_for_qa':
            job_card.status = 'ready_for_qa'
            job_card.ready_for_qc_at = timezone.now()
            job_card.completed_at = job_card.completed_at or timezone.now()
            job_card.save()
            log_activity(job_card, user, 'status_change', 'Job status updated to Ready for QC')

    log_activity(
        job_card, user, 'upload',
        f"{user.display_name} uploaded {production_file.media_type.upper()} file: "
        f"{production_file.original_name} to {job_card.property_address or 'job'}",
        {
            'file_name': production_file.original_name,
            'file_size': production_file.file_size,
            'content_type': production_file.mime_type,
            'media_type': production_file.media_type,
            'production_file_id': production_file.id,
        },
    )


def validate_upload(content_type, size):
    if not storage.is_allowed_content_type(content_type):
        raise ServiceError(f'File type {content_type or "unknown"} is not allowed')
    if size > storage.MAX_UPLOAD_SIZE:
        raise ServiceError(f'File exceeds the {storage.MAX_UPLOAD_SIZE // (1024 * 1024)}MB limit')


@transaction.atomic
def upload_files(job_card, user, files, media_type='raw', service_category='photography',
                 instructions=None, export_type=None, custom_description=None):
    """Store multipart uploads against a job card"""
    if user.is_editor:
        ensure_can_work_on(job_card, user)
    for uploaded in files:
        validate_upload(uploaded.content_type, uploaded.size)

    assign_job_id(job_card)
    saved = []
    for uploaded in files:
        key = storage.save_object(
            storage.build_object_key(job_card.pk, media_type, uploaded.name), uploaded
        )
        thumbnail_key = None
        if uploaded.content_type.startswith('image/'):
            uploaded.seek(0)
            thumbnail_key = storage.store_thumbnail(job_card.pk, media_type, uploaded.name, uploaded.read())
        production_file = _record_file(
            job_card, user, key, uploaded.name, uploaded.content_type, uploaded.size,
            media_type, service_category, thumbnail_key, instructions, export_type, custom_description,
        )
        _after_upload(job_card, user, production_file)
        saved.append(production_file)
    return saved


def prepare_upload(job_card, user, file_name, content_type, file_size, media_type='raw'):
    """Reserve a storage key and a signed URL the client can PUT the bytes to"""
    if user.is_editor:
        ensure_can_work_on(job_card, user)
    validate_upload(content_type, file_size or 0)
    key = storage.build_object_key(job_card.pk, media_type, file_name)
    token = storage.make_upload_token(job_card.pk, key, content_type, user.id)
    return key, token


@transaction.atomic
def register_uploaded_object(job_card, user, key, file_name, content_type, file_size,
                             media_type='final', service_category='photography'):
    """Record a file that was PUT through a signed upload URL"""
    if not key.startswith(f'job-{job_card.pk}/'):
        raise ServiceError('Storage key does not belong to this job')
    if not storage.object_exists(key):
        raise ServiceError('Uploaded object not found')

    assign_job_id(job_card)
    thumbnail_key = None
    if content_type.startswith('image/'):
        thumbnail_key = storage.store_thumbnail(job_card.pk, media_type, file_name, storage.read_object(key))
    production_file = _record_file(
        job_card, user, key, file_name, content_type, file_size, media_type, service_category, thumbnail_key,
    )
    _after_upload(job_card, user, production_file)
    return production_file


def delete_production_file(production_file, user):
    job_card = production_file.job_card
    if user.is_editor:
        ensure_can_work_on(job_card, user)
    storage.delete_object(production_file.file_path)
    storage.delete_object(production_file.thumbnail_path)
    log_activity(
        job_card, user, 'file_deleted',
        f"Deleted file: {production_file.original_name}",
        {'file_name': production_file.original_name, 'media_type': production_file.media_type},
    )
    production_file.delete()


def build_raw_files_zip(job_card, user=None):
    """Zip all active raw files of a job card in memory"""
    raw_files = list(job_card.files.filter(media_type='raw', is_active=True).order_by('uploaded_at'))
    if not raw_files:
        raise ServiceError('No raw files to download')

    buffer = io.BytesIO()
    used_names = set()
    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as archive:
        for production_file in raw_files:
            name = production_file.original_name
            if name in used_names:
                name = f"{production_file.id}_{name}"
            used_names.add(name)
            try:
                archive.writestr(name, storage.read_object(production_file.file_path))
            except OSError as e:
                logger.warning(f"Skipping missing raw file {production_file.file_path}: {e}")
    buffer.seek(0)
    log_activity(
        job_card, user, 'download',
        f"Downloaded {len(raw_files)} raw file(s) as zip",
        {'file_count': len(raw_files)},
    )
    return buffer


# ==================== DELIVERY EMAIL ====================

def delivery_link(job_card):
    from studio.delivery.models import DeliverySettings
    delivery_settings = DeliverySettings.objects.filter(job_card=job_card).first()
    if delivery_settings and delivery_settings.delivery_url:
        return f"{FRONTEND_URL.rstrip('/')}/delivery/{delivery_settings.delivery_url}"
    return f"{FRONTEND_URL.rstrip('/')}/delivery/{job_card.pk}"


def send_delivery_email(job_card, user):
    """Email the client their delivery link and log the attempt"""
    client = job_card.client
    subject = f"Your media for {job_card.property_address} is ready"
    message = (
        f"Hi {client.contact_name or client.name},\n\n"
        f"The media for {job_card.property_address} (job {job_label(job_card)}) is ready.\n"
        f"View and download it here: {delivery_link(job_card)}\n"
    )
    try:
        send_mail(subject, message, None, [client.email], fail_silently=False)
        email_status, error_message = 'sent', None
    except Exception as e:
        logger.error(f"Failed to send delivery email for job card {job_card.pk}: {e}")
        email_status, error_message = 'failed', str(e)

    email_log = EmailDeliveryLog.objects.create(
        job_card=job_card,
        recipient_email=client.email,
        subject=subject,
        message=message,
        status=email_status,
        error_message=error_message,
        sent_by=user,
    )
    log_activity(
        job_card, user, 'delivery_email',
        f"Delivery email {email_status} to {client.email}",
        {'email_log_id': email_log.id},
    )
    if email_status == 'failed':
        raise ExternalServiceError('Failed to send delivery email')
    return email_log
