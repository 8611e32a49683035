import logging
import tempfile

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.conf import settings
from django.core import signing
from django.core.cache import cache
from django.core.files import File
from django.http import FileResponse, Http404
from django.shortcuts import get_object_or_404
from django.utils import timezone
from studio.core.model_cache import (
    get_job_card_list_cache_key, get_cached_job_card, cache_job_card_data, JOB_CARD_LIST_CACHE_TTL
)
from studio.core.permissions import IsAdminOrVA, IsEditor
from studio.core.utils import scope_to_licensee
from .job_ids import assign_job_id
from .models import JobCard, ProductionFile, ContentItem, ProductionNotification
from .serializers import (
    JobCardSerializer, JobCardDetailSerializer, JobCardUpdateSerializer, StatusChangeSerializer,
    QuickStatusSerializer, ActionSerializer, SubmitToEditorSerializer, RevisionReplySerializer,
    ProductionFileSerializer, ContentItemSerializer, JobActivityLogSerializer,
    OrderStatusAuditSerializer, ProductionNotificationSerializer, EmailDeliveryLogSerializer,
    FileUploadSerializer, UploadUrlSerializer, FileMetadataSerializer,
)
from .status import HISTORY_ACTIONS, ACTION_ACCEPT, ACTION_READY_FOR_QC, ACTION_REVISION, ACTION_DELIVERED
from . import services, storage

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_SIZE = 1024 * 1024
MAX_FILES_PER_UPLOAD = getattr(settings, 'PRODUCTION_MAX_FILES_PER_UPLOAD', 10)


def job_cards_for(user):
    """Job cards visible to a user; editors only see their own"""
    queryset = scope_to_licensee(
        JobCard.objects.select_related('booking', 'client', 'photographer', 'editor'), user
    )
    if user.is_editor:
        queryset = queryset.filter(editor=user)
    return queryset


def get_job_card(request, pk):
    return get_object_or_404(job_cards_for(request.user), pk=pk)


def _detail(job_card, request):
    job_card = JobCard.objects.select_related('booking', 'client', 'photographer', 'editor').prefetch_related(
        'files', 'content_items'
    ).get(pk=job_card.pk)
    return JobCardDetailSerializer(job_card, context={'request': request}).data


# ==================== JOB CARDS ====================

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def job_card_list(request):
    """List job cards, optionally filtered by status or editor"""
    status_filter = request.query_params.get('status')
    editor_filter = request.query_params.get('editor_id') or request.query_params.get('editor')
    include_details = request.query_params.get('include_details', '').lower() in ('1', 'true', 'yes')

    use_cache = not include_details and not request.user.is_editor
    if use_cache:
        cache_key = get_job_card_list_cache_key(
            request.user.get_licensee_id(), f"{status_filter or ''}|{editor_filter or ''}"
        )
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            return Response(cached_data)

    queryset = job_cards_for(request.user).order_by('-created_at')
    if status_filter:
        queryset = queryset.filter(status__in=status_filter.split(','))
    if editor_filter:
        queryset = queryset.filter(editor_id=editor_filter)

    if include_details:
        queryset = queryset.prefetch_related('files', 'content_items')
        return Response(JobCardDetailSerializer(queryset, many=True, context={'request': request}).data)

    response_data = JobCardSerializer(queryset, many=True).data
    if use_cache:
        cache.set(cache_key, response_data, JOB_CARD_LIST_CACHE_TTL)
    return Response(response_data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsEditor])
def editor_job_card_list(request):
    """Job cards assigned to the current editor"""
    queryset = job_cards_for(request.user).prefetch_related('files', 'content_items').order_by('-assigned_at', '-created_at')
    status_filter = request.query_params.get('status')
    if status_filter:
        queryset = queryset.filter(status__in=status_filter.split(','))
    return Response(JobCardDetailSerializer(queryset, many=True, context={'request': request}).data)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def job_card_detail(request, pk):
    """Retrieve or update a job card"""
    job_card = get_job_card(request, pk)

    if request.method == 'GET':
        # Available actions depend on the caller, so only the role-neutral part is shared
        cached_data = get_cached_job_card(pk)
        if cached_data is None:
            cached_data = _detail(job_card, request)
            cache_job_card_data(job_card.id, cached_data)
        response_data = dict(cached_data)
        response_data['available_actions'] = JobCardDetailSerializer(
            job_card, context={'request': request}
        ).get_available_actions(job_card)
        return Response(response_data)

    serializer = JobCardUpdateSerializer(
        job_card, data=request.data, partial=True, context={'request': request}
    )
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    services.update_job_card(job_card, request.user, dict(serializer.validated_data))
    return Response(_detail(job_card, request))


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminOrVA])
def job_card_status(request, pk):
    """Set a job card status with a reason for the audit trail"""
    job_card = get_job_card(request, pk)
    serializer = StatusChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    services.change_status(
        job_card, serializer.validated_data['status'], request.user,
        reason=serializer.validated_data.get('reason'),
        changed_by=serializer.validated_data.get('changed_by'),
    )
    return Response(JobCardSerializer(job_card).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def job_card_action(request, pk, action):
    """Apply a lifecycle action (upload, accept, readyForQC, revision, delivered)"""
    if action not in HISTORY_ACTIONS:
        return Response({'message': f'Unknown action: {action}'}, status=status.HTTP_400_BAD_REQUEST)
    return _run_action(request, pk, action)


def _run_action(request, pk, action):
    job_card = get_job_card(request, pk)
    serializer = ActionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.perform_action(job_card, action, request.user, serializer.validated_data.get('notes'))
    return Response(_detail(job_card, request))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def job_card_accept(request, pk):
    return _run_action(request, pk, ACTION_ACCEPT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def job_card_mark_ready_qc(request, pk):
    return _run_action(request, pk, ACTION_READY_FOR_QC)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminOrVA])
def job_card_request_revision(request, pk):
    return _run_action(request, pk, ACTION_REVISION)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminOrVA])
def job_card_deliver(request, pk):
    return _run_action(request, pk, ACTION_DELIVERED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def submit_to_editor(request, pk):
    """Assign an editor with service blocks and instructions"""
    job_card = get_job_card(request, pk)
    serializer = SubmitToEditorSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    services.submit_to_editor(job_card, request.user, data['editor'], data['service_blocks'], data.get('instructions'))
    return Response(_detail(job_card, request))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsEditor])
def complete_with_content(request, pk):
    """Editor marks their work complete"""
    job_card = get_job_card(request, pk)
    serializer = ActionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.complete_with_content(job_card, request.user, serializer.validated_data.get('notes'))
    return Response(_detail(job_card, request))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsEditor])
def revision_reply(request, pk):
    job_card = get_job_card(request, pk)
    serializer = RevisionReplySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    services.revision_reply(job_card, request.user, serializer.validated_data['reply'], serializer.validated_data['status'])
    return Response(_detail(job_card, request))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def assign_job_id_view(request, pk):
    """Assign a job ID if the card has none; idempotent"""
    job_card = get_job_card(request, pk)
    job_id = assign_job_id(job_card)
    return Response({'job_id': job_id, 'job_card_id': job_card.id})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def job_card_activity(request, pk):
    """Job timeline; POST adds a manual entry"""
    job_card = get_job_card(request, pk)
    if request.method == 'GET':
        logs = job_card.activity_logs.select_related('user').order_by('-created_at')
        return Response(JobActivityLogSerializer(logs, many=True).data)
    serializer = JobActivityLogSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(job_card=job_card, user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrVA])
def job_card_audit_log(request, pk):
    job_card = get_job_card(request, pk)
    audits = job_card.status_audits.select_related('changed_by').order_by('-changed_at')
    return Response(OrderStatusAuditSerializer(audits, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminOrVA])
def send_delivery_email(request, pk):
    """Email the client a link to their delivery page"""
    job_card = get_job_card(request, pk)
    email_log = services.send_delivery_email(job_card, request.user)
    return Response(EmailDeliveryLogSerializer(email_log).data)


# ==================== FILES ====================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def job_card_files(request, pk):
    """List production files or upload up to ten at once"""
    job_card = get_job_card(request, pk)

    if request.method == 'GET':
        files = job_card.files.filter(is_active=True).select_related('uploaded_by')
        media_type = request.query_params.get('media_type')
        service_category = request.query_params.get('service_category')
        if media_type:
            files = files.filter(media_type=media_type)
        if service_category:
            files = files.filter(service_category=service_category)
        return Response(ProductionFileSerializer(files, many=True, context={'request': request}).data)

    payload = {key: request.data.get(key) for key in (
        'media_type', 'service_category', 'instructions', 'export_type', 'custom_description'
    ) if request.data.get(key) is not None}
    payload['files'] = request.FILES.getlist('files') or request.FILES.getlist('file')
    serializer = FileUploadSerializer(data=payload, context={'max_files': MAX_FILES_PER_UPLOAD})
    if not serializer.is_valid():
        if not payload['files']:
            return Response({'message': 'No files uploaded'}, status=status.HTTP_400_BAD_REQUEST)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    saved = services.upload_files(
        job_card, request.user, data['files'],
        media_type=data['media_type'],
        service_category=data['service_category'],
        instructions=data.get('instructions'),
        export_type=data.get('export_type'),
        custom_description=data.get('custom_description'),
    )
    return Response(
        ProductionFileSerializer(saved, many=True, context={'request': request}).data,
        status=status.HTTP_201_CREATED
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def job_card_upload_url(request, pk):
    """Signed URL the client can PUT a single file to"""
    job_card = get_job_card(request, pk)
    serializer = UploadUrlSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    key, token = services.prepare_upload(
        job_card, request.user, data['file_name'], data['content_type'], data['file_size'], data['media_type']
    )
    return Response({
        'upload_url': storage.signed_upload_url(request, token),
        'key': key,
        'expires_in': storage.UPLOAD_URL_MAX_AGE,
    })


@api_view(['PUT'])
@permission_classes([AllowAny])
def signed_upload(request, token):
    """Receive the raw bytes for a signed upload URL"""
    try:
        payload = storage.read_upload_token(token)
    except signing.SignatureExpired:
        return Response({'message': 'Upload URL has expired'}, status=status.HTTP_403_FORBIDDEN)
    except signing.BadSignature:
        return Response({'message': 'Invalid upload URL'}, status=status.HTTP_403_FORBIDDEN)

    signed_type = (payload.get('content_type') or '').split(';')[0].strip().lower()
    sent_type = (request.content_type or '').split(';')[0].strip().lower()
    if sent_type != signed_type:
        return Response(
            {'message': f'Content-Type must be {signed_type} for this upload URL'},
            status=status.HTTP_403_FORBIDDEN
        )
    # Each upload URL is good for a single object
    if storage.object_exists(payload['key']):
        return Response({'message': 'Upload URL has already been used'}, status=status.HTTP_409_CONFLICT)

    stream = request.stream
    if stream is None:
        return Response({'message': 'Empty upload'}, status=status.HTTP_400_BAD_REQUEST)

    received = 0
    with tempfile.SpooledTemporaryFile(max_size=UPLOAD_CHUNK_SIZE * 8) as spool:
        while True:
            chunk = stream.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                break
            received += len(chunk)
            if received > storage.MAX_UPLOAD_SIZE:
                return Response({'message': 'File too large'}, status=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)
            spool.write(chunk)
        spool.seek(0)
        key = storage.save_object(payload['key'], File(spool))

    logger.info(f"Signed upload stored {key} ({received} bytes) for job card {payload['job_card']}")
    return Response({'key': key, 'size': received})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def job_card_file_metadata(request, pk):
    """Register a file uploaded through a signed URL and process it"""
    job_card = get_job_card(request, pk)
    serializer = FileMetadataSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    production_file = services.register_uploaded_object(
        job_card, request.user, data['key'], data['file_name'], data['content_type'],
        data['file_size'], data['media_type'], data['category'],
    )
    return Response({
        'success': True,
        'file': ProductionFileSerializer(production_file, context={'request': request}).data,
        'message': f"File {production_file.original_name} uploaded and processed successfully",
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def download_raw_files(request, pk):
    """All raw files of a job card as one zip"""
    job_card = get_job_card(request, pk)
    archive = services.build_raw_files_zip(job_card, request.user)
    return FileResponse(
        archive, as_attachment=True,
        filename=f"job-{job_card.job_id or job_card.pk}-raw-files.zip",
        content_type='application/zip',
    )


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def production_file_delete(request, pk):
    production_file = get_object_or_404(
        ProductionFile.objects.select_related('job_card'),
        pk=pk, job_card__in=job_cards_for(request.user)
    )
    services.delete_production_file(production_file, request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def signed_file_download(request, token):
    """Serve a stored object for a valid download token"""
    try:
        payload = storage.read_download_token(token)
    except signing.SignatureExpired:
        return Response({'message': 'Download link has expired'}, status=status.HTTP_403_FORBIDDEN)
    except signing.BadSignature:
        return Response({'message': 'Invalid download link'}, status=status.HTTP_403_FORBIDDEN)

    key = payload['key']
    if not storage.object_exists(key):
        raise Http404('File not found')
    file_name = payload.get('name')
    return FileResponse(storage.open_object(key), as_attachment=bool(file_name), filename=file_name or '')


# ==================== CONTENT ITEMS ====================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def job_card_content_items(request, pk):
    job_card = get_job_card(request, pk)

    if request.method == 'GET':
        items = job_card.content_items.all()
        category = request.query_params.get('category')
        if category:
            items = items.filter(category=category)
        return Response(ContentItemSerializer(items, many=True, context={'request': request}).data)

    serializer = ContentItemSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    production_file = serializer.validated_data.get('file')
    if production_file and production_file.job_card_id != job_card.id:
        return Response({'file': ['File does not belong to this job']}, status=status.HTTP_400_BAD_REQUEST)
    item = serializer.save(
        job_card=job_card,
        content_id=f"{job_card.pk}-{int(timezone.now().timestamp() * 1000)}",
        uploader_role=request.user.role,
        file_key=production_file.file_path if production_file else None,
        thumb_key=production_file.thumbnail_path if production_file else None,
    )
    services.log_activity(job_card, request.user, 'content_added', f"Added content item: {item.name}")
    return Response(ContentItemSerializer(item, context={'request': request}).data, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def content_item_detail(request, pk):
    item = get_object_or_404(
        ContentItem.objects.select_related('job_card'), pk=pk, job_card__in=job_cards_for(request.user)
    )
    if request.method == 'DELETE':
        services.log_activity(item.job_card, request.user, 'content_removed', f"Removed content item: {item.name}")
        item.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ContentItemSerializer(item, data=request.data, partial=True, context={'request': request})
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# ==================== JOBS (status panel view) ====================

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def job_list(request):
    """Job cards with their booking fields, paged by limit/offset"""
    queryset = job_cards_for(request.user).order_by('-created_at')
    status_filter = request.query_params.get('status')
    client_filter = request.query_params.get('client_id')
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    if client_filter:
        queryset = queryset.filter(client_id=client_filter)
    try:
        offset = max(int(request.query_params.get('offset', 0)), 0)
        limit = min(max(int(request.query_params.get('limit', 50)), 1), 200)
    except ValueError:
        return Response({'message': 'Invalid query parameters'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(JobCardSerializer(queryset[offset:offset + limit], many=True).data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def job_detail(request, pk):
    """Job detail; PATCH updates status with optional notes"""
    job_card = get_job_card(request, pk)
    if request.method == 'GET':
        return Response(_detail(job_card, request))

    serializer = QuickStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if request.user.is_editor:
        services.ensure_can_work_on(job_card, request.user)
        if serializer.validated_data['status'] not in services.EDITOR_ALLOWED_STATUSES:
            return Response({'message': 'Editors cannot set this status'}, status=status.HTTP_403_FORBIDDEN)
    services.quick_status_update(
        job_card, serializer.validated_data['status'], request.user, serializer.validated_data.get('notes')
    )
    return Response(JobCardSerializer(job_card).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def job_files(request, pk):
    job_card = get_job_card(request, pk)
    files = job_card.files.filter(is_active=True).select_related('uploaded_by')
    return Response(ProductionFileSerializer(files, many=True, context={'request': request}).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def job_activity(request, pk):
    job_card = get_job_card(request, pk)
    logs = job_card.activity_logs.select_related('user').order_by('-created_at')
    return Response(JobActivityLogSerializer(logs, many=True).data)


# ==================== NOTIFICATIONS ====================

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    notifications = ProductionNotification.objects.filter(recipient=request.user).select_related('job_card')
    if request.query_params.get('unread', '').lower() in ('1', 'true', 'yes'):
        notifications = notifications.filter(is_read=False)
    return Response(ProductionNotificationSerializer(notifications.order_by('-created_at')[:100], many=True).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def notification_read(request, pk):
    notification = get_object_or_404(ProductionNotification, pk=pk, recipient=request.user)
    notification.is_read = True
    notification.save(update_fields=['is_read'])
    return Response(ProductionNotificationSerializer(notification).data)
