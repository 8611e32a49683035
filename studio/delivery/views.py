import logging

from rest_framework import status
from rest_framework.decorators import (
    api_view, authentication_classes, parser_classes, permission_classes, throttle_classes,
)
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from django.db import transaction
from django.shortcuts import get_object_or_404

from studio.core.permissions import IsProductionStaff
from studio.core.utils import create_audit_log
from studio.production.models import JobCard
from studio.production.views import get_job_card
from . import services
from .models import DeliverySettings, DeliveryComment
from .serializers import DeliverySettingsSerializer, DeliveryCommentSerializer, DownloadTrackingSerializer

logger = logging.getLogger(__name__)


def public_job_card(pk):
    return get_object_or_404(JobCard.objects.select_related('client', 'booking'), pk=pk)


# ==================== PUBLIC DELIVERY PAGE ====================

@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([AnonRateThrottle])
def delivery_page(request, job_card_id):
    """Client-facing delivery page for a job"""
    job_card = public_job_card(job_card_id)
    services.track(job_card, request, 'page_view')
    return Response(services.build_delivery_page(job_card, request))


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([AnonRateThrottle])
def delivery_page_by_url(request, slug):
    delivery_settings = get_object_or_404(DeliverySettings.objects.select_related('job_card'), delivery_url=slug)
    job_card = public_job_card(delivery_settings.job_card_id)
    services.track(job_card, request, 'page_view')
    return Response(services.build_delivery_page(job_card, request))


@api_view(['GET', 'POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([AnonRateThrottle])
def delivery_comments(request, job_card_id):
    """Read or leave comments on the delivery page"""
    job_card = public_job_card(job_card_id)
    delivery_settings = services.settings_for(job_card)

    if request.method == 'GET':
        comments = DeliveryComment.objects.filter(job_card=job_card)
        return Response(DeliveryCommentSerializer(comments, many=True).data)

    if not delivery_settings.enable_comments:
        return Response({'message': 'Comments are disabled for this delivery'}, status=status.HTTP_403_FORBIDDEN)
    serializer = DeliveryCommentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    comment = serializer.save(job_card=job_card)
    services.record_comment(job_card, comment)
    return Response(DeliveryCommentSerializer(comment).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([AnonRateThrottle])
def delivery_download(request, job_card_id):
    """Track a single-file or bulk download"""
    job_card = public_job_card(job_card_id)
    if not services.settings_for(job_card).enable_downloads:
        return Response({'message': 'Downloads are disabled for this delivery'}, status=status.HTTP_403_FORBIDDEN)

    serializer = DownloadTrackingSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    file_name = serializer.validated_data.get('file_name') or None
    services.track(
        job_card, request,
        'file_download' if file_name else 'bulk_download',
        file_name=file_name,
        file_type=serializer.validated_data.get('file_type') or 'unknown',
    )
    return Response({'message': 'Download tracked successfully'})


# ==================== SETTINGS (STAFF) ====================

@api_view(['GET', 'POST', 'PUT'])
@permission_classes([IsAuthenticated, IsProductionStaff])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def delivery_settings_view(request, pk):
    """Delivery page settings for a job"""
    job_card = get_job_card(request, pk)
    instance = DeliverySettings.objects.filter(job_card=job_card).first()

    if request.method == 'GET':
        if instance is None:
            return Response(DeliverySettingsSerializer(services.settings_for(job_card)).data)
        return Response(DeliverySettingsSerializer(instance).data)

    if request.method == 'POST' and instance is not None:
        return Response({'message': 'Delivery settings already exist for this job'}, status=status.HTTP_400_BAD_REQUEST)
    if request.method == 'PUT' and instance is None:
        return Response({'message': 'Delivery settings not found'}, status=status.HTTP_404_NOT_FOUND)

    serializer = DeliverySettingsSerializer(instance, data=request.data, partial=instance is not None)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    delivery_url = serializer.validated_data.get('delivery_url')
    header_image_file = serializer.validated_data.pop('header_image_file', None)
    with transaction.atomic():
        if instance is None:
            delivery_settings = serializer.save(
                job_card=job_card, delivery_url=delivery_url or services.default_delivery_url(job_card)
            )
        else:
            delivery_settings = serializer.save()
        if header_image_file is not None:
            services.save_header_image(delivery_settings, header_image_file)
            delivery_settings.save(update_fields=['header_image', 'updated_at'])

    create_audit_log(
        request=request, action='create' if instance is None else 'update', model_name='DeliverySettings',
        object_id=delivery_settings.id, object_name=delivery_settings.delivery_url,
        object_reference=job_card.job_id
    )
    response_status = status.HTTP_201_CREATED if instance is None else status.HTTP_200_OK
    return Response(DeliverySettingsSerializer(delivery_settings).data, status=response_status)
