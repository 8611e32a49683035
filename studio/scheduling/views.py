import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.http import HttpResponseRedirect
from django.shortcuts import get_object_or_404

from studio.core.exceptions import ServiceError
from studio.core.permissions import IsProductionStaff
from studio.core.utils import scope_to_licensee, parse_query_datetime, parse_query_id
from . import google_calendar
from .models import CalendarEvent, BusinessSettings, GoogleCalendarIntegration
from .serializers import CalendarEventSerializer, BusinessSettingsSerializer, GoogleCalendarStatusSerializer
from .services import get_business_settings

logger = logging.getLogger(__name__)


def events_for(user):
    queryset = scope_to_licensee(CalendarEvent.objects.select_related('photographer'), user)
    if user.role == 'photographer':
        queryset = queryset.filter(Q(photographer=user) | Q(photographer__isnull=True))
    return queryset


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def calendar_event_list_create(request):
    """List events in a window or add one"""
    if request.method == 'GET':
        queryset = events_for(request.user)
        photographer = request.query_params.get('photographer')
        if photographer:
            queryset = queryset.filter(photographer_id=parse_query_id(photographer, 'photographer'))
        # Overlap with the requested window
        start = request.query_params.get('start')
        end = request.query_params.get('end')
        if start:
            queryset = queryset.filter(end__gte=parse_query_datetime(start, 'start'))
        if end:
            queryset = queryset.filter(start__lte=parse_query_datetime(end, 'end'))
        return Response(CalendarEventSerializer(queryset, many=True).data)

    serializer = CalendarEventSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    photographer = serializer.validated_data.get('photographer')
    if request.user.role == 'photographer':
        photographer = request.user
    event = serializer.save(
        licensee_id=request.user.get_licensee_id(), created_by=request.user, photographer=photographer
    )
    return Response(CalendarEventSerializer(event).data, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def calendar_event_detail(request, pk):
    event = get_object_or_404(events_for(request.user), pk=pk)

    if request.method in ('PUT', 'PATCH'):
        serializer = CalendarEventSerializer(
            event, data=request.data, partial=request.method == 'PATCH', context={'request': request}
        )
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        event = serializer.save()
        return Response(CalendarEventSerializer(event).data)
    else:  # DELETE
        event.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def business_settings_view(request):
    """Working hours and scheduling rules; defaults until first saved"""
    licensee_id = request.user.get_licensee_id()
    if request.method == 'GET':
        return Response(BusinessSettingsSerializer(get_business_settings(licensee_id)).data)

    if not request.user.is_admin_or_va:
        return Response({'message': 'Admin or VA access required.'}, status=status.HTTP_403_FORBIDDEN)
    instance = BusinessSettings.objects.filter(licensee_id=licensee_id).first()
    serializer = BusinessSettingsSerializer(instance, data=request.data, partial=instance is not None)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    business_settings = serializer.save(licensee_id=licensee_id)
    logger.info(f"Business settings updated for licensee {licensee_id}")
    return Response(BusinessSettingsSerializer(business_settings).data)


# ==================== GOOGLE CALENDAR ====================

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def google_auth(request):
    """Send the user to Google's consent screen"""
    return HttpResponseRedirect(google_calendar.build_auth_url(request.user))


@api_view(['GET'])
@permission_classes([AllowAny])
def google_auth_callback(request):
    calendar_page = f"{settings.FRONTEND_URL.rstrip('/')}/calendar"
    code = request.query_params.get('code')
    user_id = google_calendar.read_state(request.query_params.get('state', ''))
    if not code or not user_id:
        return Response({'message': 'Missing authorization code or user ID'}, status=status.HTTP_400_BAD_REQUEST)

    user = get_object_or_404(get_user_model(), pk=user_id, is_active=True)
    try:
        google_calendar.connect(user, code)
    except ServiceError as e:
        logger.error(f"Google Calendar callback failed for user {user_id}: {e}")
        return HttpResponseRedirect(f'{calendar_page}?google_error=true')
    return HttpResponseRedirect(f'{calendar_page}?google_connected=true')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def google_calendar_status(request):
    integration = GoogleCalendarIntegration.objects.filter(user=request.user).first()
    if integration is None:
        return Response({'connected': False, 'last_sync': None, 'sync_direction': None})
    return Response(GoogleCalendarStatusSerializer(integration).data)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def google_calendar_disconnect(request):
    GoogleCalendarIntegration.objects.filter(user=request.user).delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def google_calendar_sync(request):
    integration = GoogleCalendarIntegration.objects.filter(user=request.user, is_active=True).first()
    if integration is None:
        return Response({'message': 'Google Calendar not connected'}, status=status.HTTP_404_NOT_FOUND)
    created = google_calendar.sync_inbound_events(integration)
    return Response({'message': 'Sync completed successfully', 'imported': created})
