import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from studio.core.permissions import IsProductionStaff
from studio.core.utils import create_audit_log, scope_to_licensee, parse_query_date, parse_query_id
from studio.production.services import create_job_card_for_booking, sync_job_card_with_booking
from studio.scheduling.services import sync_booking_event
from .models import Booking
from .serializers import BookingSerializer

logger = logging.getLogger(__name__)


def bookings_for(user):
    queryset = scope_to_licensee(Booking.objects.select_related('client', 'photographer', 'job_card'), user)
    if user.role == 'photographer':
        queryset = queryset.filter(photographer=user)
    return queryset


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def booking_list_create(request):
    """List bookings or create a booking together with its job card"""
    if request.method == 'GET':
        queryset = bookings_for(request.user)

        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status__in=status_filter.split(','))
        photographer = request.query_params.get('photographer')
        if photographer:
            queryset = queryset.filter(photographer_id=parse_query_id(photographer, 'photographer'))
        client = request.query_params.get('client')
        if client:
            queryset = queryset.filter(client_id=parse_query_id(client, 'client'))
        date_from = request.query_params.get('date_from')
        date_to = request.query_params.get('date_to')
        if date_from:
            queryset = queryset.filter(scheduled_date__gte=parse_query_date(date_from, 'date_from'))
        if date_to:
            queryset = queryset.filter(scheduled_date__lte=parse_query_date(date_to, 'date_to'))
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(property_address__icontains=search) |
                Q(client__name__icontains=search) |
                Q(notes__icontains=search)
            )

        serializer = BookingSerializer(queryset.order_by('-scheduled_date', '-scheduled_time'), many=True)
        return Response(serializer.data)

    serializer = BookingSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    with transaction.atomic():
        booking = serializer.save(licensee_id=request.user.get_licensee_id())
        create_job_card_for_booking(booking)
        sync_booking_event(booking, request.user)
    logger.info(f"Booking {booking.id} created for client {booking.client_id}")
    create_audit_log(
        request=request, action='create', model_name='Booking',
        object_id=booking.id, object_name=booking.property_address,
        changes={'services': booking.services, 'price': str(booking.price)}
    )
    booking.refresh_from_db()
    return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def booking_detail(request, pk):
    """Retrieve, update or delete a booking"""
    booking = get_object_or_404(bookings_for(request.user), pk=pk)

    if request.method == 'GET':
        return Response(BookingSerializer(booking).data)
    elif request.method in ('PUT', 'PATCH'):
        previous_status = booking.status
        serializer = BookingSerializer(
            booking, data=request.data, partial=request.method == 'PATCH', context={'request': request}
        )
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        with transaction.atomic():
            booking = serializer.save()
            sync_job_card_with_booking(booking)
            sync_booking_event(booking, request.user)
        create_audit_log(
            request=request,
            action='status_change' if booking.status != previous_status else 'update',
            model_name='Booking', object_id=booking.id, object_name=booking.property_address,
            changes={field: str(value) for field, value in serializer.validated_data.items()}
        )
        return Response(BookingSerializer(booking).data)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='Booking',
            object_id=booking.id, object_name=booking.property_address
        )
        booking.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
