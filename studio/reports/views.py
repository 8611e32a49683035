import logging
from datetime import datetime, timedelta
from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.cache import cache
from django.db.models import Sum, Count, DecimalField
from django.db.models.functions import TruncMonth
from django.utils import timezone

from studio.bookings.models import Booking
from studio.bookings.serializers import BookingSerializer
from studio.clients.models import Client
from studio.core.model_cache import get_dashboard_cache_key, DASHBOARD_CACHE_TTL
from studio.core.permissions import IsProductionStaff
from studio.core.utils import scope_to_licensee
from studio.production.models import JobCard, JOB_CARD_STATUSES
from studio.production.status import get_status_label

logger = logging.getLogger(__name__)


def _parse_date(value, default):
    if not value:
        return default
    return datetime.strptime(value, '%Y-%m-%d').date()


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def dashboard_stats(request):
    """Headline numbers for the licensee dashboard"""
    user = request.user
    cache_key = get_dashboard_cache_key(user.get_licensee_id())
    cached = cache.get(cache_key)
    if cached is not None:
        return Response(cached)

    now = timezone.now()
    bookings = scope_to_licensee(Booking.objects.all(), user)
    monthly_revenue = bookings.filter(
        status='completed',
        created_at__year=now.year,
        created_at__month=now.month,
    ).aggregate(total=Sum('price', output_field=DecimalField()))['total'] or Decimal('0.00')

    data = {
        'total_clients': scope_to_licensee(Client.objects.all(), user).count(),
        'active_jobs': bookings.filter(status='confirmed').count(),
        'completed_jobs': bookings.filter(status='completed').count(),
        'monthly_revenue': float(monthly_revenue),
    }
    cache.set(cache_key, data, DASHBOARD_CACHE_TTL)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def production_summary(request):
    """Job cards per status"""
    counts = dict(
        scope_to_licensee(JobCard.objects.all(), request.user)
        .order_by()
        .values('status')
        .annotate(count=Count('id'))
        .values_list('status', 'count')
    )
    statuses = [
        {'status': job_status, 'label': get_status_label(job_status), 'count': counts.get(job_status, 0)}
        for job_status in JOB_CARD_STATUSES
    ]
    return Response({
        'total': sum(counts.values()),
        'statuses': statuses,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def revenue_report(request):
    """Completed booking revenue per month"""
    today = timezone.now().date()
    try:
        date_from = _parse_date(request.query_params.get('date_from'), today.replace(day=1) - timedelta(days=365))
        date_to = _parse_date(request.query_params.get('date_to'), today)
    except ValueError:
        return Response({'message': 'Dates must be YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)
    if date_to < date_from:
        return Response({'message': 'date_to cannot be before date_from'}, status=status.HTTP_400_BAD_REQUEST)

    bookings = scope_to_licensee(Booking.objects.all(), request.user).filter(
        status='completed',
        created_at__date__gte=date_from,
        created_at__date__lte=date_to,
    )
    monthly = bookings.annotate(month=TruncMonth('created_at')).values('month').annotate(
        revenue=Sum('price', output_field=DecimalField()),
        booking_count=Count('id'),
    ).order_by('month')
    total = bookings.aggregate(total=Sum('price', output_field=DecimalField()))['total'] or Decimal('0.00')

    return Response({
        'date_from': date_from,
        'date_to': date_to,
        'total_revenue': float(total),
        'monthly_breakdown': [
            {
                'month': row['month'].strftime('%Y-%m'),
                'revenue': float(row['revenue'] or 0),
                'booking_count': row['booking_count'],
            }
            for row in monthly
        ],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def upcoming_jobs(request):
    """Bookings from today onwards that are still going ahead"""
    try:
        days = max(1, min(int(request.query_params.get('days', 14)), 365))
    except ValueError:
        return Response({'message': 'days must be a number'}, status=status.HTTP_400_BAD_REQUEST)
    today = timezone.localdate()
    bookings = scope_to_licensee(
        Booking.objects.select_related('client', 'photographer', 'job_card'), request.user
    ).filter(
        scheduled_date__gte=today,
        scheduled_date__lte=today + timedelta(days=days),
        status__in=['pending', 'confirmed', 'in_progress'],
    ).order_by('scheduled_date', 'scheduled_time')
    if request.user.role == 'photographer':
        bookings = bookings.filter(photographer=request.user)
    return Response(BookingSerializer(bookings, many=True).data)
