import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .models import BusinessSettings, CalendarEvent, default_business_hours

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    'minimum_notice_hours': 24,
    'buffer_time_between_jobs': 30,
    'default_job_duration': 120,
    'timezone': 'America/New_York',
}


def get_business_settings(licensee_id):
    """Stored settings, or an unsaved instance carrying the defaults"""
    business_settings = BusinessSettings.objects.filter(licensee_id=licensee_id).first()
    if business_settings is None:
        business_settings = BusinessSettings(
            licensee_id=licensee_id, business_hours=default_business_hours(), **DEFAULT_SETTINGS
        )
    return business_settings


def booking_window(booking, business_settings=None):
    """Start and end of a booking's shoot in the licensee's timezone"""
    business_settings = business_settings or get_business_settings(booking.licensee_id)
    try:
        tz = ZoneInfo(business_settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {business_settings.timezone!r}, falling back to UTC")
        tz = ZoneInfo('UTC')
    hour, minute = (int(part) for part in booking.scheduled_time.split(':'))
    scheduled_date = booking.scheduled_date
    if isinstance(scheduled_date, str):
        scheduled_date = datetime.strptime(scheduled_date, '%Y-%m-%d').date()
    start = datetime(scheduled_date.year, scheduled_date.month, scheduled_date.day, hour, minute, tzinfo=tz)
    return start, start + timedelta(minutes=business_settings.default_job_duration)


def sync_booking_event(booking, user=None):
    """
    Keep a booking's `job` calendar event in line with the booking.

    Bookings without a photographer, or cancelled ones, have no event.
    """
    event = CalendarEvent.objects.filter(booking=booking, type='job').first()
    if booking.photographer_id is None or booking.status == 'cancelled':
        if event:
            event.delete()
        return None

    start, end = booking_window(booking)
    title = f"{booking.client.name} - {booking.property_address}"
    if event is None:
        event = CalendarEvent(
            licensee_id=booking.licensee_id,
            booking=booking,
            type='job',
            created_by=user if user and user.is_authenticated else None,
        )
    event.photographer_id = booking.photographer_id
    event.title = title[:255]
    event.description = booking.notes or booking.property_address
    event.start = start
    event.end = end
    event.save()
    return event
