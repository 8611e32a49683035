"""
Google Calendar integration over OAuth2 and the Calendar v3 API client.

Only inbound sync is performed: events on the connected calendar are
imported as ``external`` calendar events for the user.
"""
import os
import logging
from datetime import timedelta, timezone as dt_timezone

import requests
from django.conf import settings
from django.core import signing
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from studio.core.exceptions import ExternalServiceError, ServiceError
from .models import CalendarEvent, CalendarSyncLog, EVENT_TYPE_COLORS, GoogleCalendarIntegration

logger = logging.getLogger(__name__)

GOOGLE_CLIENT_ID = getattr(settings, 'GOOGLE_CLIENT_ID', os.getenv('GOOGLE_CLIENT_ID', ''))
GOOGLE_CLIENT_SECRET = getattr(settings, 'GOOGLE_CLIENT_SECRET', os.getenv('GOOGLE_CLIENT_SECRET', ''))
GOOGLE_REDIRECT_URI = getattr(
    settings,
    'GOOGLE_REDIRECT_URI',
    os.getenv('GOOGLE_REDIRECT_URI', 'http://localhost:8000/api/auth/google/callback/')
)

AUTH_URI = 'https://accounts.google.com/o/oauth2/v2/auth'
TOKEN_URI = 'https://oauth2.googleapis.com/token'
SCOPES = [
    'https://www.googleapis.com/auth/calendar',
    'https://www.googleapis.com/auth/calendar.events',
]
STATE_SALT = 'studio.scheduling.google'
STATE_MAX_AGE = 600
SYNC_WINDOW_DAYS = 30


def build_flow():
    client_config = {
        'web': {
            'client_id': GOOGLE_CLIENT_ID,
            'client_secret': GOOGLE_CLIENT_SECRET,
            'auth_uri': AUTH_URI,
            'token_uri': TOKEN_URI,
            'redirect_uris': [GOOGLE_REDIRECT_URI],
        }
    }
    # Consent and code exchange happen in separate requests, so no PKCE verifier
    return Flow.from_client_config(
        client_config,
        scopes=SCOPES,
        redirect_uri=GOOGLE_REDIRECT_URI,
        autogenerate_code_verifier=False,
    )


def build_auth_url(user):
    """Consent URL; the user id travels in a signed state parameter"""
    if not GOOGLE_CLIENT_ID:
        raise ServiceError('Google Calendar is not configured')
    auth_url, _ = build_flow().authorization_url(
        access_type='offline',
        prompt='consent',
        state=signing.dumps({'user_id': user.id}, salt=STATE_SALT),
    )
    return auth_url


def read_state(state):
    """Return the user id from a state parameter, or None if it is invalid or expired"""
    try:
        return signing.loads(state, salt=STATE_SALT, max_age=STATE_MAX_AGE)['user_id']
    except (signing.BadSignature, KeyError, TypeError):
        return None


def aware_expiry(credentials):
    if credentials.expiry is None:
        return timezone.now() + timedelta(hours=1)
    return credentials.expiry.replace(tzinfo=dt_timezone.utc)


def exchange_code(code):
    """Trade an authorization code for access and refresh tokens"""
    flow = build_flow()
    try:
        flow.fetch_token(code=code)
    except (OAuth2Error, requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Google token exchange failed: {e}")
        raise ExternalServiceError('Failed to authorize Google Calendar access')
    credentials = flow.credentials
    if not credentials.token:
        raise ExternalServiceError('Failed to authorize Google Calendar access')
    return {
        'access_token': credentials.token,
        'refresh_token': credentials.refresh_token or '',
        'token_expiry': aware_expiry(credentials),
    }


def connect(user, code):
    tokens = exchange_code(code)
    integration, _ = GoogleCalendarIntegration.objects.update_or_create(
        user=user,
        defaults={
            'google_calendar_id': 'primary',
            'access_token': tokens['access_token'],
            'refresh_token': tokens['refresh_token'],
            'token_expiry': tokens['token_expiry'],
            'is_active': True,
            'sync_direction': 'both',
        },
    )
    logger.info(f"Google Calendar connected for user {user.id}")
    return integration


def credentials_for(integration):
    """
    Stored tokens as google-auth credentials.

    The API client refreshes them before a request once the access token
    has expired; google-auth compares naive UTC expiry times.
    """
    expiry = integration.token_expiry
    if expiry is not None and timezone.is_aware(expiry):
        expiry = timezone.make_naive(expiry, dt_timezone.utc)
    return Credentials(
        integration.access_token,
        refresh_token=integration.refresh_token or None,
        token_uri=TOKEN_URI,
        client_id=GOOGLE_CLIENT_ID,
        client_secret=GOOGLE_CLIENT_SECRET,
        scopes=SCOPES,
        expiry=expiry,
    )


def store_refreshed_token(integration, credentials):
    if not credentials.token or credentials.token == integration.access_token:
        return
    integration.access_token = credentials.token
    integration.token_expiry = aware_expiry(credentials)
    integration.save(update_fields=['access_token', 'token_expiry', 'updated_at'])
    logger.info(f"Refreshed Google Calendar token for integration {integration.id}")


def fetch_events(integration, time_min=None, time_max=None):
    time_min = time_min or timezone.now()
    time_max = time_max or time_min + timedelta(days=SYNC_WINDOW_DAYS)
    credentials = credentials_for(integration)
    try:
        service = build('calendar', 'v3', credentials=credentials, cache_discovery=False)
        result = service.events().list(
            calendarId=integration.google_calendar_id,
            timeMin=time_min.isoformat(),
            timeMax=time_max.isoformat(),
            singleEvents=True,
            orderBy='startTime',
        ).execute()
    except GoogleAuthError as e:
        logger.error(f"Google Calendar token refresh failed for integration {integration.id}: {e}")
        raise ExternalServiceError('Google Calendar access expired, please reconnect')
    except (HttpError, OSError) as e:
        logger.error(f"Failed to fetch Google Calendar events for integration {integration.id}: {e}")
        raise ExternalServiceError('Failed to fetch Google Calendar events')
    store_refreshed_token(integration, credentials)
    return result.get('items', [])


def sync_inbound_events(integration):
    """
    Import upcoming Google events as ``external`` calendar events.

    All-day events and events already imported are skipped. Returns the
    number of events created.
    """
    try:
        google_events = fetch_events(integration)
    except ExternalServiceError as e:
        CalendarSyncLog.objects.create(
            integration=integration, sync_type='pull', status='error', error_message=str(e.detail)
        )
        raise

    user = integration.user
    created = 0
    for google_event in google_events:
        start = (google_event.get('start') or {}).get('dateTime')
        end = (google_event.get('end') or {}).get('dateTime')
        if not start or not end:
            continue
        if CalendarEvent.objects.filter(external_id=google_event['id'], photographer=user).exists():
            continue
        event = CalendarEvent.objects.create(
            licensee_id=user.get_licensee_id(),
            photographer=user,
            title=(google_event.get('summary') or 'Google Calendar Event')[:255],
            description=google_event.get('description') or '',
            type='external',
            start=parse_datetime(start),
            end=parse_datetime(end),
            color=EVENT_TYPE_COLORS['external'],
            external_id=google_event['id'],
            created_by=user,
        )
        CalendarSyncLog.objects.create(
            integration=integration, event=event, google_event_id=google_event['id'],
            sync_type='pull', status='success'
        )
        created += 1

    integration.last_sync_at = timezone.now()
    integration.save(update_fields=['last_sync_at', 'updated_at'])
    logger.info(f"Imported {created} Google Calendar events for user {user.id}")
    return created
