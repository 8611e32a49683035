"""
Test suite for the scheduling module
Tests: calendar events, business settings, booking windows and Google Calendar sync
"""
from datetime import date, datetime, timedelta, timezone as dt_timezone
from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlparse

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.errors import HttpError
from oauthlib.oauth2.rfc6749.errors import InvalidGrantError
from django.core import signing
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from . import google_calendar
from .models import BusinessSettings, CalendarEvent, CalendarSyncLog, GoogleCalendarIntegration
from .services import booking_window, get_business_settings


class BookingWindowTests(TestCase):
    """Test shoot times in the business timezone"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()

    def test_defaults_when_not_configured(self):
        business_settings = get_business_settings(self.licensee.id)
        self.assertIsNone(business_settings.pk)
        self.assertEqual(business_settings.default_job_duration, 120)
        self.assertEqual(business_settings.business_hours['mon'], {'start': '08:00', 'end': '18:00'})

    def test_window_uses_settings(self):
        BusinessSettings.objects.create(licensee=self.licensee, timezone='UTC', default_job_duration=90)
        booking = TestDataFactory.create_booking(
            self.licensee, scheduled_date=date(2030, 5, 4), scheduled_time='09:15', with_job_card=False
        )
        start, end = booking_window(booking)
        self.assertEqual(start, datetime(2030, 5, 4, 9, 15, tzinfo=dt_timezone.utc))
        self.assertEqual(end - start, timedelta(minutes=90))

    def test_booking_event_follows_duration(self):
        BusinessSettings.objects.create(licensee=self.licensee, timezone='UTC', default_job_duration=45)
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.licensee)
        data = {
            'client': TestDataFactory.create_client(self.licensee).id,
            'photographer': photographer.id,
            'property_address': '5 Hill Road',
            'scheduled_date': '2030-06-01',
            'scheduled_time': '11:00',
            'services': ['photography'],
            'price': '200.00',
        }
        response = client.post('/api/bookings/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        event = CalendarEvent.objects.get(booking_id=response.data['id'])
        self.assertEqual(event.end - event.start, timedelta(minutes=45))


class CalendarEventAPITests(TestCase):
    """Test calendar event endpoints"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.other_photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        self.start = timezone.now().replace(microsecond=0) + timedelta(days=1)

    def event_data(self, **overrides):
        data = {
            'title': 'Dentist',
            'type': 'unavailable',
            'start': self.start.isoformat(),
            'end': (self.start + timedelta(hours=2)).isoformat(),
            'photographer': self.photographer.id,
        }
        data.update(overrides)
        return data

    def test_create_event_sets_type_color(self):
        response = self.client.post('/api/calendar/events/', self.event_data(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['color'], '#ef4444')
        event = CalendarEvent.objects.get(id=response.data['id'])
        self.assertEqual(event.licensee_id, self.licensee.id)
        self.assertEqual(event.created_by_id, self.licensee.id)

    def test_end_before_start(self):
        data = self.event_data(end=(self.start - timedelta(hours=1)).isoformat())
        response = self.client.post('/api/calendar/events/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end', response.data)

    def test_photographer_creates_own_event(self):
        """Test photographers can only block out their own time"""
        self.client.authenticate_user(self.photographer)
        response = self.client.post(
            '/api/calendar/events/', self.event_data(photographer=self.other_photographer.id), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['photographer'], self.photographer.id)

    def test_foreign_photographer_rejected(self):
        stranger = TestDataFactory.create_staff(TestDataFactory.create_user(), 'photographer')
        response = self.client.post('/api/calendar/events/', self.event_data(photographer=stranger.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_window_and_visibility(self):
        CalendarEvent.objects.create(
            licensee=self.licensee, photographer=self.photographer, title='Mine', type='unavailable',
            start=self.start, end=self.start + timedelta(hours=1)
        )
        CalendarEvent.objects.create(
            licensee=self.licensee, photographer=self.other_photographer, title='Theirs', type='unavailable',
            start=self.start, end=self.start + timedelta(hours=1)
        )
        CalendarEvent.objects.create(
            licensee=self.licensee, title='Public holiday', type='holiday', is_all_day=True,
            start=self.start + timedelta(days=30), end=self.start + timedelta(days=31)
        )

        response = self.client.get('/api/calendar/events/')
        self.assertEqual(len(response.data), 3)

        window_end = (self.start + timedelta(days=2)).isoformat()
        response = self.client.get('/api/calendar/events/', {'start': self.start.isoformat(), 'end': window_end})
        self.assertEqual(len(response.data), 2)

        self.client.authenticate_user(self.photographer)
        response = self.client.get('/api/calendar/events/')
        self.assertEqual({e['title'] for e in response.data}, {'Mine', 'Public holiday'})

    def test_window_accepts_plain_dates(self):
        CalendarEvent.objects.create(
            licensee=self.licensee, photographer=self.photographer, title='Shoot', type='job',
            start=self.start, end=self.start + timedelta(hours=1)
        )
        day_after = (self.start + timedelta(days=2)).date().isoformat()
        response = self.client.get(f'/api/calendar/events/?start=2000-01-01&end={day_after}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_malformed_window_rejected(self):
        for query in ('start=garbage', 'end=2030-02-30T10:00:00', 'photographer=me'):
            response = self.client.get(f'/api/calendar/events/?{query}')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, query)
            self.assertIn('message', response.data)

    def test_update_and_delete_event(self):
        response = self.client.post('/api/calendar/events/', self.event_data(), format='json')
        event_id = response.data['id']
        response = self.client.patch(f'/api/calendar/events/{event_id}/', {'title': 'Dentist (moved)'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], 'Dentist (moved)')

        response = self.client.patch(
            f'/api/calendar/events/{event_id}/',
            {'end': (self.start - timedelta(days=1)).isoformat()},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/calendar/events/{event_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(CalendarEvent.objects.filter(id=event_id).exists())

    def test_editor_has_no_calendar(self):
        editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client.authenticate_user(editor)
        response = self.client.get('/api/calendar/events/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class BusinessSettingsAPITests(TestCase):
    """Test business settings endpoints"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_get_defaults(self):
        response = self.client.get('/api/business-settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['timezone'], 'America/New_York')
        self.assertEqual(response.data['minimum_notice_hours'], 24)
        self.assertFalse(BusinessSettings.objects.exists())

    def test_save_and_update(self):
        response = self.client.put(
            '/api/business-settings/', {'timezone': 'Australia/Sydney', 'default_job_duration': 90}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        business_settings = BusinessSettings.objects.get(licensee=self.licensee)
        self.assertEqual(business_settings.timezone, 'Australia/Sydney')

        response = self.client.put('/api/business-settings/', {'buffer_time_between_jobs': 15}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        business_settings.refresh_from_db()
        self.assertEqual(business_settings.buffer_time_between_jobs, 15)
        self.assertEqual(business_settings.default_job_duration, 90)

    def test_staff_share_licensee_settings(self):
        BusinessSettings.objects.create(licensee=self.licensee, timezone='Europe/London')
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.client.authenticate_user(photographer)
        response = self.client.get('/api/business-settings/')
        self.assertEqual(response.data['timezone'], 'Europe/London')

    def test_photographer_cannot_update(self):
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.client.authenticate_user(photographer)
        response = self.client.put('/api/business-settings/', {'default_job_duration': 60}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_validation(self):
        response = self.client.put(
            '/api/business-settings/',
            {'timezone': 'Mars/Olympus', 'default_job_duration': 10},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('timezone', response.data)
        self.assertIn('default_job_duration', response.data)

    def test_business_hours_validation(self):
        response = self.client.put(
            '/api/business-settings/', {'business_hours': {'mon': {'start': '18:00', 'end': '08:00'}}}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put(
            '/api/business-settings/', {'business_hours': {'mon': {'start': '8am', 'end': '17:00'}}}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put(
            '/api/business-settings/',
            {'business_hours': {'mon': {'start': '07:30', 'end': '16:00'}, 'sun': None}},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class GoogleCalendarTests(TestCase):
    """Test Google Calendar OAuth and inbound sync"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.photographer)

    def connect(self, **kwargs):
        defaults = {
            'user': self.photographer,
            'access_token': 'access-token',
            'refresh_token': 'refresh-token',
            'token_expiry': timezone.now() + timedelta(hours=1),
        }
        defaults.update(kwargs)
        return GoogleCalendarIntegration.objects.create(**defaults)

    def state_for(self, user):
        return signing.dumps({'user_id': user.id}, salt=google_calendar.STATE_SALT)

    @patch('studio.scheduling.google_calendar.GOOGLE_CLIENT_ID', 'client-123')
    def test_auth_redirect(self):
        response = self.client.get('/api/auth/google/')
        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        query = parse_qs(urlparse(response['Location']).query)
        self.assertEqual(query['client_id'], ['client-123'])
        self.assertEqual(query['access_type'], ['offline'])
        self.assertEqual(query['prompt'], ['consent'])
        self.assertEqual(query['scope'], [' '.join(google_calendar.SCOPES)])
        self.assertNotIn('code_challenge', query)
        self.assertEqual(google_calendar.read_state(query['state'][0]), self.photographer.id)

    @patch('studio.scheduling.google_calendar.GOOGLE_CLIENT_ID', '')
    def test_auth_not_configured(self):
        response = self.client.get('/api/auth/google/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_callback_requires_code_and_state(self):
        anonymous = AuthenticatedAPIClient()
        response = anonymous.get('/api/auth/google/callback/', {'code': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = anonymous.get('/api/auth/google/callback/', {'code': 'abc', 'state': 'forged'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('studio.scheduling.google_calendar.Flow')
    def test_callback_connects(self, mock_flow_cls):
        """Test the callback stores tokens and redirects to the calendar page"""
        flow = mock_flow_cls.from_client_config.return_value
        flow.credentials = MagicMock(token='new-access', refresh_token='new-refresh', expiry=None)
        response = AuthenticatedAPIClient().get(
            '/api/auth/google/callback/', {'code': 'auth-code', 'state': self.state_for(self.photographer)}
        )
        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertTrue(response['Location'].endswith('/calendar?google_connected=true'))
        integration = GoogleCalendarIntegration.objects.get(user=self.photographer)
        self.assertEqual(integration.access_token, 'new-access')
        self.assertEqual(integration.refresh_token, 'new-refresh')
        self.assertGreater(integration.token_expiry, timezone.now())
        flow.fetch_token.assert_called_once_with(code='auth-code')

    @patch('studio.scheduling.google_calendar.Flow')
    def test_callback_token_failure(self, mock_flow_cls):
        mock_flow_cls.from_client_config.return_value.fetch_token.side_effect = InvalidGrantError('bad code')
        response = AuthenticatedAPIClient().get(
            '/api/auth/google/callback/', {'code': 'auth-code', 'state': self.state_for(self.photographer)}
        )
        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertIn('google_error=true', response['Location'])
        self.assertFalse(GoogleCalendarIntegration.objects.exists())

    def test_status_and_disconnect(self):
        response = self.client.get('/api/google-calendar/status/')
        self.assertFalse(response.data['connected'])

        self.connect()
        response = self.client.get('/api/google-calendar/status/')
        self.assertTrue(response.data['connected'])
        self.assertEqual(response.data['sync_direction'], 'both')

        response = self.client.delete('/api/google-calendar/disconnect/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(GoogleCalendarIntegration.objects.filter(user=self.photographer).exists())

    def test_sync_not_connected(self):
        response = self.client.post('/api/google-calendar/sync/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @patch('studio.scheduling.google_calendar.build')
    def test_sync_imports_timed_events(self, mock_build):
        """Test timed events are imported once and all-day events skipped"""
        start = timezone.now().replace(microsecond=0) + timedelta(days=2)
        events_list = mock_build.return_value.events.return_value.list
        events_list.return_value.execute.return_value = {'items': [
            {
                'id': 'g-1',
                'summary': 'School pickup',
                'start': {'dateTime': start.isoformat()},
                'end': {'dateTime': (start + timedelta(hours=1)).isoformat()},
            },
            {'id': 'g-2', 'summary': 'Holiday', 'start': {'date': '2030-01-01'}, 'end': {'date': '2030-01-02'}},
        ]}
        integration = self.connect()

        response = self.client.post('/api/google-calendar/sync/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['imported'], 1)
        event = CalendarEvent.objects.get(external_id='g-1')
        self.assertEqual(event.type, 'external')
        self.assertEqual(event.photographer_id, self.photographer.id)
        self.assertEqual(event.licensee_id, self.licensee.id)

        self.assertEqual(mock_build.call_args.args, ('calendar', 'v3'))
        credentials = mock_build.call_args.kwargs['credentials']
        self.assertEqual(credentials.token, 'access-token')
        self.assertEqual(credentials.refresh_token, 'refresh-token')
        self.assertEqual(events_list.call_args.kwargs['calendarId'], 'primary')
        self.assertTrue(events_list.call_args.kwargs['singleEvents'])

        response = self.client.post('/api/google-calendar/sync/')
        self.assertEqual(response.data['imported'], 0)
        integration.refresh_from_db()
        self.assertIsNotNone(integration.last_sync_at)

    @patch('studio.scheduling.google_calendar.build')
    def test_sync_refreshes_expired_token(self, mock_build):
        """Test stale credentials are refreshed before the request and the new token kept"""
        headers = {}

        def refresh(credentials, request):
            credentials.token = 'fresh-token'
            credentials.expiry = datetime.now(dt_timezone.utc).replace(tzinfo=None) + timedelta(hours=1)

        def execute():
            # What the authorized transport does ahead of each request
            credentials = mock_build.call_args.kwargs['credentials']
            credentials.before_request(None, 'GET', 'https://www.googleapis.com/calendar/v3', headers)
            return {'items': []}

        mock_build.return_value.events.return_value.list.return_value.execute.side_effect = execute
        integration = self.connect(token_expiry=timezone.now() - timedelta(minutes=5))

        with patch.object(Credentials, 'refresh', autospec=True, side_effect=refresh) as mock_refresh:
            response = self.client.post('/api/google-calendar/sync/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_refresh.assert_called_once()
        self.assertEqual(headers['authorization'], 'Bearer fresh-token')
        integration.refresh_from_db()
        self.assertEqual(integration.access_token, 'fresh-token')
        self.assertGreater(integration.token_expiry, timezone.now())

    @patch('studio.scheduling.google_calendar.build')
    def test_sync_refresh_rejected(self, mock_build):
        mock_build.return_value.events.return_value.list.return_value.execute.side_effect = RefreshError(
            'invalid_grant'
        )
        integration = self.connect(token_expiry=timezone.now() - timedelta(minutes=5))
        response = self.client.post('/api/google-calendar/sync/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertIn('reconnect', response.data['message'])
        integration.refresh_from_db()
        self.assertEqual(integration.access_token, 'access-token')

    @patch('studio.scheduling.google_calendar.build')
    def test_sync_failure_logged(self, mock_build):
        mock_build.return_value.events.return_value.list.return_value.execute.side_effect = HttpError(
            MagicMock(status=500, reason='Backend Error'), b'{"error": {"message": "Backend Error"}}'
        )
        integration = self.connect()
        response = self.client.post('/api/google-calendar/sync/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['code'], 'external_service_error')
        self.assertTrue(CalendarSyncLog.objects.filter(integration=integration, status='error').exists())
