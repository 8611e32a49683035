"""
Test suite for the bookings module
Tests: booking creation with job cards and calendar events, validation, filtering and updates
"""
from datetime import timedelta
from decimal import Decimal

from django.core import mail
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from studio.core.models import AuditLog
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.bookings.models import Booking
from studio.production.models import JobCard, JobActivityLog
from studio.production.services import send_delivery_email
from studio.scheduling.models import CalendarEvent


class BookingAPITests(TestCase):
    """Test booking API endpoints"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        self.client_obj = TestDataFactory.create_client(
            self.licensee, editing_preferences={'photography': 'HDR, warm tones'}
        )

    def booking_data(self, **overrides):
        data = {
            'client': self.client_obj.id,
            'property_address': '12 Ocean Parade',
            'scheduled_date': (timezone.localdate() + timedelta(days=2)).isoformat(),
            'scheduled_time': '09:30',
            'services': ['photography', 'drone'],
            'price': '350.00',
        }
        data.update(overrides)
        return data

    def test_create_booking_creates_job_card(self):
        """Test a new booking gets a seeded job card"""
        response = self.client.post('/api/bookings/', self.booking_data(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNotNone(response.data['job_card_id'])

        job_card = JobCard.objects.get(booking_id=response.data['id'])
        self.assertEqual(job_card.status, 'unassigned')
        self.assertEqual(job_card.requested_services, ['photography', 'drone'])
        self.assertEqual(job_card.editing_notes, 'Photography: HDR, warm tones')
        self.assertIsNone(job_card.job_id)
        self.assertTrue(JobActivityLog.objects.filter(job_card=job_card, action='created').exists())
        self.assertTrue(AuditLog.objects.filter(model_name='Booking', action='create').exists())

    def test_create_booking_with_photographer_adds_event(self):
        """Test assigning a photographer puts the shoot on the calendar"""
        response = self.client.post(
            '/api/bookings/', self.booking_data(photographer=self.photographer.id), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        event = CalendarEvent.objects.get(booking_id=response.data['id'])
        self.assertEqual(event.type, 'job')
        self.assertEqual(event.photographer_id, self.photographer.id)
        self.assertEqual(event.end - event.start, timedelta(minutes=120))
        self.assertEqual(event.color, '#3b82f6')

    def test_create_booking_without_photographer_has_no_event(self):
        response = self.client.post('/api/bookings/', self.booking_data(), format='json')
        self.assertFalse(CalendarEvent.objects.filter(booking_id=response.data['id']).exists())

    def test_create_booking_validation(self):
        """Test bad services, time and price are rejected"""
        response = self.client.post(
            '/api/bookings/',
            self.booking_data(services=['catering'], scheduled_time='9am', price='-1'),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('services', response.data)
        self.assertIn('scheduled_time', response.data)
        self.assertIn('price', response.data)
        self.assertFalse(Booking.objects.exists())

    def test_create_booking_empty_services(self):
        response = self.client.post('/api/bookings/', self.booking_data(services=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_services_collapsed(self):
        response = self.client.post(
            '/api/bookings/', self.booking_data(services=['video', 'video', 'photography']), format='json'
        )
        self.assertEqual(response.data['services'], ['video', 'photography'])

    def test_create_booking_for_foreign_client(self):
        foreign_client = TestDataFactory.create_client(TestDataFactory.create_user())
        response = self.client.post('/api/bookings/', self.booking_data(client=foreign_client.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('client', response.data)

    def test_photographer_must_have_photographer_role(self):
        editor = TestDataFactory.create_staff(self.licensee, 'editor')
        response = self.client.post('/api/bookings/', self.booking_data(photographer=editor.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('photographer', response.data)

    def test_list_bookings_filters(self):
        """Test status, date and search filters"""
        today = timezone.localdate()
        TestDataFactory.create_booking(self.licensee, client=self.client_obj, status='confirmed', scheduled_date=today)
        TestDataFactory.create_booking(self.licensee, status='cancelled', scheduled_date=today + timedelta(days=10))
        TestDataFactory.create_booking(TestDataFactory.create_user())

        response = self.client.get('/api/bookings/')
        self.assertEqual(len(response.data), 2)

        response = self.client.get('/api/bookings/?status=confirmed,pending')
        self.assertEqual(len(response.data), 1)

        response = self.client.get(f'/api/bookings/?date_from={(today + timedelta(days=5)).isoformat()}')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['status'], 'cancelled')

        response = self.client.get(f'/api/bookings/?search={self.client_obj.name}')
        self.assertEqual(len(response.data), 1)

    def test_malformed_filters_rejected(self):
        """Test bad filter values are a 400 with a message"""
        for query in ('date_from=garbage', 'date_to=2030-13-01', 'photographer=abc', 'client=first'):
            response = self.client.get(f'/api/bookings/?{query}')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, query)
            self.assertIn('message', response.data)

    def test_photographer_sees_only_own_bookings(self):
        TestDataFactory.create_booking(self.licensee, photographer=self.photographer)
        TestDataFactory.create_booking(self.licensee)
        self.client.authenticate_user(self.photographer)
        response = self.client.get('/api/bookings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_editor_cannot_access_bookings(self):
        editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client.authenticate_user(editor)
        response = self.client.get('/api/bookings/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class BookingUpdateTests(TestCase):
    """Test booking updates keep job cards and calendar events in step"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        self.booking = TestDataFactory.create_booking(self.licensee)

    def test_assign_photographer_syncs_job_card_and_event(self):
        response = self.client.patch(
            f'/api/bookings/{self.booking.id}/',
            {'photographer': self.photographer.id, 'services': ['video']},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        job_card = JobCard.objects.get(booking=self.booking)
        self.assertEqual(job_card.photographer_id, self.photographer.id)
        self.assertEqual(job_card.requested_services, ['video'])
        self.assertTrue(CalendarEvent.objects.filter(booking=self.booking, type='job').exists())

    def test_change_client_moves_job_card(self):
        """Test the job card follows the booking to its new client"""
        new_client = TestDataFactory.create_client(self.licensee, email='new@client.com')
        response = self.client.patch(f'/api/bookings/{self.booking.id}/', {'client': new_client.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        job_card = JobCard.objects.get(booking=self.booking)
        self.assertEqual(job_card.client_id, new_client.id)

        send_delivery_email(job_card, self.licensee)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['new@client.com'])

    def test_reschedule_moves_event(self):
        self.client.patch(f'/api/bookings/{self.booking.id}/', {'photographer': self.photographer.id}, format='json')
        new_date = timezone.localdate() + timedelta(days=20)
        self.client.patch(
            f'/api/bookings/{self.booking.id}/',
            {'scheduled_date': new_date.isoformat(), 'scheduled_time': '14:00'},
            format='json'
        )
        events = CalendarEvent.objects.filter(booking=self.booking, type='job')
        self.assertEqual(events.count(), 1)
        self.assertEqual(events.first().start.date(), new_date)

    def test_cancel_removes_event(self):
        """Test cancelling a booking clears its calendar event"""
        self.client.patch(f'/api/bookings/{self.booking.id}/', {'photographer': self.photographer.id}, format='json')
        response = self.client.patch(f'/api/bookings/{self.booking.id}/', {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(CalendarEvent.objects.filter(booking=self.booking).exists())
        self.assertTrue(AuditLog.objects.filter(model_name='Booking', action='status_change').exists())

    def test_delete_booking_removes_job_card(self):
        job_card_id = self.booking.job_card.id
        response = self.client.delete(f'/api/bookings/{self.booking.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(JobCard.objects.filter(id=job_card_id).exists())

    def test_booking_price_kept(self):
        response = self.client.get(f'/api/bookings/{self.booking.id}/')
        self.assertEqual(Decimal(response.data['price']), Decimal('250.00'))
