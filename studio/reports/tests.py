"""
Test suite for the reports module
Tests: dashboard stats, production summary, revenue and upcoming jobs
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from studio.bookings.models import Booking
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient

LOCMEM_CACHE = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'studio-reports-tests',
    }
}


class DashboardStatsTests(TestCase):
    """Test dashboard headline numbers"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_dashboard_counts(self):
        client_obj = TestDataFactory.create_client(self.licensee)
        TestDataFactory.create_booking(self.licensee, client=client_obj, status='confirmed', price=Decimal('100.00'))
        TestDataFactory.create_booking(self.licensee, client=client_obj, status='completed', price=Decimal('250.00'))
        TestDataFactory.create_booking(self.licensee, client=client_obj, status='completed', price=Decimal('150.50'))
        old = TestDataFactory.create_booking(self.licensee, client=client_obj, status='completed', price=Decimal('999.00'))
        Booking.objects.filter(id=old.id).update(created_at=timezone.now() - timedelta(days=400))
        TestDataFactory.create_booking(TestDataFactory.create_user(), status='completed')

        response = self.client.get('/api/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_clients'], 1)
        self.assertEqual(response.data['active_jobs'], 1)
        self.assertEqual(response.data['completed_jobs'], 3)
        self.assertEqual(response.data['monthly_revenue'], 400.50)

    def test_empty_dashboard(self):
        response = self.client.get('/api/dashboard/stats/')
        self.assertEqual(response.data['monthly_revenue'], 0.0)
        self.assertEqual(response.data['total_clients'], 0)

    def test_editor_denied(self):
        editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client.authenticate_user(editor)
        response = self.client.get('/api/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @override_settings(CACHES=LOCMEM_CACHE)
    def test_dashboard_refreshes_after_booking_change(self):
        """Test cached stats are dropped when bookings change"""
        from django.core.cache import cache
        cache.clear()
        client_obj = TestDataFactory.create_client(self.licensee)
        response = self.client.get('/api/dashboard/stats/')
        self.assertEqual(response.data['active_jobs'], 0)

        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_booking(self.licensee, client=client_obj, status='confirmed')
        response = self.client.get('/api/dashboard/stats/')
        self.assertEqual(response.data['active_jobs'], 1)


class ProductionSummaryTests(TestCase):
    """Test job card status summary"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_summary_counts_every_status(self):
        TestDataFactory.create_job_card(self.licensee)
        TestDataFactory.create_job_card(self.licensee, status='delivered')
        TestDataFactory.create_job_card(self.licensee, status='delivered')
        TestDataFactory.create_job_card(TestDataFactory.create_user(), status='delivered')

        response = self.client.get('/api/reports/production-summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 3)
        counts = {row['status']: row['count'] for row in response.data['statuses']}
        self.assertEqual(counts['delivered'], 2)
        self.assertEqual(counts['unassigned'], 1)
        self.assertEqual(counts['in_revision'], 0)
        labels = {row['status']: row['label'] for row in response.data['statuses']}
        self.assertEqual(labels['ready_for_qa'], 'Ready for QC')


class RevenueReportTests(TestCase):
    """Test monthly revenue report"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def completed_booking(self, created_at, price):
        booking = TestDataFactory.create_booking(self.licensee, status='completed', price=Decimal(price))
        Booking.objects.filter(id=booking.id).update(created_at=created_at)
        return booking

    def test_monthly_breakdown(self):
        self.completed_booking(datetime(2030, 1, 10, 12, tzinfo=dt_timezone.utc), '100.00')
        self.completed_booking(datetime(2030, 1, 20, 12, tzinfo=dt_timezone.utc), '50.00')
        self.completed_booking(datetime(2030, 3, 5, 12, tzinfo=dt_timezone.utc), '75.25')
        self.completed_booking(datetime(2030, 6, 5, 12, tzinfo=dt_timezone.utc), '500.00')
        pending = TestDataFactory.create_booking(self.licensee, status='pending', price=Decimal('80.00'))
        Booking.objects.filter(id=pending.id).update(created_at=datetime(2030, 2, 1, 12, tzinfo=dt_timezone.utc))

        response = self.client.get('/api/reports/revenue/?date_from=2030-01-01&date_to=2030-03-31')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_revenue'], 225.25)
        self.assertEqual(response.data['monthly_breakdown'], [
            {'month': '2030-01', 'revenue': 150.0, 'booking_count': 2},
            {'month': '2030-03', 'revenue': 75.25, 'booking_count': 1},
        ])

    def test_invalid_dates(self):
        response = self.client.get('/api/reports/revenue/?date_from=01/01/2030')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reversed_dates(self):
        response = self.client.get('/api/reports/revenue/?date_from=2030-05-01&date_to=2030-01-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_default_window(self):
        response = self.client.get('/api/reports/revenue/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_revenue'], 0.0)
        self.assertEqual(response.data['monthly_breakdown'], [])


class UpcomingJobsTests(TestCase):
    """Test upcoming jobs list"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        today = timezone.localdate()
        self.soon = TestDataFactory.create_booking(
            self.licensee, photographer=self.photographer, status='confirmed', scheduled_date=today + timedelta(days=2)
        )
        self.later = TestDataFactory.create_booking(self.licensee, scheduled_date=today + timedelta(days=30))
        TestDataFactory.create_booking(self.licensee, status='cancelled', scheduled_date=today + timedelta(days=1))
        TestDataFactory.create_booking(self.licensee, status='completed', scheduled_date=today + timedelta(days=1))

    def test_default_two_weeks(self):
        response = self.client.get('/api/reports/upcoming-jobs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['id'] for b in response.data], [self.soon.id])

    def test_custom_days(self):
        response = self.client.get('/api/reports/upcoming-jobs/?days=60')
        self.assertEqual([b['id'] for b in response.data], [self.soon.id, self.later.id])

    def test_invalid_days(self):
        response = self.client.get('/api/reports/upcoming-jobs/?days=soon')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_photographer_sees_own(self):
        self.client.authenticate_user(self.photographer)
        response = self.client.get('/api/reports/upcoming-jobs/?days=60')
        self.assertEqual([b['id'] for b in response.data], [self.soon.id])
