"""
Test suite for the delivery module
Tests: public delivery page, sections, comments, download tracking and staff settings
"""
import io
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework import status
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.production.models import JobActivityLog
from .models import DeliverySettings, DeliveryComment, DeliveryTracking

TEMP_MEDIA_ROOT = tempfile.mkdtemp(prefix='studio-delivery-media-')


def tearDownModule():
    shutil.rmtree(TEMP_MEDIA_ROOT, ignore_errors=True)


class DeliveryPageTests(TestCase):
    """Test the public delivery page"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.job_card = TestDataFactory.create_job_card(self.licensee, status='delivered')
        self.photo = TestDataFactory.create_production_file(
            self.job_card, media_type='final', service_category='photography', original_name='front.jpg'
        )
        self.drone = TestDataFactory.create_production_file(
            self.job_card, media_type='final', service_category='drone', original_name='aerial.jpg'
        )
        self.plan = TestDataFactory.create_production_file(
            self.job_card, media_type='final', service_category='floor_plan', original_name='plan.pdf',
            mime_type='application/pdf'
        )
        TestDataFactory.create_production_file(self.job_card, media_type='raw', original_name='raw.jpg')
        self.client = AuthenticatedAPIClient()

    def test_page_without_login(self):
        """Test anonymous visitors see final files grouped into sections"""
        response = self.client.get(f'/api/delivery/{self.job_card.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['job_card']['property_address'], self.job_card.property_address)
        self.assertEqual(len(response.data['files']), 3)

        sections = {section['section']: section['files'] for section in response.data['sections']}
        self.assertEqual([s['section'] for s in response.data['sections']], ['photos', 'floor_plans'])
        self.assertEqual({f['name'] for f in sections['photos']}, {'front.jpg', 'aerial.jpg'})
        self.assertIsNotNone(sections['photos'][0]['url'])

    def test_page_view_tracked(self):
        self.client.get(f'/api/delivery/{self.job_card.id}/', HTTP_USER_AGENT='TestBrowser/1.0')
        tracking = DeliveryTracking.objects.get(job_card=self.job_card)
        self.assertEqual(tracking.action_type, 'page_view')
        self.assertEqual(tracking.client_info['user_agent'], 'TestBrowser/1.0')

    def test_custom_section_order(self):
        DeliverySettings.objects.create(
            job_card=self.job_card, delivery_url='ocean-parade', section_order=['floor_plans', 'photos']
        )
        response = self.client.get(f'/api/delivery/{self.job_card.id}/')
        self.assertEqual([s['section'] for s in response.data['sections']], ['floor_plans', 'photos'])
        self.assertEqual(response.data['settings']['section_order'][:2], ['floor_plans', 'photos'])
        self.assertEqual(len(response.data['settings']['section_order']), 5)

    def test_downloads_disabled_hides_urls(self):
        DeliverySettings.objects.create(job_card=self.job_card, delivery_url='no-downloads', enable_downloads=False)
        response = self.client.get(f'/api/delivery/{self.job_card.id}/')
        for entry in response.data['files']:
            self.assertIsNone(entry['url'])

    def test_page_by_url(self):
        DeliverySettings.objects.create(job_card=self.job_card, delivery_url='ocean-parade')
        response = self.client.get('/api/delivery/url/ocean-parade/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['job_card']['id'], self.job_card.id)

    def test_unknown_delivery(self):
        response = self.client.get('/api/delivery/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get('/api/delivery/url/missing/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DeliveryCommentTests(TestCase):
    """Test client comments on the delivery page"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.job_card = TestDataFactory.create_job_card(self.licensee, status='delivered')
        self.client = AuthenticatedAPIClient()

    def test_leave_comment(self):
        data = {
            'client_name': 'Sam Agent',
            'client_email': 'sam@agency.test',
            'comment': 'Please brighten the kitchen',
            'request_revision': True,
        }
        response = self.client.post(f'/api/delivery/{self.job_card.id}/comments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(DeliveryComment.objects.filter(job_card=self.job_card).count(), 1)
        log = JobActivityLog.objects.get(job_card=self.job_card, action='client_comment')
        self.assertIn('revision requested', log.description)

        response = self.client.get(f'/api/delivery/{self.job_card.id}/comments/')
        self.assertEqual(len(response.data), 1)

    def test_comment_alias_route(self):
        data = {'client_name': 'Sam', 'client_email': 'sam@agency.test', 'comment': 'Lovely'}
        response = self.client.post(f'/api/delivery/{self.job_card.id}/comment/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_comment_validation(self):
        data = {'client_name': ' ', 'client_email': 'not-an-email', 'comment': ''}
        response = self.client.post(f'/api/delivery/{self.job_card.id}/comments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('client_email', response.data)

    def test_comments_disabled(self):
        DeliverySettings.objects.create(job_card=self.job_card, delivery_url='quiet', enable_comments=False)
        data = {'client_name': 'Sam', 'client_email': 'sam@agency.test', 'comment': 'Hello'}
        response = self.client.post(f'/api/delivery/{self.job_card.id}/comments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(DeliveryComment.objects.exists())


class DownloadTrackingTests(TestCase):
    """Test download tracking"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.job_card = TestDataFactory.create_job_card(self.licensee, status='delivered')
        self.client = AuthenticatedAPIClient()

    def test_single_file_download(self):
        response = self.client.post(
            f'/api/delivery/{self.job_card.id}/download/',
            {'file_name': 'front.jpg', 'file_type': 'image'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tracking = DeliveryTracking.objects.get(job_card=self.job_card)
        self.assertEqual(tracking.action_type, 'file_download')
        self.assertEqual(tracking.file_name, 'front.jpg')
        self.assertEqual(tracking.client_info['file_type'], 'image')

    def test_bulk_download(self):
        self.client.post(f'/api/delivery/{self.job_card.id}/download/', {}, format='json')
        self.assertEqual(DeliveryTracking.objects.get(job_card=self.job_card).action_type, 'bulk_download')

    def test_downloads_disabled(self):
        DeliverySettings.objects.create(job_card=self.job_card, delivery_url='locked', enable_downloads=False)
        response = self.client.post(f'/api/delivery/{self.job_card.id}/download/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(DeliveryTracking.objects.exists())


class DeliverySettingsTests(TestCase):
    """Test staff management of delivery settings"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        self.job_card = TestDataFactory.create_job_card(self.licensee)
        self.url = f'/api/jobs/{self.job_card.id}/delivery-settings/'

    def test_defaults_before_configuration(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['enable_comments'])
        self.assertTrue(response.data['enable_downloads'])
        self.assertEqual(response.data['section_order'][0], 'photos')

    def test_create_settings(self):
        """Test POST creates settings and generates a URL when none is given"""
        response = self.client.post(self.url, {'enable_comments': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        delivery_settings = DeliverySettings.objects.get(job_card=self.job_card)
        self.assertFalse(delivery_settings.enable_comments)
        self.assertTrue(delivery_settings.delivery_url.startswith(f'job-{self.job_card.id}-'))

    def test_create_twice(self):
        self.client.post(self.url, {'delivery_url': 'first-one'}, format='json')
        response = self.client.post(self.url, {'delivery_url': 'second-one'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_requires_existing(self):
        response = self.client.put(self.url, {'enable_downloads': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_settings(self):
        self.client.post(self.url, {'delivery_url': 'Ocean-Parade'}, format='json')
        response = self.client.put(
            self.url, {'enable_downloads': False, 'section_order': ['video', 'photos']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        delivery_settings = DeliverySettings.objects.get(job_card=self.job_card)
        self.assertEqual(delivery_settings.delivery_url, 'ocean-parade')
        self.assertFalse(delivery_settings.enable_downloads)
        self.assertEqual(delivery_settings.section_order, ['video', 'photos'])

    def test_invalid_section_order(self):
        response = self.client.post(self.url, {'section_order': ['photos', 'photos']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(self.url, {'section_order': ['brochures']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_delivery_url(self):
        response = self.client.post(self.url, {'delivery_url': 'has spaces'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_editor_cannot_manage_settings(self):
        editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.job_card.editor = editor
        self.job_card.save()
        self.client.authenticate_user(editor)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @override_settings(MEDIA_ROOT=TEMP_MEDIA_ROOT)
    def test_header_image_upload(self):
        buffer = io.BytesIO()
        Image.new('RGB', (400, 200), (30, 90, 160)).save(buffer, format='PNG')
        header = SimpleUploadedFile('header.png', buffer.getvalue(), content_type='image/png')
        response = self.client.post(
            self.url, {'delivery_url': 'with-header', 'header_image_file': header}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        delivery_settings = DeliverySettings.objects.get(job_card=self.job_card)
        self.assertTrue(delivery_settings.header_image.startswith(f'job-{self.job_card.id}/delivery/'))

        response = AuthenticatedAPIClient().get(f'/api/delivery/{self.job_card.id}/')
        self.assertIsNotNone(response.data['settings']['header_image_url'])
