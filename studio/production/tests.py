"""
Comprehensive test suite for the production module
Tests: job IDs, status rules, lifecycle actions, editor hand-off, file handling,
content items, notifications and delivery email
"""
import io
import shutil
import tempfile
import zipfile
from io import StringIO
from unittest import mock
from urllib.parse import urlparse

from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework import status
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.production import storage
from studio.production.job_ids import generate_job_id, assign_job_id
from studio.production.services import log_activity
from studio.production.models import (
    JobCard, ProductionFile, ContentItem, JobActivityLog, OrderStatusAudit,
    ProductionNotification, EmailDeliveryLog,
)
from studio.production.status import get_status_label, get_available_actions, status_timestamps
from studio.production.thumbnails import generate_thumbnail, thumbnail_name

TEMP_MEDIA_ROOT = tempfile.mkdtemp(prefix='studio-test-media-')


def tearDownModule():
    shutil.rmtree(TEMP_MEDIA_ROOT, ignore_errors=True)


def make_image(name='photo.jpg', size=(800, 600), color=(200, 120, 40)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format='JPEG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/jpeg')


class JobIdTests(TestCase):
    """Test sequential job ID assignment"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()

    def test_generate_sequential_ids(self):
        self.assertEqual(generate_job_id(), '00001')
        self.assertEqual(generate_job_id(), '00002')

    def test_assign_is_idempotent(self):
        """Test a job card keeps its first job ID"""
        job_card = TestDataFactory.create_job_card(self.licensee)
        first = assign_job_id(job_card)
        second = assign_job_id(job_card)
        self.assertEqual(first, second)
        job_card.refresh_from_db()
        self.assertEqual(job_card.job_id, first)

    def test_distinct_job_cards_get_distinct_ids(self):
        ids = {assign_job_id(TestDataFactory.create_job_card(self.licensee)) for _ in range(3)}
        self.assertEqual(len(ids), 3)

    def test_backfill_command(self):
        """Test the backfill command numbers every job card without an ID"""
        for _ in range(3):
            TestDataFactory.create_job_card(self.licensee)
        out = StringIO()
        call_command('backfill_job_ids', stdout=out)
        self.assertFalse(JobCard.objects.filter(job_id__isnull=True).exists())
        self.assertIn('Assigned 3 job IDs', out.getvalue())

    def test_backfill_dry_run(self):
        TestDataFactory.create_job_card(self.licensee)
        call_command('backfill_job_ids', '--dry-run', stdout=StringIO())
        self.assertTrue(JobCard.objects.filter(job_id__isnull=True).exists())


class StatusHelperTests(TestCase):
    """Test status labels, timestamps and available actions"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.job_card = TestDataFactory.create_job_card(self.licensee)

    def test_status_labels(self):
        self.assertEqual(get_status_label('ready_for_qa'), 'Ready for QC')
        self.assertEqual(get_status_label('unassigned'), 'Pending')
        self.assertEqual(get_status_label('on_hold'), 'On Hold')

    def test_status_timestamps_only_fill_empty(self):
        updates = status_timestamps(self.job_card, 'delivered')
        self.assertIn('delivered_at', updates)
        self.job_card.delivered_at = updates['delivered_at']
        self.assertEqual(status_timestamps(self.job_card, 'delivered'), {})

    def test_available_actions_for_editor(self):
        actions = get_available_actions(self.job_card, 'editor')
        self.assertEqual([a['action'] for a in actions], ['accept'])
        self.job_card.status = 'editing'
        actions = get_available_actions(self.job_card, 'editor')
        self.assertEqual([a['action'] for a in actions], ['readyForQC'])

    def test_no_actions_for_admin(self):
        self.assertEqual(get_available_actions(self.job_card, 'admin'), [])


class ThumbnailTests(TestCase):
    """Test thumbnail generation"""

    def test_generate_thumbnail(self):
        thumb = generate_thumbnail(make_image(size=(1200, 400)).read())
        with Image.open(io.BytesIO(thumb)) as img:
            self.assertEqual(img.size, (300, 300))
            self.assertEqual(img.format, 'JPEG')

    def test_generate_thumbnail_invalid_bytes(self):
        with self.assertRaises(ValueError):
            generate_thumbnail(b'not an image')

    def test_thumbnail_name(self):
        self.assertEqual(thumbnail_name('house.front.png'), 'thumb_house.front.jpg')


class JobCardAPITests(TestCase):
    """Test job card listing, detail and updates"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        self.job_card = TestDataFactory.create_job_card(self.licensee)

    def test_list_job_cards(self):
        TestDataFactory.create_job_card(self.licensee, status='delivered')
        TestDataFactory.create_job_card(TestDataFactory.create_user())
        response = self.client.get('/api/job-cards/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

        response = self.client.get('/api/job-cards/?status=delivered')
        self.assertEqual(len(response.data), 1)

    def test_list_with_details(self):
        response = self.client.get('/api/job-cards/?include_details=true')
        self.assertIn('files', response.data[0])
        self.assertIn('booking_details', response.data[0])

    def test_editor_sees_only_assigned(self):
        """Test editors cannot see job cards of other editors"""
        assigned = TestDataFactory.create_job_card(self.licensee, editor=self.editor, status='in_progress')
        self.client.authenticate_user(self.editor)
        response = self.client.get('/api/job-cards/')
        self.assertEqual([row['id'] for row in response.data], [assigned.id])

        response = self.client.get(f'/api/job-cards/{self.job_card.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_editor_job_card_list(self):
        TestDataFactory.create_job_card(self.licensee, editor=self.editor, status='editing')
        self.client.authenticate_user(self.editor)
        response = self.client.get('/api/editor/job-cards/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['available_actions'][0]['action'], 'readyForQC')

    def test_detail(self):
        response = self.client.get(f'/api/job-cards/{self.job_card.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status_label'], 'Pending')
        self.assertEqual(response.data['available_actions'], [])
        self.assertEqual(response.data['booking_details']['id'], self.job_card.booking_id)

    def test_update_status_sets_timestamps(self):
        """Test moving to in_progress stamps assigned_at and logs activity"""
        response = self.client.patch(
            f'/api/job-cards/{self.job_card.id}/', {'status': 'in_progress'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.job_card.refresh_from_db()
        self.assertIsNotNone(self.job_card.assigned_at)
        self.assertTrue(JobActivityLog.objects.filter(job_card=self.job_card, action='status_updated').exists())

    def test_assign_editor_via_update_notifies(self):
        self.client.patch(
            f'/api/job-cards/{self.job_card.id}/', {'status': 'in_progress', 'editor': self.editor.id}, format='json'
        )
        self.assertTrue(ProductionNotification.objects.filter(recipient=self.editor, type='assignment').exists())

    def test_editor_cannot_deliver_via_update(self):
        self.job_card.editor = self.editor
        self.job_card.save()
        self.client.authenticate_user(self.editor)
        response = self.client.patch(
            f'/api/job-cards/{self.job_card.id}/', {'status': 'delivered'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['code'], 'not_allowed')

    def test_editor_update_ignores_other_fields(self):
        self.job_card.editor = self.editor
        self.job_card.save()
        self.client.authenticate_user(self.editor)
        response = self.client.patch(
            f'/api/job-cards/{self.job_card.id}/',
            {'status': 'editing', 'revision_notes': 'sneaky'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.job_card.refresh_from_db()
        self.assertEqual(self.job_card.status, 'editing')
        self.assertIsNone(self.job_card.revision_notes)

    def test_status_change_with_reason(self):
        """Test admin override records the status audit trail"""
        response = self.client.put(
            f'/api/job-cards/{self.job_card.id}/status/',
            {'status': 'delivered', 'reason': 'Client collected in person'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        audit = OrderStatusAudit.objects.get(job_card=self.job_card)
        self.assertEqual(audit.previous_status, 'unassigned')
        self.assertEqual(audit.new_status, 'delivered')

        response = self.client.get(f'/api/job-cards/{self.job_card.id}/audit-log/')
        self.assertEqual(len(response.data), 1)

    def test_status_change_invalid_status(self):
        response = self.client.put(
            f'/api/job-cards/{self.job_card.id}/status/', {'status': 'archived'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_job_id_endpoint(self):
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/assign-job-id/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['job_id'], '00001')

    def test_manual_activity_entry(self):
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/activity/',
            {'action': 'note', 'description': 'Called the agent'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get(f'/api/job-cards/{self.job_card.id}/activity/')
        self.assertEqual(response.data[0]['description'], 'Called the agent')


class LifecycleActionTests(TestCase):
    """Test upload / accept / readyForQC / revision / delivered"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.other_editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client = AuthenticatedAPIClient()
        self.job_card = TestDataFactory.create_job_card(self.licensee, editor=self.editor, status='in_progress')

    def test_editor_accepts(self):
        self.client.authenticate_user(self.editor)
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/accept/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.job_card.refresh_from_db()
        self.assertEqual(self.job_card.status, 'editing')
        self.assertIsNotNone(self.job_card.accepted_at)
        self.assertEqual(self.job_card.history[-1]['action'], 'accept')
        self.assertEqual(self.job_card.history[-1]['by'], str(self.editor.id))

    def test_failed_activity_log_keeps_transaction_usable(self):
        """Test a failed timeline insert does not poison the surrounding transaction"""
        def failing_create(**kwargs):
            with transaction.mark_for_rollback_on_error():
                raise IntegrityError('activity insert failed')

        with transaction.atomic():
            with mock.patch.object(JobActivityLog.objects, 'create', side_effect=failing_create):
                self.assertIsNone(log_activity(self.job_card, self.editor, 'note', 'Lost entry'))
            self.job_card.status = 'editing'
            self.job_card.save(update_fields=['status'])
        self.job_card.refresh_from_db()
        self.assertEqual(self.job_card.status, 'editing')

    def test_other_editor_cannot_act(self):
        self.client.authenticate_user(self.other_editor)
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/actions/readyForQC/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_ready_for_qc_moves_content(self):
        """Test readyForQC sends draft content to QC"""
        item = ContentItem.objects.create(job_card=self.job_card, content_id='c-1', name='Front', status='draft')
        self.client.authenticate_user(self.editor)
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/actions/readyForQC/', {'notes': 'All done'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.job_card.refresh_from_db()
        item.refresh_from_db()
        self.assertEqual(self.job_card.status, 'ready_for_qa')
        self.assertEqual(item.status, 'ready_for_qc')
        self.assertEqual(self.job_card.history[-1]['notes'], 'All done')

    def test_revision_requires_admin(self):
        self.client.authenticate_user(self.editor)
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/actions/revision/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_revision_notifies_editor(self):
        self.client.authenticate_user(self.licensee)
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/request-revision/', {'notes': 'Sky too dark'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.job_card.refresh_from_db()
        self.assertEqual(self.job_card.status, 'in_revision')
        self.assertEqual(self.job_card.revision_notes, 'Sky too dark')
        self.assertTrue(ProductionNotification.objects.filter(
            recipient=self.editor, type='revision_requested'
        ).exists())

    def test_deliver(self):
        ContentItem.objects.create(job_card=self.job_card, content_id='c-2', name='Rear', status='approved')
        self.client.authenticate_user(self.licensee)
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/deliver/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.job_card.refresh_from_db()
        self.assertEqual(self.job_card.status, 'delivered')
        self.assertIsNotNone(self.job_card.delivered_at)
        self.assertFalse(self.job_card.content_items.exclude(status='delivered').exists())

    def test_unknown_action(self):
        self.client.authenticate_user(self.licensee)
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/actions/archive/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_complete_requires_content(self):
        self.client.authenticate_user(self.editor)
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/complete-with-content/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        TestDataFactory.create_production_file(self.job_card, self.editor, media_type='edited')
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/complete-with-content/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ready_for_qa')

    def test_revision_reply(self):
        self.job_card.status = 'in_revision'
        self.job_card.save()
        self.client.authenticate_user(self.editor)
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/revision-reply/', {'reply': 'Fixed the sky'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'editing')
        self.assertTrue(JobActivityLog.objects.filter(job_card=self.job_card, action='revision_reply').exists())


class SubmitToEditorTests(TestCase):
    """Test handing a job to an editor with service blocks"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        self.job_card = TestDataFactory.create_job_card(self.licensee)
        self.category = TestDataFactory.create_service_category(self.editor, name='Photo Editing')
        self.option = TestDataFactory.create_service_option(self.category, name='Standard', price='4.50')

    def test_submit_to_editor(self):
        """Test submission assigns the editor, a job ID and notifies"""
        data = {
            'editor_id': self.editor.id,
            'service_blocks': [{'category_id': self.category.id, 'option_id': self.option.id, 'quantity': 25}],
            'instructions': 'Twilight on the front',
        }
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/submit-to-editor/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.job_card.refresh_from_db()
        self.assertEqual(self.job_card.editor_id, self.editor.id)
        self.assertEqual(self.job_card.status, 'in_progress')
        self.assertEqual(self.job_card.job_id, '00001')
        block = self.job_card.service_blocks[0]
        self.assertEqual(block['category_name'], 'Photo Editing')
        self.assertEqual(block['option_name'], 'Standard')
        self.assertEqual(block['price'], '4.50')
        self.assertTrue(ProductionNotification.objects.filter(recipient=self.editor).exists())

    def test_submit_with_foreign_category(self):
        other_editor = TestDataFactory.create_staff(self.licensee, 'editor')
        other_category = TestDataFactory.create_service_category(other_editor)
        data = {'editor_id': self.editor.id, 'service_blocks': [{'category_id': other_category.id}]}
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/submit-to-editor/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_submit_without_blocks(self):
        data = {'editor_id': self.editor.id, 'service_blocks': []}
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/submit-to-editor/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_editor_notifications(self):
        data = {'editor_id': self.editor.id, 'service_blocks': [{'category_id': self.category.id}]}
        self.client.post(f'/api/job-cards/{self.job_card.id}/submit-to-editor/', data, format='json')

        self.client.authenticate_user(self.editor)
        response = self.client.get('/api/notifications/?unread=true')
        self.assertEqual(len(response.data), 1)
        notification_id = response.data[0]['id']
        response = self.client.patch(f'/api/notifications/{notification_id}/read/')
        self.assertTrue(response.data['is_read'])
        response = self.client.get('/api/notifications/?unread=true')
        self.assertEqual(len(response.data), 0)


@override_settings(MEDIA_ROOT=TEMP_MEDIA_ROOT)
class FileUploadTests(TestCase):
    """Test production file intake"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.photographer)
        self.job_card = TestDataFactory.create_job_card(self.licensee, photographer=self.photographer)

    def test_raw_upload_starts_job(self):
        """Test raw uploads store files, thumbnails and start the job"""
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/',
            {'files': [make_image('front.jpg'), make_image('rear.jpg')], 'media_type': 'raw'},
            format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data), 2)
        self.job_card.refresh_from_db()
        self.assertEqual(self.job_card.status, 'in_progress')
        self.assertIsNotNone(self.job_card.job_id)
        self.assertIsNotNone(self.job_card.uploaded_at)

        production_file = ProductionFile.objects.get(original_name='front.jpg')
        self.assertTrue(storage.object_exists(production_file.file_path))
        self.assertTrue(storage.object_exists(production_file.thumbnail_path))
        self.assertTrue(production_file.file_path.startswith(f'job-{self.job_card.id}/raw/'))

    def test_final_upload_creates_content_item(self):
        job_card = TestDataFactory.create_job_card(self.licensee, editor=self.editor, status='editing')
        self.client.authenticate_user(self.editor)
        response = self.client.post(
            f'/api/job-cards/{job_card.id}/files/',
            {'files': [make_image('final.jpg')], 'media_type': 'final', 'service_category': 'drone'},
            format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        job_card.refresh_from_db()
        self.assertEqual(job_card.status, 'ready_for_qa')
        item = ContentItem.objects.get(job_card=job_card)
        self.assertEqual(item.category, 'drone')
        self.assertEqual(item.status, 'ready_for_qc')
        self.assertEqual(item.uploader_role, 'editor')

    def test_rejects_disallowed_type(self):
        bad_file = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/', {'files': [bad_file]}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('not allowed', response.data['message'])
        self.assertFalse(ProductionFile.objects.exists())

    def test_no_files(self):
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/files/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_too_many_files(self):
        files = [make_image(f'img{i}.jpg', size=(10, 10)) for i in range(11)]
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/', {'files': files}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unassigned_editor_cannot_upload(self):
        self.client.authenticate_user(self.editor)
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/', {'files': [make_image()]}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_files_with_signed_urls(self):
        """Test listed files carry working signed download URLs"""
        self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/', {'files': [make_image('front.jpg')]}, format='multipart'
        )
        response = self.client.get(f'/api/job-cards/{self.job_card.id}/files/?media_type=raw')
        self.assertEqual(len(response.data), 1)
        download_path = urlparse(response.data[0]['download_url']).path

        self.client.logout()
        response = self.client.get(download_path)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(b''.join(response.streaming_content).startswith(b'\xff\xd8'))

    def test_tampered_download_token(self):
        response = self.client.get('/api/files/not-a-token/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_signed_upload_flow(self):
        """Test upload-url, PUT to the signed URL, then metadata registration"""
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/upload-url/',
            {'file_name': 'pano.jpg', 'content_type': 'image/jpeg', 'file_size': 2048, 'media_type': 'final'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        key = response.data['key']
        upload_path = urlparse(response.data['upload_url']).path

        self.client.logout()
        image_bytes = make_image('pano.jpg').read()
        response = self.client.put(upload_path, data=image_bytes, content_type='image/jpeg')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['size'], len(image_bytes))

        self.client.authenticate_user(self.photographer)
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/metadata/',
            {'key': key, 'file_name': 'pano.jpg', 'content_type': 'image/jpeg',
             'file_size': len(image_bytes), 'media_type': 'final', 'category': 'virtual_tour'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        production_file = ProductionFile.objects.get(file_path=key)
        self.assertIsNotNone(production_file.thumbnail_path)

    def test_signed_upload_url_single_use_and_typed(self):
        """Test an upload URL takes one object of the signed content type"""
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/upload-url/',
            {'file_name': 'dusk.jpg', 'content_type': 'image/jpeg', 'file_size': 2048, 'media_type': 'raw'},
            format='json'
        )
        key = response.data['key']
        upload_path = urlparse(response.data['upload_url']).path
        self.client.logout()
        image_bytes = make_image('dusk.jpg').read()

        response = self.client.put(upload_path, data=image_bytes, content_type='application/zip')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(storage.object_exists(key))

        response = self.client.put(upload_path, data=image_bytes, content_type='image/jpeg')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['key'], key)

        response = self.client.put(upload_path, data=b'second copy', content_type='image/jpeg')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(storage.read_object(key), image_bytes)

    def test_invalid_upload_token(self):
        response = self.client.put('/api/uploads/forged/', data=b'abc', content_type='image/jpeg')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_metadata_for_foreign_key(self):
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/metadata/',
            {'key': 'job-999999/final/x.jpg', 'file_name': 'x.jpg', 'content_type': 'image/jpeg', 'file_size': 1},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_download_raw_files_zip(self):
        self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/',
            {'files': [make_image('a.jpg'), make_image('b.jpg')]},
            format='multipart'
        )
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/download-raw-files/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        archive = zipfile.ZipFile(io.BytesIO(b''.join(response.streaming_content)))
        self.assertEqual(sorted(archive.namelist()), ['a.jpg', 'b.jpg'])

    def test_download_raw_files_empty(self):
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/download-raw-files/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_file_removes_object(self):
        self.client.post(
            f'/api/job-cards/{self.job_card.id}/files/', {'files': [make_image('gone.jpg')]}, format='multipart'
        )
        production_file = ProductionFile.objects.get(original_name='gone.jpg')
        path = production_file.file_path
        response = self.client.delete(f'/api/production-files/{production_file.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(storage.object_exists(path))
        self.assertTrue(JobActivityLog.objects.filter(job_card=self.job_card, action='file_deleted').exists())


class ContentItemAPITests(TestCase):
    """Test content item endpoints"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        self.job_card = TestDataFactory.create_job_card(self.licensee)

    def test_create_content_item_from_file(self):
        production_file = TestDataFactory.create_production_file(self.job_card, media_type='final')
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/content-items/',
            {'name': 'Kitchen', 'category': 'photography', 'file': production_file.id},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['file_key'], production_file.file_path)
        self.assertIsNotNone(response.data['file_url'])

    def test_file_from_other_job_rejected(self):
        other_job = TestDataFactory.create_job_card(self.licensee)
        production_file = TestDataFactory.create_production_file(other_job)
        response = self.client.post(
            f'/api/job-cards/{self.job_card.id}/content-items/',
            {'name': 'Kitchen', 'file': production_file.id},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete_content_item(self):
        item = ContentItem.objects.create(job_card=self.job_card, content_id='c-9', name='Lounge')
        response = self.client.patch(f'/api/content-items/{item.id}/', {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')

        response = self.client.delete(f'/api/content-items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ContentItem.objects.filter(id=item.id).exists())


class JobPanelTests(TestCase):
    """Test the jobs status panel endpoints"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_job_list_paging(self):
        for _ in range(5):
            TestDataFactory.create_job_card(self.licensee)
        response = self.client.get('/api/jobs/?limit=2&offset=1')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_job_list_bad_params(self):
        response = self.client.get('/api/jobs/?limit=lots')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quick_status_update_with_notes(self):
        job_card = TestDataFactory.create_job_card(self.licensee)
        response = self.client.patch(
            f'/api/jobs/{job_card.id}/', {'status': 'delivered', 'notes': 'Sent by courier'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'delivered')
        log = JobActivityLog.objects.filter(job_card=job_card, action='status_updated').first()
        self.assertIn('Sent by courier', log.description)

        response = self.client.get(f'/api/jobs/{job_card.id}/activity/')
        self.assertGreaterEqual(len(response.data), 1)

    def test_quick_status_requires_status(self):
        job_card = TestDataFactory.create_job_card(self.licensee)
        response = self.client.patch(f'/api/jobs/{job_card.id}/', {'notes': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class DeliveryEmailTests(TestCase):
    """Test the delivery email"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        self.job_card = TestDataFactory.create_job_card(self.licensee, status='delivered')

    def test_send_delivery_email(self):
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/send-delivery-email/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'sent')
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(f'/delivery/{self.job_card.id}', mail.outbox[0].body)
        self.assertEqual(mail.outbox[0].to, [self.job_card.client.email])
        self.assertTrue(EmailDeliveryLog.objects.filter(job_card=self.job_card, status='sent').exists())

    def test_photographer_cannot_send(self):
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.client.authenticate_user(photographer)
        response = self.client.post(f'/api/job-cards/{self.job_card.id}/send-delivery-email/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
