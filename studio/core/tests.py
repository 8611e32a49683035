"""
Test suite for the core module
Tests: authentication, staff management, licensee scoping, audit logs, search and caching
"""
from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework import status
from studio.core.cache_signals import suspend_cache_signals
from studio.core.exceptions import ActionNotAllowed, studio_exception_handler
from studio.core.model_cache import (
    get_client_list_cache_key, get_dashboard_cache_key, get_job_card_list_cache_key, invalidate_dashboard_cache
)
from studio.core.models import AuditLog, User
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.core.utils import create_audit_log, scope_to_licensee
from studio.clients.models import Client

LOCMEM_CACHE = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'studio-tests',
    }
}


class UserModelTests(TestCase):
    """Test role helpers on the user model"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user(role='licensee')

    def test_licensee_id_of_licensee_is_self(self):
        """Test a licensee sees its own data"""
        self.assertEqual(self.licensee.get_licensee_id(), self.licensee.id)

    def test_licensee_id_of_staff(self):
        """Test staff resolve to their licensee"""
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.assertEqual(photographer.get_licensee_id(), self.licensee.id)

    def test_role_properties(self):
        """Test editor, admin/VA and production staff flags"""
        editor = TestDataFactory.create_staff(self.licensee, 'editor')
        va = TestDataFactory.create_staff(self.licensee, 'va')
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')

        self.assertTrue(editor.is_editor)
        self.assertFalse(editor.is_admin_or_va)
        self.assertFalse(editor.is_production_staff)
        self.assertTrue(va.is_admin_or_va)
        self.assertTrue(photographer.is_production_staff)
        self.assertFalse(photographer.is_admin_or_va)

    def test_display_name(self):
        """Test display name falls back to username"""
        user = TestDataFactory.create_user(username='plainuser')
        self.assertEqual(user.display_name, 'plainuser')
        user.first_name, user.last_name = 'Ada', 'Lovelace'
        self.assertEqual(user.display_name, 'Ada Lovelace')


class AuthAPITests(TestCase):
    """Test registration, login and the current user endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register(self):
        """Test registering a licensee returns tokens"""
        data = {
            'username': 'newlicensee',
            'email': 'new@test.com',
            'password': 'Str0ng-Pass!9',
            'password_confirm': 'Str0ng-Pass!9',
            'first_name': 'New',
        }
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['username'], 'newlicensee')

    def test_register_password_mismatch(self):
        """Test registration rejects mismatched passwords"""
        data = {
            'username': 'mismatch',
            'email': 'mismatch@test.com',
            'password': 'Str0ng-Pass!9',
            'password_confirm': 'Other-Pass!9',
        }
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_login(self):
        """Test obtaining a token pair with the user payload"""
        TestDataFactory.create_user(username='loginuser', password='Str0ng-Pass!9')
        response = self.client.post(
            '/api/auth/login/', {'username': 'loginuser', 'password': 'Str0ng-Pass!9'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['role'], 'licensee')

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='loginuser2', password='Str0ng-Pass!9')
        response = self.client.post(
            '/api/auth/login/', {'username': 'loginuser2', 'password': 'wrong'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_user_me_requires_auth(self):
        response = self.client.get('/api/auth/user/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_user_me_capabilities(self):
        """Test current user includes role capabilities"""
        licensee = TestDataFactory.create_user()
        editor = TestDataFactory.create_staff(licensee, 'editor')
        self.client.authenticate_user(editor)
        response = self.client.get('/api/auth/user/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['can_edit'])
        self.assertFalse(response.data['can_manage_production'])


class StaffAPITests(TestCase):
    """Test staff management endpoints"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_create_staff_member(self):
        """Test new staff join the creator's licensee"""
        data = {
            'username': 'shooter',
            'email': 'shooter@test.com',
            'password': 'Str0ng-Pass!9',
            'password_confirm': 'Str0ng-Pass!9',
            'role': 'photographer',
        }
        response = self.client.post('/api/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(username='shooter')
        self.assertEqual(user.licensee_id, self.licensee.id)

    def test_list_staff_is_scoped(self):
        """Test staff of other licensees are not listed"""
        TestDataFactory.create_staff(self.licensee, 'photographer')
        other = TestDataFactory.create_user()
        TestDataFactory.create_staff(other, 'photographer')

        response = self.client.get('/api/users/?role=photographer')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_photographer_list(self):
        TestDataFactory.create_staff(self.licensee, 'photographer', first_name='Zed')
        TestDataFactory.create_staff(self.licensee, 'photographer', first_name='Amy')
        TestDataFactory.create_staff(self.licensee, 'editor')
        response = self.client.get('/api/photographers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['first_name'] for u in response.data], ['Amy', 'Zed'])

    def test_editor_cannot_manage_staff(self):
        editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client.authenticate_user(editor)
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/users/{self.licensee.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_staff_member(self):
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        response = self.client.delete(f'/api/users/{photographer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(id=photographer.id).exists())

    def test_va_cannot_delete_or_edit_licensee(self):
        """Test the licensee account is out of reach for staff"""
        TestDataFactory.create_client(self.licensee)
        va = TestDataFactory.create_staff(self.licensee, 'va')
        self.client.authenticate_user(va)

        response = self.client.delete(f'/api/users/{self.licensee.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.patch(f'/api/users/{self.licensee.id}/', {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.licensee.refresh_from_db()
        self.assertTrue(self.licensee.is_active)
        self.assertEqual(Client.objects.filter(licensee=self.licensee).count(), 1)

        response = self.client.get(f'/api/users/{self.licensee.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_admin_staff_cannot_delete_licensee(self):
        admin = TestDataFactory.create_staff(self.licensee, 'admin')
        self.client.authenticate_user(admin)
        response = self.client.delete(f'/api/users/{self.licensee.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(User.objects.filter(id=self.licensee.id).exists())

    def test_va_cannot_change_roles(self):
        va = TestDataFactory.create_staff(self.licensee, 'va')
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.client.authenticate_user(va)

        response = self.client.patch(f'/api/users/{va.id}/', {'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)
        response = self.client.patch(f'/api/users/{photographer.id}/', {'role': 'editor'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        va.refresh_from_db()
        photographer.refresh_from_db()
        self.assertEqual(va.role, 'va')
        self.assertEqual(photographer.role, 'photographer')

        # Other fields stay editable
        response = self.client.patch(f'/api/users/{photographer.id}/', {'phone': '0400 000 000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_licensee_changes_staff_role(self):
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        response = self.client.patch(f'/api/users/{photographer.id}/', {'role': 'editor'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        photographer.refresh_from_db()
        self.assertEqual(photographer.role, 'editor')

        response = self.client.patch(f'/api/users/{photographer.id}/', {'role': 'licensee'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_staff_create_role_rules(self):
        """Test new staff need a staff role and only admins add admins"""
        data = {
            'username': 'newbie',
            'email': 'newbie@test.com',
            'password': 'Str0ng-Pass!9',
            'password_confirm': 'Str0ng-Pass!9',
        }
        response = self.client.post('/api/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)

        response = self.client.post('/api/users/', {**data, 'role': 'licensee'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.authenticate_user(TestDataFactory.create_staff(self.licensee, 'va'))
        response = self.client.post('/api/users/', {**data, 'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/users/', {**data, 'role': 'editor'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(User.objects.filter(role='licensee', licensee=self.licensee).exists())


class AuditLogTests(TestCase):
    """Test audit log creation and listing"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_create_audit_log_requires_fields(self):
        """Test incomplete entries are skipped"""
        self.assertIsNone(create_audit_log(user=self.licensee, action='create'))

    def test_create_audit_log_sets_licensee(self):
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        log = create_audit_log(user=photographer, action='update', model_name='Client', object_id=1)
        self.assertEqual(log.licensee_id, self.licensee.id)
        self.assertEqual(log.object_id, '1')

    def test_list_audit_logs_filtered(self):
        """Test filtering audit logs by action"""
        create_audit_log(user=self.licensee, action='create', model_name='Client', object_id=1)
        create_audit_log(user=self.licensee, action='delete', model_name='Client', object_id=1)
        other = TestDataFactory.create_user()
        create_audit_log(user=other, action='create', model_name='Client', object_id=2)

        response = self.client.get('/api/audit-logs/?action=create')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['model_name'], 'Client')

    def test_audit_log_date_filters(self):
        create_audit_log(user=self.licensee, action='create', model_name='Client', object_id=1)
        response = self.client.get('/api/audit-logs/?date_from=2000-01-01&date_to=2999-12-31')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.client.get('/api/audit-logs/?date_from=garbage')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('date_from', response.data['message'])
        response = self.client.get('/api/audit-logs/?date_to=2030-02-31')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_audit_log_detail_other_licensee(self):
        other = TestDataFactory.create_user()
        log = create_audit_log(user=other, action='create', model_name='Client', object_id=2)
        response = self.client.get(f'/api/audit-logs/{log.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ScopingTests(TestCase):
    """Test licensee scoping of querysets"""

    def test_scope_to_licensee(self):
        licensee = TestDataFactory.create_user()
        other = TestDataFactory.create_user()
        TestDataFactory.create_client(licensee)
        TestDataFactory.create_client(other)
        va = TestDataFactory.create_staff(licensee, 'va')
        self.assertEqual(scope_to_licensee(Client.objects.all(), va).count(), 1)

    def test_superuser_without_licensee_sees_all(self):
        TestDataFactory.create_client(TestDataFactory.create_user())
        TestDataFactory.create_client(TestDataFactory.create_user())
        superuser = TestDataFactory.create_user(is_superuser=True)
        self.assertEqual(scope_to_licensee(Client.objects.all(), superuser).count(), 2)


class SearchAndHealthTests(TestCase):
    """Test global search and health endpoints"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_empty_search(self):
        response = self.client.get('/api/search/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['clients'], [])

    def test_search_clients_and_job_cards(self):
        """Test search hits clients and their job cards"""
        client = TestDataFactory.create_client(self.licensee, name='Harbour Realty')
        TestDataFactory.create_booking(self.licensee, client=client)
        TestDataFactory.create_client(TestDataFactory.create_user(), name='Harbour Homes')

        response = self.client.get('/api/search/?q=Harbour')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['clients']), 1)
        self.assertEqual(len(response.data['job_cards']), 1)
        self.assertEqual(len(response.data['bookings']), 1)

    def test_health(self):
        self.client.logout()
        response = self.client.get('/api/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ok')


class ExceptionHandlerTests(TestCase):
    """Test the API error envelope"""

    def test_service_error_envelope(self):
        response = studio_exception_handler(ActionNotAllowed('Nope'), {'view': None})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {'message': 'Nope', 'code': 'not_allowed'})

    def test_unhandled_exception_passes_through(self):
        self.assertIsNone(studio_exception_handler(ValueError('boom'), {'view': None}))


@override_settings(CACHES=LOCMEM_CACHE)
class CacheGenerationTests(TestCase):
    """Test generation-stamped cache keys"""

    def setUp(self):
        cache.clear()
        self.licensee = TestDataFactory.create_user()

    def test_dashboard_key_changes_after_invalidation(self):
        key = get_dashboard_cache_key(self.licensee.id)
        self.assertEqual(key, get_dashboard_cache_key(self.licensee.id))
        invalidate_dashboard_cache(self.licensee.id)
        self.assertNotEqual(key, get_dashboard_cache_key(self.licensee.id))

    def test_client_save_retires_client_lists(self):
        """Test saving a client moves the list generation forward"""
        key = get_client_list_cache_key(self.licensee.id)
        TestDataFactory.create_client(self.licensee)
        self.assertNotEqual(key, get_client_list_cache_key(self.licensee.id))

    def test_other_licensee_lists_untouched(self):
        other = TestDataFactory.create_user()
        key = get_client_list_cache_key(other.id)
        TestDataFactory.create_client(self.licensee)
        self.assertEqual(key, get_client_list_cache_key(other.id))

    def test_suspended_signals_leave_lists_alone(self):
        """Test bulk work inside suspend_cache_signals skips per-row invalidation"""
        client_key = get_client_list_cache_key(self.licensee.id)
        with suspend_cache_signals():
            job_card = TestDataFactory.create_job_card(self.licensee)
            job_card_key = get_job_card_list_cache_key(self.licensee.id)
            job_card.save()
            TestDataFactory.create_client(self.licensee)
        self.assertEqual(client_key, get_client_list_cache_key(self.licensee.id))
        self.assertEqual(job_card_key, get_job_card_list_cache_key(self.licensee.id))

        job_card.save()
        self.assertNotEqual(job_card_key, get_job_card_list_cache_key(self.licensee.id))

    def test_audit_log_model(self):
        """Test audit log string representation"""
        log = AuditLog.objects.create(action='create', model_name='Client', object_id='5')
        self.assertEqual(str(log), 'create Client#5')
