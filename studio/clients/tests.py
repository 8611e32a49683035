"""
Test suite for the clients module
Tests: client CRUD, offices, communications, licensee isolation and deletion rules
"""
from django.test import TestCase
from rest_framework import status
from studio.core.models import AuditLog
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.clients.models import Client, Office, Communication


class ClientModelTests(TestCase):
    """Test client model helpers"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()

    def test_editing_notes_from_preferences(self):
        client = TestDataFactory.create_client(
            self.licensee, editing_preferences={'photography': 'Warm tones', 'floor_plan': '', 'virtual_tour': 'Bright'}
        )
        self.assertEqual(client.editing_notes(), 'Photography: Warm tones\nVirtual Tour: Bright')

    def test_editing_notes_empty(self):
        client = TestDataFactory.create_client(self.licensee)
        self.assertEqual(client.editing_notes(), '')


class ClientAPITests(TestCase):
    """Test client API endpoints"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_create_client(self):
        """Test creating a client writes an audit entry"""
        data = {
            'name': 'Coastal Realty',
            'email': 'hello@coastal.test',
            'phone': '0400000000',
            'editing_preferences': {'photography': 'Blue skies'},
        }
        response = self.client.post('/api/clients/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        client = Client.objects.get(id=response.data['id'])
        self.assertEqual(client.licensee_id, self.licensee.id)
        self.assertTrue(AuditLog.objects.filter(model_name='Client', action='create', object_id=str(client.id)).exists())

    def test_create_client_requires_name(self):
        response = self.client.post('/api/clients/', {'name': '  ', 'email': 'x@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)

    def test_create_client_invalid_preferences(self):
        data = {'name': 'Bad Prefs', 'email': 'bad@test.com', 'editing_preferences': ['not', 'a', 'dict']}
        response = self.client.post('/api/clients/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_clients_scoped_and_searchable(self):
        """Test the list only shows this licensee's clients"""
        TestDataFactory.create_client(self.licensee, name='Alpha Agents')
        TestDataFactory.create_client(self.licensee, name='Beta Brokers')
        TestDataFactory.create_client(TestDataFactory.create_user(), name='Alpha Elsewhere')

        response = self.client.get('/api/clients/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

        response = self.client.get('/api/clients/?search=alpha')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['name'], 'Alpha Agents')

    def test_list_clients_by_office(self):
        office = TestDataFactory.create_office(self.licensee)
        TestDataFactory.create_client(self.licensee, office=office)
        TestDataFactory.create_client(self.licensee)
        response = self.client.get(f'/api/clients/?office={office.id}')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['office_name'], office.name)

    def test_get_client_of_other_licensee(self):
        other_client = TestDataFactory.create_client(TestDataFactory.create_user())
        response = self.client.get(f'/api/clients/{other_client.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_client(self):
        client = TestDataFactory.create_client(self.licensee)
        response = self.client.patch(f'/api/clients/{client.id}/', {'contact_name': 'Jo'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        client.refresh_from_db()
        self.assertEqual(client.contact_name, 'Jo')

    def test_assign_office_of_other_licensee(self):
        client = TestDataFactory.create_client(self.licensee)
        foreign_office = TestDataFactory.create_office(TestDataFactory.create_user())
        response = self.client.patch(f'/api/clients/{client.id}/', {'office': foreign_office.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_client(self):
        client = TestDataFactory.create_client(self.licensee)
        response = self.client.delete(f'/api/clients/{client.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Client.objects.filter(id=client.id).exists())

    def test_delete_client_with_bookings(self):
        """Test clients with bookings are kept"""
        booking = TestDataFactory.create_booking(self.licensee)
        response = self.client.delete(f'/api/clients/{booking.client_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Client.objects.filter(id=booking.client_id).exists())

    def test_editor_cannot_list_clients(self):
        editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client.authenticate_user(editor)
        response = self.client.get('/api/clients/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CommunicationAPITests(TestCase):
    """Test client communication log"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        self.client_obj = TestDataFactory.create_client(self.licensee)

    def test_log_communication(self):
        data = {'type': 'phone', 'subject': 'Access', 'message': 'Keys are with the neighbour'}
        response = self.client.post(f'/api/clients/{self.client_obj.id}/communications/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        communication = Communication.objects.get(id=response.data['id'])
        self.assertEqual(communication.user_id, self.licensee.id)

        response = self.client.get(f'/api/clients/{self.client_obj.id}/communications/')
        self.assertEqual(len(response.data), 1)

    def test_communication_booking_must_belong_to_client(self):
        other_booking = TestDataFactory.create_booking(self.licensee)
        data = {'type': 'email', 'message': 'Hi', 'booking': other_booking.id}
        response = self.client.post(f'/api/clients/{self.client_obj.id}/communications/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class OfficeAPITests(TestCase):
    """Test office endpoints"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_create_and_list_offices(self):
        response = self.client.post('/api/offices/', {'name': 'Northside'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        office = Office.objects.get(id=response.data['id'])
        TestDataFactory.create_client(self.licensee, office=office)

        response = self.client.get('/api/offices/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['client_count'], 1)

    def test_delete_office_keeps_clients(self):
        office = TestDataFactory.create_office(self.licensee)
        client = TestDataFactory.create_client(self.licensee, office=office)
        response = self.client.delete(f'/api/offices/{office.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        client.refresh_from_db()
        self.assertIsNone(client.office_id)
