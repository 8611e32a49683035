"""
Test suite for the products module
Tests: product catalogue CRUD, variations, exclusive clients and filters
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from studio.core.models import AuditLog
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Product


class ProductAPITests(TestCase):
    """Test product API endpoints"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_create_product(self):
        """Test creating a package with variations"""
        data = {
            'title': '  Premium Package ',
            'type': 'package',
            'price': '499.00',
            'category': 'Photography',
            'variations': [{'name': 'Up to 20 photos', 'price': 199}, {'name': 'Up to 40 photos', 'price': '349.5'}],
        }
        response = self.client.post('/api/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Product.objects.get(id=response.data['id'])
        self.assertEqual(product.title, 'Premium Package')
        self.assertEqual(product.licensee_id, self.licensee.id)
        self.assertEqual(product.variations[0], {'name': 'Up to 20 photos', 'price': '199'})
        self.assertEqual(product.variations[1]['price'], '349.5')
        self.assertEqual(product.tax_rate, 'GST 10%')
        self.assertTrue(AuditLog.objects.filter(model_name='Product', action='create').exists())

    def test_invalid_variations(self):
        response = self.client.post(
            '/api/products/', {'title': 'Drone', 'variations': [{'price': '10'}]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('variations', response.data)

        response = self.client.post(
            '/api/products/', {'title': 'Drone', 'variations': [{'name': 'Single', 'price': 'ten'}]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            '/api/products/', {'title': 'Drone', 'variations': [{'name': 'Single', 'price': '-5'}]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_negative_price(self):
        response = self.client.post('/api/products/', {'title': 'Video', 'price': '-1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)

    def test_blank_title(self):
        response = self.client.post('/api/products/', {'title': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_exclusive_clients_must_be_own(self):
        foreign_client = TestDataFactory.create_client(TestDataFactory.create_user())
        response = self.client.post(
            '/api/products/', {'title': 'VIP Tour', 'exclusive_clients': [foreign_client.id]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete(self):
        product = TestDataFactory.create_product(self.licensee)
        response = self.client.patch(f'/api/products/{product.id}/', {'price': '249.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.price, Decimal('249.00'))

        response = self.client.delete(f'/api/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(id=product.id).exists())
        self.assertTrue(AuditLog.objects.filter(model_name='Product', action='delete').exists())

    def test_photographer_reads_but_cannot_write(self):
        """Test staff may browse the catalogue but only admins and VAs change it"""
        product = TestDataFactory.create_product(self.licensee)
        photographer = TestDataFactory.create_staff(self.licensee, 'photographer')
        self.client.authenticate_user(photographer)

        response = self.client.get('/api/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.client.post('/api/products/', {'title': 'Sneaky'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.patch(f'/api/products/{product.id}/', {'price': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_va_can_write(self):
        va = TestDataFactory.create_staff(self.licensee, 'va')
        self.client.authenticate_user(va)
        response = self.client.post('/api/products/', {'title': 'Twilight Shoot', 'type': 'addon'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Product.objects.get(id=response.data['id']).licensee_id, self.licensee.id)

    def test_other_licensee_product_hidden(self):
        product = TestDataFactory.create_product(TestDataFactory.create_user())
        response = self.client.get(f'/api/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ProductFilterTests(TestCase):
    """Test product list filters"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)
        self.vip_client = TestDataFactory.create_client(self.licensee)
        self.other_client = TestDataFactory.create_client(self.licensee)

        self.photos = TestDataFactory.create_product(self.licensee, title='Photo Package', type='package',
                                                     category='Photography')
        self.drone = TestDataFactory.create_product(self.licensee, title='Drone Add-on', type='addon',
                                                    category='Aerial', show_on_booking_form=False)
        self.retired = TestDataFactory.create_product(self.licensee, title='Old Tour', is_active=False)
        self.vip = TestDataFactory.create_product(self.licensee, title='VIP Twilight')
        self.vip.exclusive_clients.add(self.vip_client)

    def titles(self, response):
        return {product['title'] for product in response.data}

    def test_filter_by_type_and_category(self):
        response = self.client.get('/api/products/?type=addon')
        self.assertEqual(self.titles(response), {'Drone Add-on'})
        response = self.client.get('/api/products/?category=photography')
        self.assertEqual(self.titles(response), {'Photo Package'})

    def test_filter_active_and_booking_form(self):
        response = self.client.get('/api/products/?active=true')
        self.assertNotIn('Old Tour', self.titles(response))
        response = self.client.get('/api/products/?booking_form=false')
        self.assertEqual(self.titles(response), {'Drone Add-on'})

    def test_search(self):
        response = self.client.get('/api/products/?search=twilight')
        self.assertEqual(self.titles(response), {'VIP Twilight'})

    def test_client_filter_includes_exclusive(self):
        """Test a client sees open products plus their exclusive ones"""
        response = self.client.get(f'/api/products/?client={self.vip_client.id}')
        self.assertEqual(self.titles(response), {'Photo Package', 'Drone Add-on', 'Old Tour', 'VIP Twilight'})

        response = self.client.get(f'/api/products/?client={self.other_client.id}')
        self.assertNotIn('VIP Twilight', self.titles(response))
        self.assertEqual(len(response.data), 3)

    def test_invalid_type(self):
        response = self.client.get('/api/products/?type=subscription')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
