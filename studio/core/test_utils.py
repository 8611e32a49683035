"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from studio.clients.models import Client, Office
from studio.bookings.models import Booking
from studio.production.models import JobCard, ProductionFile
from studio.production.services import create_job_card_for_booking
from studio.editor_services.models import EditorServiceCategory, EditorServiceOption
from studio.products.models import Product
from decimal import Decimal
from django.utils import timezone
from datetime import timedelta
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='licensee', licensee=None,
                    is_superuser=False, **extra):
        """Create a test user; staff roles belong to the given licensee"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            licensee=licensee,
            is_superuser=is_superuser,
            **extra
        )

    @staticmethod
    def create_staff(licensee, role, **kwargs):
        """Create a staff member (photographer, editor, va, admin) of a licensee"""
        return TestDataFactory.create_user(
            username=f'{role}_{TestDataFactory.random_string(6)}', role=role, licensee=licensee, **kwargs
        )

    @staticmethod
    def create_office(licensee, name=None):
        if not name:
            name = f'Office_{TestDataFactory.random_string(6)}'
        return Office.objects.create(licensee=licensee, name=name, contact_name='Front Desk')

    @staticmethod
    def create_client(licensee, name=None, email=None, office=None, editing_preferences=None):
        """Create a test client"""
        if not name:
            name = f'Client_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Client.objects.create(
            licensee=licensee,
            name=name,
            email=email,
            phone=f'04{random.randint(10000000, 99999999)}',
            office=office,
            editing_preferences=editing_preferences or {},
        )

    @staticmethod
    def create_booking(licensee, client=None, photographer=None, status='pending', scheduled_date=None,
                       scheduled_time='10:00', services=None, price=None, with_job_card=True):
        """Create a test booking, with its job card unless told otherwise"""
        if not client:
            client = TestDataFactory.create_client(licensee)
        if not scheduled_date:
            scheduled_date = timezone.localdate() + timedelta(days=3)
        booking = Booking.objects.create(
            licensee=licensee,
            client=client,
            property_address=f'{random.randint(1, 999)} Test Street',
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            services=services or ['photography'],
            status=status,
            photographer=photographer,
            price=price if price is not None else Decimal('250.00'),
        )
        if with_job_card:
            create_job_card_for_booking(booking)
        return booking

    @staticmethod
    def create_job_card(licensee, editor=None, status='unassigned', **booking_kwargs):
        """Create a job card through a booking"""
        booking = TestDataFactory.create_booking(licensee, **booking_kwargs)
        job_card = booking.job_card
        if editor or status != 'unassigned':
            job_card.editor = editor
            job_card.status = status
            job_card.save()
        return job_card

    @staticmethod
    def create_production_file(job_card, user=None, media_type='raw', service_category='photography',
                               original_name=None, file_path=None, mime_type='image/jpeg'):
        """Create a file row without touching storage"""
        if not original_name:
            original_name = f'{TestDataFactory.random_string(8)}.jpg'
        return ProductionFile.objects.create(
            job_card=job_card,
            file_name=original_name,
            original_name=original_name,
            file_path=file_path or f'job-{job_card.pk}/{media_type}/{original_name}',
            file_size=1024,
            mime_type=mime_type,
            media_type=media_type,
            service_category=service_category,
            uploaded_by=user,
        )

    @staticmethod
    def create_service_category(editor, name=None, display_order=0):
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return EditorServiceCategory.objects.create(
            editor=editor,
            licensee_id=editor.get_licensee_id(),
            category_name=name,
            display_order=display_order,
        )

    @staticmethod
    def create_service_option(category, name=None, price=None, display_order=0):
        if not name:
            name = f'Option_{TestDataFactory.random_string(6)}'
        return EditorServiceOption.objects.create(
            category=category,
            option_name=name,
            price=price if price is not None else Decimal('5.00'),
            display_order=display_order,
        )

    @staticmethod
    def create_product(licensee, title=None, type='product', price=None, **kwargs):
        """Create a test product"""
        if not title:
            title = f'Product_{TestDataFactory.random_string(6)}'
        return Product.objects.create(
            licensee=licensee,
            title=title,
            type=type,
            price=price if price is not None else Decimal('199.00'),
            **kwargs
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
