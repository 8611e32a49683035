"""
Test suite for the editor services module
Tests: editor price lists, ordering, change history and service templates
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import EditorServiceCategory, EditorServiceOption, ServiceTemplate, EditorServiceChangeLog

TEMPLATE_DATA = {
    'categories': [
        {
            'category_name': 'Photo Editing',
            'options': [
                {'option_name': 'Standard', 'price': '3.50'},
                {'option_name': 'Twilight', 'price': 12},
            ],
        },
        {
            'category_name': 'Floor Plans',
            'options': [{'option_name': '2D Plan', 'price': '45.00', 'currency': 'USD'}],
        },
    ]
}


class PriceListTests(TestCase):
    """Test managing an editor's categories and options"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.other_editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.editor)

    def test_editor_builds_own_price_list(self):
        """Test an editor adds categories and options to their own list"""
        response = self.client.post(
            f'/api/editor-services/{self.editor.id}/categories/', {'category_name': ' Photo Editing '}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        category_id = response.data['id']
        self.assertEqual(response.data['category_name'], 'Photo Editing')
        self.assertEqual(response.data['display_order'], 0)

        response = self.client.post(
            f'/api/editor-services/categories/{category_id}/options/',
            {'option_name': 'HDR Blend', 'price': '4.25', 'currency': 'aud'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['currency'], 'AUD')

        response = self.client.get(f'/api/editor-services/{self.editor.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['options'][0]['option_name'], 'HDR Blend')

    def test_new_categories_go_last(self):
        TestDataFactory.create_service_category(self.editor, display_order=0)
        TestDataFactory.create_service_category(self.editor, display_order=1)
        response = self.client.post(
            f'/api/editor-services/{self.editor.id}/categories/', {'category_name': 'Video'}, format='json'
        )
        self.assertEqual(response.data['display_order'], 2)

    def test_cannot_manage_other_editor(self):
        response = self.client.post(
            f'/api/editor-services/{self.other_editor.id}/categories/', {'category_name': 'Nope'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        category = TestDataFactory.create_service_category(self.other_editor)
        response = self.client.patch(
            f'/api/editor-services/categories/{category.id}/', {'category_name': 'Hijacked'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        option = TestDataFactory.create_service_option(category)
        response = self.client.delete(f'/api/editor-services/options/{option.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_manages_any_editor(self):
        self.client.authenticate_user(self.licensee)
        response = self.client.post(
            f'/api/editor-services/{self.other_editor.id}/categories/', {'category_name': 'Drone'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(EditorServiceCategory.objects.get(id=response.data['id']).editor_id, self.other_editor.id)

    def test_anyone_in_licensee_can_view(self):
        TestDataFactory.create_service_category(self.other_editor, name='Retouching')
        response = self.client.get(f'/api/editor-services/{self.other_editor.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['category_name'], 'Retouching')

    def test_other_licensee_editor_hidden(self):
        stranger = TestDataFactory.create_staff(TestDataFactory.create_user(), 'editor')
        response = self.client.get(f'/api/editor-services/{stranger.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_option_validation(self):
        category = TestDataFactory.create_service_category(self.editor)
        response = self.client.post(
            f'/api/editor-services/categories/{category.id}/options/',
            {'option_name': '  ', 'price': '-2'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)

    def test_update_and_delete_option(self):
        category = TestDataFactory.create_service_category(self.editor)
        option = TestDataFactory.create_service_option(category, name='Basic', price='2.00')
        response = self.client.patch(f'/api/editor-services/options/{option.id}/', {'price': '2.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        option.refresh_from_db()
        self.assertEqual(option.price, Decimal('2.50'))

        response = self.client.delete(f'/api/editor-services/options/{option.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(EditorServiceOption.objects.filter(id=option.id).exists())

    def test_delete_category_removes_options(self):
        category = TestDataFactory.create_service_category(self.editor)
        TestDataFactory.create_service_option(category)
        response = self.client.delete(f'/api/editor-services/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(EditorServiceOption.objects.filter(category_id=category.id).exists())


class ChangeHistoryTests(TestCase):
    """Test every price list change is recorded"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.editor)

    def test_changes_logged(self):
        response = self.client.post(
            f'/api/editor-services/{self.editor.id}/categories/', {'category_name': 'Photos'}, format='json'
        )
        category_id = response.data['id']
        response = self.client.post(
            f'/api/editor-services/categories/{category_id}/options/',
            {'option_name': 'Standard', 'price': '3.00'},
            format='json'
        )
        option_id = response.data['id']
        self.client.patch(f'/api/editor-services/options/{option_id}/', {'price': '3.50'}, format='json')
        self.client.delete(f'/api/editor-services/categories/{category_id}/')

        change_types = list(
            EditorServiceChangeLog.objects.filter(editor=self.editor).order_by('id').values_list('change_type', flat=True)
        )
        self.assertEqual(change_types, ['category_added', 'option_added', 'option_updated', 'category_deleted'])

        update = EditorServiceChangeLog.objects.get(change_type='option_updated')
        self.assertEqual(update.old_value['price'], '3.00')
        self.assertEqual(update.new_value['price'], '3.50')
        self.assertEqual(update.changed_by_id, self.editor.id)

    def test_history_endpoint(self):
        self.client.post(
            f'/api/editor-services/{self.editor.id}/categories/', {'category_name': 'Video'}, format='json'
        )
        response = self.client.get(f'/api/editor-services/{self.editor.id}/change-history/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['change_type'], 'category_added')
        self.assertEqual(response.data[0]['changed_by_name'], self.editor.display_name)


class ReorderTests(TestCase):
    """Test drag-and-drop ordering"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.editor)
        self.first = TestDataFactory.create_service_category(self.editor, name='First', display_order=0)
        self.second = TestDataFactory.create_service_category(self.editor, name='Second', display_order=1)
        self.third = TestDataFactory.create_service_category(self.editor, name='Third', display_order=2)

    def test_reorder_categories(self):
        response = self.client.put(
            '/api/editor-services/categories/order/',
            {'category_ids': [self.third.id, self.first.id, self.second.id]},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['updated'], 3)
        names = list(EditorServiceCategory.objects.filter(editor=self.editor).values_list('category_name', flat=True))
        self.assertEqual(names, ['Third', 'First', 'Second'])

    def test_reorder_options(self):
        a = TestDataFactory.create_service_option(self.first, name='A', display_order=0)
        b = TestDataFactory.create_service_option(self.first, name='B', display_order=1)
        response = self.client.put('/api/editor-services/options/order/', {'ids': [b.id, a.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        a.refresh_from_db()
        b.refresh_from_db()
        self.assertEqual((b.display_order, a.display_order), (0, 1))

    def test_reorder_requires_ids(self):
        response = self.client.put('/api/editor-services/categories/order/', {'ids': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_reorder_other_editor(self):
        other_editor = TestDataFactory.create_staff(self.licensee, 'editor')
        foreign = TestDataFactory.create_service_category(other_editor)
        response = self.client.put(
            '/api/editor-services/categories/order/', {'ids': [foreign.id, self.first.id]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ServiceTemplateTests(TestCase):
    """Test service templates"""

    def setUp(self):
        self.licensee = TestDataFactory.create_user()
        self.editor = TestDataFactory.create_staff(self.licensee, 'editor')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.licensee)

    def test_create_template(self):
        response = self.client.post(
            '/api/service-templates/',
            {'template_name': 'Standard Rates', 'template_data': TEMPLATE_DATA, 'is_default': True},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        template = ServiceTemplate.objects.get(id=response.data['id'])
        self.assertEqual(template.licensee_id, self.licensee.id)
        self.assertEqual(template.created_by_id, self.licensee.id)

    def test_template_validation(self):
        response = self.client.post(
            '/api/service-templates/', {'template_name': 'Broken', 'template_data': {'cats': []}}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        bad_price = {'categories': [{'category_name': 'X', 'options': [{'option_name': 'Y', 'price': 'free'}]}]}
        response = self.client.post(
            '/api/service-templates/', {'template_name': 'Broken', 'template_data': bad_price}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_editor_cannot_create_template(self):
        self.client.authenticate_user(self.editor)
        response = self.client.post(
            '/api/service-templates/', {'template_name': 'Mine', 'template_data': TEMPLATE_DATA}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_apply_template_replaces_price_list(self):
        """Test applying a template swaps out the editor's existing categories"""
        old = TestDataFactory.create_service_category(self.editor, name='Legacy')
        TestDataFactory.create_service_option(old)
        template = ServiceTemplate.objects.create(
            licensee=self.licensee, template_name='Standard Rates', template_data=TEMPLATE_DATA
        )

        response = self.client.post(f'/api/service-templates/{template.id}/apply/{self.editor.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['category_name'] for c in response.data], ['Photo Editing', 'Floor Plans'])
        self.assertFalse(EditorServiceCategory.objects.filter(id=old.id).exists())

        twilight = EditorServiceOption.objects.get(category__editor=self.editor, option_name='Twilight')
        self.assertEqual(twilight.price, Decimal('12'))
        self.assertEqual(twilight.display_order, 1)
        plan = EditorServiceOption.objects.get(category__editor=self.editor, option_name='2D Plan')
        self.assertEqual(plan.currency, 'USD')
        self.assertTrue(EditorServiceChangeLog.objects.filter(editor=self.editor, change_type='template_applied').exists())

    def test_update_and_delete_template(self):
        template = ServiceTemplate.objects.create(
            licensee=self.licensee, template_name='Old Name', template_data=TEMPLATE_DATA
        )
        response = self.client.patch(
            f'/api/service-templates/{template.id}/', {'template_name': 'New Name'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['template_name'], 'New Name')

        response = self.client.delete(f'/api/service-templates/{template.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_list_templates_scoped(self):
        ServiceTemplate.objects.create(licensee=self.licensee, template_name='Mine', template_data=TEMPLATE_DATA)
        ServiceTemplate.objects.create(
            licensee=TestDataFactory.create_user(), template_name='Theirs', template_data=TEMPLATE_DATA
        )
        self.client.authenticate_user(self.editor)
        response = self.client.get('/api/service-templates/')
        self.assertEqual([t['template_name'] for t in response.data], ['Mine'])
