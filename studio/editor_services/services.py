"""
Editor price lists: categories, options, templates and the change history
written for every mutation.
"""
import logging
from decimal import Decimal

from django.db import transaction

from .models import EditorServiceCategory, EditorServiceOption, EditorServiceChangeLog

logger = logging.getLogger(__name__)


def log_change(editor, change_type, user=None, category_id=None, option_id=None,
               old_value=None, new_value=None, reason=''):
    return EditorServiceChangeLog.objects.create(
        editor=editor,
        change_type=change_type,
        category_id=category_id,
        option_id=option_id,
        old_value=old_value,
        new_value=new_value,
        changed_by=user,
        change_reason=reason,
    )


def _option_snapshot(option):
    return {'option_name': option.option_name, 'price': str(option.price), 'currency': option.currency}


def service_structure(editor):
    """Categories with their options, both in display order"""
    return EditorServiceCategory.objects.filter(editor=editor).prefetch_related('options')


@transaction.atomic
def create_category(editor, user, data):
    if 'display_order' not in data:
        data['display_order'] = EditorServiceCategory.objects.filter(editor=editor).count()
    category = EditorServiceCategory.objects.create(
        editor=editor, licensee_id=editor.get_licensee_id(), **data
    )
    log_change(
        editor, 'category_added', user, category_id=category.id,
        new_value={'category_name': category.category_name}, reason='New category created'
    )
    return category


@transaction.atomic
def update_category(category, user, data):
    old_value = {'category_name': category.category_name}
    for field, value in data.items():
        setattr(category, field, value)
    category.save()
    log_change(
        category.editor, 'category_updated', user, category_id=category.id,
        old_value=old_value, new_value={'category_name': category.category_name}, reason='Category updated'
    )
    return category


@transaction.atomic
def delete_category(category, user):
    editor, category_id = category.editor, category.id
    old_value = {'category_name': category.category_name}
    category.delete()
    log_change(editor, 'category_deleted', user, category_id=category_id, old_value=old_value,
               reason='Category deleted')


@transaction.atomic
def create_option(category, user, data):
    if 'display_order' not in data:
        data['display_order'] = category.options.count()
    option = EditorServiceOption.objects.create(category=category, **data)
    log_change(
        category.editor, 'option_added', user, category_id=category.id, option_id=option.id,
        new_value=_option_snapshot(option), reason='New option created'
    )
    return option


@transaction.atomic
def update_option(option, user, data):
    old_value = _option_snapshot(option)
    for field, value in data.items():
        setattr(option, field, value)
    option.save()
    log_change(
        option.category.editor, 'option_updated', user, category_id=option.category_id, option_id=option.id,
        old_value=old_value, new_value=_option_snapshot(option), reason='Option updated'
    )
    return option


@transaction.atomic
def delete_option(option, user):
    category, option_id = option.category, option.id
    old_value = _option_snapshot(option)
    option.delete()
    log_change(category.editor, 'option_deleted', user, category_id=category.id, option_id=option_id,
               old_value=old_value, reason='Option deleted')


@transaction.atomic
def reorder(queryset, ids):
    """display_order becomes each id's position in the list"""
    rows = {row.id: row for row in queryset.filter(id__in=ids)}
    for position, row_id in enumerate(ids):
        row = rows.get(row_id)
        if row is not None and row.display_order != position:
            row.display_order = position
            row.save(update_fields=['display_order', 'updated_at'])
    return len(rows)


@transaction.atomic
def apply_template(template, editor, user):
    """Replace the editor's categories and options with the template's"""
    EditorServiceCategory.objects.filter(editor=editor).delete()

    categories = (template.template_data or {}).get('categories', [])
    for index, category_data in enumerate(categories):
        category = EditorServiceCategory.objects.create(
            editor=editor,
            licensee_id=editor.get_licensee_id(),
            category_name=category_data['category_name'],
            display_order=category_data.get('display_order', index),
        )
        EditorServiceOption.objects.bulk_create([
            EditorServiceOption(
                category=category,
                option_name=option_data['option_name'],
                price=Decimal(str(option_data.get('price', '0'))),
                currency=option_data.get('currency') or 'AUD',
                display_order=option_data.get('display_order', option_index),
            )
            for option_index, option_data in enumerate(category_data.get('options', []))
        ])

    log_change(
        editor, 'template_applied', user,
        new_value={'template_name': template.template_name, 'template_id': template.id},
        reason=f'Applied template: {template.template_name}'
    )
    logger.info(f"Applied service template {template.id} to editor {editor.id}")
    return service_structure(editor)
