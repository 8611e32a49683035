import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='EditorServiceCategory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category_name', models.CharField(max_length=255)),
                ('display_order', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('editor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='service_categories', to=settings.AUTH_USER_MODEL)),
                ('licensee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='editor_service_categories', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'editor_service_categories',
                'ordering': ['display_order', 'id'],
                'verbose_name_plural': 'Editor service categories',
                'indexes': [
                    models.Index(fields=['editor', 'display_order'], name='svc_cat_editor_order_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='EditorServiceOption',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('option_name', models.CharField(max_length=255)),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('currency', models.CharField(default='AUD', max_length=3)),
                ('display_order', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='options', to='editor_services.editorservicecategory')),
            ],
            options={
                'db_table': 'editor_service_options',
                'ordering': ['display_order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='ServiceTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('template_name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('template_data', models.JSONField(default=dict)),
                ('is_default', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_templates', to=settings.AUTH_USER_MODEL)),
                ('licensee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='service_templates', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'service_templates',
                'ordering': ['-is_default', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='EditorServiceChangeLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('change_type', models.CharField(choices=[('category_added', 'Category Added'), ('category_updated', 'Category Updated'), ('category_deleted', 'Category Deleted'), ('option_added', 'Option Added'), ('option_updated', 'Option Updated'), ('option_deleted', 'Option Deleted'), ('template_applied', 'Template Applied')], max_length=20)),
                ('category_id', models.IntegerField(blank=True, null=True)),
                ('option_id', models.IntegerField(blank=True, null=True)),
                ('old_value', models.JSONField(blank=True, null=True)),
                ('new_value', models.JSONField(blank=True, null=True)),
                ('change_reason', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='service_changes_made', to=settings.AUTH_USER_MODEL)),
                ('editor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='service_change_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'editor_service_change_logs',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['editor', '-created_at'], name='svc_log_editor_created_idx'),
                ],
            },
        ),
    ]
